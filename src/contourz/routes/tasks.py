from __future__ import annotations

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from contourz.errors import BackendError, ValidationError
from contourz.models import TaskPriority, TaskStatus
from contourz.routes.common import client, current_user, render
from contourz.services import activities as svc

router = APIRouter(prefix="/tasks", tags=["tasks"])

_CHOICES = {
    "priorities": [p.value for p in TaskPriority],
    "statuses": [s.value for s in TaskStatus],
}


def _form_page(request: Request, task_id, contact_id, form, errors, status_code=200):
    return render(
        request, "tasks/form.html",
        {
            "task_id": task_id,
            "contact_id": contact_id,
            "form": form,
            "errors": errors,
            "active": "tasks",
            **_CHOICES,
        },
        status_code=status_code,
    )


@router.get("", response_class=HTMLResponse)
async def list_tasks(request: Request, priority: str = svc.ALL, status: str = svc.ALL):
    current_user(request)
    tasks = svc.list_tasks(client(request), priority=priority, status=status)
    return render(
        request, "tasks/list.html",
        {"tasks": tasks, "priority": priority, "status": status, "active": "tasks", **_CHOICES},
    )


@router.get("/new", response_class=HTMLResponse)
async def new_task(request: Request, contact_id: str):
    current_user(request)
    return _form_page(request, None, contact_id, svc.TaskForm(), {})


@router.post("")
async def create_task(
    request: Request,
    contact_id: str = Form(...),
    title: str = Form(""),
    description: str = Form(""),
    priority: str = Form(TaskPriority.MEDIUM.value),
    status: str = Form(TaskStatus.PENDING.value),
    due_date: str = Form(""),
):
    current_user(request)
    form = svc.TaskForm(title, description, priority, status, due_date or None)
    try:
        task = svc.create_task(client(request), contact_id, form)
    except (ValidationError, BackendError) as exc:
        errors = exc.errors if isinstance(exc, ValidationError) else {"form": str(exc)}
        return _form_page(request, None, contact_id, form, errors, 422)
    return RedirectResponse(url=f"/tasks/{task.id}", status_code=303)


@router.get("/{task_id}", response_class=HTMLResponse)
async def task_detail(request: Request, task_id: str):
    current_user(request)
    task = svc.get_task(client(request), task_id)
    return render(request, "tasks/detail.html", {"task": task, "active": "tasks"})


@router.get("/{task_id}/edit", response_class=HTMLResponse)
async def edit_task(request: Request, task_id: str):
    current_user(request)
    task = svc.get_task(client(request), task_id)
    form = svc.TaskForm(task.title, task.description, task.priority, task.status, task.due_date or None)
    return _form_page(request, task_id, task.contact_id, form, {})


@router.post("/{task_id}/update")
async def update_task(
    request: Request,
    task_id: str,
    title: str = Form(""),
    description: str = Form(""),
    priority: str = Form(TaskPriority.MEDIUM.value),
    status: str = Form(TaskStatus.PENDING.value),
    due_date: str = Form(""),
):
    current_user(request)
    form = svc.TaskForm(title, description, priority, status, due_date or None)
    try:
        svc.update_task(client(request), task_id, form)
    except (ValidationError, BackendError) as exc:
        errors = exc.errors if isinstance(exc, ValidationError) else {"form": str(exc)}
        return _form_page(request, task_id, None, form, errors, 422)
    return RedirectResponse(url=f"/tasks/{task_id}", status_code=303)


@router.post("/{task_id}/complete")
async def complete_task(request: Request, task_id: str):
    current_user(request)
    svc.complete_task(client(request), task_id)
    return RedirectResponse(url=f"/tasks/{task_id}", status_code=303)


@router.delete("/{task_id}")
async def delete_task(request: Request, task_id: str):
    current_user(request)
    svc.delete_task(client(request), task_id)
    return HTMLResponse(headers={"HX-Redirect": "/tasks"})
