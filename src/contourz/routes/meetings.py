from __future__ import annotations

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from contourz.errors import BackendError, ValidationError
from contourz.models import MeetingStatus, MeetingType
from contourz.routes.common import client, current_user, render
from contourz.services import activities as svc

router = APIRouter(prefix="/meetings", tags=["meetings"])

_CHOICES = {
    "meeting_types": [t.value for t in MeetingType],
    "statuses": [s.value for s in MeetingStatus],
}


def _form_page(request: Request, meeting_id, contact_id, form, errors, status_code=200):
    return render(
        request, "meetings/form.html",
        {
            "meeting_id": meeting_id,
            "contact_id": contact_id,
            "form": form,
            "errors": errors,
            "active": "meetings",
            **_CHOICES,
        },
        status_code=status_code,
    )


@router.get("", response_class=HTMLResponse)
async def list_meetings(request: Request, status: str = svc.ALL):
    current_user(request)
    meetings = svc.list_meetings(client(request), status=status)
    return render(
        request, "meetings/list.html",
        {"meetings": meetings, "status": status, "active": "meetings", **_CHOICES},
    )


@router.get("/new", response_class=HTMLResponse)
async def new_meeting(request: Request, contact_id: str):
    current_user(request)
    return _form_page(request, None, contact_id, svc.MeetingForm(), {})


@router.post("")
async def create_meeting(
    request: Request,
    contact_id: str = Form(...),
    title: str = Form(""),
    meeting_type: str = Form(MeetingType.ONLINE.value),
    scheduled_start: str = Form(""),
    scheduled_end: str = Form(""),
    location: str = Form(""),
    notes: str = Form(""),
):
    current_user(request)
    form = svc.MeetingForm(
        title=title,
        meeting_type=meeting_type,
        scheduled_start=scheduled_start or None,
        scheduled_end=scheduled_end or None,
        location=location,
        notes=notes,
    )
    try:
        meeting = svc.create_meeting(client(request), contact_id, form)
    except (ValidationError, BackendError) as exc:
        errors = exc.errors if isinstance(exc, ValidationError) else {"form": str(exc)}
        return _form_page(request, None, contact_id, form, errors, 422)
    return RedirectResponse(url=f"/meetings/{meeting.id}", status_code=303)


@router.get("/{meeting_id}", response_class=HTMLResponse)
async def meeting_detail(request: Request, meeting_id: str):
    current_user(request)
    meeting = svc.get_meeting(client(request), meeting_id)
    return render(request, "meetings/detail.html", {"meeting": meeting, "active": "meetings"})


@router.get("/{meeting_id}/edit", response_class=HTMLResponse)
async def edit_meeting(request: Request, meeting_id: str):
    current_user(request)
    m = svc.get_meeting(client(request), meeting_id)
    form = svc.MeetingForm(
        title=m.title,
        meeting_type=m.meeting_type,
        scheduled_start=m.scheduled_start or None,
        scheduled_end=m.scheduled_end or None,
        location=m.location,
        notes=m.notes,
        status=m.status,
        outcome=m.outcome,
    )
    return _form_page(request, meeting_id, m.contact_id, form, {})


@router.post("/{meeting_id}/update")
async def update_meeting(
    request: Request,
    meeting_id: str,
    title: str = Form(""),
    meeting_type: str = Form(MeetingType.ONLINE.value),
    scheduled_start: str = Form(""),
    scheduled_end: str = Form(""),
    location: str = Form(""),
    notes: str = Form(""),
    status: str = Form(MeetingStatus.SCHEDULED.value),
    outcome: str = Form(""),
):
    current_user(request)
    form = svc.MeetingForm(
        title=title,
        meeting_type=meeting_type,
        scheduled_start=scheduled_start or None,
        scheduled_end=scheduled_end or None,
        location=location,
        notes=notes,
        status=status,
        outcome=outcome,
    )
    try:
        svc.update_meeting(client(request), meeting_id, form)
    except (ValidationError, BackendError) as exc:
        errors = exc.errors if isinstance(exc, ValidationError) else {"form": str(exc)}
        return _form_page(request, meeting_id, None, form, errors, 422)
    return RedirectResponse(url=f"/meetings/{meeting_id}", status_code=303)


@router.delete("/{meeting_id}")
async def delete_meeting(request: Request, meeting_id: str):
    current_user(request)
    svc.delete_meeting(client(request), meeting_id)
    return HTMLResponse(headers={"HX-Redirect": "/meetings"})
