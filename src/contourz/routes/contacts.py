from __future__ import annotations

import csv

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse

from contourz.errors import BackendError, ValidationError
from contourz.routes.common import client, current_user, render
from contourz.services import contacts as svc

_MAX_IMPORT_SIZE = 1024 * 1024  # 1 MB

router = APIRouter(prefix="/contacts", tags=["contacts"])


def _form(name, phone, email, designation, company_name, tags, notes) -> svc.ContactForm:
    return svc.ContactForm(
        name=name, phone=phone, email=email, designation=designation,
        company_name=company_name, tags=tags, notes=notes,
    )


@router.get("", response_class=HTMLResponse)
async def list_contacts(request: Request, q: str = ""):
    current_user(request)
    rows = svc.filter_contacts(svc.list_contacts(client(request)), q)
    return render(
        request,
        "contacts/list.html",
        {"contacts": rows, "q": q, "subtitle": svc.contact_subtitle, "active": "contacts"},
    )


@router.get("/new", response_class=HTMLResponse)
async def new_contact(request: Request):
    current_user(request)
    return render(
        request, "contacts/form.html",
        {"contact_id": None, "form": svc.ContactForm(), "errors": {}, "active": "contacts"},
    )


@router.post("")
async def create_contact(
    request: Request,
    name: str = Form(""),
    phone: str = Form(""),
    email: str = Form(""),
    designation: str = Form(""),
    company_name: str = Form(""),
    tags: str = Form(""),
    notes: str = Form(""),
):
    current_user(request)
    form = _form(name, phone, email, designation, company_name, tags, notes)
    try:
        contact = svc.create_contact(client(request), form)
    except (ValidationError, BackendError) as exc:
        errors = exc.errors if isinstance(exc, ValidationError) else {"form": str(exc)}
        return render(
            request, "contacts/form.html",
            {"contact_id": None, "form": form, "errors": errors, "active": "contacts"},
            status_code=422,
        )
    return RedirectResponse(url=f"/contacts/{contact.id}", status_code=303)


@router.get("/import", response_class=HTMLResponse)
async def import_form(request: Request):
    current_user(request)
    return render(request, "contacts/import.html", {"result": None, "error": "", "active": "contacts"})


@router.post("/import", response_class=HTMLResponse)
async def import_contacts(request: Request, file: UploadFile = File(...)):
    current_user(request)
    raw = await file.read()
    if len(raw) > _MAX_IMPORT_SIZE:
        return render(
            request, "contacts/import.html",
            {"result": None, "error": "File too large. Maximum size is 1 MB.", "active": "contacts"},
            status_code=422,
        )
    try:
        rows = svc.parse_import_csv(raw.decode("utf-8-sig"))
    except (UnicodeDecodeError, csv.Error):
        return render(
            request, "contacts/import.html",
            {"result": None, "error": "Please upload a UTF-8 CSV file.", "active": "contacts"},
            status_code=422,
        )
    if not rows:
        return render(
            request, "contacts/import.html",
            {"result": None, "error": "Please select at least one contact to import.", "active": "contacts"},
            status_code=422,
        )
    result = svc.import_contacts(client(request), rows)
    return render(request, "contacts/import.html", {"result": result, "error": "", "active": "contacts"})


@router.get("/{contact_id}", response_class=HTMLResponse)
async def contact_detail(request: Request, contact_id: str):
    current_user(request)
    dashboard = svc.get_contact_dashboard(client(request), contact_id)
    return render(
        request,
        "contacts/detail.html",
        {
            "contact": dashboard.contact,
            "tasks": dashboard.tasks,
            "meetings": dashboard.meetings,
            "transactions": dashboard.transactions,
            "completion": svc.check_contact_completion(dashboard.contact),
            "subtitle": svc.contact_subtitle(dashboard.contact),
            "active": "contacts",
        },
    )


@router.get("/{contact_id}/edit", response_class=HTMLResponse)
async def edit_contact(request: Request, contact_id: str):
    current_user(request)
    contact = svc.get_contact(client(request), contact_id)
    return render(
        request, "contacts/form.html",
        {
            "contact_id": contact_id,
            "form": svc.ContactForm.from_contact(contact),
            "errors": {},
            "active": "contacts",
        },
    )


@router.post("/{contact_id}/update")
async def update_contact(
    request: Request,
    contact_id: str,
    name: str = Form(""),
    phone: str = Form(""),
    email: str = Form(""),
    designation: str = Form(""),
    company_name: str = Form(""),
    tags: str = Form(""),
    notes: str = Form(""),
):
    current_user(request)
    form = _form(name, phone, email, designation, company_name, tags, notes)
    try:
        svc.update_contact(client(request), contact_id, form)
    except (ValidationError, BackendError) as exc:
        errors = exc.errors if isinstance(exc, ValidationError) else {"form": str(exc)}
        return render(
            request, "contacts/form.html",
            {"contact_id": contact_id, "form": form, "errors": errors, "active": "contacts"},
            status_code=422,
        )
    return RedirectResponse(url=f"/contacts/{contact_id}", status_code=303)


@router.delete("/{contact_id}")
async def delete_contact(request: Request, contact_id: str):
    current_user(request)
    svc.delete_contact(client(request), contact_id)
    return HTMLResponse(headers={"HX-Redirect": "/contacts"})
