from __future__ import annotations

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from contourz.errors import BackendError, ValidationError
from contourz.models import TransactionStatus
from contourz.routes.common import client, current_user, render
from contourz.services import activities as svc

router = APIRouter(prefix="/transactions", tags=["transactions"])

_STATUSES = [s.value for s in TransactionStatus]


def _form_page(request: Request, transaction_id, contact_id, form, errors, status_code=200):
    return render(
        request, "transactions/form.html",
        {
            "transaction_id": transaction_id,
            "contact_id": contact_id,
            "form": form,
            "errors": errors,
            "statuses": _STATUSES,
            "active": "transactions",
        },
        status_code=status_code,
    )


@router.get("", response_class=HTMLResponse)
async def list_transactions(request: Request, status: str = svc.ALL):
    current_user(request)
    txs = svc.list_transactions(client(request), status=status)
    return render(
        request, "transactions/list.html",
        {"transactions": txs, "status": status, "statuses": _STATUSES, "active": "transactions"},
    )


@router.get("/new", response_class=HTMLResponse)
async def new_transaction(request: Request, contact_id: str):
    current_user(request)
    return _form_page(request, None, contact_id, svc.TransactionForm(), {})


@router.post("")
async def create_transaction(
    request: Request,
    contact_id: str = Form(...),
    amount: str = Form(""),
    currency: str = Form("USD"),
    category: str = Form(""),
    status: str = Form(TransactionStatus.PENDING.value),
    transaction_date: str = Form(""),
    reference_id: str = Form(""),
    notes: str = Form(""),
):
    current_user(request)
    form = svc.TransactionForm(
        amount, currency, category, status, transaction_date or None, reference_id, notes
    )
    try:
        tx = svc.create_transaction(client(request), contact_id, form)
    except (ValidationError, BackendError) as exc:
        errors = exc.errors if isinstance(exc, ValidationError) else {"form": str(exc)}
        return _form_page(request, None, contact_id, form, errors, 422)
    return RedirectResponse(url=f"/transactions/{tx.id}", status_code=303)


@router.get("/{transaction_id}", response_class=HTMLResponse)
async def transaction_detail(request: Request, transaction_id: str):
    current_user(request)
    tx = svc.get_transaction(client(request), transaction_id)
    return render(request, "transactions/detail.html", {"tx": tx, "active": "transactions"})


@router.get("/{transaction_id}/edit", response_class=HTMLResponse)
async def edit_transaction(request: Request, transaction_id: str):
    current_user(request)
    tx = svc.get_transaction(client(request), transaction_id)
    form = svc.TransactionForm(
        str(tx.amount), tx.currency, tx.category, tx.status,
        tx.transaction_date or None, tx.reference_id, tx.notes,
    )
    return _form_page(request, transaction_id, tx.contact_id, form, {})


@router.post("/{transaction_id}/update")
async def update_transaction(
    request: Request,
    transaction_id: str,
    amount: str = Form(""),
    currency: str = Form("USD"),
    category: str = Form(""),
    status: str = Form(TransactionStatus.PENDING.value),
    transaction_date: str = Form(""),
    reference_id: str = Form(""),
    notes: str = Form(""),
):
    current_user(request)
    form = svc.TransactionForm(
        amount, currency, category, status, transaction_date or None, reference_id, notes
    )
    try:
        svc.update_transaction(client(request), transaction_id, form)
    except (ValidationError, BackendError) as exc:
        errors = exc.errors if isinstance(exc, ValidationError) else {"form": str(exc)}
        return _form_page(request, transaction_id, None, form, errors, 422)
    return RedirectResponse(url=f"/transactions/{transaction_id}", status_code=303)


@router.delete("/{transaction_id}")
async def delete_transaction(request: Request, transaction_id: str):
    current_user(request)
    svc.delete_transaction(client(request), transaction_id)
    return HTMLResponse(headers={"HX-Redirect": "/transactions"})
