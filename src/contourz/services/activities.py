"""Tasks, meetings and transactions. Each one belongs to exactly one contact."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from contourz import mutations, queries
from contourz.errors import BackendError, NotFoundError, ValidationError
from contourz.graphql import affected_count, collection_nodes, execute_graphql, first_record
from contourz.models import (
    Meeting,
    MeetingStatus,
    MeetingType,
    Task,
    TaskPriority,
    TaskStatus,
    Transaction,
    TransactionStatus,
)
from contourz.supabase import SupabaseClient
from contourz.validation import parse_amount, require

logger = logging.getLogger(__name__)

ALL = "all"

TASK_FIELDS = """
      id
      title
      description
      status
      priority
      due_date
      completed_at
"""

MEETING_FIELDS = """
      id
      title
      meeting_type
      status
      scheduled_start
      scheduled_end
      location
      outcome
      notes
"""

TRANSACTION_FIELDS = """
      id
      amount
      currency
      category
      status
      transaction_date
      notes
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_choice(errors: dict[str, str], field: str, value: str | None, enum: type[Enum]) -> None:
    if value is None:
        return
    allowed = [m.value for m in enum]
    if value not in allowed:
        errors[field] = f"{field.replace('_', ' ').capitalize()} must be one of: {', '.join(allowed)}"


def _blank_to_none(values: dict[str, Any]) -> dict[str, Any]:
    return {k: (v.strip() or None) if isinstance(v, str) else v for k, v in values.items()}


def _update(client: SupabaseClient, table: str, columns: dict, record_id: str,
            values: dict, returning: str) -> dict:
    document, variables = mutations.update_mutation(table, columns, record_id, values, returning)
    data = execute_graphql(client, document, variables)
    record = first_record(data, f"update{table}Collection")
    if not record:
        raise NotFoundError(f"{table[:-1].capitalize()} not found")
    return record


def _delete(client: SupabaseClient, document: str, table: str, record_id: str) -> None:
    data = execute_graphql(client, document, {"id": record_id})
    if not affected_count(data, f"deleteFrom{table}Collection"):
        raise NotFoundError(f"{table[:-1].capitalize()} not found")


def _single(client: SupabaseClient, document: str, table: str, record_id: str) -> dict:
    data = execute_graphql(client, document, {"id": record_id})
    nodes = collection_nodes(data, f"{table}Collection")
    if not nodes:
        raise NotFoundError(f"{table[:-1].capitalize()} not found")
    return nodes[0]


# -- tasks ------------------------------------------------------------------


@dataclass
class TaskForm:
    title: str = ""
    description: str = ""
    priority: str = TaskPriority.MEDIUM.value
    status: str = TaskStatus.PENDING.value
    due_date: str | None = None


def validate_task_form(form: TaskForm) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not form.title.strip():
        errors["title"] = "Title is required"
    _check_choice(errors, "priority", form.priority, TaskPriority)
    _check_choice(errors, "status", form.status, TaskStatus)
    return errors


def filter_tasks(tasks: list[Task], priority: str = ALL, status: str = ALL) -> list[Task]:
    return [
        t
        for t in tasks
        if (priority == ALL or t.priority == priority) and (status == ALL or t.status == status)
    ]


def list_tasks(client: SupabaseClient, priority: str = ALL, status: str = ALL) -> list[Task]:
    data = execute_graphql(client, queries.GET_ALL_TASKS)
    tasks = [Task.from_node(n) for n in collection_nodes(data, "tasksCollection")]
    return filter_tasks(tasks, priority, status)


def get_task(client: SupabaseClient, task_id: str) -> Task:
    return Task.from_node(_single(client, queries.GET_TASK_DETAILS, "tasks", task_id))


def create_task(client: SupabaseClient, contact_id: str, form: TaskForm) -> Task:
    require(validate_task_form(form))
    variables = _blank_to_none({
        "contact_id": contact_id,
        "title": form.title,
        "description": form.description,
        "priority": form.priority,
        "status": form.status,
        "due_date": form.due_date,
    })
    data = execute_graphql(client, mutations.CREATE_TASK, variables)
    record = first_record(data, "insertIntotasksCollection")
    if not record:
        raise BackendError("Failed to create task")
    logger.info("Created task %s for contact %s", record.get("id"), contact_id)
    return Task.from_node(record)


def update_task(client: SupabaseClient, task_id: str, form: TaskForm) -> Task:
    require(validate_task_form(form))
    values = _blank_to_none({
        "title": form.title,
        "description": form.description,
        "priority": form.priority,
        "status": form.status,
        "due_date": form.due_date,
    })
    if form.status == TaskStatus.COMPLETED.value:
        current = get_task(client, task_id)
        if current.status != TaskStatus.COMPLETED.value:
            values["completed_at"] = _now()
    record = _update(client, "tasks", mutations.TASK_COLUMNS, task_id, values, TASK_FIELDS)
    return Task.from_node(record)


def complete_task(client: SupabaseClient, task_id: str) -> Task:
    values = {"status": TaskStatus.COMPLETED.value, "completed_at": _now()}
    record = _update(client, "tasks", mutations.TASK_COLUMNS, task_id, values, TASK_FIELDS)
    return Task.from_node(record)


def delete_task(client: SupabaseClient, task_id: str) -> None:
    _delete(client, mutations.DELETE_TASK, "tasks", task_id)


# -- meetings ---------------------------------------------------------------


@dataclass
class MeetingForm:
    title: str = ""
    meeting_type: str = MeetingType.ONLINE.value
    scheduled_start: str | None = None
    scheduled_end: str | None = None
    location: str = ""
    notes: str = ""
    status: str | None = None
    outcome: str | None = None


def validate_meeting_form(form: MeetingForm) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not form.title.strip():
        errors["title"] = "Title is required"
    _check_choice(errors, "meeting_type", form.meeting_type, MeetingType)
    _check_choice(errors, "status", form.status, MeetingStatus)
    return errors


def list_meetings(client: SupabaseClient, status: str = ALL) -> list[Meeting]:
    data = execute_graphql(client, queries.GET_ALL_MEETINGS)
    meetings = [Meeting.from_node(n) for n in collection_nodes(data, "meetingsCollection")]
    return [m for m in meetings if status == ALL or m.status == status]


def get_meeting(client: SupabaseClient, meeting_id: str) -> Meeting:
    return Meeting.from_node(_single(client, queries.GET_MEETING_DETAILS, "meetings", meeting_id))


def create_meeting(client: SupabaseClient, contact_id: str, form: MeetingForm) -> Meeting:
    """Schedule a meeting. New meetings always start out ``scheduled``."""
    require(validate_meeting_form(form))
    variables = _blank_to_none({
        "contact_id": contact_id,
        "title": form.title,
        "meeting_type": form.meeting_type,
        "scheduled_start": form.scheduled_start or _now(),
        "scheduled_end": form.scheduled_end,
        "location": form.location,
        "notes": form.notes,
    })
    data = execute_graphql(client, mutations.CREATE_MEETING, variables)
    record = first_record(data, "insertIntomeetingsCollection")
    if not record:
        raise BackendError("Failed to create meeting")
    logger.info("Created meeting %s for contact %s", record.get("id"), contact_id)
    return Meeting.from_node(record)


def update_meeting(client: SupabaseClient, meeting_id: str, form: MeetingForm) -> Meeting:
    require(validate_meeting_form(form))
    values = _blank_to_none({
        "title": form.title,
        "meeting_type": form.meeting_type,
        "location": form.location,
        "notes": form.notes,
    })
    for key in ("scheduled_start", "scheduled_end", "status", "outcome"):
        value = getattr(form, key)
        if value is not None:
            values[key] = value.strip() or None
    record = _update(client, "meetings", mutations.MEETING_COLUMNS, meeting_id, values, MEETING_FIELDS)
    return Meeting.from_node(record)


def delete_meeting(client: SupabaseClient, meeting_id: str) -> None:
    _delete(client, mutations.DELETE_MEETING, "meetings", meeting_id)


# -- transactions -----------------------------------------------------------


@dataclass
class TransactionForm:
    amount: str = ""
    currency: str = "USD"
    category: str = ""
    status: str = TransactionStatus.PENDING.value
    transaction_date: str | None = None
    reference_id: str = ""
    notes: str = ""


def validate_transaction_form(form: TransactionForm) -> dict[str, str]:
    errors: dict[str, str] = {}
    try:
        parse_amount(form.amount)
    except ValidationError:
        errors["amount"] = "Valid amount is required"
    if not form.currency.strip():
        errors["currency"] = "Currency is required"
    _check_choice(errors, "status", form.status, TransactionStatus)
    return errors


def _amount_variable(amount: Decimal) -> str:
    # BigFloat travels as a string so no precision is lost
    return str(amount)


def list_transactions(client: SupabaseClient, status: str = ALL) -> list[Transaction]:
    data = execute_graphql(client, queries.GET_ALL_TRANSACTIONS)
    txs = [Transaction.from_node(n) for n in collection_nodes(data, "transactionsCollection")]
    return [t for t in txs if status == ALL or t.status == status]


def get_transaction(client: SupabaseClient, transaction_id: str) -> Transaction:
    node = _single(client, queries.GET_TRANSACTION_DETAILS, "transactions", transaction_id)
    return Transaction.from_node(node)


def create_transaction(client: SupabaseClient, contact_id: str, form: TransactionForm) -> Transaction:
    require(validate_transaction_form(form))
    variables = _blank_to_none({
        "contact_id": contact_id,
        "amount": _amount_variable(parse_amount(form.amount)),
        "currency": form.currency.upper(),
        "category": form.category,
        "status": form.status,
        "transaction_date": form.transaction_date or _now(),
        "reference_id": form.reference_id,
        "notes": form.notes,
    })
    data = execute_graphql(client, mutations.CREATE_TRANSACTION, variables)
    record = first_record(data, "insertIntotransactionsCollection")
    if not record:
        raise BackendError("Failed to create transaction")
    logger.info("Created transaction %s for contact %s", record.get("id"), contact_id)
    return Transaction.from_node(record)


def update_transaction(client: SupabaseClient, transaction_id: str, form: TransactionForm) -> Transaction:
    require(validate_transaction_form(form))
    values = _blank_to_none({
        "amount": _amount_variable(parse_amount(form.amount)),
        "currency": form.currency.upper(),
        "category": form.category,
        "status": form.status,
        "reference_id": form.reference_id,
        "notes": form.notes,
    })
    if form.transaction_date:
        values["transaction_date"] = form.transaction_date
    record = _update(
        client, "transactions", mutations.TRANSACTION_COLUMNS, transaction_id, values,
        TRANSACTION_FIELDS,
    )
    return Transaction.from_node(record)


def delete_transaction(client: SupabaseClient, transaction_id: str) -> None:
    _delete(client, mutations.DELETE_TRANSACTION, "transactions", transaction_id)
