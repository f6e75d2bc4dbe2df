from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from contourz import mutations, queries
from contourz.errors import BackendError, NotFoundError, ValidationError
from contourz.graphql import (
    affected_count,
    collection_nodes,
    execute_graphql,
    first_record,
)
from contourz.models import (
    Contact,
    ContactDashboard,
    Meeting,
    ProfileCompletionStatus,
    Task,
    Transaction,
)
from contourz.supabase import SupabaseClient
from contourz.validation import is_valid_email, parse_tag_input, require

logger = logging.getLogger(__name__)

CONTACT_REQUIRED_FIELDS = ("name", "phone", "email", "designation", "company_name")


@dataclass
class ContactForm:
    name: str = ""
    phone: str = ""
    email: str = ""
    designation: str = ""
    company_name: str = ""
    tags: str = ""
    notes: str = ""

    @classmethod
    def from_contact(cls, contact: Contact) -> ContactForm:
        return cls(
            name=contact.name,
            phone=contact.phone,
            email=contact.email,
            designation=contact.designation,
            company_name=contact.company_name,
            tags=", ".join(contact.tags),
            notes=contact.notes,
        )


@dataclass
class ImportResult:
    succeeded: int = 0
    failed: int = 0


def validate_contact_form(form: ContactForm) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not form.name.strip():
        errors["name"] = "Name is required"
    if form.email.strip() and not is_valid_email(form.email):
        errors["email"] = "Invalid email address"
    return errors


def check_contact_completion(values: Contact | ContactForm) -> ProfileCompletionStatus:
    missing = [f for f in CONTACT_REQUIRED_FIELDS if not str(getattr(values, f) or "").strip()]
    filled = len(CONTACT_REQUIRED_FIELDS) - len(missing)
    return ProfileCompletionStatus(
        is_complete=not missing,
        completion_percentage=round(filled / len(CONTACT_REQUIRED_FIELDS) * 100),
        missing_fields=missing,
    )


def _form_variables(form: ContactForm) -> dict:
    return {
        "name": form.name.strip(),
        "phone": form.phone.strip() or None,
        "email": form.email.strip() or None,
        "designation": form.designation.strip() or None,
        "company_name": form.company_name.strip() or None,
        "tags": parse_tag_input(form.tags),
        "notes": form.notes.strip() or None,
        "is_completed_profile": check_contact_completion(form).is_complete,
    }


def list_contacts(client: SupabaseClient) -> list[Contact]:
    data = execute_graphql(client, queries.GET_CONTACTS)
    return [Contact.from_node(n) for n in collection_nodes(data, "contactsCollection")]


def get_contact_dashboard(client: SupabaseClient, contact_id: str) -> ContactDashboard:
    data = execute_graphql(client, queries.GET_CONTACT_DASHBOARD, {"id": contact_id})
    nodes = collection_nodes(data, "contactsCollection")
    if not nodes:
        raise NotFoundError("Contact not found")
    node = nodes[0]
    return ContactDashboard(
        contact=Contact.from_node(node),
        tasks=[Task.from_node(n) for n in collection_nodes(node, "tasksCollection")],
        meetings=[Meeting.from_node(n) for n in collection_nodes(node, "meetingsCollection")],
        transactions=[
            Transaction.from_node(n) for n in collection_nodes(node, "transactionsCollection")
        ],
    )


def get_contact(client: SupabaseClient, contact_id: str) -> Contact:
    return get_contact_dashboard(client, contact_id).contact


def create_contact(client: SupabaseClient, form: ContactForm) -> Contact:
    require(validate_contact_form(form))
    data = execute_graphql(client, mutations.CREATE_CONTACT, _form_variables(form))
    record = first_record(data, "insertIntocontactsCollection")
    if not record:
        raise BackendError("Failed to create contact")
    logger.info("Created contact %s", record.get("id"))
    return Contact.from_node(record)


def update_contact(client: SupabaseClient, contact_id: str, form: ContactForm) -> Contact:
    require(validate_contact_form(form))
    document, variables = mutations.update_mutation(
        "contacts",
        mutations.CONTACT_COLUMNS,
        contact_id,
        _form_variables(form),
        mutations.CONTACT_FIELDS,
    )
    data = execute_graphql(client, document, variables)
    record = first_record(data, "updatecontactsCollection")
    if not record:
        raise NotFoundError("Contact not found")
    return Contact.from_node(record)


def delete_contact(client: SupabaseClient, contact_id: str) -> None:
    """Delete a contact; its tasks, meetings and transactions cascade on the backend."""
    data = execute_graphql(client, mutations.DELETE_CONTACT, {"id": contact_id})
    if not affected_count(data, "deleteFromcontactsCollection"):
        raise NotFoundError("Contact not found")


def filter_contacts(contacts: list[Contact], query: str) -> list[Contact]:
    if not query.strip():
        return list(contacts)
    needle = query.lower()
    return [
        c
        for c in contacts
        if needle in c.name.lower()
        or needle in c.email.lower()
        or needle in c.company_name.lower()
    ]


def contact_subtitle(contact: Contact) -> str:
    if contact.designation and contact.company_name:
        return f"{contact.designation} at {contact.company_name}"
    return contact.designation or contact.company_name or contact.email or "No details"


def parse_import_csv(text: str) -> list[dict[str, str]]:
    """Rows of a CSV export with name/email/phone columns (header case is ignored)."""
    reader = csv.DictReader(io.StringIO(text))
    # extra fields past the header land under the None key as a list
    return [
        {k.strip().lower(): (v or "").strip() for k, v in row.items() if k is not None}
        for row in reader
    ]


def read_import_file(path: Path) -> list[dict[str, str]]:
    try:
        return parse_import_csv(path.read_text(encoding="utf-8-sig"))
    except (UnicodeDecodeError, csv.Error) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        raise ValidationError({"file": "Please use a UTF-8 CSV file."}) from exc


def import_contacts(client: SupabaseClient, rows: Iterable[dict[str, str]]) -> ImportResult:
    result = ImportResult()
    for row in rows:
        form = ContactForm(
            name=row.get("name") or "Unknown",
            email=row.get("email", ""),
            phone=row.get("phone", ""),
            company_name=row.get("company") or row.get("company_name", ""),
        )
        try:
            create_contact(client, form)
        except (BackendError, ValidationError) as exc:
            logger.warning("Import of %r failed: %s", form.name, exc)
            result.failed += 1
        else:
            result.succeeded += 1
    return result
