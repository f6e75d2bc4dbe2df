from __future__ import annotations

from dataclasses import dataclass

from contourz.models import MeetingStatus, TaskStatus
from contourz.services import activities, contacts
from contourz.supabase import SupabaseClient

MAX_RESULTS_PER_TYPE = 3


@dataclass
class DashboardStats:
    contacts: int = 0
    pending_tasks: int = 0
    upcoming_meetings: int = 0


@dataclass
class SearchResult:
    type: str
    id: str
    title: str
    subtitle: str = ""


def get_stats(client: SupabaseClient) -> DashboardStats:
    return DashboardStats(
        contacts=len(contacts.list_contacts(client)),
        pending_tasks=len(activities.list_tasks(client, status=TaskStatus.PENDING.value)),
        upcoming_meetings=len(activities.list_meetings(client, status=MeetingStatus.SCHEDULED.value)),
    )


def _contains(value: str, needle: str) -> bool:
    return needle in value.lower()


def search(client: SupabaseClient, query: str) -> list[SearchResult]:
    """Search contacts, tasks, meetings and transactions, a few hits of each."""
    if not query.strip():
        return []
    needle = query.lower()
    results: list[SearchResult] = []

    hits = [
        c
        for c in contacts.list_contacts(client)
        if _contains(c.name, needle) or _contains(c.email, needle) or query in c.phone
    ]
    results += [
        SearchResult("contact", c.id, c.name, c.designation or c.company_name or c.email)
        for c in hits[:MAX_RESULTS_PER_TYPE]
    ]

    tasks = [
        t
        for t in activities.list_tasks(client)
        if _contains(t.title, needle) or _contains(t.description, needle)
    ]
    results += [
        SearchResult("task", t.id, t.title, t.status.replace("_", " ") or "Task")
        for t in tasks[:MAX_RESULTS_PER_TYPE]
    ]

    meetings = [
        m
        for m in activities.list_meetings(client)
        if _contains(m.title, needle) or _contains(m.location, needle)
    ]
    results += [
        SearchResult("meeting", m.id, m.title, m.location or m.meeting_type.replace("_", " "))
        for m in meetings[:MAX_RESULTS_PER_TYPE]
    ]

    txs = [
        t
        for t in activities.list_transactions(client)
        if _contains(t.category, needle) or _contains(t.notes, needle)
    ]
    results += [
        SearchResult("transaction", t.id, f"{t.amount} {t.currency}", t.category or t.status)
        for t in txs[:MAX_RESULTS_PER_TYPE]
    ]
    return results
