from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

import functools
import logging
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from contourz.auth import AuthService
from contourz.config import get_settings
from contourz.db import SessionStorage
from contourz.errors import CRMError, ValidationError
from contourz.models import MeetingType, TaskPriority, TaskStatus
from contourz.services import activities, contacts, dashboard
from contourz.services import profile as profiles
from contourz.services.tags import ProfileTagEditor, suggest_tags
from contourz.supabase import SupabaseClient

app = typer.Typer(help="Contourz - contacts, tasks, meetings and transactions")
contacts_app = typer.Typer(help="Manage contacts")
tasks_app = typer.Typer(help="Manage tasks")
meetings_app = typer.Typer(help="Manage meetings")
transactions_app = typer.Typer(help="Manage transactions")
profile_app = typer.Typer(help="Show and edit your profile")
tags_app = typer.Typer(help="Offer/want tags on your profile")
app.add_typer(contacts_app, name="contacts")
app.add_typer(tasks_app, name="tasks")
app.add_typer(meetings_app, name="meetings")
app.add_typer(transactions_app, name="transactions")
app.add_typer(profile_app, name="profile")
app.add_typer(tags_app, name="tags")

console = Console()


def get_auth() -> AuthService:
    """Build the backend client with the on-disk session and restore it."""
    settings = get_settings()
    client = SupabaseClient.from_settings(settings, SessionStorage(settings.db_path))
    service = AuthService(client)
    service.load()
    return service


def _signed_in() -> AuthService:
    service = get_auth()
    service.require_user()
    return service


def handle_errors(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ValidationError as exc:
            for field, message in exc.errors.items():
                console.print(f"[red]{field}: {message}[/red]")
            raise typer.Exit(1)
        except CRMError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(1)

    return wrapper


def _dash(value: object) -> str:
    return str(value) if value not in (None, "") else "-"


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """Start the Contourz web app."""
    import uvicorn

    uvicorn.run("contourz.web:create_app", host=host, port=port, reload=reload, factory=True)


# -- auth -------------------------------------------------------------------


@app.command()
@handle_errors
def login(
    email: str = typer.Option(..., prompt=True),
    password: str = typer.Option(..., prompt=True, hide_input=True),
) -> None:
    """Sign in and remember the session."""
    user = get_auth().sign_in(email, password)
    console.print(f"[green]Signed in as {user.email}[/green]")


@app.command()
@handle_errors
def signup(
    email: str = typer.Option(..., prompt=True),
    password: str = typer.Option(..., prompt=True, hide_input=True),
    confirm_password: str = typer.Option(..., prompt="Confirm password", hide_input=True),
) -> None:
    """Create an account."""
    service = get_auth()
    service.sign_up(email, password, confirm_password)
    if service.is_authenticated:
        console.print(f"[green]Account created. Signed in as {email}[/green]")
    else:
        console.print("We sent you a confirmation link. Please verify your email, then run [bold]contourz login[/bold].")


@app.command()
@handle_errors
def logout() -> None:
    """Sign out and forget the stored session."""
    get_auth().sign_out()
    console.print("Signed out.")


@app.command()
@handle_errors
def whoami() -> None:
    """Show the signed-in user."""
    service = get_auth()
    if not service.is_authenticated:
        console.print("[yellow]Not signed in.[/yellow]")
        raise typer.Exit(1)
    name = service.profile.display_name if service.profile else None
    console.print(f"{service.user.email}" + (f" ({name})" if name else ""))


@app.command()
@handle_errors
def home() -> None:
    """Show headline counts."""
    stats = dashboard.get_stats(_signed_in().client)
    console.print(f"[cyan]{stats.contacts}[/cyan] contacts")
    console.print(f"[yellow]{stats.pending_tasks}[/yellow] pending tasks")
    console.print(f"[magenta]{stats.upcoming_meetings}[/magenta] scheduled meetings")


@app.command()
@handle_errors
def search(query: str) -> None:
    """Search contacts, tasks, meetings and transactions."""
    results = dashboard.search(_signed_in().client, query)
    if not results:
        console.print(f'No results for "{query}"')
        return
    table = Table(title=f'Results for "{query}"')
    table.add_column("Type", style="magenta")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Details")
    for r in results:
        table.add_row(r.type, r.id, r.title, r.subtitle)
    console.print(table)


# -- contacts ---------------------------------------------------------------


@contacts_app.command("list")
@handle_errors
def contacts_list(query: str = typer.Option("", "--query", "-q", help="Filter by name, email or company")) -> None:
    rows = contacts.filter_contacts(contacts.list_contacts(_signed_in().client), query)
    if not rows:
        console.print("No contacts yet.")
        return
    table = Table(title="Contacts")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Details")
    table.add_column("Phone", style="yellow")
    table.add_column("Complete")
    for c in rows:
        table.add_row(
            c.id, c.name, contacts.contact_subtitle(c), _dash(c.phone),
            "yes" if c.is_completed_profile else "no",
        )
    console.print(table)


@contacts_app.command("show")
@handle_errors
def contacts_show(contact_id: str) -> None:
    """Show a contact with its tasks, meetings and transactions."""
    board = contacts.get_contact_dashboard(_signed_in().client, contact_id)
    c = board.contact
    completion = contacts.check_contact_completion(c)
    console.print(f"[bold cyan]{c.name}[/bold cyan]  {contacts.contact_subtitle(c)}")
    console.print(f"Phone: {_dash(c.phone)}  Email: {_dash(c.email)}")
    if c.tags:
        console.print("Tags: " + ", ".join(c.tags))
    console.print(f"Profile {completion.completion_percentage}% complete")

    table = Table(title="Activity")
    table.add_column("Kind", style="magenta")
    table.add_column("ID", style="dim")
    table.add_column("Summary", style="cyan")
    table.add_column("Status", style="yellow")
    for t in board.tasks:
        table.add_row("task", t.id, t.title, t.status)
    for m in board.meetings:
        table.add_row("meeting", m.id, m.title, m.status)
    for tx in board.transactions:
        table.add_row("transaction", tx.id, f"{tx.amount} {tx.currency}", tx.status)
    console.print(table)


def _contact_form(name, phone, email, designation, company, tags, notes, base=None):
    form = base or contacts.ContactForm()
    for field, value in (
        ("name", name), ("phone", phone), ("email", email), ("designation", designation),
        ("company_name", company), ("tags", tags), ("notes", notes),
    ):
        if value is not None:
            setattr(form, field, value)
    return form


@contacts_app.command("add")
@handle_errors
def contacts_add(
    name: str,
    phone: Optional[str] = typer.Option(None),
    email: Optional[str] = typer.Option(None),
    designation: Optional[str] = typer.Option(None),
    company: Optional[str] = typer.Option(None),
    tags: Optional[str] = typer.Option(None, help="Comma separated"),
    notes: Optional[str] = typer.Option(None),
) -> None:
    form = _contact_form(name, phone, email, designation, company, tags, notes)
    contact = contacts.create_contact(_signed_in().client, form)
    console.print(f"[green]Created contact {contact.name} ({contact.id})[/green]")


@contacts_app.command("edit")
@handle_errors
def contacts_edit(
    contact_id: str,
    name: Optional[str] = typer.Option(None),
    phone: Optional[str] = typer.Option(None),
    email: Optional[str] = typer.Option(None),
    designation: Optional[str] = typer.Option(None),
    company: Optional[str] = typer.Option(None),
    tags: Optional[str] = typer.Option(None, help="Comma separated"),
    notes: Optional[str] = typer.Option(None),
) -> None:
    client = _signed_in().client
    current = contacts.ContactForm.from_contact(contacts.get_contact(client, contact_id))
    form = _contact_form(name, phone, email, designation, company, tags, notes, base=current)
    contact = contacts.update_contact(client, contact_id, form)
    console.print(f"[green]Updated contact {contact.name}[/green]")


@contacts_app.command("delete")
@handle_errors
def contacts_delete(
    contact_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a contact and everything linked to it."""
    if not yes:
        typer.confirm("Delete this contact and all its tasks, meetings and transactions?", abort=True)
    contacts.delete_contact(_signed_in().client, contact_id)
    console.print("[green]Contact deleted.[/green]")


@contacts_app.command("import")
@handle_errors
def contacts_import(path: Path = typer.Argument(..., exists=True, dir_okay=False)) -> None:
    """Import contacts from a CSV file with name, email and phone columns."""
    rows = contacts.read_import_file(path)
    if not rows:
        console.print("[yellow]No contacts found in file.[/yellow]")
        raise typer.Exit(1)
    result = contacts.import_contacts(_signed_in().client, rows)
    console.print(f"[green]Successfully imported {result.succeeded} contact(s).[/green]")
    if result.failed:
        console.print(f"[red]Failed: {result.failed}[/red]")


# -- tasks ------------------------------------------------------------------


@tasks_app.command("list")
@handle_errors
def tasks_list(
    priority: str = typer.Option(activities.ALL, help="low, medium, high or all"),
    status: str = typer.Option(activities.ALL, help="pending, in_progress, completed or all"),
) -> None:
    rows = activities.list_tasks(_signed_in().client, priority=priority, status=status)
    if not rows:
        console.print("No tasks found.")
        return
    table = Table(title="Tasks")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Contact")
    table.add_column("Priority", style="magenta")
    table.add_column("Status", style="yellow")
    table.add_column("Due")
    for t in rows:
        table.add_row(
            t.id, t.title, t.contact.name if t.contact else "-", t.priority, t.status, _dash(t.due_date)
        )
    console.print(table)


@tasks_app.command("add")
@handle_errors
def tasks_add(
    contact_id: str,
    title: str,
    description: str = typer.Option(""),
    priority: str = typer.Option(TaskPriority.MEDIUM.value),
    due: Optional[str] = typer.Option(None, help="Due date, YYYY-MM-DD"),
) -> None:
    form = activities.TaskForm(title, description, priority, TaskStatus.PENDING.value, due)
    task = activities.create_task(_signed_in().client, contact_id, form)
    console.print(f"[green]Created task {task.title} ({task.id})[/green]")


@tasks_app.command("complete")
@handle_errors
def tasks_complete(task_id: str) -> None:
    task = activities.complete_task(_signed_in().client, task_id)
    console.print(f"[green]Completed {task.title}[/green]")


@tasks_app.command("delete")
@handle_errors
def tasks_delete(task_id: str) -> None:
    activities.delete_task(_signed_in().client, task_id)
    console.print("[green]Task deleted.[/green]")


# -- meetings ---------------------------------------------------------------


@meetings_app.command("list")
@handle_errors
def meetings_list(status: str = typer.Option(activities.ALL)) -> None:
    rows = activities.list_meetings(_signed_in().client, status=status)
    if not rows:
        console.print("No meetings found.")
        return
    table = Table(title="Meetings")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Contact")
    table.add_column("Type", style="magenta")
    table.add_column("Status", style="yellow")
    table.add_column("Starts")
    for m in rows:
        table.add_row(
            m.id, m.title, m.contact.name if m.contact else "-", m.meeting_type, m.status,
            _dash(m.scheduled_start),
        )
    console.print(table)


@meetings_app.command("add")
@handle_errors
def meetings_add(
    contact_id: str,
    title: str,
    meeting_type: str = typer.Option(MeetingType.ONLINE.value, "--type"),
    start: Optional[str] = typer.Option(None, help="ISO start time, defaults to now"),
    end: Optional[str] = typer.Option(None),
    location: str = typer.Option(""),
    notes: str = typer.Option(""),
) -> None:
    form = activities.MeetingForm(title, meeting_type, start, end, location, notes)
    meeting = activities.create_meeting(_signed_in().client, contact_id, form)
    console.print(f"[green]Scheduled {meeting.title} ({meeting.id})[/green]")


@meetings_app.command("delete")
@handle_errors
def meetings_delete(meeting_id: str) -> None:
    activities.delete_meeting(_signed_in().client, meeting_id)
    console.print("[green]Meeting deleted.[/green]")


# -- transactions -----------------------------------------------------------


@transactions_app.command("list")
@handle_errors
def transactions_list(status: str = typer.Option(activities.ALL)) -> None:
    rows = activities.list_transactions(_signed_in().client, status=status)
    if not rows:
        console.print("No transactions found.")
        return
    table = Table(title="Transactions")
    table.add_column("ID", style="dim")
    table.add_column("Amount", style="cyan", justify="right")
    table.add_column("Contact")
    table.add_column("Category")
    table.add_column("Status", style="yellow")
    for tx in rows:
        table.add_row(
            tx.id, f"{tx.amount} {tx.currency}", tx.contact.name if tx.contact else "-",
            _dash(tx.category), tx.status,
        )
    console.print(table)


@transactions_app.command("add")
@handle_errors
def transactions_add(
    contact_id: str,
    amount: str,
    currency: str = typer.Option("USD"),
    category: str = typer.Option(""),
    notes: str = typer.Option(""),
) -> None:
    form = activities.TransactionForm(amount=amount, currency=currency, category=category, notes=notes)
    tx = activities.create_transaction(_signed_in().client, contact_id, form)
    console.print(f"[green]Recorded {tx.amount} {tx.currency} ({tx.id})[/green]")


@transactions_app.command("delete")
@handle_errors
def transactions_delete(transaction_id: str) -> None:
    activities.delete_transaction(_signed_in().client, transaction_id)
    console.print("[green]Transaction deleted.[/green]")


# -- profile ----------------------------------------------------------------


@profile_app.command("show")
@handle_errors
def profile_show() -> None:
    service = _signed_in()
    p = service.profile
    completion = profiles.check_profile_completion(p)
    if p is None:
        console.print("[yellow]No profile yet. Run [bold]contourz profile edit[/bold].[/yellow]")
        return
    console.print(f"[bold cyan]{_dash(p.display_name)}[/bold cyan] @{_dash(p.username)}")
    console.print(_dash(p.bio))
    console.print("Offers: " + (", ".join(t.name for t in p.offers) or "-"))
    console.print("Wants: " + (", ".join(t.name for t in p.wants) or "-"))
    if not completion.is_complete:
        console.print(
            f"[yellow]Profile {completion.completion_percentage}% complete, missing "
            f"{', '.join(completion.missing_fields)}[/yellow]"
        )


@profile_app.command("edit")
@handle_errors
def profile_edit(
    username: Optional[str] = typer.Option(None),
    display_name: Optional[str] = typer.Option(None),
    bio: Optional[str] = typer.Option(None),
    public: Optional[bool] = typer.Option(None, "--public/--private"),
) -> None:
    service = _signed_in()
    form = profiles.ProfileForm.from_profile(service.profile)
    for field, value in (
        ("username", username), ("display_name", display_name), ("bio", bio), ("is_public", public),
    ):
        if value is not None:
            setattr(form, field, value)
    service.profile = profiles.save_profile(service.client, service.user.id, form, service.profile)
    console.print("[green]Profile saved.[/green]")


# -- tags -------------------------------------------------------------------


@tags_app.command("suggest")
@handle_errors
def tags_suggest(tag_type: str, query: str) -> None:
    """Find tags of type offer or want matching QUERY."""
    service = _signed_in()
    existing = [pt.tag_id for pt in service.profile.tags] if service.profile else []
    found = suggest_tags(service.client, tag_type, query, exclude=existing)
    if not found:
        console.print("No matching tags.")
        return
    table = Table(title=f"{tag_type} tags")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Used", justify="right")
    for t in found:
        table.add_row(t.id, t.name, str(t.usage_count))
    console.print(table)


def _editor(service: AuthService) -> ProfileTagEditor:
    if service.profile is None:
        console.print("[red]Profile not found[/red]")
        raise typer.Exit(1)
    return ProfileTagEditor(service.client, service.profile)


@tags_app.command("add")
@handle_errors
def tags_add(tag_type: str, query: str) -> None:
    """Attach the best matching tag of type offer or want."""
    service = _signed_in()
    editor = _editor(service)
    found = suggest_tags(service.client, tag_type, query)
    if not found:
        console.print("[yellow]No matching tags.[/yellow]")
        raise typer.Exit(1)
    tag = next((t for t in found if t.name.lower() == query.strip().lower()), found[0])
    if editor.add_tag(tag) is None:
        console.print(f"{tag.name} is already on your profile.")
    else:
        console.print(f"[green]Added {tag.name}[/green]")


@tags_app.command("remove")
@handle_errors
def tags_remove(name: str) -> None:
    service = _signed_in()
    editor = _editor(service)
    match = next((pt for pt in service.profile.tags if pt.tag.name.lower() == name.lower()), None)
    if match is None or not editor.remove_tag(match.tag):
        console.print(f"{name} is not on your profile.")
        return
    console.print(f"[green]Removed {name}[/green]")
