from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from contourz.validation import parse_tag_input


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MeetingType(str, Enum):
    ONLINE = "online"
    IN_PERSON = "in_person"
    CALL = "call"


class MeetingStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class TagType(str, Enum):
    OFFER = "offer"
    WANT = "want"


def _str(node: dict, key: str) -> str:
    value = node.get(key)
    return "" if value is None else str(value)


def _coerce_tags(raw: Any) -> list[str]:
    """Backend tags arrive as a JSON list, a JSON-encoded list or a comma separated string."""
    if raw is None:
        return []
    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith("["):
            try:
                raw = json.loads(text)
            except ValueError:
                return parse_tag_input(text.strip("[]"))
        else:
            return parse_tag_input(text)
    if isinstance(raw, list):
        return [str(t).strip() for t in raw if str(t).strip()]
    return []


def _decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


@dataclass
class ContactRef:
    id: str = ""
    name: str = ""
    company_name: str = ""
    designation: str = ""

    @classmethod
    def from_node(cls, node: dict | None) -> ContactRef | None:
        if not node:
            return None
        return cls(
            id=_str(node, "id"),
            name=_str(node, "name"),
            company_name=_str(node, "company_name"),
            designation=_str(node, "designation"),
        )


@dataclass
class Contact:
    id: str = ""
    name: str = ""
    phone: str = ""
    email: str = ""
    designation: str = ""
    company_name: str = ""
    tags: list[str] = field(default_factory=list)
    notes: str = ""
    is_completed_profile: bool = False
    created_at: str = ""

    @classmethod
    def from_node(cls, node: dict) -> Contact:
        return cls(
            id=_str(node, "id"),
            name=_str(node, "name"),
            phone=_str(node, "phone"),
            email=_str(node, "email"),
            designation=_str(node, "designation"),
            company_name=_str(node, "company_name"),
            tags=_coerce_tags(node.get("tags")),
            notes=_str(node, "notes"),
            is_completed_profile=bool(node.get("is_completed_profile")),
            created_at=_str(node, "created_at"),
        )


@dataclass
class Task:
    id: str = ""
    contact_id: str = ""
    title: str = ""
    description: str = ""
    status: str = TaskStatus.PENDING.value
    priority: str = TaskPriority.MEDIUM.value
    due_date: str = ""
    reminder_at: str = ""
    completed_at: str = ""
    created_at: str = ""
    contact: ContactRef | None = None

    @classmethod
    def from_node(cls, node: dict) -> Task:
        contact = ContactRef.from_node(node.get("contact"))
        return cls(
            id=_str(node, "id"),
            contact_id=_str(node, "contact_id") or (contact.id if contact else ""),
            title=_str(node, "title"),
            description=_str(node, "description"),
            status=_str(node, "status") or TaskStatus.PENDING.value,
            priority=_str(node, "priority") or TaskPriority.MEDIUM.value,
            due_date=_str(node, "due_date"),
            reminder_at=_str(node, "reminder_at"),
            completed_at=_str(node, "completed_at"),
            created_at=_str(node, "created_at"),
            contact=contact,
        )


@dataclass
class Meeting:
    id: str = ""
    contact_id: str = ""
    title: str = ""
    meeting_type: str = MeetingType.ONLINE.value
    status: str = MeetingStatus.SCHEDULED.value
    scheduled_start: str = ""
    scheduled_end: str = ""
    location: str = ""
    notes: str = ""
    outcome: str = ""
    reminder_at: str = ""
    created_at: str = ""
    contact: ContactRef | None = None

    @classmethod
    def from_node(cls, node: dict) -> Meeting:
        contact = ContactRef.from_node(node.get("contact"))
        return cls(
            id=_str(node, "id"),
            contact_id=_str(node, "contact_id") or (contact.id if contact else ""),
            title=_str(node, "title"),
            meeting_type=_str(node, "meeting_type") or MeetingType.ONLINE.value,
            status=_str(node, "status") or MeetingStatus.SCHEDULED.value,
            scheduled_start=_str(node, "scheduled_start"),
            scheduled_end=_str(node, "scheduled_end"),
            location=_str(node, "location"),
            notes=_str(node, "notes"),
            outcome=_str(node, "outcome"),
            reminder_at=_str(node, "reminder_at"),
            created_at=_str(node, "created_at"),
            contact=contact,
        )


@dataclass
class Transaction:
    id: str = ""
    contact_id: str = ""
    amount: Decimal = Decimal("0")
    currency: str = "USD"
    category: str = ""
    status: str = TransactionStatus.PENDING.value
    transaction_date: str = ""
    reference_id: str = ""
    notes: str = ""
    created_at: str = ""
    contact: ContactRef | None = None

    @classmethod
    def from_node(cls, node: dict) -> Transaction:
        contact = ContactRef.from_node(node.get("contact"))
        return cls(
            id=_str(node, "id"),
            contact_id=_str(node, "contact_id") or (contact.id if contact else ""),
            amount=_decimal(node.get("amount")),
            currency=_str(node, "currency") or "USD",
            category=_str(node, "category"),
            status=_str(node, "status") or TransactionStatus.PENDING.value,
            transaction_date=_str(node, "transaction_date"),
            reference_id=_str(node, "reference_id"),
            notes=_str(node, "notes"),
            created_at=_str(node, "created_at"),
            contact=contact,
        )


@dataclass
class ContactDashboard:
    contact: Contact
    tasks: list[Task] = field(default_factory=list)
    meetings: list[Meeting] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)


@dataclass
class Tag:
    id: str = ""
    name: str = ""
    normalized_name: str = ""
    tag_type: str = TagType.OFFER.value
    usage_count: int = 0

    @classmethod
    def from_node(cls, node: dict) -> Tag:
        return cls(
            id=_str(node, "id"),
            name=_str(node, "name"),
            normalized_name=_str(node, "normalized_name"),
            tag_type=_str(node, "tag_type") or TagType.OFFER.value,
            usage_count=int(node.get("usage_count") or 0),
        )


@dataclass
class ProfileTag:
    id: str = ""
    profile_id: str = ""
    tag_id: str = ""
    tag: Tag = field(default_factory=Tag)

    @classmethod
    def from_node(cls, node: dict, profile_id: str = "") -> ProfileTag:
        tag = Tag.from_node(node.get("tags") or node.get("tag") or {})
        return cls(
            id=_str(node, "id"),
            profile_id=_str(node, "profile_id") or profile_id,
            tag_id=_str(node, "tag_id") or tag.id,
            tag=tag,
        )


@dataclass
class Profile:
    id: str = ""
    username: str | None = None
    display_name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    is_public: bool = True
    created_at: str = ""
    is_complete: bool = False
    tags: list[ProfileTag] = field(default_factory=list)

    @classmethod
    def from_node(cls, node: dict) -> Profile:
        profile_id = _str(node, "id")
        edges = (node.get("profile_tagsCollection") or {}).get("edges") or []
        return cls(
            id=profile_id,
            username=node.get("username"),
            display_name=node.get("display_name"),
            bio=node.get("bio"),
            avatar_url=node.get("avatar_url"),
            is_public=bool(node.get("is_public", True)),
            created_at=_str(node, "created_at"),
            is_complete=bool(node.get("is_complete")),
            tags=[ProfileTag.from_node(e["node"], profile_id) for e in edges],
        )

    @property
    def offers(self) -> list[Tag]:
        return [pt.tag for pt in self.tags if pt.tag.tag_type == TagType.OFFER.value]

    @property
    def wants(self) -> list[Tag]:
        return [pt.tag for pt in self.tags if pt.tag.tag_type == TagType.WANT.value]


@dataclass
class ProfileCompletionStatus:
    is_complete: bool = False
    completion_percentage: int = 0
    missing_fields: list[str] = field(default_factory=list)


@dataclass
class User:
    id: str = ""
    email: str = ""

    @classmethod
    def from_payload(cls, payload: dict | None) -> User | None:
        if not payload:
            return None
        return cls(id=_str(payload, "id"), email=_str(payload, "email"))


@dataclass
class Session:
    access_token: str = ""
    refresh_token: str = ""
    expires_at: int = 0
    user: User | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> Session:
        return cls(
            access_token=_str(payload, "access_token"),
            refresh_token=_str(payload, "refresh_token"),
            expires_at=int(payload.get("expires_at") or 0),
            user=User.from_payload(payload.get("user")),
        )

    def to_payload(self) -> dict:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
            "user": {"id": self.user.id, "email": self.user.email} if self.user else None,
        }
