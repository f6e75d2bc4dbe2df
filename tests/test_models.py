from __future__ import annotations

from decimal import Decimal

import pytest

from contourz.models import Contact, Profile, Session, Task, Transaction, User

from conftest import PROFILE_NODE, edges


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, []),
        (["vip", " client "], ["vip", "client"]),
        ('["vip", "client"]', ["vip", "client"]),
        ("vip, client", ["vip", "client"]),
        ("[vip, client", ["vip", "client"]),
    ],
)
def test_contact_tags_are_normalised(raw, expected):
    contact = Contact.from_node({"id": "c1", "name": "Ann", "tags": raw})
    assert contact.tags == expected


def test_contact_nulls_become_empty_strings():
    contact = Contact.from_node({"id": "c1", "name": "Ann", "email": None})
    assert contact.email == ""
    assert contact.is_completed_profile is False


def test_task_takes_contact_id_from_embedded_contact():
    task = Task.from_node({"id": "t1", "title": "Call", "contact": {"id": "c1", "name": "Ann"}})
    assert task.contact_id == "c1"
    assert task.contact.name == "Ann"
    assert task.priority == "medium"
    assert task.status == "pending"


def test_transaction_defaults():
    tx = Transaction.from_node({"id": "x1", "amount": "19.99", "currency": None})
    assert tx.amount == Decimal("19.99")
    assert tx.currency == "USD"
    assert tx.contact is None


def test_profile_splits_offers_and_wants():
    node = {
        **PROFILE_NODE,
        "profile_tagsCollection": edges(
            {"id": "pt-1", "tags": {"id": "t1", "name": "Design", "tag_type": "offer"}},
            {"id": "pt-2", "tags": {"id": "t2", "name": "Funding", "tag_type": "want"}},
        ),
    }
    profile = Profile.from_node(node)
    assert [t.name for t in profile.offers] == ["Design"]
    assert [t.name for t in profile.wants] == ["Funding"]
    assert all(pt.profile_id == "user-1" for pt in profile.tags)
    assert profile.tags[1].tag_id == "t2"


def test_session_payload_roundtrip():
    session = Session(
        access_token="a", refresh_token="r", expires_at=100, user=User(id="u1", email="e@x.io")
    )
    assert Session.from_payload(session.to_payload()) == session
