from __future__ import annotations

import pytest

from contourz.mutations import CONTACT_COLUMNS, PROFILE_COLUMNS, update_mutation


def test_update_mutation_declares_only_given_columns():
    document, variables = update_mutation(
        "profiles", PROFILE_COLUMNS, "user-1", {"bio": "Hi", "is_public": False}, "id"
    )
    assert "updateprofilesCollection" in document
    assert "$bio: String" in document
    assert "$is_public: Boolean" in document
    assert "$username" not in document
    assert variables == {"id": "user-1", "bio": "Hi", "is_public": False}


def test_update_mutation_never_inlines_values():
    document, _ = update_mutation(
        "contacts", CONTACT_COLUMNS, "c1", {"name": 'Robert"); drop'}, "id"
    )
    assert "drop" not in document


def test_update_mutation_rejects_unknown_columns():
    with pytest.raises(ValueError, match="user_id"):
        update_mutation("contacts", CONTACT_COLUMNS, "c1", {"user_id": "x"}, "id")


def test_update_mutation_rejects_empty_values():
    with pytest.raises(ValueError):
        update_mutation("contacts", CONTACT_COLUMNS, "c1", {}, "id")
