from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any

from contourz import mutations, queries
from contourz.errors import BackendError, NotFoundError
from contourz.graphql import collection_nodes, execute_graphql, first_record
from contourz.models import Profile, ProfileCompletionStatus
from contourz.supabase import SupabaseClient
from contourz.validation import require, validate_profile_form

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("username", "display_name", "bio")


@dataclass
class ProfileForm:
    username: str = ""
    display_name: str = ""
    bio: str = ""
    is_public: bool = True

    @classmethod
    def from_profile(cls, profile: Profile | None) -> ProfileForm:
        if profile is None:
            return cls()
        return cls(
            username=profile.username or "",
            display_name=profile.display_name or "",
            bio=profile.bio or "",
            is_public=profile.is_public,
        )


def get_profile(client: SupabaseClient, user_id: str) -> Profile:
    data = execute_graphql(client, queries.GET_PROFILE, {"userId": user_id})
    nodes = collection_nodes(data, "profilesCollection")
    if not nodes:
        raise NotFoundError("Profile not found")
    return Profile.from_node(nodes[0])


def create_profile(
    client: SupabaseClient,
    user_id: str,
    username: str | None = None,
    email: str | None = None,
    display_name: str | None = None,
) -> Profile:
    """Create the initial profile for a new user, deriving defaults from the email."""
    local_part = email.split("@")[0] if email else ""
    username = username or local_part or f"user_{random.randint(0, 9999)}"
    display_name = display_name or local_part or "User"

    data = execute_graphql(
        client,
        mutations.CREATE_PROFILE,
        {"userId": user_id, "username": username, "displayName": display_name},
    )
    record = first_record(data, "insertIntoprofilesCollection")
    if not record:
        raise BackendError("Failed to create profile")
    logger.info("Created profile for user %s", user_id)
    return Profile.from_node(record)


def update_profile(client: SupabaseClient, user_id: str, updates: dict[str, Any]) -> Profile:
    document, variables = mutations.update_mutation(
        "profiles", mutations.PROFILE_COLUMNS, user_id, updates, mutations.PROFILE_FIELDS
    )
    data = execute_graphql(client, document, variables)
    record = first_record(data, "updateprofilesCollection")
    if not record:
        raise BackendError("Failed to update profile")
    return Profile.from_node(record)


def check_profile_completion(profile: Profile | None) -> ProfileCompletionStatus:
    if profile is None:
        return ProfileCompletionStatus(
            is_complete=False, completion_percentage=0, missing_fields=list(REQUIRED_FIELDS)
        )

    missing = []
    for name in REQUIRED_FIELDS:
        value = getattr(profile, name)
        if not (isinstance(value, str) and value.strip()):
            missing.append(name)
    filled = len(REQUIRED_FIELDS) - len(missing)
    return ProfileCompletionStatus(
        is_complete=not missing,
        completion_percentage=round(filled / len(REQUIRED_FIELDS) * 100),
        missing_fields=missing,
    )


def mark_profile_complete(client: SupabaseClient, user_id: str) -> Profile:
    return update_profile(client, user_id, {"is_complete": True})


def save_profile(
    client: SupabaseClient, user_id: str, form: ProfileForm, existing: Profile | None = None
) -> Profile:
    """Validate and store the profile form, creating the profile first if needed.

    The profile is flagged complete only once every required field is filled.
    """
    require(validate_profile_form(form.username, form.display_name))

    if existing is None:
        existing = create_profile(
            client,
            user_id,
            username=form.username.strip(),
            display_name=form.display_name.strip(),
        )

    updated = update_profile(
        client,
        user_id,
        {
            "username": form.username.strip(),
            "display_name": form.display_name.strip(),
            "bio": form.bio.strip(),
            "is_public": form.is_public,
        },
    )
    if check_profile_completion(updated).is_complete and not updated.is_complete:
        updated = mark_profile_complete(client, user_id)
    updated.tags = existing.tags
    return updated
