"""Profile offer/want tags.

Tags are system controlled: users can only attach existing tags to their
profile or detach them. Creating, renaming or deleting tags is not possible
from the client.
"""
from __future__ import annotations

import logging
import uuid
from typing import Iterable

from contourz import mutations, queries
from contourz.errors import BackendError, ValidationError
from contourz.graphql import collection_nodes, execute_graphql, first_record
from contourz.models import Profile, ProfileTag, Tag, TagType
from contourz.supabase import SupabaseClient

logger = logging.getLogger(__name__)

TEMP_ID_PREFIX = "temp-"


def suggest_tags(
    client: SupabaseClient, tag_type: str, query: str, exclude: Iterable[str] = ()
) -> list[Tag]:
    """Active tags of ``tag_type`` whose name contains ``query``, most used first."""
    if not query.strip():
        return []
    if tag_type not in {t.value for t in TagType}:
        raise ValidationError({"tag_type": "Tag type must be offer or want"})
    data = execute_graphql(
        client,
        queries.SUGGEST_TAGS,
        {"type": tag_type, "query": f"%{query.strip().lower()}%"},
    )
    excluded = set(exclude)
    tags = [Tag.from_node(n) for n in collection_nodes(data, "tagsCollection")]
    return [t for t in tags if t.id not in excluded]


def attach_tag_to_profile(client: SupabaseClient, profile_id: str, tag_id: str) -> ProfileTag:
    data = execute_graphql(
        client, mutations.ATTACH_TAG_TO_PROFILE, {"profileId": profile_id, "tagId": tag_id}
    )
    record = first_record(data, "insertIntoprofile_tagsCollection")
    if not record:
        raise BackendError("Failed to attach tag to profile")
    return ProfileTag.from_node(record, profile_id)


def remove_tag_from_profile(client: SupabaseClient, profile_tag_id: str) -> None:
    execute_graphql(client, mutations.REMOVE_TAG_FROM_PROFILE, {"id": profile_tag_id})


class ProfileTagEditor:
    """Attach and detach tags with optimistic updates to a loaded profile.

    The local profile changes first. If the backend call fails the previous
    tag list is restored and the error is raised to the caller.
    """

    def __init__(self, client: SupabaseClient, profile: Profile):
        self.client = client
        self.profile = profile

    def find(self, tag_id: str) -> ProfileTag | None:
        return next((pt for pt in self.profile.tags if pt.tag_id == tag_id), None)

    def add_tag(self, tag: Tag) -> ProfileTag | None:
        """Attach ``tag``. Returns None when it is already attached."""
        if self.find(tag.id):
            return None

        previous = list(self.profile.tags)
        placeholder = ProfileTag(
            id=f"{TEMP_ID_PREFIX}{uuid.uuid4().hex}",
            profile_id=self.profile.id,
            tag_id=tag.id,
            tag=tag,
        )
        self.profile.tags = previous + [placeholder]

        try:
            saved = attach_tag_to_profile(self.client, self.profile.id, tag.id)
        except BackendError as exc:
            self.profile.tags = previous
            logger.warning("Attaching tag %s failed: %s", tag.id, exc)
            raise BackendError("Failed to add tag") from exc

        if not saved.tag.id:
            saved.tag = tag
        self.profile.tags = [saved if pt.id == placeholder.id else pt for pt in self.profile.tags]
        return saved

    def remove_tag(self, tag: Tag) -> bool:
        """Detach ``tag``. Returns False (and does nothing) when it is not attached."""
        profile_tag = self.find(tag.id)
        if profile_tag is None:
            return False

        previous = list(self.profile.tags)
        self.profile.tags = [pt for pt in previous if pt.tag_id != tag.id]

        try:
            remove_tag_from_profile(self.client, profile_tag.id)
        except BackendError as exc:
            self.profile.tags = previous
            logger.warning("Removing tag %s failed: %s", tag.id, exc)
            raise BackendError("Failed to remove tag") from exc
        return True
