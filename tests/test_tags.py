from __future__ import annotations

import pytest

from contourz.errors import BackendError, ValidationError
from contourz.models import Profile, ProfileTag, Tag
from contourz.services.tags import TEMP_ID_PREFIX, ProfileTagEditor, suggest_tags

from conftest import edges, records

DESIGN = Tag(id="t1", name="Design", tag_type="offer")
FUNDING = Tag(id="t2", name="Funding", tag_type="want")


@pytest.fixture
def profile():
    return Profile(id="u1", tags=[ProfileTag(id="pt1", profile_id="u1", tag_id="t1", tag=DESIGN)])


def test_blank_query_makes_no_request(backend):
    assert suggest_tags(backend, "offer", "   ") == []
    assert backend.calls == []


def test_suggest_rejects_unknown_type(backend):
    with pytest.raises(ValidationError):
        suggest_tags(backend, "skill", "des")


def test_suggest_uses_contains_match_and_excludes_attached(backend):
    backend.on(
        "SuggestTags",
        {"tagsCollection": edges(
            {"id": "t1", "name": "Design", "tag_type": "offer", "usage_count": 9},
            {"id": "t3", "name": "UX Design", "tag_type": "offer", "usage_count": 4},
        )},
    )
    tags = suggest_tags(backend, "offer", " Des ", exclude=["t1"])
    assert [t.name for t in tags] == ["UX Design"]
    assert backend.variables("SuggestTags") == {"type": "offer", "query": "%des%"}


def test_add_tag_replaces_placeholder(backend, profile):
    seen = {}

    def attach(variables):
        # the optimistic placeholder is already visible while the request runs
        seen["ids"] = [pt.id for pt in profile.tags]
        return {"insertIntoprofile_tagsCollection": records(
            {"id": "pt2", "profile_id": "u1", "tag_id": "t2", "tags": {"id": "t2", "name": "Funding", "tag_type": "want"}}
        )}

    backend.on("AttachTagToProfile", attach)
    saved = ProfileTagEditor(backend, profile).add_tag(FUNDING)

    assert seen["ids"][0] == "pt1"
    assert seen["ids"][1].startswith(TEMP_ID_PREFIX)
    assert saved.id == "pt2"
    assert [pt.id for pt in profile.tags] == ["pt1", "pt2"]
    assert [t.name for t in profile.wants] == ["Funding"]
    assert backend.variables("AttachTagToProfile") == {"profileId": "u1", "tagId": "t2"}


def test_add_attached_tag_is_noop(backend, profile):
    assert ProfileTagEditor(backend, profile).add_tag(DESIGN) is None
    assert backend.calls == []
    assert len(profile.tags) == 1


def test_add_tag_reverts_on_failure(backend, profile):
    backend.on("AttachTagToProfile", None, errors=[{"message": "duplicate key"}])
    with pytest.raises(BackendError, match="Failed to add tag"):
        ProfileTagEditor(backend, profile).add_tag(FUNDING)
    assert [pt.id for pt in profile.tags] == ["pt1"]


def test_remove_tag_is_idempotent(backend, profile):
    backend.on("RemoveTagFromProfile", {"deleteFromprofile_tagsCollection": {"affectedCount": 1}})
    editor = ProfileTagEditor(backend, profile)

    assert editor.remove_tag(DESIGN) is True
    assert editor.remove_tag(DESIGN) is False
    assert profile.tags == []
    assert backend.operations() == ["RemoveTagFromProfile"]
    assert backend.variables("RemoveTagFromProfile") == {"id": "pt1"}


def test_remove_tag_reverts_on_failure(backend, profile):
    backend.on("RemoveTagFromProfile", None, errors=[{"message": "permission denied"}])
    with pytest.raises(BackendError, match="Failed to remove tag"):
        ProfileTagEditor(backend, profile).remove_tag(DESIGN)
    assert [pt.id for pt in profile.tags] == ["pt1"]
