from __future__ import annotations

import itertools

import pytest

from contourz.errors import BackendError, NotFoundError, ValidationError
from contourz.models import Profile, ProfileTag, Tag
from contourz.services import profile as svc

from conftest import edges, records


@pytest.mark.parametrize("values", list(itertools.product([None, "  ", "filled"], repeat=3)))
def test_completion_for_every_combination(values):
    username, display_name, bio = values
    profile = Profile(id="u1", username=username, display_name=display_name, bio=bio)

    status = svc.check_profile_completion(profile)

    filled = [name for name, v in zip(svc.REQUIRED_FIELDS, values) if v == "filled"]
    assert status.is_complete == (len(filled) == 3)
    assert status.completion_percentage == round(len(filled) / 3 * 100)
    assert status.missing_fields == [n for n in svc.REQUIRED_FIELDS if n not in filled]


def test_completion_without_profile():
    status = svc.check_profile_completion(None)
    assert status.is_complete is False
    assert status.completion_percentage == 0
    assert status.missing_fields == ["username", "display_name", "bio"]


def test_get_profile_not_found(backend):
    backend.on("GetProfile", {"profilesCollection": edges()})
    with pytest.raises(NotFoundError, match="Profile not found"):
        svc.get_profile(backend, "u1")
    assert backend.variables("GetProfile") == {"userId": "u1"}


def profile_insert(variables):
    return {
        "insertIntoprofilesCollection": records({
            "id": variables["userId"],
            "username": variables["username"],
            "display_name": variables["displayName"],
        })
    }


def test_create_profile_defaults_from_email(backend):
    backend.on("CreateProfile", profile_insert)
    profile = svc.create_profile(backend, "u1", email="jane.doe@example.com")
    assert profile.username == "jane.doe"
    assert profile.display_name == "jane.doe"


def test_create_profile_without_email(backend):
    backend.on("CreateProfile", profile_insert)
    profile = svc.create_profile(backend, "u1")
    assert profile.username.startswith("user_")
    assert profile.display_name == "User"


def test_update_profile_failure(backend):
    backend.on("UpdateProfiles", {"updateprofilesCollection": records()})
    with pytest.raises(BackendError, match="Failed to update profile"):
        svc.update_profile(backend, "u1", {"bio": "Hi"})


def profile_update(variables):
    return {"updateprofilesCollection": records(dict(variables))}


def test_save_profile_marks_complete(backend):
    backend.on("UpdateProfiles", profile_update)
    existing = Profile(
        id="u1",
        username="jane",
        tags=[ProfileTag(id="pt1", tag_id="t1", tag=Tag(id="t1", name="Design"))],
    )
    form = svc.ProfileForm(username="jane", display_name="Jane", bio="Designer", is_public=False)

    saved = svc.save_profile(backend, "u1", form, existing)

    updates = [v for op, v in backend.calls if op == "UpdateProfiles"]
    assert updates[0] == {
        "id": "u1", "username": "jane", "display_name": "Jane", "bio": "Designer", "is_public": False,
    }
    assert updates[1] == {"id": "u1", "is_complete": True}
    assert saved.is_complete is True
    assert [pt.tag_id for pt in saved.tags] == ["t1"]


def test_save_incomplete_profile_is_not_marked(backend):
    backend.on("UpdateProfiles", profile_update)
    form = svc.ProfileForm(username="jane", display_name="Jane", bio="")
    saved = svc.save_profile(backend, "u1", form, Profile(id="u1"))
    assert backend.operations() == ["UpdateProfiles"]
    assert saved.is_complete is False


def test_save_profile_creates_missing_profile(backend):
    backend.on("CreateProfile", profile_insert)
    backend.on("UpdateProfiles", profile_update)
    svc.save_profile(backend, "u1", svc.ProfileForm(username="jane", display_name="Jane"))
    assert backend.operations() == ["CreateProfile", "UpdateProfiles"]


def test_save_profile_validates(backend):
    with pytest.raises(ValidationError) as exc_info:
        svc.save_profile(backend, "u1", svc.ProfileForm(username="j!", display_name=""))
    assert set(exc_info.value.errors) == {"username", "display_name"}
    assert backend.calls == []
