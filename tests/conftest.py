from __future__ import annotations

import re

import pytest

from contourz.errors import AuthError
from contourz.models import Session, User

_OPERATION_RE = re.compile(r"(?:query|mutation)\s+(\w+)")


def edges(*nodes):
    return {"edges": [{"node": n} for n in nodes]}


def records(*rows):
    return {"affectedCount": len(rows), "records": list(rows)}


PROFILE_NODE = {
    "id": "user-1",
    "username": "jane",
    "display_name": "Jane Doe",
    "bio": "Designer",
    "is_public": True,
    "is_complete": True,
    "profile_tagsCollection": edges(
        {"id": "pt-1", "tags": {"id": "tag-design", "name": "Design", "tag_type": "offer"}},
    ),
}


class FakeBackend:
    """Answers GraphQL RPC calls by operation name, like SupabaseClient would."""

    password = "secret123"

    def __init__(self, user: User | None = None):
        self.responses: dict = {}
        self.calls: list[tuple[str, dict]] = []
        self.session = Session(access_token="token", user=user) if user else None
        self.confirm_email = False
        self.closed = False

    def on(self, operation, data=None, errors=None):
        """Register the reply for ``operation``. ``data`` may be a callable of the variables."""
        self.responses[operation] = (data, errors)

    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]

    def variables(self, operation: str) -> dict:
        return [v for op, v in self.calls if op == operation][-1]

    def rpc(self, fn, params=None):
        assert fn == "graphql_query"
        operation = _OPERATION_RE.search(params["query"]).group(1)
        variables = params.get("variables") or {}
        self.calls.append((operation, variables))
        if operation not in self.responses:
            raise AssertionError(f"unexpected GraphQL operation {operation}")
        data, errors = self.responses[operation]
        if callable(data):
            data = data(variables)
        return {"data": data, "errors": errors}

    # auth surface

    def get_session(self):
        return self.session

    def sign_in_with_password(self, email, password):
        if password != self.password:
            raise AuthError("Invalid login credentials")
        self.session = Session(access_token="token", user=User(id="user-1", email=email))
        return self.session

    def sign_up(self, email, password):
        user = User(id="user-2", email=email)
        if self.confirm_email:
            return user, None
        self.session = Session(access_token="token", user=user)
        return user, self.session

    def sign_out(self):
        self.session = None

    def close(self):
        self.closed = True


@pytest.fixture
def backend():
    """A backend with nothing registered and nobody signed in."""
    return FakeBackend()


@pytest.fixture
def signed_in():
    """A signed-in backend whose list queries all come back empty."""
    fake = FakeBackend(User(id="user-1", email="jane@example.com"))
    fake.on("GetProfile", {"profilesCollection": edges(PROFILE_NODE)})
    fake.on("GetContacts", {"contactsCollection": edges()})
    fake.on("GetAllTasks", {"tasksCollection": edges()})
    fake.on("GetAllMeetings", {"meetingsCollection": edges()})
    fake.on("GetAllTransactions", {"transactionsCollection": edges()})
    return fake
