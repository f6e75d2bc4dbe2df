from __future__ import annotations

import json
import time

import httpx
import pytest

from contourz.db import MemoryStorage
from contourz.errors import BackendError
from contourz.graphql import affected_count, collection_nodes, execute_graphql, first_record
from contourz.supabase import SESSION_KEY, SupabaseClient

QUERY = "query GetContacts { contactsCollection { edges { node { id } } } }"


def make_client(handler, storage=None):
    return SupabaseClient(
        "https://proj.supabase.co",
        "anon-key",
        storage=storage or MemoryStorage(),
        transport=httpx.MockTransport(handler),
    )


def test_posts_query_and_variables_to_rpc():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        seen["headers"] = request.headers
        return httpx.Response(200, json={"data": {"contactsCollection": {"edges": []}}})

    data = execute_graphql(make_client(handler), QUERY, {"id": "c1"})

    assert data == {"contactsCollection": {"edges": []}}
    assert seen["path"] == "/rest/v1/rpc/graphql_query"
    assert seen["body"] == {"query": QUERY, "variables": {"id": "c1"}}
    assert seen["headers"]["apikey"] == "anon-key"
    assert "authorization" not in seen["headers"]


def test_sends_bearer_token_of_stored_session():
    storage = MemoryStorage()
    storage.set_item(
        SESSION_KEY,
        json.dumps({"access_token": "tok", "refresh_token": "r", "expires_at": int(time.time()) + 3600}),
    )
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={"data": {}})

    execute_graphql(make_client(handler, storage), QUERY)
    assert seen["auth"] == "Bearer tok"


def test_graphql_errors_raise_first_message():
    def handler(request):
        return httpx.Response(
            200,
            json={"data": None, "errors": [{"message": "Unknown field"}, {"message": "other"}]},
        )

    with pytest.raises(BackendError, match="Unknown field"):
        execute_graphql(make_client(handler), QUERY)


def test_null_data_without_errors_is_empty():
    def handler(request):
        return httpx.Response(200, json={"data": None})

    assert execute_graphql(make_client(handler), QUERY) == {}


def test_http_error_uses_backend_message():
    def handler(request):
        return httpx.Response(401, json={"message": "JWT expired"})

    with pytest.raises(BackendError, match="JWT expired"):
        execute_graphql(make_client(handler), QUERY)


def test_network_failures_become_backend_errors():
    def refused(request):
        raise httpx.ConnectError("connection refused", request=request)

    def slow(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(BackendError, match="Network error"):
        execute_graphql(make_client(refused), QUERY)
    with pytest.raises(BackendError, match="Request timed out"):
        execute_graphql(make_client(slow), QUERY)


def test_result_helpers():
    data = {
        "contactsCollection": {"edges": [{"node": {"id": "1"}}, {"node": {"id": "2"}}]},
        "insertIntocontactsCollection": {"records": [{"id": "3"}]},
        "deleteFromcontactsCollection": {"affectedCount": 1},
    }
    assert [n["id"] for n in collection_nodes(data, "contactsCollection")] == ["1", "2"]
    assert first_record(data, "insertIntocontactsCollection") == {"id": "3"}
    assert affected_count(data, "deleteFromcontactsCollection") == 1

    assert collection_nodes(None, "contactsCollection") == []
    assert first_record({}, "insertIntocontactsCollection") is None
    assert affected_count({}, "deleteFromcontactsCollection") == 0
