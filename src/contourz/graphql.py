"""GraphQL over Supabase RPC.

pg_graphql is not exposed at ``/graphql/v1`` on our project, so documents go
through the ``graphql_query`` database function, which calls
``graphql.resolve()`` and returns the usual ``{data, errors}`` envelope.
"""
from __future__ import annotations

import logging
from typing import Any

from contourz.errors import BackendError
from contourz.supabase import SupabaseClient

logger = logging.getLogger(__name__)

RPC_FUNCTION = "graphql_query"


def execute_graphql(
    client: SupabaseClient, query: str, variables: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Run a query or mutation and return its ``data``. Raises BackendError on any error."""
    logger.debug("Executing GraphQL: %s...", query.strip()[:100])

    envelope = client.rpc(RPC_FUNCTION, {"query": query, "variables": variables or {}})
    envelope = envelope or {}

    errors = envelope.get("errors") or []
    if errors:
        logger.error("GraphQL errors: %s", errors)
        first = errors[0]
        message = first.get("message") if isinstance(first, dict) else str(first)
        raise BackendError(message or "Unknown GraphQL error")

    return envelope.get("data") or {}


execute_graphql_mutation = execute_graphql


def collection_nodes(data: dict[str, Any] | None, name: str) -> list[dict[str, Any]]:
    """Unwrap the relay-style ``name.edges[].node`` list pg_graphql returns."""
    if not data:
        return []
    collection = data.get(name) or {}
    return [edge["node"] for edge in collection.get("edges") or [] if edge.get("node")]


def first_record(data: dict[str, Any] | None, name: str) -> dict[str, Any] | None:
    """First entry of ``name.records`` from an insert/update mutation."""
    if not data:
        return None
    records = (data.get(name) or {}).get("records") or []
    return records[0] if records else None


def affected_count(data: dict[str, Any] | None, name: str) -> int:
    if not data:
        return 0
    return int((data.get(name) or {}).get("affectedCount") or 0)
