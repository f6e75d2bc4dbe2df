"""Minimal Supabase client: PostgREST RPC calls plus the GoTrue auth endpoints."""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Protocol

import httpx

from contourz.config import Settings
from contourz.errors import AuthError, BackendError
from contourz.models import Session, User

logger = logging.getLogger(__name__)

SESSION_KEY = "contourz.auth.session"

# Refresh a little before the token actually expires.
_EXPIRY_MARGIN = 30


class Storage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return response.text or f"HTTP {response.status_code}"


class SupabaseClient:
    def __init__(
        self,
        url: str,
        anon_key: str,
        *,
        storage: Storage | None = None,
        timeout: float = 30.0,
        auto_refresh_token: bool = True,
        transport: httpx.BaseTransport | None = None,
    ):
        if storage is None:
            from contourz.db import MemoryStorage

            storage = MemoryStorage()
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.storage = storage
        self.auto_refresh_token = auto_refresh_token
        self._http = httpx.Client(
            base_url=self.url,
            headers={"apikey": anon_key, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, storage: Storage | None = None) -> SupabaseClient:
        return cls(
            settings.supabase_url,
            settings.supabase_anon_key,
            storage=storage,
            timeout=settings.http_timeout,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> SupabaseClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- transport ---------------------------------------------------------

    def _request(self, method: str, path: str, *, token: str | None = None, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = self._http.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            logger.error("Timeout calling %s %s", method, path)
            raise BackendError("Request timed out") from exc
        except httpx.RequestError as exc:
            logger.error("Request error calling %s %s: %s", method, path, exc)
            raise BackendError(f"Network error: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            logger.debug("HTTP %s from %s %s: %s", response.status_code, method, path, message)
            raise BackendError(message)
        if not response.content:
            return None
        return response.json()

    def rpc(self, fn: str, params: dict[str, Any] | None = None) -> Any:
        return self._request(
            "POST", f"/rest/v1/rpc/{fn}", token=self.get_auth_token(), json=params or {}
        )

    # -- session storage ---------------------------------------------------

    def _save_session(self, payload: dict) -> Session:
        if not payload.get("expires_at") and payload.get("expires_in"):
            payload = {**payload, "expires_at": int(time.time()) + int(payload["expires_in"])}
        session = Session.from_payload(payload)
        self.storage.set_item(SESSION_KEY, json.dumps(session.to_payload()))
        return session

    def _load_session(self) -> Session | None:
        raw = self.storage.get_item(SESSION_KEY)
        if not raw:
            return None
        try:
            return Session.from_payload(json.loads(raw))
        except ValueError:
            logger.warning("Discarding unreadable stored session")
            self.storage.remove_item(SESSION_KEY)
            return None

    def get_session(self) -> Session | None:
        session = self._load_session()
        if session is None:
            return None
        expired = session.expires_at and session.expires_at - _EXPIRY_MARGIN <= time.time()
        if expired and self.auto_refresh_token and session.refresh_token:
            try:
                return self.refresh_session(session.refresh_token)
            except BackendError:
                logger.info("Session refresh failed, signing out")
                self.storage.remove_item(SESSION_KEY)
                return None
        return session

    def get_auth_token(self) -> str | None:
        session = self.get_session()
        return session.access_token if session else None

    # -- auth --------------------------------------------------------------

    def sign_in_with_password(self, email: str, password: str) -> Session:
        try:
            payload = self._request(
                "POST",
                "/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
            )
        except BackendError as exc:
            raise AuthError(str(exc)) from exc
        return self._save_session(payload)

    def sign_up(self, email: str, password: str) -> tuple[User | None, Session | None]:
        """Register a user. The session is None while email confirmation is pending."""
        try:
            payload = self._request(
                "POST", "/auth/v1/signup", json={"email": email, "password": password}
            ) or {}
        except BackendError as exc:
            raise AuthError(str(exc)) from exc
        if payload.get("access_token"):
            session = self._save_session(payload)
            return session.user, session
        # without a session GoTrue returns the bare user object
        return User.from_payload(payload.get("user") or payload), None

    def refresh_session(self, refresh_token: str) -> Session:
        payload = self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        return self._save_session(payload)

    def get_user(self) -> User | None:
        token = self.get_auth_token()
        if not token:
            return None
        return User.from_payload(self._request("GET", "/auth/v1/user", token=token))

    def sign_out(self) -> None:
        session = self._load_session()
        if session and session.access_token:
            try:
                self._request("POST", "/auth/v1/logout", token=session.access_token)
            except BackendError as exc:
                logger.warning("Remote sign out failed: %s", exc)
        self.storage.remove_item(SESSION_KEY)
