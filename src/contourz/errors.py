from __future__ import annotations


class CRMError(Exception):
    """Base class for errors shown to the user."""


class ConfigError(CRMError):
    pass


class BackendError(CRMError):
    """The backend (or the network in front of it) rejected a request."""


class NotFoundError(CRMError):
    pass


class AuthError(CRMError):
    pass


class ValidationError(CRMError):
    """Form input failed validation. ``errors`` maps field name to message."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()))
