"""Centralized internal error hierarchy.

Classes:
  InternalError           – Base for all internal errors.
  DecodeError             – A wire line without a command token.
  MessageValidationError  – A decoded message missing a required field.
  NetworkError            – Transport failure on the session socket.
  ConfigurationError      – Missing or unsupported session settings.

Decoding and validation problems are normally reported through the
non-raising ``valid`` / ``is_valid()`` checks; the exceptions exist for
callers that prefer to fail loudly via the ``require_valid()`` helpers.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class DecodeError(InternalError):
    """Raised for a line that carries no command token."""


class MessageValidationError(InternalError):
    """Raised for a well-formed message that fails its variant's field checks."""


class NetworkError(InternalError):
    """Exception raised for socket level failures.

    Args:
        message: Descriptive error message.
        kind: Short machine readable failure category, e.g. ``"refused"``.
        data: Optional mapping of additional context data.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str = "unknown",
        data: Mapping[str, object] | None = None,
    ) -> None:
        merged = dict(data) if data else {}
        merged["kind"] = kind
        super().__init__(message, data=merged)
        self.kind = kind


class ConfigurationError(InternalError):
    """Exception raised for missing or unsupported session settings."""


__all__ = [
    "InternalError",
    "DecodeError",
    "MessageValidationError",
    "NetworkError",
    "ConfigurationError",
]
