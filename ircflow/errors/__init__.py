"""Error types shared across the session core."""

from .internal import (  # noqa: F401
    ConfigurationError,
    DecodeError,
    InternalError,
    MessageValidationError,
    NetworkError,
)

__all__ = [
    "InternalError",
    "DecodeError",
    "MessageValidationError",
    "NetworkError",
    "ConfigurationError",
]
