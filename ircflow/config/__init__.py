"""Configuration package exports."""

from .loader import ConfigLoader, load_session_config  # noqa: F401
from .model import SessionConfig  # noqa: F401

__all__ = ["ConfigLoader", "SessionConfig", "load_session_config"]
