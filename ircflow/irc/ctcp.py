"""Default CTCP request handling."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from ..constants import CTCP_VERSION_REPLY

if TYPE_CHECKING:  # pragma: no cover
    from .messages import IRCMessage


def default_ctcp_reply(request: IRCMessage) -> str | None:
    """Reply body for a CTCP request, or None to stay silent.

    PING echoes its argument, TIME answers with the local time in the
    locale's format and VERSION with a fixed string.
    """
    body = request.message
    words = body.split()
    kind = words[0].upper() if words else ""
    if kind == "PING":
        return body
    if kind == "TIME":
        return f"TIME {datetime.now().strftime('%c')}"
    if kind == "VERSION":
        return f"VERSION {CTCP_VERSION_REPLY}"
    return None


__all__ = ["default_ctcp_reply"]
