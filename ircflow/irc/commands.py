"""Formatting of the few lines the session core sends on its own."""

from __future__ import annotations

from collections.abc import Iterable

from .messages import CTCP_DELIMITER


def build_line(command: str, *params: str) -> str:
    """Join ``command`` and ``params``; the last param becomes trailing when needed."""
    parts = [command]
    if params:
        *middle, last = params
        parts.extend(middle)
        if not last or " " in last or last.startswith(":"):
            last = f":{last}"
        parts.append(last)
    return " ".join(parts)


def password(secret: str) -> str:
    return build_line("PASS", secret)


def nick(name: str) -> str:
    return build_line("NICK", name)


def user(user_name: str, real_name: str) -> str:
    return f"USER {user_name} 0 * :{real_name}"


def cap_ls() -> str:
    return "CAP LS"


def cap_request(capabilities: Iterable[str]) -> str:
    return f"CAP REQ :{' '.join(capabilities)}"


def cap_end() -> str:
    return "CAP END"


def pong(argument: str) -> str:
    return f"PONG :{argument}"


def ctcp_reply(target: str, body: str) -> str:
    return f"NOTICE {target} :{CTCP_DELIMITER}{body}{CTCP_DELIMITER}"


__all__ = [
    "build_line",
    "cap_end",
    "cap_ls",
    "cap_request",
    "ctcp_reply",
    "nick",
    "password",
    "pong",
    "user",
]
