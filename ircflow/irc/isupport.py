"""ISUPPORT (numeric 005) parsing and read-only session info helpers."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

DEFAULT_CHANNEL_TYPES = "#&"
_CHANMODE_KINDS = "ABCD"


def unescape_value(value: str) -> str:
    """Resolve ``\\xHH`` escapes; malformed escapes are kept verbatim."""
    if "\\x" not in value:
        return value
    parts = value.split("\\x")
    out = [parts[0]]
    for part in parts[1:]:
        octet, rest = part[:2], part[2:]
        try:
            out.append(chr(int(octet, 16)) + rest)
        except ValueError:
            out.append("\\x" + part)
    return "".join(out)


def merge_isupport(
    info: Mapping[str, str], tokens: Iterable[str]
) -> dict[str, str]:
    """Return ``info`` updated with ``KEY=VALUE``, ``KEY`` and ``-KEY`` tokens.

    Tokens containing whitespace (the trailing "are supported by this
    server" text) are skipped. Repeated keys overwrite earlier values.
    """
    merged = dict(info)
    for token in tokens:
        if not token or any(ch.isspace() for ch in token):
            continue
        key, _, value = token.partition("=")
        if key.startswith("-"):
            merged.pop(key[1:], None)
            continue
        if key:
            merged[key] = unescape_value(value)
    return merged


class SessionInfo(Mapping[str, str]):
    """Read-only view over the ISUPPORT map with typed helpers."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values = dict(values or {})

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"SessionInfo({self._values!r})"

    @property
    def network(self) -> str:
        return self._values.get("NETWORK", "")

    def _prefix_parts(self) -> tuple[str, str]:
        raw = self._values.get("PREFIX", "")
        if not raw.startswith("(") or ")" not in raw:
            return "", ""
        modes, symbols = raw[1:].split(")", 1)
        return modes, symbols

    @property
    def prefix_modes(self) -> list[str]:
        """User modes granted by channel prefixes, highest privilege first."""
        return list(self._prefix_parts()[0])

    @property
    def prefix_symbols(self) -> list[str]:
        return list(self._prefix_parts()[1])

    @property
    def channel_types(self) -> list[str]:
        return list(self._values.get("CHANTYPES") or DEFAULT_CHANNEL_TYPES)

    def channel_modes(self, kind: str) -> list[str]:
        """Channel modes of CHANMODES group ``kind`` ("A" to "D")."""
        kind = kind.upper()
        if len(kind) != 1 or kind not in _CHANMODE_KINDS:
            raise ValueError(f"unknown channel mode kind: {kind!r}")
        groups = self._values.get("CHANMODES", "").split(",")
        index = _CHANMODE_KINDS.index(kind)
        return list(groups[index]) if index < len(groups) else []

    def limit(self, key: str, default: int = -1) -> int:
        """Integer value of a limit style key such as NICKLEN or TOPICLEN."""
        try:
            return int(self._values.get(key, ""))
        except ValueError:
            return default

    def to_dict(self) -> dict[str, str]:
        return dict(self._values)


__all__ = ["SessionInfo", "merge_isupport", "unescape_value"]
