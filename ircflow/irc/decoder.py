"""IRC line decoding utilities.

Turns one wire line (CR/LF already stripped or not) into a frozen
:class:`RawMessage`. Parameters stay as bytes so the text encoding can be
chosen per message at access time.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..constants import IRC_DEFAULT_ENCODING
from ..errors import DecodeError

SUPPORTED_ENCODINGS: tuple[str, ...] = (
    "UTF-8",
    "ISO-8859-1",
    "ISO-8859-2",
    "ISO-8859-3",
    "ISO-8859-4",
    "ISO-8859-5",
    "ISO-8859-6",
    "ISO-8859-7",
    "ISO-8859-8",
    "ISO-8859-9",
    "ISO-8859-10",
    "ISO-8859-13",
    "ISO-8859-14",
    "ISO-8859-15",
    "ISO-8859-16",
    "Windows-1250",
    "Windows-1251",
    "Windows-1252",
    "Windows-1253",
    "Windows-1254",
    "Windows-1255",
    "Windows-1256",
    "Windows-1257",
    "Windows-1258",
    "KOI8-R",
    "KOI8-U",
    "IBM850",
    "IBM866",
    "Big5",
    "Big5-HKSCS",
    "GB18030",
    "GBK",
    "GB2312",
    "EUC-JP",
    "EUC-KR",
    "CP949",
    "ISO-2022-JP",
    "Shift_JIS",
    "TIS-620",
    "macintosh",
)

_ENCODINGS_BY_KEY = {name.lower(): name for name in SUPPORTED_ENCODINGS}


def normalize_encoding(name: str | bytes | None) -> str | None:
    """Return the canonical whitelist spelling of ``name`` or None."""
    if name is None:
        return None
    if isinstance(name, bytes):
        name = name.decode("ascii", "replace")
    return _ENCODINGS_BY_KEY.get(name.strip().lower())


def is_supported_encoding(name: str | bytes | None) -> bool:
    return normalize_encoding(name) is not None


_LAST_RESORT_ENCODING = "ISO-8859-15"


def default_encoding() -> str:
    """Configured fallback codec, or ISO-8859-15 when it is not on the whitelist."""
    return normalize_encoding(IRC_DEFAULT_ENCODING) or _LAST_RESORT_ENCODING


def decode_text(data: bytes, fallback: str = IRC_DEFAULT_ENCODING) -> str:
    """Decode ``data`` as UTF-8, or with ``fallback`` when it is not valid UTF-8.

    Never raises: undecodable bytes in the fallback codec are replaced.
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        codec = normalize_encoding(fallback) or default_encoding()
        return data.decode(codec, errors="replace")


@dataclass(frozen=True)
class Sender:
    name: str | None = None
    user: str | None = None
    host: str | None = None

    @classmethod
    def from_prefix(cls, prefix: str | None) -> Sender:
        # nick!user@host, nick@host or a bare server name
        if not prefix:
            return cls()
        name, _, host = prefix.partition("@")
        name, bang, user = name.partition("!")
        return cls(
            name=name or None,
            user=user if bang and user else None,
            host=host or None,
        )

    @property
    def prefix(self) -> str:
        text = self.name or ""
        if self.user:
            text += f"!{self.user}"
        if self.host:
            text += f"@{self.host}"
        return text

    def is_valid(self) -> bool:
        return bool(self.name)


@dataclass(frozen=True)
class RawMessage:
    data: bytes
    prefix: str | None
    command: str | None
    params: tuple[bytes, ...] = ()
    tags: tuple[tuple[str, str], ...] = ()

    @property
    def valid(self) -> bool:
        return bool(self.command)

    @property
    def sender(self) -> Sender:
        return Sender.from_prefix(self.prefix)

    def require_valid(self) -> RawMessage:
        if not self.valid:
            raise DecodeError(
                "line has no command token", data={"raw": self.data[:200]}
            )
        return self


def decode(data: bytes, encoding: str = IRC_DEFAULT_ENCODING) -> RawMessage:
    """Split one IRC line into prefix, command and parameters.

    ``encoding`` is the fallback codec used for the prefix, command and tags
    when they are not valid UTF-8. The result is marked invalid (``valid``
    False) when no command token is present; decoding itself never raises.
    """
    original = data
    line = data.rstrip(b"\r\n")
    tags: tuple[tuple[str, str], ...] = ()
    prefix: str | None = None

    if line.startswith(b"@"):
        raw_tags, _, line = line.partition(b" ")
        tags = _parse_tags(decode_text(raw_tags[1:], encoding))
        line = line.lstrip(b" ")

    if line.startswith(b":"):
        raw_prefix, _, line = line[1:].partition(b" ")
        prefix = decode_text(raw_prefix, encoding) or None

    tokens = _split_params(line)
    if not tokens:
        return RawMessage(data=original, prefix=prefix, command=None, tags=tags)

    command = decode_text(tokens[0], encoding)
    return RawMessage(
        data=original,
        prefix=prefix,
        command=command or None,
        params=tuple(tokens[1:]),
        tags=tags,
    )


def _split_params(line: bytes) -> list[bytes]:
    tokens: list[bytes] = []
    rest = line
    while rest:
        rest = rest.lstrip(b" ")
        if not rest:
            break
        # A ':' starts the trailing parameter only after the command token.
        if tokens and rest.startswith(b":"):
            tokens.append(rest[1:])
            break
        token, _, rest = rest.partition(b" ")
        tokens.append(token)
    return tokens


def _parse_tags(raw_tags: str) -> tuple[tuple[str, str], ...]:
    tags: dict[str, str] = {}
    for tag in raw_tags.split(";"):
        if not tag:
            continue
        if "=" in tag:
            k, v = tag.split("=", 1)
        else:
            k, v = tag, ""
        tags[k] = v
    return tuple(tags.items())


__all__ = [
    "SUPPORTED_ENCODINGS",
    "RawMessage",
    "Sender",
    "decode",
    "decode_text",
    "default_encoding",
    "is_supported_encoding",
    "normalize_encoding",
]
