"""Capability set algebra used during CAP negotiation."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CapabilitySet:
    """Immutable set of capability names.

    Tokens are merged in order: ``-name`` and ``=name`` remove ``name``,
    ``~name`` adds ``name`` and any other token is added as-is.
    """

    names: frozenset[str] = frozenset()

    @classmethod
    def of(cls, tokens: Iterable[str]) -> CapabilitySet:
        return cls().merged(tokens)

    def merged(self, tokens: Iterable[str]) -> CapabilitySet:
        names = set(self.names)
        for token in tokens:
            _apply(names, token)
        return CapabilitySet(frozenset(names))

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.names))

    def __len__(self) -> int:
        return len(self.names)

    def to_list(self) -> list[str]:
        return sorted(self.names)


def _apply(names: set[str], token: str) -> None:
    marker, name = (token[0], token[1:]) if token[:1] in ("-", "=", "~") else ("", token)
    if not name:
        return
    if marker in ("-", "="):
        names.discard(name)
    else:
        names.add(name)


__all__ = ["CapabilitySet"]
