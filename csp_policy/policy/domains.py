"""Ordered source-token list that remembers whether it was ever touched."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class DomainList:
    """Ordered CSP source tokens for one directive.

    A list starts *unset*. Appending marks it set, and it stays set even after
    every token is discarded again. Emission only cares about emptiness, but
    the distinction is kept so callers can tell "never configured" from
    "configured to nothing".
    """

    __slots__ = ("_tokens",)

    def __init__(self, tokens: Iterable[str] | None = None) -> None:
        self._tokens: list[str] | None = None if tokens is None else list(tokens)

    @property
    def is_set(self) -> bool:
        return self._tokens is not None

    @property
    def is_empty(self) -> bool:
        return not self._tokens

    def append(self, token: str) -> None:
        if self._tokens is None:
            self._tokens = []
        self._tokens.append(token)

    def discard(self, token: str) -> None:
        """Remove every occurrence of ``token``. Missing tokens are ignored."""
        if self._tokens is None:
            return
        self._tokens = [t for t in self._tokens if t != token]

    def join(self) -> str:
        return " ".join(self._tokens or ())

    def copy(self) -> DomainList:
        return DomainList(self._tokens)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens or ())

    def __len__(self) -> int:
        return len(self._tokens or ())

    def __bool__(self) -> bool:
        return not self.is_empty

    def __contains__(self, token: object) -> bool:
        return token in (self._tokens or ())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DomainList):
            return self._tokens == other._tokens
        if isinstance(other, (list, tuple)):
            return list(self) == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        if self._tokens is None:
            return "DomainList(<unset>)"
        return f"DomainList({self._tokens!r})"
