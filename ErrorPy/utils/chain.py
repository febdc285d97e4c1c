# -*- coding: utf-8 -*-
"""Causal chains of error messages and their deduplication."""

from enum import Enum
from itertools import groupby

from utils.errors import UserError


class Cause(Enum):
    USER = 0
    INTERNAL = 1


class CausalChain:
    """Ordered error messages, most specific first and root cause last.

    ``str(chain)`` renders only the top message, ``f"{chain:#}"`` joins every
    message on one line and ``f"{chain:?}"`` renders the top message followed by
    a ``Caused by:`` list.
    """

    __slots__ = ("_messages", "caused_by")

    def __init__(self, messages, caused_by: Cause = Cause.INTERNAL):
        self._messages = tuple(str(m) for m in messages)
        if not self._messages:
            raise ValueError("A causal chain needs at least one message.")
        self.caused_by = caused_by

    @classmethod
    def from_message(cls, message: str, caused_by: Cause = Cause.INTERNAL) -> "CausalChain":
        return cls((message,), caused_by)

    @classmethod
    def from_exception(cls, error: BaseException) -> "CausalChain":
        """Build a chain from an exception and everything it was raised from.

        Explicit causes (``raise ... from ...``) are followed first, implicit
        contexts only when they were not suppressed.
        """
        caused_by = Cause.USER if isinstance(error, UserError) else Cause.INTERNAL
        messages = []
        seen = set()
        current = error
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            messages.append(str(current) or type(current).__name__)
            if current.__cause__ is not None:
                current = current.__cause__
            elif not current.__suppress_context__:
                current = current.__context__
            else:
                current = None
        return cls(messages, caused_by)

    @property
    def messages(self) -> tuple[str, ...]:
        return self._messages

    @property
    def top(self) -> str:
        return self._messages[0]

    @property
    def root(self) -> str:
        return self._messages[-1]

    @property
    def is_user_error(self) -> bool:
        return self.caused_by is Cause.USER

    def context(self, message: str) -> "CausalChain":
        """Return a new chain with *message* layered on top of this one."""
        return CausalChain((message, *self._messages), self.caused_by)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self._messages)

    def __eq__(self, other):
        if not isinstance(other, CausalChain):
            return NotImplemented
        return self._messages == other._messages and self.caused_by is other.caused_by

    def __hash__(self):
        return hash((self._messages, self.caused_by))

    def __repr__(self):
        return f"CausalChain({list(self._messages)!r}, caused_by={self.caused_by.name})"

    def __str__(self):
        return self.top

    def __format__(self, spec: str) -> str:
        if spec == "":
            return str(self)
        if spec == "#":
            return ": ".join(self._messages)
        if spec == "?":
            return self._debug()
        raise ValueError(f"Unknown format code {spec!r} for CausalChain")

    def _debug(self) -> str:
        causes = self._messages[1:]
        if not causes:
            return self.top
        if len(causes) == 1:
            lines = [f"    {causes[0]}"]
        else:
            lines = [f"{i:>5}: {message}" for i, message in enumerate(causes)]
        return "\n".join([self.top, "", "Caused by:", *lines])


def reduce(chain: CausalChain) -> CausalChain:
    """Remove adjacent duplicate messages from *chain*.

    Context layers often repeat the text of the error they wrap. Only runs of
    identical neighbours collapse; a message repeated further down is kept.
    """
    messages = [message for message, _ in groupby(chain)]
    messages.reverse()
    reduced = CausalChain.from_message(messages[0], chain.caused_by)
    for message in messages[1:]:
        reduced = reduced.context(message)
    return reduced
