"""Predicate/handler registry used to correlate inbound messages.

Two ordered lists are kept:

- ``once`` entries are removed on their first match, before the handler runs,
  so a handler may register follow-up expectations without re-triggering.
- ``whenever`` entries stay registered for the life of the registry.

A dispatch fires at most one handler: the first matching ``once`` entry,
otherwise the first matching ``whenever`` entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

Message = Any
MatchFunc = Callable[[Message], bool]
ProcessFunc = Callable[[Message], None]


@dataclass(frozen=True, eq=False)
class Expectation:
    predicate: MatchFunc
    handler: ProcessFunc

    def matches(self, msg: Message) -> bool:
        return bool(self.predicate(msg))

    def handle(self, msg: Message) -> None:
        self.handler(msg)


class ExpectationRegistry:
    """Ordered once/whenever expectations for a single connection epoch."""

    def __init__(self) -> None:
        self._once: list[Expectation] = []
        self._whenever: list[Expectation] = []

    def once(self, predicate: MatchFunc, handler: ProcessFunc) -> Expectation:
        expectation = Expectation(predicate, handler)
        self._once.append(expectation)
        return expectation

    def whenever(self, predicate: MatchFunc, handler: ProcessFunc) -> Expectation:
        expectation = Expectation(predicate, handler)
        self._whenever.append(expectation)
        return expectation

    def dispatch(self, msg: Message) -> bool:
        """Hand ``msg`` to the first matching expectation. Returns True if consumed."""
        return self._dispatch_once(msg) or self._dispatch_whenever(msg)

    def _dispatch_once(self, msg: Message) -> bool:
        for idx, expectation in enumerate(self._once):
            if expectation.matches(msg):
                del self._once[idx]
                expectation.handle(msg)
                return True
        return False

    def _dispatch_whenever(self, msg: Message) -> bool:
        for expectation in self._whenever:
            if expectation.matches(msg):
                expectation.handle(msg)
                return True
        return False

    @property
    def pending_once(self) -> int:
        return len(self._once)

    @property
    def pending_whenever(self) -> int:
        return len(self._whenever)
