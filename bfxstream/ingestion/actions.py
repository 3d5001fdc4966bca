"""Queue of outbound actions held back while the connection is paused."""

from __future__ import annotations

from typing import Callable

Action = Callable[[], object]


class DeferredActionQueue:
    """FIFO of zero-argument actions, replayed in order by :meth:`fire`."""

    def __init__(self) -> None:
        self.reject()

    def add(self, action: Action) -> int:
        """Append an action. Returns the new queue length."""
        self._actions.append(action)
        return len(self._actions)

    def fire(self) -> None:
        """Run every queued action in enqueue order, then forget them.

        Actions that enqueue again while firing land in a fresh list and
        wait for the next fire.
        """
        actions, self._actions = self._actions, []
        for action in actions:
            action()

    def reject(self) -> None:
        """Drop every queued action without running it."""
        self._actions: list[Action] = []

    def __len__(self) -> int:
        return len(self._actions)
