"""
todos/store.py -- In-memory todo store with simulated latency.

Stands in for a remote data source: every operation waits `delay` seconds
before touching the collection, so pages and HTMX swaps behave as they would
against a real backend.

Usage:
    store = TodoStore(delay=0)
    todos = await store.list()
    todo = await store.add("Buy milk")
    await store.delete(todo.id)          # always True

Ids come from a monotonic counter owned by the store, so an id is never
handed out twice even after deletes. Mutation happens synchronously after
the delay, which makes it atomic with respect to other coroutines on the
same event loop -- no lock needed.

Layer rule: imports only from core/.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Iterable
from dataclasses import replace

from core.models import Todo

logger = logging.getLogger("todoboard.todos")

DEFAULT_TODOS: tuple[Todo, ...] = (
    Todo(id=1, text="Learn Kung Fu", completed=False),
    Todo(id=2, text="Watch Westminster", completed=True),
    Todo(id=3, text="Study Vedanta", completed=False),
)

_DEFAULT_DELAY = 0.1  # seconds


class TodoStore:
    def __init__(self, seed: Iterable[Todo] = DEFAULT_TODOS, delay: float = _DEFAULT_DELAY) -> None:
        self.delay = delay
        # Copy seed records so two stores never share Todo instances.
        self._todos: list[Todo] = [replace(t) for t in seed]
        start = max((t.id for t in self._todos), default=0) + 1
        self._ids = itertools.count(start)

    async def _wait(self) -> None:
        # sleep(0) still yields once, so delay=0 keeps the suspension point.
        await asyncio.sleep(self.delay)

    async def list(self) -> list[Todo]:
        """Return every todo in insertion order.

        The result is a fresh list of copies; callers cannot mutate the store
        through it.
        """
        await self._wait()
        return [replace(t) for t in self._todos]

    async def add(self, text: str) -> Todo:
        """Append a new, not-completed todo and return it. Text is stored as given."""
        await self._wait()
        todo = Todo(id=next(self._ids), text=text, completed=False)
        self._todos.append(todo)
        logger.debug("Added todo %d", todo.id)
        return replace(todo)

    async def delete(self, todo_id: int) -> bool:
        """Remove every todo with a matching id.

        Always returns True, whether or not anything matched.
        """
        await self._wait()
        before = len(self._todos)
        self._todos = [t for t in self._todos if t.id != todo_id]
        logger.debug("Deleted todo %d (%d removed)", todo_id, before - len(self._todos))
        return True
