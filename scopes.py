"""Cancellable task groups.

Each display mode gets a fresh `ProducerScope`; leaving the mode cancels
it, which cancels every task that was feeding the displayed list.
"""

import asyncio
import logging
from typing import Coroutine, Optional, Set

logger = logging.getLogger(__name__)


class ProducerScope:
    '''A group of tasks that are cancelled together.'''

    def __init__(self, name: str):
        self.name = name
        self._tasks: Set[asyncio.Task] = set()
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def launch(self, coro: Coroutine) -> Optional[asyncio.Task]:
        '''
        Start `coro` as a task owned by this scope.

        Returns:
            The task, or None if the scope was already cancelled (the
            coroutine is closed without running).
        '''
        if not self._active:
            coro.close()
            logger.debug(f"Scope '{self.name}' is cancelled, not launching")
            return None

        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def cancel(self) -> None:
        self._active = False
        for task in list(self._tasks):
            task.cancel()

    async def join(self) -> None:
        '''Wait for every task launched so far to finish.'''
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Task in scope '{self.name}' failed", exc_info=exc)

    def __repr__(self) -> str:
        state = "active" if self._active else "cancelled"
        return f"ProducerScope({self.name}, {state}, tasks={len(self._tasks)})"
