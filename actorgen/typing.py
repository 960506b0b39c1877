from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Executor(Protocol):
    """
    Protocol for whatever runs an actor's dispatch loop in the background.

    An `anyio.abc.TaskGroup` satisfies it.

    Usage
    -----
    async with anyio.create_task_group() as tg:
        counter = ActorCounter.new(tg)
    """

    def start_soon(
        self,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        name: Any = None,
    ) -> None: ...
