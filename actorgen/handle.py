from __future__ import annotations

from types import TracebackType
from typing import Any, Generic, TypeVar

import anyio
from anyio.streams.memory import MemoryObjectSendStream

from .exceptions import SendFailed

M = TypeVar("M")


class ActorHandle(Generic[M]):
    """
    Base class of every generated actor handle.

    A handle owns one sending endpoint of the actor's mailbox. Each clone is an
    independent producer; the worker stops once every producer is closed.

    Generated subclasses add a `new(executor, ...)` constructor and one pair of
    accessors per request kind.

    Close every handle (`close()`, or use it as a context manager) once done
    with it: the worker, and any task group running it, only finish after the
    last producer is gone. A handle that is garbage collected while still open
    closes its producer then.
    """

    __slots__ = ("_sender", "_closed")

    def __init__(self, sender: MemoryObjectSendStream[M]) -> None:
        self._sender = sender
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def clone(self) -> "ActorHandle[M]":
        """Return a new handle sharing the same mailbox."""
        if self._closed:
            raise SendFailed("Cannot clone a closed handle.")
        return type(self)(self._sender.clone())

    def _send(self, message: M) -> None:
        try:
            self._sender.send_nowait(message)
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            raise SendFailed("The actor's mailbox is no longer receiving.") from None

    def close(self) -> None:
        """Drop this producer. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._sender.close()

    async def aclose(self) -> None:
        self.close()

    def __enter__(self) -> "ActorHandle[M]":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    async def __aenter__(self) -> "ActorHandle[M]":
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.aclose()

    def __del__(self) -> None:
        # A half-initialised instance has no `_closed` slot.
        if not getattr(self, "_closed", True):
            self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} {state}>"
