"""
One-shot reply channels.

A round-trip call creates a `ReplyChannel`, installs its `slot` into the message
and waits on the channel. The worker answers through the slot exactly once.

If the slot is closed without a value, the waiting caller gets `MailboxClosed`.
If the caller gives up first (timeout), the worker's later `send` returns
`False` instead of raising.
"""

from __future__ import annotations

from dataclasses import field
from types import TracebackType
from typing import Any, Generic, Optional, TypeVar

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from .exceptions import MailboxClosed, ReplyAlreadySent, ReplyTimeout

T = TypeVar("T")


class ReplySlot(Generic[T]):
    """
    The producing half of a reply channel, carried inside a request message.

    A slot is single use: the first `send` (or `close`) consumes it.
    """

    __slots__ = ("_stream", "_used")

    def __init__(self, stream: MemoryObjectSendStream[T]) -> None:
        self._stream = stream
        self._used = False

    @property
    def used(self) -> bool:
        return self._used

    def send(self, value: T) -> bool:
        """
        Deliver the reply.

        Returns
        -------
        bool
            False if the caller is no longer waiting (it timed out or was
            cancelled). The value is discarded in that case.

        Raises
        ------
        ReplyAlreadySent
            If the slot was already used.
        """
        if self._used:
            raise ReplyAlreadySent("This reply slot has already been used.")
        self._used = True
        try:
            self._stream.send_nowait(value)
            return True
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            return False
        finally:
            self._stream.close()

    def close(self) -> None:
        """Drop the slot without replying. Idempotent."""
        self._used = True
        self._stream.close()

    def __repr__(self) -> str:
        state = "used" if self._used else "pending"
        return f"<ReplySlot {state}>"


class ReplyChannel(Generic[T]):
    """
    The caller's side of a one-shot reply exchange.

    Use it as a context manager so the receiving end is closed whatever happens
    to the call.
    """

    __slots__ = ("slot", "_recv")

    def __init__(self, slot: ReplySlot[T], recv: MemoryObjectReceiveStream[T]) -> None:
        self.slot = slot
        self._recv = recv

    async def wait(self, timeout: Optional[float] = None) -> T:
        """
        Suspend until the worker replies.

        Raises
        ------
        MailboxClosed
            If the slot was dropped without a value.
        ReplyTimeout
            If `timeout` seconds elapse first.
        """
        try:
            if timeout is not None:
                with anyio.fail_after(timeout):
                    return await self._recv.receive()
            return await self._recv.receive()
        except anyio.EndOfStream:
            raise MailboxClosed("The actor stopped before replying.") from None
        except TimeoutError as e:
            raise ReplyTimeout(f"No reply after {timeout} seconds.") from e

    def close(self) -> None:
        self._recv.close()

    def __enter__(self) -> "ReplyChannel[T]":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def oneshot() -> ReplyChannel[Any]:
    """Create a reply channel able to carry exactly one value."""
    send, recv = anyio.create_memory_object_stream[Any](1)
    return ReplyChannel(ReplySlot(send), recv)


def reply_field() -> Any:
    """
    Dataclass field for a rewritten reply slot.

    Keyword-only with a `None` default, so the reply field can sit anywhere in a
    variant's field list. Excluded from `repr` and equality.
    """
    return field(default=None, kw_only=True, repr=False, compare=False)


def release_reply(message: Any, reply_field: str) -> None:
    """Close the reply slot carried by `message` if nobody used it."""
    slot = getattr(message, reply_field, None)
    if isinstance(slot, ReplySlot) and not slot.used:
        slot.close()
