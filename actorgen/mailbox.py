"""
Mailbox primitives used by generated actors.

A mailbox is an unbounded FIFO queue with many producers (the handles) and a
single consumer (the worker's dispatch loop).

Implementation notes
--------------------
We use `anyio.create_memory_object_stream` with an infinite buffer because:
- sends never block the caller (`send_nowait` cannot raise `WouldBlock`),
- cloned send streams give us multiple producers for free,
- the receiving end sees `EndOfStream` once every producer has closed, which is
  exactly the signal the dispatch loop stops on.
"""

from __future__ import annotations

import logging
import math
from dataclasses import field
from typing import Any

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from .reply import release_reply

logger = logging.getLogger(__name__)

MailboxSender = MemoryObjectSendStream
MailboxReceiver = MemoryObjectReceiveStream


def mailbox() -> tuple[MemoryObjectSendStream[Any], MemoryObjectReceiveStream[Any]]:
    """
    Create a fresh unbounded mailbox.

    Returns
    -------
    tuple
        The sending endpoint (owned by the handle) and the receiving endpoint
        (owned by the worker state).
    """
    return anyio.create_memory_object_stream[Any](math.inf)


def mailbox_field() -> Any:
    """
    Dataclass field holding a state's receiving endpoint.

    The field is keyword-only and defaults to `None`, so it can be appended to
    any existing dataclass without disturbing field ordering.
    """
    return field(default=None, kw_only=True, repr=False, compare=False)


def drain_mailbox(receiver: MemoryObjectReceiveStream[Any], reply_field: str) -> int:
    """
    Discard every message still queued and release their reply slots.

    Called when a dispatch loop exits, so that callers waiting on a round trip
    see `MailboxClosed` instead of hanging.

    Returns
    -------
    int
        The number of messages dropped.
    """
    dropped = 0
    while True:
        try:
            message = receiver.receive_nowait()
        except (anyio.WouldBlock, anyio.EndOfStream, anyio.ClosedResourceError):
            break
        release_reply(message, reply_field)
        dropped += 1

    if dropped:
        logger.debug("Dropped %d queued message(s) from a stopped mailbox.", dropped)
    return dropped
