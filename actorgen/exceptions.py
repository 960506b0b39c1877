from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from .synthesis.diagnostics import Diagnostic


class ActorgenError(Exception):
    """Base exception for all actorgen errors."""


class InvalidMessageType(ActorgenError):
    """
    Raised when an accessor receives a message of the wrong variant.

    The check happens before anything is sent, so a rejected message never
    reaches the mailbox.
    """

    def __init__(self, expected: type, received: Any) -> None:
        self.expected = expected
        self.received = received
        super().__init__(
            f"Expected a {expected.__qualname__} message, got {type(received).__qualname__}."
        )


class SendFailed(ActorgenError):
    """
    Raised when a message cannot be enqueued.

    This happens when the worker has already dropped the receiving end of its
    mailbox, or when the handle itself was closed.
    """


class MailboxClosed(ActorgenError):
    """
    Raised when a round-trip call loses its reply channel.

    The worker stopped, or discarded the message, without ever replying.
    """


class ReplyTimeout(ActorgenError):
    """
    Raised when a round-trip call does not get a reply in time.

    Timeouts are controlled by the caller, not the actor.
    """


class ReplyAlreadySent(ActorgenError):
    """Raised when a reply slot is used a second time."""


class SynthesisError(ActorgenError):
    """
    Raised when the synthesis pipeline reported at least one error.

    Attributes
    ----------
    diagnostics:
        The error-level diagnostics, in the order they were reported.
    """

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = list(diagnostics)
        lines = "\n".join(f"  {d}" for d in self.diagnostics)
        super().__init__(f"Synthesis failed with {len(self.diagnostics)} error(s):\n{lines}")
