__version__ = "0.1.0"

import os

from monkay import Monkay

from .exceptions import (
    ActorgenError,
    InvalidMessageType,
    MailboxClosed,
    ReplyAlreadySent,
    ReplyTimeout,
    SendFailed,
    SynthesisError,
)
from .handle import ActorHandle
from .link import serves
from .mailbox import MailboxReceiver, MailboxSender, drain_mailbox, mailbox, mailbox_field
from .reply import ReplyChannel, ReplySlot, oneshot, release_reply, reply_field
from .typing import Executor

monkay: Monkay = Monkay(
    globals(),
    settings_path=os.environ.get(
        "ACTORGEN_SETTINGS_MODULE", "actorgen.conf.global_settings:settings"
    ),
)

from .synthesis import (  # noqa: E402
    SynthesisOptions,
    SynthesisResult,
    synthesize,
    synthesize_file,
    synthesize_source,
)

__all__ = [
    "ActorHandle",
    "ActorgenError",
    "Executor",
    "InvalidMessageType",
    "MailboxClosed",
    "MailboxReceiver",
    "MailboxSender",
    "ReplyAlreadySent",
    "ReplyChannel",
    "ReplySlot",
    "ReplyTimeout",
    "SendFailed",
    "SynthesisError",
    "SynthesisOptions",
    "SynthesisResult",
    "drain_mailbox",
    "mailbox",
    "mailbox_field",
    "monkay",
    "oneshot",
    "release_reply",
    "reply_field",
    "serves",
    "synthesize",
    "synthesize_file",
    "synthesize_source",
]
