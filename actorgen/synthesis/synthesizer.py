"""
Actor synthesis.

For every resolved context:

- the state gains a mailbox receiver field, a private constructor taking the
  receiver, and the dispatch loop;
- a public handle class is emitted, with a `new(executor, ...)` constructor
  that spawns the worker and returns immediately.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field

from .diagnostics import DiagnosticReport
from .options import SynthesisOptions
from .resolver import ActorContext
from .scanner import body_names

logger = logging.getLogger(__name__)

STATE_TEMPLATE = """
class _:
    {receiver}: '{rt}.MailboxReceiver[{messages}] | None' = {rt}.mailbox_field()

    @classmethod
    def {state_constructor}(cls, receiver, /, *args, **kwargs):
        return cls(*args, {receiver}=receiver, **kwargs)

    async def {dispatch}(self) -> None:
        async with self.{receiver}:
            try:
                async for msg in self.{receiver}:
                    try:
                        await self.{handler}(msg)
                    finally:
                        {rt}.release_reply(msg, {reply_field!r})
            finally:
                {rt}.drain_mailbox(self.{receiver}, {reply_field!r})
"""

HANDLE_TEMPLATE = """
class {handle}({rt}.ActorHandle[{messages!r}]):
    \"\"\"Handle to a running {state} actor.\"\"\"

    @classmethod
    def {constructor}(cls, executor, /, *args, **kwargs) -> {handle!r}:
        sender, receiver = {rt}.mailbox()
        state = {state}.{state_constructor}(receiver, *args, **kwargs)
        executor.start_soon(state.{dispatch})
        return cls(sender)
"""


@dataclass(slots=True)
class SynthesizedActor:
    """
    The output of synthesis for one actor.

    `methods` lists the accessor names added by the accessor generator.
    """

    context: ActorContext
    handle_name: str
    handle: ast.ClassDef
    methods: list[str] = field(default_factory=list)

    @property
    def state_name(self) -> str:
        return self.context.state.name

    @property
    def message_set_name(self) -> str:
        return self.context.message_set.name


def synthesize_actor(
    context: ActorContext,
    module_names: set[str],
    taken: set[str],
    options: SynthesisOptions,
    report: DiagnosticReport,
) -> SynthesizedActor | None:
    """
    Augment the state of `context` and build its handle class.

    Returns None, with an error reported, if any generated name would collide
    with an existing one. `taken` holds the handle names generated so far and
    is updated.
    """
    state = context.state
    handle_name = f"{options.handle_prefix}{state.name}"

    if handle_name in module_names or handle_name in taken:
        report.error(
            "name-collision",
            f"Cannot generate handle {handle_name} for {state.name}: the name is already bound.",
            declaration=state.name,
            node=state.node,
        )
        return None

    existing = body_names(state.node)
    generated = (options.receiver_field, options.state_constructor, options.dispatch_method)
    clashes = [name for name in generated if name in existing]
    if clashes:
        report.error(
            "name-collision",
            f"{state.name} already defines {', '.join(clashes)}; cannot add the mailbox plumbing.",
            declaration=state.name,
            node=state.node,
        )
        return None

    params = {
        "rt": options.runtime_alias,
        "messages": context.message_set.name,
        "state": state.name,
        "handle": handle_name,
        "receiver": options.receiver_field,
        "handler": options.handler_method,
        "reply_field": options.reply_field,
        "constructor": options.constructor_name,
        "state_constructor": options.state_constructor,
        "dispatch": options.dispatch_method,
    }

    state.node.body.extend(_class_body(STATE_TEMPLATE.format(**params)))
    handle = ast.parse(HANDLE_TEMPLATE.format(**params)).body[0]
    taken.add(handle_name)

    logger.info("Synthesized %s for %s / %s.", handle_name, state.name, context.message_set.name)
    return SynthesizedActor(context=context, handle_name=handle_name, handle=handle)


def _class_body(source: str) -> list[ast.stmt]:
    return ast.parse(source).body[0].body
