"""
Pairing resolution.

Joins the processed message-set table with the scanned state table. A state is
paired either explicitly (`@serves(FooMsg)`) or by naming convention
(`FooMsg` <-> `Foo`). The join is pure: the only outputs are the contexts and
the diagnostics for orphans on either side.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from .diagnostics import DiagnosticReport
from .messages import MessageSet, Request
from .options import SynthesisOptions
from .scanner import Declaration, Namespace, body_names


@dataclass(slots=True)
class ActorContext:
    """A message set and the state it was paired with."""

    name: str
    message_set: MessageSet
    state: Optional[Declaration] = None

    @property
    def requests(self) -> dict[str, Request]:
        return self.message_set.requests

    @property
    def is_complete(self) -> bool:
        return bool(self.requests) and self.state is not None


def resolve(
    message_sets: Mapping[str, MessageSet],
    namespace: Namespace,
    options: SynthesisOptions,
    report: DiagnosticReport,
) -> list[ActorContext]:
    """Pair states with message sets, in state source order."""
    by_actor_name = {ms.actor_name: ms for ms in message_sets.values() if ms.actor_name is not None}
    paired: set[str] = set()
    contexts: list[ActorContext] = []

    for state in namespace.states.values():
        message_set = _match(state, message_sets, by_actor_name, report)
        if message_set is None:
            continue

        if message_set.name in paired:
            report.error(
                "duplicate-pairing",
                f"{state.name} pairs with {message_set.name}, which another state already serves.",
                declaration=state.name,
                node=state.node,
            )
            continue

        if not state.has_named_fields:
            report.warning(
                "state-shape",
                f"{state.name} matches {message_set.name} but is not a dataclass; no actor is built.",
                declaration=state.name,
                node=state.node,
            )
            continue

        if options.handler_method not in body_names(state.node):
            report.warning(
                "missing-handler",
                f"{state.name} does not define {options.handler_method}(); "
                "the dispatch loop expects it to be inherited.",
                declaration=state.name,
                node=state.node,
            )

        paired.add(message_set.name)
        contexts.append(ActorContext(name=state.name, message_set=message_set, state=state))

    for message_set in message_sets.values():
        if message_set.requests and message_set.name not in paired:
            report.warning(
                "orphan-message-set",
                f"{message_set.name} has requests but no state class serves it.",
                declaration=message_set.name,
                node=message_set.node,
            )

    return contexts


def _match(
    state: Declaration,
    message_sets: Mapping[str, MessageSet],
    by_actor_name: Mapping[str, MessageSet],
    report: DiagnosticReport,
) -> Optional[MessageSet]:
    link = state.link
    if link is None:
        message_set = by_actor_name.get(state.name)
        if message_set is None or not message_set.requests:
            return None
        return message_set

    message_set = message_sets.get(link)
    if message_set is None:
        report.error(
            "unknown-link",
            f"{state.name} serves {link}, which is not a message set in this module.",
            declaration=state.name,
            node=state.node,
        )
        return None
    if not message_set.requests:
        report.error(
            "empty-link",
            f"{state.name} serves {link}, which has no request variants.",
            declaration=state.name,
            node=state.node,
        )
        return None
    return message_set
