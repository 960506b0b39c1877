"""
Message-set processing.

Builds each message set's request table (variant -> reply type) and rewrites
the reply field of every request variant into a reply slot:

    resp: int

becomes

    resp: _actorgen.ReplySlot[int] | None = _actorgen.reply_field()

All message sets are processed before any state is looked at, so that pairing
always sees complete request tables.
"""

from __future__ import annotations

import ast
import copy
from dataclasses import dataclass, field
from typing import Optional

from .diagnostics import DiagnosticReport
from .naming import strip_suffix
from .options import SynthesisOptions
from .scanner import Namespace, annotated_fields, dataclass_decorator, is_frozen_dataclass

REPLY_SLOT = "ReplySlot"


@dataclass(frozen=True, slots=True)
class Request:
    """One request kind: a variant and the type its reply carries."""

    variant: str
    reply_type: ast.expr
    node: ast.ClassDef


@dataclass(slots=True)
class MessageSet:
    """
    A processed message set.

    Attributes
    ----------
    name:
        The class identifier, e.g. `CounterMsg`.
    actor_name:
        Logical actor name (`Counter`), or None when the identifier lacks the
        suffix and the set is only reachable through an explicit link.
    requests:
        The request table, in variant source order.
    """

    name: str
    actor_name: Optional[str]
    node: ast.ClassDef
    requests: dict[str, Request] = field(default_factory=dict)


def process_message_sets(
    namespace: Namespace,
    options: SynthesisOptions,
    report: DiagnosticReport,
) -> dict[str, MessageSet]:
    """Process every message-set candidate, keyed by identifier."""
    linked = namespace.linked_message_sets()
    processed: dict[str, MessageSet] = {}

    for name, decl in namespace.message_sets.items():
        actor_name = strip_suffix(name, options.message_suffix)
        if actor_name is None and name not in linked:
            report.info(
                "message-set-suffix",
                f"{name} holds nested classes but does not end with "
                f"{options.message_suffix!r}; it is not treated as a message set.",
                declaration=name,
                node=decl.node,
            )
            continue

        message_set = MessageSet(name=name, actor_name=actor_name, node=decl.node)
        for variant in decl.variants:
            _process_variant(message_set, variant, options, report)

        if not message_set.requests:
            report.warning(
                "empty-message-set",
                f"{name} has no variant with a {options.reply_field!r} field; no actor can be built from it.",
                declaration=name,
                node=decl.node,
            )
        processed[name] = message_set

    return processed


def _process_variant(
    message_set: MessageSet,
    variant: ast.ClassDef,
    options: SynthesisOptions,
    report: DiagnosticReport,
) -> None:
    qualname = f"{message_set.name}.{variant.name}"
    fields = annotated_fields(variant)

    if not fields:
        report.info(
            "control-message",
            f"{qualname} has no named fields; it is a control message and gets no accessor.",
            declaration=message_set.name,
            node=variant,
        )
        return

    reply = next((f for f in fields if f.target.id == options.reply_field), None)
    if reply is None:
        report.warning(
            "missing-reply-field",
            f"{qualname} has named fields but none called {options.reply_field!r}; it gets no accessor.",
            declaration=message_set.name,
            node=variant,
        )
        return

    if is_frozen_dataclass(variant):
        report.error(
            "frozen-variant",
            f"{qualname} is a frozen dataclass; a reply slot cannot be installed into it.",
            declaration=message_set.name,
            node=variant,
        )
        return

    if dataclass_decorator(variant) is None:
        report.warning(
            "variant-shape",
            f"{qualname} is not a dataclass; its reply field will not default to None.",
            declaration=message_set.name,
            node=variant,
        )

    reply_type = unwrap_reply_slot(reply.annotation, options.runtime_alias)
    if reply_type is not None:
        report.info(
            "reply-already-rewritten",
            f"{qualname}.{options.reply_field} is already a reply slot; left unchanged.",
            declaration=message_set.name,
            node=reply,
        )
    else:
        reply_type = copy.deepcopy(reply.annotation)
        rewrite_reply_field(reply, options)

    message_set.requests[variant.name] = Request(variant=variant.name, reply_type=reply_type, node=variant)


def rewrite_reply_field(stmt: ast.AnnAssign, options: SynthesisOptions) -> None:
    """Replace a reply field's type with a reply slot defaulting to None."""
    alias = options.runtime_alias
    original = stmt.annotation

    if isinstance(original, ast.Constant) and isinstance(original.value, str):
        stmt.annotation = ast.Constant(f"{alias}.{REPLY_SLOT}[{original.value}] | None")
    else:
        stmt.annotation = _expr(f"{alias}.{REPLY_SLOT}[{ast.unparse(original)}] | None")

    stmt.value = _expr(f"{alias}.reply_field()")
    stmt.simple = 1


def unwrap_reply_slot(annotation: ast.expr, alias: str) -> Optional[ast.expr]:
    """
    Return the reply type of an already rewritten annotation, else None.

    A string annotation yields a string reply type, so forward references stay
    deferred.
    """
    stringified = isinstance(annotation, ast.Constant) and isinstance(annotation.value, str)
    expr = annotation
    if stringified:
        try:
            expr = _expr(annotation.value)
        except SyntaxError:
            return None

    if isinstance(expr, ast.BinOp) and isinstance(expr.op, ast.BitOr):
        if isinstance(expr.right, ast.Constant) and expr.right.value is None:
            expr = expr.left

    if not isinstance(expr, ast.Subscript):
        return None
    target = expr.value
    if not (
        isinstance(target, ast.Attribute)
        and target.attr == REPLY_SLOT
        and isinstance(target.value, ast.Name)
        and target.value.id == alias
    ):
        return None

    if stringified:
        return ast.Constant(ast.unparse(expr.slice))
    return copy.deepcopy(expr.slice)


def _expr(source: str) -> ast.expr:
    return ast.parse(source, mode="eval").body
