from __future__ import annotations

import ast

from ..handle import ActorHandle
from .diagnostics import DiagnosticReport
from .naming import escape_keyword, to_snake_case
from .options import SynthesisOptions
from .synthesizer import SynthesizedActor

ROUND_TRIP_TEMPLATE = """
async def {method}(self, msg: {variant_ref}, *, timeout: float | None = None) -> {reply_type}:
    if type(msg) is not {variant_ref}:
        raise {rt}.InvalidMessageType({variant_ref}, msg)
    with {rt}.oneshot() as reply:
        msg.{reply_field} = reply.slot
        try:
            self._send(msg)
        except {rt}.SendFailed:
            reply.slot.close()
            raise
        return await reply.wait(timeout)
"""

NO_WAIT_TEMPLATE = """
async def {method}(self, msg: {variant_ref}) -> None:
    if type(msg) is not {variant_ref}:
        raise {rt}.InvalidMessageType({variant_ref}, msg)
    self._send(msg)
"""

RESERVED = frozenset(name for name in dir(ActorHandle) if not name.startswith("__"))


def generate_accessors(
    actor: SynthesizedActor,
    options: SynthesisOptions,
    report: DiagnosticReport,
) -> None:
    """Add a round-trip and a fire-and-forget method per request to the handle."""
    message_set = actor.context.message_set
    used = set(RESERVED) | {options.constructor_name}

    for request in actor.context.requests.values():
        base = to_snake_case(request.variant)
        method = escape_keyword(base)
        no_wait = escape_keyword(f"{base}{options.no_wait_suffix}")
        if method != base:
            report.info(
                "accessor-renamed",
                f"{message_set.name}.{request.variant} maps to the keyword {base!r}; "
                f"its accessor is named {method!r}.",
                declaration=message_set.name,
                node=request.node,
            )

        clashes = [name for name in (method, no_wait) if name in used]
        if clashes:
            report.error(
                "name-collision",
                f"{message_set.name}.{request.variant} would generate {', '.join(clashes)} on "
                f"{actor.handle_name}, which is already taken.",
                declaration=message_set.name,
                node=request.node,
            )
            continue

        params = {
            "rt": options.runtime_alias,
            "variant_ref": f"{message_set.name}.{request.variant}",
            "reply_type": ast.unparse(request.reply_type),
            "reply_field": options.reply_field,
        }
        actor.handle.body.append(_function(ROUND_TRIP_TEMPLATE.format(method=method, **params)))
        actor.handle.body.append(_function(NO_WAIT_TEMPLATE.format(method=no_wait, **params)))
        used.update((method, no_wait))
        actor.methods.extend((method, no_wait))


def _function(source: str) -> ast.stmt:
    return ast.parse(source).body[0]
