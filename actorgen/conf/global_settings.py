from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Settings:
    """
    Default synthesis settings.

    Point `ACTORGEN_SETTINGS_MODULE` at another settings object to change the
    defaults for a whole project; `SynthesisOptions` overrides them per call.

    Attributes
    ----------
    message_suffix:
        Suffix that marks a message set and is stripped to get the actor name.
    reply_field:
        Reserved field name designating a variant's reply.
    handle_prefix:
        Prefix of the generated handle class name.
    no_wait_suffix:
        Appended to a round-trip accessor name to get the fire-and-forget one.
    receiver_field:
        Field added to the state to hold the mailbox receiver.
    handler_method:
        Per-message handler the dispatch loop awaits on the state.
    constructor_name:
        Public constructor classmethod on the handle.
    state_constructor:
        Private constructor classmethod added to the state.
    dispatch_method:
        Dispatch loop method added to the state.
    runtime_module:
        Module the generated code imports its runtime support from.
    runtime_alias:
        Name the runtime module is bound to in generated code.
    strict:
        Treat warnings as errors.
    """

    message_suffix: str = "Msg"
    reply_field: str = "resp"
    handle_prefix: str = "Actor"
    no_wait_suffix: str = "_no_wait"
    receiver_field: str = "receiver"
    handler_method: str = "process"
    constructor_name: str = "new"
    state_constructor: str = "_from_mailbox"
    dispatch_method: str = "_run_mailbox"
    runtime_module: str = "actorgen"
    runtime_alias: str = "_actorgen"
    strict: bool = False


settings = Settings()
