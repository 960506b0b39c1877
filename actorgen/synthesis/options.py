from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from .naming import is_identifier

_IDENTIFIER_OPTIONS = (
    "reply_field",
    "receiver_field",
    "handler_method",
    "constructor_name",
    "state_constructor",
    "dispatch_method",
    "runtime_alias",
)


@dataclass(frozen=True, slots=True)
class SynthesisOptions:
    """
    Per-run synthesis options.

    Build one with `SynthesisOptions.from_settings(...)` to start from the
    configured settings and override a few values. See
    `actorgen.conf.global_settings.Settings` for what each option means.
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

    def __post_init__(self) -> None:
        for name in _IDENTIFIER_OPTIONS:
            value = getattr(self, name)
            if not is_identifier(value):
                raise ValueError(f"Option {name!r} must be a valid identifier, got {value!r}.")
        if not self.message_suffix or not self.message_suffix.isidentifier():
            raise ValueError(f"Invalid message suffix {self.message_suffix!r}.")
        if not is_identifier(f"x{self.no_wait_suffix}"):
            raise ValueError(f"Invalid no-wait suffix {self.no_wait_suffix!r}.")
        if not self.handle_prefix.isidentifier():
            raise ValueError(f"Invalid handle prefix {self.handle_prefix!r}.")
        if not all(is_identifier(part) for part in self.runtime_module.split(".")):
            raise ValueError(f"Invalid runtime module {self.runtime_module!r}.")

    @classmethod
    def from_settings(cls, **overrides: Any) -> "SynthesisOptions":
        """Read defaults from `monkay.settings` and apply `overrides`."""
        from actorgen import monkay

        settings = monkay.settings
        values = {f.name: getattr(settings, f.name, f.default) for f in fields(cls)}
        unknown = set(overrides) - set(values)
        if unknown:
            raise TypeError(f"Unknown synthesis option(s): {', '.join(sorted(unknown))}")
        values.update(overrides)
        return cls(**values)
