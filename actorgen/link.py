from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

C = TypeVar("C", bound=type)


def serves(message_set: Any) -> Callable[[C], C]:
    """
    Explicitly link a state class to its message set.

    The synthesizer reads this decorator from source and pairs the two classes
    regardless of their names. At run time it only records the link.

    Example
    -------
    @serves(CounterRequests)
    @dataclass
    class Counter:
        value: int = 0
    """

    def decorate(cls: C) -> C:
        cls.__actor_messages__ = message_set
        return cls

    return decorate
