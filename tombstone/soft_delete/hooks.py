"""
Hook chains for soft delete transitions.

Guards run before a transition writes and may abort it by returning
``HookOutcome.ABORT``. Observers run after a successful write and cannot
abort. Chains are resolved once at registration into immutable tuples.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)


class HookOutcome(str, Enum):
    """Return value of a guard hook."""

    ALLOW = "allow"
    ABORT = "abort"


# Guard signature: (record) -> HookOutcome | None, where None means ALLOW
Guard = Callable[[Any], Optional[HookOutcome]]
# Observer signature: (record) -> None
Observer = Callable[[Any], Any]

HOOK_NAMES = (
    "before_soft_delete",
    "after_soft_delete",
    "before_restore",
    "after_restore",
)


@dataclass(frozen=True)
class HookTable:
    """Ordered guard and observer chains for one record type."""

    before_soft_delete: Tuple[Guard, ...] = ()
    after_soft_delete: Tuple[Observer, ...] = ()
    before_restore: Tuple[Guard, ...] = ()
    after_restore: Tuple[Observer, ...] = ()

    @classmethod
    def build(cls, **chains: Iterable[Callable[..., Any]]) -> "HookTable":
        """
        Create a hook table from lists of callables.

        Args:
            **chains: Callables keyed by hook name, in registration order

        Returns:
            Immutable hook table

        Raises:
            ValueError: Unknown hook name
            TypeError: A hook is not callable
        """
        resolved = {}
        for name, hooks in chains.items():
            if name not in HOOK_NAMES:
                raise ValueError(
                    f"Unknown hook '{name}'. Expected one of: {', '.join(HOOK_NAMES)}"
                )
            hooks = tuple(hooks or ())
            for hook in hooks:
                if not callable(hook):
                    raise TypeError(f"Hook registered for '{name}' is not callable")
            resolved[name] = hooks
        return cls(**resolved)


def run_guards(guards: Tuple[Guard, ...], record: Any) -> bool:
    """
    Run guards in order, stopping at the first abort.

    Returns:
        True if every guard allowed the transition
    """
    for guard in guards:
        outcome = guard(record)
        if outcome is None or outcome == HookOutcome.ALLOW:
            continue
        if outcome == HookOutcome.ABORT:
            logger.info(
                f"Guard {getattr(guard, '__name__', guard)!s} aborted transition "
                f"of {record!r}"
            )
            return False
        raise TypeError(
            f"Guard {getattr(guard, '__name__', guard)!s} returned {outcome!r}; "
            "expected HookOutcome or None"
        )
    return True


def run_observers(observers: Tuple[Observer, ...], record: Any) -> None:
    """Run observers in order; return values are ignored."""
    for observer in observers:
        observer(record)
