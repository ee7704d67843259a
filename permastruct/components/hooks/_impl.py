"""
HookRegistry - Named, ordered filter chains.

Every link-producing operation hands its result to a named chain of
transformers before returning it. Themes and plugins register transformers
on a registry instance that is injected into each service.

Key behaviors:
- Lower priority runs first; equal priorities keep registration order
- A chain with no transformers returns its input unchanged
- Each transformer receives the current value plus the caller's context args
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from itertools import count
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 10

FilterFn = Callable[..., Any]


@dataclass(frozen=True)
class _Registration:
    priority: int
    sequence: int
    fn: FilterFn


class HookRegistry:
    """
    Filter hook registry.

    One instance per site; pass it to services at construction time.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._filters: dict[str, list[_Registration]] = {}
        self._sequence = count()

    def add_filter(
        self,
        name: str,
        fn: FilterFn,
        priority: int = DEFAULT_PRIORITY,
    ) -> None:
        """Register a transformer on the named chain."""
        chain = self._filters.setdefault(name, [])
        chain.append(_Registration(priority, next(self._sequence), fn))
        chain.sort(key=lambda r: (r.priority, r.sequence))

    register_filter = add_filter

    def remove_filter(
        self,
        name: str,
        fn: FilterFn,
        priority: int | None = None,
    ) -> bool:
        """
        Remove a transformer.

        Returns True if something was removed. When priority is given only
        registrations at that priority are considered.
        """
        chain = self._filters.get(name)
        if not chain:
            return False

        kept = [
            r
            for r in chain
            if not (r.fn == fn and (priority is None or r.priority == priority))
        ]
        removed = len(kept) != len(chain)

        if kept:
            self._filters[name] = kept
        else:
            del self._filters[name]

        return removed

    def has_filter(self, name: str, fn: FilterFn | None = None) -> bool:
        """Check whether the chain has any (or a specific) transformer."""
        chain = self._filters.get(name, [])
        if fn is None:
            return bool(chain)
        return any(r.fn == fn for r in chain)

    def apply_filters(self, name: str, value: Any, *args: Any) -> Any:
        """Run value through the named chain and return the final output."""
        chain = self._filters.get(name)
        if not chain:
            return value

        # Snapshot so transformers can (un)register during the run.
        for registration in list(chain):
            value = registration.fn(value, *args)

        logger.debug("Applied %d filter(s) on %s", len(chain), name)
        return value

    apply_filter = apply_filters

    def clear(self, name: str | None = None) -> None:
        """Drop one chain, or every chain when name is None."""
        if name is None:
            self._filters.clear()
        else:
            self._filters.pop(name, None)


# --- Factory ---


def create_hook_registry() -> HookRegistry:
    """Create an empty HookRegistry."""
    return HookRegistry()
