"""
Hooks component port definitions.
"""

from __future__ import annotations

from typing import Any, Protocol


class HooksPort(Protocol):
    """What a service needs from a hook registry."""

    def apply_filters(self, name: str, value: Any, *args: Any) -> Any:
        """Run value through the named filter chain."""
        ...
