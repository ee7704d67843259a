"""
Hooks component - Named filter chains for link customization.
"""

from ._impl import DEFAULT_PRIORITY, FilterFn, HookRegistry, create_hook_registry
from .ports import HooksPort

__all__ = [
    "DEFAULT_PRIORITY",
    "FilterFn",
    "HookRegistry",
    "HooksPort",
    "create_hook_registry",
]
