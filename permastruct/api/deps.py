import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from permastruct.adapters.clock import SystemClock
from permastruct.adapters.memory_cache import InMemoryCache
from permastruct.adapters.sqlite.store import SQLiteEntityStore
from permastruct.components.hooks import HookRegistry, create_hook_registry
from permastruct.ports.store import CachePort, ClockPort, EntityStorePort
from permastruct.rules.loader import load_rules
from permastruct.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.db_path = f"{os.environ.get('PERMASTRUCT_DATA_DIR', './data')}/site.db"
        self.rules_path = Path(
            os.environ.get("PERMASTRUCT_RULES", str(self.base_dir / "rules.yaml"))
        )
        self.migrations_dir = self.base_dir / "migrations"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Adapters ---
def get_store(settings: Settings = Depends(get_settings)) -> EntityStorePort:
    return SQLiteEntityStore(settings.db_path)


# One cache per process; adjacency results are shared across requests.
@lru_cache
def get_cache() -> CachePort:
    return InMemoryCache()


# Plugins register on this registry at startup.
@lru_cache
def get_hooks() -> HookRegistry:
    return create_hook_registry()


def get_clock() -> ClockPort:
    return SystemClock()
