import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI

from permastruct.adapters.sqlite.migrator import SQLiteMigrator
from permastruct.api.deps import get_settings
from permastruct.rules.loader import load_rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and migrate on startup (fail-fast)
    try:
        Path(settings.db_path).parent.mkdir(parents=True, exist_ok=True)
        load_rules(settings.rules_path)
        logger.info("Rules loaded from %s", settings.rules_path)
        SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
    except Exception as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    yield


app = FastAPI(
    title="Permastruct API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from permastruct.api.routes import adjacency, links  # noqa: E402

app.include_router(links.router, prefix="/api/links", tags=["Links"])
app.include_router(adjacency.router, prefix="/api/adjacent", tags=["Adjacent"])


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
