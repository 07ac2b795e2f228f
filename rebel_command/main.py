"""FastAPI application — Rebel Alliance Command backend.

Start with::

    uvicorn rebel_command.main:app --reload --port 3030

Or::

    python -m rebel_command serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from rebel_command.config import settings
from rebel_command.routers import game

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Rebel Alliance Command API",
    description=(
        "Session engine for the Rebel Alliance Command campaign: create a "
        "commander, read the campaign state, and make choices phase by phase."
    ),
    version="1.0.0",
)

# ── CORS: browser clients of the API ────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["content-type"],
)

# ── Register route modules ──────────────────────────────────────────────
app.include_router(game.router)

# ── Built frontend, when present ────────────────────────────────────────
if settings.static_dir.is_dir():
    app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")
    logger.info("Serving frontend from %s", settings.static_dir)


@app.get("/api/health")
async def health():
    """Simple health-check endpoint."""
    return {"status": "ok"}


def run() -> None:
    import uvicorn

    uvicorn.run(
        "rebel_command.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
