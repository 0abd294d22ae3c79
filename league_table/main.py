# league_table/main.py
from __future__ import annotations

import json
import logging
import time
import uuid

from fastapi import FastAPI, Request

from league_table import models  # noqa: F401  (import registers models with Base)

# --- DB bootstrapping: create tables at startup ---
from league_table.db import Base, engine

from . import config

# Routers
from .routers import (
    ai,
    health,
    league,
    matches,
    standings,
    teams,
)

# ---------- App ----------
app = FastAPI(title="League Table", version="0.1.0")


# Create tables once on app start
@app.on_event("startup")
def _create_tables() -> None:
    Base.metadata.create_all(bind=engine)


# ---------- Minimal structured logging ----------
logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO))
logger = logging.getLogger("league_table")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    duration_ms = (time.perf_counter() - start) * 1000.0
    log_obj = {
        "msg": "request",
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "duration_ms": round(duration_ms, 2),
        "idempotency_key": request.headers.get("Idempotency-Key") or None,
    }
    logger.info(json.dumps(log_obj, separators=(",", ":")))
    return response


def _include_router_flex(app: FastAPI, module) -> None:
    for attr in ("router", "route"):
        if hasattr(module, attr):
            app.include_router(getattr(module, attr))
            return
    name = getattr(module, "__name__", str(module))
    raise RuntimeError(f"Module {name} does not define `router` or `route`")


# ---------- Include Routers ----------
_include_router_flex(app, health)  # /health
_include_router_flex(app, league)  # /leagues
_include_router_flex(app, teams)  # /leagues/{id}/teams, /teams
_include_router_flex(app, matches)  # /leagues/{id}/matches, /matches
_include_router_flex(app, standings)  # /standings
_include_router_flex(app, ai)  # /ai
