"""
FastAPI application — local LastFast API.
Runs on http://127.0.0.1:8765 by default.

Singletons (store, controller, scheduler, timeline provider) live on
app.state so that each call to create_app() produces a fully independent
instance with no shared module-level globals. This makes test isolation
straightforward.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..actions.fasting import FastingController
from ..actions.intents import FastingIntents
from ..actions.live_status import LiveStatus
from ..config import config
from ..errors import AlreadyFastingError, InvalidCorrectionError, SessionNotFoundError, SnapshotError
from ..scheduling.notifications import LocalNotificationCenter, NotificationScheduler
from ..scheduling.timeline import TimelineProvider
from ..settings import GOAL_STORAGE_KEY, get_settings, saved_goal_minutes, update_settings
from ..store.sessions import SessionStore


# ---------------------------------------------------------------------------
# Lifespan — initialises and tears down all per-app state
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    db_path = getattr(app.state, "db_path", None) or config.data_dir / config.sessions_db
    store = SessionStore(db_path)
    center = LocalNotificationCenter()
    live = LiveStatus(enabled=config.live_status_enabled)
    controller = FastingController(
        store,
        NotificationScheduler(center, tz=config.tz),
        live,
        saved_goal=saved_goal_minutes,
        remember_goal=lambda goal: update_settings({GOAL_STORAGE_KEY: goal}),
    )

    app.state.store = store
    app.state.notification_center = center
    app.state.live_status = live
    app.state.controller = controller
    app.state.intents = FastingIntents(controller, tz=config.tz)
    app.state.timeline_provider = TimelineProvider(
        store.list_sessions,
        saved_goal_minutes,
        active_entry_count=config.timeline_entry_count,
        active_refresh=timedelta(minutes=config.active_refresh_minutes),
        inactive_refresh=timedelta(minutes=config.inactive_refresh_minutes),
        recent_count=get_settings()["widget_recent_count"],
    )

    # Alerts and the overlay follow whatever fast the store already holds
    controller.resync()

    yield


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(db_path: Optional[Path] = None) -> FastAPI:
    app = FastAPI(
        title="LastFast",
        description="Local fasting session and scheduling API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.db_path = db_path

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000", "null"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SessionNotFoundError)
    async def _not_found(request: Request, exc: SessionNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(InvalidCorrectionError)
    async def _invalid_correction(request: Request, exc: InvalidCorrectionError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(AlreadyFastingError)
    async def _already_fasting(request: Request, exc: AlreadyFastingError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(SnapshotError)
    async def _snapshot_error(request: Request, exc: SnapshotError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    from .routers import fasts, history, intents, settings, snapshot, timeline

    app.include_router(fasts.router)
    app.include_router(history.router)
    app.include_router(timeline.router)
    app.include_router(intents.router)
    app.include_router(settings.router)
    app.include_router(snapshot.router)

    @app.get("/health")
    def health(request: Request):
        live = getattr(request.app.state, "live_status", None)
        return {
            "status": "ok",
            "version": "0.1.0",
            "live_status": bool(live and live.enabled),
        }

    return app


app = create_app()
