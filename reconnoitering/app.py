from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from starlette.middleware.sessions import SessionMiddleware

from .auth.dependencies import get_db
from .config import DEFAULT_SETTINGS, Settings
from .errors import install_error_handlers
from .routers import admin, auth, catalogue, exhibitions, outreach, user
from .store import open_database
from .store.base import Database

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Build the API.

    *database* defaults to the store selected by ``settings.store_backend``;
    tests pass a prepared in-memory one.
    """
    settings = settings or DEFAULT_SETTINGS
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.db.close()

    app = FastAPI(title="Reconnoitering API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = database if database is not None else open_database(settings)
    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret)
    install_error_handlers(app)

    # ── Public endpoints ─────────────────────────────────────────────────

    @app.get("/health")
    def health(db: Database = Depends(get_db)) -> dict[str, str]:
        return {"status": "ok", "store": db.backend}

    for module in (exhibitions, catalogue, outreach, auth, user, admin):
        app.include_router(module.router)

    logger.info("Reconnoitering API ready (%s store)", app.state.db.backend)
    return app
