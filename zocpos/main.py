# zocpos/main.py
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from zocpos.middleware import RequestIdMiddleware
from zocpos.db import Database
from zocpos.config import Settings, get_settings
from zocpos.errors import register_exception_handlers

from zocpos.routers import orders, menu, billing, analytics, dashboard, health

API_PREFIX = "/api"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="ZOC POS API", version="1.0.0")
    app.state.settings = settings
    app.state.db = Database(settings)

    @app.on_event("startup")
    def open_db():
        app.state.db.open()

    @app.on_event("shutdown")
    def close_db():
        app.state.db.close()

    register_exception_handlers(app)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(orders.router, prefix=API_PREFIX)
    app.include_router(menu.router, prefix=API_PREFIX)
    app.include_router(billing.router, prefix=API_PREFIX)
    app.include_router(analytics.router, prefix=API_PREFIX)
    app.include_router(dashboard.router, prefix=API_PREFIX)
    return app


def run() -> None:
    import uvicorn
    uvicorn.run("zocpos.main:create_app", factory=True, host="0.0.0.0", port=8000)
