# app/main.py
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.clients import Clients, build_clients
from app.core.config import Settings, get_settings
from app.core.database import init_db
from app.core.exceptions import (
    TicketingError,
    http_error_handler,
    request_validation_error_handler,
    ticketing_error_handler,
)
from app.core.logging import configure_logging
from app.notifications.scheduler import build_scheduler, shutdown_scheduler, start_scheduler
from app.ticket.routes import router as ticket_router

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, clients: Clients | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    clients = clients or build_clients(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
        init_db(clients.engine)
        scheduler = None
        if settings.SCHEDULER_ENABLED:
            scheduler = build_scheduler(settings, clients.event_queue, clients.dispatcher)
            start_scheduler(scheduler)
        logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
        try:
            yield
        finally:
            if scheduler is not None:
                shutdown_scheduler(scheduler)
            clients.close()

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESC,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.clients = clients

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(TicketingError, ticketing_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    # Routers
    app.include_router(ticket_router)

    # Local attachments are served by the app itself; the directory is created on startup
    if settings.BLOB_BASE_URL.startswith("/"):
        app.mount(
            settings.BLOB_BASE_URL.rstrip("/"),
            StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
            name="uploads",
        )

    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok"}

    return app


app = create_app()
