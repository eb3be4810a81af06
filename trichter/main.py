import asyncio
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from trichter.api.router import api_router
from trichter.core.config import Settings, get_settings
from trichter.core.log import configure_logging
from trichter.infra.realtime import NotificationHub
from trichter.infra.repositories import InMemoryRunRepository

logger = structlog.get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    settings.validate_security_settings()
    configure_logging(settings.log_level, json_logs=settings.log_json)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One hub per process, handed to handlers through app.state.
        hub = NotificationHub()
        hub.start()
        app.state.realtime_hub = hub
        app.state.run_repository = InMemoryRunRepository()

        yield

        # Graceful shutdown: flush pending notifications, then stop dispatching.
        try:
            await asyncio.wait_for(
                hub.stop(), timeout=settings.realtime_drain_timeout_seconds
            )
        except TimeoutError:
            logger.warning(
                "notification_hub_drain_timeout",
                timeout=settings.realtime_drain_timeout_seconds,
            )

    app = FastAPI(
        title="Trichter Runs API",
        version="0.1.0",
        docs_url="/docs" if settings.app_env != "production" else None,
        redoc_url="/redoc" if settings.app_env != "production" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    if settings.trusted_hosts:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=settings.trusted_hosts,
        )

    if settings.force_https:
        app.add_middleware(HTTPSRedirectMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["Accept", "Authorization", "Content-Type"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy",
            "strict-origin-when-cross-origin",
        )
        if settings.force_https:
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains",
            )
        return response

    app.include_router(api_router, prefix="/api")

    @app.get("/", tags=["meta"])
    async def root() -> dict[str, str]:
        return {"service": "trichter-api", "status": "ok"}

    return app


app = create_app()
