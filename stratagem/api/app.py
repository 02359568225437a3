"""
FastAPI Application - REST gateway for the abstract strategy games platform.

Endpoints (all API routes are mounted under /v1):
    GET    /health                                 Liveness probe
    GET    /docs, /openapi.json                    Swagger UI and schema
    GET    /v1/games[/{gameId}]                    Catalog
    *      /v1/game-instances/...                  Play (bearer token required)
    GET    /v1/players/{playerId}[/games]          Profiles and history
    *      /v1/challenges, /v1/standing-challenges Challenges
    *      /v1/tournaments/...                     Tournaments
    *      /v1/events/...                          Organized events
    *      /v1/explorations, /v1/playground, ...   Analysis boards, notes, comments
    *      /v1/push/...                            Push subscriptions and settings
    *      /v1/federation/...                      External servers
    *      /v1/webhooks                            Webhooks (bearer token required)
    *      /v1/bot/...                             Bot stub
    GET    /v1/query, POST /v1/authQuery           Legacy dispatchers

Request pipeline, outermost first:
    CORS -> request id + access log -> identity -> rate limit -> router

All responses are JSON. Failures use the envelope
``{"error": {"code", "message", "details"}, "timestamp", "requestId"}``.

Run with: uvicorn stratagem.api.app:app
"""

from contextlib import asynccontextmanager
from dataclasses import fields
from typing import Optional
import asyncio
import contextlib
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import RedirectResponse

from .. import __version__
from ..config import Settings
from ..services.models import new_id, utc_now_iso
from ..services.registry import ServiceRegistry, build_mock_registry
from .auth import install_identity_middleware
from .errors import REQUEST_ID_HEADER, install_error_handlers
from .ratelimit import FixedWindowRateLimiter, install_rate_limit, sweep_periodically
from .routes import ROUTERS
from .schemas import HealthResponse

logger = logging.getLogger(__name__)

API_PREFIX = "/v1"

PROTECTED_PREFIXES = (
    f"{API_PREFIX}/game-instances",
    f"{API_PREFIX}/webhooks",
    f"{API_PREFIX}/authQuery",
)

TAGS = [
    {"name": "System", "description": "Health and documentation"},
    {"name": "Games", "description": "Game catalog"},
    {"name": "Game Instances", "description": "Create and play game instances. Requires a bearer token."},
    {"name": "Players", "description": "Player profiles and game history"},
    {"name": "Challenges", "description": "Directed, open and standing challenges"},
    {"name": "Tournaments", "description": "Tournament registration, rounds and standings"},
    {"name": "Events", "description": "Organized events with manual pairings"},
    {"name": "Explorations", "description": "Saved analysis, playground, notes and comments"},
    {"name": "Push Notifications", "description": "Push subscriptions and notification preferences"},
    {"name": "Federation", "description": "Games hosted on external servers"},
    {"name": "Webhooks", "description": "Webhook subscriptions. Requires a bearer token."},
    {"name": "Bot", "description": "Opponent AI stub"},
    {"name": "Legacy", "description": "AbstractPlay compatible query dispatchers"},
]

DESCRIPTION = """
REST API for an abstract strategy games platform.

## Authentication

Send `Authorization: Bearer <token>`. Game instance, webhook and
`authQuery` routes reject requests without a known token.

## Rate limiting

Requests under `/v1` are counted per client in a fixed window. Every
response carries `X-RateLimit-Limit`, `X-RateLimit-Remaining` and
`X-RateLimit-Reset`; rejected requests get 429 and `Retry-After`.

## Error Codes

| Code | Description |
|------|-------------|
| `VALIDATION_ERROR` | Request failed schema validation |
| `UNAUTHORIZED` | Missing or unknown bearer token |
| `FORBIDDEN` | Caller may not perform the operation |
| `NOT_FOUND` | Route or resource does not exist |
| `RATE_LIMIT_EXCEEDED` | Too many requests in the current window |
| `INTERNAL_ERROR` | Unexpected server failure |
"""


def create_app(settings: Optional[Settings] = None, registry: Optional[ServiceRegistry] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Process settings (read from the environment if not provided)
        registry: Service registry (every mock service if not provided)

    Returns:
        FastAPI application instance

    Raises:
        ServiceConfigurationError: if the registry lacks a required service
    """
    settings = settings or Settings.from_env()
    registry = registry or build_mock_registry()
    services = registry.get_all()
    limiter = FixedWindowRateLimiter(settings.rate_limit_window_ms, settings.rate_limit_max)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = asyncio.create_task(sweep_periodically(limiter, settings.rate_limit_sweep_seconds))
        logger.info(
            "Stratagem API %s started (%s), services: %s",
            __version__,
            settings.env,
            ", ".join(f"{f.name}={type(getattr(services, f.name)).__name__}" for f in fields(services)),
        )
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper

    app = FastAPI(
        title="Abstract Strategy Games API",
        description=DESCRIPTION,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=TAGS,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = services
    app.state.rate_limiter = limiter

    # =========================================================================
    # Middleware (last added runs first)
    # =========================================================================

    install_rate_limit(app, limiter, prefix=API_PREFIX)
    install_identity_middleware(app, settings)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_id()
        request.state.request_id = request_id
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.info(
                "%s %s 500 %.1fms %s",
                request.method, request.url.path, (time.perf_counter() - started) * 1000, request_id,
            )
            raise
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "%s %s %d %.1fms %s",
            request.method, request.url.path, response.status_code,
            (time.perf_counter() - started) * 1000, request_id,
        )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            REQUEST_ID_HEADER,
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            "Retry-After",
        ],
    )

    install_error_handlers(app)

    for router in ROUTERS:
        app.include_router(router, prefix=API_PREFIX)

    # =========================================================================
    # System
    # =========================================================================

    @app.get("/health", response_model=HealthResponse, tags=["System"], summary="Health check")
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(status="ok", timestamp=utc_now_iso(), version=__version__)

    @app.get("/", include_in_schema=False)
    async def root():
        return RedirectResponse(url="/docs")

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
            tags=TAGS,
            servers=[{"url": server_root(settings.base_url)}],
        )
        components = schema.setdefault("components", {})
        components.setdefault("securitySchemes", {})["bearerAuth"] = {
            "type": "http",
            "scheme": "bearer",
        }
        for path, operations in schema.get("paths", {}).items():
            if path.startswith(PROTECTED_PREFIXES):
                for operation in operations.values():
                    operation["security"] = [{"bearerAuth": []}]
        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi

    return app


def server_root(base_url: str) -> str:
    """Strip the API prefix from the advertised base URL; paths already carry it."""
    base = base_url.rstrip("/")
    if base.endswith(API_PREFIX):
        base = base[: -len(API_PREFIX)]
    return base or "/"


# For running directly: uvicorn stratagem.api.app:app
app = create_app()
