import logging
import uuid
from contextlib import asynccontextmanager
from functools import partial
from http import HTTPStatus

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mtx_gateway.config import Settings, get_settings
from mtx_gateway.routers import connections, debug, health
from mtx_gateway.schemas.errors import ErrorResponse
from mtx_gateway.services import ConnectionService, SessionCache, UpstreamClient
from mtx_gateway.services.session_cache import build_http_client
from mtx_gateway.utils.errors import GatewayError

logger = logging.getLogger(__name__)


def _error_response(
    status_code: int,
    payload: ErrorResponse,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(exclude_none=True),
        headers=headers,
    )


def _log_banner(settings: Settings) -> None:
    base = f"http://localhost:{settings.PORT}"
    logger.info("Gateway listening on port %s", settings.PORT)
    logger.info("BASE_URL: %s", settings.BASE_URL)
    logger.info("AUTH_USER: %s", settings.AUTH_USER)
    logger.info("Endpoints:")
    logger.info("  GET %s/api/connections?page=1&itemsPerPage=10", base)
    logger.info("  GET %s/api/debug - upstream diagnostics", base)
    logger.info("  GET %s/health - health check", base)


async def _check_upstream(upstream: UpstreamClient) -> None:
    logger.info("Checking upstream API connectivity...")
    try:
        await upstream.check_connection()
    except GatewayError as e:
        logger.warning("Could not connect to the upstream API: %s", e.message)
        logger.warning("Make sure that:")
        logger.warning("  1. the upstream server is running")
        logger.warning("  2. BASE_URL is correct")
        logger.warning("  3. AUTH_USER and AUTH_PASS are correct")
        logger.warning("Or set MOCK_MODE=true to serve synthetic data")
    else:
        logger.info("Upstream API is reachable")


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sessions = SessionCache(factory=partial(build_http_client, transport=transport))
        upstream = UpstreamClient(settings, sessions, transport=transport)
        app.state.settings = settings
        app.state.sessions = sessions
        app.state.upstream = upstream
        app.state.connections = ConnectionService(settings, upstream)

        if settings.mock_enabled:
            logger.warning("MOCK MODE is on: /api/connections serves synthetic data")
        else:
            await _check_upstream(upstream)
        _log_banner(settings)

        yield

        await sessions.aclose()

    app = FastAPI(
        title="MediaMTX Connections Gateway",
        description="Paginated JSON view of upstream RTSP connections",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id(request, call_next):
        request_id = str(uuid.uuid4())
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request, exc: GatewayError):
        return _error_response(
            exc.status_code,
            ErrorResponse(error=exc.code, message=exc.message, hint=exc.hint),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request, exc: StarletteHTTPException):
        code = HTTPStatus(exc.status_code).phrase.lower().replace(" ", "_")
        return _error_response(
            exc.status_code,
            ErrorResponse(error=code, message=str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request, exc: RequestValidationError):
        return _error_response(
            422,
            ErrorResponse(error="validation_error", message=str(exc)),
        )

    app.include_router(health.router)
    app.include_router(connections.router)
    app.include_router(debug.router)

    return app
