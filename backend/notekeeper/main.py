from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from . import __version__
from .api.middleware.security import SecurityMiddleware
from .api.responses import no_content
from .api.v1.router import api_router
from .config import settings
from .errors import NotekeeperError, NotFound, ValidationFailure
from .utils.logging import get_logger, setup_logging

if TYPE_CHECKING:
    from fastapi import Request

logger = get_logger(__name__)


async def validation_failure_handler(request: Request, exc: ValidationFailure):
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={})


async def not_found_handler(request: Request, exc: NotFound):
    logger.info("Not found on %s %s: %s", request.method, request.url.path, exc.message)
    return no_content()


async def notekeeper_error_handler(request: Request, exc: NotekeeperError):
    logger.error(
        "%s %s failed: %s",
        request.method,
        request.url.path,
        exc.message,
        extra={"error_type": type(exc).__name__, **{f"ctx_{k}": str(v) for k, v in exc.context.items()}},
    )
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={})


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title="Notekeeper API",
        debug=settings.debug,
        version=__version__,
        root_path=settings.root_path or "",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Accept",
            "Accept-Language",
            "Content-Language",
            "Content-Type",
            "Authorization",
            "X-Requested-With",
        ],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    # Proxy headers (X-Forwarded-*) when behind ALB/ingress
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

    # Trusted hosts (configure in env for production)
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    # GZip compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(SecurityMiddleware)

    app.add_exception_handler(ValidationFailure, validation_failure_handler)
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(NotekeeperError, notekeeper_error_handler)

    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()
