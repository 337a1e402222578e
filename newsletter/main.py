"""
Newsletter API Server

Entry point for the FastAPI application.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response

from newsletter import __version__
from newsletter.api import router as api_router
from newsletter.core.config import Settings, get_configuration
from newsletter.core.context import AppContext, build_context
from newsletter.core.errors import ConfigurationError, NewsletterError
from newsletter.core.logging import configure_logging
from newsletter.core.middleware import RequestLoggingMiddleware

log = structlog.get_logger()


async def newsletter_error_handler(request: Request, exc: NewsletterError) -> Response:
    if exc.status_code >= 500:
        log.error("request.failed", status=exc.status_code, error=exc.message, exc_info=exc)
    else:
        log.info("request.rejected", status=exc.status_code, error=exc.message)
    return Response(status_code=exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    log.info("request.rejected", status=400, errors=exc.errors())
    return Response(status_code=400)


def create_app(
    settings: Optional[Settings] = None,
    context: Optional[AppContext] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``context`` is built from ``settings`` (or the loaded configuration) when
    not supplied.
    """
    if context is None:
        context = build_context(settings or get_configuration())

    app = FastAPI(
        title="Newsletter",
        description="Newsletter signup with double opt-in confirmation.",
        version=__version__,
    )
    app.state.context = context

    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(NewsletterError, newsletter_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(api_router)

    @app.on_event("startup")
    async def on_startup():
        log.info(
            "newsletter.starting",
            environment=context.settings.environment.value,
            base_url=context.base_url,
        )

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("newsletter.shutting_down")
        await context.aclose()

    return app


def setup_logging(settings: Settings) -> structlog.typing.FilteringBoundLogger:
    """Configure structlog from ``settings`` and make the result this module's logger."""
    global log
    log = configure_logging("newsletter", settings.logging.level, settings.logging.format)
    return log


def run() -> None:
    """CLI entry point for the server."""
    parser = argparse.ArgumentParser(description="Newsletter subscription server")
    parser.add_argument(
        "-c", "--configuration-dir",
        default=None,
        help="Directory holding base.yaml and <environment>.yaml (default: ./configuration)",
    )
    args = parser.parse_args()
    if args.configuration_dir:
        os.environ["APP_CONFIGURATION_DIR"] = args.configuration_dir

    try:
        settings = get_configuration()
        context = build_context(settings)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)

    setup_logging(settings)
    log.info("newsletter.config_loaded", environment=settings.environment.value)

    app = create_app(context=context)
    uvicorn.run(
        app,
        host=settings.application.host,
        port=settings.application.port,
        log_level=settings.logging.level,
    )


if __name__ == "__main__":
    run()
