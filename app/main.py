import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import convert, health, rates, ui
from .services.rates.cache_service import RateCache, build_rate_cache
from .services.rates.conversion import ConversionError


def create_app(
    settings_override: Settings | None = None, rate_cache: RateCache | None = None
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    rate_cache: inject a prebuilt cache (fake provider / clock in tests);
    otherwise one is built from settings and owned by this app instance.
    """
    settings = settings_override or get_settings()
    # Initialize logging early
    init_logging(debug=settings.debug)

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.state.rate_cache = rate_cache or build_rate_cache(settings)

    # Middleware (request id / structured logging, CORS for browser clients)
    app.middleware("http")(request_context_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(ConversionError, errors.conversion_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(ui.router)
    app.include_router(health.router)
    app.include_router(convert.router)
    app.include_router(rates.router)

    logging.getLogger("app").info(
        "%s v%s ready (base %s, %d currencies, cache %ss)",
        settings.app_name,
        settings.version,
        settings.base_currency,
        len(settings.supported_currencies),
        settings.rates_cache_ttl_seconds,
    )
    return app


def run() -> None:
    """Console entry point; uvicorn handles SIGINT/SIGTERM shutdown."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
