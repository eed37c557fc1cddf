import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .db.migrate import apply_migrations
from .core import errors
from .routers import health, ledger, rates
from .services.realtime import ChangeFeed


def create_app(settings_override: Settings | None = None) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB, fake API key). Falls back to cached get_settings().
    """
    if settings_override is not None:
        settings = settings_override
        settings.init_post_load()
    else:
        settings = get_settings()
    init_logging(debug=settings.debug)

    # Ensure database schema (idempotent) so test-injected fresh DBs have tables
    try:
        apply_migrations(settings.db_path)  # type: ignore[arg-type]
    except Exception:
        logging.getLogger("fxdash").exception("failed to apply migrations on startup")
        raise

    if not settings.exchange_rates_api_key:
        logging.getLogger("fxdash").warning(
            "EXCHANGE_RATES_API_KEY is not set; exchange rate endpoints will fail"
        )

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.state.change_feed = ChangeFeed()

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(errors.FxDashError, errors.domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, errors.not_found_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(rates.router)
    app.include_router(ledger.router)

    @app.get("/")
    async def root():
        return {"message": "FX Dashboard API", "version": settings.version}

    return app
