import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from cms_admin.api.v1.routes import private_router, public_router
from cms_admin.api.v1.routes.content_types import limiter
from cms_admin.auth_utils import get_current_principal
from cms_admin.config import LogFormat, get_settings
from cms_admin.db.database import get_engine
from cms_admin.db.init_db import init_db
from cms_admin.import_exceptions import ContentTypeImportError
from cms_admin.structlog_config import configure_structlog, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app):

    logging.info("Starting application...")

    logging.info("Loading settings...")
    try:
        settings = get_settings()
    except ValidationError as e:
        logging.critical(f"Configuration error:\n{e}")
        raise RuntimeError(f"Configuration error: {e}")
    logging.info("Loading settings complete.")

    configure_structlog(
        service_name="cms-admin-backend",
        log_level=settings.LOG_LEVEL,
        development_mode=settings.LOG_FORMAT == LogFormat.CONSOLE,
    )
    logger.info(
        "Logging configured",
        log_level=logging.getLevelName(settings.LOG_LEVEL),
        log_format=settings.LOG_FORMAT.value,
    )

    if settings.CREATE_TABLES_ON_STARTUP:
        init_db(get_engine())

    logger.info("Application startup complete")
    yield


app = FastAPI(
    title="CMS Admin API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Configure rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(ContentTypeImportError)
async def content_type_import_error_handler(
    request: Request, exc: ContentTypeImportError
):
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


# Public endpoints (e.g., /v1/health)
app.include_router(public_router, prefix="/v1")

# Protected endpoints (all others)
app.include_router(
    private_router, prefix="/v1", dependencies=[Depends(get_current_principal)]
)
