import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core import config
from app.core.database import Database
from app.core.middleware import BodySizeLimitMiddleware, SecurityHeadersMiddleware
from app.services.audit_log import configure_audit_logger

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def check_startup_config() -> None:
    """Warn about configuration gaps; requests fail later instead of startup."""
    missing = config.missing_db_settings()
    if missing:
        logger.warning(f"[WARN] Missing DB env vars: {', '.join(missing)}")

    defaults = config.insecure_defaults()
    if defaults:
        logger.warning(f"[WARN] Using development defaults for: {', '.join(defaults)}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown."""
    check_startup_config()
    logger.info(f"[{config.APP_NAME}] ready")

    yield

    app.state.db.dispose()
    logger.info(f"[{config.APP_NAME}] shutting down")


def create_app(db: Optional[Database] = None, table_overrides: Optional[dict] = None):
    """FastAPI application factory."""
    from app.services.litebans import build_record_kinds

    configure_logging()
    configure_audit_logger()

    app = FastAPI(
        title="LiteBans Staff API",
        version=config.APP_VERSION,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.db = db if db is not None else Database()
    app.state.record_kinds = build_record_kinds(table_overrides)

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=config.MAX_BODY_BYTES)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.CORS_ORIGINS) or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from app.routers import auth, punishments, system

    app.include_router(system.router, tags=["System"])
    app.include_router(auth.router, tags=["Auth"])
    app.include_router(punishments.router, tags=["Punishments"])

    return app
