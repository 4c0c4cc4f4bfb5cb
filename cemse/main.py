"""Main FastAPI application."""

from contextlib import asynccontextmanager

import sentry_sdk
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from cemse.api.routes import api_router
from cemse.config import AuthMode, Settings, settings
from cemse.core.exceptions import register_exception_handlers
from cemse.core.logging import setup_logging
from cemse.core.security import TokenVerifier
from cemse.db.session import AsyncSessionLocal, engine, init_db
from cemse.services.provisioning import ensure_default_municipalities

# Setup logging
setup_logging()
logger = structlog.get_logger(__name__)

# Initialize Sentry for error tracking (only if DSN is properly configured)
if settings.SENTRY_DSN and settings.SENTRY_DSN.startswith("https://"):
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(
                level=None,
                event_level="ERROR",
            ),
        ],
        release=settings.APP_VERSION,
        attach_stacktrace=True,
        send_default_pii=False,
    )
else:
    logger.info("sentry_disabled")


async def seed_defaults() -> None:
    async with AsyncSessionLocal() as session:
        municipalities = await ensure_default_municipalities(session)
        await session.commit()
    logger.info("default_municipalities_seeded", count=len(municipalities))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    await init_db()
    config: Settings = app.state.settings
    if config.SEED_DEFAULTS_ON_STARTUP:
        await seed_defaults()
    logger.info(
        "application_started",
        environment=config.ENVIRONMENT,
        auth_mode=app.state.token_verifier.mode.value,
    )
    yield
    # Shutdown
    await engine.dispose()


def create_app(config: Settings = settings) -> FastAPI:
    """Build the application.

    Per-request behavior (auth mode, cookie, error detail) follows ``config``.
    The engine, logging and Sentry are process-wide and read the global settings.
    """
    app = FastAPI(
        title=config.APP_NAME,
        version=config.APP_VERSION,
        description="Company registration and job offer publishing for the CEMSE platform",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.settings = config
    app.state.token_verifier = TokenVerifier.from_settings(config)
    if config.AUTH_MODE == AuthMode.DEVELOPMENT:
        logger.warning("development_auth_mode_enabled")

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include API router
    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": config.ENVIRONMENT,
            "version": config.APP_VERSION,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cemse.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
    )
