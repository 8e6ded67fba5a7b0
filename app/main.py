"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config.settings import Settings, get_settings
from app.api.v1.router import api_router
from app.core.authorization import AuthorizationPipeline
from app.core.logging_config import RequestContextLogMiddleware, configure_logging
from app.core.token_validator import TokenValidator, build_token_validator

logger = structlog.get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    token_validator: Optional[TokenValidator] = None,
) -> FastAPI:
    """Build the application with one validator and pipeline for its lifetime."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, json_logs=settings.log_json)

    validator = token_validator or build_token_validator(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown events."""
        logger.info(
            "app_starting",
            app=settings.app_name,
            version=settings.app_version,
            auth_strategy=settings.auth_strategy,
            database_schema=settings.database_schema,
        )
        yield
        await validator.aclose()
        logger.info("app_stopped", app=settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Multi-tenant session and authorization service",
        lifespan=lifespan,
        docs_url=f"{settings.api_v1_prefix}/docs",
        redoc_url=f"{settings.api_v1_prefix}/redoc",
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
    )

    app.state.settings = settings
    app.state.token_validator = validator
    app.state.auth_pipeline = AuthorizationPipeline.for_validator(validator)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextLogMiddleware)

    # Include API router
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
            "auth_strategy": settings.auth_strategy,
        }

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "docs": f"{settings.api_v1_prefix}/docs",
        }

    return app


app = create_app()
