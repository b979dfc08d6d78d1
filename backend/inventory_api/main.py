"""FastAPI application bootstrap and router wiring."""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from inventory_api.api.errors import register_exception_handlers
from inventory_api.api.middleware import RateLimitMiddleware, SecurityHeadersMiddleware
from inventory_api.api.routers import auth, health, products
from inventory_api.core.config import Settings, get_settings
from inventory_api.core.logging import configure_logging
from inventory_api.core.security import TokenService
from inventory_api.db.session import build_engine, build_session_factory, init_db
from inventory_api.utils.redis_client import create_redis_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(app.state.engine)
    logger.info(f"{app.state.settings.app_name} started ({app.state.settings.environment})")
    yield
    logger.info("Shutting down, disposing database engine")
    app.state.engine.dispose()
    if app.state.redis is not None:
        app.state.redis.close()


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    """Instantiate the FastAPI app with its own engine, token service and routers."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = engine or build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.token_service = TokenService(settings.jwt_secret, settings.jwt_expires_in)
    app.state.redis = None

    logger.info(f"[CORS] Parsed allowed origins: {settings.cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    if settings.rate_limit_enabled:
        app.state.redis = create_redis_client(
            settings.redis_url, decode_responses=True, socket_connect_timeout=2
        )
        app.add_middleware(
            RateLimitMiddleware,
            redis_client=app.state.redis,
            max_requests=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
        logger.info(
            f"[RateLimit] {settings.rate_limit_requests} requests per "
            f"{settings.rate_limit_window_seconds}s per client"
        )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(products.router, prefix="/api/products", tags=["products"])

    return app


app = create_app()


if __name__ == "__main__":
    import os

    import uvicorn

    port = int(os.getenv("PORT", 5000))
    uvicorn.run(app, host="0.0.0.0", port=port)
