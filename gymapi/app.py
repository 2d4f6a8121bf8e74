from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from gymcore.config import get_settings
from gymcore.database import Base, engine
from gymcore.errors import add_error_middleware, register_error_handlers
from gymcore.logging_middleware import add_audit_middleware, configure_logging
from gymcore.rate_limit import apply_rate_limiter

from .routers import auth, facilities, finance, gym, marketplace, members, platform, programs

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    settings.validate_for_startup()
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    logger.info("GymHub API ready (environment=%s)", settings.environment)
    yield


def create_app() -> FastAPI:
    configure_logging()
    fastapi_app = FastAPI(title="GymHub API", version="1.0.0", lifespan=lifespan)
    add_error_middleware(fastapi_app)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    apply_rate_limiter(fastapi_app)
    add_audit_middleware(fastapi_app, "api")
    register_error_handlers(fastapi_app)

    @fastapi_app.get("/api/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "OK", "message": "GymHub API is running"}

    for module in (auth, platform, members, programs, facilities, finance, gym, marketplace):
        for router in module.routers:
            fastapi_app.include_router(router)

    if settings.metrics_enabled:
        Instrumentator().instrument(fastapi_app).expose(fastapi_app, include_in_schema=False)
    return fastapi_app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("gymapi.app:app", host="0.0.0.0", port=settings.port)
