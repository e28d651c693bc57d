"""Common FastAPI wiring for the users, spaces and bookings services."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from .config import get_settings
from .database import Base, engine
from .errors import install_error_handlers
from .logging_middleware import add_audit_middleware
from .rate_limit import apply_rate_limiter

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


def create_service_app(title: str, service_name: str, package_logs: bool = False) -> FastAPI:
    fastapi_app = FastAPI(title=title, version="0.3.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    add_audit_middleware(fastapi_app, service_name, package_logs)
    install_error_handlers(fastapi_app)
    if settings.metrics_enabled:
        Instrumentator().instrument(fastapi_app).expose(fastapi_app, include_in_schema=False)

    @fastapi_app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "service": service_name}

    return fastapi_app
