import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from api.routes import auth, filters, issues, mcp, repositories
from app.config import settings
from app.dependencies import get_auth_service, get_mcp_service
from app.logger import setup_logging

setup_logging(level=settings.log_level, log_file=settings.log_file or None)
logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str
    services: dict


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    logger.info("Starting GitHub Issue Manager...")
    mcp_service = get_mcp_service()
    try:
        mcp_service.start()
        if not get_auth_service().is_authenticated:
            logger.warning("No GitHub token configured - issue endpoints will return 401 until one is set")
    except Exception as e:
        logger.error(f"Error during startup: {e}")

    yield

    logger.info("Shutting down application...")
    mcp_service.stop()
    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title="GitHub Issue Manager",
        description="Browse GitHub repositories, filter/export issues and run bulk issue operations",
        version="1.0.0",
        lifespan=app_lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router)
    app.include_router(mcp.router)
    app.include_router(repositories.router)
    app.include_router(issues.router)
    app.include_router(filters.router)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Configuration status of the backing services."""
        services = {
            "github_token": get_auth_service().is_authenticated,
            "mcp": get_mcp_service().is_running,
        }
        overall_status = "healthy" if all(services.values()) else "degraded"
        return HealthResponse(status=overall_status, services=services)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.server_host, port=settings.server_port)
