from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from visualgenie.config import settings
from visualgenie.routers import projects_router, diagrams_router
from visualgenie.storage import Storage, create_storage
from visualgenie.utils.logging_config import setup_logging, fastapi_logger
from visualgenie.error_handlers import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging()
    fastapi_logger.info(f"Starting {settings.APP_NAME}")
    # Storage is chosen exactly once per process
    if app.state.storage is None:
        app.state.storage = create_storage(settings)
    await app.state.storage.initialize()
    fastapi_logger.info(f"Storage ready: {app.state.storage.kind}")
    yield
    # Shutdown
    fastapi_logger.info("Shutting down application")
    await app.state.storage.close()


def create_app(storage: Optional[Storage] = None) -> FastAPI:
    """
    Build the application.

    Args:
        storage: Backend to serve from. When omitted, the lifespan selects
            one from DATABASE_URL.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Diagram projects: storage API for rendered diagrams",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.storage = storage

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global Exception Handlers
    register_exception_handlers(app)

    # API Routers
    app.include_router(projects_router)
    app.include_router(diagrams_router)

    # Health Check
    @app.get("/health")
    async def health_check(request: Request):
        storage = request.app.state.storage
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "storage": storage.kind if storage else None,
        }

    @app.get("/ready")
    async def readiness_check(request: Request):
        storage = request.app.state.storage
        if storage is None:
            return {"status": "starting", "storage_connected": False}
        health = await storage.health_check()
        return {
            "status": "ready" if health["connected"] else "degraded",
            "storage_connected": health["connected"],
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("visualgenie.main:app", host="0.0.0.0", port=5000, reload=settings.DEBUG)
