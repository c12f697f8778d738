"""Main FastAPI application: dashboard API plus the background monitor."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings, missing_required_settings
from .database import init_db, close_db
from .routers import status_router, settings_router, checks_router
from .services.chat_commands import health_command_handler
from .services.discord_gateway import discord_gateway
from .services.scheduler import scheduler_service
from .services.store import monitor_store
from .services.transitions import transition_policy

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

GATEWAY_READY_TIMEOUT_SECONDS = 60


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    missing = missing_required_settings()
    if missing:
        raise RuntimeError(
            "Missing required environment variables: " + ", ".join(name.upper() for name in missing)
        )

    logger.info(f"Starting MaxyWatch for {settings.target_name}")

    await init_db()
    # Creates the settings row on a fresh database
    await monitor_store.get_settings()
    logger.info("Database initialized")

    await discord_gateway.start()
    await discord_gateway.wait_until_ready(timeout=GATEWAY_READY_TIMEOUT_SECONDS)

    await transition_policy.initialize()
    await scheduler_service.start()
    health_command_handler.start()

    yield

    await health_command_handler.stop()
    await scheduler_service.stop()
    await discord_gateway.stop()
    await close_db()
    logger.info("Shutdown complete")


def create_app(use_lifespan: bool = True) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="MaxyWatch",
        description="Liveness monitor for a chat bot",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict to your domain
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(status_router)
    app.include_router(settings_router)
    app.include_router(checks_router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.web_port)
