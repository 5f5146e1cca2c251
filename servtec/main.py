"""
ServTec Bot - FastAPI application
"""
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from servtec import __version__
from servtec.config import Settings, get_settings
from servtec.container import build_bot
from servtec.middleware.logging_middleware import LoggingMiddleware
from servtec.routes import admin, health, tickets, webhook
from servtec.services.bot import BotController
from servtec.services.scheduler import AsyncioScheduler, Scheduler
from servtec.utils.logger import get_logger

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    bot: Optional[BotController] = None,
    scheduler_factory: Optional[Callable[[], Scheduler]] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings (cached settings when None)
        bot: Pre-built bot; built from settings at startup when None
        scheduler_factory: Creates the scheduler started with the app
    """
    settings = settings or get_settings()
    scheduler_factory = scheduler_factory or (lambda: AsyncioScheduler(settings.timezone))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "bot", None) is None:
            app.state.bot = build_bot(settings)

        if settings.scheduler_enabled:
            app.state.bot.start(scheduler_factory())
        else:
            logger.info("Scheduler disabled by configuration")

        yield

        # Timers stop here; in-flight jobs are left to finish
        app.state.bot.stop()

    app = FastAPI(
        title="ServTec Bot",
        description="WhatsApp service-desk bot: ticket intake, lifecycle commands and reminders",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.bot = bot

    # Last added runs outermost: logging wraps CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    app.include_router(health.router)
    app.include_router(webhook.router)
    app.include_router(tickets.router)
    app.include_router(admin.router)

    @app.get("/")
    async def root():
        return {"message": "ServTec Bot API", "version": __version__}

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.app_host, port=settings.app_port)
