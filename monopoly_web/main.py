#!/usr/bin/env python3
"""
Main entry point for the Monopoly web application
"""

import os
import sys

from aiohttp import web
from dotenv import load_dotenv
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from monopoly_web.core.config import Settings, get_settings
from monopoly_web.core.startup import run_startup_tasks
from monopoly_web.db.base import get_engine
from monopoly_web.db.init_db import init_db

ENGINE_KEY = web.AppKey("engine", AsyncEngine)
SESSION_FACTORY_KEY = web.AppKey("session_factory", async_sessionmaker)
SETTINGS_KEY = web.AppKey("settings", Settings)


def setup_logging(settings: Settings) -> None:
    """Configure loguru sinks: stderr at LOG_LEVEL and a rotating debug file."""
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL)
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    logger.add(os.path.join(settings.LOG_DIR, "monopoly_web_{time}.log"), rotation="10 MB", level="DEBUG")


async def on_startup(app: web.Application) -> None:
    settings = app[SETTINGS_KEY]
    engine = app[ENGINE_KEY]
    logger.info(f"Starting {settings.app_name}...")
    await init_db(engine, seed=settings.SEED_STATIC_DATA)
    await run_startup_tasks(app[SESSION_FACTORY_KEY])


async def on_cleanup(app: web.Application) -> None:
    logger.info("Shutting down, disposing database engine...")
    await app[ENGINE_KEY].dispose()


async def health_handler(request: web.Request) -> web.Response:
    """Health check endpoint: 200 when the database answers, 503 otherwise."""
    try:
        async with request.app[ENGINE_KEY].connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (OSError, SQLAlchemyError) as e:
        logger.error(f"Health check failed: {e}")
        return web.json_response({"status": "error", "database": "unavailable"}, status=503)
    return web.json_response({"status": "ok"})


def create_app(engine: AsyncEngine | None = None, settings: Settings | None = None) -> web.Application:
    """
    Build the web application.

    Args:
        engine: Database engine; defaults to the one configured from DATABASE_URL
        settings: Application settings; defaults to get_settings()
    """
    settings = settings or get_settings()
    engine = engine or get_engine()

    app = web.Application()
    app[SETTINGS_KEY] = settings
    app[ENGINE_KEY] = engine
    app[SESSION_FACTORY_KEY] = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    app.router.add_get("/health", health_handler)
    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)
    return app


def main() -> None:
    """Main entry point."""
    if load_dotenv():
        get_settings.cache_clear()
    settings = get_settings()
    setup_logging(settings)

    app = create_app(settings=settings)
    logger.info(f"Listening on {settings.WEBAPP_HOST}:{settings.WEBAPP_PORT}")
    web.run_app(app, host=settings.WEBAPP_HOST, port=settings.WEBAPP_PORT, print=None)


if __name__ == "__main__":
    main()
