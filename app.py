#!/usr/bin/env python3
"""
Main entry point for the short link service.

Concurrency: requests are served concurrently on one event loop (FastAPI +
asyncpg pool + redis.asyncio). Each app.py process is a single server; to
scale out, run several behind a load balancer against a shared
postgresql:// store. A memory:// store lives inside one process.

Usage:
    python app.py

Environment variables:
    DATABASE_URL - memory://, memory:///path/links.json or postgresql://...
    DATABASE_CREATE_TABLES - Create PostgreSQL tables on startup
    REDIS_URL - Redis connection URL (optional)
    BASE_URL - Base URL for short links
    PORT - Port to listen on
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from shortlink.database import create_store
from shortlink.database.cache import RedisCache
from shortlink.service import ShortLinkService
from shortlink.shortcode import ShortCodeGenerator
from shortlink.common.logging_config import setup_logging
from web_app import create_app


def build_service(config: Config, logger) -> ShortLinkService:
    """Create the store, optional cache and service described by config."""
    logger.info(f"Opening link store at {config.database_url}")
    store = create_store(
        config.database_url,
        retire_deleted_codes=config.retire_deleted_codes,
        retirement_seconds=config.code_retirement_seconds,
        create_tables=config.database_create_tables,
        logger=logger,
    )

    cache = None
    if config.redis_url:
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            logger=logger,
        )
    else:
        logger.info("Redis caching disabled")

    generator = ShortCodeGenerator(
        default_length=config.short_code_length,
        strategy=config.code_strategy,
    )
    return ShortLinkService(
        store=store,
        cache=cache,
        short_code_generator=generator,
        logger=logger,
        enable_custom_codes=config.enable_custom_codes,
        max_collision_retries=config.max_collision_retries,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting short link service...")

    service = build_service(config, logger)
    if service.cache:
        await service.cache.connect()

    app.state.store = service.store
    app.state.cache = service.cache
    app.state.service = service

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down short link service...")
    await service.close()
    logger.info("Service stopped")


def build_server(config: Config, logger) -> uvicorn.Server:
    """Single-process uvicorn server for the app; the service is built in the lifespan."""
    app = create_app(
        store_instance=None,
        cache_instance=None,
        service_instance=None,
        config=config,
    )
    app.state.logger = logger
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=True,
    )
    return uvicorn.Server(uvicorn_config)


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("Short Link Service")
    logger.info(f"Configuration: {config.model_dump()}")

    server = build_server(config, logger)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
