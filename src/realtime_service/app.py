from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from realtime_service.api.middleware.correlation_id import CorrelationIdMiddleware
from realtime_service.api.middleware.metrics import RequestTimingMiddleware
from realtime_service.api.v1.routers import (
    conversations,
    friends,
    health,
    internal_notifications,
    messages,
    ws,
)
from realtime_service.application.exceptions import AppError
from realtime_service.config import Settings, settings
from realtime_service.infrastructure.bus.redis_pubsub import (
    RedisFanoutDelivery,
    RedisPubSubPublisher,
    RedisPubSubSubscriber,
    local_dispatcher,
)
from realtime_service.infrastructure.db.session import dispose_engine
from realtime_service.services.realtime_hub import build_hub

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    subscriber: RedisPubSubSubscriber | None = None
    redis = getattr(app.state, "redis", None)
    if redis is not None:
        subscriber = RedisPubSubSubscriber(
            redis,
            settings.REDIS_PUBSUB_CHANNEL,
            local_dispatcher(app.state.hub.manager),
        )
        await subscriber.start()
        app.state.pubsub_subscriber = subscriber

    yield

    if subscriber is not None:
        await subscriber.stop()
    if redis is not None:
        await redis.aclose()
        logger.info("Redis connection pool closed")
    await dispose_engine()


def create_app(config: Settings | None = None) -> FastAPI:
    config = config or settings
    app = FastAPI(
        title="Marketplace Realtime Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.redis = None
    delivery = None
    if config.FANOUT_BACKEND == "redis":
        app.state.redis = aioredis.from_url(config.REDIS_URL, decode_responses=True)
        delivery = RedisFanoutDelivery(
            RedisPubSubPublisher(app.state.redis), config.REDIS_PUBSUB_CHANNEL,
        )
        logger.info("Fan-out through Redis channel %s", config.REDIS_PUBSUB_CHANNEL)
    app.state.hub = build_hub(config, delivery)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(friends.router)
    app.include_router(internal_notifications.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(_req: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
