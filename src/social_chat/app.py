from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from social_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from social_chat.api.v1.routers import health, messages, ws
from social_chat.application.dto.principal import Principal
from social_chat.application.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from social_chat.application.realtime.registry import ConnectionRegistry
from social_chat.application.realtime.rooms import RoomTable
from social_chat.config import settings
from social_chat.domain.events.message_persisted import MessagePersisted
from social_chat.infrastructure.bus.redis_pubsub import (
    RedisPubSubPublisher,
    RedisPubSubSubscriber,
)
from social_chat.infrastructure.db.session import open_uow
from social_chat.infrastructure.ws.manager import ConnectionManager
from social_chat.services import delivery_service

logger = logging.getLogger(__name__)


def _make_push_handler(manager: ConnectionManager):
    """Deliver messages announced on Redis as if the sender sent sendMessage."""

    async def _on_message_persisted(event: MessagePersisted) -> None:
        try:
            async with open_uow() as uow:
                delivery = await delivery_service.deliver(
                    manager.registry,
                    manager.rooms,
                    Principal(user_id=event.sender_id),
                    event.message_id,
                    event.recipient_id,
                    uow,
                )
        except NotFoundError:
            logger.info("Message %s deleted before push; dropped", event.message_id)
            return
        await manager.apply(delivery.effects)

    return _on_message_persisted


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    app.state.redis = aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    app.state.publisher = RedisPubSubPublisher(app.state.redis, settings.REDIS_PUBSUB_CHANNEL)
    logger.info("Redis connection pool created")

    subscriber: RedisPubSubSubscriber | None = None
    if settings.PUSH_ON_PERSIST:
        subscriber = RedisPubSubSubscriber(
            app.state.redis,
            settings.REDIS_PUBSUB_CHANNEL,
            _make_push_handler(app.state.ws_manager),
        )
        await subscriber.start()

    yield

    if subscriber is not None:
        await subscriber.stop()
    await app.state.redis.aclose()
    logger.info("Redis connection pool closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Social Chat Realtime Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Process-wide realtime state, created once per app and injected from here.
    app.state.ws_manager = ConnectionManager(ConnectionRegistry(), RoomTable())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(messages.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ForbiddenError)
    async def _forbidden(_req: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(UnauthenticatedError)
    async def _unauthenticated(_req: Request, exc: UnauthenticatedError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"detail": exc.detail})
