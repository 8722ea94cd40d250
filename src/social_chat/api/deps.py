"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, Request, WebSocket, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from social_chat.application.dto.principal import Principal
from social_chat.application.exceptions import UnauthenticatedError
from social_chat.application.ports.auth import TokenVerifier
from social_chat.application.ports.bus import EventPublisher
from social_chat.application.uow import UnitOfWork, UoWFactory
from social_chat.config import settings
from social_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from social_chat.infrastructure.auth.jwks_verifier import JWKSVerifier
from social_chat.infrastructure.db.session import open_uow
from social_chat.infrastructure.ws.manager import ConnectionManager

_bearer_scheme = HTTPBearer()


async def get_uow() -> AsyncIterator[UnitOfWork]:
    async with open_uow() as uow:
        yield uow


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]


def get_uow_factory() -> UoWFactory:
    return open_uow


UoWFactoryDep = Annotated[UoWFactory, Depends(get_uow_factory)]


def _get_verifier() -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        assert settings.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = _get_verifier()
    return _verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
) -> Principal:
    try:
        return await get_verifier().verify(credentials.credentials)
    except UnauthenticatedError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def get_publisher(request: Request) -> EventPublisher | None:
    """Publisher for server-side push, or None when PUSH_ON_PERSIST is off."""
    if not settings.PUSH_ON_PERSIST:
        return None
    return getattr(request.app.state, "publisher", None)


PublisherDep = Annotated[EventPublisher | None, Depends(get_publisher)]


def get_ws_manager(websocket: WebSocket) -> ConnectionManager:
    return websocket.app.state.ws_manager
