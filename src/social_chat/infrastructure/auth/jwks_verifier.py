from __future__ import annotations

import logging

import jwt
from jwt import PyJWKClient

from social_chat.application.dto.principal import Principal
from social_chat.application.exceptions import UnauthenticatedError
from social_chat.infrastructure.auth.claims import principal_from_claims

logger = logging.getLogger(__name__)


class JWKSVerifier:
    """Verify JWTs using a remote JWKS endpoint."""

    def __init__(self, jwks_url: str) -> None:
        self._jwks_url = jwks_url
        self._jwk_client = PyJWKClient(jwks_url, cache_keys=True)

    async def verify(self, token: str) -> Principal:
        try:
            signing_key = self._jwk_client.get_signing_key_from_jwt(token)
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256", "ES256"],
            )
        except jwt.PyJWKClientError:
            logger.warning("JWKS lookup failed for %s", self._jwks_url, exc_info=True)
            raise UnauthenticatedError("Signing key unavailable") from None
        except jwt.PyJWTError as exc:
            raise UnauthenticatedError(f"Invalid token: {exc}") from exc
        return principal_from_claims(payload)
