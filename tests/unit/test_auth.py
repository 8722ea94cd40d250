from __future__ import annotations

import jwt
import pytest

from social_chat.application.exceptions import UnauthenticatedError
from social_chat.infrastructure.auth.claims import principal_from_claims
from social_chat.infrastructure.auth.hs256_verifier import HS256Verifier

SECRET = "unit-test-secret-that-is-long-enough-for-hs256"


@pytest.mark.asyncio
async def test_valid_token():
    token = jwt.encode({"sub": "7", "roles": ["user"]}, SECRET, algorithm="HS256")

    principal = await HS256Verifier(SECRET).verify(token)

    assert principal.user_id == 7
    assert principal.roles == ["user"]
    assert not principal.is_admin


@pytest.mark.asyncio
async def test_wrong_secret_is_rejected():
    token = jwt.encode({"sub": "7"}, "another-secret-of-reasonable-length-123", algorithm="HS256")

    with pytest.raises(UnauthenticatedError):
        await HS256Verifier(SECRET).verify(token)


@pytest.mark.asyncio
async def test_garbage_token_is_rejected():
    with pytest.raises(UnauthenticatedError):
        await HS256Verifier(SECRET).verify("not.a.jwt")


def test_legacy_id_claim_and_admin_flag():
    principal = principal_from_claims({"id": 5, "isAdmin": True})

    assert principal.user_id == 5
    assert principal.is_admin


def test_claims_without_subject():
    with pytest.raises(UnauthenticatedError):
        principal_from_claims({"name": "x"})
