from __future__ import annotations

from typing import Any

from social_chat.application.dto.principal import Principal
from social_chat.application.exceptions import UnauthenticatedError


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Build a Principal from verified JWT claims.

    The user id comes from ``sub``, or from the legacy ``id`` claim. Admin
    rights come from a ``roles`` list or an ``isAdmin`` flag.
    """
    raw_id = payload.get("sub", payload.get("id"))
    try:
        user_id = int(raw_id)
    except (TypeError, ValueError) as exc:
        raise UnauthenticatedError("Token has no usable subject") from exc

    roles = [str(r) for r in payload.get("roles", [])]
    if payload.get("isAdmin") and "admin" not in roles:
        roles.append("admin")
    return Principal(user_id=user_id, roles=roles)
