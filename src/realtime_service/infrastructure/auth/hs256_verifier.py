from __future__ import annotations

from typing import Any

import jwt

from realtime_service.application.dto.principal import Principal


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Build a Principal from verified JWT claims.

    ``sub`` is the opaque user id; ``name``/``avatar`` are copied into live
    events so recipients can render them without a profile fetch.
    """
    subject = payload.get("sub") or payload.get("id") or payload.get("_id")
    if not subject:
        raise jwt.InvalidTokenError("token has no subject")
    roles = payload.get("roles") or []
    role = payload.get("role")
    if role and role not in roles:
        roles = [*roles, role]
    return Principal(
        user_id=str(subject),
        name=payload.get("name"),
        avatar=payload.get("avatar"),
        roles=list(roles),
    )


class HS256Verifier:
    """Verify JWTs signed with a shared HS256 secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> Principal:
        payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        return principal_from_claims(payload)
