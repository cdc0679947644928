from __future__ import annotations

from typing import Protocol

from realtime_service.application.dto.principal import Principal


class TokenVerifier(Protocol):
    """Resolves a bearer token to the connected user.

    Raises ``jwt.InvalidTokenError`` (or a subclass) for any token that does
    not identify a user.
    """

    async def verify(self, token: str) -> Principal: ...
