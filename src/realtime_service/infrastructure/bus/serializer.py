"""JSON envelope for events crossing the Redis channel.

Envelope: ``{"v": 1, "event": <type>, "data": {...}}``. Wire models are
dumped with their camelCase aliases so a received frame validates exactly
like one read from a WebSocket.
"""
from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel

ENVELOPE_VERSION = 1


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, BaseModel):
            return o.model_dump(mode="json", by_alias=True)
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, Enum):
            return o.value
        return super().default(o)


def serialize_event(event_type: str, payload: dict[str, Any]) -> str:
    envelope = {"v": ENVELOPE_VERSION, "event": event_type, "data": payload}
    return json.dumps(envelope, cls=_Encoder)


def deserialize_event(raw: str | bytes) -> tuple[str, dict[str, Any]]:
    """Return (event_type, data). Raises ValueError on a foreign or broken envelope."""
    envelope = json.loads(raw)
    if not isinstance(envelope, dict) or "event" not in envelope:
        raise ValueError("not a fan-out envelope")
    if envelope.get("v", ENVELOPE_VERSION) != ENVELOPE_VERSION:
        raise ValueError(f"unsupported envelope version {envelope.get('v')}")
    data = envelope.get("data")
    if not isinstance(data, dict):
        raise ValueError("envelope data must be an object")
    return envelope["event"], data
