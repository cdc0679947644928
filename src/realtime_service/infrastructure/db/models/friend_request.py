from __future__ import annotations

from datetime import datetime

from sqlalchemy import Integer, String, text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from realtime_service.infrastructure.db.base import Base


class FriendRequestCounterModel(Base):
    __tablename__ = "friend_request_counters"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    pending_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
        onupdate=text("now()"),
    )
