"""Import all models so Alembic can discover them via Base.metadata."""
from realtime_service.infrastructure.db.models.conversation import ConversationModel
from realtime_service.infrastructure.db.models.friend_request import FriendRequestCounterModel
from realtime_service.infrastructure.db.models.message import MessageModel

__all__ = [
    "ConversationModel",
    "FriendRequestCounterModel",
    "MessageModel",
]
