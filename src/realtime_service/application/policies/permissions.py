from __future__ import annotations

from realtime_service.application.dto.principal import Principal
from realtime_service.application.exceptions import ForbiddenError, NotFoundError
from realtime_service.domain.entities.conversation import Conversation


def assert_conversation_access(
    principal: Principal,
    conversation: Conversation | None,
) -> Conversation:
    """Raise if conversation doesn't exist or principal is not one of its members."""
    if conversation is None:
        raise NotFoundError("Conversation not found")

    if not conversation.has_member(principal.user_id):
        raise ForbiddenError("Not a member of this conversation")

    return conversation


def assert_service(principal: Principal) -> None:
    if not principal.is_admin:
        raise ForbiddenError("Service or admin access required")
