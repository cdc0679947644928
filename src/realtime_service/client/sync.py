"""Per-client reconciliation of the REST baseline with live events.

REST is the source of truth for history and ordering. Live events only
fill the gap between fetches and are merged by message id or by the
sender-generated ``client_msg_id``.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from realtime_service.application.ports.clock import Clock, SystemClock
from realtime_service.client.api import RestApi
from realtime_service.client.config import ClientSettings
from realtime_service.client.exceptions import ApiError, MessageSendError
from realtime_service.client.live import LiveChannel, WebSocketLiveChannel
from realtime_service.client.models import (
    ChatEntry,
    ConversationState,
    MessageView,
)
from realtime_service.client.notifications import NotificationFeed
from realtime_service.client.typing_debounce import DEFAULT_WINDOW_SECONDS, TypingDebouncer
from realtime_service.infrastructure.ws.protocol import (
    AddUserData,
    AddUserFrame,
    BookingStatusFrame,
    ErrorFrame,
    FriendRequestAcceptedFrame,
    FriendRequestSentFrame,
    GetMessageFrame,
    GetUsersFrame,
    MessageSentFrame,
    NewBookingFrame,
    NotificationRemovedFrame,
    OutboundFrame,
    SendMessageData,
    SendMessageFrame,
    UserTypingFrame,
    decode_outbound,
)

logger = logging.getLogger(__name__)


class ChatSession:
    def __init__(
        self,
        user_id: str,
        api: RestApi,
        live: LiveChannel,
        *,
        feed: NotificationFeed | None = None,
        clock: Clock | None = None,
        typing_window: float = DEFAULT_WINDOW_SECONDS,
    ) -> None:
        self.user_id = user_id
        self._api = api
        self._live = live
        self._clock = clock or SystemClock()
        self.feed = feed or NotificationFeed(user_id, live.emit, clock=self._clock)
        self.typing_debouncer = TypingDebouncer(
            user_id, live.emit, window=typing_window, clock=self._clock,
        )
        self.conversations: dict[str, ConversationState] = {}
        self.open_conversation_id: str | None = None
        self.messages: list[ChatEntry] = []
        self.online: set[str] = set()
        self.typing: set[str] = set()

    # --- baseline -----------------------------------------------------------

    async def load(self) -> None:
        await self.refresh_conversations()
        self.feed.friend_request_count = await self._api.get_pending_friend_requests()
        if self.open_conversation_id is not None:
            await self.open_conversation(self.open_conversation_id)

    async def refresh_conversations(self) -> None:
        views = await self._api.list_conversations()
        previous = self.conversations
        self.conversations = {}
        for view in views:
            state = ConversationState.from_view(view)
            if view.id in previous:
                state.unread = previous[view.id].unread
            self.conversations[view.id] = state

    async def open_conversation(self, conversation_id: str) -> list[ChatEntry]:
        history = await self._api.list_messages(conversation_id)
        merged = [ChatEntry.from_view(m) for m in history]
        if conversation_id == self.open_conversation_id:
            # keep live arrivals the fetch did not include yet
            for entry in self.messages:
                if not any(entry.same_message(m) for m in merged):
                    merged.append(entry)
        self.open_conversation_id = conversation_id
        self.messages = merged
        state = self.conversations.get(conversation_id)
        if state is not None:
            state.unread = 0
        return merged

    async def on_reconnect(self) -> None:
        """Announce presence again and refetch what may have been missed."""
        try:
            await self._live.emit(AddUserFrame(data=AddUserData(user_id=self.user_id)))
        except Exception:
            logger.warning("Could not re-register presence", exc_info=True)
        await self.load()

    # --- live events --------------------------------------------------------

    async def run(self) -> None:
        """Apply live events until the channel closes."""
        async for frame in self._live.events():
            await self.handle_event(frame)

    async def handle_raw(self, raw: str | bytes | dict[str, Any]) -> None:
        try:
            frame = decode_outbound(raw)
        except PydanticValidationError:
            logger.warning("Discarding malformed live event")
            return
        await self.handle_event(frame)

    async def handle_event(self, frame: OutboundFrame) -> None:
        if isinstance(frame, GetUsersFrame):
            self.online = {u.user_id for u in frame.data}
        elif isinstance(frame, UserTypingFrame):
            if frame.data.is_typing:
                self.typing.add(frame.data.user_id)
            else:
                self.typing.discard(frame.data.user_id)
        elif isinstance(frame, GetMessageFrame):
            await self._on_message(frame)
        elif isinstance(
            frame,
            (FriendRequestSentFrame, FriendRequestAcceptedFrame, NewBookingFrame, BookingStatusFrame),
        ):
            self.feed.add(frame)
        elif isinstance(frame, NotificationRemovedFrame):
            self.feed.handle_removed(frame.data.notification_id)
        elif isinstance(frame, MessageSentFrame):
            logger.debug("Live send acknowledged: %s", frame.data.client_msg_id)
        elif isinstance(frame, ErrorFrame):
            logger.warning("Server rejected a live frame: %s", frame.data.code)

    async def _on_message(self, frame: GetMessageFrame) -> None:
        data = frame.data
        conversation_id = data.conversation
        entry = ChatEntry(
            conversation_id=conversation_id,
            sender_id=data.sender.id,
            text=data.text,
            created_at=data.created_at,
            id=data.id,
            client_msg_id=data.client_msg_id,
            file_url=data.file_url,
            file_name=data.file_name,
            file_type=data.file_type,
        )
        self.typing.discard(data.sender.id)

        if conversation_id == self.open_conversation_id:
            if not any(entry.same_message(m) for m in self.messages):
                self.messages.append(entry)
            self._touch_preview(conversation_id, entry)
            return

        if conversation_id not in self.conversations:
            try:
                await self.refresh_conversations()
            except ApiError:
                logger.warning("Could not refresh conversations", exc_info=True)
        state = self._touch_preview(conversation_id, entry)
        if state is not None:
            state.unread += 1
        self.feed.add(frame)

    def _touch_preview(self, conversation_id: str, entry: ChatEntry) -> ConversationState | None:
        state = self.conversations.get(conversation_id)
        if state is None:
            return None
        state.preview = entry.text or entry.file_name
        state.last_message_at = entry.created_at
        return state

    # --- sending ------------------------------------------------------------

    async def on_input(self) -> None:
        """Keystroke in the composer of the open conversation."""
        receiver_id = self._open_receiver()
        if receiver_id is not None:
            await self.typing_debouncer.on_input(receiver_id)

    def _open_receiver(self) -> str | None:
        state = self.conversations.get(self.open_conversation_id or "")
        return state.view.other_member(self.user_id) if state else None

    async def send_message(
        self,
        text: str | None,
        *,
        file_url: str | None = None,
        file_name: str | None = None,
        file_type: str | None = None,
    ) -> MessageView:
        """Store a message over REST and push it over the live channel at once.

        The optimistic entry is replaced by the stored record on success and
        removed on failure, which raises MessageSendError.
        """
        conversation_id = self.open_conversation_id
        if conversation_id is None or conversation_id not in self.conversations:
            raise ValueError("No conversation is open")
        if not (text and text.strip()) and not file_url:
            raise ValueError("Message needs text or a file")
        receiver_id = self._open_receiver()
        client_msg_id = str(uuid.uuid4())
        optimistic = ChatEntry(
            conversation_id=conversation_id,
            sender_id=self.user_id,
            text=text,
            created_at=self._clock.now(),
            client_msg_id=client_msg_id,
            pending=True,
            file_url=file_url,
            file_name=file_name,
            file_type=file_type,
        )
        self.messages.append(optimistic)
        if receiver_id is not None:
            await self.typing_debouncer.stop(receiver_id)

        stored, _ = await asyncio.gather(
            self._store(conversation_id, client_msg_id, text, file_url, file_name, file_type),
            self._emit_live(
                SendMessageFrame(
                    data=SendMessageData(
                        sender_id=self.user_id,
                        receiver_id=receiver_id or "",
                        conversation_id=conversation_id,
                        text=text,
                        temp_id=client_msg_id,
                        client_msg_id=client_msg_id,
                        file_url=file_url,
                        file_name=file_name,
                        file_type=file_type,
                    ),
                ),
            ),
        )

        if isinstance(stored, ApiError):
            self.messages = [m for m in self.messages if m is not optimistic]
            raise MessageSendError(conversation_id, client_msg_id, text) from stored

        canonical = ChatEntry.from_view(stored)
        self.messages = [canonical if m is optimistic else m for m in self.messages]
        self._touch_preview(conversation_id, canonical)
        return stored

    async def _store(
        self,
        conversation_id: str,
        client_msg_id: str,
        text: str | None,
        file_url: str | None,
        file_name: str | None,
        file_type: str | None,
    ) -> MessageView | ApiError:
        try:
            return await self._api.send_message(
                conversation_id,
                client_msg_id,
                text,
                file_url=file_url,
                file_name=file_name,
                file_type=file_type,
            )
        except ApiError as exc:
            logger.warning("Message %s was not stored: %s", client_msg_id, exc)
            return exc

    async def _emit_live(self, frame: SendMessageFrame) -> None:
        try:
            await self._live.emit(frame)
        except Exception:
            logger.warning("Live emit of %s failed", frame.data.client_msg_id, exc_info=True)


async def open_session(user_id: str, settings: ClientSettings | None = None) -> ChatSession:
    """Connect both channels and load the baseline for ``user_id``."""
    settings = settings or ClientSettings()
    live = WebSocketLiveChannel.from_settings(settings)
    await live.connect()
    session = ChatSession(
        user_id,
        RestApi.from_settings(settings),
        live,
        typing_window=settings.TYPING_WINDOW_SECONDS,
    )
    await session.load()
    return session
