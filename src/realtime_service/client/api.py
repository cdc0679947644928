"""REST client for the conversation, message and friend-request endpoints."""
from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx

from realtime_service.client.config import ClientSettings
from realtime_service.client.exceptions import ApiError
from realtime_service.client.models import ConversationView, MessageView

logger = logging.getLogger(__name__)

CHAT_PREFIX = "/api/v1/chat/conversations"
PENDING_COUNT_PATH = "/api/v1/friends/requests/pending-count"


class RestApi:
    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> RestApi:
        return cls(
            settings.API_BASE_URL,
            settings.TOKEN,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> RestApi:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def list_conversations(self, *, limit: int = 50) -> list[ConversationView]:
        data = await self._request("GET", CHAT_PREFIX, params={"limit": limit})
        return [ConversationView.model_validate(c) for c in data]

    async def get_conversation(self, conversation_id: str) -> ConversationView:
        data = await self._request("GET", f"{CHAT_PREFIX}/{conversation_id}")
        return ConversationView.model_validate(data)

    async def get_or_create_conversation(self, receiver_id: str) -> ConversationView:
        data = await self._request("POST", CHAT_PREFIX, json={"receiverId": receiver_id})
        return ConversationView.model_validate(data)

    async def list_messages(
        self,
        conversation_id: str,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> list[MessageView]:
        params: dict[str, Any] = {"limit": limit}
        if cursor:
            params["cursor"] = cursor
        data = await self._request(
            "GET", f"{CHAT_PREFIX}/{conversation_id}/messages", params=params,
        )
        return [MessageView.model_validate(m) for m in data]

    async def send_message(
        self,
        conversation_id: str,
        client_msg_id: str,
        text: str | None,
        *,
        file_url: str | None = None,
        file_name: str | None = None,
        file_type: str | None = None,
    ) -> MessageView:
        body: dict[str, Any] = {
            "clientMsgId": client_msg_id,
            "type": "attachment" if file_url else "text",
            "text": text,
        }
        if file_url:
            body.update(fileUrl=file_url, fileName=file_name, fileType=file_type)
        data = await self._request(
            "POST", f"{CHAT_PREFIX}/{conversation_id}/messages", json=body,
        )
        return MessageView.model_validate(data)

    async def get_pending_friend_requests(self) -> int:
        data = await self._request("GET", PENDING_COUNT_PATH)
        return int(data["pendingCount"])

    async def reset_pending_friend_requests(self) -> None:
        await self._request("DELETE", PENDING_COUNT_PATH)

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise ApiError(0, f"{method} {url} failed: {exc}") from exc
        if response.is_error:
            logger.debug("%s %s -> %s", method, url, response.status_code)
            raise ApiError(response.status_code, _detail(response))
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        return response.json()


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)
