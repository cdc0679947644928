from __future__ import annotations


class ClientError(Exception):
    """Base error raised by the realtime client."""


class ApiError(ClientError):
    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"HTTP {status_code}: {detail}" if status_code else detail)


class LiveChannelClosed(ClientError):
    pass


class MessageSendError(ClientError):
    """The message could not be stored; the optimistic entry was rolled back.

    The UI should offer a retry with the same text.
    """

    def __init__(self, conversation_id: str, client_msg_id: str, text: str | None) -> None:
        self.conversation_id = conversation_id
        self.client_msg_id = client_msg_id
        self.text = text
        super().__init__(f"Message {client_msg_id} was not sent")
