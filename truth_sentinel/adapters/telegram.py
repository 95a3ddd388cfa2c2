"""Telegram Bot API collaborators.

- message_from_update: normalize a webhook update into a Message
- TelegramMediaFetcher: resolve a file_id into bytes (getFile + download)
- TelegramDelivery: send the reply back to the chat

All three are thin wrappers; verification logic never sees Telegram types.
"""

from typing import Any, Optional

import httpx
import structlog
from pydantic import BaseModel

from truth_sentinel.config.settings import settings
from truth_sentinel.evidence.media import MediaPayload, resolve_mime_type
from truth_sentinel.gatekeeper.schemas import Message

TELEGRAM_API_URL = "https://api.telegram.org"


class InboundMessage(BaseModel):
    """A normalized message with the ids needed to answer it."""

    conversation_id: str
    message_id: Optional[int] = None
    message: Message


def message_from_update(update: dict[str, Any]) -> Optional[InboundMessage]:
    """Build an InboundMessage from a Telegram update.

    Accepts ``message``, ``edited_message`` and ``channel_post`` updates and
    returns None for anything else.
    """
    raw = update.get("message") or update.get("edited_message") or update.get("channel_post")
    if not raw:
        return None

    photos = raw.get("photo") or []
    document = raw.get("document")
    reply = raw.get("reply_to_message") or {}
    forwarded = any(
        raw.get(key) for key in ("forward_from", "forward_from_chat", "forward_origin")
    )

    message = Message(
        text=raw.get("text") or "",
        caption=raw.get("caption"),
        has_image=bool(photos),
        has_document=bool(document),
        is_forwarded=forwarded,
        reply_to_text=reply.get("text") or reply.get("caption"),
        # Telegram lists photo sizes smallest first
        image_handle=photos[-1]["file_id"] if photos else None,
        document_handle=document.get("file_id") if document else None,
        document_name=document.get("file_name") if document else None,
    )
    return InboundMessage(
        conversation_id=str((raw.get("chat") or {}).get("id", "")),
        message_id=raw.get("message_id"),
        message=message,
    )


class _TelegramClient:
    def __init__(
        self,
        bot_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        api_url: str = TELEGRAM_API_URL,
    ) -> None:
        self._token = bot_token if bot_token is not None else settings.telegram_bot_token
        self._client = client
        self.timeout = timeout or settings.search_timeout
        self.api_url = api_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self._token)

    def _method_url(self, method: str) -> str:
        return f"{self.api_url}/bot{self._token}/{method}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(method, url, **kwargs)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.request(method, url, **kwargs)


class TelegramMediaFetcher(_TelegramClient):
    """Downloads photos and documents by file_id."""

    async def fetch(self, handle: str) -> MediaPayload:
        """Download the file behind ``handle``.

        Raises:
            ValueError: If the bot token is missing or Telegram has no file path.
            httpx.HTTPError: On transport or HTTP status errors.
        """
        if not self.is_configured:
            raise ValueError("TELEGRAM_BOT_TOKEN not configured in environment")

        info = await self._request("GET", self._method_url("getFile"), params={"file_id": handle})
        info.raise_for_status()
        body = info.json()
        file_path = (body.get("result") or {}).get("file_path")
        if not body.get("ok") or not file_path:
            raise ValueError(f"Telegram returned no file path for {handle}")

        download = await self._request(
            "GET", f"{self.api_url}/file/bot{self._token}/{file_path}"
        )
        download.raise_for_status()

        return MediaPayload(
            data=download.content,
            mime_type=resolve_mime_type(download.headers.get("content-type"), file_path),
            file_name=file_path.rsplit("/", 1)[-1],
        )


class TelegramDelivery(_TelegramClient):
    """Sends verdict replies with sendMessage."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._logger = structlog.get_logger().bind(component="TelegramDelivery")

    async def send(
        self,
        conversation_id: str,
        text: str,
        reply_to_message_id: Optional[int] = None,
    ) -> bool:
        """Send ``text`` to the chat. Failures are logged and reported as False."""
        if not self.is_configured:
            self._logger.warning("delivery_not_configured")
            return False

        payload: dict[str, Any] = {"chat_id": conversation_id, "text": text}
        if reply_to_message_id is not None:
            payload["reply_to_message_id"] = reply_to_message_id

        try:
            response = await self._request("POST", self._method_url("sendMessage"), json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._logger.error("delivery_failed", conversation_id=conversation_id, error=str(e))
            return False

        self._logger.info("reply_delivered", conversation_id=conversation_id)
        return True
