"""
WhatsApp gateway client

Outbound notifications go through an HTTP WhatsApp gateway (WAHA-compatible
`sendText` API). Recipients are addressed by role; chat ids come from settings.
Inbound messages arrive through the webhook route as gateway events.
"""
import asyncio
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from servtec.config import Settings, get_settings
from servtec.errors import TransportError
from servtec.models.schemas import InboundMessage, RecipientRole
from servtec.utils.logger import get_logger, mask_address

logger = get_logger(__name__)

GROUP_SUFFIX = "@g.us"
CONTACT_SUFFIX = "@c.us"
RETRY_STATUS_CODES = [429, 500, 502, 503, 504]


class Notifier(ABC):
    """Outbound notification sink addressed by recipient role"""

    @abstractmethod
    async def send(self, role: RecipientRole, text: str) -> None:
        """
        Deliver one text message.

        Raises:
            TransportError: When the message could not be delivered
        """


def to_chat_id(address: str) -> str:
    """Phone number or chat id -> gateway chat id"""
    address = address.strip()
    if "@" in address:
        return address
    return re.sub(r"[^\d]", "", address) + CONTACT_SUFFIX


def same_contact(a: str, b: str) -> bool:
    """Compare two addresses by their digits"""
    digits_a = re.sub(r"[^\d]", "", a.split("@")[0])
    digits_b = re.sub(r"[^\d]", "", b.split("@")[0])
    return bool(digits_a) and digits_a == digits_b


class WhatsAppNotifier(Notifier):
    """
    Gateway client with retry logic and error handling
    """

    def __init__(self, settings: Optional[Settings] = None, sleep=asyncio.sleep):
        self.settings = settings or get_settings()
        self.base_url = self.settings.whatsapp_gateway_url.rstrip("/")
        self.session = self.settings.whatsapp_session
        self.headers = {"Content-Type": "application/json"}
        if self.settings.whatsapp_api_key:
            self.headers["X-Api-Key"] = self.settings.whatsapp_api_key
        self.timeout = 30.0
        self.max_retries = 3
        self._sleep = sleep

    def chat_id_for(self, role: RecipientRole) -> str:
        addresses = {
            RecipientRole.SHARED: self.settings.group_chat_id,
            RecipientRole.HANDLER: self.settings.handler_chat_id,
            RecipientRole.SUPERVISOR: self.settings.supervisor_chat_id,
        }
        address = addresses[RecipientRole(role)]
        if not address:
            raise TransportError(f"No chat id configured for role '{RecipientRole(role).value}'")
        return to_chat_id(address)

    @staticmethod
    def _decode(response: httpx.Response, endpoint: str) -> Dict[str, Any]:
        """2xx body as a dict; empty or non-JSON bodies still count as delivered"""
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            logger.debug(f"Gateway returned a non-JSON body for {endpoint}")
            return {}
        return data if isinstance(data, dict) else {"data": data}

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Make HTTP request with retry logic

        Args:
            method: HTTP method
            endpoint: Gateway endpoint
            **kwargs: Additional arguments for httpx

        Returns:
            Response JSON (empty dict for empty or non-JSON bodies)

        Raises:
            TransportError: On HTTP or network errors after retries
        """
        url = f"{self.base_url}/{endpoint}"

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(
                        method=method,
                        url=url,
                        headers=self.headers,
                        **kwargs
                    )
                    response.raise_for_status()
                    return self._decode(response, endpoint)

            except httpx.HTTPStatusError as e:
                if e.response.status_code in RETRY_STATUS_CODES:
                    if attempt < self.max_retries - 1:
                        wait_time = 2 ** attempt  # Exponential backoff
                        logger.warning(
                            f"Gateway request failed (attempt {attempt + 1}/{self.max_retries}), "
                            f"retrying in {wait_time}s: {e}"
                        )
                        await self._sleep(wait_time)
                        continue
                raise TransportError(f"Gateway returned {e.response.status_code} for {endpoint}") from e
            except httpx.HTTPError as e:
                logger.error(f"Gateway request failed: {e}")
                raise TransportError(f"Gateway unreachable: {e}") from e

        raise TransportError(f"Gateway request to {endpoint} failed after {self.max_retries} attempts")

    async def send(self, role: RecipientRole, text: str) -> None:
        chat_id = self.chat_id_for(role)
        await self.send_text(chat_id, text)
        logger.info(f"Message sent to {RecipientRole(role).value} ({mask_address(chat_id)})")

    async def send_text(self, chat_id: str, text: str) -> Dict[str, Any]:
        """
        Send a text message to a chat id

        Args:
            chat_id: Gateway chat id (xxx@c.us or xxx@g.us)
            text: Message body

        Returns:
            Gateway response
        """
        payload = {"session": self.session, "chatId": chat_id, "text": text}
        return await self._make_request("POST", "api/sendText", json=payload)

    async def session_status(self) -> str:
        """Gateway session status ("WORKING" when connected)"""
        data = await self._make_request("GET", f"api/sessions/{self.session}")
        return str(data.get("status", "UNKNOWN"))


def parse_webhook_event(event: Dict[str, Any]) -> Optional[InboundMessage]:
    """
    Convert a gateway webhook event into an InboundMessage.

    Returns:
        InboundMessage, or None for non-message events, own messages and
        empty bodies
    """
    if event.get("event") != "message":
        return None

    payload = event.get("payload") or {}
    if payload.get("fromMe"):
        return None

    body = (payload.get("body") or "").strip()
    if not body:
        return None

    chat = payload.get("from") or ""
    is_group = chat.endswith(GROUP_SUFFIX)
    sender = (payload.get("participant") or chat) if is_group else chat

    return InboundMessage(
        text=body,
        sender_address=sender,
        is_group_channel=is_group,
        chat_address=chat,
    )
