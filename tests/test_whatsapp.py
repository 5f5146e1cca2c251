"""
Unit tests for the WhatsApp gateway client

Tests:
- Chat id resolution per recipient role
- Retry logic with exponential backoff
- Error mapping to TransportError
- Webhook event parsing
"""
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from servtec.errors import TransportError
from servtec.models.schemas import RecipientRole
from servtec.services.whatsapp import (
    WhatsAppNotifier,
    parse_webhook_event,
    same_contact,
    to_chat_id,
)


@pytest.fixture
def gateway(settings):
    """Fixture for WhatsAppNotifier with a no-op backoff sleep"""
    return WhatsAppNotifier(
        settings.model_copy(update={"whatsapp_api_key": "gw-key"}),
        sleep=AsyncMock(),
    )


@pytest.fixture
def mock_response():
    """Fixture for mock HTTP response"""
    response = MagicMock()
    response.json.return_value = {"id": "true_595981111111@c.us_ABC"}
    response.status_code = 201
    return response


def status_error(code: int) -> httpx.HTTPStatusError:
    response = MagicMock()
    response.status_code = code
    return httpx.HTTPStatusError("gateway error", request=MagicMock(), response=response)


class TestAddresses:
    """Test chat id helpers"""

    def test_phone_becomes_contact_id(self):
        assert to_chat_id("+595 981 111-111") == "595981111111@c.us"

    def test_chat_ids_pass_through(self):
        assert to_chat_id("120363000000000000@g.us") == "120363000000000000@g.us"

    def test_same_contact(self):
        assert same_contact("595981111111@c.us", "+595981111111")
        assert not same_contact("595981111111@c.us", "595982222222")
        assert not same_contact("", "")

    def test_chat_id_for_roles(self, gateway):
        assert gateway.chat_id_for(RecipientRole.SHARED) == "120363000000000000@g.us"
        assert gateway.chat_id_for(RecipientRole.HANDLER) == "595981111111@c.us"
        assert gateway.chat_id_for(RecipientRole.SUPERVISOR) == "595982222222@c.us"

    def test_unconfigured_role(self, settings):
        gateway = WhatsAppNotifier(settings.model_copy(update={"supervisor_chat_id": ""}))

        with pytest.raises(TransportError):
            gateway.chat_id_for(RecipientRole.SUPERVISOR)


class TestMakeRequest:
    """Test _make_request with retry logic"""

    @pytest.mark.asyncio
    async def test_send_posts_text(self, gateway, mock_response):
        with patch("httpx.AsyncClient") as mock_client:
            mock_request = AsyncMock(return_value=mock_response)
            mock_client.return_value.__aenter__.return_value.request = mock_request

            await gateway.send(RecipientRole.HANDLER, "hola")

            kwargs = mock_request.call_args.kwargs
            assert kwargs["method"] == "POST"
            assert kwargs["url"] == "http://localhost:3000/api/sendText"
            assert kwargs["json"] == {
                "session": "default",
                "chatId": "595981111111@c.us",
                "text": "hola",
            }
            assert kwargs["headers"]["X-Api-Key"] == "gw-key"

    @pytest.mark.asyncio
    async def test_retry_on_rate_limit(self, gateway):
        with patch("httpx.AsyncClient") as mock_client:
            success_response = MagicMock()
            success_response.json.return_value = {"status": "WORKING"}

            mock_request = AsyncMock(side_effect=[
                status_error(429),
                status_error(503),
                success_response,
            ])
            mock_client.return_value.__aenter__.return_value.request = mock_request

            result = await gateway.session_status()

            assert result == "WORKING"
            assert mock_request.call_count == 3
            assert [c.args[0] for c in gateway._sleep.await_args_list] == [1, 2]

    @pytest.mark.asyncio
    async def test_retry_exhaustion(self, gateway):
        with patch("httpx.AsyncClient") as mock_client:
            mock_request = AsyncMock(side_effect=status_error(500))
            mock_client.return_value.__aenter__.return_value.request = mock_request

            with pytest.raises(TransportError):
                await gateway.send(RecipientRole.SHARED, "hola")

            assert mock_request.call_count == 3

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, gateway):
        with patch("httpx.AsyncClient") as mock_client:
            mock_request = AsyncMock(side_effect=status_error(401))
            mock_client.return_value.__aenter__.return_value.request = mock_request

            with pytest.raises(TransportError):
                await gateway.send(RecipientRole.SHARED, "hola")

            assert mock_request.call_count == 1

    @pytest.mark.asyncio
    async def test_network_error(self, gateway):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                side_effect=httpx.ConnectError("connection refused")
            )

            with pytest.raises(TransportError):
                await gateway.send(RecipientRole.SHARED, "hola")

    @pytest.mark.asyncio
    async def test_plain_text_reply_counts_as_delivered(self, gateway):
        request = httpx.Request("POST", "http://localhost:3000/api/sendText")
        with patch("httpx.AsyncClient") as mock_client:
            mock_request = AsyncMock(return_value=httpx.Response(200, text="OK", request=request))
            mock_client.return_value.__aenter__.return_value.request = mock_request

            await gateway.send(RecipientRole.HANDLER, "hola")

            assert mock_request.call_count == 1

    @pytest.mark.asyncio
    async def test_plain_text_session_reply(self, gateway):
        request = httpx.Request("GET", "http://localhost:3000/api/sessions/default")
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.request = AsyncMock(
                return_value=httpx.Response(200, text="<html>ok</html>", request=request)
            )

            assert await gateway.session_status() == "UNKNOWN"


class TestParseWebhookEvent:
    """Test gateway event conversion"""

    def test_group_message(self):
        message = parse_webhook_event({
            "event": "message",
            "payload": {
                "from": "120363000000000000@g.us",
                "participant": "595983333333@c.us",
                "body": "  no enciende el laser  ",
                "fromMe": False,
            },
        })

        assert message.text == "no enciende el laser"
        assert message.is_group_channel is True
        assert message.sender_address == "595983333333@c.us"
        assert message.chat_address == "120363000000000000@g.us"

    def test_private_message(self):
        message = parse_webhook_event({
            "event": "message",
            "payload": {"from": "595981111111@c.us", "body": "listo RPT-20261019-001"},
        })

        assert message.is_group_channel is False
        assert message.sender_address == "595981111111@c.us"

    @pytest.mark.parametrize("event", [
        {"event": "session.status", "payload": {"status": "WORKING"}},
        {"event": "message", "payload": {"from": "595981111111@c.us", "body": "x", "fromMe": True}},
        {"event": "message", "payload": {"from": "595981111111@c.us", "body": "   "}},
        {"event": "message"},
    ])
    def test_ignored_events(self, event):
        assert parse_webhook_event(event) is None
