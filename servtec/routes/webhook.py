"""
Inbound WhatsApp gateway webhook
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from servtec.container import get_bot
from servtec.models.schemas import CommandResult, IntakeResult
from servtec.services.bot import BotController
from servtec.services.whatsapp import parse_webhook_event
from servtec.utils.logger import get_logger
from servtec.utils.validators import sanitize_input

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/webhooks", tags=["webhooks"])


class WebhookResponse(BaseModel):
    """What the bot did with the event"""
    handled: bool
    action: str
    ticket_number: Optional[str] = None
    detail: Optional[str] = None


@router.post("/whatsapp", response_model=WebhookResponse)
async def whatsapp_webhook(
    event: Dict[str, Any],
    bot: BotController = Depends(get_bot)
):
    """
    Receive a gateway event

    Always answers 200 so the gateway does not redeliver; the response body
    describes the outcome.
    """
    message = parse_webhook_event(event)
    if message is None:
        return WebhookResponse(handled=False, action="ignored")

    message.text = sanitize_input(message.text)
    result = await bot.process_message(message)

    if isinstance(result, IntakeResult):
        if result.ticket is not None:
            return WebhookResponse(
                handled=True,
                action="ticket_created",
                ticket_number=result.ticket.document_number,
            )
        if result.error:
            return WebhookResponse(handled=True, action="ticket_failed", detail=result.error)
        return WebhookResponse(handled=False, action="not_a_service_request")

    if isinstance(result, CommandResult):
        return WebhookResponse(
            handled=result.applied,
            action=result.command.action.value if result.command else "unrecognized",
            ticket_number=result.command.document_number if result.command else None,
            detail=result.reason,
        )

    return WebhookResponse(handled=False, action="ignored")
