"""
Ticket-related API routes (read-only)
"""
import asyncio

from fastapi import APIRouter, Depends, HTTPException

from servtec.container import get_bot
from servtec.models.schemas import StatusReport, Ticket
from servtec.services.bot import BotController
from servtec.utils.logger import get_logger
from servtec.utils.validators import validate_document_number

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/tickets", tags=["tickets"])


@router.get("/status", response_model=StatusReport)
async def ticket_status(bot: BotController = Depends(get_bot)):
    """
    Open tickets per state and priority, plus tickets completed today
    """
    try:
        return await asyncio.to_thread(bot.lifecycle.status)
    except Exception as e:
        logger.error(f"Failed to compute ticket status: {e}")
        raise HTTPException(status_code=502, detail="Ticket store unavailable")


@router.get("/{document_number}", response_model=Ticket)
async def get_ticket(document_number: str, bot: BotController = Depends(get_bot)):
    """
    Get ticket details by document number
    """
    if not validate_document_number(document_number):
        raise HTTPException(status_code=400, detail="Invalid document number format")

    try:
        ticket = await asyncio.to_thread(bot.lifecycle.store.get_ticket, document_number)
    except Exception as e:
        logger.error(f"Failed to load ticket {document_number}: {e}")
        raise HTTPException(status_code=502, detail="Ticket store unavailable")

    if ticket is None:
        raise HTTPException(status_code=404, detail=f"Ticket {document_number} not found")
    return ticket
