"""
Admin API Routes

Manual triggers for the scheduled jobs. Requires X-API-Key authentication.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from servtec.container import get_bot
from servtec.models.schemas import DailySummary, SweepResult
from servtec.services.bot import BotController
from servtec.utils.auth import verify_api_key
from servtec.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin"],
    dependencies=[Depends(verify_api_key)]  # Apply to all routes
)


@router.post("/reminders/run", response_model=SweepResult)
async def run_reminders(bot: BotController = Depends(get_bot)):
    """
    Run one reminder sweep now.

    Returns the sweep outcome; `skipped` is true when a scheduled sweep was
    already running.
    """
    logger.info("Manual reminder sweep requested")
    return await bot.reminders.run_sweep()


@router.post("/summary/run", response_model=DailySummary)
async def run_daily_summary(bot: BotController = Depends(get_bot)):
    """
    Build and send the daily summary now.
    """
    logger.info("Manual daily summary requested")
    summary = await bot.reminders.send_daily_summary()
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not build the daily summary"
        )
    return summary
