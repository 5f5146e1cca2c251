"""
Component wiring

Builds the bot from settings. Every collaborator can be overridden, which is
how the tests and local runs swap in the in-memory store.
"""
from typing import Optional

from fastapi import HTTPException, Request, status

from servtec.config import Settings, get_settings
from servtec.repositories.base_repository import TicketStore
from servtec.services.bot import BotController
from servtec.services.classifier import MessageClassifier
from servtec.services.intake import IntakePipeline
from servtec.services.lifecycle import TicketLifecycleEngine
from servtec.services.numbering import NumberingService
from servtec.services.reminders import ReminderService
from servtec.services.resolver import EntityResolver
from servtec.services.whatsapp import Notifier, WhatsAppNotifier
from servtec.utils.logger import get_logger

logger = get_logger(__name__)


def build_bot(
    settings: Optional[Settings] = None,
    store: Optional[TicketStore] = None,
    notifier: Optional[Notifier] = None
) -> BotController:
    """
    Create a fully wired BotController.

    Args:
        settings: Settings (cached settings when None)
        store: Ticket store (Supabase when None)
        notifier: Outbound notifier (WhatsApp gateway when None)
    """
    settings = settings or get_settings()
    if store is None:
        from servtec.repositories.ticket_repository import SupabaseTicketStore
        store = SupabaseTicketStore(settings=settings)
    notifier = notifier or WhatsAppNotifier(settings)

    numbering = NumberingService(store)
    intake = IntakePipeline(
        store,
        notifier,
        classifier=MessageClassifier.from_settings(settings.classifier_rules_path),
        resolver=EntityResolver(),
        numbering=numbering,
        settings=settings,
    )
    lifecycle = TicketLifecycleEngine(store, notifier, settings=settings)
    reminders = ReminderService(store, notifier, settings=settings)

    logger.info(f"Bot wired with {type(store).__name__} and {type(notifier).__name__}")
    return BotController(intake, lifecycle, reminders, settings=settings)


def get_bot(request: Request) -> BotController:
    """FastAPI dependency returning the application's bot"""
    bot = getattr(request.app.state, "bot", None)
    if bot is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Bot not initialized"
        )
    return bot
