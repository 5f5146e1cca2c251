"""
Bot controller

Routes inbound chat messages:
- private messages from the handler -> lifecycle engine (operator commands)
- messages in the service group -> intake pipeline
- everything else is ignored
"""
from typing import Optional, Union

from servtec.config import Settings, get_settings
from servtec.models.schemas import CommandResult, InboundMessage, IntakeResult
from servtec.services.intake import IntakePipeline
from servtec.services.lifecycle import TicketLifecycleEngine
from servtec.services.reminders import ReminderService
from servtec.services.scheduler import Scheduler
from servtec.services.whatsapp import same_contact
from servtec.utils.logger import get_logger, mask_address

logger = get_logger(__name__)


class BotController:
    """Entry point for inbound messages and scheduled jobs"""

    def __init__(
        self,
        intake: IntakePipeline,
        lifecycle: TicketLifecycleEngine,
        reminders: ReminderService,
        settings: Optional[Settings] = None
    ):
        self.intake = intake
        self.lifecycle = lifecycle
        self.reminders = reminders
        self.settings = settings or get_settings()
        self.scheduler: Optional[Scheduler] = None

    def is_from_handler(self, message: InboundMessage) -> bool:
        handler = self.settings.handler_chat_id
        return (
            not message.is_group_channel
            and bool(handler)
            and same_contact(message.sender_address, handler)
        )

    def is_service_group(self, message: InboundMessage) -> bool:
        if not message.is_group_channel:
            return False
        group = self.settings.group_chat_id
        # Without a configured group every group message is accepted
        return not group or message.chat_address == group

    async def process_message(
        self,
        message: InboundMessage
    ) -> Optional[Union[CommandResult, IntakeResult]]:
        """
        Dispatch one inbound message.

        Returns:
            CommandResult for operator commands, IntakeResult for group
            messages, None when the message was ignored
        """
        if self.is_from_handler(message):
            logger.info(f"Operator command from {mask_address(message.sender_address)}")
            return await self.lifecycle.handle(message.text)

        if self.is_service_group(message):
            logger.info(f"Processing group message ({len(message.text)} chars)")
            return await self.intake.process(message)

        logger.debug(f"Ignoring message from {mask_address(message.sender_address)}")
        return None

    def start(self, scheduler: Scheduler) -> None:
        """Register scheduled jobs"""
        self.scheduler = scheduler
        self.reminders.register(scheduler)
        logger.info("Bot started")

    def stop(self) -> None:
        if self.scheduler is not None:
            self.scheduler.stop()
            self.scheduler = None
        logger.info("Bot stopped")
