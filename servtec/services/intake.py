"""
Intake pipeline

Inbound group message -> classify -> resolve -> number + create ticket ->
notify the shared channel, the handler and (for critical tickets) the
supervisor.
"""
import asyncio
from typing import Callable, List, Optional

from servtec.config import Settings, get_settings
from servtec.errors import DuplicateDocumentNumber, TransportError
from servtec.models.schemas import (
    CatalogEntry,
    DocumentType,
    InboundMessage,
    IntakeResult,
    Priority,
    RecipientRole,
    Resolution,
    Ticket,
    TicketCreate,
    utcnow,
)
from servtec.repositories.base_repository import TicketStore
from servtec.services import messages
from servtec.services.classifier import MessageClassifier
from servtec.services.numbering import NumberingService
from servtec.services.resolver import EntityResolver
from servtec.services.whatsapp import Notifier
from servtec.utils.dates import resolve_tz
from servtec.utils.logger import get_logger, mask_address

logger = get_logger(__name__)

RETRY_BASE_DELAY = 0.5


class IntakePipeline:
    """Turns service-request messages into tickets"""

    def __init__(
        self,
        store: TicketStore,
        notifier: Notifier,
        classifier: Optional[MessageClassifier] = None,
        resolver: Optional[EntityResolver] = None,
        numbering: Optional[NumberingService] = None,
        settings: Optional[Settings] = None,
        clock: Callable = utcnow,
        sleep=asyncio.sleep
    ):
        self.store = store
        self.notifier = notifier
        self.settings = settings or get_settings()
        self.classifier = classifier or MessageClassifier.from_settings(
            self.settings.classifier_rules_path
        )
        self.resolver = resolver or EntityResolver()
        self.numbering = numbering or NumberingService(store)
        self.clock = clock
        self._sleep = sleep

    async def process(self, message: InboundMessage) -> IntakeResult:
        """
        Process one inbound message.

        Args:
            message: Message posted to the shared channel

        Returns:
            IntakeResult; `ticket` is None for non-requests and failures
        """
        classification = self.classifier.classify(message.text)
        if not classification.is_service_request:
            return IntakeResult(classification=classification)

        catalog = await asyncio.to_thread(self._load_catalog)
        resolution = self.resolver.resolve(message.text, catalog)

        try:
            ticket = await self._create_ticket(message, classification.priority, resolution)
        except Exception as e:
            logger.error(f"Ticket creation failed: {e}")
            await self._send(RecipientRole.SHARED, messages.CREATION_FAILED)
            return IntakeResult(
                classification=classification,
                resolution=resolution,
                error=str(e),
            )

        await self._announce(ticket, resolution)
        logger.info(
            f"Ticket {ticket.document_number} created "
            f"(priority={ticket.priority.value}, client={resolution.client_display}, "
            f"from={mask_address(message.sender_address)})"
        )
        return IntakeResult(classification=classification, resolution=resolution, ticket=ticket)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _load_catalog(self) -> List[CatalogEntry]:
        try:
            return self.store.query_catalog()
        except Exception as e:
            logger.error(f"Catalog query failed, resolving without catalog: {e}")
            return []

    async def _create_ticket(
        self,
        message: InboundMessage,
        priority: Priority,
        resolution: Resolution
    ) -> Ticket:
        retries = max(1, self.settings.ticket_create_retries)
        today = self.clock().astimezone(resolve_tz(self.settings.timezone)).date()
        client_name = resolution.client.full_name if resolution.client else resolution.client_hint

        for attempt in range(retries):
            number = await asyncio.to_thread(
                self.numbering.generate, DocumentType.TICKET, today
            )
            draft = TicketCreate(
                document_number=number,
                description=message.text.strip(),
                priority=priority,
                assigned_handler=self.settings.handler_name,
                client_name=client_name,
                equipment_id=resolution.equipment.id if resolution.equipment else None,
                equipment_name=resolution.equipment_display,
                component=resolution.component,
                contact_address=message.sender_address or None,
            )
            try:
                return await asyncio.to_thread(self.store.create_ticket, draft)
            except DuplicateDocumentNumber:
                if attempt < retries - 1:
                    wait_time = RETRY_BASE_DELAY * 2 ** attempt
                    logger.warning(
                        f"Document number {number} taken (attempt {attempt + 1}/{retries}), "
                        f"regenerating in {wait_time}s"
                    )
                    await self._sleep(wait_time)
                    continue
                raise

    async def _announce(self, ticket: Ticket, resolution: Resolution) -> None:
        handler = self.settings.handler_name
        await self._send(
            RecipientRole.SHARED, messages.group_confirmation(ticket, resolution, handler)
        )
        await self._send(
            RecipientRole.HANDLER, messages.handler_notification(ticket, resolution)
        )
        if ticket.priority == Priority.CRITICAL:
            await self._send(
                RecipientRole.SUPERVISOR, messages.critical_alert(ticket, resolution, handler)
            )

    async def _send(self, role: RecipientRole, text: str) -> None:
        try:
            await self.notifier.send(role, text)
        except TransportError as e:
            logger.error(f"Failed to notify {role.value}: {e}")
