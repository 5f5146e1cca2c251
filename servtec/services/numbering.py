"""
Numbering Service

Generates human-readable sequential document numbers of the form
PREFIX-YYYYMMDD-NNN. The sequential part restarts every calendar day and its
width is configured per document type.

The lookup of the current maximum and the insert that uses the next number are
two separate store calls, so concurrent callers can compute the same number.
Stores reject duplicates (DuplicateDocumentNumber) and the intake pipeline
regenerates on conflict.
"""
import re
import time
from datetime import date, datetime
from typing import Dict, List, Mapping, Optional, Union

from servtec.models.schemas import (
    DocumentType,
    NumberFormat,
    NumberingStats,
    ParsedNumber,
)
from servtec.repositories.base_repository import TicketStore
from servtec.utils.logger import get_logger

logger = get_logger(__name__)


DEFAULT_FORMATS: Dict[DocumentType, NumberFormat] = {
    DocumentType.REPORT: NumberFormat(prefix="RPT", digits=3),
    # Tickets become service reports and share their sequence
    DocumentType.TICKET: NumberFormat(prefix="RPT", digits=3),
    DocumentType.FORM: NumberFormat(prefix="FORM", digits=3, column="form_number"),
    DocumentType.INVOICE: NumberFormat(
        prefix="FACT", digits=4, table="invoices", column="invoice_number"
    ),
    DocumentType.DELIVERY_NOTE: NumberFormat(
        prefix="REM", digits=4, table="delivery_notes", column="delivery_number"
    ),
    DocumentType.WORK_ORDER: NumberFormat(prefix="OT", digits=3, column="work_order_number"),
}

NUMBER_PATTERN = re.compile(r"^([A-Z]+)-(\d{8})-(\d+)$")

DateLike = Union[date, datetime]


def format_day(value: DateLike) -> str:
    """Date as YYYYMMDD"""
    return value.strftime("%Y%m%d")


class NumberingService:
    """
    Centralized document numbering.

    Usage:
        numbering = NumberingService(store)
        numbering.generate(DocumentType.TICKET, date.today())
        # 'RPT-20261019-004'
    """

    def __init__(
        self,
        store: TicketStore,
        formats: Optional[Mapping[DocumentType, NumberFormat]] = None
    ):
        self.store = store
        self.formats: Dict[DocumentType, NumberFormat] = dict(DEFAULT_FORMATS)
        if formats:
            self.formats.update(formats)

    def format_for(self, doc_type: DocumentType) -> NumberFormat:
        return self.formats[DocumentType(doc_type)]

    def generate(self, doc_type: DocumentType, on: Optional[DateLike] = None) -> str:
        """
        Generate the next number for a document type and day.

        Never raises: any lookup or parse failure returns a fallback number.

        Args:
            doc_type: Document type
            on: Day the number belongs to (today when None)

        Returns:
            Document number string
        """
        doc_type = DocumentType(doc_type)
        fmt = self.format_for(doc_type)
        try:
            day = format_day(on or date.today())
            next_sequential = self._last_sequential(fmt, day) + 1
            number = f"{fmt.prefix}-{day}-{next_sequential:0{fmt.digits}d}"
            logger.debug(f"Generated {doc_type.value} number: {number}")
            return number

        except Exception as e:
            fallback = self._fallback(fmt)
            logger.error(
                f"Numbering degraded for {doc_type.value}, "
                f"using fallback {fallback}: {e}"
            )
            return fallback

    def reserve_range(
        self,
        doc_type: DocumentType,
        quantity: int,
        on: Optional[DateLike] = None
    ) -> List[str]:
        """
        Compute `quantity` consecutive numbers from a single lookup.

        The numbers are not persisted; callers must insert them before the
        next lookup or they will be handed out again.
        """
        if quantity < 1:
            raise ValueError("quantity must be at least 1")

        doc_type = DocumentType(doc_type)
        fmt = self.format_for(doc_type)
        try:
            day = format_day(on or date.today())
            start = self._last_sequential(fmt, day) + 1
            return [
                f"{fmt.prefix}-{day}-{seq:0{fmt.digits}d}"
                for seq in range(start, start + quantity)
            ]
        except Exception as e:
            logger.error(f"Range reservation degraded for {doc_type.value}: {e}")
            return [self._fallback(fmt, suffix=str(i)) for i in range(quantity)]

    def validate(self, number: str, doc_type: DocumentType) -> bool:
        """Check prefix, 8-digit date and exact sequential width"""
        fmt = self.format_for(doc_type)
        pattern = rf"^{re.escape(fmt.prefix)}-\d{{8}}-\d{{{fmt.digits}}}$"
        return re.match(pattern, number) is not None

    @staticmethod
    def parse(number: str) -> Optional[ParsedNumber]:
        """
        Split a document number into prefix, date and sequential.

        Returns:
            ParsedNumber, or None when the string is not a document number
        """
        match = NUMBER_PATTERN.match(number.strip().upper())
        if not match:
            return None
        prefix, day, sequential = match.groups()
        return ParsedNumber(prefix=prefix, date=day, sequential=int(sequential))

    def stats(self, doc_type: DocumentType, on: Optional[DateLike] = None) -> NumberingStats:
        """Numbers issued today, this month and the latest issued overall"""
        doc_type = DocumentType(doc_type)
        fmt = self.format_for(doc_type)
        day = format_day(on or date.today())

        try:
            month = self.store.list_numbers(fmt, f"{fmt.prefix}-{day[:6]}")
            latest = self.store.list_numbers(fmt, f"{fmt.prefix}-")
        except Exception as e:
            logger.error(f"Failed to compute numbering stats for {doc_type.value}: {e}")
            return NumberingStats()

        latest = [n for n in latest if NUMBER_PATTERN.match(n)]
        today_prefix = f"{fmt.prefix}-{day}-"
        return NumberingStats(
            total_today=sum(1 for n in month if n.startswith(today_prefix)),
            total_this_month=len(month),
            last_number=latest[0] if latest else None,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _last_sequential(self, fmt: NumberFormat, day: str) -> int:
        last = self.store.find_max_number(fmt, day)
        if not last:
            return 0

        match = re.match(rf"^{re.escape(fmt.prefix)}-{day}-(\d+)$", last)
        if not match:
            raise ValueError(f"Unparseable stored number: {last!r}")
        return int(match.group(1))

    @staticmethod
    def _fallback(fmt: NumberFormat, suffix: str = "") -> str:
        stamp = str(time.time_ns())[-9:]
        return f"{fmt.prefix}-FALLBACK-{stamp}{suffix}"
