"""
Operator command grammar

    <action> <document-number>[ <detail>]
    status

Action keywords are case-insensitive and accept the Spanish aliases used in
the reminder messages ("Listo RPT-20261019-004").
"""
from typing import Dict, Optional

from servtec.models.schemas import CommandAction, OperatorCommand
from servtec.utils.logger import get_logger
from servtec.utils.text import fold
from servtec.utils.validators import looks_like_document_number

logger = get_logger(__name__)

ACTION_ALIASES: Dict[str, CommandAction] = {
    "complete": CommandAction.COMPLETE,
    "listo": CommandAction.COMPLETE,
    "done": CommandAction.COMPLETE,
    "start": CommandAction.START,
    "proceso": CommandAction.START,
    "hold": CommandAction.HOLD,
    "repuesto": CommandAction.HOLD,
    "resume": CommandAction.RESUME,
    "reanudar": CommandAction.RESUME,
    "problem": CommandAction.PROBLEM,
    "problema": CommandAction.PROBLEM,
    "status": CommandAction.STATUS,
    "estado": CommandAction.STATUS,
}

NO_DETAIL = "Sin detalles"


def parse_command(text: str) -> Optional[OperatorCommand]:
    """
    Parse an operator reply.

    Args:
        text: Raw reply text

    Returns:
        OperatorCommand, or None for unrecognized or malformed input
    """
    parts = (text or "").strip().split(maxsplit=2)
    if not parts:
        return None

    action = ACTION_ALIASES.get(fold(parts[0]))
    if action is None:
        logger.debug(f"Unrecognized command keyword: {parts[0]!r}")
        return None

    if action == CommandAction.STATUS:
        return OperatorCommand(action=action)

    if len(parts) < 2:
        logger.debug(f"Command '{action.value}' is missing a document number")
        return None

    if not looks_like_document_number(parts[1]):
        logger.debug(f"Command '{action.value}' has a malformed document number: {parts[1]!r}")
        return None

    detail = parts[2].strip() if len(parts) > 2 else None
    if action == CommandAction.PROBLEM and not detail:
        detail = NO_DETAIL

    return OperatorCommand(
        action=action,
        document_number=parts[1].upper(),
        detail=detail,
    )
