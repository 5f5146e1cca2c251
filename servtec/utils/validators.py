"""
Checks applied to path parameters and inbound chat text
"""
import re

# PREFIX-YYYYMMDD-SEQ, or PREFIX-FALLBACK-<epoch digits> when numbering gave up
DOCUMENT_NUMBER_PATTERN = re.compile(r"^[A-Z]+-(\d{8}|FALLBACK)-\d+$", re.IGNORECASE)

MAX_MESSAGE_LENGTH = 4096


def validate_document_number(number: str) -> bool:
    """True when ``number`` looks like a ticket number (case-insensitive)"""
    return bool(DOCUMENT_NUMBER_PATTERN.match(number.strip()))


def sanitize_input(text: str, max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """Drop NUL characters, cap the length and trim surrounding blanks"""
    return text.replace("\x00", "")[:max_length].strip()


# Operator replies: letters, dash, then letter/digit groups (RPT-20261019-004, TKT-0007)
COMMAND_NUMBER_PATTERN = re.compile(r"^[A-Z]+(-[A-Z0-9]+)+$", re.IGNORECASE)


def looks_like_document_number(token: str) -> bool:
    """Looser check for numbers typed in operator commands; no wildcards or punctuation"""
    return bool(COMMAND_NUMBER_PATTERN.match(token))
