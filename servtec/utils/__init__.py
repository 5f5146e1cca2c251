"""
Utility functions
"""
from servtec.utils.logger import setup_logger, get_logger, mask_address
from servtec.utils.validators import (
    validate_document_number,
    sanitize_input
)

__all__ = [
    "setup_logger",
    "get_logger",
    "mask_address",
    "validate_document_number",
    "sanitize_input",
]
