"""
Domain exceptions
"""


class ServTecError(Exception):
    """Base class for bot errors"""


class DuplicateDocumentNumber(ServTecError):
    """Raised by a store when a document number is already taken"""

    def __init__(self, document_number: str):
        super().__init__(f"Document number already exists: {document_number}")
        self.document_number = document_number


class TransportError(ServTecError):
    """Raised by a notifier when a message could not be delivered"""
