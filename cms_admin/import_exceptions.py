"""
Exceptions raised by the content-type import.

Validation errors (HTTP 400) are detected before any transaction is opened.
ImportFailed (HTTP 500) wraps any exception raised during the transactional
write and is only raised after the transaction has been rolled back.
"""

from typing import Any, Dict


class ContentTypeImportError(Exception):
    """
    Base exception for content-type import errors.

    Carries the HTTP status code and the JSON body returned to the client.
    """

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> Dict[str, Any]:
        return {"error": self.message}


class InvalidPayload(ContentTypeImportError):
    def __init__(self, message: str = "contentType and fields are required"):
        super().__init__(message)


class TooManyFields(ContentTypeImportError):
    def __init__(self, count: int, limit: int):
        super().__init__(f"Too many fields ({count}). Max allowed is {limit}.")
        self.count = count
        self.limit = limit


class MissingRequiredAttributes(ContentTypeImportError):
    def __init__(
        self,
        message: str = (
            "contentType.slug (or key), contentType.singular, "
            "and contentType.plural are required"
        ),
    ):
        super().__init__(message)


class NoValidFields(ContentTypeImportError):
    def __init__(self, message: str = "No valid fields provided"):
        super().__init__(message)


class ImportFailed(ContentTypeImportError):
    """The transactional write failed and was rolled back."""

    status_code = 500

    def __init__(self, cause: str):
        super().__init__("Import failed")
        self.cause = cause

    def to_response(self) -> Dict[str, Any]:
        return {"error": self.message, "message": self.cause}
