"""
Error taxonomy for the message log.

ValidationError is caller-facing and raised before the store is touched.
LogStoreError subclasses come from the store itself and are returned to
the HTTP layer, which maps them to status codes.
"""
from typing import Optional


class ValidationError(ValueError):
    """Malformed caller input (never retried)"""


class InvalidIdentifier(ValidationError):
    """A userId/sessionId that is not a valid UUID"""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field} format")


class LogStoreError(Exception):
    """Base class for errors raised by LogStore operations"""

    def __init__(self, message: str, operation: str, log_key: Optional[str] = None):
        self.operation = operation
        self.log_key = log_key
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.log_key:
            return f"{self.operation} on '{self.log_key}': {base}"
        return f"{self.operation}: {base}"


class StoreUnavailable(LogStoreError):
    """Backing Redis is unreachable or returned a transport/backend error"""


class DuplicateEntry(LogStoreError):
    """Redis rejected an entry id that is not greater than the stream's last id"""

    def __init__(self, message: str, operation: str, log_key: str, entry_id: str):
        self.entry_id = entry_id
        super().__init__(message, operation, log_key)
