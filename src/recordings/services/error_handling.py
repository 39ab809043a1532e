"""Error handling and categorization for storage and sync operations."""

import asyncio
from enum import Enum
from typing import Optional

from google.api_core import exceptions as gcs_exceptions


class ErrorCategory(Enum):
    """Categories for different types of sync errors."""
    LOCAL_MISSING = "local_missing"
    NETWORK = "network"
    PERMISSION = "permission"
    NOT_FOUND = "not_found"
    SERVER = "server"
    CLIENT = "client"
    TIMEOUT = "timeout"
    DATA = "data"
    UNKNOWN = "unknown"


class RecordingSyncError(RuntimeError):
    """Base class for errors raised by the recordings sync services."""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN):
        self.message = message
        self.category = category
        super().__init__(message)


class LocalFileMissingError(RecordingSyncError):
    """Raised when a local file disappears before it could be uploaded."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File does not exist at: {path}", ErrorCategory.LOCAL_MISSING)


class CloudStorageError(RecordingSyncError):
    """Raised when listing or uploading against the object store fails."""


class UploadError(RecordingSyncError):
    """Raised to the caller of a manual upload that did not complete."""

    def __init__(self, name: str, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN):
        self.name = name
        super().__init__(f"Upload failed for {name}: {message}", category)


class ContactPermissionError(RecordingSyncError):
    """Raised by a contact source when contacts cannot be read."""

    def __init__(self, message: str = "Contact permission denied"):
        super().__init__(message, ErrorCategory.PERMISSION)


class PlaybackError(RecordingSyncError):
    """Raised when the audio player cannot load a track."""


def categorize_error(exception: BaseException) -> ErrorCategory:
    """Categorize an exception into error types for reporting."""
    if isinstance(exception, RecordingSyncError):
        return exception.category
    elif isinstance(exception, FileNotFoundError):
        return ErrorCategory.LOCAL_MISSING
    elif isinstance(exception, asyncio.TimeoutError):
        return ErrorCategory.TIMEOUT
    elif isinstance(exception, PermissionError):
        return ErrorCategory.PERMISSION
    elif isinstance(exception, gcs_exceptions.NotFound):
        return ErrorCategory.NOT_FOUND
    elif isinstance(exception, (gcs_exceptions.Forbidden, gcs_exceptions.Unauthorized)):
        return ErrorCategory.PERMISSION
    elif isinstance(exception, gcs_exceptions.ServerError):
        return ErrorCategory.SERVER
    elif isinstance(exception, gcs_exceptions.ClientError):
        return ErrorCategory.CLIENT
    elif isinstance(exception, gcs_exceptions.RetryError):
        return ErrorCategory.TIMEOUT
    elif isinstance(exception, (ConnectionError, gcs_exceptions.GoogleAPICallError)):
        return ErrorCategory.NETWORK
    elif isinstance(exception, ValueError):
        return ErrorCategory.DATA
    else:
        return ErrorCategory.UNKNOWN


def describe_error(exception: BaseException, category: Optional[ErrorCategory] = None) -> str:
    """Format an exception as a short message suitable for a report or prompt."""
    category = category or categorize_error(exception)
    message = getattr(exception, "message", None) or str(exception) or type(exception).__name__
    return f"[{category.value}] {message}"
