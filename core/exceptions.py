"""
Custom exceptions for the loader with structured error context.

Each exception carries context information (table, file, attempt count)
so that a fatal condition can be diagnosed from the log line alone.

Exception Hierarchy:
    LoaderException (base)
    ├── ConnectivityError
    ├── ExtractionError
    │   └── ParseError
    ├── ArchiveError
    ├── LoadError
    │   ├── DatabaseError
    │   │   ├── TransientLockError
    │   │   └── ConstraintViolationError
    │   └── RetriesExhausted
    └── RetryableError / NonRetryableError (mixins)
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class LoaderException(Exception):
    """
    Base exception for all loader errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (table, file, attempt, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Retry Strategy Mixins
# ============================================================================

class RetryableError(LoaderException):
    """
    Mixin for errors that the retry controller may re-run.

    Only storage conditions that are expected to clear on their own
    (write-lock contention) belong here.
    """
    pass


class NonRetryableError(LoaderException):
    """Mixin for errors that must propagate on the first occurrence."""
    pass


# ============================================================================
# Connectivity
# ============================================================================

class ConnectivityError(NonRetryableError):
    """
    Raised when the liveness probe against storage fails.

    Context should include:
        - database_url: Connection URL with credentials stripped
    """
    pass


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(LoaderException):
    """Base exception for input reading failures."""
    pass


class ParseError(NonRetryableError, ExtractionError):
    """
    Raised when a CSV file cannot be turned into records.

    Context should include:
        - file_path: Path to the CSV file
        - record_number: 1-based record position (if applicable)
        - column_name: Column that failed validation (if applicable)
    """
    pass


class ArchiveError(LoaderException):
    """
    Raised when the input archive cannot be downloaded or unpacked.

    Context should include:
        - url or archive_path
        - output_dir (for extraction)
    """
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(LoaderException):
    """Base exception for data loading failures."""
    pass


class DatabaseError(LoadError):
    """
    Raised when a database statement fails.

    Context should include:
        - operation: Type of database operation (INSERT, DELETE, SELECT)
        - table_name: Name of the table
        - record_number: Position of the record in the batch (if applicable)
    """
    pass


class TransientLockError(RetryableError, DatabaseError):
    """Storage is momentarily unavailable to writers (locked / busy)."""
    pass


class ConstraintViolationError(NonRetryableError, DatabaseError):
    """Primary-key, uniqueness or other integrity violations."""
    pass


class RetriesExhausted(LoadError):
    """
    Raised when an operation kept failing transiently until the attempt
    bound was reached.

    Context should include:
        - operation: Name of the operation that was retried
        - attempts: Number of attempts made
    """

    def __init__(
        self,
        message: str,
        attempts: int,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None
    ):
        super().__init__(message, context, original_exception)
        self.attempts = attempts
        self.context["attempts"] = attempts
