"""
Error Handling Service
Centralized error processing, logging and user-friendly error messages.
"""

import logging
from datetime import datetime
from typing import Any, Optional
import traceback

logger = logging.getLogger(__name__)


class ErrorCategory:
    """Error categories for classification."""
    SYSTEM = "SYSTEM"
    DATA = "DATA"
    DATA_PROCESSING = "DATA_PROCESSING"
    SPEECH = "SPEECH"
    VALIDATION = "VALIDATION"


class DataAccessError(Exception):
    """Raised by the data collaborator when a table fetch fails."""

    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(message)
        self.table = table


class ErrorHandlingService:
    """Service for centralized error handling and processing."""

    @staticmethod
    def process_error(
        error: Exception,
        context: str = "",
        category: str = ErrorCategory.SYSTEM,
        user_message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Process and structure an error for logging and user display.

        Args:
            error: The exception that occurred
            context: Context where error occurred (e.g., "fetch_snapshot")
            category: Error category (ErrorCategory constant)
            user_message: Optional user-friendly message override
            details: Additional error details

        Returns:
            Dictionary with error information
        """
        error_type = type(error).__name__

        if not user_message:
            user_message = ErrorHandlingService._generate_user_message(
                error, error_type, context
            )

        error_info = {
            "message": str(error),
            "user_message": user_message,
            "type": error_type,
            "context": context,
            "category": category,
            "timestamp": datetime.now().isoformat(),
            "details": details or {},
            "stack_trace": "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ),
        }

        return error_info

    @staticmethod
    def _generate_user_message(
        error: Exception,
        error_type: str,
        context: str
    ) -> str:
        """
        Generate user-friendly error message based on error type.

        Args:
            error: The exception
            error_type: Type name of the exception
            context: Context where error occurred

        Returns:
            User-friendly error message
        """
        if isinstance(error, DataAccessError):
            return "An error occurred while processing your query. Please try again."

        error_msg = str(error).lower()

        if any(keyword in error_msg for keyword in [
            'connection', 'timeout', 'network', 'catalog'
        ]):
            return "The data source is unavailable right now. Please try again."

        if any(keyword in error_msg for keyword in [
            'microphone', 'speech', 'audio', 'not-allowed'
        ]):
            return "Voice input is unavailable. Please type your question instead."

        type_messages = {
            'KeyError': "A required data field is missing.",
            'ValueError': "Invalid data value detected. Please check your input.",
            'TypeError': "Data type mismatch. Please verify your data format.",
        }

        return type_messages.get(
            error_type,
            f"An error occurred while {context or 'processing your request'}. Please try again."
        )

    @staticmethod
    def log_error(
        error_info: dict[str, Any] | str | Exception,
        category: str = ErrorCategory.SYSTEM,
        log_level: str = "ERROR"
    ) -> None:
        """
        Log error information.

        Args:
            error_info: Error dictionary from process_error, or error message string, or Exception
            category: Error category (if error_info is string/Exception)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if isinstance(error_info, Exception):
            error_info = ErrorHandlingService.process_error(
                error_info,
                context="unknown",
                category=category
            )
        elif isinstance(error_info, str):
            error_info = {
                "message": error_info,
                "type": "Error",
                "context": "unknown",
                "category": category,
                "timestamp": datetime.now().isoformat(),
                "details": {},
                "stack_trace": ""
            }

        level = logging.getLevelName(log_level.upper())
        if not isinstance(level, int):
            level = logging.ERROR

        logger.log(
            level,
            "[%s] %s: %s",
            error_info['category'],
            error_info['context'],
            error_info['message'],
        )
        if error_info.get('details'):
            logger.log(level, "Details: %s", error_info['details'])
        if error_info.get('stack_trace') and level >= logging.ERROR:
            logger.debug("Stack trace:\n%s", error_info['stack_trace'])

    @staticmethod
    def display_error(
        error_info: dict[str, Any],
        show_details: bool = False
    ) -> str:
        """
        Generate error message for user display.

        Args:
            error_info: Error dictionary from process_error
            show_details: Whether to include technical details (for debugging)

        Returns:
            Formatted error message for display
        """
        message = error_info.get('user_message') or error_info['message']

        if show_details and error_info.get('details'):
            details_str = ", ".join([
                f"{k}: {v}" for k, v in error_info['details'].items()
            ])
            return f"{message} ({details_str})"

        return message


# Singleton instance (optional, for consistent state if needed)
_error_handling_service = ErrorHandlingService()

def get_error_handler() -> ErrorHandlingService:
    """Get the error handling service instance."""
    return _error_handling_service
