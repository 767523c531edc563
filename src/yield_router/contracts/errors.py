"""
Error types and error reporting for workflow contract operations.

Nothing in this package retries. Errors are classified only so that they
are logged at the right level with useful context.
"""

from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class WorkflowError(Exception):
    """Base exception for workflow operations."""
    pass


class InvalidArgument(WorkflowError):
    """Raised when local input is malformed. No network effect has happened."""
    pass


class PoolNotFound(WorkflowError):
    """Raised when the factory has no pool for the requested pair and fee tier."""

    def __init__(self, token_a: str, token_b: str, fee_tier: int):
        super().__init__(
            f"No pool registered for {token_a}/{token_b} at fee tier {fee_tier}"
        )
        self.token_a = token_a
        self.token_b = token_b
        self.fee_tier = fee_tier


class TransactionFailure(WorkflowError):
    """Raised when a submitted transaction reverted or could not be confirmed."""

    def __init__(self, message: str, tx_hash: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash
        self.operation = operation

    def __str__(self) -> str:
        message = super().__str__()
        if self.tx_hash:
            return f"{message} (tx {self.tx_hash})"
        return message


class ErrorHandler:
    """
    Centralized error reporting for contract operations.

    Classifies errors into categories and logs them with structured context.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def classify_error(self, error: Exception) -> str:
        """
        Classify an error into a category for reporting.

        Args:
            error: Exception to classify

        Returns:
            Error category string
        """
        if isinstance(error, (InvalidArgument, PoolNotFound)):
            return 'validation'

        error_str = str(error).lower()

        # Contract execution errors
        if any(keyword in error_str for keyword in ['revert', 'execution reverted', 'out of gas']):
            return 'contract'

        # Network connectivity errors
        if any(keyword in error_str for keyword in ['connection', 'timeout', 'timed out', 'network', 'dns']):
            return 'network'

        if any(keyword in error_str for keyword in ['insufficient funds', 'nonce too low', 'invalid']):
            return 'validation'

        return 'unknown'

    def log_error(self, error: Exception, context: Dict[str, Any]):
        """
        Log error with appropriate level and context.

        Args:
            error: Exception to log
            context: Additional context for logging
        """
        error_category = self.classify_error(error)

        log_data = {
            'error_type': type(error).__name__,
            'error_category': error_category,
            'error_message': str(error),
            **context
        }

        if error_category == 'validation':
            self.logger.warning(f"Validation error: {error}", extra=log_data)
        elif error_category == 'contract':
            self.logger.error(f"Contract execution failed: {error}", extra=log_data)
        elif error_category == 'network':
            self.logger.error(f"Network error: {error}", extra=log_data)
        else:
            self.logger.error(f"Operation error: {error}", extra=log_data)
