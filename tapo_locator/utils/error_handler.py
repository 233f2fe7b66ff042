"""
Error taxonomy and handling helpers for the Tapo locator.

Discovery never lets network unreliability escape a phase: transport and
subprocess failures are described with an ErrorContext, recorded through
ErrorHandler and turned into "try the next candidate" or "phase produced no
result". The exception classes below are raised only by the collaborators
(cloud account, local device) and by configuration loading.
"""

import time
import random
import functools
from typing import Optional, Callable, Any, Dict, Tuple
from enum import Enum
from dataclasses import dataclass, field

from .logger import Logger, get_logger


class ErrorType(Enum):
    """Enumeration for different types of errors."""
    ENVIRONMENT_UNAVAILABLE = "environment_unavailable"
    PROBE_TIMEOUT = "probe_timeout"
    TRANSPORT_ERROR = "transport_error"
    SUBPROCESS_ERROR = "subprocess_error"
    CONFIGURATION_ERROR = "configuration_error"
    AUTH_ERROR = "auth_error"
    CLOUD_ERROR = "cloud_error"
    LOGIN_ERROR = "login_error"
    DEVICE_ERROR = "device_error"


class ErrorSeverity(Enum):
    """Enumeration for error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """
    Context information for error handling.

    Attributes:
        error_type: Type of error that occurred
        severity: Severity level of the error
        operation: Operation that was being performed when error occurred
        component: Component/module where error occurred
        retry_count: Number of retry attempts made
        max_retries: Maximum number of retries allowed
        additional_info: Additional context information
    """
    error_type: ErrorType
    severity: ErrorSeverity
    operation: str
    component: str
    retry_count: int = 0
    max_retries: int = 3
    additional_info: Dict[str, Any] = field(default_factory=dict)


class TapoLocatorError(Exception):
    """Base exception class for the Tapo locator."""

    def __init__(self, message: str, error_context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.error_context = error_context


class NetworkError(TapoLocatorError):
    """Socket level failure (create, bind, send or receive)."""
    pass


class SubprocessFailure(TapoLocatorError):
    """External command missing, not permitted, hung or unreadable."""
    pass


class ConfigurationError(TapoLocatorError):
    """Exception for configuration-related errors."""
    pass


class AuthError(TapoLocatorError):
    """Cloud login rejected or cloud unreachable during login."""
    pass


class CloudError(TapoLocatorError):
    """Cloud request failed after a successful login."""
    pass


class LoginError(TapoLocatorError):
    """Local handshake with the device failed."""
    pass


class DeviceError(TapoLocatorError):
    """Device request failed after a successful local login."""
    pass


class DeviceNotFoundError(TapoLocatorError):
    """Device could not be located on the local network."""
    pass


class DeviceSelectionError(TapoLocatorError):
    """No cloud device matched the requested label or none was chosen."""
    pass


class ErrorHandler:
    """
    Records and logs errors that discovery absorbs.

    Severity decides the log level: LOW goes to debug so that expected
    network noise (timeouts, unreachable broadcast addresses) stays out of
    normal output.
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger(__name__)
        self.error_statistics: Dict[ErrorType, int] = {error_type: 0 for error_type in ErrorType}

    def record(self, error: Exception, context: ErrorContext) -> None:
        """
        Count and log an absorbed error.

        Args:
            error: The exception that occurred
            context: Error context information
        """
        self.error_statistics[context.error_type] += 1

        message = f"{context.component}.{context.operation}: {type(error).__name__}: {error}"
        details = dict(context.additional_info)

        if context.severity == ErrorSeverity.LOW:
            self.logger.debug(message, **details)
        elif context.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(message, **details)
        else:
            self.logger.error(message, **details)

    def count(self, error_type: ErrorType) -> int:
        return self.error_statistics[error_type]

    def backoff_delay(self, retry_count: int) -> float:
        """Exponential backoff with jitter: 1, 2, 4, 8 ... seconds."""
        return (2 ** retry_count) + random.uniform(0.1, 0.5)


def with_retry(max_retries: int = 3, error_types: Tuple = (Exception,),
               error_type: ErrorType = ErrorType.TRANSPORT_ERROR,
               sleep: Optional[Callable[[float], None]] = None):
    """
    Decorator for adding retry logic with exponential backoff to functions.

    Args:
        max_retries: Maximum number of retry attempts
        error_types: Tuple of exception types to catch and retry
        error_type: ErrorType recorded for each failed attempt
        sleep: Sleep function, defaults to time.sleep

    Returns:
        Decorated function with retry logic
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            error_handler = ErrorHandler()

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except error_types as e:
                    if attempt == max_retries:
                        raise

                    context = ErrorContext(
                        error_type=error_type,
                        severity=ErrorSeverity.MEDIUM,
                        operation=func.__name__,
                        component="RetryDecorator",
                        retry_count=attempt,
                        max_retries=max_retries,
                    )
                    error_handler.record(e, context)
                    (sleep or time.sleep)(error_handler.backoff_delay(attempt))

        return wrapper
    return decorator
