"""
Base class for discovery phases.

Every phase (prescan, broadcast, neighbor table) shares the same plumbing:
an optional logger, an ErrorHandler that absorbs expected failures, the
network detector, and timing of the phase.
"""

import time
from typing import Optional

from ..core.data_models import PhaseResult, PhaseStatus
from ..core.network_detector import NetworkDetector
from ..utils.error_handler import ErrorHandler, ErrorContext, ErrorType, ErrorSeverity


class BaseScanner:
    """
    Shared plumbing for discovery phases.

    Subclasses set ``phase_name`` and implement their own entry point
    (``scan``, ``discover`` or ``resolve``); none of them raise for network
    unreliability.
    """

    phase_name = "base"

    def __init__(self, logger=None, error_handler: Optional[ErrorHandler] = None,
                 network_detector: Optional[NetworkDetector] = None):
        """
        Initialize the base scanner.

        Args:
            logger: Logger instance for diagnostic output
            error_handler: ErrorHandler recording absorbed failures
            network_detector: Interface enumerator, shared with the orchestrator
        """
        self.logger = logger
        self.error_handler = error_handler or ErrorHandler(logger)
        self.network_detector = network_detector or NetworkDetector(logger)
        self._start_time: Optional[float] = None

    def _start_timer(self) -> None:
        self._start_time = time.monotonic()

    def _elapsed(self) -> float:
        if self._start_time is None:
            return 0.0
        return time.monotonic() - self._start_time

    def _result(self, status: PhaseStatus, **kwargs) -> PhaseResult:
        return PhaseResult(phase=self.phase_name, status=status, duration=self._elapsed(), **kwargs)

    def _absorb(self, error: Exception, error_type: ErrorType, operation: str,
                severity: ErrorSeverity = ErrorSeverity.LOW, **info) -> str:
        """
        Record an expected failure and return its text for the phase result.
        """
        context = ErrorContext(
            error_type=error_type,
            severity=severity,
            operation=operation,
            component=type(self).__name__,
            additional_info=info
        )
        self.error_handler.record(error, context)
        return f"{operation}: {type(error).__name__}: {error}"

    def _log_info(self, message: str) -> None:
        """Log an info message if logger is available."""
        if self.logger:
            self.logger.info(message)

    def _log_warning(self, message: str) -> None:
        """Log a warning message if logger is available."""
        if self.logger:
            self.logger.warning(message)

    def _log_debug(self, message: str) -> None:
        """Log a debug message if logger is available."""
        if self.logger:
            self.logger.debug(message)
