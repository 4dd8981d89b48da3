"""Error taxonomy and stage-level error bookkeeping."""

import logging
import time
import traceback
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class GeneAnalysisError(Exception):
    """Base class for all pipeline errors."""


class InputValidationError(GeneAnalysisError):
    """Missing or malformed gene input or contact email."""


class NetworkError(GeneAnalysisError):
    """All direct and relay attempts for one request were exhausted."""

    def __init__(self, message: str, url: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class NotFoundError(GeneAnalysisError):
    """An upstream explicitly reported zero results."""


class PipelineExhaustedError(GeneAnalysisError):
    """Every identity resolution strategy failed, synthesis included."""


class AnalysisInProgressError(GeneAnalysisError):
    """A second analysis was started while one is in flight."""


class ErrorType(Enum):
    """Types of errors that can occur."""
    NETWORK = "network"
    NOT_FOUND = "not_found"
    INPUT_VALIDATION = "input_validation"
    PARSE_ERROR = "parse_error"
    PIPELINE_EXHAUSTED = "pipeline_exhausted"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Context information for an error."""
    error_type: ErrorType
    severity: ErrorSeverity
    message: str
    timestamp: float
    stage: str
    api_name: Optional[str] = None
    status: Optional[int] = None
    traceback: Optional[str] = None
    suggestion: Optional[str] = None


SUGGESTIONS = {
    ErrorType.NETWORK: "Upstream unreachable after retries and relays. Placeholder data was substituted.",
    ErrorType.NOT_FOUND: "Upstream has no record for this gene. Placeholder data was substituted.",
    ErrorType.INPUT_VALIDATION: "Check the gene symbol/ID and the contact email, then try again.",
    ErrorType.PARSE_ERROR: "Upstream returned an unexpected payload. Placeholder data was substituted.",
    ErrorType.PIPELINE_EXHAUSTED: "The gene could not be identified. Reset and try another symbol or ID.",
    ErrorType.UNKNOWN: "Unexpected error. The stage was skipped.",
}


class ErrorHandler:
    """Classifies, logs and remembers errors raised by pipeline stages."""

    def __init__(self, max_history: int = 100):
        self.max_history = max_history
        self.error_history: List[ErrorContext] = []

    def handle_error(self,
                     error: Exception,
                     stage: str,
                     api_name: Optional[str] = None) -> ErrorContext:
        """
        Record an error raised inside a stage.

        Args:
            error: The exception that occurred
            stage: Pipeline stage name
            api_name: Optional upstream name

        Returns:
            ErrorContext with classification and suggestion
        """
        error_type = self._classify_error(error)
        severity = self._determine_severity(error_type)

        context = ErrorContext(
            error_type=error_type,
            severity=severity,
            message=str(error) or type(error).__name__,
            timestamp=time.time(),
            stage=stage,
            api_name=api_name,
            status=getattr(error, 'status', None),
            traceback=traceback.format_exc() if severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL) else None,
            suggestion=SUGGESTIONS.get(error_type),
        )

        self._log_error(context)

        self.error_history.append(context)
        if len(self.error_history) > self.max_history:
            self.error_history = self.error_history[-self.max_history:]

        return context

    def _classify_error(self, error: Exception) -> ErrorType:
        """Classify the error type based on the exception class."""
        if isinstance(error, InputValidationError):
            return ErrorType.INPUT_VALIDATION
        if isinstance(error, PipelineExhaustedError):
            return ErrorType.PIPELINE_EXHAUSTED
        if isinstance(error, NotFoundError):
            return ErrorType.NOT_FOUND
        if isinstance(error, (NetworkError, requests.RequestException)):
            return ErrorType.NETWORK
        if isinstance(error, (ValueError, KeyError, TypeError, IndexError)):
            return ErrorType.PARSE_ERROR
        return ErrorType.UNKNOWN

    def _determine_severity(self, error_type: ErrorType) -> ErrorSeverity:
        if error_type == ErrorType.NOT_FOUND:
            return ErrorSeverity.INFO
        if error_type in (ErrorType.NETWORK, ErrorType.INPUT_VALIDATION):
            return ErrorSeverity.WARNING
        if error_type == ErrorType.PIPELINE_EXHAUSTED:
            return ErrorSeverity.CRITICAL
        return ErrorSeverity.ERROR

    def _log_error(self, context: ErrorContext):
        """Log error with appropriate level and details."""
        log_message = f"{context.stage} - {context.error_type.value}: {context.message}"

        if context.api_name:
            log_message += f" [API: {context.api_name}]"
        if context.status is not None:
            log_message += f" (HTTP {context.status})"

        if context.severity == ErrorSeverity.INFO:
            logger.info(log_message)
        elif context.severity == ErrorSeverity.WARNING:
            logger.warning(log_message)
        elif context.severity == ErrorSeverity.ERROR:
            logger.error(log_message)
            if context.traceback:
                logger.debug(f"Traceback:\n{context.traceback}")
        else:
            logger.critical(log_message)

    def clear(self) -> None:
        self.error_history.clear()

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of errors for reporting."""
        by_type: Dict[str, int] = {}
        by_stage: Dict[str, int] = {}
        for error in self.error_history:
            by_type[error.error_type.value] = by_type.get(error.error_type.value, 0) + 1
            by_stage[error.stage] = by_stage.get(error.stage, 0) + 1

        recent_errors = [
            {
                'type': error.error_type.value,
                'severity': error.severity.value,
                'message': error.message,
                'stage': error.stage,
                'timestamp': datetime.fromtimestamp(error.timestamp).isoformat(),
                'suggestion': error.suggestion,
            }
            for error in self.error_history[-5:]
        ]

        return {
            'total_errors': len(self.error_history),
            'by_type': by_type,
            'by_stage': by_stage,
            'recent_errors': recent_errors,
        }
