"""Custom exception classes for Kafka Topic Sync."""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for different types of failures."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Kafka client errors
    KAFKA_CONNECTION_ERROR = "KAFKA_CONNECTION_ERROR"
    CLUSTER_QUERY_FAILED = "CLUSTER_QUERY_FAILED"

    # Topic errors
    TOPIC_ALREADY_EXISTS = "TOPIC_ALREADY_EXISTS"

    # Snapshot errors
    SNAPSHOT_PARSE_ERROR = "SNAPSHOT_PARSE_ERROR"
    SNAPSHOT_WRITE_ERROR = "SNAPSHOT_WRITE_ERROR"


class TopicSyncError(Exception):
    """Base exception class for Kafka Topic Sync."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Specific error code for the failure
            details: Additional context about the error
            cause: The underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logs."""
        result = {
            'error': self.error_code.value,
            'message': self.message,
            'details': self.details
        }

        if self.cause:
            result['cause'] = str(self.cause)

        return result

    def __str__(self) -> str:
        """String representation of the exception."""
        base_str = f"{self.error_code.value}: {self.message}"

        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            base_str += f" ({details_str})"

        if self.cause:
            base_str += f" [caused by: {self.cause}]"

        return base_str


class ConfigurationError(TopicSyncError):
    """Exception for configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        details = {}
        if config_key:
            details['config_key'] = config_key

        super().__init__(
            message=message,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            details=details
        )


class KafkaConnectionError(TopicSyncError):
    """Exception for failures establishing the admin session."""

    def __init__(
        self,
        message: str,
        bootstrap_servers: Optional[str] = None,
        cause: Optional[Exception] = None
    ):
        details = {}
        if bootstrap_servers:
            details['bootstrap_servers'] = bootstrap_servers

        super().__init__(
            message=message,
            error_code=ErrorCode.KAFKA_CONNECTION_ERROR,
            details=details,
            cause=cause
        )


class ClusterQueryError(TopicSyncError):
    """Exception for list or create requests rejected by the cluster."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        topic_name: Optional[str] = None,
        cause: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details['operation'] = operation
        if topic_name:
            details['topic_name'] = topic_name

        super().__init__(
            message=message,
            error_code=ErrorCode.CLUSTER_QUERY_FAILED,
            details=details,
            cause=cause
        )


class TopicAlreadyExistsError(TopicSyncError):
    """Exception for when a topic already exists."""

    def __init__(self, topic_name: str, cause: Optional[Exception] = None):
        super().__init__(
            message=f"Topic '{topic_name}' already exists",
            error_code=ErrorCode.TOPIC_ALREADY_EXISTS,
            details={'topic_name': topic_name},
            cause=cause
        )
        self.topic_name = topic_name


class SnapshotError(TopicSyncError):
    """Base exception for snapshot file errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        path: Optional[str] = None,
        cause: Optional[Exception] = None
    ):
        details = {}
        if path:
            details['path'] = path

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            cause=cause
        )


class SnapshotParseError(SnapshotError):
    """Snapshot is missing, unreadable or not a valid document."""

    def __init__(self, message: str, path: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.SNAPSHOT_PARSE_ERROR,
            path=path,
            cause=cause
        )


class SnapshotWriteError(SnapshotError):
    """Snapshot could not be written to its destination."""

    def __init__(self, message: str, path: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.SNAPSHOT_WRITE_ERROR,
            path=path,
            cause=cause
        )
