"""Logging configuration and setup."""

import logging
import logging.handlers
import json
import sys
from typing import Dict, Any, Optional, List
from datetime import datetime, timezone

from kafka_topic_sync.config import LoggingConfig


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    EXTRA_FIELDS = ('operation', 'topic', 'bootstrap_servers', 'path', 'details')

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Add extra fields if present
        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class AuditLogger:
    """Specialized logger for the export/import audit trail."""

    def __init__(self):
        self.logger = logging.getLogger('kafka_topic_sync.audit')

    def log_export(self, bootstrap_servers: str, path: str, topic_count: int):
        """Log a completed export."""
        extra = {
            'operation': 'export',
            'bootstrap_servers': bootstrap_servers,
            'path': path,
            'details': {'topic_count': topic_count}
        }

        self.logger.info(
            f"Exported {topic_count} topics from {bootstrap_servers} to {path}",
            extra=extra
        )

    def log_topic_operation(self, bootstrap_servers: str, topic_name: str,
                            operation: str, details: Optional[Dict[str, Any]] = None):
        """Log a per-topic import operation."""
        extra = {
            'operation': f"topic_{operation}",
            'bootstrap_servers': bootstrap_servers,
            'topic': topic_name,
            'details': details or {}
        }

        message = f"Topic operation: {operation} on topic {topic_name} in cluster {bootstrap_servers}"
        if details:
            message += f" - Details: {json.dumps(details, sort_keys=True)}"

        self.logger.info(message, extra=extra)


def setup_logging(logging_config: LoggingConfig, verbose: bool = False) -> List[logging.Handler]:
    """Set up logging configuration.

    Without ``verbose`` only warnings and errors reach stderr, so command
    output stays readable. Returns the installed handlers.
    """
    level = logging.getLevelName(logging_config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    if not verbose:
        level = max(level, logging.WARNING)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(console_handler)
    handlers: List[logging.Handler] = [console_handler]

    # File handler if configured
    if logging_config.file_path:
        file_handler = logging.handlers.RotatingFileHandler(
            logging_config.file_path,
            maxBytes=logging_config.max_file_size,
            backupCount=logging_config.backup_count
        )
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)
        handlers.append(file_handler)

    # librdkafka chatter is only useful when debugging the client itself
    logging.getLogger('confluent_kafka').setLevel(logging.WARNING)

    return handlers


# Initialize audit logger
audit_logger = AuditLogger()
