"""Configuration management for Kafka Topic Sync."""

import os
from typing import Optional
from dataclasses import dataclass, field

from kafka_topic_sync.exceptions import ConfigurationError


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class KafkaConfig:
    """Kafka admin client configuration."""
    admin_timeout_seconds: float = 10.0
    request_timeout_ms: int = 30000
    security_protocol: str = "PLAINTEXT"
    sasl_mechanism: Optional[str] = None
    sasl_username: Optional[str] = None
    sasl_password: Optional[str] = None
    ssl_ca_location: Optional[str] = None
    ssl_cert_location: Optional[str] = None
    ssl_key_location: Optional[str] = None


@dataclass
class SnapshotConfig:
    """Snapshot file defaults."""
    default_path: str = "topics.json"
    indent: int = 2


@dataclass
class Config:
    """Main configuration class."""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    snapshot: SnapshotConfig = field(default_factory=SnapshotConfig)

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        config = cls()

        # Logging config
        config.logging.level = os.getenv('LOG_LEVEL', config.logging.level)
        config.logging.file_path = os.getenv('LOG_FILE_PATH')

        # Kafka config
        config.kafka.admin_timeout_seconds = _env_number(
            'KAFKA_ADMIN_TIMEOUT', config.kafka.admin_timeout_seconds, float
        )
        config.kafka.request_timeout_ms = _env_number(
            'KAFKA_REQUEST_TIMEOUT_MS', config.kafka.request_timeout_ms, int
        )
        config.kafka.security_protocol = os.getenv(
            'KAFKA_SECURITY_PROTOCOL', config.kafka.security_protocol
        )
        config.kafka.sasl_mechanism = os.getenv('KAFKA_SASL_MECHANISM')
        config.kafka.sasl_username = os.getenv('KAFKA_SASL_USERNAME')
        config.kafka.sasl_password = os.getenv('KAFKA_SASL_PASSWORD')
        config.kafka.ssl_ca_location = os.getenv('KAFKA_SSL_CA_LOCATION')
        config.kafka.ssl_cert_location = os.getenv('KAFKA_SSL_CERT_LOCATION')
        config.kafka.ssl_key_location = os.getenv('KAFKA_SSL_KEY_LOCATION')

        return config


def _env_number(key: str, default, cast):
    """Read a positive number from the environment."""
    raw = os.getenv(key)
    if raw is None or raw == '':
        return default

    try:
        value = cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid value '{raw}' for {key}: {e}", config_key=key) from e

    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {raw}", config_key=key)

    return value

