"""Topic snapshot data models."""

import logging
from datetime import datetime
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# Admin protocol baseline the snapshot format was built against.
SNAPSHOT_FORMAT_VERSION = "2.4.0"

# Kafka marks cluster-internal topics (__consumer_offsets, __transaction_state) with this prefix.
INTERNAL_TOPIC_PREFIX = "__"

MAX_PARTITIONS = 2 ** 31 - 1  # int32
MAX_REPLICATION_FACTOR = 2 ** 15 - 1  # int16


def is_internal_topic(name: str) -> bool:
    """Return True for topics reserved by the cluster itself."""
    return name.startswith(INTERNAL_TOPIC_PREFIX)


class TopicSpec(BaseModel):
    """Declarative state of a single topic."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Topic name", min_length=1, strict=True)
    partitions: int = Field(..., description="Number of partitions", ge=1, le=MAX_PARTITIONS, strict=True)
    replication_factor: int = Field(
        ..., description="Replication factor", ge=1, le=MAX_REPLICATION_FACTOR, strict=True
    )
    configs: Dict[str, str] = Field(
        default_factory=dict,
        description="Non-default topic configurations; absent keys use the cluster default"
    )

    @field_validator('configs', mode='before')
    @classmethod
    def validate_configs(cls, v):
        """Config values must be strings; null is never a valid value."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("configs must be a mapping of strings to strings")
        for key, value in v.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise ValueError(f"config '{key}' must map a string to a string, got {value!r}")
        return v


class SnapshotDocument(BaseModel):
    """Versioned snapshot of a cluster's topic definitions."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    format_version: str = Field(..., alias="kafka_version", strict=True)
    generated_at: Optional[datetime] = Field(None, alias="export_time")
    topics: Tuple[TopicSpec, ...] = Field(..., description="Topics in processing order")

    @field_validator('generated_at', mode='wrap')
    @classmethod
    def validate_generated_at(cls, v, handler):
        """The export time is informational; an unreadable value is dropped."""
        try:
            return handler(v)
        except ValidationError:
            logger.warning(f"Ignoring unreadable export_time {v!r}")
            return None

    @field_validator('topics', mode='before')
    @classmethod
    def validate_topics(cls, v):
        """An explicit null topic list means no topics."""
        if v is None:
            return ()
        return v

    @property
    def topic_names(self) -> Tuple[str, ...]:
        """Topic names in document order."""
        return tuple(topic.name for topic in self.topics)
