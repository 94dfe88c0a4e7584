"""Export cluster topic definitions into a snapshot file."""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from kafka_topic_sync.clients.admin_session import AdminSession, ClientConfig, TopicDescriptor
from kafka_topic_sync.exceptions import ClusterQueryError
from kafka_topic_sync.logging_config import audit_logger
from kafka_topic_sync.models.topic import (
    SNAPSHOT_FORMAT_VERSION, SnapshotDocument, TopicSpec, is_internal_topic
)
from kafka_topic_sync.services import snapshot_codec

logger = logging.getLogger(__name__)

SessionFactory = Callable[[ClientConfig], AdminSession]


def normalize_descriptor(descriptor: TopicDescriptor) -> TopicSpec:
    """Convert a cluster descriptor into a TopicSpec.

    Entries reported without a value are kept with an empty string; the
    snapshot format never carries null config values. A descriptor that
    cannot form a valid TopicSpec (e.g. no partitions reported) raises
    ClusterQueryError.
    """
    configs = {
        key: value if value is not None else ''
        for key, value in descriptor.config_entries.items()
    }
    try:
        return TopicSpec(
            name=descriptor.name,
            partitions=descriptor.num_partitions,
            replication_factor=descriptor.replication_factor,
            configs=configs
        )
    except ValidationError as e:
        raise ClusterQueryError(
            f"Cluster reported an invalid definition for topic {descriptor.name}: "
            f"{descriptor.num_partitions} partitions, replication factor {descriptor.replication_factor}",
            operation='list_topics',
            topic_name=descriptor.name,
            cause=e
        ) from e


def build_snapshot(
    descriptors: Iterable[TopicDescriptor],
    exclude_internal: bool = True,
    generated_at: Optional[datetime] = None
) -> SnapshotDocument:
    """Filter, normalize and sort descriptors into a snapshot document."""
    topics: List[TopicSpec] = []
    for descriptor in descriptors:
        if exclude_internal and is_internal_topic(descriptor.name):
            logger.debug(f"Skipping internal topic {descriptor.name}")
            continue
        topics.append(normalize_descriptor(descriptor))

    topics.sort(key=lambda topic: topic.name)

    return SnapshotDocument(
        format_version=SNAPSHOT_FORMAT_VERSION,
        generated_at=generated_at or datetime.now(timezone.utc).replace(microsecond=0),
        topics=tuple(topics)
    )


class TopicExporter:
    """Reads every topic of a cluster and writes it to a snapshot file."""

    def __init__(
        self,
        client_config: ClientConfig,
        session_factory: SessionFactory = AdminSession.open,
        indent: int = 2
    ):
        self.client_config = client_config
        self.session_factory = session_factory
        self.indent = indent

    def export(self, output_path: str, exclude_internal: bool = True) -> SnapshotDocument:
        """Export the cluster's topics to ``output_path`` and return the snapshot."""
        bootstrap = self.client_config.bootstrap
        logger.info(f"Exporting topics from {bootstrap} to {output_path}")

        with self.session_factory(self.client_config) as session:
            descriptors: Dict[str, TopicDescriptor] = session.list_topics()

        document = build_snapshot(descriptors.values(), exclude_internal=exclude_internal)
        snapshot_codec.write_snapshot(document, output_path, indent=self.indent)

        audit_logger.log_export(bootstrap, str(output_path), len(document.topics))
        return document
