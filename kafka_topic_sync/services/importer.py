"""Replay a snapshot file onto a cluster, creating absent topics."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from kafka_topic_sync.clients.admin_session import AdminSession, ClientConfig
from kafka_topic_sync.exceptions import TopicAlreadyExistsError
from kafka_topic_sync.logging_config import audit_logger
from kafka_topic_sync.models.topic import SNAPSHOT_FORMAT_VERSION, SnapshotDocument, TopicSpec
from kafka_topic_sync.services import snapshot_codec

logger = logging.getLogger(__name__)

SessionFactory = Callable[[ClientConfig], AdminSession]


class ImportAction(str, Enum):
    """Outcome of importing one topic."""
    CREATED = "created"
    SKIPPED = "skipped"


@dataclass
class TopicImportResult:
    """Result of importing a single topic."""
    topic: TopicSpec
    action: ImportAction

    @property
    def name(self) -> str:
        return self.topic.name


@dataclass
class ImportReport:
    """Per-topic outcomes of one import run, in processing order."""
    results: List[TopicImportResult] = field(default_factory=list)

    @property
    def created(self) -> List[str]:
        return [r.name for r in self.results if r.action == ImportAction.CREATED]

    @property
    def skipped(self) -> List[str]:
        return [r.name for r in self.results if r.action == ImportAction.SKIPPED]


class TopicImporter:
    """Creates the topics of a snapshot on a target cluster.

    Topics are created one at a time in document order. An existing topic is
    skipped when ``skip_if_exists`` is set and aborts the run otherwise; any
    other failure aborts the run. Topics created before an abort stay in place.
    Existing topics are never modified.
    """

    def __init__(
        self,
        client_config: ClientConfig,
        session_factory: SessionFactory = AdminSession.open
    ):
        self.client_config = client_config
        self.session_factory = session_factory

    def import_snapshot(
        self,
        input_path: str,
        skip_if_exists: bool = True,
        on_result: Optional[Callable[[TopicImportResult], None]] = None
    ) -> ImportReport:
        """Read ``input_path`` and apply it to the cluster."""
        # Parse first so a broken file never reaches the cluster
        document = snapshot_codec.read_snapshot(input_path)
        return self.apply(document, skip_if_exists=skip_if_exists, on_result=on_result)

    def apply(
        self,
        document: SnapshotDocument,
        skip_if_exists: bool = True,
        on_result: Optional[Callable[[TopicImportResult], None]] = None
    ) -> ImportReport:
        """Create every topic of ``document`` that the cluster does not have."""
        bootstrap = self.client_config.bootstrap
        if document.format_version != SNAPSHOT_FORMAT_VERSION:
            logger.warning(
                f"Snapshot was written for Kafka {document.format_version}, "
                f"this tool targets {SNAPSHOT_FORMAT_VERSION}"
            )

        logger.info(f"Importing {len(document.topics)} topics into {bootstrap}")
        report = ImportReport()

        with self.session_factory(self.client_config) as session:
            for topic in document.topics:
                try:
                    session.create_topic(topic)
                    action = ImportAction.CREATED
                except TopicAlreadyExistsError:
                    if not skip_if_exists:
                        logger.error(f"Topic {topic.name} already exists, aborting import")
                        raise
                    logger.warning(f"Skipping existing topic {topic.name}")
                    action = ImportAction.SKIPPED

                result = TopicImportResult(topic=topic, action=action)
                report.results.append(result)
                audit_logger.log_topic_operation(
                    bootstrap,
                    topic.name,
                    action.value,
                    {'partitions': topic.partitions, 'replication_factor': topic.replication_factor}
                )
                if on_result is not None:
                    on_result(result)

        logger.info(
            f"Import finished: {len(report.created)} created, {len(report.skipped)} skipped"
        )
        return report
