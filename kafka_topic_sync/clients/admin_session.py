"""Administrative session against a single Kafka cluster entry point."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List

from confluent_kafka import KafkaError, KafkaException
from confluent_kafka.admin import AdminClient, NewTopic, ConfigResource, ResourceType

from kafka_topic_sync.config import KafkaConfig
from kafka_topic_sync.exceptions import (
    KafkaConnectionError, ClusterQueryError, TopicAlreadyExistsError
)
from kafka_topic_sync.models.topic import TopicSpec

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_TIMEOUT = 10.0  # seconds


@dataclass
class ClientConfig:
    """Kafka admin client configuration."""
    bootstrap_servers: List[str]
    security_protocol: str = 'PLAINTEXT'
    sasl_mechanism: Optional[str] = None
    sasl_username: Optional[str] = None
    sasl_password: Optional[str] = None
    ssl_ca_location: Optional[str] = None
    ssl_cert_location: Optional[str] = None
    ssl_key_location: Optional[str] = None
    request_timeout_ms: int = 30000
    admin_timeout_seconds: float = DEFAULT_ADMIN_TIMEOUT

    @classmethod
    def from_kafka_config(cls, bootstrap: str, kafka_config: KafkaConfig) -> 'ClientConfig':
        """Build a client config for ``bootstrap`` (comma-separated host:port list)."""
        return cls(
            bootstrap_servers=[server.strip() for server in bootstrap.split(',') if server.strip()],
            security_protocol=kafka_config.security_protocol,
            sasl_mechanism=kafka_config.sasl_mechanism,
            sasl_username=kafka_config.sasl_username,
            sasl_password=kafka_config.sasl_password,
            ssl_ca_location=kafka_config.ssl_ca_location,
            ssl_cert_location=kafka_config.ssl_cert_location,
            ssl_key_location=kafka_config.ssl_key_location,
            request_timeout_ms=kafka_config.request_timeout_ms,
            admin_timeout_seconds=kafka_config.admin_timeout_seconds
        )

    @property
    def bootstrap(self) -> str:
        return ','.join(self.bootstrap_servers)

    def to_confluent_config(self) -> Dict[str, Any]:
        """Build configuration for the Confluent admin client."""
        config_dict = {
            'bootstrap.servers': self.bootstrap,
            'request.timeout.ms': self.request_timeout_ms,
            'security.protocol': self.security_protocol
        }

        # Add SSL configuration
        if self.ssl_ca_location:
            config_dict['ssl.ca.location'] = self.ssl_ca_location
        if self.ssl_cert_location:
            config_dict['ssl.certificate.location'] = self.ssl_cert_location
        if self.ssl_key_location:
            config_dict['ssl.key.location'] = self.ssl_key_location

        # Add SASL configuration
        if self.sasl_mechanism:
            config_dict['sasl.mechanism'] = self.sasl_mechanism
            if self.sasl_username:
                config_dict['sasl.username'] = self.sasl_username
            if self.sasl_password:
                config_dict['sasl.password'] = self.sasl_password

        return config_dict


@dataclass
class TopicDescriptor:
    """Topic state as reported by the cluster.

    ``config_entries`` holds only non-default, non-sensitive settings; a value
    of ``None`` means the entry is present without a value.
    """
    name: str
    num_partitions: int
    replication_factor: int
    config_entries: Dict[str, Optional[str]] = field(default_factory=dict)


class AdminSession:
    """One administrative connection, used for a single export or import.

    Use :meth:`open` to connect, and the session as a context manager so it
    is released on every exit path::

        with AdminSession.open(client_config) as session:
            topics = session.list_topics()
    """

    def __init__(self, admin_client: AdminClient, client_config: ClientConfig):
        self._admin_client: Optional[AdminClient] = admin_client
        self.client_config = client_config

    @classmethod
    def open(cls, client_config: ClientConfig, timeout: Optional[float] = None) -> 'AdminSession':
        """Connect to the cluster, bounding negotiation by ``timeout`` seconds."""
        if timeout is None:
            timeout = client_config.admin_timeout_seconds
        bootstrap = client_config.bootstrap

        if not client_config.bootstrap_servers:
            raise KafkaConnectionError("No bootstrap servers given")

        try:
            admin_client = AdminClient(client_config.to_confluent_config())
            # AdminClient connects lazily; a metadata request proves the cluster is reachable
            admin_client.list_topics(timeout=timeout)
        except KafkaException as e:
            logger.error(f"Failed to connect to {bootstrap}: {e}")
            raise KafkaConnectionError(
                f"Cannot connect to Kafka cluster within {timeout}s",
                bootstrap_servers=bootstrap,
                cause=e
            ) from e

        logger.info(f"Opened admin session to {bootstrap}")
        return cls(admin_client, client_config)

    @property
    def admin_client(self) -> AdminClient:
        if self._admin_client is None:
            raise ClusterQueryError("Admin session is closed")
        return self._admin_client

    @property
    def timeout(self) -> float:
        return self.client_config.request_timeout_ms / 1000

    def list_topics(self) -> Dict[str, TopicDescriptor]:
        """Describe every topic in the cluster, including its non-default configs."""
        try:
            metadata = self.admin_client.list_topics(timeout=self.timeout)
        except KafkaException as e:
            raise ClusterQueryError(f"Failed to list topics: {e}", operation='list_topics', cause=e) from e

        descriptors = {}
        for topic_name, topic_metadata in metadata.topics.items():
            if topic_metadata.error is not None:
                raise ClusterQueryError(
                    f"Cluster reported an error for topic {topic_name}: {topic_metadata.error}",
                    operation='list_topics',
                    topic_name=topic_name
                )

            partitions = topic_metadata.partitions
            first_partition = partitions[min(partitions)] if partitions else None
            descriptors[topic_name] = TopicDescriptor(
                name=topic_name,
                num_partitions=len(partitions),
                replication_factor=len(first_partition.replicas) if first_partition else 0
            )

        if descriptors:
            self._load_config_entries(descriptors)

        logger.debug(f"Listed {len(descriptors)} topics")
        return descriptors

    def create_topic(self, spec: TopicSpec) -> None:
        """Create a single topic and wait for the cluster to acknowledge it."""
        new_topic = NewTopic(
            spec.name,
            num_partitions=spec.partitions,
            replication_factor=spec.replication_factor,
            config=dict(spec.configs)
        )

        try:
            future_map = self.admin_client.create_topics(
                [new_topic], request_timeout=self.timeout
            )
            future_map[spec.name].result()
        except KafkaException as e:
            error = e.args[0] if e.args else None
            if isinstance(error, KafkaError) and error.code() == KafkaError.TOPIC_ALREADY_EXISTS:
                raise TopicAlreadyExistsError(spec.name, cause=e) from e
            raise ClusterQueryError(
                f"Failed to create topic {spec.name}: {e}",
                operation='create_topic',
                topic_name=spec.name,
                cause=e
            ) from e

        logger.info(f"Successfully created topic {spec.name}")

    def close(self) -> None:
        """Release the admin client."""
        if self._admin_client is not None:
            # Confluent admin client has no explicit close
            self._admin_client = None
            logger.debug(f"Closed admin session to {self.client_config.bootstrap}")

    def __enter__(self) -> 'AdminSession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _load_config_entries(self, descriptors: Dict[str, TopicDescriptor]) -> None:
        resources = [ConfigResource(ResourceType.TOPIC, name) for name in descriptors]

        try:
            future_map = self.admin_client.describe_configs(
                resources, request_timeout=self.timeout
            )
            for resource, future in future_map.items():
                entries = future.result()
                descriptor = descriptors[resource.name]
                for entry in entries.values():
                    if entry.is_default or entry.is_sensitive:
                        continue
                    descriptor.config_entries[entry.name] = entry.value
        except KafkaException as e:
            raise ClusterQueryError(
                f"Failed to describe topic configs: {e}", operation='describe_configs', cause=e
            ) from e
