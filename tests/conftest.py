"""Pytest configuration and fixtures."""

import pytest
from typing import Dict, List, Optional

from kafka_topic_sync.clients.admin_session import ClientConfig, TopicDescriptor
from kafka_topic_sync.exceptions import TopicAlreadyExistsError
from kafka_topic_sync.models.topic import TopicSpec


class FakeCluster:
    """In-memory stand-in for a Kafka cluster's admin surface."""

    def __init__(self, descriptors: Optional[List[TopicDescriptor]] = None):
        self.topics: Dict[str, TopicDescriptor] = {d.name: d for d in descriptors or []}
        self.create_calls: List[str] = []
        self.failures: Dict[str, Exception] = {}
        self.sessions: List['FakeAdminSession'] = []

    def add_topic(self, name: str, partitions: int = 1, replication_factor: int = 1,
                  configs: Optional[Dict[str, Optional[str]]] = None) -> None:
        self.topics[name] = TopicDescriptor(
            name=name,
            num_partitions=partitions,
            replication_factor=replication_factor,
            config_entries=dict(configs or {})
        )

    def session_factory(self, client_config: ClientConfig) -> 'FakeAdminSession':
        session = FakeAdminSession(self, client_config)
        self.sessions.append(session)
        return session


class FakeAdminSession:
    """Admin session bound to a FakeCluster."""

    def __init__(self, cluster: FakeCluster, client_config: ClientConfig):
        self.cluster = cluster
        self.client_config = client_config
        self.closed = False

    def list_topics(self) -> Dict[str, TopicDescriptor]:
        return dict(self.cluster.topics)

    def create_topic(self, spec: TopicSpec) -> None:
        self.cluster.create_calls.append(spec.name)
        if spec.name in self.cluster.failures:
            raise self.cluster.failures[spec.name]
        if spec.name in self.cluster.topics:
            raise TopicAlreadyExistsError(spec.name)
        self.cluster.add_topic(spec.name, spec.partitions, spec.replication_factor, spec.configs)

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


@pytest.fixture
def client_config():
    """Client config pointing at a local broker."""
    return ClientConfig(bootstrap_servers=['localhost:9092'])


@pytest.fixture
def source_cluster():
    """Cluster with a mix of user and internal topics."""
    cluster = FakeCluster()
    cluster.add_topic('zeta', partitions=3, replication_factor=2)
    cluster.add_topic('alpha', partitions=6, replication_factor=3,
                      configs={'retention.ms': '86400000', 'cleanup.policy': 'compact'})
    cluster.add_topic('mid', partitions=1, replication_factor=1,
                      configs={'message.timestamp.type': None})
    cluster.add_topic('__consumer_offsets', partitions=50, replication_factor=3,
                      configs={'cleanup.policy': 'compact'})
    return cluster


@pytest.fixture
def empty_cluster():
    """Cluster without any topics."""
    return FakeCluster()
