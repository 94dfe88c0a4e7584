"""
Kafka Topic Sync

Exports the topic definitions of a Kafka cluster (partitions, replication
factor and non-default configs) into a JSON snapshot and re-creates them on
another cluster.
"""

__version__ = "0.1.0"
__author__ = "KafkaTopicSync"
