"""Run the Kafka Topic Sync CLI with ``python -m kafka_topic_sync``."""

from kafka_topic_sync.cli.main import main

if __name__ == '__main__':
    main()
