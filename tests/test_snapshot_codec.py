"""Tests for snapshot (de)serialization."""

import json
import pytest
from datetime import datetime, timezone
from unittest.mock import patch

from kafka_topic_sync.exceptions import SnapshotParseError, SnapshotWriteError, ErrorCode
from kafka_topic_sync.models.topic import SnapshotDocument, TopicSpec
from kafka_topic_sync.services import snapshot_codec


@pytest.fixture
def document():
    """Snapshot with one configured and one plain topic."""
    return SnapshotDocument(
        format_version='2.4.0',
        generated_at=datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc),
        topics=(
            TopicSpec(name='orders', partitions=6, replication_factor=3,
                      configs={'retention.ms': '604800000', 'cleanup.policy': 'delete'}),
            TopicSpec(name='payments', partitions=1, replication_factor=1),
        )
    )


class TestEncode:
    """Test snapshot encoding."""

    def test_field_names(self, document):
        """Wire field names are fixed."""
        data = json.loads(snapshot_codec.encode(document))

        assert set(data) == {'kafka_version', 'export_time', 'topics'}
        assert data['kafka_version'] == '2.4.0'
        assert data['export_time'] == '2024-05-01T10:00:00+00:00'
        assert data['topics'][0] == {
            'name': 'orders',
            'partitions': 6,
            'replication_factor': 3,
            'configs': {'cleanup.policy': 'delete', 'retention.ms': '604800000'}
        }

    def test_empty_configs_omitted(self, document):
        """Topics without configs carry no configs key."""
        data = json.loads(snapshot_codec.encode(document))

        assert 'configs' not in data['topics'][1]

    def test_empty_string_config_kept(self):
        """An empty config value is written, not dropped."""
        document = SnapshotDocument(
            format_version='2.4.0',
            topics=(TopicSpec(name='t', partitions=1, replication_factor=1, configs={'k': ''}),)
        )

        data = json.loads(snapshot_codec.encode(document))

        assert data['topics'][0]['configs'] == {'k': ''}

    def test_config_keys_sorted(self, document):
        """Config keys are written in sorted order for stable output."""
        text = snapshot_codec.encode(document)

        assert text.index('cleanup.policy') < text.index('retention.ms')

    def test_indented_output(self, document):
        """Output is indented with two spaces and ends with a newline."""
        text = snapshot_codec.encode(document)

        assert text.startswith('{\n  "kafka_version"')
        assert text.endswith('}\n')


class TestDecode:
    """Test snapshot decoding."""

    def test_decode_encoded(self, document):
        """Decoding the encoded text gives back the same document."""
        assert snapshot_codec.decode(snapshot_codec.encode(document)) == document

    def test_decode_without_configs(self):
        """Missing configs mean no overrides."""
        text = json.dumps({
            'kafka_version': '2.4.0',
            'export_time': '2024-05-01T10:00:00Z',
            'topics': [{'name': 'a', 'partitions': 2, 'replication_factor': 1}]
        })

        document = snapshot_codec.decode(text)

        assert document.topics[0].configs == {}
        assert document.generated_at == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_unknown_keys_ignored(self):
        """Extra top-level keys do not break decoding."""
        text = json.dumps({'kafka_version': '2.4.0', 'topics': [], 'comment': 'hand edited'})

        assert snapshot_codec.decode(text).topics == ()

    def test_null_topics_means_no_topics(self):
        """An export of a cluster without user topics may carry a null list."""
        text = json.dumps({'kafka_version': '2.4.0', 'export_time': '2024-05-01T10:00:00Z', 'topics': None})

        document = snapshot_codec.decode(text)

        assert document.topics == ()

    @pytest.mark.parametrize('export_time', ['', 'yesterday', '2024-13-45T99:00:00'])
    def test_unreadable_export_time_ignored(self, export_time, caplog):
        """A bad export time is logged and dropped; the topics still decode."""
        text = json.dumps({
            'kafka_version': '2.4.0',
            'export_time': export_time,
            'topics': [{'name': 'a', 'partitions': 1, 'replication_factor': 1}]
        })

        document = snapshot_codec.decode(text)

        assert document.generated_at is None
        assert document.topic_names == ('a',)
        assert 'export_time' in caplog.text

    @pytest.mark.parametrize('text', [
        'not json',
        '[]',
        '{"kafka_version": "2.4.0"}',
        '{"topics": []}',
        '{"kafka_version": "2.4.0", "topics": [{"name": "", "partitions": 1, "replication_factor": 1}]}',
        '{"kafka_version": "2.4.0", "topics": [{"name": "a", "partitions": 0, "replication_factor": 1}]}',
        '{"kafka_version": "2.4.0", "topics": [{"name": "a", "partitions": "3", "replication_factor": 1}]}',
        '{"kafka_version": "2.4.0", "topics": [{"name": "a", "partitions": 1, "replication_factor": 40000}]}',
        '{"kafka_version": "2.4.0", "topics": [{"name": "a", "partitions": 1, "replication_factor": 1,'
        ' "configs": {"k": null}}]}',
        '{"kafka_version": "2.4.0", "topics": [{"name": "a", "partitions": 1, "replication_factor": 1,'
        ' "configs": {"k": 5}}]}',
    ])
    def test_invalid_documents(self, text):
        """Malformed documents raise SnapshotParseError."""
        with pytest.raises(SnapshotParseError) as exc_info:
            snapshot_codec.decode(text)

        assert exc_info.value.error_code == ErrorCode.SNAPSHOT_PARSE_ERROR


class TestSnapshotFiles:
    """Test reading and writing snapshot files."""

    def test_write_and_read(self, tmp_path, document):
        """A written snapshot reads back unchanged."""
        path = tmp_path / 'topics.json'

        snapshot_codec.write_snapshot(document, path)

        assert snapshot_codec.read_snapshot(path) == document

    def test_overwrite_existing(self, tmp_path, document):
        """An existing file is replaced."""
        path = tmp_path / 'topics.json'
        path.write_text('old')

        snapshot_codec.write_snapshot(document, path)

        assert json.loads(path.read_text())['kafka_version'] == '2.4.0'

    def test_failed_write_keeps_previous_file(self, tmp_path, document):
        """A failure while replacing leaves the previous snapshot intact."""
        path = tmp_path / 'topics.json'
        path.write_text('previous')

        with patch('kafka_topic_sync.services.snapshot_codec.os.replace', side_effect=OSError(28, 'No space left')):
            with pytest.raises(SnapshotWriteError):
                snapshot_codec.write_snapshot(document, path)

        assert path.read_text() == 'previous'
        assert [p.name for p in tmp_path.iterdir()] == ['topics.json']

    def test_write_to_missing_directory(self, tmp_path, document):
        """Writing into a missing directory surfaces a write error."""
        with pytest.raises(SnapshotWriteError):
            snapshot_codec.write_snapshot(document, tmp_path / 'missing' / 'topics.json')

    def test_read_missing_file(self, tmp_path):
        """A missing file is a parse error naming the path."""
        path = tmp_path / 'missing.json'

        with pytest.raises(SnapshotParseError) as exc_info:
            snapshot_codec.read_snapshot(path)

        assert exc_info.value.details['path'] == str(path)
