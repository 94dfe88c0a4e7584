"""Snapshot document (de)serialization.

Wire format::

    {
      "kafka_version": "2.4.0",
      "export_time": "2024-05-01T10:00:00+00:00",
      "topics": [
        {"name": "orders", "partitions": 6, "replication_factor": 3,
         "configs": {"retention.ms": "604800000"}}
      ]
    }

``configs`` is omitted when a topic has no non-default settings. Field
names are fixed and shared by every version of the tool.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Any, Union

from pydantic import ValidationError

from kafka_topic_sync.exceptions import SnapshotParseError, SnapshotWriteError
from kafka_topic_sync.models.topic import SnapshotDocument, TopicSpec

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def topic_to_dict(topic: TopicSpec) -> Dict[str, Any]:
    data = {
        'name': topic.name,
        'partitions': topic.partitions,
        'replication_factor': topic.replication_factor
    }
    if topic.configs:
        data['configs'] = {key: topic.configs[key] for key in sorted(topic.configs)}
    return data


def document_to_dict(document: SnapshotDocument) -> Dict[str, Any]:
    export_time = None
    if document.generated_at is not None:
        export_time = document.generated_at.replace(microsecond=0).isoformat()

    return {
        'kafka_version': document.format_version,
        'export_time': export_time,
        'topics': [topic_to_dict(topic) for topic in document.topics]
    }


def encode(document: SnapshotDocument, indent: int = 2) -> str:
    """Serialize a snapshot to its JSON text."""
    return json.dumps(document_to_dict(document), indent=indent, ensure_ascii=False) + '\n'


def decode(text: Union[str, bytes], source: str = '<snapshot>') -> SnapshotDocument:
    """Parse JSON text into a snapshot, raising SnapshotParseError on any defect."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SnapshotParseError(f"Snapshot is not valid JSON: {e}", path=source, cause=e) from e

    if not isinstance(data, dict):
        raise SnapshotParseError("Snapshot must be a JSON object", path=source)

    try:
        return SnapshotDocument.model_validate(data)
    except ValidationError as e:
        errors = '; '.join(
            f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}" for error in e.errors()
        )
        raise SnapshotParseError(f"Invalid snapshot document: {errors}", path=source, cause=e) from e


def read_snapshot(path: PathLike) -> SnapshotDocument:
    """Load a snapshot file."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise SnapshotParseError(f"Cannot read snapshot: {e.strerror or e}", path=str(path), cause=e) from e

    document = decode(raw, source=str(path))
    logger.debug(f"Read snapshot {path} with {len(document.topics)} topics")
    return document


def write_snapshot(document: SnapshotDocument, path: PathLike, indent: int = 2) -> None:
    """Write a snapshot file atomically.

    The text goes to a temporary file in the destination directory which then
    replaces the destination, so a failed write never truncates an existing
    snapshot.
    """
    path = Path(path)
    payload = encode(document, indent=indent).encode('utf-8')

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f'.{path.name}.', suffix='.tmp', dir=path.parent)
    except OSError as e:
        raise SnapshotWriteError(f"Cannot write snapshot: {e.strerror or e}", path=str(path), cause=e) from e

    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise SnapshotWriteError(f"Cannot write snapshot: {e.strerror or e}", path=str(path), cause=e) from e

    logger.debug(f"Wrote snapshot {path} ({len(payload)} bytes)")
