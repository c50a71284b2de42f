"""JSON replay observation source.

Replays probe observations previously recorded as JSON files. Relies on the
file naming convention

    <source>_<key>_<timestamp>.json

Where:
    - source: the probe that produced the records (udev, smart, seachest, mount)
    - key: free-form device hint, for humans only
    - timestamp: Unix timestamp (seconds since epoch)

Example:
    smart_sdb_1757410112.json

Files sharing a timestamp form one batch. Batches replay in chronological
order and, inside a batch, udev files go first so every disk is registered
before the other probes refer to it.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .base import ObservationSource, CollectionResult
from ..core.observations import ObservationSourceType, observation_from_dict

logger = logging.getLogger(__name__)


def extract_timestamp_from_filename(filename: Union[str, Path]) -> Optional[int]:
    """Return the trailing Unix timestamp of a replay file name, if any"""
    stem = Path(filename).stem
    parts = stem.split('_')
    if len(parts) < 2:
        return None
    try:
        return int(parts[-1])
    except ValueError:
        return None


def extract_source_from_filename(filename: Union[str, Path]) -> Optional[str]:
    """Return the probe name prefix of a replay file name"""
    stem = Path(filename).stem
    return stem.split('_', 1)[0].lower() if stem else None


def read_records(filepath: Union[str, Path]) -> List[Dict[str, Any]]:
    """Read one replay file as a list of observation dictionaries.

    Accepts a single record, a list of records, or a wrapped
    {'source': .., 'data': [..]} document. Unreadable files yield [].
    """
    filepath = Path(filepath)
    try:
        with open(filepath, 'r', encoding='utf-8') as file:
            content = json.load(file)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"Error parsing JSON from {filepath}: {e}")
        return []
    except OSError as e:
        logger.error(f"Error reading {filepath}: {e}")
        return []

    if isinstance(content, dict) and isinstance(content.get('data'), list):
        source = content.get('source')
        records = content['data']
        if source:
            records = [dict(record, source=record.get('source', source))
                       for record in records if isinstance(record, dict)]
        return [r for r in records if isinstance(r, dict)]
    if isinstance(content, dict):
        return [content]
    if isinstance(content, list):
        return [r for r in content if isinstance(r, dict)]

    logger.warning(f"Ignoring {filepath}: expected an object or a list")
    return []


class JSONReplaySource(ObservationSource):
    """Observation source replaying recorded probe output from a directory."""

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.json_directory = config.get('json_directory') or config.get('from_json')
        self._batches: List[Tuple[int, List[Path]]] = []
        self._batch_index = 0

    def initialize(self) -> bool:
        if not self.json_directory:
            logger.error("JSON directory not configured")
            return False

        directory = Path(self.json_directory)
        if not directory.is_dir():
            logger.error(f"JSON directory does not exist: {directory}")
            return False

        grouped: Dict[int, List[Path]] = {}
        for path in sorted(directory.glob('*.json')):
            timestamp = extract_timestamp_from_filename(path)
            grouped.setdefault(timestamp if timestamp is not None else 0, []).append(path)

        self._batches = [(ts, sorted(files, key=self._file_order)) for ts, files in sorted(grouped.items())]
        self._batch_index = 0

        file_count = sum(len(files) for _, files in self._batches)
        logger.info(f"Initialized JSON replay from {directory}: {file_count} files in {len(self._batches)} batches")
        return True

    @staticmethod
    def _file_order(path: Path) -> Tuple[int, str]:
        is_udev = extract_source_from_filename(path) == ObservationSourceType.UDEV.value
        return (0 if is_udev else 1, path.name)

    @property
    def current_timestamp(self) -> Optional[int]:
        if self._batch_index < len(self._batches):
            return self._batches[self._batch_index][0]
        return None

    def collect(self) -> CollectionResult:
        if self._batch_index >= len(self._batches):
            return CollectionResult(observations=[], success=False, error_message="No batches left to replay")

        timestamp, files = self._batches[self._batch_index]
        observations = []
        for path in files:
            default_source = extract_source_from_filename(path)
            for record in read_records(path):
                observation = observation_from_dict(record, source=default_source)
                if observation is not None:
                    observations.append(observation)

        logger.info(f"Replayed {len(observations)} observations from {len(files)} files (batch timestamp {timestamp})")
        return CollectionResult(
            observations=observations,
            success=True,
            metadata={'timestamp': timestamp, 'files': [p.name for p in files]},
        )

    def advance_batch(self) -> bool:
        if self._batch_index + 1 >= len(self._batches):
            self._batch_index = len(self._batches)
            return False
        self._batch_index += 1
        return True

    def has_more_batches(self) -> bool:
        return self._batch_index + 1 < len(self._batches)

    def cleanup(self) -> None:
        self._batches = []
        self._batch_index = 0
