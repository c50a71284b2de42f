"""Observation sources feeding the disk registry."""

from .base import ObservationSource, CollectionResult
from .json_replay import JSONReplaySource
from ..core.observations import ObservationSourceType

__all__ = ['ObservationSource', 'CollectionResult', 'ObservationSourceType', 'JSONReplaySource']
