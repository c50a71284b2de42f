"""Base observation source interface and shared data structures."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

from ..core.observations import ObservationSourceType


@dataclass
class CollectionResult:
    """Observations gathered in one collection pass."""
    observations: List[Any]
    success: bool
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def count_by_source(self) -> Dict[ObservationSourceType, int]:
        counts: Dict[ObservationSourceType, int] = {}
        for observation in self.observations:
            counts[observation.source_type] = counts.get(observation.source_type, 0) + 1
        return counts


class ObservationSource(ABC):
    """Abstract base class for everything that feeds observations to the registry.

    Live probes and replayed recordings share this interface so the
    inventory orchestrator treats them identically.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config

    @abstractmethod
    def initialize(self) -> bool:
        """Initialize the source. Returns True on success."""
        pass

    @abstractmethod
    def collect(self) -> CollectionResult:
        """Collect the observations of the current batch."""
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Clean up any resources used by the source."""
        pass

    def advance_batch(self) -> bool:
        """Advance to the next batch (replay only).

        Returns:
            True if batch advanced successfully, False if no more batches
        """
        return False

    def has_more_batches(self) -> bool:
        """Check if more batches are available (replay only)."""
        return False
