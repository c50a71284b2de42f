"""
Base writer interface for exported disk resources.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Tuple

from ..schema.models import Disk, Partition

# Initialize logger
LOG = logging.getLogger(__name__)

# One exported disk together with its separately exported partitions
DiskExport = Tuple[Disk, List[Partition]]


class Writer(ABC):
    """
    Base class for all writers.
    """

    @abstractmethod
    def write(self, exports: List[DiskExport], loop_iteration: int = 1) -> bool:
        """
        Write exported disks to the destination.

        Args:
            exports: (Disk, partitions) pairs, one per registered disk
            loop_iteration: Current iteration number

        Returns:
            True if write was successful, False otherwise
        """
        pass

    def close(self) -> None:
        """
        Optional method to close the writer and clean up resources.
        Default implementation does nothing.
        """
        pass
