"""
Multi-writer for exported disk resources.
Supports writing to multiple destinations simultaneously (e.g., YAML files + Prometheus).
"""

import logging
from typing import List

from .base import Writer, DiskExport

# Initialize logger
LOG = logging.getLogger(__name__)


class MultiWriter(Writer):
    """
    Composite writer that forwards every write to each of its writers.
    """

    def __init__(self, writers: List[Writer]):
        self.writers = writers
        LOG.info(f"MultiWriter initialized with {len(writers)} writers: {[type(w).__name__ for w in writers]}")

    def write(self, exports: List[DiskExport], loop_iteration: int = 1) -> bool:
        """
        Write to all configured writers.

        Returns:
            True if all writes were successful, False if any failed
        """
        success = True
        successful_writers = 0

        for writer in self.writers:
            writer_name = type(writer).__name__
            try:
                if writer.write(exports, loop_iteration):
                    successful_writers += 1
                else:
                    LOG.error(f"{writer_name} write failed")
                    success = False
            except Exception as e:
                LOG.error(f"Exception in {writer_name}: {e}", exc_info=True)
                success = False

        LOG.info(f"MultiWriter completed: {successful_writers}/{len(self.writers)} writers successful")
        return success

    def close(self) -> None:
        for writer in self.writers:
            try:
                writer.close()
            except Exception as e:
                LOG.error(f"Error closing {type(writer).__name__}: {e}", exc_info=True)

    def __str__(self) -> str:
        writer_names = [type(w).__name__ for w in self.writers]
        return f"MultiWriter({', '.join(writer_names)})"

    def __repr__(self) -> str:
        return self.__str__()
