"""Main inventory orchestration logic.

Feeds observations from a source into the disk registry, projects every
registered disk and hands the exported resources to the configured writer.
"""

import logging
import time
from typing import Any, Dict, Iterable, List, Optional

from ..cache.disk_registry import DiskRegistry
from ..datasources.base import ObservationSource
from ..datasources.json_replay import JSONReplaySource
from ..writer.base import DiskExport, Writer
from ..writer.factory import WriterFactory
from .config import InventoryConfig
from .constants import NODE_NAME_KEY
from .writer_config import WriterConfig


class DiskInventory:
    """Orchestrator for one node's disk inventory."""

    def __init__(self, config: InventoryConfig, writer_config: Optional[WriterConfig] = None,
                 registry: Optional[DiskRegistry] = None, source: Optional[ObservationSource] = None):
        """Initialize inventory with configuration.

        Args:
            config: Inventory configuration object
            writer_config: Writer configuration object (optional, can be set later)
            registry: Disk registry to populate (a new one by default)
            source: Observation source (JSON replay of config.from_json by default)
        """
        self.config = config
        self.writer_config = writer_config
        self.registry = registry or DiskRegistry()
        self.source = source
        self.writer: Optional[Writer] = None
        self.logger = logging.getLogger(__name__)

        # Statistics tracking
        self.collections_completed = 0
        self.observations_applied = 0
        self.last_collection_time: Optional[float] = None

    def initialize(self) -> bool:
        """Initialize the observation source.

        Returns:
            True if initialization successful, False otherwise
        """
        if self.source is None:
            self.source = JSONReplaySource(self.config.to_dict())

        if not self.source.initialize():
            self.logger.error("Failed to initialize observation source")
            return False

        self.logger.info(f"Inventory initialized with {type(self.source).__name__}")
        return True

    def set_writer_config(self, writer_config: WriterConfig) -> None:
        self.writer_config = writer_config
        self.writer = None
        self.logger.info(f"Writer configuration set: {writer_config.output_format}")

    def apply_observations(self, observations: Iterable[Any]) -> int:
        """Apply observations to the registry, returning how many took effect"""
        applied = 0
        for observation in observations:
            disk_info = self.registry.apply(observation)
            if disk_info is None:
                continue
            applied += 1
            if self.config.node_name and not disk_info.node_attributes.get(NODE_NAME_KEY):
                self.registry.update(disk_info.uuid, lambda d: d.set_node_attributes(
                    {NODE_NAME_KEY: self.config.node_name}))
        self.observations_applied += applied
        return applied

    def export(self) -> List[DiskExport]:
        return self.registry.export_all()

    def _get_writer(self) -> Writer:
        if self.writer is None:
            if self.writer_config is None:
                self.writer_config = WriterConfig.from_inventory_config(self.config)
            self.writer = WriterFactory.create_writer_from_config(self.writer_config)
        return self.writer

    def run_single_collection(self) -> bool:
        """Collect one batch, apply it and write the exported resources.

        Returns:
            True if the batch was collected and written successfully
        """
        if self.source is None:
            self.logger.error("Observation source not initialized")
            return False

        start = time.time()
        result = self.source.collect()
        if not result.success:
            self.logger.warning(f"Observation collection failed: {result.error_message}")
            return False

        applied = self.apply_observations(result.observations)
        exports = self.export()
        self.logger.info(f"Applied {applied}/{len(result.observations)} observations, "
                         f"exporting {len(exports)} disks")

        success = self._get_writer().write(exports, self.collections_completed + 1)
        self.last_collection_time = time.time() - start
        return success

    def run_continuous(self) -> None:
        """Replay every batch, then exit.

        Supports max_iterations for exit after N iterations.
        """
        iteration_count = 0
        self.logger.info(f"Starting export loop (interval: {self.config.interval_time}s, max_iterations: "
                         f"{self.config.max_iterations if self.config.max_iterations > 0 else 'unlimited'})")

        try:
            while True:
                iteration_count += 1
                if self.config.max_iterations > 0 and iteration_count > self.config.max_iterations:
                    self.logger.info(f"Reached maximum iterations ({self.config.max_iterations}) - exiting")
                    break

                if not self.run_single_collection():
                    self.logger.warning(f"Iteration {iteration_count} failed")
                self.collections_completed = iteration_count

                if not self.source.advance_batch():
                    self.logger.info(f"No more batches. Processed {iteration_count} batches total.")
                    break

                if self.config.interval_time > 0:
                    self.logger.info(f"Waiting {self.config.interval_time} seconds until next batch...")
                    time.sleep(self.config.interval_time)
        except KeyboardInterrupt:
            self.logger.info("Received interrupt signal, shutting down...")
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        if self.source is not None:
            self.source.cleanup()
        if self.writer is not None:
            self.writer.close()
        self.logger.info("Inventory cleanup completed")

    def get_statistics(self) -> Dict[str, Any]:
        return {
            'collections_completed': self.collections_completed,
            'observations_applied': self.observations_applied,
            'disks_registered': len(self.registry),
            'skipped_observations': self.registry.skipped_observations,
            'last_collection_time': self.last_collection_time,
        }
