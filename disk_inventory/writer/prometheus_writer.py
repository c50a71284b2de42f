"""
Prometheus exporter writer for disk runtime stats.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

from prometheus_client import Gauge, CollectorRegistry, start_http_server, generate_latest

from .base import Writer, DiskExport
from ..core.constants import KUBERNETES_HOSTNAME_LABEL

# Initialize logger
LOG = logging.getLogger(__name__)

METRIC_PREFIX = 'ndm_disk'
LABEL_NAMES = ['disk', 'node', 'path']


class PrometheusWriter(Writer):
    """
    Publishes the stats block of every exported disk as Prometheus gauges.

    Gauges are reset on each write so departed disks stop being reported.
    Temperature gauges are only set for disks exporting a valid temperature.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize Prometheus Writer.

        Args:
            config: Optional configuration dictionary (prometheus_port)
        """
        config = config or {}
        self.port = config.get('prometheus_port', 0)

        # Create separate registry for this writer
        self.prometheus_registry = CollectorRegistry()

        self.gauges: Dict[str, Gauge] = {
            'capacity_bytes': self._gauge('capacity_bytes', 'Disk capacity in bytes'),
            'total_bytes_read': self._gauge('total_bytes_read', 'Cumulative bytes read from the disk'),
            'total_bytes_written': self._gauge('total_bytes_written', 'Cumulative bytes written to the disk'),
            'device_utilization_rate': self._gauge('device_utilization_rate', 'Device utilization ratio'),
            'percent_endurance_used': self._gauge('percent_endurance_used', 'Percentage of rated endurance used'),
            'temperature_celsius': self._gauge('temperature_celsius', 'Current disk temperature'),
            'highest_temperature_celsius': self._gauge('highest_temperature_celsius', 'Lifetime highest temperature'),
            'lowest_temperature_celsius': self._gauge('lowest_temperature_celsius', 'Lifetime lowest temperature'),
        }

        # Server management
        self.server_lock = threading.Lock()
        self.server_started = False

        LOG.info(f"PrometheusWriter initialized with {len(self.gauges)} disk gauges")

    def _gauge(self, name: str, documentation: str) -> Gauge:
        return Gauge(f"{METRIC_PREFIX}_{name}", documentation, LABEL_NAMES,
                     registry=self.prometheus_registry)

    def _start_server(self) -> None:
        with self.server_lock:
            if self.server_started or not self.port:
                return
            start_http_server(self.port, registry=self.prometheus_registry)
            self.server_started = True
            LOG.info(f"Prometheus metrics server started on port {self.port}")

    def write(self, exports: List[DiskExport], loop_iteration: int = 1) -> bool:
        try:
            self._start_server()
        except OSError as e:
            LOG.error(f"Failed to start Prometheus server on port {self.port}: {e}", exc_info=True)
            return False

        for gauge in self.gauges.values():
            gauge.clear()

        for disk, _ in exports:
            labels = {
                'disk': disk.metadata.name,
                'node': disk.metadata.labels.get(KUBERNETES_HOSTNAME_LABEL, ''),
                'path': disk.spec.path,
            }
            stats = disk.stats
            self.gauges['capacity_bytes'].labels(**labels).set(disk.spec.capacity.storage)
            self.gauges['total_bytes_read'].labels(**labels).set(stats.total_bytes_read)
            self.gauges['total_bytes_written'].labels(**labels).set(stats.total_bytes_written)
            self.gauges['device_utilization_rate'].labels(**labels).set(stats.device_utilization_rate)
            self.gauges['percent_endurance_used'].labels(**labels).set(stats.percent_endurance_used)
            if stats.disk_temperature is not None:
                temperature = stats.disk_temperature
                self.gauges['temperature_celsius'].labels(**labels).set(temperature.current_temperature)
                self.gauges['highest_temperature_celsius'].labels(**labels).set(temperature.highest_temperature)
                self.gauges['lowest_temperature_celsius'].labels(**labels).set(temperature.lowest_temperature)

        LOG.debug(f"Iteration {loop_iteration}: updated Prometheus gauges for {len(exports)} disks")
        return True

    def render(self) -> bytes:
        """Current exposition text, as served on /metrics"""
        return generate_latest(self.prometheus_registry)
