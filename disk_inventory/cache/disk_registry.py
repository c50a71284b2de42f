import logging
import threading
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from ..core.disk_info import DiskInfo, ProbeIdentifier
from ..core.observations import (
    ObservationSourceType,
    UdevObservation,
    SmartObservation,
    SeachestObservation,
    MountObservation,
    UDEV_ACTION_REMOVE,
)
from ..schema.models import Disk, Partition

T = TypeVar('T')

# Identifier attribute each probe uses to address a disk
SOURCE_KEY_FIELDS = {
    ObservationSourceType.UDEV: 'udev_identifier',
    ObservationSourceType.SMART: 'smart_identifier',
    ObservationSourceType.SEACHEST: 'seachest_identifier',
    ObservationSourceType.MOUNT: 'mount_identifier',
}


class DiskRegistry:
    """
    Registry of DiskInfo aggregates for the disks of one node

    Provides:
    - At most one DiskInfo per uuid
    - Lookup of the uuid behind each probe's own source key
    - One lock serializing every mutation and export
    """

    def __init__(self):
        self._disks: Dict[str, DiskInfo] = {}
        self._source_index: Dict[ObservationSourceType, Dict[str, str]] = {
            source_type: {} for source_type in ObservationSourceType
        }
        self._lock = threading.RLock()
        self.logger = logging.getLogger(__name__)

        # Debug counters for observations that could not be correlated
        self._skipped_observations: Dict[str, int] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._disks)

    def __contains__(self, uuid: str) -> bool:
        with self._lock:
            return uuid in self._disks

    def get(self, uuid: str) -> Optional[DiskInfo]:
        with self._lock:
            return self._disks.get(uuid)

    def get_or_create(self, identifiers: ProbeIdentifier) -> DiskInfo:
        """
        Return the aggregate for identifiers.uuid, creating it on first sight

        Args:
            identifiers: Identifier set carrying at least the uuid

        Returns:
            The single DiskInfo registered under that uuid
        """
        if not identifiers.uuid:
            raise ValueError("uuid required to register a disk")

        with self._lock:
            disk_info = self._disks.get(identifiers.uuid)
            if disk_info is None:
                disk_info = DiskInfo.create(identifiers)
                self._disks[identifiers.uuid] = disk_info
                self.logger.info(f"Registered new disk {identifiers.uuid}")
            else:
                disk_info.set_identifiers(identifiers)
            self._index_identifiers(disk_info.probe_identifiers)
            return disk_info

    def find_by_source_key(self, source_type: ObservationSourceType, key: str) -> Optional[DiskInfo]:
        """Resolve a probe-specific key to the aggregate it belongs to"""
        if not key:
            return None
        with self._lock:
            uuid = self._source_index[source_type].get(key)
            return self._disks.get(uuid) if uuid else None

    def update(self, uuid: str, fn: Callable[[DiskInfo], T]) -> Optional[T]:
        """Run fn against one aggregate while holding the registry lock"""
        with self._lock:
            disk_info = self._disks.get(uuid)
            if disk_info is None:
                self.logger.warning(f"Update for unknown disk {uuid} ignored")
                return None
            result = fn(disk_info)
            self._index_identifiers(disk_info.probe_identifiers)
            return result

    def remove(self, uuid: str) -> Optional[DiskInfo]:
        """Discard the aggregate of a disk that is permanently gone"""
        with self._lock:
            disk_info = self._disks.pop(uuid, None)
            if disk_info is None:
                return None
            for index in self._source_index.values():
                for key in [k for k, v in index.items() if v == uuid]:
                    del index[key]
            self.logger.info(f"Removed disk {uuid}")
            return disk_info

    def apply(self, observation) -> Optional[DiskInfo]:
        """
        Route an observation to its disk and apply it there

        Udev observations carry the uuid and may create the disk; every other
        probe addresses an already registered disk by its own key.

        Returns:
            The updated DiskInfo, or None when the observation was skipped or
            removed its disk
        """
        with self._lock:
            if isinstance(observation, UdevObservation):
                return self._apply_udev(observation)

            source_type = observation.source_type
            disk_info = self.find_by_source_key(source_type, observation.source_key)
            if disk_info is None:
                self._record_skip(source_type.value)
                self.logger.warning(f"No disk known for {source_type.value} key "
                                    f"'{observation.source_key}', observation skipped")
                return None

            if isinstance(observation, SmartObservation):
                disk_info.apply_smart_observation(observation)
            elif isinstance(observation, SeachestObservation):
                disk_info.apply_seachest_observation(observation)
            elif isinstance(observation, MountObservation):
                disk_info.apply_mount_observation(observation)
            return disk_info

    def _apply_udev(self, observation: UdevObservation) -> Optional[DiskInfo]:
        uuid = observation.uuid
        if not uuid:
            # a change event may only know the sysfs path
            existing = self.find_by_source_key(ObservationSourceType.UDEV, observation.udev_identifier)
            uuid = existing.uuid if existing else None
        if not uuid:
            self._record_skip(ObservationSourceType.UDEV.value)
            self.logger.warning(f"Udev observation for '{observation.udev_identifier}' has no uuid, skipped")
            return None

        if observation.action == UDEV_ACTION_REMOVE:
            self.remove(uuid)
            return None

        identifiers = observation.identifiers()
        if not identifiers.uuid:
            identifiers = ProbeIdentifier(uuid=uuid).merged(identifiers)
        disk_info = self.get_or_create(identifiers)
        disk_info.apply_udev_observation(observation)
        self._index_identifiers(disk_info.probe_identifiers)
        return disk_info

    def _index_identifiers(self, identifiers: ProbeIdentifier) -> None:
        for source_type, attr in SOURCE_KEY_FIELDS.items():
            key = getattr(identifiers, attr)
            if not key:
                continue
            previous = self._source_index[source_type].get(key)
            if previous and previous != identifiers.uuid:
                self.logger.warning(f"{source_type.value} key '{key}' moved from disk {previous} "
                                    f"to disk {identifiers.uuid}")
            self._source_index[source_type][key] = identifiers.uuid

    def _record_skip(self, source: str) -> None:
        self._skipped_observations[source] = self._skipped_observations.get(source, 0) + 1

    @property
    def skipped_observations(self) -> Dict[str, int]:
        return dict(self._skipped_observations)

    def export_all(self) -> List[Tuple[Disk, List[Partition]]]:
        """Project every registered disk under the lock, ordered by uuid"""
        with self._lock:
            return [(self._disks[uuid].to_disk(), self._disks[uuid].to_partitions())
                    for uuid in sorted(self._disks)]
