"""Per-device attribute aggregate.

One DiskInfo exists for each physical disk seen on the node. Every
observation source (udev event monitor, SMART reader, SeaChest diagnostics
reader, mount-table reader) writes the facts it can observe into the same
record, and the record is later projected into a Disk resource.

DiskInfo does no locking of its own. Callers serialize mutations per device,
normally through DiskRegistry.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING

from .constants import FS_NONE, NDM_DEFAULT_DISK_TYPE
from .projector import project, project_partitions
from ..schema.models import Disk, Partition
from ..utils import safe_int

if TYPE_CHECKING:
    from .observations import (
        UdevObservation,
        SmartObservation,
        SeachestObservation,
        MountObservation,
        HealthObservation,
    )

logger = logging.getLogger(__name__)

# Static facts a health reader may report, in the order they are applied
HEALTH_STATIC_FIELDS = (
    'capacity', 'logical_sector_size', 'physical_sector_size',
    'model', 'serial', 'vendor', 'firmware_revision', 'compliance',
    'rotation_rate', 'drive_type',
)

# Keys a filesystem type may arrive under, probe form first then exported form
FS_TYPE_KEYS = ('fileSystem', 'file_system', 'fsType', 'fs_type')

# Static facts the udev event monitor may report
UDEV_STATIC_FIELDS = (
    'path', 'capacity', 'logical_sector_size', 'physical_sector_size',
    'model', 'serial', 'vendor', 'disk_type', 'drive_type',
)


@dataclass(frozen=True, eq=False)
class ProbeIdentifier:
    """
    Keys that let each probe find its disk again.

    uuid is assigned by the udev probe when the disk is first discovered;
    the other keys are whatever each probe uses to address the device
    (sysfs path for udev, device path for smart, seachest and mount).
    Two identifier sets are equal when their uuid is equal.
    """
    uuid: str = ''
    udev_identifier: str = ''
    smart_identifier: str = ''
    seachest_identifier: str = ''
    mount_identifier: str = ''

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProbeIdentifier):
            return NotImplemented
        return self.uuid == other.uuid

    def __hash__(self) -> int:
        return hash(self.uuid)

    def merged(self, other: 'ProbeIdentifier') -> 'ProbeIdentifier':
        """Return a new identifier set taking every non-empty key from other"""
        updates = {name: getattr(other, name) for name in self.key_names() if getattr(other, name)}
        return replace(self, **updates) if updates else self

    @staticmethod
    def key_names() -> tuple:
        return ('uuid', 'udev_identifier', 'smart_identifier', 'seachest_identifier', 'mount_identifier')


@dataclass
class FSInfo:
    """Filesystem type and mount point of a disk or partition"""
    file_system: str = FS_NONE
    mount_point: str = ''

    @property
    def is_absent(self) -> bool:
        return self.file_system == FS_NONE

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> 'FSInfo':
        data = data or {}
        file_system = _first_present(data, *FS_TYPE_KEYS)
        return FSInfo(
            file_system=FS_NONE if file_system is None else file_system,
            mount_point=data.get('mountPoint', data.get('mount_point')) or '',
        )


@dataclass
class PartitionInfo:
    """Partition type code (83, 8e ..) and the filesystem on that partition"""
    partition_type: str = ''
    file_system_information: FSInfo = field(default_factory=FSInfo)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'PartitionInfo':
        fs_data = data.get('fileSystemInformation', data.get('fileSystem'))
        if fs_data is None:
            # flat form: {'partitionType': '83', 'fileSystem': 'ext4', 'mountPoint': '/'}
            fs_data = data
        elif isinstance(fs_data, str):
            fs_data = {'fileSystem': fs_data, 'mountPoint': data.get('mountPoint')}
        elif not isinstance(fs_data, dict):
            logger.warning(f"Ignoring unrecognized partition filesystem {fs_data!r}")
            fs_data = {}
        elif fs_data and _first_present(fs_data, *FS_TYPE_KEYS) is None:
            logger.warning(f"Partition filesystem without a type: {fs_data}")
        return PartitionInfo(
            partition_type=str(data.get('partitionType', data.get('partition_type')) or ''),
            file_system_information=FSInfo.from_dict(fs_data),
        )


@dataclass
class TemperatureInfo:
    """Drive temperatures in degrees celsius, each guarded by a validity flag"""
    temperature_data_valid: bool = False
    current_temperature: int = 0
    highest_valid: bool = False
    highest_temperature: int = 0  # lifetime measured highest
    lowest_valid: bool = False
    lowest_temperature: int = 0  # lifetime measured lowest

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'TemperatureInfo':
        return TemperatureInfo(
            temperature_data_valid=data.get('temperatureDataValid') is True,
            current_temperature=safe_int(data.get('currentTemperature'), 0),
            highest_valid=data.get('highestValid') is True,
            highest_temperature=safe_int(data.get('highestTemperature'), 0),
            lowest_valid=data.get('lowestValid') is True,
            lowest_temperature=safe_int(data.get('lowestTemperature'), 0),
        )


@dataclass
class DiskInfo:
    """Everything known about one disk, filled in by the probes over time"""
    probe_identifiers: ProbeIdentifier = field(default_factory=ProbeIdentifier)
    node_attributes: Dict[str, str] = field(default_factory=dict)
    disk_type: str = NDM_DEFAULT_DISK_TYPE
    drive_type: str = ''

    # Static hardware facts
    capacity: int = 0
    logical_sector_size: int = 0
    physical_sector_size: int = 0
    model: str = ''
    serial: str = ''
    vendor: str = ''
    firmware_revision: str = ''
    compliance: str = ''  # SPC-1, SPC-2 ..
    rotation_rate: int = 0  # 0 = not reported, 1 = SSD, everything else is an RPM

    path: str = ''
    by_id_dev_links: List[str] = field(default_factory=list)
    by_path_dev_links: List[str] = field(default_factory=list)

    file_system_information: FSInfo = field(default_factory=FSInfo)
    partition_data: List[PartitionInfo] = field(default_factory=list)

    # Stats of the disk which keep changing
    total_bytes_read: int = 0
    total_bytes_written: int = 0
    device_utilization_rate: float = 0.0
    percent_endurance_used: float = 0.0
    temperature_info: TemperatureInfo = field(default_factory=TemperatureInfo)

    @classmethod
    def create(cls, identifiers: Optional[ProbeIdentifier] = None) -> 'DiskInfo':
        """Return an empty record; each probe populates its own fields later"""
        disk_info = cls(node_attributes={})
        if identifiers is not None:
            disk_info.probe_identifiers = identifiers
        return disk_info

    @property
    def uuid(self) -> str:
        return self.probe_identifiers.uuid

    # Field setters

    def set_static_fact(self, name: str, value: Any) -> bool:
        """Assign a static fact unless the observed value is empty.

        Returns True when the field was written.
        """
        if value is None or value == '' or value == 0:
            return False
        setattr(self, name, value)
        return True

    def add_by_id_links(self, links: Iterable[str]) -> None:
        _append_unique(self.by_id_dev_links, links)

    def add_by_path_links(self, links: Iterable[str]) -> None:
        _append_unique(self.by_path_dev_links, links)

    def set_node_attributes(self, attributes: Dict[str, str]) -> None:
        for key, value in attributes.items():
            if value:
                self.node_attributes[key] = value

    def set_identifiers(self, identifiers: ProbeIdentifier) -> None:
        self.probe_identifiers = self.probe_identifiers.merged(identifiers)

    def set_file_system(self, file_system: Optional[str] = None,
                        mount_point: Optional[str] = None) -> None:
        current = self.file_system_information
        self.file_system_information = FSInfo(
            file_system=current.file_system if file_system is None else file_system,
            mount_point=current.mount_point if mount_point is None else mount_point,
        )

    def set_partitions(self, partitions: Iterable[PartitionInfo]) -> None:
        self.partition_data = list(partitions)

    def set_temperature(self, temperature: TemperatureInfo) -> None:
        self.temperature_info = replace(temperature)

    def set_stats(self, total_bytes_read: Optional[int] = None,
                  total_bytes_written: Optional[int] = None,
                  device_utilization_rate: Optional[float] = None,
                  percent_endurance_used: Optional[float] = None) -> None:
        if total_bytes_read is not None:
            self.total_bytes_read = total_bytes_read
        if total_bytes_written is not None:
            self.total_bytes_written = total_bytes_written
        if device_utilization_rate is not None:
            self.device_utilization_rate = device_utilization_rate
        if percent_endurance_used is not None:
            self.percent_endurance_used = percent_endurance_used

    # Per-probe entry points

    def apply_udev_observation(self, observation: 'UdevObservation') -> None:
        """Facts from the device-event monitor: identity, paths, geometry"""
        self.set_identifiers(observation.identifiers())
        if observation.node_attributes:
            self.set_node_attributes(observation.node_attributes)
        for name in UDEV_STATIC_FIELDS:
            self.set_static_fact(name, getattr(observation, name))
        if observation.by_id_dev_links:
            self.add_by_id_links(observation.by_id_dev_links)
        if observation.by_path_dev_links:
            self.add_by_path_links(observation.by_path_dev_links)
        logger.debug(f"Applied udev observation to disk {self.uuid} ({self.path})")

    def apply_smart_observation(self, observation: 'SmartObservation') -> None:
        """Facts from the SMART reader: static details, counters, temperature"""
        if observation.smart_identifier and not self.probe_identifiers.smart_identifier:
            self.set_identifiers(ProbeIdentifier(smart_identifier=observation.smart_identifier))
        self._apply_health_observation(observation)
        logger.debug(f"Applied smart observation to disk {self.uuid}")

    def apply_seachest_observation(self, observation: 'SeachestObservation') -> None:
        """Facts from the SeaChest diagnostics reader; overlaps with SMART"""
        if observation.seachest_identifier and not self.probe_identifiers.seachest_identifier:
            self.set_identifiers(ProbeIdentifier(seachest_identifier=observation.seachest_identifier))
        self._apply_health_observation(observation)
        logger.debug(f"Applied seachest observation to disk {self.uuid}")

    def apply_mount_observation(self, observation: 'MountObservation') -> None:
        """Facts from the mount table: filesystem of the disk and its partitions"""
        if observation.mount_identifier and not self.probe_identifiers.mount_identifier:
            self.set_identifiers(ProbeIdentifier(mount_identifier=observation.mount_identifier))
        if observation.file_system is not None or observation.mount_point is not None:
            self.set_file_system(observation.file_system, observation.mount_point)
        if observation.partitions is not None:
            self.set_partitions(observation.partitions)
        logger.debug(f"Applied mount observation to disk {self.uuid}")

    def _apply_health_observation(self, observation: 'HealthObservation') -> None:
        for name in HEALTH_STATIC_FIELDS:
            self.set_static_fact(name, getattr(observation, name))
        self.set_stats(
            total_bytes_read=observation.total_bytes_read,
            total_bytes_written=observation.total_bytes_written,
            device_utilization_rate=observation.device_utilization_rate,
            percent_endurance_used=observation.percent_endurance_used,
        )
        if observation.temperature is not None:
            self.set_temperature(observation.temperature)

    # Export

    def to_disk(self) -> Disk:
        """Convert to the Disk resource pushed to the control plane"""
        return project(self)

    def to_partitions(self) -> List[Partition]:
        return project_partitions(self.partition_data)


def _append_unique(target: List[str], links: Iterable[str]) -> None:
    for link in links:
        if link and link not in target:
            target.append(link)


def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None
