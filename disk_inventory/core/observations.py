"""Observation records produced by the probes.

Each probe reports the subset of disk facts it can observe. A field left as
None was not observed and leaves the aggregate untouched.

Example udev record (camelCase, as replayed from JSON):
    {'source': 'udev', 'uuid': 'disk-3f4e..', 'udevIdentifier': '/sys/devices/../sdb',
     'path': '/dev/sdb', 'capacity': 1000000000000, 'byIdDevLinks': ['/dev/disk/by-id/..']}
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .disk_info import PartitionInfo, ProbeIdentifier, TemperatureInfo
from ..schema.base_model import BaseModel
from ..utils import safe_float, safe_int

logger = logging.getLogger(__name__)


class ObservationSourceType(Enum):
    """Probes that contribute facts about a disk."""
    UDEV = "udev"
    SMART = "smart"
    SEACHEST = "seachest"
    MOUNT = "mount"


UDEV_ACTION_ADD = 'add'
UDEV_ACTION_CHANGE = 'change'
UDEV_ACTION_REMOVE = 'remove'


@dataclass
class UdevObservation(BaseModel):
    """Disk discovered or changed by the device-event monitor"""
    source_type = ObservationSourceType.UDEV

    action: str = UDEV_ACTION_ADD
    uuid: Optional[str] = None
    udev_identifier: Optional[str] = None
    smart_identifier: Optional[str] = None
    seachest_identifier: Optional[str] = None
    mount_identifier: Optional[str] = None
    node_attributes: Optional[Dict[str, str]] = None
    disk_type: Optional[str] = None
    drive_type: Optional[str] = None
    path: Optional[str] = None
    capacity: Optional[int] = None
    logical_sector_size: Optional[int] = None
    physical_sector_size: Optional[int] = None
    model: Optional[str] = None
    serial: Optional[str] = None
    vendor: Optional[str] = None
    by_id_dev_links: Optional[List[str]] = None
    by_path_dev_links: Optional[List[str]] = None

    @property
    def source_key(self) -> Optional[str]:
        return self.udev_identifier

    def identifiers(self) -> ProbeIdentifier:
        return ProbeIdentifier(
            uuid=self.uuid or '',
            udev_identifier=self.udev_identifier or '',
            smart_identifier=self.smart_identifier or '',
            seachest_identifier=self.seachest_identifier or '',
            mount_identifier=self.mount_identifier or '',
        )

    @staticmethod
    def from_api_response(data: Dict[str, Any]) -> 'UdevObservation':
        return UdevObservation(
            action=data.get('action') or UDEV_ACTION_ADD,
            uuid=data.get('uuid'),
            udev_identifier=data.get('udevIdentifier'),
            smart_identifier=data.get('smartIdentifier'),
            seachest_identifier=data.get('seachestIdentifier'),
            mount_identifier=data.get('mountIdentifier'),
            node_attributes=data.get('nodeAttributes'),
            disk_type=data.get('diskType'),
            drive_type=data.get('driveType'),
            path=data.get('path'),
            capacity=safe_int(data.get('capacity')),
            logical_sector_size=safe_int(data.get('logicalSectorSize')),
            physical_sector_size=safe_int(data.get('physicalSectorSize')),
            model=data.get('model'),
            serial=data.get('serial'),
            vendor=data.get('vendor'),
            by_id_dev_links=data.get('byIdDevLinks'),
            by_path_dev_links=data.get('byPathDevLinks'),
            _raw_data=data.copy()
        )


@dataclass
class HealthObservation(BaseModel):
    """Fields shared by the SMART and SeaChest readers"""
    model: Optional[str] = None
    serial: Optional[str] = None
    vendor: Optional[str] = None
    firmware_revision: Optional[str] = None
    compliance: Optional[str] = None
    rotation_rate: Optional[int] = None
    drive_type: Optional[str] = None
    capacity: Optional[int] = None
    logical_sector_size: Optional[int] = None
    physical_sector_size: Optional[int] = None
    total_bytes_read: Optional[int] = None
    total_bytes_written: Optional[int] = None
    device_utilization_rate: Optional[float] = None
    percent_endurance_used: Optional[float] = None
    temperature: Optional[TemperatureInfo] = None

    @staticmethod
    def _health_fields(data: Dict[str, Any]) -> Dict[str, Any]:
        temperature = data.get('temperature')
        return {
            'model': data.get('model'),
            'serial': data.get('serial'),
            'vendor': data.get('vendor'),
            'firmware_revision': data.get('firmwareRevision'),
            'compliance': data.get('compliance'),
            'rotation_rate': safe_int(data.get('rotationRate')),
            'drive_type': data.get('driveType'),
            'capacity': safe_int(data.get('capacity')),
            'logical_sector_size': safe_int(data.get('logicalSectorSize')),
            'physical_sector_size': safe_int(data.get('physicalSectorSize')),
            'total_bytes_read': safe_int(data.get('totalBytesRead')),
            'total_bytes_written': safe_int(data.get('totalBytesWritten')),
            'device_utilization_rate': safe_float(data.get('deviceUtilizationRate')),
            'percent_endurance_used': safe_float(data.get('percentEnduranceUsed')),
            'temperature': TemperatureInfo.from_dict(temperature) if isinstance(temperature, dict) else None,
        }


@dataclass
class SmartObservation(HealthObservation):
    """Disk health read through SMART, addressed by device path"""
    source_type = ObservationSourceType.SMART

    smart_identifier: Optional[str] = None

    @property
    def source_key(self) -> Optional[str]:
        return self.smart_identifier

    @staticmethod
    def from_api_response(data: Dict[str, Any]) -> 'SmartObservation':
        return SmartObservation(
            smart_identifier=data.get('smartIdentifier'),
            _raw_data=data.copy(),
            **HealthObservation._health_fields(data)
        )


@dataclass
class SeachestObservation(HealthObservation):
    """Disk details from the SeaChest vendor diagnostics, addressed by device path"""
    source_type = ObservationSourceType.SEACHEST

    seachest_identifier: Optional[str] = None

    @property
    def source_key(self) -> Optional[str]:
        return self.seachest_identifier

    @staticmethod
    def from_api_response(data: Dict[str, Any]) -> 'SeachestObservation':
        return SeachestObservation(
            seachest_identifier=data.get('seachestIdentifier'),
            _raw_data=data.copy(),
            **HealthObservation._health_fields(data)
        )


@dataclass
class MountObservation(BaseModel):
    """Filesystem and partition filesystems read from the mount table"""
    source_type = ObservationSourceType.MOUNT

    mount_identifier: Optional[str] = None
    file_system: Optional[str] = None
    mount_point: Optional[str] = None
    partitions: Optional[List[PartitionInfo]] = None

    @property
    def source_key(self) -> Optional[str]:
        return self.mount_identifier

    @staticmethod
    def from_api_response(data: Dict[str, Any]) -> 'MountObservation':
        partitions = None
        if data.get('partitions') is not None:
            partitions = [PartitionInfo.from_dict(p) for p in data['partitions'] if isinstance(p, dict)]
        return MountObservation(
            mount_identifier=data.get('mountIdentifier'),
            file_system=data.get('fileSystem'),
            mount_point=data.get('mountPoint'),
            partitions=partitions,
            _raw_data=data.copy()
        )


OBSERVATION_TYPES = {
    ObservationSourceType.UDEV: UdevObservation,
    ObservationSourceType.SMART: SmartObservation,
    ObservationSourceType.SEACHEST: SeachestObservation,
    ObservationSourceType.MOUNT: MountObservation,
}


def observation_from_dict(data: Dict[str, Any], source: Optional[str] = None):
    """Build the observation record matching data['source'] (or source).

    Returns None for records naming no known probe.
    """
    source_name = data.get('source') or source
    try:
        source_type = ObservationSourceType(str(source_name).lower())
    except ValueError:
        logger.warning(f"Skipping observation with unknown source: {source_name}")
        return None
    return OBSERVATION_TYPES[source_type].from_api_response(data)
