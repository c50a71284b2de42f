from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .base_model import BaseModel


@dataclass
class ObjectMeta(BaseModel):
    """Identity metadata of an exported resource: name and label set"""
    name: str = ''
    labels: Dict[str, str] = field(default_factory=dict)


@dataclass
class DiskCapacity(BaseModel):
    """
    {'storage': 1000000000000, 'physicalSectorSize': 4096, 'logicalSectorSize': 512}
    """
    storage: int = 0
    physical_sector_size: int = 0
    logical_sector_size: int = 0


@dataclass
class DiskDetails(BaseModel):
    """Static hardware attributes of a disk (model, serial, vendor ..)"""
    rotation_rate: int = 0
    drive_type: str = ''
    model: str = ''
    compliance: str = ''
    serial: str = ''
    vendor: str = ''
    firmware_revision: str = ''


@dataclass
class DiskDevLink(BaseModel):
    """
    {'kind': 'by-id', 'links': ['/dev/disk/by-id/wwn-0x5000c500a1b2c3d4']}
    """
    kind: Optional[str] = None
    links: List[str] = field(default_factory=list)


@dataclass
class FileSystemInfo(BaseModel):
    """
    Filesystem type and mount point of a device.

    Both fields stay None when the device carries no filesystem and are then
    left out of the serialized form entirely. An empty string is a present,
    empty-named filesystem.
    """
    fs_type: Optional[str] = None
    mount_point: Optional[str] = None

    @property
    def is_absent(self) -> bool:
        return self.fs_type is None and self.mount_point is None


@dataclass
class DiskSpec(BaseModel):
    """Desired-state view of a disk: path, capacity, details, devlinks, filesystem"""
    path: str = ''
    capacity: DiskCapacity = field(default_factory=DiskCapacity)
    details: DiskDetails = field(default_factory=DiskDetails)
    devlinks: List[DiskDevLink] = field(default_factory=list)
    file_system: FileSystemInfo = field(default_factory=FileSystemInfo)


@dataclass
class DiskStatus(BaseModel):
    state: str = ''


@dataclass
class Temperature(BaseModel):
    """Drive temperatures in whole degrees celsius"""
    current_temperature: int = 0
    highest_temperature: int = 0
    lowest_temperature: int = 0


@dataclass
class DiskStat(BaseModel):
    """
    Runtime counters of a disk. disk_temperature is None unless the health
    reader reported valid temperature data.
    """
    disk_temperature: Optional[Temperature] = None
    total_bytes_read: int = 0
    total_bytes_written: int = 0
    device_utilization_rate: float = 0.0
    percent_endurance_used: float = 0.0


@dataclass
class Disk(BaseModel):
    """Disk resource handed to the control-plane store"""
    api_version: str = ''
    kind: str = ''
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: DiskSpec = field(default_factory=DiskSpec)
    status: DiskStatus = field(default_factory=DiskStatus)
    stats: DiskStat = field(default_factory=DiskStat)

    @property
    def name(self) -> str:
        return self.metadata.name


@dataclass
class Partition(BaseModel):
    """
    {'partitionType': '0x83', 'fileSystem': {'fsType': 'ext4', 'mountPoint': '/data'}}
    """
    partition_type: str = ''
    file_system: FileSystemInfo = field(default_factory=FileSystemInfo)
