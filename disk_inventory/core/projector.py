"""Projection of a DiskInfo aggregate into the exported Disk resource.

Everything here is a pure function of its input: nothing is mutated, no I/O
is done, and every list in the output is a fresh copy so later mutations of
the aggregate never leak into an already exported resource.
"""

from typing import Iterable, List, TYPE_CHECKING

from .constants import (
    BY_ID_LINK,
    BY_PATH_LINK,
    FS_NONE,
    KUBERNETES_HOSTNAME_LABEL,
    NDM_ACTIVE,
    NDM_DISK_KIND,
    NDM_DISK_TYPE_KEY,
    NDM_MANAGED_KEY,
    NDM_VERSION,
    NODE_NAME_KEY,
    TRUE_STRING,
)
from ..schema.models import (
    Disk,
    DiskCapacity,
    DiskDetails,
    DiskDevLink,
    DiskSpec,
    DiskStat,
    DiskStatus,
    FileSystemInfo,
    ObjectMeta,
    Partition,
    Temperature,
)

if TYPE_CHECKING:
    from .disk_info import DiskInfo, FSInfo, PartitionInfo


def project(disk_info: 'DiskInfo') -> Disk:
    """Build the Disk resource for one aggregate"""
    return Disk(
        api_version=NDM_VERSION,
        kind=NDM_DISK_KIND,
        metadata=get_object_meta(disk_info),
        spec=get_disk_spec(disk_info),
        status=get_status(disk_info),
        stats=get_stats(disk_info),
    )


def get_object_meta(disk_info: 'DiskInfo') -> ObjectMeta:
    """Name is the uuid; labels carry node, classification and the managed marker"""
    labels = {
        KUBERNETES_HOSTNAME_LABEL: disk_info.node_attributes.get(NODE_NAME_KEY, ''),
        NDM_DISK_TYPE_KEY: disk_info.disk_type,
        NDM_MANAGED_KEY: TRUE_STRING,
    }
    return ObjectMeta(name=disk_info.probe_identifiers.uuid, labels=labels)


def get_status(disk_info: 'DiskInfo') -> DiskStatus:
    # Liveness is decided by reconciliation, not here
    return DiskStatus(state=NDM_ACTIVE)


def get_disk_spec(disk_info: 'DiskInfo') -> DiskSpec:
    return DiskSpec(
        path=disk_info.path,
        capacity=get_disk_capacity(disk_info),
        details=get_disk_details(disk_info),
        devlinks=get_disk_links(disk_info),
        file_system=project_filesystem(disk_info.file_system_information),
    )


def get_disk_capacity(disk_info: 'DiskInfo') -> DiskCapacity:
    return DiskCapacity(
        storage=disk_info.capacity,
        physical_sector_size=disk_info.physical_sector_size,
        logical_sector_size=disk_info.logical_sector_size,
    )


def get_disk_details(disk_info: 'DiskInfo') -> DiskDetails:
    return DiskDetails(
        rotation_rate=disk_info.rotation_rate,
        drive_type=disk_info.drive_type,
        model=disk_info.model,
        compliance=disk_info.compliance,
        serial=disk_info.serial,
        vendor=disk_info.vendor,
        firmware_revision=disk_info.firmware_revision,
    )


def get_disk_links(disk_info: 'DiskInfo') -> List[DiskDevLink]:
    """At most one by-id and one by-path entry, each only when it has links"""
    dev_links = []
    if disk_info.by_id_dev_links:
        dev_links.append(DiskDevLink(kind=BY_ID_LINK, links=list(disk_info.by_id_dev_links)))
    if disk_info.by_path_dev_links:
        dev_links.append(DiskDevLink(kind=BY_PATH_LINK, links=list(disk_info.by_path_dev_links)))
    return dev_links


def get_stats(disk_info: 'DiskInfo') -> DiskStat:
    disk_stat = DiskStat(
        total_bytes_read=disk_info.total_bytes_read,
        total_bytes_written=disk_info.total_bytes_written,
        device_utilization_rate=disk_info.device_utilization_rate,
        percent_endurance_used=disk_info.percent_endurance_used,
    )
    temperature_info = disk_info.temperature_info
    if temperature_info.temperature_data_valid:
        disk_stat.disk_temperature = Temperature(
            current_temperature=temperature_info.current_temperature,
            highest_temperature=temperature_info.highest_temperature,
            lowest_temperature=temperature_info.lowest_temperature,
        )
    return disk_stat


def project_filesystem(fs_info: 'FSInfo') -> FileSystemInfo:
    """Both fields are left unset when the device has no filesystem"""
    if fs_info.file_system == FS_NONE:
        return FileSystemInfo()
    return FileSystemInfo(fs_type=fs_info.file_system, mount_point=fs_info.mount_point)


def project_partitions(partitions: Iterable['PartitionInfo']) -> List[Partition]:
    """One exported entry per partition, in input order"""
    return [
        Partition(
            partition_type=partition.partition_type,
            file_system=project_filesystem(partition.file_system_information),
        )
        for partition in partitions
    ]
