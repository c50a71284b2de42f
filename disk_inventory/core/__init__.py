"""Core disk aggregation and projection."""

from .disk_info import DiskInfo, ProbeIdentifier, FSInfo, PartitionInfo, TemperatureInfo
from .projector import project, project_filesystem, project_partitions
from .config import InventoryConfig

__all__ = ['DiskInfo', 'ProbeIdentifier', 'FSInfo', 'PartitionInfo', 'TemperatureInfo',
           'project', 'project_filesystem', 'project_partitions', 'InventoryConfig']
