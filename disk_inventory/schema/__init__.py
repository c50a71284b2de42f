"""Exported resource models."""

from .base_model import BaseModel
from .models import (
    ObjectMeta,
    DiskCapacity,
    DiskDetails,
    DiskDevLink,
    FileSystemInfo,
    DiskSpec,
    DiskStatus,
    Temperature,
    DiskStat,
    Disk,
    Partition,
)

__all__ = ['BaseModel', 'ObjectMeta', 'DiskCapacity', 'DiskDetails', 'DiskDevLink',
           'FileSystemInfo', 'DiskSpec', 'DiskStatus', 'Temperature', 'DiskStat',
           'Disk', 'Partition']
