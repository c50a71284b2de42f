"""Identity correlation for observed disks."""

from .disk_registry import DiskRegistry

__all__ = ['DiskRegistry']
