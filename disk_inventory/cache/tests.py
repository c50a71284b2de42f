"""
Tests for the disk registry.
"""
import threading
import unittest

from .disk_registry import DiskRegistry
from ..core.disk_info import ProbeIdentifier
from ..core.observations import (
    MountObservation,
    ObservationSourceType,
    SmartObservation,
    UdevObservation,
)


def udev(**kwargs) -> UdevObservation:
    values = {'uuid': 'disk-1', 'udev_identifier': '/sys/block/sdb', 'smart_identifier': '/dev/sdb',
              'mount_identifier': '/dev/sdb', 'path': '/dev/sdb'}
    values.update(kwargs)
    return UdevObservation(**values)


class TestDiskRegistry(unittest.TestCase):
    """Test cases for DiskRegistry."""

    def setUp(self):
        self.registry = DiskRegistry()

    def test_get_or_create_returns_single_aggregate(self):
        first = self.registry.get_or_create(ProbeIdentifier(uuid='disk-1'))
        second = self.registry.get_or_create(ProbeIdentifier(uuid='disk-1', smart_identifier='/dev/sdb'))
        self.assertIs(first, second)
        self.assertEqual(len(self.registry), 1)
        self.assertEqual(first.probe_identifiers.smart_identifier, '/dev/sdb')
        self.assertIs(self.registry.find_by_source_key(ObservationSourceType.SMART, '/dev/sdb'), first)

    def test_get_or_create_requires_uuid(self):
        with self.assertRaises(ValueError):
            self.registry.get_or_create(ProbeIdentifier(udev_identifier='/sys/block/sdb'))

    def test_correlates_probes_by_source_key(self):
        self.registry.apply(udev())
        disk_info = self.registry.apply(SmartObservation(smart_identifier='/dev/sdb', model='X'))
        self.assertIsNotNone(disk_info)
        self.registry.apply(MountObservation(mount_identifier='/dev/sdb', file_system='ext4', mount_point='/'))

        disk_info = self.registry.get('disk-1')
        self.assertEqual(disk_info.model, 'X')
        self.assertEqual(disk_info.file_system_information.file_system, 'ext4')
        self.assertEqual(disk_info.path, '/dev/sdb')

    def test_unknown_source_key_is_skipped(self):
        result = self.registry.apply(SmartObservation(smart_identifier='/dev/sdz', model='X'))
        self.assertIsNone(result)
        self.assertEqual(len(self.registry), 0)
        self.assertEqual(self.registry.skipped_observations, {'smart': 1})

    def test_udev_change_without_uuid_resolves_by_sysfs_path(self):
        self.registry.apply(udev())
        self.registry.apply(UdevObservation(action='change', udev_identifier='/sys/block/sdb', model='NEW'))
        self.assertEqual(self.registry.get('disk-1').model, 'NEW')
        self.assertEqual(len(self.registry), 1)

    def test_udev_without_any_identity_is_skipped(self):
        self.assertIsNone(self.registry.apply(UdevObservation(udev_identifier='/sys/block/sdq')))
        self.assertEqual(self.registry.skipped_observations, {'udev': 1})

    def test_udev_remove(self):
        self.registry.apply(udev())
        self.assertIn('disk-1', self.registry)
        self.assertIsNone(self.registry.apply(udev(action='remove')))
        self.assertNotIn('disk-1', self.registry)
        self.assertIsNone(self.registry.find_by_source_key(ObservationSourceType.SMART, '/dev/sdb'))
        self.assertIsNone(self.registry.apply(SmartObservation(smart_identifier='/dev/sdb', model='X')))

    def test_update_unknown_disk(self):
        self.assertIsNone(self.registry.update('missing', lambda d: d.model))

    def test_update_reindexes_identifiers(self):
        self.registry.get_or_create(ProbeIdentifier(uuid='disk-1'))
        self.registry.update('disk-1', lambda d: d.set_identifiers(ProbeIdentifier(mount_identifier='/dev/sdc')))
        self.assertIsNotNone(self.registry.find_by_source_key(ObservationSourceType.MOUNT, '/dev/sdc'))

    def test_export_all_sorted_by_uuid(self):
        self.registry.apply(udev(uuid='disk-b', udev_identifier='/sys/block/sdc', smart_identifier='',
                                 mount_identifier='', path='/dev/sdc'))
        self.registry.apply(udev(uuid='disk-a'))
        exports = self.registry.export_all()
        self.assertEqual([disk.name for disk, _ in exports], ['disk-a', 'disk-b'])
        self.assertEqual(exports[0][1], [])

    def test_concurrent_updates_are_serialized(self):
        self.registry.get_or_create(ProbeIdentifier(uuid='disk-1'))

        def bump():
            for _ in range(500):
                self.registry.update('disk-1', lambda d: setattr(d, 'total_bytes_read', d.total_bytes_read + 1))

        threads = [threading.Thread(target=bump) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(self.registry.get('disk-1').total_bytes_read, 2000)


if __name__ == '__main__':
    unittest.main()
