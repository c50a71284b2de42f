"""
Tests for the exported resource models.
"""
import unittest

from .models import Disk, DiskDevLink, DiskStat, FileSystemInfo, Partition, Temperature
from ..core.observations import UdevObservation


class TestBaseModel(unittest.TestCase):

    def test_to_dict_uses_camel_case(self):
        disk = Disk(api_version='openebs.io/v1alpha1', kind='Disk')
        data = disk.to_dict()
        self.assertEqual(data['apiVersion'], 'openebs.io/v1alpha1')
        self.assertIn('physicalSectorSize', data['spec']['capacity'])
        self.assertIn('firmwareRevision', data['spec']['details'])
        self.assertNotIn('_raw_data', data)

    def test_none_fields_omitted(self):
        self.assertEqual(FileSystemInfo().to_dict(), {})
        self.assertEqual(DiskStat().to_dict(), {
            'totalBytesRead': 0, 'totalBytesWritten': 0,
            'deviceUtilizationRate': 0.0, 'percentEnduranceUsed': 0.0})
        self.assertEqual(DiskDevLink(links=['a']).to_dict(), {'links': ['a']})

    def test_nested_models(self):
        stat = DiskStat(disk_temperature=Temperature(current_temperature=30))
        self.assertEqual(stat.to_dict()['diskTemperature']['currentTemperature'], 30)
        partition = Partition(partition_type='83', file_system=FileSystemInfo(fs_type='ext4', mount_point='/'))
        self.assertEqual(partition.to_dict(),
                         {'partitionType': '83', 'fileSystem': {'fsType': 'ext4', 'mountPoint': '/'}})

    def test_from_api_response_reads_both_cases(self):
        fs = FileSystemInfo.from_api_response({'fsType': 'xfs', 'mount_point': '/srv', 'extra': 1})
        self.assertEqual(fs.fs_type, 'xfs')
        self.assertEqual(fs.mount_point, '/srv')
        self.assertEqual(fs.get_raw('extra'), 1)

    def test_raw_data_not_compared(self):
        self.assertEqual(UdevObservation(uuid='a', _raw_data={'x': 1}), UdevObservation(uuid='a'))


if __name__ == '__main__':
    unittest.main()
