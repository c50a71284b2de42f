"""
Tests for the disk aggregate, its projection and the inventory orchestrator.
"""
import json
import logging
import os
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

import yaml

from .config import InventoryConfig
from .constants import (
    FS_NONE,
    KUBERNETES_HOSTNAME_LABEL,
    NDM_ACTIVE,
    NDM_DEFAULT_DISK_TYPE,
    NDM_DISK_KIND,
    NDM_DISK_TYPE_KEY,
    NDM_MANAGED_KEY,
    NDM_SPARSE_DISK_TYPE,
    NDM_VERSION,
    NODE_NAME_KEY,
)
from .disk_info import DiskInfo, FSInfo, PartitionInfo, ProbeIdentifier, TemperatureInfo
from .inventory import DiskInventory
from .observations import (
    MountObservation,
    SeachestObservation,
    SmartObservation,
    UdevObservation,
    observation_from_dict,
)
from .projector import project, project_filesystem, project_partitions
from .writer_config import WriterConfig


def make_disk_info() -> DiskInfo:
    disk_info = DiskInfo.create(ProbeIdentifier(uuid='disk-1234', udev_identifier='/sys/block/sdb'))
    disk_info.node_attributes[NODE_NAME_KEY] = 'worker-1'
    disk_info.path = '/dev/sdb'
    disk_info.capacity = 1000000000000
    disk_info.logical_sector_size = 512
    disk_info.physical_sector_size = 4096
    disk_info.model = 'X'
    disk_info.add_by_id_links(['a', 'b'])
    return disk_info


class TestProbeIdentifier(unittest.TestCase):
    """Identifier sets compare by uuid only."""

    def test_equality_by_uuid(self):
        first = ProbeIdentifier(uuid='disk-1', udev_identifier='/sys/block/sda')
        second = ProbeIdentifier(uuid='disk-1', smart_identifier='/dev/sda')
        self.assertEqual(first, second)
        self.assertEqual(hash(first), hash(second))
        self.assertNotEqual(first, ProbeIdentifier(uuid='disk-2', udev_identifier='/sys/block/sda'))

    def test_merged_keeps_existing_keys(self):
        first = ProbeIdentifier(uuid='disk-1', udev_identifier='/sys/block/sda')
        merged = first.merged(ProbeIdentifier(smart_identifier='/dev/sda'))
        self.assertEqual(merged.udev_identifier, '/sys/block/sda')
        self.assertEqual(merged.smart_identifier, '/dev/sda')
        self.assertEqual(merged.uuid, 'disk-1')
        # original is untouched
        self.assertEqual(first.smart_identifier, '')


class TestDiskInfo(unittest.TestCase):
    """Aggregate creation and field setters."""

    def test_create_defaults(self):
        disk_info = DiskInfo.create()
        self.assertEqual(disk_info.node_attributes, {})
        self.assertEqual(disk_info.disk_type, NDM_DEFAULT_DISK_TYPE)
        self.assertTrue(disk_info.file_system_information.is_absent)
        self.assertEqual(disk_info.partition_data, [])
        self.assertFalse(disk_info.temperature_info.temperature_data_valid)

    def test_create_does_not_share_mutable_state(self):
        first = DiskInfo.create()
        second = DiskInfo.create()
        first.node_attributes['nodename'] = 'a'
        first.add_by_id_links(['x'])
        self.assertEqual(second.node_attributes, {})
        self.assertEqual(second.by_id_dev_links, [])

    def test_devlinks_deduplicated_in_observation_order(self):
        disk_info = DiskInfo.create()
        disk_info.add_by_id_links(['b', 'a'])
        disk_info.add_by_id_links(['a', 'c', 'b'])
        disk_info.add_by_path_links(['p1', 'p1'])
        self.assertEqual(disk_info.by_id_dev_links, ['b', 'a', 'c'])
        self.assertEqual(disk_info.by_path_dev_links, ['p1'])

    def test_static_fact_not_erased_by_empty_value(self):
        disk_info = DiskInfo.create()
        self.assertTrue(disk_info.set_static_fact('model', 'ST4000'))
        self.assertFalse(disk_info.set_static_fact('model', ''))
        self.assertFalse(disk_info.set_static_fact('model', None))
        self.assertFalse(disk_info.set_static_fact('rotation_rate', 0))
        self.assertEqual(disk_info.model, 'ST4000')
        self.assertTrue(disk_info.set_static_fact('model', 'ST8000'))
        self.assertEqual(disk_info.model, 'ST8000')

    def test_set_file_system_keeps_unreported_half(self):
        disk_info = DiskInfo.create()
        disk_info.set_file_system('ext4', '/data')
        disk_info.set_file_system(mount_point='/mnt')
        self.assertEqual(disk_info.file_system_information, FSInfo('ext4', '/mnt'))

    def test_udev_observation(self):
        disk_info = DiskInfo.create()
        disk_info.apply_udev_observation(UdevObservation(
            uuid='disk-1', udev_identifier='/sys/block/sdb', path='/dev/sdb',
            capacity=500, model='M1', disk_type=NDM_SPARSE_DISK_TYPE,
            node_attributes={NODE_NAME_KEY: 'worker-2'},
            by_id_dev_links=['id1'], by_path_dev_links=['path1']))
        self.assertEqual(disk_info.uuid, 'disk-1')
        self.assertEqual(disk_info.probe_identifiers.udev_identifier, '/sys/block/sdb')
        self.assertEqual(disk_info.path, '/dev/sdb')
        self.assertEqual(disk_info.capacity, 500)
        self.assertEqual(disk_info.disk_type, NDM_SPARSE_DISK_TYPE)
        self.assertEqual(disk_info.node_attributes[NODE_NAME_KEY], 'worker-2')
        self.assertEqual(disk_info.by_id_dev_links, ['id1'])
        self.assertEqual(disk_info.by_path_dev_links, ['path1'])

    def test_health_observations_fill_and_overwrite(self):
        disk_info = DiskInfo.create(ProbeIdentifier(uuid='disk-1'))
        disk_info.apply_smart_observation(SmartObservation(
            smart_identifier='/dev/sdb', model='SMART-MODEL', serial='S1', rotation_rate=7200,
            total_bytes_read=10, temperature=TemperatureInfo(temperature_data_valid=True, current_temperature=40)))
        disk_info.apply_seachest_observation(SeachestObservation(
            seachest_identifier='/dev/sdb', model='SEACHEST-MODEL', serial='', total_bytes_read=20,
            percent_endurance_used=3.5))

        self.assertEqual(disk_info.model, 'SEACHEST-MODEL')
        self.assertEqual(disk_info.serial, 'S1')
        self.assertEqual(disk_info.rotation_rate, 7200)
        self.assertEqual(disk_info.total_bytes_read, 20)
        self.assertEqual(disk_info.percent_endurance_used, 3.5)
        # temperature untouched by an observation without one
        self.assertEqual(disk_info.temperature_info.current_temperature, 40)
        self.assertEqual(disk_info.probe_identifiers.smart_identifier, '/dev/sdb')
        self.assertEqual(disk_info.probe_identifiers.seachest_identifier, '/dev/sdb')

    def test_mount_observation_replaces_partitions(self):
        disk_info = DiskInfo.create()
        disk_info.set_partitions([PartitionInfo('83'), PartitionInfo('8e')])
        disk_info.apply_mount_observation(MountObservation(
            mount_identifier='/dev/sdb', file_system='xfs', mount_point='/var/lib',
            partitions=[PartitionInfo('82', FSInfo('swap', ''))]))
        self.assertEqual(disk_info.file_system_information, FSInfo('xfs', '/var/lib'))
        self.assertEqual([p.partition_type for p in disk_info.partition_data], ['82'])

    def test_mount_observation_without_partitions_keeps_them(self):
        disk_info = DiskInfo.create()
        disk_info.set_partitions([PartitionInfo('83')])
        disk_info.apply_mount_observation(MountObservation(mount_identifier='/dev/sdb', file_system='ext4'))
        self.assertEqual(len(disk_info.partition_data), 1)


class TestObservationParsing(unittest.TestCase):
    """Observation records built from camelCase dictionaries."""

    def test_udev_from_dict(self):
        observation = observation_from_dict({
            'source': 'udev', 'uuid': 'disk-1', 'udevIdentifier': '/sys/block/sdc',
            'capacity': '2048', 'byIdDevLinks': ['x'], 'nodeAttributes': {'nodename': 'n1'}})
        self.assertIsInstance(observation, UdevObservation)
        self.assertEqual(observation.capacity, 2048)
        self.assertEqual(observation.source_key, '/sys/block/sdc')
        self.assertEqual(observation.get_raw('uuid'), 'disk-1')

    def test_smart_from_dict_with_temperature(self):
        observation = observation_from_dict({
            'smartIdentifier': '/dev/sdc', 'rotationRate': 1,
            'temperature': {'temperatureDataValid': True, 'currentTemperature': 35,
                            'highestValid': True, 'highestTemperature': 60}}, source='smart')
        self.assertIsInstance(observation, SmartObservation)
        self.assertEqual(observation.rotation_rate, 1)
        self.assertTrue(observation.temperature.temperature_data_valid)
        self.assertEqual(observation.temperature.highest_temperature, 60)
        self.assertFalse(observation.temperature.lowest_valid)

    def test_mount_from_dict_partitions(self):
        observation = observation_from_dict({
            'source': 'mount', 'mountIdentifier': '/dev/sdc',
            'partitions': [
                {'partitionType': '83', 'fileSystem': 'ext4', 'mountPoint': '/data'},
                {'partitionType': '8e'},
            ]})
        self.assertIsInstance(observation, MountObservation)
        self.assertIsNone(observation.file_system)
        first, second = observation.partitions
        self.assertEqual(first.file_system_information, FSInfo('ext4', '/data'))
        self.assertTrue(second.file_system_information.is_absent)

    def test_malformed_temperature_values(self):
        observation = observation_from_dict({
            'source': 'smart', 'smartIdentifier': '/dev/sdc',
            'temperature': {'temperatureDataValid': True, 'currentTemperature': 'n/a',
                            'highestTemperature': '61', 'lowestTemperature': None}})
        self.assertTrue(observation.temperature.temperature_data_valid)
        self.assertEqual(observation.temperature.current_temperature, 0)
        self.assertEqual(observation.temperature.highest_temperature, 61)
        self.assertEqual(observation.temperature.lowest_temperature, 0)

    def test_temperature_validity_requires_boolean_true(self):
        for flag in ('false', 'true', 1, 'yes'):
            temperature = TemperatureInfo.from_dict({'temperatureDataValid': flag, 'currentTemperature': 42,
                                                     'highestValid': flag, 'lowestValid': flag})
            self.assertFalse(temperature.temperature_data_valid, flag)
            self.assertFalse(temperature.highest_valid, flag)
            self.assertFalse(temperature.lowest_valid, flag)

        disk_info = DiskInfo.create(ProbeIdentifier(uuid='disk-1'))
        disk_info.set_temperature(TemperatureInfo.from_dict(
            {'temperatureDataValid': 'false', 'currentTemperature': 42}))
        self.assertIsNone(project(disk_info).stats.disk_temperature)

    def test_partition_in_exported_form(self):
        partition = PartitionInfo.from_dict(
            {'partitionType': '83', 'fileSystem': {'fsType': 'ext4', 'mountPoint': '/'}})
        self.assertEqual(partition.file_system_information, FSInfo('ext4', '/'))
        self.assertEqual(project_partitions([partition])[0].to_dict(),
                         {'partitionType': '83', 'fileSystem': {'fsType': 'ext4', 'mountPoint': '/'}})

    def test_partition_nested_probe_form(self):
        partition = PartitionInfo.from_dict(
            {'partitionType': '8e', 'fileSystemInformation': {'fileSystem': 'xfs', 'mountPoint': '/home'}})
        self.assertEqual(partition.file_system_information, FSInfo('xfs', '/home'))

    def test_partition_filesystem_without_type_is_absent(self):
        with self.assertLogs('disk_inventory.core.disk_info', level='WARNING'):
            partition = PartitionInfo.from_dict({'partitionType': '83', 'fileSystem': {'mountPoint': '/x'}})
        self.assertTrue(partition.file_system_information.is_absent)

    def test_unknown_source(self):
        self.assertIsNone(observation_from_dict({'source': 'lvm'}))


class TestProjection(unittest.TestCase):
    """Projection of an aggregate into the Disk resource."""

    def test_reference_scenario(self):
        disk = project(make_disk_info())
        self.assertEqual(disk.kind, NDM_DISK_KIND)
        self.assertEqual(disk.api_version, NDM_VERSION)
        self.assertEqual(disk.metadata.name, 'disk-1234')
        self.assertEqual(disk.spec.path, '/dev/sdb')
        self.assertEqual(disk.spec.capacity.storage, 1000000000000)
        self.assertEqual(disk.spec.capacity.logical_sector_size, 512)
        self.assertEqual(disk.spec.capacity.physical_sector_size, 4096)
        self.assertEqual(disk.spec.details.model, 'X')
        self.assertEqual(len(disk.spec.devlinks), 1)
        self.assertEqual(disk.spec.devlinks[0].kind, 'by-id')
        self.assertEqual(disk.spec.devlinks[0].links, ['a', 'b'])
        self.assertTrue(disk.spec.file_system.is_absent)
        self.assertEqual(disk.to_dict()['spec']['fileSystem'], {})

    def test_labels_and_status(self):
        disk = project(make_disk_info())
        self.assertEqual(disk.metadata.labels, {
            KUBERNETES_HOSTNAME_LABEL: 'worker-1',
            NDM_DISK_TYPE_KEY: NDM_DEFAULT_DISK_TYPE,
            NDM_MANAGED_KEY: 'true',
        })
        self.assertEqual(disk.status.state, NDM_ACTIVE)

    def test_missing_node_name_yields_empty_label(self):
        disk = project(DiskInfo.create())
        self.assertEqual(disk.metadata.labels[KUBERNETES_HOSTNAME_LABEL], '')

    def test_empty_aggregate(self):
        disk = project(DiskInfo.create())
        self.assertEqual(disk.metadata.name, '')
        self.assertEqual(disk.spec.path, '')
        self.assertEqual(disk.spec.capacity.storage, 0)
        self.assertEqual(disk.spec.devlinks, [])
        self.assertEqual(disk.to_dict()['spec']['devlinks'], [])
        self.assertIsNone(disk.stats.disk_temperature)

    def test_idempotent(self):
        disk_info = make_disk_info()
        disk_info.set_partitions([PartitionInfo('83', FSInfo('ext4', '/'))])
        first = json.dumps(project(disk_info).to_dict())
        second = json.dumps(project(disk_info).to_dict())
        self.assertEqual(first, second)
        self.assertEqual(project(disk_info), project(disk_info))

    def test_projection_does_not_alias_aggregate(self):
        disk_info = make_disk_info()
        disk = project(disk_info)
        disk_info.add_by_id_links(['c'])
        disk.spec.devlinks[0].links.append('z')
        self.assertEqual(disk.spec.devlinks[0].links, ['a', 'b', 'z'])
        self.assertEqual(disk_info.by_id_dev_links, ['a', 'b', 'c'])

    def test_field_fidelity(self):
        disk_info = make_disk_info()
        disk_info.serial = 'SER123'
        disk_info.vendor = 'ACME'
        disk_info.firmware_revision = 'FW01'
        disk_info.compliance = 'SPC-4'
        disk_info.drive_type = 'SSD'
        disk_info.rotation_rate = 1
        details = project(disk_info).to_dict()['spec']['details']
        self.assertEqual(details, {
            'rotationRate': 1,
            'driveType': 'SSD',
            'model': 'X',
            'compliance': 'SPC-4',
            'serial': 'SER123',
            'vendor': 'ACME',
            'firmwareRevision': 'FW01',
        })

    def test_both_devlink_kinds_in_order(self):
        disk_info = make_disk_info()
        disk_info.add_by_path_links(['/dev/disk/by-path/pci-0000:00:1f.2-ata-1'])
        kinds = [link.kind for link in project(disk_info).spec.devlinks]
        self.assertEqual(kinds, ['by-id', 'by-path'])

    def test_by_path_only(self):
        disk_info = DiskInfo.create()
        disk_info.add_by_path_links(['p'])
        self.assertEqual([link.to_dict() for link in project(disk_info).spec.devlinks],
                         [{'kind': 'by-path', 'links': ['p']}])

    def test_filesystem_present(self):
        disk_info = make_disk_info()
        disk_info.set_file_system('ext4', '/mnt/data')
        exported = project(disk_info).to_dict()['spec']['fileSystem']
        self.assertEqual(exported, {'fsType': 'ext4', 'mountPoint': '/mnt/data'})

    def test_filesystem_empty_type_is_not_absent(self):
        exported = project_filesystem(FSInfo('', ''))
        self.assertEqual(exported.fs_type, '')
        self.assertEqual(exported.to_dict(), {'fsType': '', 'mountPoint': ''})

    def test_filesystem_absent_ignores_mount_point(self):
        exported = project_filesystem(FSInfo(FS_NONE, '/stale'))
        self.assertIsNone(exported.fs_type)
        self.assertIsNone(exported.mount_point)

    def test_temperature_gated_by_validity(self):
        disk_info = make_disk_info()
        disk_info.set_temperature(TemperatureInfo(
            temperature_data_valid=False, current_temperature=42,
            highest_valid=True, highest_temperature=55))
        disk = project(disk_info)
        self.assertIsNone(disk.stats.disk_temperature)
        self.assertNotIn('diskTemperature', disk.to_dict()['stats'])

    def test_temperature_exported_when_valid(self):
        disk_info = make_disk_info()
        disk_info.set_temperature(TemperatureInfo(
            temperature_data_valid=True, current_temperature=42,
            highest_valid=True, highest_temperature=55, lowest_valid=True, lowest_temperature=20))
        stats = project(disk_info).to_dict()['stats']
        self.assertEqual(stats['diskTemperature'], {
            'currentTemperature': 42, 'highestTemperature': 55, 'lowestTemperature': 20})

    def test_stats_copied(self):
        disk_info = make_disk_info()
        disk_info.set_stats(total_bytes_read=100, total_bytes_written=200,
                            device_utilization_rate=0.25, percent_endurance_used=7.0)
        stats = project(disk_info).stats
        self.assertEqual((stats.total_bytes_read, stats.total_bytes_written), (100, 200))
        self.assertEqual(stats.device_utilization_rate, 0.25)
        self.assertEqual(stats.percent_endurance_used, 7.0)

    def test_partitions_keep_order(self):
        partitions = [
            PartitionInfo('83', FSInfo('ext4', '/')),
            PartitionInfo('82', FSInfo(FS_NONE, '')),
            PartitionInfo('8e', FSInfo('xfs', '/home')),
        ]
        exported = project_partitions(partitions)
        self.assertEqual([p.partition_type for p in exported], ['83', '82', '8e'])
        self.assertEqual(exported[0].file_system.fs_type, 'ext4')
        self.assertTrue(exported[1].file_system.is_absent)
        self.assertEqual(exported[2].file_system.mount_point, '/home')
        # input untouched
        self.assertEqual(partitions[1].file_system_information.file_system, FS_NONE)

    def test_partitions_empty(self):
        self.assertEqual(project_partitions([]), [])
        self.assertEqual(DiskInfo.create().to_partitions(), [])


class TestConfig(unittest.TestCase):
    """Configuration validation."""

    def test_requires_source_directory(self):
        with self.assertRaises(ValueError):
            InventoryConfig()

    def test_rejects_unknown_output(self):
        with self.assertRaises(ValueError):
            InventoryConfig(from_json='/tmp', output='xml')

    def test_writer_config_to_dict(self):
        config = WriterConfig(output_format='both', output_dir='/out', prometheus_port=9100)
        self.assertEqual(config.to_dict(), {
            'output_format': 'both', 'node_name': '', 'output_dir': '/out',
            'resource_format': 'yaml', 'prometheus_port': 9100})
        self.assertNotIn('prometheus_port', WriterConfig(output_format='json').to_dict())

    def test_writer_config_rejects_bad_port(self):
        with self.assertRaises(ValueError):
            WriterConfig(prometheus_port=70000)


class TestDiskInventory(unittest.TestCase):
    """End-to-end replay through the inventory orchestrator."""

    def setUp(self):
        self.temp_dir = TemporaryDirectory()
        self.source_dir = Path(self.temp_dir.name) / 'observations'
        self.output_dir = Path(self.temp_dir.name) / 'out'
        self.source_dir.mkdir()

        self._write('udev_sdb_1000.json', [{
            'uuid': 'disk-abc', 'udevIdentifier': '/sys/block/sdb', 'smartIdentifier': '/dev/sdb',
            'mountIdentifier': '/dev/sdb', 'path': '/dev/sdb', 'capacity': 1000000000000,
            'logicalSectorSize': 512, 'physicalSectorSize': 4096, 'byIdDevLinks': ['a', 'b']}])
        self._write('smart_sdb_1000.json', {
            'smartIdentifier': '/dev/sdb', 'model': 'X', 'totalBytesRead': 4096,
            'temperature': {'temperatureDataValid': False, 'currentTemperature': 42}})
        self._write('mount_sdb_2000.json', {
            'mountIdentifier': '/dev/sdb', 'fileSystem': 'ext4', 'mountPoint': '/data'})

    def tearDown(self):
        self.temp_dir.cleanup()

    def _write(self, name, content):
        with open(self.source_dir / name, 'w', encoding='utf-8') as f:
            json.dump(content, f)

    def test_replay_all_batches(self):
        config = InventoryConfig(from_json=str(self.source_dir), node_name='worker-1',
                                 output='yaml', output_dir=str(self.output_dir))
        inventory = DiskInventory(config)
        self.assertTrue(inventory.initialize())
        inventory.run_continuous()

        stats = inventory.get_statistics()
        self.assertEqual(stats['collections_completed'], 2)
        self.assertEqual(stats['disks_registered'], 1)
        self.assertEqual(stats['observations_applied'], 3)

        with open(self.output_dir / 'disk-abc.yaml', encoding='utf-8') as f:
            document = yaml.safe_load(f)
        self.assertEqual(document['metadata']['name'], 'disk-abc')
        self.assertEqual(document['metadata']['labels'][KUBERNETES_HOSTNAME_LABEL], 'worker-1')
        self.assertEqual(document['spec']['details']['model'], 'X')
        self.assertEqual(document['spec']['fileSystem'], {'fsType': 'ext4', 'mountPoint': '/data'})
        self.assertEqual(document['stats']['totalBytesRead'], 4096)
        self.assertNotIn('diskTemperature', document['stats'])
        self.assertEqual(document['partitions'], [])

    def test_max_iterations(self):
        config = InventoryConfig(from_json=str(self.source_dir), output='json',
                                 output_dir=str(self.output_dir), max_iterations=1)
        inventory = DiskInventory(config)
        self.assertTrue(inventory.initialize())
        inventory.run_continuous()

        with open(self.output_dir / 'disk-abc.json', encoding='utf-8') as f:
            document = json.load(f)
        self.assertEqual(document['spec']['fileSystem'], {})
        self.assertEqual(inventory.get_statistics()['collections_completed'], 1)

    def test_initialize_fails_for_missing_directory(self):
        config = InventoryConfig(from_json=os.path.join(self.temp_dir.name, 'missing'))
        self.assertFalse(DiskInventory(config).initialize())


if __name__ == '__main__':
    logging.basicConfig(level=logging.ERROR)
    unittest.main()
