"""
Tests for the writers of exported disk resources.
"""
import io
import json
import os
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

import yaml

from .base import Writer
from .factory import WriterFactory
from .multi_writer import MultiWriter
from .prometheus_writer import PrometheusWriter
from .resource_writer import ResourceFileWriter, build_document
from ..core.disk_info import DiskInfo, FSInfo, PartitionInfo, ProbeIdentifier, TemperatureInfo
from ..core.writer_config import WriterConfig


def make_export(uuid='disk-1', valid_temperature=True):
    disk_info = DiskInfo.create(ProbeIdentifier(uuid=uuid))
    disk_info.node_attributes['nodename'] = 'worker-1'
    disk_info.path = '/dev/sdb'
    disk_info.capacity = 2048
    disk_info.total_bytes_read = 100
    disk_info.set_temperature(TemperatureInfo(temperature_data_valid=valid_temperature,
                                              current_temperature=41, highest_temperature=50))
    disk_info.set_partitions([PartitionInfo('83', FSInfo('ext4', '/data'))])
    return disk_info.to_disk(), disk_info.to_partitions()


class RecordingWriter(Writer):

    def __init__(self, result=True):
        self.result = result
        self.calls = []
        self.closed = False

    def write(self, exports, loop_iteration=1):
        self.calls.append((len(exports), loop_iteration))
        if self.result is None:
            raise RuntimeError("boom")
        return self.result

    def close(self):
        self.closed = True


class TestResourceFileWriter(unittest.TestCase):

    def setUp(self):
        self.temp_dir = TemporaryDirectory()
        self.output_dir = Path(self.temp_dir.name) / 'resources'

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_build_document(self):
        disk, partitions = make_export()
        document = build_document(disk, partitions)
        self.assertEqual(document['kind'], 'Disk')
        self.assertEqual(document['partitions'],
                         [{'partitionType': '83', 'fileSystem': {'fsType': 'ext4', 'mountPoint': '/data'}}])
        self.assertNotIn('partitions', document['spec'])

    def test_yaml_files_per_disk(self):
        writer = ResourceFileWriter({'output_dir': str(self.output_dir), 'resource_format': 'yaml'})
        self.assertTrue(writer.write([make_export('disk-1'), make_export('disk-2')]))
        self.assertEqual(sorted(os.listdir(self.output_dir)), ['disk-1.yaml', 'disk-2.yaml'])

        with open(self.output_dir / 'disk-1.yaml', encoding='utf-8') as f:
            document = yaml.safe_load(f)
        self.assertEqual(document['apiVersion'], 'openebs.io/v1alpha1')
        self.assertEqual(document['stats']['diskTemperature']['currentTemperature'], 41)

    def test_prunes_departed_disks(self):
        writer = ResourceFileWriter({'output_dir': str(self.output_dir), 'resource_format': 'json'})
        writer.write([make_export('disk-1'), make_export('disk-2')])
        writer.write([make_export('disk-2')], loop_iteration=2)
        self.assertEqual(os.listdir(self.output_dir), ['disk-2.json'])

    def test_stream_json(self):
        stream = io.StringIO()
        writer = ResourceFileWriter({'resource_format': 'json'}, stream=stream)
        self.assertTrue(writer.write([make_export(valid_temperature=False)]))
        document = json.loads(stream.getvalue())
        self.assertEqual(document['metadata']['name'], 'disk-1')
        self.assertNotIn('diskTemperature', document['stats'])

    def test_stream_json_same_shape_across_iterations(self):
        stream = io.StringIO()
        writer = ResourceFileWriter({'resource_format': 'json'}, stream=stream)
        writer.write([make_export('disk-1')], 1)
        writer.write([], 2)
        writer.write([make_export('disk-1'), make_export('disk-2')], 3)
        documents = [json.loads(line) for line in stream.getvalue().splitlines()]
        self.assertEqual([d['metadata']['name'] for d in documents], ['disk-1', 'disk-1', 'disk-2'])

    def test_stream_yaml_iterations_stay_separate(self):
        stream = io.StringIO()
        writer = ResourceFileWriter({'resource_format': 'yaml'}, stream=stream)
        writer.write([make_export('disk-1')], 1)
        writer.write([make_export('disk-2')], 2)
        documents = list(yaml.safe_load_all(stream.getvalue()))
        self.assertEqual(len(documents), 2)
        self.assertEqual([d['metadata']['name'] for d in documents], ['disk-1', 'disk-2'])

    def test_stream_yaml_multiple_documents(self):
        stream = io.StringIO()
        writer = ResourceFileWriter({}, stream=stream)
        writer.write([make_export('disk-1'), make_export('disk-2')])
        documents = list(yaml.safe_load_all(stream.getvalue()))
        self.assertEqual([d['metadata']['name'] for d in documents], ['disk-1', 'disk-2'])

    def test_rejects_unknown_format(self):
        with self.assertRaises(ValueError):
            ResourceFileWriter({'resource_format': 'xml'})


class TestPrometheusWriter(unittest.TestCase):

    def test_gauges_follow_exports(self):
        writer = PrometheusWriter({})
        registry = writer.prometheus_registry
        labels = {'disk': 'disk-1', 'node': 'worker-1', 'path': '/dev/sdb'}

        self.assertTrue(writer.write([make_export('disk-1')]))
        self.assertEqual(registry.get_sample_value('ndm_disk_capacity_bytes', labels), 2048)
        self.assertEqual(registry.get_sample_value('ndm_disk_total_bytes_read', labels), 100)
        self.assertEqual(registry.get_sample_value('ndm_disk_temperature_celsius', labels), 41)
        self.assertIn(b'ndm_disk_highest_temperature_celsius', writer.render())

        writer.write([make_export('disk-2', valid_temperature=False)], loop_iteration=2)
        self.assertIsNone(registry.get_sample_value('ndm_disk_capacity_bytes', labels))
        other = dict(labels, disk='disk-2')
        self.assertEqual(registry.get_sample_value('ndm_disk_capacity_bytes', other), 2048)
        self.assertIsNone(registry.get_sample_value('ndm_disk_temperature_celsius', other))


class TestMultiWriter(unittest.TestCase):

    def test_forwards_and_reports_failures(self):
        good, bad, broken = RecordingWriter(), RecordingWriter(False), RecordingWriter(None)
        writer = MultiWriter([good, bad, broken])
        self.assertFalse(writer.write([make_export()], 3))
        self.assertEqual(good.calls, [(1, 3)])
        self.assertEqual(broken.calls, [(1, 3)])
        writer.close()
        self.assertTrue(good.closed and bad.closed and broken.closed)

    def test_all_succeed(self):
        self.assertTrue(MultiWriter([RecordingWriter(), RecordingWriter()]).write([]))


class TestWriterFactory(unittest.TestCase):

    def test_creates_matching_writer(self):
        self.assertIsInstance(WriterFactory.create_writer_from_config(WriterConfig('json')), ResourceFileWriter)
        self.assertIsInstance(WriterFactory.create_writer_from_config(WriterConfig('prometheus')),
                              PrometheusWriter)
        both = WriterFactory.create_writer_from_config(WriterConfig('both'))
        self.assertIsInstance(both, MultiWriter)
        self.assertEqual([type(w) for w in both.writers], [ResourceFileWriter, PrometheusWriter])
        self.assertEqual(both.writers[0].resource_format, 'yaml')


if __name__ == '__main__':
    unittest.main()
