"""
Tests for the JSON replay observation source.
"""
import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from .json_replay import (
    JSONReplaySource,
    extract_source_from_filename,
    extract_timestamp_from_filename,
    read_records,
)
from ..core.observations import (
    MountObservation,
    ObservationSourceType,
    SmartObservation,
    UdevObservation,
)


class TestFilenameParsing(unittest.TestCase):

    def test_timestamp(self):
        self.assertEqual(extract_timestamp_from_filename('smart_sdb_1757410112.json'), 1757410112)
        self.assertIsNone(extract_timestamp_from_filename('smart.json'))
        self.assertIsNone(extract_timestamp_from_filename('smart_sdb_latest.json'))

    def test_source(self):
        self.assertEqual(extract_source_from_filename('Udev_sdb_1.json'), 'udev')
        self.assertEqual(extract_source_from_filename(Path('/x/mount_sdb_1.json')), 'mount')


class TestJSONReplaySource(unittest.TestCase):
    """Test cases for JSONReplaySource."""

    def setUp(self):
        self.temp_dir = TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def _write(self, name, content):
        path = self.temp_path / name
        with open(path, 'w', encoding='utf-8') as f:
            if isinstance(content, str):
                f.write(content)
            else:
                json.dump(content, f)
        return path

    def test_read_records_shapes(self):
        single = self._write('a.json', {'uuid': 'x'})
        many = self._write('b.json', [{'uuid': 'x'}, 'junk', {'uuid': 'y'}])
        wrapped = self._write('c.json', {'source': 'smart', 'data': [{'smartIdentifier': '/dev/sdb'}]})
        broken = self._write('d.json', '{not json')

        self.assertEqual(read_records(single), [{'uuid': 'x'}])
        self.assertEqual(len(read_records(many)), 2)
        self.assertEqual(read_records(wrapped), [{'smartIdentifier': '/dev/sdb', 'source': 'smart'}])
        self.assertEqual(read_records(broken), [])
        self.assertEqual(read_records(self.temp_path / 'missing.json'), [])

    def test_initialize_missing_directory(self):
        source = JSONReplaySource({'from_json': str(self.temp_path / 'missing')})
        self.assertFalse(source.initialize())
        self.assertFalse(JSONReplaySource({}).initialize())

    def test_batches_in_order_udev_first(self):
        self._write('smart_sdb_100.json', {'smartIdentifier': '/dev/sdb'})
        self._write('udev_sdb_100.json', {'uuid': 'disk-1', 'udevIdentifier': '/sys/block/sdb'})
        self._write('mount_sdb_200.json', {'mountIdentifier': '/dev/sdb', 'fileSystem': 'xfs'})
        self._write('lvm_sdb_200.json', {'something': 1})

        source = JSONReplaySource({'from_json': str(self.temp_path)})
        self.assertTrue(source.initialize())
        self.assertEqual(source.current_timestamp, 100)
        self.assertTrue(source.has_more_batches())

        first = source.collect()
        self.assertTrue(first.success)
        self.assertIsInstance(first.observations[0], UdevObservation)
        self.assertIsInstance(first.observations[1], SmartObservation)
        self.assertEqual(first.metadata['timestamp'], 100)
        self.assertEqual(first.count_by_source(), {ObservationSourceType.UDEV: 1, ObservationSourceType.SMART: 1})

        self.assertTrue(source.advance_batch())
        second = source.collect()
        self.assertEqual(len(second.observations), 1)
        self.assertIsInstance(second.observations[0], MountObservation)
        self.assertFalse(source.has_more_batches())

        self.assertFalse(source.advance_batch())
        self.assertIsNone(source.current_timestamp)
        self.assertFalse(source.collect().success)

    def test_malformed_temperature_does_not_abort_batch(self):
        self._write('udev_sdb_1.json', {'uuid': 'disk-1', 'udevIdentifier': '/sys/block/sdb'})
        self._write('smart_sdb_1.json', {'smartIdentifier': '/dev/sdb',
                                         'temperature': {'temperatureDataValid': True,
                                                         'currentTemperature': 'n/a'}})
        source = JSONReplaySource({'from_json': str(self.temp_path)})
        self.assertTrue(source.initialize())
        result = source.collect()
        self.assertTrue(result.success)
        self.assertEqual(len(result.observations), 2)
        self.assertEqual(result.observations[1].temperature.current_temperature, 0)

    def test_record_source_overrides_filename(self):
        self._write('probe_sdb_1.json', [{'source': 'mount', 'mountIdentifier': '/dev/sdb'}])
        source = JSONReplaySource({'json_directory': str(self.temp_path)})
        self.assertTrue(source.initialize())
        observations = source.collect().observations
        self.assertEqual(len(observations), 1)
        self.assertIsInstance(observations[0], MountObservation)


if __name__ == '__main__':
    unittest.main()
