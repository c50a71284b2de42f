"""
Tests for settings loading and the command line entry point.
"""
import json
import os
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock

import yaml

from .config import Settings
from .core.config import InventoryConfig
from .core.writer_config import WriterConfig
from .main import create_argument_parser, main, validate_arguments


class TestSettings(unittest.TestCase):

    def setUp(self):
        self.temp_dir = TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_defaults(self):
        settings = Settings(from_env=False)
        self.assertIsNone(settings.node_name)
        self.assertEqual(settings.output, 'yaml')
        self.assertEqual(settings.prometheus_port, 0)

    def test_yaml_file(self):
        config_file = self.temp_path / 'settings.yaml'
        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump({'node_name': 'worker-9', 'output': 'both', 'prometheus_port': '9100'}, f)
        settings = Settings(config_file=str(config_file), from_env=False)
        self.assertEqual(settings.node_name, 'worker-9')
        self.assertEqual(settings.output, 'both')
        self.assertEqual(settings.prometheus_port, 9100)

    def test_environment_overrides_file(self):
        config_file = self.temp_path / 'settings.json'
        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump({'node_name': 'from-file', 'log_level': 'DEBUG'}, f)
        with mock.patch.dict(os.environ, {'NODE_NAME': 'from-env', 'NDM_PROMETHEUS_PORT': '9200'}):
            settings = Settings(config_file=str(config_file))
        self.assertEqual(settings.node_name, 'from-env')
        self.assertEqual(settings.log_level, 'DEBUG')
        self.assertEqual(settings.prometheus_port, 9200)

    def test_missing_file_keeps_defaults(self):
        settings = Settings(config_file=str(self.temp_path / 'absent.yaml'), from_env=False)
        self.assertEqual(settings.output, 'yaml')


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.temp_dir = TemporaryDirectory()
        self.temp_path = Path(self.temp_dir.name)
        self.source_dir = self.temp_path / 'samples'
        self.source_dir.mkdir()
        with open(self.source_dir / 'udev_sdb_1.json', 'w', encoding='utf-8') as f:
            json.dump({'uuid': 'disk-1', 'udevIdentifier': '/sys/block/sdb', 'path': '/dev/sdb'}, f)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_arguments_fall_back_to_settings(self):
        args = create_argument_parser().parse_args(['--fromJson', str(self.source_dir)])
        settings = Settings(from_env=False)
        settings.node_name = 'worker-3'
        settings.output = 'json'
        config = InventoryConfig.from_args(args, settings)
        writer_config = WriterConfig.from_args(args, settings)
        self.assertEqual(config.node_name, 'worker-3')
        self.assertEqual(config.output, 'json')
        self.assertEqual(writer_config.output_format, 'json')
        self.assertEqual(writer_config.node_name, 'worker-3')

    def test_validate_arguments(self):
        parser = create_argument_parser()
        args = parser.parse_args(['--fromJson', 'x', '--maxIterations', '-1'])
        self.assertIsNotNone(validate_arguments(args))
        args = parser.parse_args(['--fromJson', 'x', '--prometheus-port', '70000'])
        self.assertIsNotNone(validate_arguments(args))
        self.assertIsNone(validate_arguments(parser.parse_args(['--fromJson', 'x'])))

    def test_main_writes_resources(self):
        output_dir = self.temp_path / 'out'
        with mock.patch.dict(os.environ, {}, clear=True):
            code = main(['--fromJson', str(self.source_dir), '--nodeName', 'worker-1',
                         '--output', 'json', '--outputDir', str(output_dir), '--log-level', 'ERROR'])
        self.assertEqual(code, 0)
        with open(output_dir / 'disk-1.json', encoding='utf-8') as f:
            document = json.load(f)
        self.assertEqual(document['metadata']['labels']['kubernetes.io/hostname'], 'worker-1')

    def test_main_missing_directory(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            code = main(['--fromJson', str(self.temp_path / 'missing'), '--log-level', 'ERROR'])
        self.assertEqual(code, 1)


class TestPackaging(unittest.TestCase):

    def test_long_description_is_not_the_requirements_document(self):
        pyproject = Path(__file__).resolve().parents[1] / 'pyproject.toml'
        if not pyproject.exists():
            self.skipTest("not running from a source checkout")
        with open(pyproject, encoding='utf-8') as f:
            content = f.read()
        self.assertNotIn('spec.md', content)
        self.assertIn('name = "node-disk-inventory"', content)


if __name__ == '__main__':
    unittest.main()
