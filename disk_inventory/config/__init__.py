"""
Configuration management for the disk inventory agent.
"""

import os
import yaml
import json
from typing import Optional
import logging

from ..utils import safe_int

# Initialize logger
LOG = logging.getLogger(__name__)


class Settings:
    """
    Configuration settings for the disk inventory agent.
    Supports loading from a YAML or JSON file, then environment variables.
    """

    def __init__(self, config_file: Optional[str] = None, from_env: bool = True):
        """
        Initialize settings from a config file and/or environment variables.

        Args:
            config_file: Path to YAML or JSON configuration file
            from_env: Whether to load settings from environment variables
        """
        # Default values
        self.node_name: Optional[str] = None
        self.output: str = 'yaml'
        self.output_dir: Optional[str] = None
        self.prometheus_port: int = 0
        self.log_level: str = 'INFO'
        self.log_file: Optional[str] = None

        # Environment overrides file
        if config_file:
            self._load_from_file(config_file)

        if from_env:
            self._load_from_env()

    def _load_from_file(self, config_file: str) -> None:
        """Load settings from a YAML or JSON file."""
        if not os.path.exists(config_file):
            LOG.warning(f"Config file not found: {config_file}")
            return

        lowered = config_file.lower()
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if lowered.endswith('.yaml') or lowered.endswith('.yml'):
                    config = yaml.safe_load(f)
                elif lowered.endswith('.json'):
                    config = json.load(f)
                else:
                    LOG.warning(f"Unsupported config file format: {config_file}")
                    return
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            LOG.error(f"Failed to load config from {config_file}: {e}")
            return

        config = config or {}
        self.node_name = config.get('node_name', self.node_name)
        self.output = config.get('output', self.output)
        self.output_dir = config.get('output_dir', self.output_dir)
        self.prometheus_port = safe_int(config.get('prometheus_port'), self.prometheus_port)
        self.log_level = config.get('log_level', self.log_level)
        self.log_file = config.get('log_file', self.log_file)

        LOG.info(f"Loaded configuration from {config_file}")

    def _load_from_env(self) -> None:
        """Load settings from environment variables."""
        # NODE_NAME is injected through the downward API in the daemonset
        self.node_name = os.getenv('NODE_NAME', self.node_name)
        self.output = os.getenv('NDM_OUTPUT', self.output)
        self.output_dir = os.getenv('NDM_OUTPUT_DIR', self.output_dir)
        self.prometheus_port = safe_int(os.getenv('NDM_PROMETHEUS_PORT'), self.prometheus_port)
        self.log_level = os.getenv('NDM_LOG_LEVEL', self.log_level)
        self.log_file = os.getenv('NDM_LOG_FILE', self.log_file)


__all__ = ['Settings']
