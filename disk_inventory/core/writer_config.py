"""Writer configuration abstraction.

Separates writer-specific configuration from main inventory config.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any

from .config import OUTPUT_FORMATS


@dataclass
class WriterConfig:
    """Configuration specific to output writers."""

    output_format: str = 'yaml'  # 'yaml', 'json', 'prometheus', 'both'

    # Resource file output; None streams documents to stdout
    output_dir: Optional[str] = None

    # Prometheus-specific configuration (only used if needed); 0 = no HTTP server
    prometheus_port: int = 0

    # Node identification (passed from inventory)
    node_name: str = ''

    def __post_init__(self):
        """Validate writer configuration after initialization."""
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {self.output_format}")
        if self.prometheus_port < 0 or self.prometheus_port > 65535:
            raise ValueError(f"prometheus_port out of range: {self.prometheus_port}")

    @property
    def resource_format(self) -> str:
        """File format of the resource writer; 'both' pairs YAML with Prometheus"""
        return 'json' if self.output_format == 'json' else 'yaml'

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for writer initialization."""
        config: Dict[str, Any] = {
            'output_format': self.output_format,
            'node_name': self.node_name,
        }

        if self.output_format in ['yaml', 'json', 'both']:
            config.update({
                'output_dir': self.output_dir,
                'resource_format': self.resource_format,
            })

        if self.output_format in ['prometheus', 'both']:
            config['prometheus_port'] = self.prometheus_port

        return config

    @classmethod
    def from_inventory_config(cls, inventory_config, prometheus_port: int = 0) -> 'WriterConfig':
        """Create WriterConfig from main inventory configuration."""
        return cls(
            output_format=inventory_config.output,
            output_dir=inventory_config.output_dir,
            prometheus_port=prometheus_port,
            node_name=inventory_config.node_name,
        )

    @classmethod
    def from_args(cls, args, settings=None) -> 'WriterConfig':
        """Create WriterConfig directly from command line arguments."""
        port = getattr(args, 'prometheus_port', None)
        if port is None and settings is not None:
            port = settings.prometheus_port
        output_dir = getattr(args, 'outputDir', None)
        if output_dir is None and settings is not None:
            output_dir = settings.output_dir
        node_name = getattr(args, 'nodeName', None)
        if node_name is None and settings is not None:
            node_name = settings.node_name

        return cls(
            output_format=getattr(args, 'output', None) or (settings.output if settings else 'yaml'),
            output_dir=output_dir,
            prometheus_port=port or 0,
            node_name=node_name or '',
        )
