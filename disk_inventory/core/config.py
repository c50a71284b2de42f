"""Core configuration classes for the disk inventory."""

from dataclasses import dataclass
from typing import Dict, Any, Optional

OUTPUT_FORMATS = ['yaml', 'json', 'prometheus', 'both']
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


@dataclass
class InventoryConfig:
    """Main configuration for the inventory agent.

    Collects the settings the orchestrator needs so they are not passed
    around as loose arguments.
    """

    # Observation source configuration
    from_json: Optional[str] = None  # directory of replayed observation files

    # Node identification
    node_name: str = ''

    # Output configuration
    output: str = 'yaml'  # 'yaml', 'json', 'prometheus', or 'both'
    output_dir: Optional[str] = None  # None writes resources to stdout

    # Export behavior
    interval_time: int = 0  # seconds between export cycles, 0 = no wait
    max_iterations: int = 0  # 0 = until the source is exhausted

    # Debugging
    log_level: str = 'INFO'
    logfile: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.from_json:
            raise ValueError("from_json required to replay observations")

        if self.output not in OUTPUT_FORMATS:
            raise ValueError(f"output must be one of {OUTPUT_FORMATS}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}")

        if self.interval_time < 0:
            raise ValueError("interval_time must not be negative")

        if self.max_iterations < 0:
            raise ValueError("max_iterations must not be negative")

    @classmethod
    def from_args(cls, args, settings=None) -> 'InventoryConfig':
        """Create configuration from command line arguments.

        Values missing on the command line fall back to Settings loaded from
        file or environment, when given.
        """
        def pick(arg_name: str, setting_name: str, default: Any) -> Any:
            value = getattr(args, arg_name, None)
            if value is None and settings is not None:
                value = getattr(settings, setting_name, None)
            return default if value is None else value

        return cls(
            from_json=getattr(args, 'fromJson', None),
            node_name=pick('nodeName', 'node_name', ''),
            output=pick('output', 'output', 'yaml'),
            output_dir=pick('outputDir', 'output_dir', None),
            interval_time=getattr(args, 'intervalTime', 0) or 0,
            max_iterations=getattr(args, 'maxIterations', 0) or 0,
            log_level=pick('log_level', 'log_level', 'INFO'),
            logfile=pick('logfile', 'log_file', None),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for passing to observation sources."""
        return {
            'from_json': self.from_json,
            'node_name': self.node_name,
            'output': self.output,
            'output_dir': self.output_dir,
            'interval_time': self.interval_time,
            'max_iterations': self.max_iterations,
            'logfile': self.logfile,
        }
