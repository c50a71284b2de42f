"""Entry point for the disk inventory agent."""

import argparse
import logging
import sys
from typing import Optional

from .config import Settings
from .core.config import InventoryConfig, OUTPUT_FORMATS, LOG_LEVELS
from .core.inventory import DiskInventory
from .core.logging_config import LoggingConfigurator
from .core.writer_config import WriterConfig


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""

    parser = argparse.ArgumentParser(
        description='Node disk inventory: correlate probe observations into Disk resources',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Replay recorded probe output, print Disk resources as YAML
  python -m disk_inventory --fromJson ./samples --nodeName worker-1

  # Write one JSON file per disk and serve stats on :9100
  python -m disk_inventory --fromJson ./samples --nodeName worker-1 --output both \\
                           --outputDir ./out --prometheus-port 9100
        """
    )

    parser.add_argument('--fromJson', type=str, required=True,
                        help='Directory of recorded observation files (<source>_<key>_<timestamp>.json)')
    parser.add_argument('--nodeName', type=str, default=None,
                        help='Name of the node the disks are attached to (default: $NODE_NAME)')
    parser.add_argument('--config', type=str, default=None,
                        help='Optional YAML or JSON settings file')

    output_group = parser.add_argument_group('Output Configuration')
    output_group.add_argument('--output', choices=OUTPUT_FORMATS, default=None,
                              help='Output format (default: yaml)')
    output_group.add_argument('--outputDir', type=str, default=None,
                              help='Directory for one resource file per disk (default: stdout)')
    output_group.add_argument('--prometheus-port', type=int, default=None,
                              help='Serve disk stats on this port (default: no server)')

    behavior_group = parser.add_argument_group('Export Behavior')
    behavior_group.add_argument('--intervalTime', type=int, default=0,
                                help='Seconds to wait between replayed batches (default: 0)')
    behavior_group.add_argument('--maxIterations', type=int, default=0,
                                help='Maximum batches to replay (0=all)')

    debug_group = parser.add_argument_group('Debugging')
    debug_group.add_argument('--log-level', choices=LOG_LEVELS, default=None,
                             help='Set logging level (default: INFO)')
    debug_group.add_argument('--logfile', type=str, default=None,
                             help='Path to log file (default: console only)')

    return parser


def validate_arguments(args) -> Optional[str]:
    """Validate command line arguments.

    Returns:
        Error message if validation fails, None if valid
    """
    if args.intervalTime < 0:
        return "--intervalTime must not be negative"
    if args.maxIterations < 0:
        return "--maxIterations must not be negative"
    if args.prometheus_port is not None and not 0 <= args.prometheus_port <= 65535:
        return "--prometheus-port must be between 0 and 65535"
    return None


def main(argv=None) -> int:
    """Main entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    error_msg = validate_arguments(args)
    if error_msg:
        parser.error(error_msg)

    settings = Settings(config_file=args.config)

    try:
        config = InventoryConfig.from_args(args, settings)
        writer_config = WriterConfig.from_args(args, settings)
    except ValueError as e:
        parser.error(str(e))

    LoggingConfigurator.setup_logging(log_level=config.log_level, log_file=config.logfile)

    logging.info("=== Disk Inventory Startup ===")
    logging.info(f"Observation directory: {config.from_json}")
    logging.info(f"Node name: {config.node_name or '(unset)'}")
    logging.info(f"Output mode: {writer_config.output_format}")
    if writer_config.output_dir:
        logging.info(f"Output directory: {writer_config.output_dir}")
    if writer_config.prometheus_port:
        logging.info(f"Prometheus port: {writer_config.prometheus_port}")

    inventory = DiskInventory(config, writer_config)
    if not inventory.initialize():
        logging.error("Failed to initialize inventory")
        return 1

    try:
        inventory.run_continuous()
    except Exception as e:
        logging.error(f"Inventory error: {e}")
        if config.log_level.upper() == 'DEBUG':
            raise
        return 1

    logging.info(f"Inventory finished: {inventory.get_statistics()}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
