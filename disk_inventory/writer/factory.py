"""
Writer factory for exported disk resources.
"""

import logging

from .base import Writer
from .resource_writer import ResourceFileWriter
from .prometheus_writer import PrometheusWriter
from .multi_writer import MultiWriter

# Initialize logger
LOG = logging.getLogger(__name__)


class WriterFactory:
    """
    Factory for creating writer instances based on configuration.
    """

    @staticmethod
    def create_writer_from_config(writer_config) -> Writer:
        """
        Create a writer based on a WriterConfig object.

        Args:
            writer_config: WriterConfig instance with writer settings

        Returns:
            Appropriate Writer instance
        """
        output_choice = writer_config.output_format
        config = writer_config.to_dict()

        if output_choice in ('yaml', 'json'):
            LOG.info(f"Creating {output_choice} resource writer")
            return ResourceFileWriter(config)

        elif output_choice == 'prometheus':
            LOG.info(f"Creating Prometheus writer on port {writer_config.prometheus_port}")
            return PrometheusWriter(config)

        elif output_choice == 'both':
            writers = [ResourceFileWriter(config), PrometheusWriter(config)]
            LOG.info("Created resource and Prometheus writers for MultiWriter")
            return MultiWriter(writers)

        else:
            LOG.error(f"Unknown output format: {output_choice}")
            raise ValueError(f"Unsupported output format: {output_choice}")
