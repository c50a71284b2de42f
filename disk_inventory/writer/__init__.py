"""Writer module for exported disk resources.

Provides writer implementations for different output formats.
"""

from .base import Writer
from .factory import WriterFactory
from .resource_writer import ResourceFileWriter
from .prometheus_writer import PrometheusWriter
from .multi_writer import MultiWriter

__all__ = ['Writer', 'WriterFactory', 'ResourceFileWriter', 'PrometheusWriter', 'MultiWriter']
