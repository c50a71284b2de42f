"""
Resource file writer.

Writes every exported Disk as a YAML or JSON document, either as one file per
disk in an output directory or as a document stream on stdout. On a stream,
YAML documents each open with '---' and JSON documents go one per line, so
the output of successive iterations can be read back document by document.
"""

import json
import logging
import os
import sys
from typing import Any, Dict, IO, List, Optional, Set

import yaml

from .base import Writer, DiskExport
from ..schema.models import Disk, Partition

# Initialize logger
LOG = logging.getLogger(__name__)

RESOURCE_FORMATS = ('yaml', 'json')


def build_document(disk: Disk, partitions: List[Partition]) -> Dict[str, Any]:
    """Serialized disk with its partitions listed next to spec, not inside it"""
    document = disk.to_dict()
    document['partitions'] = [partition.to_dict() for partition in partitions]
    return document


class ResourceFileWriter(Writer):
    """
    Writer producing Disk resource documents.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, stream: Optional[IO[str]] = None):
        """
        Initialize the resource writer.

        Args:
            config: Optional configuration dictionary (output_dir, resource_format)
            stream: Stream used when no output_dir is configured (default stdout)
        """
        config = config or {}
        self.output_dir = config.get('output_dir')
        self.resource_format = config.get('resource_format', 'yaml')
        if self.resource_format not in RESOURCE_FORMATS:
            raise ValueError(f"Unsupported resource format: {self.resource_format}")
        self.stream = stream
        self.prune = config.get('prune', True)

        # Files written by the previous call, removed once their disk is gone
        self._written_files: Set[str] = set()

        if self.output_dir:
            os.makedirs(self.output_dir, exist_ok=True)
            LOG.info(f"Resource writer initialized -> {self.output_dir} ({self.resource_format})")
        else:
            LOG.info(f"Resource writer initialized -> stdout ({self.resource_format})")

    @property
    def extension(self) -> str:
        return '.json' if self.resource_format == 'json' else '.yaml'

    def _dump_stream(self, documents: List[Dict[str, Any]], handle: IO[str]) -> None:
        """Every document is self-delimiting so successive writes stay separable"""
        if self.resource_format == 'json':
            # one object per line
            for document in documents:
                handle.write(json.dumps(document))
                handle.write('\n')
        else:
            yaml.safe_dump_all(documents, handle, explicit_start=True,
                               default_flow_style=False, sort_keys=False)

    def _dump_file(self, document: Dict[str, Any], handle: IO[str]) -> None:
        if self.resource_format == 'json':
            json.dump(document, handle, indent=2)
            handle.write('\n')
        else:
            yaml.safe_dump(document, handle, default_flow_style=False, sort_keys=False)

    def write(self, exports: List[DiskExport], loop_iteration: int = 1) -> bool:
        documents = [build_document(disk, partitions) for disk, partitions in exports]

        if not self.output_dir:
            try:
                self._dump_stream(documents, self.stream or sys.stdout)
            except (OSError, yaml.YAMLError) as e:
                LOG.error(f"Failed to write resources to stream: {e}", exc_info=True)
                return False
            LOG.debug(f"Iteration {loop_iteration}: wrote {len(documents)} resources to stream")
            return True

        written: Set[str] = set()
        success = True
        for document in documents:
            name = document.get('metadata', {}).get('name')
            if not name:
                LOG.warning("Skipping resource without a name")
                continue
            filepath = os.path.join(self.output_dir, f"{name}{self.extension}")
            try:
                with open(filepath, 'w', encoding='utf-8') as handle:
                    self._dump_file(document, handle)
                written.add(filepath)
            except (OSError, yaml.YAMLError) as e:
                LOG.error(f"Failed to write {filepath}: {e}", exc_info=True)
                success = False

        if self.prune:
            for stale in sorted(self._written_files - written):
                try:
                    os.remove(stale)
                    LOG.info(f"Removed resource file of departed disk: {stale}")
                except FileNotFoundError:
                    pass
                except OSError as e:
                    LOG.warning(f"Could not remove {stale}: {e}")
        self._written_files = written

        LOG.info(f"Iteration {loop_iteration}: wrote {len(written)} resource files to {self.output_dir}")
        return success

    def __str__(self) -> str:
        return f"ResourceFileWriter({self.output_dir or 'stdout'}, {self.resource_format})"
