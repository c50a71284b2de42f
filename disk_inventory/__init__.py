"""Node disk inventory.

Correlates facts reported by independent disk probes into one record per
physical disk and exports each record as a Disk resource.
"""

__version__ = '0.1.0'
