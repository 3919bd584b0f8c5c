"""
Prompt Exporter - Capture and export assembled chat prompt structures.

Observes a host's "prompt ready" records, snapshots them safely, repairs
their shape when needed and exports them as JSON files for inspection.
"""

__version__ = "0.1.0"
