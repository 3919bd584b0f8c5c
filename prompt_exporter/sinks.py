#!/usr/bin/env python3
"""
Prompt Exporter - Artifact Sinks

Destinations for exported artifacts. A sink is any object with

    deliver(name: str, payload: bytes) -> str

returning where the artifact ended up. Raising from deliver() is reported by
the exporter as a sink error.
"""

import os
import tempfile
from pathlib import Path
from typing import Dict, Protocol, Union


class ArtifactSink(Protocol):
    def deliver(self, name: str, payload: bytes) -> str:
        ...


class SinkError(Exception):
    """Artifact could not be delivered."""


def atomic_write_bytes(filepath: Path, payload: bytes) -> None:
    """Write bytes to file atomically to prevent partial artifacts."""
    temp_file = None
    try:
        with tempfile.NamedTemporaryFile(
            mode='wb',
            dir=filepath.parent,
            prefix='.',
            suffix='.tmp',
            delete=False
        ) as f:
            temp_file = f.name
            f.write(payload)
        os.replace(temp_file, filepath)
    except Exception:
        # Temp file is gone once os.replace succeeds
        if temp_file is not None and os.path.exists(temp_file):
            os.unlink(temp_file)
        raise


class DirectorySink:
    """Writes each artifact as a file in a directory (created on demand)."""

    def __init__(self, directory: Union[str, Path]):
        """
        Initialize sink for an export directory.

        Args:
            directory: Target directory; "~" is expanded, missing parents are created
        """
        self.directory = Path(directory).expanduser()

    def deliver(self, name: str, payload: bytes) -> str:
        """
        Write one artifact atomically.

        Args:
            name: Plain file name of the artifact (no directory parts)
            payload: Serialized artifact bytes

        Returns:
            Path of the written file

        Raises:
            SinkError: If the name is not a plain file name or the write fails
        """
        if Path(name).name != name:
            raise SinkError(f"Artifact name must be a plain file name: {name!r}")
        target = self.directory / name
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            atomic_write_bytes(target, payload)
        except OSError as e:
            raise SinkError(f"Cannot write {target}: {e}") from e
        return str(target)


class MemorySink:
    """Keeps artifacts in memory, keyed by name. For embedding hosts and tests."""

    def __init__(self) -> None:
        self.artifacts: Dict[str, bytes] = {}

    def deliver(self, name: str, payload: bytes) -> str:
        self.artifacts[name] = payload
        return f"memory:{name}"
