#!/usr/bin/env python3
"""
Prompt Exporter - Safe Copy

Produces a JSON-serializable snapshot of an arbitrary in-memory value.

Plain values (None, bool, int, float, str), str-keyed dicts and lists are
copied as plain Python data (NaN and infinities become None). Everything JSON cannot express directly becomes
a tagged snapshot node:

    MappingNode   - non-dict mappings, or dicts with non-str keys
    SetNode       - set / frozenset
    PatternNode   - compiled regular expressions
    MomentNode    - datetime / date / time
    CallableNode  - functions, methods, classes, other callables
    FailureNode   - exception instances
    CircularRef   - a container already on the current traversal path

Nodes serialize through encode_node(), which json.dumps accepts as `default`.
The snapshot is lossy on purpose: cycles are cut, not reconstructed.
"""

import math
import re
import traceback
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, ClassVar, List, Set, Tuple

CIRCULAR_PLACEHOLDER = "[circular reference]"
ANONYMOUS_CALLABLE = "anonymous"
COPY_FAILED_MARKER = "unable to copy value safely"

_PRIMITIVES = (type(None), bool, int, float, str)

# Inline flag letters, in the order Python prints them in (?aiLmsux)
_PATTERN_FLAGS = (
    (re.ASCII, "a"),
    (re.IGNORECASE, "i"),
    (re.LOCALE, "L"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
    (re.VERBOSE, "x"),
)


class SnapshotKind(Enum):
    """Every shape a copied value can take."""
    PLAIN = "Plain"
    MAPPING = "Map"
    SET_LIKE = "Set"
    PATTERN = "RegExp"
    MOMENT = "Date"
    CALLABLE = "Function"
    FAILURE = "Error"
    CIRCULAR_REF = "Circular"


@dataclass(frozen=True)
class MappingNode:
    entries: Tuple[Tuple[Any, Any], ...]
    kind: ClassVar[SnapshotKind] = SnapshotKind.MAPPING

    def to_json(self) -> dict:
        return {"__type": self.kind.value, "data": [[k, v] for k, v in self.entries]}


@dataclass(frozen=True)
class SetNode:
    members: Tuple[Any, ...]
    kind: ClassVar[SnapshotKind] = SnapshotKind.SET_LIKE

    def to_json(self) -> dict:
        return {"__type": self.kind.value, "data": list(self.members)}


@dataclass(frozen=True)
class PatternNode:
    source: str
    flags: str
    kind: ClassVar[SnapshotKind] = SnapshotKind.PATTERN

    def to_json(self) -> dict:
        return {"__type": self.kind.value, "source": self.source, "flags": self.flags}


@dataclass(frozen=True)
class MomentNode:
    iso: str
    kind: ClassVar[SnapshotKind] = SnapshotKind.MOMENT

    def to_json(self) -> dict:
        return {"__type": self.kind.value, "iso": self.iso}


@dataclass(frozen=True)
class CallableNode:
    name: str
    kind: ClassVar[SnapshotKind] = SnapshotKind.CALLABLE

    def to_json(self) -> dict:
        return {"__type": self.kind.value, "name": self.name}


@dataclass(frozen=True)
class FailureNode:
    message: str
    trace: str
    kind: ClassVar[SnapshotKind] = SnapshotKind.FAILURE

    def to_json(self) -> dict:
        return {"__type": self.kind.value, "message": self.message, "stack": self.trace}


@dataclass(frozen=True)
class CircularRef:
    placeholder: str = CIRCULAR_PLACEHOLDER
    kind: ClassVar[SnapshotKind] = SnapshotKind.CIRCULAR_REF

    def to_json(self) -> dict:
        return {"__type": self.kind.value, "id": self.placeholder}


SNAPSHOT_NODES = (
    MappingNode, SetNode, PatternNode, MomentNode,
    CallableNode, FailureNode, CircularRef,
)


def encode_node(value: Any) -> Any:
    """`default` hook for json.dumps: turns snapshot nodes into tagged objects."""
    if isinstance(value, SNAPSHOT_NODES):
        return value.to_json()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def safe_copy(value: Any) -> Any:
    """
    Copy a value into a JSON-serializable snapshot. Never raises.

    Falls back to a shallow copy of the top-level entries when the deep
    traversal fails, and to an error marker object when that fails too.
    """
    try:
        return _Copier().copy(value)
    except Exception as deep_error:
        try:
            return _shallow_copy(value)
        except Exception as shallow_error:
            return {"error": COPY_FAILED_MARKER, "message": f"{deep_error}; {shallow_error}"}


class _Copier:
    """Depth-first copier tracking the containers on the current path."""

    def __init__(self) -> None:
        self._path: Set[int] = set()

    def copy(self, value: Any) -> Any:
        if isinstance(value, _PRIMITIVES):
            return _primitive(value)
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8", errors="replace")
        if isinstance(value, (datetime, date, time)):
            return MomentNode(iso=_moment_iso(value))
        if isinstance(value, re.Pattern):
            return _copy_pattern(value)
        if isinstance(value, BaseException):
            return _copy_exception(value)
        if isinstance(value, (set, frozenset)):
            return self._enter(value, self._copy_set)
        if isinstance(value, Mapping):
            return self._enter(value, self._copy_mapping)
        if isinstance(value, (list, tuple)):
            return self._enter(value, self._copy_sequence)
        if callable(value):
            return CallableNode(name=_callable_name(value))
        if hasattr(value, "__dict__"):
            return self._enter(value, self._copy_attributes)
        return repr(value)

    def _enter(self, value: Any, copier) -> Any:
        marker = id(value)
        if marker in self._path:
            return CircularRef()
        self._path.add(marker)
        try:
            return copier(value)
        finally:
            self._path.discard(marker)

    def _copy_mapping(self, value: Mapping) -> Any:
        items = list(value.items())
        if isinstance(value, dict) and all(isinstance(k, str) for k, _ in items):
            return {k: self.copy(v) for k, v in items}
        return MappingNode(entries=tuple((self.copy(k), self.copy(v)) for k, v in items))

    def _copy_sequence(self, value) -> List[Any]:
        return [self.copy(item) for item in value]

    def _copy_set(self, value) -> SetNode:
        return SetNode(members=tuple(self.copy(item) for item in value))

    def _copy_attributes(self, value: Any) -> dict:
        return {
            k: self.copy(v)
            for k, v in vars(value).items()
            if not k.startswith("_")
        }


def _primitive(value: Any) -> Any:
    # NaN and infinities have no JSON form
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _moment_iso(value: Any) -> str:
    """ISO-8601 text; zone-aware datetimes are normalized to UTC with a Z suffix."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        utc = value.astimezone(timezone.utc).replace(tzinfo=None)
        return utc.isoformat(timespec="milliseconds") + "Z"
    return value.isoformat()


def _copy_pattern(pattern: "re.Pattern") -> PatternNode:
    source = pattern.pattern
    if isinstance(source, bytes):
        source = source.decode("utf-8", errors="replace")
    flags = "".join(letter for flag, letter in _PATTERN_FLAGS if pattern.flags & flag)
    return PatternNode(source=source, flags=flags)


def _copy_exception(error: BaseException) -> FailureNode:
    trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return FailureNode(message=str(error), trace=trace)


def _callable_name(value: Any) -> str:
    name = getattr(value, "__qualname__", None) or getattr(value, "__name__", None)
    if not isinstance(name, str) or not name or name == "<lambda>":
        return ANONYMOUS_CALLABLE
    return name


def _leaf(value: Any) -> Any:
    if isinstance(value, _PRIMITIVES):
        return _primitive(value)
    return f"[{type(value).__name__}]"


def _shallow_copy(value: Any) -> Any:
    """Own top-level entries only; nested values become type placeholders."""
    if isinstance(value, _PRIMITIVES):
        return _primitive(value)
    if isinstance(value, Mapping):
        return {str(k): _leaf(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_leaf(item) for item in value]
    if hasattr(value, "__dict__"):
        return {k: _leaf(v) for k, v in vars(value).items() if not k.startswith("_")}
    return repr(value)
