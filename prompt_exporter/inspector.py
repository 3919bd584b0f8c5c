#!/usr/bin/env python3
"""Debug-mode description of a prompt record's sections."""

import json
from typing import Any, Dict, List

from .safe_copy import encode_node
from .validator import OPTIONAL_SECTION_MAPS, SECTION_FIELDS

_SAMPLE_LIMIT = 200


def describe_section(section: Any, path: str) -> List[str]:
    """Lines describing one section's text/additionalChatLog/extension."""
    if section is None:
        return [f"{path} is empty or undefined"]
    if not isinstance(section, dict):
        return [f"{path} is not an object but {type(section).__name__}"]

    keys = list(section.keys())
    lines = [f"{path} has {len(keys)} keys: {', '.join(keys)}"]

    text = section.get("text")
    if text is not None:
        if isinstance(text, list):
            lines.append(f"{path}.text is a list, length {len(text)}")
            if text:
                lines.append(f"{path}.text[0] sample: {_sample(text[0])}")
        else:
            lines.append(f"{path}.text is not a list")

    chat_log = section.get("additionalChatLog")
    if chat_log is not None:
        if isinstance(chat_log, list):
            lines.append(f"{path}.additionalChatLog is a list, length {len(chat_log)}")
        else:
            lines.append(f"{path}.additionalChatLog is not a list")

    extension = section.get("extension")
    if extension is not None:
        if isinstance(extension, dict):
            lines.append(f"{path}.extension is an object with {len(extension)} keys")
        else:
            lines.append(f"{path}.extension is not an object")

    return lines


def describe_record(record: Any) -> List[str]:
    """Lines describing the whole record, optional section maps included."""
    if not isinstance(record, dict):
        return [f"Record is not an object but {type(record).__name__}"]

    lines = [f"Record keys: {', '.join(str(k) for k in record.keys())}"]
    for name in SECTION_FIELDS:
        lines.extend(describe_section(record.get(name), name))

    for map_name in OPTIONAL_SECTION_MAPS:
        sections = record.get(map_name)
        if not isinstance(sections, dict):
            continue
        lines.append(f"{map_name} has {len(sections)} entries: {', '.join(sections.keys())}")
        for key, section in sections.items():
            lines.extend(describe_section(section, f"{map_name}.{key}"))

    return lines


def section_counts(record: Any) -> Dict[str, Dict[str, int]]:
    """Per-section entry counts, for summaries. Malformed fields count as 0."""
    counts = {}
    if not isinstance(record, dict):
        return counts

    named = [(name, record.get(name)) for name in SECTION_FIELDS]
    for map_name in OPTIONAL_SECTION_MAPS:
        sections = record.get(map_name)
        if isinstance(sections, dict):
            named.extend((f"{map_name}.{key}", value) for key, value in sections.items())

    for name, section in named:
        section = section if isinstance(section, dict) else {}
        counts[name] = {
            "text": _length(section.get("text")),
            "additionalChatLog": _length(section.get("additionalChatLog")),
            "extension": _length(section.get("extension")),
        }
    return counts


def _length(value: Any) -> int:
    return len(value) if isinstance(value, (list, dict)) else 0


def _sample(value: Any) -> str:
    try:
        text = json.dumps(value, ensure_ascii=False, default=encode_node)
    except (TypeError, ValueError):
        text = repr(value)
    if len(text) > _SAMPLE_LIMIT:
        text = text[:_SAMPLE_LIMIT] + "..."
    return text
