#!/usr/bin/env python3
"""
Prompt Exporter - Structure Repairer

Best-effort normalization of a record that failed validation, so it can be
displayed and exported. Works in place on a safe_copy() snapshot, never on
the host's live object. chatLog is deliberately left untouched.
"""

from typing import Any

from .validator import SECTION_FIELDS, empty_section, section_problems

_SUBFIELD_DEFAULTS = {
    "text": list,
    "additionalChatLog": list,
    "extension": dict,
}


def repair(record: Any) -> Any:
    """Fill in default sections/sub-fields. Idempotent; always succeeds."""
    if not isinstance(record, dict):
        return record

    for name in SECTION_FIELDS:
        problems = section_problems(record.get(name))
        if problems == ["*"]:
            record[name] = empty_section()
            continue
        for sub in problems:
            record[name][sub] = _SUBFIELD_DEFAULTS[sub]()

    return record
