#!/usr/bin/env python3
"""
Prompt Exporter - Structure Validator

Checks a captured prompt record against the shape the exporter expects:

    {
        "charSection":  {"text": [...], "additionalChatLog": [...], "extension": {...}},
        "userSection":  {...same...},
        "worldSection": {...same...},
        "chatLog": [...]
    }
"""

from dataclasses import dataclass, field
from typing import Any, List

SECTION_FIELDS = ("charSection", "userSection", "worldSection")
CHAT_LOG_FIELD = "chatLog"
REQUIRED_FIELDS = SECTION_FIELDS + (CHAT_LOG_FIELD,)
OPTIONAL_SECTION_MAPS = ("pluginSections", "otherCharacterSections")

# Whole-record failure marker used in ValidationResult.missing
ALL_FIELDS = "all"


@dataclass
class ValidationResult:
    """Outcome of validate(): ok flag, missing/malformed fields, log details."""
    ok: bool = True
    missing: List[str] = field(default_factory=list)
    details: List[str] = field(default_factory=list)

    def _fail(self, name: str, detail: str) -> None:
        self.ok = False
        self._note(name, detail)

    def _note(self, name: str, detail: str) -> None:
        self.missing.append(name)
        self.details.append(detail)


def empty_section() -> dict:
    """A well-formed section with no content."""
    return {"text": [], "additionalChatLog": [], "extension": {}}


def section_problems(section: Any) -> List[str]:
    """Names of malformed sub-fields of one section; ["*"] if it is not a dict."""
    if not isinstance(section, dict):
        return ["*"]
    problems = []
    if not isinstance(section.get("text"), list):
        problems.append("text")
    if not isinstance(section.get("additionalChatLog"), list):
        problems.append("additionalChatLog")
    if not isinstance(section.get("extension"), dict):
        problems.append("extension")
    return problems


def validate(record: Any) -> ValidationResult:
    """Validate a prompt record. Pure: never mutates or raises."""
    result = ValidationResult()

    if not isinstance(record, dict):
        result._fail(ALL_FIELDS, f"Record is not an object (got {type(record).__name__})")
        return result

    for name in SECTION_FIELDS:
        if name not in record:
            result._fail(name, f"Missing required field: {name}")
    # An absent chatLog is reported but tolerated: it reads as an empty log
    if CHAT_LOG_FIELD not in record:
        result._note(CHAT_LOG_FIELD, f"Missing required field: {CHAT_LOG_FIELD}")

    for name in SECTION_FIELDS:
        if name not in record:
            continue
        problems = section_problems(record[name])
        if problems == ["*"]:
            result._fail(name, f"{name} is not an object")
            continue
        for sub in problems:
            expected = "an object" if sub == "extension" else "a list"
            result._fail(f"{name}.{sub}", f"{name}.{sub} is not {expected}")

    return result
