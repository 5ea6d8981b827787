"""Selector normalization — classifies raw test selectors into comparable form."""

from __future__ import annotations

import re

from uicoverage.models.elements import SelectorKind, TestSelector

_BRACKET_TEST_ID = re.compile(r"^\[\s*data-testid\s*=\s*(.*?)\s*\]$", re.DOTALL)

# Checked in order; the first matching prefix wins.
_PREFIXES: list[tuple[str, SelectorKind]] = [
    ("data-testid=", SelectorKind.TEST_ID),
    ("text=", SelectorKind.TEXT),
    ("role=", SelectorKind.ROLE),
    ("placeholder=", SelectorKind.PLACEHOLDER),
    ("label=", SelectorKind.LABEL),
    ("alt=", SelectorKind.ALT_TEXT),
    ("xpath=", SelectorKind.XPATH),
]


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"', "`"):
        return value[1:-1].strip()
    return value


def classify(raw: str) -> tuple[SelectorKind, str]:
    """Return ``(kind, normalized)`` for a raw selector string. Never fails."""
    stripped = raw.strip()

    bracket = _BRACKET_TEST_ID.match(stripped)
    if bracket:
        return SelectorKind.TEST_ID, _unquote(bracket.group(1))

    for prefix, kind in _PREFIXES:
        if stripped.startswith(prefix):
            value = _unquote(stripped[len(prefix):])
            if kind is SelectorKind.ROLE and value.startswith("role="):
                value = _unquote(value[len("role="):])
            return kind, value

    if stripped.startswith("/"):
        return SelectorKind.XPATH, stripped

    return SelectorKind.CSS, raw


def normalize(raw: str, file_path: str = "", line_number: int = 0, context: str = "") -> TestSelector:
    """Build a TestSelector from a raw selector as written in test code."""
    kind, normalized = classify(raw)
    return TestSelector(
        raw=raw,
        normalized=normalized,
        kind=kind,
        file_path=file_path,
        line_number=line_number,
        context=context,
    )
