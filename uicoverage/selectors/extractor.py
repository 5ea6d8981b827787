"""Static selector extraction from Playwright test sources."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from pydantic import BaseModel, Field

from uicoverage.models.elements import TestSelector
from uicoverage.selectors.normalizer import normalize

logger = logging.getLogger(__name__)

_Q = r"""(['"`])(.+?)\1"""

# Locator-API calls rewritten into prefixed selector strings.
_LOCATOR_API_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"\b(?:getByTestId|get_by_test_id)\(\s*" + _Q), "data-testid="),
    (re.compile(r"\b(?:getByText|get_by_text)\(\s*" + _Q), "text="),
    (re.compile(r"\b(?:getByRole|get_by_role)\(\s*" + _Q), "role="),
    (re.compile(r"\b(?:getByLabel|get_by_label)\(\s*" + _Q), "label="),
    (re.compile(r"\b(?:getByPlaceholder|get_by_placeholder)\(\s*" + _Q), "placeholder="),
    (re.compile(r"\b(?:getByAltText|get_by_alt_text)\(\s*" + _Q), "alt="),
]

# Calls whose first argument is already a selector string.
_RAW_SELECTOR_PATTERNS: list[re.Pattern] = [
    re.compile(r"\.locator\(\s*" + _Q),
    re.compile(
        r"\bpage\.(?:click|dblclick|fill|type|press|check|uncheck|hover|focus|tap|"
        r"selectOption|select_option|waitForSelector|wait_for_selector)\(\s*" + _Q
    ),
]

_IGNORED = [
    re.compile(r"^https?://"),
    re.compile(r"^about:blank"),
    re.compile(r"^data:"),
    re.compile(r"^javascript:"),
    re.compile(r"^\s*$"),
    re.compile(r"^[{}\[\]()]+$"),
]

TEST_FILE_SUFFIXES = (
    ".spec.ts", ".test.ts", ".e2e.ts", ".spec.js", ".test.js", ".e2e.js",
)
SKIPPED_DIRS = {"node_modules", "dist", ".git", "__pycache__"}


class ExtractionResult(BaseModel):
    selectors: list[TestSelector] = Field(default_factory=list)
    files: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


def is_test_file(path: str | Path) -> bool:
    name = Path(path).name
    if name.endswith(TEST_FILE_SUFFIXES):
        return True
    return name.endswith(".py") and (name.startswith("test_") or name.endswith("_test.py"))


def _is_ignored(selector: str) -> bool:
    return any(p.search(selector) for p in _IGNORED)


def _context(line: str, index: int) -> str:
    return line[max(0, index - 20):index + 50].strip()


def extract_selectors_from_source(source: str, file_path: str = "") -> list[TestSelector]:
    """Extract selectors from test source text, one line at a time."""
    found: list[TestSelector] = []
    seen: set[tuple[str, str]] = set()

    for line_number, line in enumerate(source.splitlines(), start=1):
        hits: list[tuple[int, str]] = []
        for pattern, prefix in _LOCATOR_API_PATTERNS:
            for m in pattern.finditer(line):
                hits.append((m.start(), prefix + m.group(2)))
        for pattern in _RAW_SELECTOR_PATTERNS:
            for m in pattern.finditer(line):
                hits.append((m.start(), m.group(2)))

        for index, raw in sorted(hits):
            if _is_ignored(raw):
                continue
            sel = normalize(raw, file_path=file_path, line_number=line_number,
                            context=_context(line, index))
            key = (sel.normalized, sel.kind.value)
            if key in seen:
                continue
            seen.add(key)
            found.append(sel)

    return found


def find_test_files(patterns: list[str], root: str | Path = ".") -> list[Path]:
    """Resolve glob patterns to test files, skipping vendored directories."""
    root = Path(root)
    files: dict[str, Path] = {}
    for pattern in patterns:
        for path in sorted(root.glob(pattern)):
            if not path.is_file() or SKIPPED_DIRS.intersection(path.parts):
                continue
            if is_test_file(path):
                files.setdefault(str(path), path)
    return list(files.values())


def extract_selectors(paths: list[str | Path]) -> ExtractionResult:
    """Extract selectors from a list of test files. Unreadable files are recorded, not raised."""
    result = ExtractionResult()
    for path in paths:
        path = Path(path)
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read test file %s: %s", path, e)
            result.errors.append(f"Failed to analyze {path}: {e}")
            continue
        selectors = extract_selectors_from_source(source, file_path=str(path))
        logger.debug("Extracted %d selectors from %s", len(selectors), path)
        result.selectors.extend(selectors)
        result.files.append(str(path))
    return result
