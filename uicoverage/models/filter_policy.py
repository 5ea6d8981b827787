"""Element filter policy models and filtering results."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from uicoverage.models.elements import ALL_ELEMENT_TYPES, ElementType, PageElement

_FLAG_BITS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}


class TextPattern(BaseModel):
    """A user-supplied regular expression, compiled once.

    An invalid pattern is kept as-is so validation can report it; at match
    time it simply matches nothing.
    """
    pattern: str
    flags: str = ""

    _compiled: Optional[re.Pattern] = PrivateAttr(default=None)
    _error: Optional[str] = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        bits = 0
        for ch in self.flags:
            if ch not in _FLAG_BITS:
                self._error = f"unknown regex flag '{ch}'"
                return
            bits |= _FLAG_BITS[ch]
        try:
            self._compiled = re.compile(self.pattern, bits)
        except re.error as e:
            self._error = str(e)

    @classmethod
    def coerce(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"pattern": value}
        if isinstance(value, re.Pattern):
            flags = "".join(ch for ch, bit in _FLAG_BITS.items() if value.flags & bit)
            return {"pattern": value.pattern, "flags": flags}
        return value

    @property
    def is_valid(self) -> bool:
        return self._compiled is not None

    @property
    def error(self) -> Optional[str]:
        return self._error

    def matches(self, text: str) -> bool:
        if self._compiled is None:
            return False
        return self._compiled.search(text) is not None


class AttributeFilter(BaseModel):
    name: str
    exists: Optional[bool] = None
    value: Optional[str] = None
    pattern: Optional[TextPattern] = None

    @field_validator("pattern", mode="before")
    @classmethod
    def coerce_pattern(cls, v):
        return TextPattern.coerce(v) if v is not None else v


class SizeThreshold(BaseModel):
    width: float = 1
    height: float = 1


class ViewportSize(BaseModel):
    width: int = 1920
    height: int = 1080


class FilterPolicy(BaseModel):
    """Named filtering options. Range problems are reported by validation, not here."""
    include_types: list[str] = Field(default_factory=lambda: list(ALL_ELEMENT_TYPES))
    exclude_types: list[str] = Field(default_factory=list)
    include_selectors: list[str] = Field(default_factory=list)
    exclude_selectors: list[str] = Field(default_factory=list)
    include_attributes: list[AttributeFilter] = Field(default_factory=list)
    exclude_attributes: list[AttributeFilter] = Field(default_factory=list)
    include_text_patterns: list[TextPattern] = Field(default_factory=list)
    exclude_text_patterns: list[TextPattern] = Field(default_factory=list)
    min_visibility: float = 0.1
    min_size: SizeThreshold = Field(default_factory=SizeThreshold)
    include_hidden: bool = False
    include_disabled: bool = True
    include_outside_viewport: bool = True
    viewport: ViewportSize = Field(default_factory=ViewportSize)
    custom_filter: Optional[Callable[[PageElement], bool]] = Field(default=None, exclude=True)

    @field_validator("include_types", "exclude_types", mode="before")
    @classmethod
    def coerce_types(cls, v):
        if isinstance(v, (list, tuple)):
            return [t.value if isinstance(t, ElementType) else t for t in v]
        return v

    @field_validator("include_text_patterns", "exclude_text_patterns", mode="before")
    @classmethod
    def coerce_patterns(cls, v):
        if isinstance(v, (list, tuple)):
            return [TextPattern.coerce(p) for p in v]
        return v


class ExclusionKind(str, Enum):
    TYPE_NOT_INCLUDED = "type_not_included"
    TYPE_EXCLUDED = "type_excluded"
    NO_MATCHING_INCLUDE_SELECTOR = "no_matching_include_selector"
    MATCHES_EXCLUDE_SELECTOR = "matches_exclude_selector"
    NO_MATCHING_INCLUDE_ATTRIBUTES = "no_matching_include_attributes"
    MATCHES_EXCLUDE_ATTRIBUTES = "matches_exclude_attributes"
    NO_MATCHING_INCLUDE_TEXT_PATTERN = "no_matching_include_text_pattern"
    MATCHES_EXCLUDE_TEXT_PATTERN = "matches_exclude_text_pattern"
    INSUFFICIENT_VISIBILITY = "insufficient_visibility"
    ELEMENT_DISABLED = "element_disabled"
    INSUFFICIENT_SIZE = "insufficient_size"
    OUTSIDE_VIEWPORT = "outside_viewport"
    CUSTOM_FILTER_EXCLUDED = "custom_filter_excluded"


class ExclusionReason(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ExclusionKind
    detail: str = ""

    def key(self) -> str:
        """Render the reason the way reports show it, e.g. ``insufficient_size: 80x30``."""
        if self.detail:
            return f"{self.kind.value}: {self.detail}"
        return self.kind.value


class FilteringResult(BaseModel):
    elements: list[PageElement] = Field(default_factory=list)
    total_elements: int = 0
    included_elements: int = 0
    excluded_elements: int = 0
    exclusion_reasons: dict[str, int] = Field(default_factory=dict)
    exclusions: list[tuple[int, ExclusionReason]] = Field(default_factory=list)


class FilterValidation(BaseModel):
    valid: bool = True
    errors: list[str] = Field(default_factory=list)
