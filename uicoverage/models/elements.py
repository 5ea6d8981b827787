"""Element and selector data structures shared by the filter, matcher and aggregator."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SelectorKind(str, Enum):
    CSS = "css"
    XPATH = "xpath"
    TEXT = "text"
    ROLE = "role"
    TEST_ID = "test-id"
    ALT_TEXT = "alt-text"
    PLACEHOLDER = "placeholder"
    LABEL = "label"


class ElementType(str, Enum):
    """Known element classifications. Discovery may report others."""
    BUTTON = "button"
    INPUT = "input"
    SELECT = "select"
    TEXTAREA = "textarea"
    LINK = "link"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    SPAN = "span"
    DIV = "div"
    INTERACTIVE_ELEMENT = "interactive-element"
    CLICKABLE_ELEMENT = "clickable-element"


ALL_ELEMENT_TYPES: list[str] = [t.value for t in ElementType]


class TestSelector(BaseModel):
    """A selector referenced by test source code."""
    model_config = ConfigDict(frozen=True)

    raw: str
    normalized: str
    kind: SelectorKind = SelectorKind.CSS
    file_path: str = ""
    line_number: int = 0
    context: str = ""


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class PageElement(BaseModel):
    """Immutable snapshot of one interactive element discovered on a page."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    selector: str
    type: str = ElementType.INTERACTIVE_ELEMENT.value
    text: Optional[str] = None
    id: Optional[str] = None
    class_name: Optional[str] = Field(default=None, alias="class")
    classes: list[str] = Field(default_factory=list)
    attributes: dict[str, str] = Field(default_factory=dict)
    role: Optional[str] = None
    accessible_name: Optional[str] = Field(default=None, alias="accessibleName")
    placeholder: Optional[str] = None
    tag_name: Optional[str] = Field(default=None, alias="tagName")
    selectors: list[str] = Field(default_factory=list)
    visibility: float = 1.0
    disabled: bool = False
    bounding_box: Optional[BoundingBox] = Field(default=None, alias="boundingBox")
    page_url: str = Field(default="", alias="pageUrl")
    discovery_context: str = Field(default="", alias="discoveryContext")
    discovery_source: str = Field(default="", alias="discoverySource")

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v):
        if isinstance(v, ElementType):
            return v.value
        return v

    @field_validator("visibility")
    @classmethod
    def check_visibility_range(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"visibility must be within [0, 1], got {v}")
        return v

    def attribute(self, name: str) -> Optional[str]:
        """Look up an attribute from the explicit attribute map or the typed fields."""
        if name in self.attributes:
            return self.attributes[name]
        if name == "id":
            return self.id
        if name == "class":
            if self.class_name is not None:
                return self.class_name
            return " ".join(self.classes) if self.classes else None
        if name == "role":
            return self.role
        if name == "type":
            return self.type
        if name == "placeholder":
            return self.placeholder
        return None

    def class_list(self) -> list[str]:
        if self.classes:
            return list(self.classes)
        if self.class_name:
            return self.class_name.split()
        return []

    def candidate_selectors(self) -> list[str]:
        return [self.selector, *self.selectors]

    def is_marked_hidden(self) -> bool:
        """True when the element carries an explicit hidden marker."""
        if "hidden" in self.attributes:
            return True
        return self.attributes.get("aria-hidden", "").lower() == "true"

    def describe(self) -> str:
        parts = []
        if self.text:
            parts.append(f'"{self.text[:50]}"')
        if self.role:
            parts.append(f"[{self.role}]")
        if self.type:
            parts.append(f"({self.type})")
        if self.visibility <= 0:
            parts.append("hidden")
        if self.disabled:
            parts.append("disabled")
        return " ".join(parts) or self.selector
