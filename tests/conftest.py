"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from playwright.async_api import Page

from uicoverage.models.config import CoverageConfig
from uicoverage.models.elements import BoundingBox, PageElement, SelectorKind, TestSelector
from uicoverage.selectors.normalizer import normalize


# ============================================================================
# Element Fixtures
# ============================================================================


@pytest.fixture
def submit_button() -> PageElement:
    """A visible 80x30 submit button with a test id."""
    return PageElement(
        selector='[data-testid="submit-btn"]',
        type="button",
        text="Submit",
        id="submit",
        class_name="btn btn-primary",
        role="button",
        accessible_name="Submit",
        tag_name="button",
        selectors=["#submit", "button.btn.btn-primary"],
        attributes={"data-testid": "submit-btn", "type": "submit"},
        visibility=1.0,
        bounding_box=BoundingBox(x=100, y=200, width=80, height=30),
        page_url="https://example.com/login",
    )


@pytest.fixture
def email_input() -> PageElement:
    """A visible 200x20 email input."""
    return PageElement(
        selector="#email",
        type="input",
        id="email",
        placeholder="Enter your email",
        accessible_name="Email address",
        tag_name="input",
        selectors=['input[name="email"]', '[placeholder="Enter your email"]'],
        attributes={"name": "email", "type": "email", "placeholder": "Enter your email"},
        visibility=1.0,
        bounding_box=BoundingBox(x=100, y=100, width=200, height=20),
        page_url="https://example.com/login",
    )


@pytest.fixture
def forgot_link() -> PageElement:
    """A link partly below the fold."""
    return PageElement(
        selector="a.forgot-password",
        type="link",
        text="Forgot password?",
        class_name="forgot-password",
        role="link",
        tag_name="a",
        attributes={"href": "/reset"},
        visibility=0.9,
        bounding_box=BoundingBox(x=100, y=1070, width=120, height=20),
        page_url="https://example.com/login",
    )


@pytest.fixture
def hidden_menu() -> PageElement:
    """A menu button with aria-hidden that is still fully opaque."""
    return PageElement(
        selector='[aria-label="Open menu"]',
        type="button",
        role="button",
        accessible_name="Open menu",
        attributes={"aria-hidden": "true", "aria-label": "Open menu"},
        visibility=1.0,
        bounding_box=BoundingBox(x=10, y=10, width=40, height=40),
    )


@pytest.fixture
def disabled_save() -> PageElement:
    """A disabled save button."""
    return PageElement(
        selector="button.save",
        type="button",
        text="Save",
        class_name="save",
        role="button",
        tag_name="button",
        disabled=True,
        visibility=1.0,
        bounding_box=BoundingBox(x=300, y=400, width=90, height=32),
    )


@pytest.fixture
def faded_banner() -> PageElement:
    """A barely visible clickable div."""
    return PageElement(
        selector="div.promo",
        type="clickable-element",
        text="Limited offer",
        class_name="promo",
        visibility=0.05,
        bounding_box=BoundingBox(x=0, y=0, width=300, height=50),
    )


@pytest.fixture
def login_elements(submit_button, email_input, forgot_link, hidden_menu, disabled_save, faded_banner):
    """All login page fixture elements, in a fixed order."""
    return [submit_button, email_input, forgot_link, hidden_menu, disabled_save, faded_banner]


# ============================================================================
# Selector Fixtures
# ============================================================================


@pytest.fixture
def css_selector() -> TestSelector:
    return normalize("#email", file_path="tests/login.spec.ts", line_number=4)


@pytest.fixture
def test_id_selector() -> TestSelector:
    return normalize('[data-testid="submit-btn"]', file_path="tests/login.spec.ts", line_number=6)


@pytest.fixture
def text_selector() -> TestSelector:
    return TestSelector(raw="text=Forgot password?", normalized="Forgot password?",
                        kind=SelectorKind.TEXT, file_path="tests/login.spec.ts", line_number=9)


@pytest.fixture
def role_selector() -> TestSelector:
    return normalize("role=navigation", file_path="tests/nav.spec.ts", line_number=3)


# ============================================================================
# Test Source Fixtures
# ============================================================================


LOGIN_SPEC = """import { test, expect } from '@playwright/test';

test('user can log in', async ({ page }) => {
  await page.goto('https://example.com/login');
  await page.fill('#email', 'user@example.com');
  await page.getByPlaceholder('Enter your email').focus();
  await page.click('[data-testid="submit-btn"]');
  await expect(page.getByText('Welcome back')).toBeVisible();
});
"""

NAV_TEST_PY = """from playwright.sync_api import Page


def test_forgot_password(page: Page):
    page.goto("https://example.com/login")
    page.get_by_text("Forgot password?").click()
    page.locator("a.forgot-password").hover()
"""


@pytest.fixture
def login_spec_source() -> str:
    return LOGIN_SPEC


@pytest.fixture
def test_project(tmp_path: Path) -> Path:
    """A small project tree with one TypeScript test file and one pytest file."""
    tests_dir = tmp_path / "tests"
    tests_dir.mkdir()
    (tests_dir / "login.spec.ts").write_text(LOGIN_SPEC)
    (tests_dir / "test_nav.py").write_text(NAV_TEST_PY)
    (tests_dir / "helpers.ts").write_text("export const x = 1;\n")
    vendored = tmp_path / "node_modules" / "pkg"
    vendored.mkdir(parents=True)
    (vendored / "ignored.spec.ts").write_text("await page.click('#nope');\n")
    return tmp_path


@pytest.fixture
def snapshot_file(tmp_path: Path, login_elements) -> Path:
    """An element snapshot for the login page."""
    path = tmp_path / "login-elements.json"
    data = {
        "url": "https://example.com/login",
        "elements": [el.model_dump(mode="json", by_alias=True) for el in login_elements],
    }
    path.write_text(json.dumps(data))
    return path


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def coverage_config(tmp_path: Path) -> CoverageConfig:
    """A run config writing JSON reports into a temp dir."""
    return CoverageConfig(
        test_patterns=["tests/**/*.spec.ts", "tests/**/test_*.py"],
        threshold=50,
        report_formats=["json"],
        output_path=str(tmp_path / "coverage-report"),
    )


# ============================================================================
# Browser Fixtures
# ============================================================================


@pytest.fixture
def mock_page() -> AsyncMock:
    """A mocked Playwright page."""
    page = AsyncMock(spec=Page)
    page.url = "https://example.com/login"
    return page
