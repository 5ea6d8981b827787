"""DOM element discovery — catalogs interactive elements on live pages or snapshots."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from playwright.async_api import Page, async_playwright

from uicoverage.models.config import ViewportConfig
from uicoverage.models.elements import ElementType, PageElement

logger = logging.getLogger(__name__)

DISCOVERY_SCRIPT = """() => {
    const interactiveTags = new Set(['a', 'button', 'input', 'select', 'textarea']);
    const interactiveRoles = new Set([
        'button', 'link', 'menuitem', 'tab', 'checkbox', 'radio', 'option'
    ]);
    const handlerAttrs = ['onclick', 'onmousedown', 'onmouseup', 'onchange', 'onsubmit'];

    function isInteractive(el) {
        const tag = el.tagName.toLowerCase();
        return interactiveTags.has(tag) ||
            interactiveRoles.has(el.getAttribute('role') || '') ||
            handlerAttrs.some(a => el.getAttribute(a) !== null) ||
            el.getAttribute('tabindex') === '0';
    }

    function visibility(el, style, rect) {
        if (style.display === 'none' || style.visibility === 'hidden') return 0;
        if (rect.width <= 0 || rect.height <= 0) return 0;
        const opacity = parseFloat(style.opacity);
        return isNaN(opacity) ? 1 : Math.max(0, Math.min(1, opacity));
    }

    function accessibleName(el) {
        const label = el.getAttribute('aria-label');
        if (label) return label;
        const labelledBy = el.getAttribute('aria-labelledby');
        if (labelledBy) {
            const ref = document.getElementById(labelledBy);
            if (ref) return (ref.textContent || '').trim();
        }
        if (el.getAttribute('title')) return el.getAttribute('title');
        if (el.getAttribute('placeholder')) return el.getAttribute('placeholder');
        const tag = el.tagName.toLowerCase();
        if (['button', 'a', 'option'].includes(tag)) return (el.textContent || '').trim();
        if (tag === 'input' && el.id) {
            const forLabel = document.querySelector(`label[for="${CSS.escape(el.id)}"]`);
            if (forLabel) return (forLabel.textContent || '').trim();
        }
        return '';
    }

    function selectors(el) {
        const tag = el.tagName.toLowerCase();
        const out = [];
        if (el.dataset && el.dataset.testid) out.push(`[data-testid="${el.dataset.testid}"]`);
        if (el.id) out.push(`#${CSS.escape(el.id)}`);
        if (el.getAttribute('name')) out.push(`${tag}[name="${el.getAttribute('name')}"]`);
        if (el.getAttribute('aria-label')) out.push(`[aria-label="${el.getAttribute('aria-label')}"]`);
        if (el.getAttribute('placeholder')) out.push(`[placeholder="${el.getAttribute('placeholder')}"]`);
        let fallback = tag;
        if (typeof el.className === 'string' && el.className.trim()) {
            fallback += '.' + el.className.trim().split(/\\s+/).slice(0, 2).join('.');
        }
        out.push(fallback);
        return out;
    }

    const results = [];
    for (const el of document.querySelectorAll('*')) {
        if (!isInteractive(el)) continue;
        const style = window.getComputedStyle(el);
        const rect = el.getBoundingClientRect();
        const attrs = {};
        for (const attr of el.attributes) attrs[attr.name] = attr.value;
        const sels = selectors(el);
        results.push({
            tag: el.tagName.toLowerCase(),
            input_type: (el.getAttribute('type') || '').toLowerCase(),
            selector: sels[0],
            selectors: sels.slice(1),
            text: (el.textContent || '').trim().substring(0, 100),
            id: el.id || null,
            classes: typeof el.className === 'string' ? el.className.trim().split(/\\s+/).filter(Boolean) : [],
            role: el.getAttribute('role') || null,
            accessible_name: accessibleName(el) || null,
            placeholder: el.getAttribute('placeholder'),
            visibility: visibility(el, style, rect),
            disabled: !!el.disabled,
            bounding_box: {x: rect.x, y: rect.y, width: rect.width, height: rect.height},
            attributes: attrs,
        });
    }
    return results;
}"""


def classify_element_type(tag: str, input_type: str = "", role: str = "") -> str:
    """Map a tag, its input type and its ARIA role onto an element type."""
    tag = tag.lower()
    input_type = input_type.lower()

    if tag == "button":
        return ElementType.BUTTON.value
    if tag == "input":
        if input_type == "checkbox":
            return ElementType.CHECKBOX.value
        if input_type == "radio":
            return ElementType.RADIO.value
        if input_type in ("submit", "button", "reset"):
            return ElementType.BUTTON.value
        return ElementType.INPUT.value
    if tag == "a":
        return ElementType.LINK.value
    if tag == "select":
        return ElementType.SELECT.value
    if tag == "textarea":
        return ElementType.TEXTAREA.value

    if role in ("button", "link", "checkbox", "radio"):
        return role
    if role in ("menuitem", "tab"):
        return ElementType.INTERACTIVE_ELEMENT.value
    return ElementType.CLICKABLE_ELEMENT.value


def element_from_raw(raw: dict[str, Any], page_url: str) -> PageElement:
    """Build a PageElement from one record produced by the discovery script."""
    return PageElement(
        selector=raw.get("selector", ""),
        type=classify_element_type(raw.get("tag", ""), raw.get("input_type", ""), raw.get("role") or ""),
        text=raw.get("text") or None,
        id=raw.get("id") or None,
        classes=raw.get("classes", []),
        attributes=raw.get("attributes", {}),
        role=raw.get("role") or None,
        accessible_name=raw.get("accessible_name") or None,
        placeholder=raw.get("placeholder") or None,
        tag_name=raw.get("tag") or None,
        selectors=raw.get("selectors", []),
        visibility=min(max(float(raw.get("visibility", 1.0)), 0.0), 1.0),
        disabled=bool(raw.get("disabled", False)),
        bounding_box=raw.get("bounding_box"),
        page_url=page_url,
        discovery_source="runtime",
    )


async def discover_elements(page: Page) -> list[PageElement]:
    """Extract all interactive elements from a loaded page."""
    try:
        raw_elements = await page.evaluate(DISCOVERY_SCRIPT)
        elements = [element_from_raw(raw, page.url) for raw in raw_elements]
        logger.debug("Discovered %d interactive elements on %s", len(elements), page.url)
        return elements
    except Exception as e:
        logger.error("Element discovery failed: %s", e)
        return []


async def discover_pages(
    urls: list[str], viewport: ViewportConfig | None = None, timeout_ms: int = 30000,
) -> dict[str, list[PageElement]]:
    """Visit each URL in headless Chromium and discover its elements."""
    viewport = viewport or ViewportConfig()
    results: dict[str, list[PageElement]] = {}

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        try:
            context = await browser.new_context(
                viewport={"width": viewport.width, "height": viewport.height},
            )
            page = await context.new_page()
            for url in urls:
                try:
                    await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
                except Exception as e:
                    logger.warning("Failed to load %s: %s", url, e)
                    results[url] = []
                    continue
                results[url] = await discover_elements(page)
                logger.info("Discovered %d elements on %s", len(results[url]), url)
        finally:
            await browser.close()

    return results


def _snapshot_element(raw: dict[str, Any], page_url: str) -> PageElement:
    data = {k: v for k, v in raw.items() if k not in ("pageUrl", "page_url")}
    return PageElement(**data, pageUrl=page_url)


def load_element_snapshot(path: str | Path) -> dict[str, list[PageElement]]:
    """Load a static element snapshot from JSON.

    Accepted shapes: ``{"url": ..., "elements": [...]}``, ``{url: [...]}``, or a
    bare list of elements (each grouped by its ``pageUrl``, else the file stem).
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Element snapshot not found: {path}")
    with open(path) as f:
        data = json.load(f)

    pages: dict[str, list[PageElement]] = {}
    if isinstance(data, dict) and "elements" in data:
        url = data.get("url") or path.stem
        pages[url] = [_snapshot_element(el, url) for el in data["elements"]]
    elif isinstance(data, dict):
        for url, elements in data.items():
            pages[url] = [_snapshot_element(el, url) for el in elements]
    elif isinstance(data, list):
        for el in data:
            element = PageElement(**el)
            pages.setdefault(element.page_url or path.stem, []).append(element)
    else:
        raise ValueError(f"Unrecognized element snapshot format in {path}")

    logger.debug("Loaded %d pages from snapshot %s", len(pages), path)
    return pages
