"""
DOM Simplifier - Reduce a page to a numbered list of interactive elements.

The oracle picks elements by index; each element carries a CSS selector
the page wrapper can act on.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from llm_task_agent.interfaces.browser import IPage

logger = logging.getLogger(__name__)

EXTRACTION_SCRIPT = """
(maxElements) => {
    const results = [];
    const seen = new Set();
    const selectors = [
        'a[href]', 'button', 'input', 'select', 'textarea',
        '[role="button"]', '[role="link"]', '[role="textbox"]',
        '[role="checkbox"]', '[role="radio"]', '[role="combobox"]',
        '[role="menuitem"]', '[role="option"]', '[role="searchbox"]',
        '[role="tab"]', '[onclick]',
    ];

    function cssString(value) {
        return '"' + String(value).replace(/\\\\/g, '\\\\\\\\').replace(/"/g, '\\\\"') + '"';
    }

    function getSelector(el) {
        if (el.id) return '[id=' + cssString(el.id) + ']';
        if (el.getAttribute('data-testid')) {
            return '[data-testid=' + cssString(el.getAttribute('data-testid')) + ']';
        }
        if (el.name && ['input', 'select', 'textarea'].includes(el.tagName.toLowerCase())) {
            return el.tagName.toLowerCase() + '[name=' + cssString(el.name) + ']';
        }
        const path = [];
        while (el && el.nodeType === Node.ELEMENT_NODE && el.tagName !== 'HTML') {
            let part = el.tagName.toLowerCase();
            let nth = 1;
            let sibling = el;
            while ((sibling = sibling.previousElementSibling)) {
                if (sibling.tagName === el.tagName) nth++;
            }
            part += ':nth-of-type(' + nth + ')';
            path.unshift(part);
            el = el.parentElement;
        }
        return path.join(' > ');
    }

    function isVisible(el) {
        const rect = el.getBoundingClientRect();
        const style = window.getComputedStyle(el);
        return rect.width > 0 && rect.height > 0 &&
               style.visibility !== 'hidden' && style.display !== 'none';
    }

    for (const selector of selectors) {
        for (const el of document.querySelectorAll(selector)) {
            if (!isVisible(el)) continue;
            const key = getSelector(el);
            if (seen.has(key)) continue;
            seen.add(key);
            results.push({
                tag: el.tagName.toLowerCase(),
                text: (el.innerText || el.textContent || '').trim().substring(0, 100),
                id: el.id || null,
                name: el.getAttribute('name'),
                type: el.getAttribute('type'),
                placeholder: el.getAttribute('placeholder'),
                aria_label: el.getAttribute('aria-label'),
                role: el.getAttribute('role'),
                href: el.getAttribute('href'),
                selector: key,
            });
            if (results.length >= maxElements) return results;
        }
    }
    return results;
}
"""


@dataclass
class SimplifiedElement:
    """An interactive element, as shown to the oracle."""
    index: int
    tag: str
    selector: str
    text: str = ""
    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    placeholder: Optional[str] = None
    aria_label: Optional[str] = None
    role: Optional[str] = None
    href: Optional[str] = None

    @classmethod
    def from_raw(cls, index: int, raw: Dict[str, Any]) -> "SimplifiedElement":
        return cls(
            index=index,
            tag=raw.get("tag") or "?",
            selector=raw.get("selector") or "",
            text=raw.get("text") or "",
            id=raw.get("id"),
            name=raw.get("name"),
            type=raw.get("type"),
            placeholder=raw.get("placeholder"),
            aria_label=raw.get("aria_label"),
            role=raw.get("role"),
            href=raw.get("href"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Non-empty attributes only."""
        result: Dict[str, Any] = {"index": self.index, "tag": self.tag, "selector": self.selector}
        for key in ("text", "id", "name", "type", "placeholder", "aria_label", "role", "href"):
            value = getattr(self, key)
            if value:
                result[key] = value
        return result

    def to_line(self) -> str:
        """Convert to single-line string for compact display."""
        attrs = []
        if self.id:
            attrs.append(f"id={self.id}")
        if self.name:
            attrs.append(f"name={self.name}")
        if self.type:
            attrs.append(f"type={self.type}")
        if self.placeholder:
            attrs.append(f"placeholder=\"{self.placeholder[:30]}\"")
        if self.aria_label:
            attrs.append(f"aria-label=\"{self.aria_label[:30]}\"")
        if self.role:
            attrs.append(f"role={self.role}")
        if self.href:
            attrs.append(f"href={self.href[:60]}")

        attrs_str = " ".join(attrs)
        text_str = f' "{self.text[:40]}"' if self.text else ""
        return f"[{self.index}] <{self.tag}> {attrs_str}{text_str}".strip()


class DOMSimplifier:
    """
    Collect visible interactive elements from a page.

    Example:
        >>> elements = await DOMSimplifier().interactive_elements(page)
        >>> print("\\n".join(e.to_line() for e in elements))
    """

    def __init__(self, max_elements: int = 150):
        self._max_elements = max_elements

    async def interactive_elements(self, page: "IPage") -> List[SimplifiedElement]:
        raw_elements = await page.evaluate(EXTRACTION_SCRIPT, self._max_elements)
        elements = [
            SimplifiedElement.from_raw(i, raw)
            for i, raw in enumerate(raw_elements or [])
        ]
        logger.debug(f"Found {len(elements)} interactive element(s) on {page.url}")
        return elements

    @staticmethod
    def format_elements(elements: List[SimplifiedElement]) -> str:
        if not elements:
            return "No interactive elements found."
        return "\n".join(e.to_line() for e in elements)
