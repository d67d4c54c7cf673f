"""Inline <style> support — a restricted rule subset.

Only simple selectors are understood (``*``, ``tag``, ``.class``, ``#id`` and
compounds like ``tag.class``), optionally comma-separated. Matching rules are
applied in document order with last-rule-wins; there is no specificity.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from xml.etree.ElementTree import Element

logger = logging.getLogger(__name__)

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_RULE_RE = re.compile(r"([^{}]+)\{([^{}]*)\}")
_SIMPLE_SELECTOR_RE = re.compile(r"^(?P<tag>\*|[a-zA-Z][\w-]*)?(?P<quals>(?:[.#][\w-]+)*)$")
_QUALIFIER_RE = re.compile(r"([.#])([\w-]+)")
_IMPORTANT_RE = re.compile(r"\s*!important\s*$", re.IGNORECASE)


def local_tag(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


@dataclass(frozen=True)
class SimpleSelector:
    tag: str | None = None
    ids: tuple[str, ...] = ()
    classes: tuple[str, ...] = ()

    def matches(self, element: Element) -> bool:
        if self.tag is not None and self.tag != "*" and local_tag(element.tag) != self.tag:
            return False
        if self.ids and element.get("id") not in self.ids:
            return False
        if self.classes:
            element_classes = set((element.get("class") or "").split())
            if not set(self.classes) <= element_classes:
                return False
        return True


@dataclass(frozen=True)
class StyleRule:
    selectors: tuple[SimpleSelector, ...]
    declarations: dict[str, str] = field(default_factory=dict, hash=False)

    def matches(self, element: Element) -> bool:
        return any(s.matches(element) for s in self.selectors)


def parse_declarations(text: str | None) -> dict[str, str]:
    """Parse ``prop: value; ...`` into an ordered dict (later wins)."""
    declarations: dict[str, str] = {}
    if not text:
        return declarations
    for chunk in text.split(";"):
        if ":" not in chunk:
            continue
        name, value = chunk.split(":", 1)
        name = name.strip().lower()
        value = _IMPORTANT_RE.sub("", value).strip()
        if name and value:
            declarations[name] = value
    return declarations


def format_declarations(declarations: dict[str, str]) -> str:
    return "; ".join(f"{name}: {value}" for name, value in declarations.items())


def merge_style(style: str | None, declarations: dict[str, str]) -> str:
    """Inline style with ``declarations`` overriding existing properties."""
    merged = parse_declarations(style)
    merged.update(declarations)
    return format_declarations(merged)


def parse_selector(text: str) -> SimpleSelector | None:
    match = _SIMPLE_SELECTOR_RE.match(text.strip())
    if not match or not text.strip():
        return None
    ids: list[str] = []
    classes: list[str] = []
    for kind, name in _QUALIFIER_RE.findall(match.group("quals") or ""):
        (ids if kind == "#" else classes).append(name)
    return SimpleSelector(tag=match.group("tag"), ids=tuple(ids), classes=tuple(classes))


class Stylesheet:
    """Ordered list of simple style rules collected from <style> elements."""

    def __init__(self, rules: list[StyleRule] | None = None) -> None:
        self.rules: list[StyleRule] = rules or []

    @classmethod
    def parse(cls, css_text: str) -> Stylesheet:
        rules: list[StyleRule] = []
        css_text = _COMMENT_RE.sub("", css_text)
        for selector_text, body in _RULE_RE.findall(css_text):
            selectors = []
            for part in selector_text.split(","):
                selector = parse_selector(part)
                if selector is None:
                    logger.debug("Unsupported selector skipped: %r", part.strip())
                    continue
                selectors.append(selector)
            if selectors:
                rules.append(StyleRule(tuple(selectors), parse_declarations(body)))
        return cls(rules)

    @classmethod
    def from_root(cls, root: Element) -> Stylesheet:
        texts = [el.text or "" for el in root.iter() if local_tag(el.tag) == "style"]
        return cls.parse("\n".join(texts))

    def matched_declarations(self, element: Element) -> dict[str, str]:
        result: dict[str, str] = {}
        for rule in self.rules:
            if rule.matches(element):
                result.update(rule.declarations)
        return result

    def __len__(self) -> int:
        return len(self.rules)
