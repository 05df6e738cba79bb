"""Selector matching for custom generation rules.

Supported selector forms, combinable into compounds and comma-separated
alternatives:

    *                   any element
    button              tag name (case-insensitive)
    .primary            class token in class / className
    #submit             id attribute
    [disabled]          attribute present
    [type=submit]       attribute equal to value (quotes optional)

e.g. ``button.primary[type=submit], a.cta``
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from ..constants import CLASS_ATTRIBUTES
from ..models import CustomRule, Element

logger = logging.getLogger(__name__)

# Leading tag or universal marker of a compound selector
_TAG_RE = re.compile(r"\*|[A-Za-z][\w-]*")

# .class | #id | [attr] | [attr=value] | [attr="value"]
_PART_RE = re.compile(
    r"""\.([\w-]+)"""
    r"""|\#([\w-]+)"""
    r"""|\[\s*([^\]=\s]+)\s*(?:=\s*(?:"([^"]*)"|'([^']*)'|([^\]\s]*))\s*)?\]"""
)


@dataclass(frozen=True)
class Selector:
    """One compound selector. Every present part must match."""

    tag: Optional[str] = None
    classes: Tuple[str, ...] = ()
    element_id: Optional[str] = None
    attributes: Tuple[Tuple[str, Optional[str]], ...] = ()

    def matches(self, element: Element) -> bool:
        if self.tag is not None and element.tag.lower() != self.tag:
            return False

        if self.element_id is not None and element.attributes.get("id") != self.element_id:
            return False

        if self.classes:
            present = set(element_classes(element))
            if not all(cls in present for cls in self.classes):
                return False

        for name, value in self.attributes:
            if name not in element.attributes:
                return False
            if value is not None and element.attributes[name] != value:
                return False

        return True


def element_classes(element: Element) -> List[str]:
    """Class tokens from the first class attribute present."""
    for name in CLASS_ATTRIBUTES:
        value = element.attributes.get(name)
        if value:
            return value.split()
    return []


def _parse_compound(text: str) -> Selector:
    position = 0
    tag = None
    match = _TAG_RE.match(text)
    if match:
        if match.group(0) != "*":
            tag = match.group(0).lower()
        position = match.end()

    classes: List[str] = []
    element_id = None
    attributes: List[Tuple[str, Optional[str]]] = []

    while position < len(text):
        match = _PART_RE.match(text, position)
        if match is None:
            raise ValueError(f"Invalid selector syntax near {text[position:]!r} in {text!r}")
        cls, ident, attr_name, double_quoted, single_quoted, bare = match.groups()
        if cls:
            classes.append(cls)
        elif ident:
            element_id = ident
        else:
            value = next((v for v in (double_quoted, single_quoted, bare) if v is not None), None)
            attributes.append((attr_name, value))
        position = match.end()

    return Selector(
        tag=tag,
        classes=tuple(classes),
        element_id=element_id,
        attributes=tuple(attributes),
    )


@lru_cache(maxsize=256)
def parse_selector(selector: str) -> Tuple[Selector, ...]:
    """Parse a selector string into its comma-separated alternatives.

    Raises:
        ValueError: On empty or malformed selectors
    """
    alternatives = [part.strip() for part in selector.split(",")]
    if not selector.strip() or not all(alternatives):
        raise ValueError(f"Empty selector in {selector!r}")
    return tuple(_parse_compound(part) for part in alternatives)


def selector_matches(selector: str, element: Element) -> bool:
    """True if any alternative of selector matches element."""
    return any(alt.matches(element) for alt in parse_selector(selector))


def matching_rules(rules: Sequence[CustomRule], element: Element) -> List[CustomRule]:
    """Rules whose selector matches element, highest priority first.

    Equal priorities keep their configured order. Rules with malformed
    selectors are skipped with a warning.
    """
    matched = []
    for index, rule in enumerate(rules):
        try:
            if selector_matches(rule.selector, element):
                matched.append((-rule.priority, index, rule))
        except ValueError as e:
            logger.warning(f"Skipping custom rule with invalid selector: {e}")
    return [rule for _, _, rule in sorted(matched, key=lambda item: item[:2])]
