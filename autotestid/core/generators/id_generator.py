"""Semantic test-identifier generation.

Builds an identifier for an element from, in order: the enclosing component
name, semantic tokens found in the element's attributes, text content,
accessibility attributes and classes, and finally a short element-type
token. The token list is joined per naming strategy, prefixed, sanitized,
and made unique against the identifiers already assigned in the file.
"""

import logging
import re
import time
from typing import AbstractSet, List, Optional

from ..constants import (
    ALL_SEMANTIC_KEYWORDS,
    ARIA_ATTRIBUTES,
    CAMEL_CASE,
    CUSTOM,
    DEFAULT_MAX_ID_LENGTH,
    ELEMENT_TYPE_NAMES,
    FALLBACK_ID,
    LONG_ID_THRESHOLD,
    MAX_ATTRIBUTE_KEYWORDS,
    MAX_CLASS_KEYWORDS,
    MAX_CONFLICT_ATTEMPTS,
    MAX_CONTENT_KEYWORDS,
    MAX_CONTENT_WORD_LENGTH,
    MAX_RAW_CONTENT_KEYWORDS,
    MEANINGFUL_ATTRIBUTES,
    MIN_CONTENT_WORD_LENGTH,
    SNAKE_CASE,
    TRUNCATE_AFTER_ATTEMPTS,
    TRUNCATED_BASE_LENGTH,
)
from ..models import Element, GenerationContext, NamingStrategy
from .rules import element_classes, matching_rules

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_INVALID_ID_CHARS_RE = re.compile(r"[^a-z0-9_-]")
_LEADING_DIGITS_RE = re.compile(r"^[0-9]+")
_REPEATED_HYPHENS_RE = re.compile(r"-+")
_REPEATED_UNDERSCORES_RE = re.compile(r"_+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

# LoginForm -> Login-Form, HTMLInput -> HTML-Input
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_COMPONENT_SUFFIX_RE = re.compile(r"component$")

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


class IdGenerator:
    """Stateless identifier generator.

    All per-file state lives in the GenerationContext passed to each call,
    so one instance can serve any number of files and threads.
    """

    def generate(self, element: Element, context: GenerationContext) -> str:
        """Generate an identifier not present in ``context.existing_ids``.

        The caller is responsible for adding the result to existing_ids.

        Args:
            element: Element to name
            context: Per-file generation context

        Returns:
            Sanitized, unique identifier
        """
        base = self.propose(element, context)
        unique = self.resolve_conflicts(base, context.existing_ids, self._max_length(context))
        logger.debug(f"Generated ID: {unique} for <{element.tag}>")
        return unique

    def propose(self, element: Element, context: GenerationContext) -> str:
        """Sanitized identifier for element before conflict resolution.

        Custom rules are consulted first, highest priority first. The first
        one that returns a non-empty value wins; its value is used as-is
        (no prefix) apart from sanitation.
        """
        max_length = self._max_length(context)

        custom = self._from_custom_rules(element, context)
        if custom:
            return self.sanitize_id(custom, max_length)

        components: List[str] = []
        if context.component:
            component = self.sanitize_component(context.component)
            if component:
                components.append(component)
        components.extend(self.extract_semantic_parts(element))

        element_type = self.element_type(element)
        if element_type and element_type not in components:
            components.append(element_type)

        base_id = self.combine_components(components, context.naming_strategy)
        if context.prefix:
            base_id = self.apply_prefix(base_id, context.prefix, context.naming_strategy)

        return self.sanitize_id(base_id, max_length)

    def validate_uniqueness(self, candidate: str, scope: AbstractSet[str]) -> bool:
        return candidate not in scope

    def resolve_conflicts(
        self,
        candidate: str,
        existing_ids: AbstractSet[str],
        max_length: Optional[int] = None,
    ) -> str:
        """Make candidate unique against existing_ids.

        Tries ``base-1`` .. ``base-100``; past the tenth attempt a base longer
        than 30 characters is cut to 25 first. If all of those are taken, a
        base-36 millisecond timestamp is appended instead. Suffixed results
        are fitted to max_length by shortening the base, never the suffix.
        """
        if candidate not in existing_ids:
            return candidate

        logger.debug(f"Resolving conflict for ID: {candidate}")

        attempts = 0
        resolved = candidate
        while resolved in existing_ids and attempts < MAX_CONFLICT_ATTEMPTS:
            attempts += 1
            base = candidate
            if attempts > TRUNCATE_AFTER_ATTEMPTS and len(candidate) > LONG_ID_THRESHOLD:
                base = candidate[:TRUNCATED_BASE_LENGTH].rstrip("-_")
            resolved = _with_suffix(base, str(attempts), max_length)

        if resolved in existing_ids:
            stamp = int(time.time() * 1000)
            resolved = _with_suffix(candidate, _base36(stamp), max_length)
            while resolved in existing_ids:
                stamp += 1
                resolved = _with_suffix(candidate, _base36(stamp), max_length)

        logger.debug(f"Resolved conflict: {candidate} -> {resolved}")
        return resolved

    def generate_candidates(
        self,
        element: Element,
        context: GenerationContext,
        count: int = 3,
    ) -> List[str]:
        """Alternative identifiers from distinct strategies.

        Strategies, in order: full semantic analysis, content keywords plus
        element type, meaningful attributes plus element type. Each candidate
        is resolved against existing_ids independently; none is reserved.
        """
        max_length = self._max_length(context)
        element_type = self.element_type(element)
        candidates = [self.propose(element, context)]

        if element.content:
            simplified = self.extract_content_keywords(element.content) + [element_type]
            candidates.append(self._assemble(simplified, context, max_length))

        attribute_keywords = self._attribute_keywords(element, MEANINGFUL_ATTRIBUTES)
        if attribute_keywords:
            attribute_based = attribute_keywords[:2] + [element_type]
            candidates.append(self._assemble(attribute_based, context, max_length))

        unique = list(dict.fromkeys(candidates))
        return [
            self.resolve_conflicts(candidate, context.existing_ids, max_length)
            for candidate in unique
        ][:count]

    # =========================================================================
    # Semantic extraction
    # =========================================================================

    def extract_semantic_parts(self, element: Element) -> List[str]:
        """Semantic tokens from attributes, content, ARIA and classes."""
        parts: List[str] = []

        # An element's text describes it better than its HTML type
        skip = ("type",) if element.content else ()
        attribute_names = [name for name in MEANINGFUL_ATTRIBUTES if name not in skip]
        parts.extend(self._attribute_keywords(element, attribute_names))

        if element.content:
            parts.extend(self.extract_content_keywords(element.content))

        parts.extend(self._attribute_keywords(element, ARIA_ATTRIBUTES))
        parts.extend(self.extract_class_keywords(element))

        return [part for part in parts if part]

    def extract_content_keywords(self, content: str) -> List[str]:
        """Keywords from free text, vocabulary words first.

        Words of 3-14 characters are kept. If none is in the semantic
        vocabulary the first two words are used instead.
        """
        if not content or not content.strip():
            return []

        words = [
            word for word in _NON_ALNUM_RE.sub(" ", content.lower()).split()
            if MIN_CONTENT_WORD_LENGTH <= len(word) <= MAX_CONTENT_WORD_LENGTH
        ]

        semantic = [word for word in words if word in ALL_SEMANTIC_KEYWORDS]
        if not semantic:
            return words[:MAX_RAW_CONTENT_KEYWORDS]
        return semantic[:MAX_CONTENT_KEYWORDS]

    def extract_class_keywords(self, element: Element) -> List[str]:
        keywords: List[str] = []
        for cls in element_classes(element):
            keywords.extend(self.extract_keywords(cls))
        return keywords[:MAX_CLASS_KEYWORDS]

    def extract_keywords(self, text: str) -> List[str]:
        """Split an attribute value into keywords, vocabulary words first."""
        if not text:
            return []

        words = [word for word in _NON_ALNUM_RE.sub(" ", text.lower()).split() if len(word) > 1]
        semantic = [word for word in words if word in ALL_SEMANTIC_KEYWORDS]
        others = [word for word in words if word not in ALL_SEMANTIC_KEYWORDS]
        return (semantic + others)[:MAX_ATTRIBUTE_KEYWORDS]

    def _attribute_keywords(self, element: Element, names) -> List[str]:
        keywords: List[str] = []
        for name in names:
            value = element.attributes.get(name)
            if value:
                keywords.extend(self.extract_keywords(value))
        return keywords

    def element_type(self, element: Element) -> str:
        """Short type token: table entry, last segment of a custom tag, or the tag."""
        tag = element.tag.lower()
        if tag in ELEMENT_TYPE_NAMES:
            return ELEMENT_TYPE_NAMES[tag]
        if "-" in tag:
            return tag.split("-")[-1]
        return tag

    def sanitize_component(self, component: str) -> str:
        """Kebab-case component name: "LoginFormComponent" -> "login-form"."""
        spaced = _CAMEL_BOUNDARY_RE.sub("-", component).lower()
        spaced = _COMPONENT_SUFFIX_RE.sub("", spaced)
        return _NON_ALNUM_RE.sub("-", spaced).strip("-")

    # =========================================================================
    # Assembly
    # =========================================================================

    def combine_components(self, components: List[str], strategy: NamingStrategy) -> str:
        """Join tokens per naming strategy, dropping duplicates.

        Duplicates are whole entries, so "login-form" and "form" both stay.
        Multi-word entries are split into words for camelCase and snake_case.
        """
        unique = list(dict.fromkeys(c for c in components if c))
        if not unique:
            return FALLBACK_ID

        words = [word for c in unique for word in c.split("-") if word] or unique
        if strategy.type == CAMEL_CASE:
            return words[0].lower() + "".join(w[:1].upper() + w[1:].lower() for w in words[1:])
        if strategy.type == SNAKE_CASE:
            return "_".join(words)
        if strategy.type == CUSTOM and strategy.custom_transform:
            return strategy.custom_transform("-".join(unique))
        return "-".join(unique)

    def apply_prefix(self, candidate: str, prefix: str, strategy: NamingStrategy) -> str:
        return f"{prefix}{_separator(strategy.type)}{candidate}"

    def sanitize_id(self, candidate: str, max_length: Optional[int] = None) -> str:
        """Lower-case, restrict to [a-z0-9_-], and bound the length.

        Never returns an empty string.
        """
        sanitized = _INVALID_ID_CHARS_RE.sub("-", (candidate or "").lower())
        sanitized = _LEADING_DIGITS_RE.sub("", sanitized)
        sanitized = _REPEATED_HYPHENS_RE.sub("-", sanitized)
        sanitized = _REPEATED_UNDERSCORES_RE.sub("_", sanitized)
        sanitized = sanitized.strip("-_")

        if max_length and len(sanitized) > max_length:
            sanitized = sanitized[:max_length].rstrip("-_")

        return sanitized or FALLBACK_ID

    def _assemble(self, components: List[str], context: GenerationContext, max_length: int) -> str:
        candidate = self.combine_components(components, context.naming_strategy)
        if context.prefix:
            candidate = self.apply_prefix(candidate, context.prefix, context.naming_strategy)
        return self.sanitize_id(candidate, max_length)

    def _from_custom_rules(self, element: Element, context: GenerationContext) -> Optional[str]:
        if not context.custom_rules:
            return None

        for rule in matching_rules(context.custom_rules, element):
            try:
                value = rule.generator(element, context)
            except Exception as e:
                logger.warning(f"Custom rule '{rule.selector}' failed for <{element.tag}>: {e}")
                continue
            if value:
                logger.debug(f"Custom rule '{rule.selector}' produced: {value}")
                return str(value)
        return None

    @staticmethod
    def _max_length(context: GenerationContext) -> int:
        return context.max_id_length or DEFAULT_MAX_ID_LENGTH


def _separator(strategy_type: str) -> str:
    if strategy_type == SNAKE_CASE:
        return "_"
    if strategy_type == CAMEL_CASE:
        return ""
    return "-"


def _with_suffix(base: str, suffix: str, max_length: Optional[int]) -> str:
    candidate = f"{base}-{suffix}"
    if not max_length or len(candidate) <= max_length:
        return candidate
    room = max_length - len(suffix) - 1
    trimmed = base[:max(room, 0)].rstrip("-_")
    return f"{trimmed}-{suffix}" if trimmed else suffix[-max_length:]


def _base36(value: int) -> str:
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits)) or "0"
