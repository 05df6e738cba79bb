"""Shared constants for autotestid.

This module contains constants that are used across multiple modules
to avoid duplication and ensure consistency.
"""

# =============================================================================
# Default Configuration
# =============================================================================

DEFAULT_ATTRIBUTE_NAME = "data-testid"

DEFAULT_PREFIX = "test"

DEFAULT_MAX_ID_LENGTH = 50

DEFAULT_FRAMEWORKS = ["react", "vue"]

DEFAULT_INCLUDE_ELEMENT_TYPES = [
    "button",
    "input",
    "select",
    "textarea",
    "form",
    "a",
    "div",
    "span",
]

# Used when a generated identifier sanitizes down to nothing
FALLBACK_ID = "element"

# =============================================================================
# Frameworks and naming strategies
# =============================================================================

FRAMEWORK_REACT = "react"
FRAMEWORK_VUE = "vue"

KEBAB_CASE = "kebab-case"
CAMEL_CASE = "camelCase"
SNAKE_CASE = "snake_case"
CUSTOM = "custom"

# =============================================================================
# Diagnostic severities
# =============================================================================

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"

# =============================================================================
# Eligibility
# =============================================================================

# Document/metadata level tags that never receive an identifier
NON_VISUAL_TAGS = frozenset({
    "html",
    "head",
    "meta",
    "title",
    "style",
    "script",
    "link",
})

# =============================================================================
# Identifier generation
# =============================================================================

SEMANTIC_KEYWORDS = {
    "actions": ["click", "submit", "cancel", "close", "open", "save", "delete", "edit", "add", "remove"],
    "navigation": ["nav", "menu", "link", "breadcrumb", "tab", "page", "home", "back", "next"],
    "forms": ["form", "input", "field", "select", "option", "checkbox", "radio", "textarea", "label"],
    "content": ["title", "heading", "text", "content", "description", "summary", "detail"],
    "layout": ["header", "footer", "sidebar", "main", "container", "wrapper", "section"],
    "status": ["success", "error", "warning", "info", "loading", "disabled", "active", "selected"],
}

ALL_SEMANTIC_KEYWORDS = frozenset(
    word for words in SEMANTIC_KEYWORDS.values() for word in words
)

ELEMENT_TYPE_NAMES = {
    "button": "btn",
    "input": "input",
    "select": "select",
    "textarea": "textarea",
    "form": "form",
    "div": "container",
    "span": "text",
    "img": "image",
    "a": "link",
    "h1": "heading",
    "h2": "heading",
    "h3": "heading",
    "h4": "heading",
    "h5": "heading",
    "h6": "heading",
    "p": "paragraph",
    "ul": "list",
    "ol": "list",
    "li": "item",
    "table": "table",
    "tr": "row",
    "td": "cell",
    "th": "header",
}

MEANINGFUL_ATTRIBUTES = ["name", "id", "type", "role", "title", "alt", "placeholder"]

ARIA_ATTRIBUTES = ["aria-label", "aria-describedby", "aria-labelledby", "role"]

CLASS_ATTRIBUTES = ["className", "class"]

# Content keywords outside this length window are ignored
MIN_CONTENT_WORD_LENGTH = 3
MAX_CONTENT_WORD_LENGTH = 14

MAX_CONTENT_KEYWORDS = 3
MAX_RAW_CONTENT_KEYWORDS = 2
MAX_CLASS_KEYWORDS = 2
MAX_ATTRIBUTE_KEYWORDS = 3

# Conflict resolution ladder
MAX_CONFLICT_ATTEMPTS = 100
TRUNCATE_AFTER_ATTEMPTS = 10
LONG_ID_THRESHOLD = 30
TRUNCATED_BASE_LENGTH = 25
