"""autotestid generators: semantic identifier generation and custom rules."""

from .id_generator import IdGenerator
from .rules import Selector, matching_rules, parse_selector, selector_matches

__all__ = [
    "IdGenerator",
    "Selector",
    "matching_rules",
    "parse_selector",
    "selector_matches",
]
