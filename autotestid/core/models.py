"""Engine data models.

Defines the core data structures passed between parsers, the identifier
generator, the planner and the rewriters. These are pure data containers,
no parsing logic.
"""

import difflib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple

from .constants import KEBAB_CASE, SEVERITY_ERROR, SEVERITY_WARNING


@dataclass(frozen=True)
class SourcePosition:
    """Location of an opening tag. Line and column are 1-based."""

    line: int
    column: int
    offset: int = 0  # Absolute character offset into the file

    @property
    def key(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Element:
    """A single markup node extracted by a parser.

    Never mutated after the parser hands it out.
    """

    tag: str
    attributes: Mapping[str, str] = field(default_factory=dict, hash=False)
    content: Optional[str] = None
    children: Tuple["Element", ...] = field(default=(), hash=False)
    position: Optional[SourcePosition] = None
    framework: Optional[str] = None  # "react" | "vue"

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes


@dataclass
class Diagnostic:
    """A problem or notice raised by any stage of the engine."""

    message: str
    severity: str = SEVERITY_WARNING  # "error" | "warning" | "info"
    position: Optional[SourcePosition] = None


class TransformationType(Enum):
    """Kind of edit a transformation performs on an opening tag."""
    ADD_ATTRIBUTE = "add-attribute"
    MODIFY_ATTRIBUTE = "modify-attribute"
    REMOVE_ATTRIBUTE = "remove-attribute"


@dataclass
class Transformation:
    """One attribute edit, anchored at the element's opening-tag position."""

    type: TransformationType
    element: Element
    attribute: str
    value: str
    position: SourcePosition


@dataclass
class NamingStrategy:
    """How semantic tokens are joined into one identifier."""

    type: str = KEBAB_CASE  # "kebab-case" | "camelCase" | "snake_case" | "custom"
    custom_transform: Optional[Callable[[str], str]] = None


@dataclass
class CustomRule:
    """A selector-scoped generator consulted before the default algorithm.

    The generator receives the element and the GenerationContext and returns
    an identifier, or an empty value to fall through to the next rule.
    """

    selector: str
    generator: Callable[["Element", "GenerationContext"], Optional[str]]
    priority: int = 0


@dataclass(frozen=True)
class GenerationContext:
    """Per-file configuration snapshot handed to the identifier generator.

    ``existing_ids`` is the only mutable part: it is owned by a single file
    pass and grows as identifiers are assigned.
    """

    file_path: str
    existing_ids: Set[str] = field(default_factory=set, hash=False)
    naming_strategy: NamingStrategy = field(default_factory=NamingStrategy, hash=False)
    prefix: Optional[str] = None
    component: Optional[str] = None
    framework: Optional[str] = None
    max_id_length: Optional[int] = None
    custom_rules: Tuple[CustomRule, ...] = field(default=(), hash=False)


@dataclass
class ParseResult:
    """Complete parse output for a single file."""

    file_path: str
    framework: str
    elements: List[Element] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == SEVERITY_ERROR for d in self.diagnostics)


@dataclass
class TransformResult:
    """Rewritten source plus any diagnostics raised while applying edits."""

    code: str
    diagnostics: List[Diagnostic] = field(default_factory=list)
    applied: List[Transformation] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == SEVERITY_ERROR for d in self.diagnostics)


@dataclass
class ProcessMetrics:
    elements_found: int = 0
    elements_transformed: int = 0
    conflicts_resolved: int = 0
    processing_time_ms: float = 0.0


@dataclass
class ProcessResult:
    """Engine output for one file.

    ``code`` is the rewritten text, or the original text whenever the file
    could not be processed safely.
    """

    file_path: str
    framework: Optional[str]
    original: str
    code: str
    elements: List[Element] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    transformations: List[Transformation] = field(default_factory=list)
    metrics: ProcessMetrics = field(default_factory=ProcessMetrics)

    @property
    def changed(self) -> bool:
        return self.code != self.original

    @property
    def success(self) -> bool:
        return not any(d.severity == SEVERITY_ERROR for d in self.diagnostics)

    @property
    def generated_ids(self) -> List[str]:
        return [t.value for t in self.transformations]

    def diff(self, context_lines: int = 3) -> str:
        """Unified diff between the original and rewritten text."""
        if not self.changed:
            return ""
        return "".join(difflib.unified_diff(
            self.original.splitlines(keepends=True),
            self.code.splitlines(keepends=True),
            fromfile=f"a/{self.file_path}",
            tofile=f"b/{self.file_path}",
            n=context_lines,
        ))
