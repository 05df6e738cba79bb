"""Interface for framework-specific source parsers.

Every parser satisfies the same capability: recognise its files, extract
markup elements, and write attribute transformations back into the source.
Parsers are plain classes matched structurally against SourceParser and
dispatched by file extension (see utils.py).
"""

import bisect
import os
from typing import List, Optional, Protocol, runtime_checkable

from ..models import Diagnostic, ParseResult, SourcePosition, Transformation, TransformResult
from ..constants import SEVERITY_ERROR


class TransformationError(Exception):
    """A single transformation could not be applied."""


@runtime_checkable
class SourceParser(Protocol):
    """Capability shared by the full-grammar and structural parsers."""

    framework: str

    def can_handle(self, file_path: str) -> bool:
        """Return True if this parser understands the file at file_path."""
        ...

    def parse(self, content: str, file_path: str) -> ParseResult:
        """Extract elements from source text.

        Never raises: failures are reported as diagnostics on the result.
        """
        ...

    def apply_transformations(
        self,
        content: str,
        transformations: List[Transformation],
        file_path: Optional[str] = None,
    ) -> TransformResult:
        """Write transformations back into the source text.

        Never raises: a whole-file failure returns the original content
        with an error diagnostic.
        """
        ...

    def extract_component_name(self, content: str, file_path: str) -> Optional[str]:
        """Best-effort name of the component defined in the file."""
        ...


def failed_parse(
    framework: str, content: str, file_path: str, message: str
) -> ParseResult:
    """ParseResult for a file that could not be parsed at all."""
    return ParseResult(
        file_path=file_path,
        framework=framework,
        elements=[],
        diagnostics=[Diagnostic(message=message, severity=SEVERITY_ERROR)],
        metadata=build_metadata(framework, content, file_path, 0),
    )


def failed_transform(content: str, message: str) -> TransformResult:
    """TransformResult that leaves the source untouched."""
    return TransformResult(
        code=content,
        diagnostics=[Diagnostic(message=message, severity=SEVERITY_ERROR)],
        applied=[],
    )


def build_metadata(
    framework: str,
    content: str,
    file_path: str,
    elements_count: int,
    component: Optional[str] = None,
) -> dict:
    return {
        "framework": framework,
        "file_path": file_path,
        "source_length": len(content),
        "elements_count": elements_count,
        "component": component,
    }


def position_from_offset(offset: int, line_starts: List[int]) -> SourcePosition:
    """Build a 1-based SourcePosition for a character offset.

    Args:
        offset: 0-based character offset into content
        line_starts: Character offset of each line start (see line_start_offsets)
    """
    row = bisect.bisect_right(line_starts, offset) - 1
    return SourcePosition(line=row + 1, column=offset - line_starts[row] + 1, offset=offset)


def line_start_offsets(content: str) -> List[int]:
    starts = [0]
    for i, ch in enumerate(content):
        if ch == "\n":
            starts.append(i + 1)
    return starts


def component_from_path(file_path: str) -> Optional[str]:
    """Component name derived from the file name (index files use their folder)."""
    stem = os.path.splitext(os.path.basename(file_path))[0]
    if stem == "index":
        stem = os.path.basename(os.path.dirname(file_path))
    return stem or None
