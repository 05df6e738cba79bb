"""autotestid parsers: element extraction and attribute rewriting.

Public API:
    parse_source(source, file_path, framework) → ParseResult
    detect_framework(file_path) → str | None
    get_parser(framework) → SourceParser
"""

from typing import Optional

from ..models import ParseResult
from .base import SourceParser, TransformationError
from .utils import detect_framework, get_parser, is_supported_file, parser_for

__all__ = [
    "parse_source",
    "detect_framework",
    "get_parser",
    "is_supported_file",
    "parser_for",
    "SourceParser",
    "TransformationError",
]


def parse_source(source_text: str, file_path: str, framework: Optional[str] = None) -> ParseResult:
    """Parse source text into markup elements.

    Args:
        source_text: Source code as string
        file_path: File path (used for grammar selection and metadata)
        framework: Framework identifier. If None, detected from file_path.

    Returns:
        ParseResult containing extracted elements

    Raises:
        ValueError: If no parser exists for the file
    """
    if framework is None:
        framework = detect_framework(file_path)
    if framework is None:
        raise ValueError(f"Unsupported file type: {file_path}")
    return get_parser(framework).parse(source_text, file_path)
