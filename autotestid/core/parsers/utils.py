"""Parser utilities.

Framework detection and the extension-keyed parser registry.
"""

import os
from typing import Dict, Optional, TYPE_CHECKING

from ..constants import FRAMEWORK_REACT, FRAMEWORK_VUE

if TYPE_CHECKING:
    from .base import SourceParser

# Extension → framework mapping
SUPPORTED_EXTENSIONS: Dict[str, str] = {
    ".js": FRAMEWORK_REACT,
    ".jsx": FRAMEWORK_REACT,
    ".ts": FRAMEWORK_REACT,
    ".tsx": FRAMEWORK_REACT,
    ".vue": FRAMEWORK_VUE,
}

# Parser registry, lazy-loaded to avoid building grammars at import time
_parser_registry: Dict[str, "SourceParser"] = {}


def detect_framework(file_path: str) -> Optional[str]:
    """Detect the UI framework from a file extension.

    Args:
        file_path: Path to the source file

    Returns:
        Framework identifier or None if unsupported
    """
    _, ext = os.path.splitext(file_path)
    return SUPPORTED_EXTENSIONS.get(ext.lower())


def get_parser(framework: str) -> "SourceParser":
    """Get the parser instance for a framework.

    Parsers are stateless, so one shared instance per framework is safe to
    use from several threads.

    Args:
        framework: Framework identifier (e.g., "react")

    Returns:
        Parser instance

    Raises:
        ValueError: If the framework has no parser
    """
    if framework not in _parser_registry:
        if framework == FRAMEWORK_REACT:
            from .jsx_parser import JsxParser
            _parser_registry[FRAMEWORK_REACT] = JsxParser()
        elif framework == FRAMEWORK_VUE:
            from .vue_parser import VueParser
            _parser_registry[FRAMEWORK_VUE] = VueParser()
        else:
            raise ValueError(
                f"Unsupported framework: {framework}. "
                f"Supported: {sorted(set(SUPPORTED_EXTENSIONS.values()))}"
            )

    return _parser_registry[framework]


def parser_for(file_path: str) -> Optional["SourceParser"]:
    """Parser that can handle file_path, or None."""
    framework = detect_framework(file_path)
    if framework is None:
        return None
    parser = get_parser(framework)
    return parser if parser.can_handle(file_path) else None


def is_supported_file(file_path: str) -> bool:
    """Check if a file has a supported extension.

    Args:
        file_path: Path to the file

    Returns:
        True if some parser handles this file type
    """
    return detect_framework(file_path) is not None
