"""autotestid core: parsing, identifier generation and source rewriting."""

from .config import GeneratorConfig, load_config
from .engine import AutoTestId, process_source
from .models import (
    Diagnostic,
    Element,
    GenerationContext,
    NamingStrategy,
    CustomRule,
    ParseResult,
    ProcessMetrics,
    ProcessResult,
    SourcePosition,
    Transformation,
    TransformationType,
    TransformResult,
)

__all__ = [
    "AutoTestId",
    "process_source",
    "GeneratorConfig",
    "load_config",
    "CustomRule",
    "Diagnostic",
    "Element",
    "GenerationContext",
    "NamingStrategy",
    "ParseResult",
    "ProcessMetrics",
    "ProcessResult",
    "SourcePosition",
    "Transformation",
    "TransformationType",
    "TransformResult",
]
