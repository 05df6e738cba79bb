"""autotestid - inject generated test identifiers into React and Vue sources.

Public API:
    process_source(source, file_path, config) → ProcessResult
    AutoTestId(config).process_sources({path: source}) → {path: ProcessResult}
    GeneratorConfig.from_dict(data) / load_config(path) → GeneratorConfig
"""

import logging
import sys

from .core import (
    AutoTestId,
    CustomRule,
    GeneratorConfig,
    NamingStrategy,
    ProcessResult,
    load_config,
    process_source,
)

__version__ = "0.1.0"

__all__ = [
    "AutoTestId",
    "CustomRule",
    "GeneratorConfig",
    "NamingStrategy",
    "ProcessResult",
    "load_config",
    "process_source",
    "setup_logging",
]


def setup_logging(log_level: str = "INFO") -> None:
    """Configure logging for applications embedding the engine."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
