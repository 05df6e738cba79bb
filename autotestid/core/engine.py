"""Attribute-injection engine.

Runs one file through parse -> eligibility -> identifier generation ->
planning -> rewrite. Pure text in, text out: the engine does no file I/O
and never raises; every failure ends up as a diagnostic on the result with
the original text left in place.
"""

import logging
import time
from typing import Any, Dict, Mapping, Optional, Union

from .config import GeneratorConfig, load_config
from .constants import SEVERITY_ERROR
from .generators import IdGenerator
from .models import Diagnostic, ProcessResult
from .parsers import parser_for
from .transformer import (
    build_context,
    collect_existing_ids,
    plan_transformations,
)

logger = logging.getLogger(__name__)


def process_source(
    source_text: str,
    file_path: str,
    config: Optional[GeneratorConfig] = None,
    component: Optional[str] = None,
    generator: Optional[IdGenerator] = None,
) -> ProcessResult:
    """Inject test identifiers into one source file.

    Args:
        source_text: Full file content
        file_path: Path used for parser dispatch and grammar selection
        config: Configuration, defaults when None
        component: Component name override; detected from the source if None
        generator: Identifier generator, a default IdGenerator if None

    Returns:
        ProcessResult. ``code`` is the original text whenever the file could
        not be processed safely.
    """
    config = config or GeneratorConfig()
    started = time.perf_counter()
    result = ProcessResult(
        file_path=file_path,
        framework=None,
        original=source_text,
        code=source_text,
    )

    try:
        _run(result, source_text, file_path, config, component, generator)
    except Exception as e:
        logger.error(f"Failed to process {file_path}: {e}")
        result.code = source_text
        result.transformations = []
        result.diagnostics.append(Diagnostic(
            message=f"Processing error: {e}",
            severity=SEVERITY_ERROR,
        ))
    finally:
        result.metrics.processing_time_ms = (time.perf_counter() - started) * 1000

    return result


def _run(
    result: ProcessResult,
    source_text: str,
    file_path: str,
    config: GeneratorConfig,
    component: Optional[str],
    generator: Optional[IdGenerator],
) -> None:
    parser = parser_for(file_path)
    if parser is None:
        result.diagnostics.append(Diagnostic(
            message=f"Unsupported file type: {file_path}",
            severity=SEVERITY_ERROR,
        ))
        return

    result.framework = parser.framework
    if parser.framework not in config.frameworks:
        result.diagnostics.append(Diagnostic(
            message=f"Framework '{parser.framework}' is not enabled",
            severity=SEVERITY_ERROR,
        ))
        return

    parsed = parser.parse(source_text, file_path)
    result.elements = list(parsed.elements)
    result.diagnostics.extend(parsed.diagnostics)
    result.metrics.elements_found = len(parsed.elements)
    if parsed.has_errors:
        logger.warning(f"Skipping {file_path}: parse failed")
        return

    # Every value already in the file is reserved up front
    context = build_context(
        file_path,
        config,
        component=component or parsed.metadata.get("component"),
        framework=parser.framework,
        existing_ids=collect_existing_ids(parsed.elements, config.attribute_name),
    )

    plan = plan_transformations(parsed.elements, context, config, generator)
    result.diagnostics.extend(plan.diagnostics)
    result.metrics.conflicts_resolved = plan.conflicts_resolved
    if not plan.transformations:
        logger.info(f"No transformations needed for {file_path}")
        return

    transformed = parser.apply_transformations(source_text, plan.transformations, file_path)
    result.diagnostics.extend(transformed.diagnostics)
    if transformed.has_errors:
        logger.warning(f"Keeping original content of {file_path}: rewrite failed")
        return

    result.code = transformed.code
    result.transformations = list(transformed.applied)
    result.metrics.elements_transformed = len(transformed.applied)
    logger.info(
        f"Processed {file_path}: {len(transformed.applied)} of "
        f"{len(parsed.elements)} elements annotated"
    )


class AutoTestId:
    """Configured engine facade.

    Holds one read-only configuration and one generator, and runs files
    through process_source independently of each other.
    """

    def __init__(
        self,
        config: Union[GeneratorConfig, Mapping[str, Any], None] = None,
        generator: Optional[IdGenerator] = None,
    ):
        if config is None or isinstance(config, Mapping):
            config = GeneratorConfig.from_dict(config)
        self.config = config
        self.generator = generator or IdGenerator()

    @classmethod
    def from_file(cls, path: str) -> "AutoTestId":
        """Engine configured from a YAML file."""
        return cls(load_config(path))

    def process_source(
        self,
        source_text: str,
        file_path: str,
        component: Optional[str] = None,
    ) -> ProcessResult:
        return process_source(
            source_text,
            file_path,
            config=self.config,
            component=component,
            generator=self.generator,
        )

    def process_sources(self, sources: Mapping[str, str]) -> Dict[str, ProcessResult]:
        """Process several files, keyed by path. No state crosses files."""
        results = {
            file_path: self.process_source(source_text, file_path)
            for file_path, source_text in sources.items()
        }

        changed = sum(1 for r in results.values() if r.changed)
        failed = sum(1 for r in results.values() if not r.success)
        logger.info(f"Processed {len(results)} files: {changed} changed, {failed} with errors")
        return results
