"""Transformation planning.

Walks parsed elements in document order, asks the identifier generator for
a value per eligible element, and emits one attribute transformation for
each. Emission order decides which element keeps the unsuffixed identifier
on a collision, so it must follow parse order.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from ..config import GeneratorConfig
from ..constants import SEVERITY_INFO, SEVERITY_WARNING
from ..generators import IdGenerator
from ..models import (
    Diagnostic,
    Element,
    GenerationContext,
    Transformation,
    TransformationType,
)
from .eligibility import should_annotate

logger = logging.getLogger(__name__)


@dataclass
class Plan:
    """Planner output for one file."""

    transformations: List[Transformation] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    conflicts_resolved: int = 0


def collect_existing_ids(elements: Iterable[Element], attribute_name: str) -> Set[str]:
    """Values of attribute_name already present in the file."""
    return {
        element.attributes[attribute_name]
        for element in elements
        if element.attributes.get(attribute_name)
    }


def build_context(
    file_path: str,
    config: GeneratorConfig,
    component: Optional[str] = None,
    framework: Optional[str] = None,
    existing_ids: Optional[Set[str]] = None,
) -> GenerationContext:
    """Fresh per-file generation context from the shared configuration."""
    return GenerationContext(
        file_path=file_path,
        existing_ids=set(existing_ids or ()),
        naming_strategy=config.naming_strategy,
        prefix=config.prefix,
        component=component,
        framework=framework,
        max_id_length=config.max_id_length,
        custom_rules=tuple(config.custom_rules),
    )


def plan_transformations(
    elements: Iterable[Element],
    context: GenerationContext,
    config: GeneratorConfig,
    generator: Optional[IdGenerator] = None,
) -> Plan:
    """Plan one attribute transformation per eligible element.

    Every generated value is added to ``context.existing_ids`` before the
    next element is named, so values are unique within the file.

    Args:
        elements: Parsed elements in document order
        context: Per-file generation context (existing_ids is mutated)
        config: Shared configuration
        generator: Identifier generator, a default IdGenerator if None

    Returns:
        Plan with transformations, diagnostics and the conflict count
    """
    generator = generator or IdGenerator()
    plan = Plan()

    for element in elements:
        if not should_annotate(element, config):
            continue

        if element.position is None:
            plan.diagnostics.append(Diagnostic(
                message=f"Element <{element.tag}> has no source position, skipping",
                severity=SEVERITY_WARNING,
            ))
            continue

        current = element.attributes.get(config.attribute_name)
        # An element may keep its own value; other values already in the file stay reserved
        scope = context.existing_ids - {current} if current else context.existing_ids

        base = generator.propose(element, context)
        value = generator.resolve_conflicts(base, scope, context.max_id_length)
        if value != base:
            plan.conflicts_resolved += 1
            plan.diagnostics.append(Diagnostic(
                message=f"Identifier '{base}' already in use, using '{value}'",
                severity=SEVERITY_INFO,
                position=element.position,
            ))
        context.existing_ids.add(value)

        if current == value:
            continue

        plan.transformations.append(Transformation(
            type=(
                TransformationType.MODIFY_ATTRIBUTE
                if element.has_attribute(config.attribute_name)
                else TransformationType.ADD_ATTRIBUTE
            ),
            element=element,
            attribute=config.attribute_name,
            value=value,
            position=element.position,
        ))
        logger.debug(f"Planned {config.attribute_name}={value} at {element.position.key}")

    logger.debug(
        f"Planned {len(plan.transformations)} transformations for {context.file_path} "
        f"({plan.conflicts_resolved} conflicts resolved)"
    )
    return plan
