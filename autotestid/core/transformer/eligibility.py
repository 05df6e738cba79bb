"""Decides which elements receive a generated identifier."""

from ..config import GeneratorConfig
from ..constants import NON_VISUAL_TAGS
from ..models import Element


def should_annotate(element: Element, config: GeneratorConfig) -> bool:
    """True if element should get the target attribute.

    Elements already carrying the attribute are kept as they are while
    preserve_existing is on. Tag matching is case-insensitive, so a
    ``<Button>`` component counts as ``button``.
    """
    if config.preserve_existing and element.has_attribute(config.attribute_name):
        return False

    tag = element.tag.lower()
    if tag in NON_VISUAL_TAGS:
        return False

    return tag in config.includes
