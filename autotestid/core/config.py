"""Generator configuration.

GeneratorConfig is the read-only configuration snapshot the engine works
from. It is built once per invocation (from a mapping or a YAML file) and
shared by reference across every file pass.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .constants import (
    DEFAULT_ATTRIBUTE_NAME,
    DEFAULT_FRAMEWORKS,
    DEFAULT_INCLUDE_ELEMENT_TYPES,
    DEFAULT_MAX_ID_LENGTH,
    DEFAULT_PREFIX,
    KEBAB_CASE,
)
from .models import CustomRule, NamingStrategy

logger = logging.getLogger(__name__)

# camelCase keys used by the JSON configuration format -> field names
_KEY_ALIASES = {
    "attributeName": "attribute_name",
    "namingStrategy": "naming_strategy",
    "includeElementTypes": "include_element_types",
    "customRules": "custom_rules",
    "conflictResolution": "conflict_resolution",
    "maxIdLength": "max_id_length",
    "preserveExisting": "preserve_existing",
}


@dataclass(frozen=True)
class GeneratorConfig:
    """Configuration consumed by the engine. Never mutated by the core."""

    attribute_name: str = DEFAULT_ATTRIBUTE_NAME
    frameworks: Tuple[str, ...] = tuple(DEFAULT_FRAMEWORKS)
    naming_strategy: NamingStrategy = field(default_factory=NamingStrategy)
    prefix: Optional[str] = DEFAULT_PREFIX
    include_element_types: Tuple[str, ...] = tuple(DEFAULT_INCLUDE_ELEMENT_TYPES)
    custom_rules: Tuple[CustomRule, ...] = ()
    conflict_resolution: str = "suffix"
    max_id_length: int = DEFAULT_MAX_ID_LENGTH
    preserve_existing: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "GeneratorConfig":
        """Merge a partial configuration mapping over the defaults.

        Accepts both snake_case field names and the camelCase keys of the
        JSON configuration format. Unknown keys are ignored with a warning.
        """
        if not data:
            return cls()

        known = set(cls.__dataclass_fields__)
        values: Dict[str, Any] = {}
        for raw_key, value in data.items():
            key = _KEY_ALIASES.get(raw_key, raw_key)
            if key not in known:
                logger.warning(f"Ignoring unknown configuration key: {raw_key}")
                continue
            values[key] = value

        if "naming_strategy" in values:
            values["naming_strategy"] = _coerce_naming_strategy(values["naming_strategy"])
        if "custom_rules" in values:
            values["custom_rules"] = _coerce_custom_rules(values["custom_rules"])
        for key in ("frameworks", "include_element_types"):
            if key in values:
                values[key] = tuple(values[key] or ())
        if "max_id_length" in values:
            values["max_id_length"] = int(values["max_id_length"])

        return cls(**values)

    @property
    def includes(self) -> frozenset:
        return frozenset(tag.lower() for tag in self.include_element_types)


def _coerce_naming_strategy(value: Any) -> NamingStrategy:
    if isinstance(value, NamingStrategy):
        return value
    if isinstance(value, str):
        return NamingStrategy(type=value)
    if isinstance(value, Mapping):
        return NamingStrategy(
            type=value.get("type", KEBAB_CASE),
            custom_transform=value.get("custom_transform") or value.get("customTransform"),
        )
    raise TypeError(f"Unsupported naming strategy: {value!r}")


def _coerce_custom_rules(value: Any) -> Tuple[CustomRule, ...]:
    rules: List[CustomRule] = []
    for rule in value or ():
        if isinstance(rule, CustomRule):
            rules.append(rule)
        elif isinstance(rule, Mapping):
            rules.append(CustomRule(
                selector=rule["selector"],
                generator=rule["generator"],
                priority=int(rule.get("priority", 0)),
            ))
        else:
            raise TypeError(f"Unsupported custom rule: {rule!r}")
    return tuple(rules)


def load_config(path: str | Path) -> GeneratorConfig:
    """Load a YAML configuration file merged over the defaults.

    Custom rules carry callables and cannot be expressed in YAML; pass them
    to GeneratorConfig.from_dict instead.

    Args:
        path: Path to the YAML file

    Returns:
        GeneratorConfig (defaults when the file does not exist)
    """
    config_path = Path(path)
    if not config_path.exists():
        logger.warning(f"Config file not found at {config_path}, using defaults")
        return GeneratorConfig()

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, Mapping):
        raise ValueError(f"Config file {config_path} must contain a mapping")

    logger.debug(f"Loaded configuration from {config_path}: {sorted(data)}")
    return GeneratorConfig.from_dict(data)
