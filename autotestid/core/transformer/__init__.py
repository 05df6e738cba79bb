"""autotestid transformer: eligibility filtering and transformation planning."""

from .eligibility import should_annotate
from .planner import Plan, build_context, collect_existing_ids, plan_transformations

__all__ = [
    "Plan",
    "build_context",
    "collect_existing_ids",
    "plan_transformations",
    "should_annotate",
]
