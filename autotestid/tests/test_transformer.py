"""Tests for the eligibility filter and the transformation planner."""

from autotestid.core.config import GeneratorConfig
from autotestid.core.models import Element, SourcePosition, TransformationType
from autotestid.core.transformer import (
    build_context,
    collect_existing_ids,
    plan_transformations,
    should_annotate,
)


def _element(tag, line, attributes=None, content=None):
    return Element(
        tag=tag,
        attributes=attributes or {},
        content=content,
        position=SourcePosition(line=line, column=1),
    )


# =========================================================================
# Tests: Eligibility
# =========================================================================

class TestEligibility:
    def test_included_tag(self):
        assert should_annotate(_element("button", 1), GeneratorConfig())

    def test_tag_match_is_case_insensitive(self):
        assert should_annotate(_element("Button", 1), GeneratorConfig())

    def test_excluded_tag(self):
        assert not should_annotate(_element("h1", 1), GeneratorConfig())

    def test_existing_attribute_preserved(self):
        element = _element("button", 1, {"data-testid": "keep"})
        assert not should_annotate(element, GeneratorConfig())
        assert should_annotate(element, GeneratorConfig(preserve_existing=False))

    def test_non_visual_tags_never_annotated(self):
        config = GeneratorConfig(include_element_types=("script", "title", "div"))
        assert not should_annotate(_element("script", 1), config)
        assert not should_annotate(_element("title", 1), config)
        assert should_annotate(_element("div", 1), config)

    def test_custom_attribute_name(self):
        config = GeneratorConfig(attribute_name="data-qa")
        assert should_annotate(_element("button", 1, {"data-testid": "x"}), config)
        assert not should_annotate(_element("button", 1, {"data-qa": "x"}), config)


# =========================================================================
# Tests: Planner
# =========================================================================

class TestPlanner:
    def test_one_transformation_per_eligible_element(self):
        config = GeneratorConfig()
        elements = [
            _element("div", 1),
            _element("h1", 2, content="Title"),
            _element("button", 3, content="Save"),
        ]
        context = build_context("Page.jsx", config, component="Page")
        plan = plan_transformations(elements, context, config)

        assert [t.element.tag for t in plan.transformations] == ["div", "button"]
        assert all(t.type is TransformationType.ADD_ATTRIBUTE for t in plan.transformations)
        assert [t.value for t in plan.transformations] == ["test-page-container", "test-page-save-btn"]
        assert plan.transformations[1].position == elements[2].position

    def test_values_are_unique_in_document_order(self):
        config = GeneratorConfig()
        elements = [_element("button", n, content="Save") for n in range(1, 4)]
        context = build_context("Toolbar.jsx", config, component="Toolbar")
        plan = plan_transformations(elements, context, config)

        values = [t.value for t in plan.transformations]
        assert values == ["test-toolbar-save-btn", "test-toolbar-save-btn-1", "test-toolbar-save-btn-2"]
        assert plan.conflicts_resolved == 2
        assert set(values) <= context.existing_ids

    def test_disjoint_from_existing_values(self):
        config = GeneratorConfig()
        elements = [
            _element("button", 1, {"data-testid": "test-save-btn"}, content="Save"),
            _element("button", 2, content="Save"),
        ]
        context = build_context(
            "A.jsx", config, existing_ids=collect_existing_ids(elements, config.attribute_name)
        )
        plan = plan_transformations(elements, context, config)

        assert [t.value for t in plan.transformations] == ["test-save-btn-1"]

    def test_missing_position_is_a_warning(self):
        config = GeneratorConfig()
        elements = [Element(tag="button", attributes={})]
        plan = plan_transformations(elements, build_context("A.jsx", config), config)

        assert plan.transformations == []
        assert [d.severity for d in plan.diagnostics] == ["warning"]

    def test_modify_when_not_preserving(self):
        config = GeneratorConfig(preserve_existing=False)
        elements = [_element("button", 1, {"data-testid": "old"}, content="Save")]
        plan = plan_transformations(elements, build_context("A.jsx", config), config)

        (transformation,) = plan.transformations
        assert transformation.type is TransformationType.MODIFY_ATTRIBUTE
        assert transformation.value == "test-save-btn"

    def test_unchanged_value_is_not_rewritten(self):
        config = GeneratorConfig(preserve_existing=False)
        elements = [_element("button", 1, {"data-testid": "test-save-btn"}, content="Save")]
        context = build_context(
            "A.jsx", config, existing_ids=collect_existing_ids(elements, config.attribute_name)
        )
        plan = plan_transformations(elements, context, config)

        assert plan.transformations == []
        assert plan.conflicts_resolved == 0

    def test_existing_values_reserved_when_not_preserving(self):
        config = GeneratorConfig(preserve_existing=False)
        elements = [
            _element("button", 1, {"data-testid": "test-save-btn"}, content="Edit"),
            _element("button", 2, content="Save"),
        ]
        context = build_context(
            "A.jsx", config, existing_ids=collect_existing_ids(elements, config.attribute_name)
        )
        plan = plan_transformations(elements, context, config)

        assert [t.value for t in plan.transformations] == ["test-edit-btn", "test-save-btn-1"]
        assert plan.transformations[0].type is TransformationType.MODIFY_ATTRIBUTE

    def test_conflicts_reported_as_info(self):
        config = GeneratorConfig()
        elements = [_element("button", n, content="Save") for n in range(1, 3)]
        plan = plan_transformations(elements, build_context("A.jsx", config), config)

        assert [d.severity for d in plan.diagnostics] == ["info"]
        assert "test-save-btn-1" in plan.diagnostics[0].message


class TestContext:
    def test_collect_existing_ids(self):
        elements = [
            _element("div", 1, {"data-testid": "a"}),
            _element("div", 2, {"data-testid": ""}),
            _element("div", 3),
        ]
        assert collect_existing_ids(elements, "data-testid") == {"a"}

    def test_build_context_copies_configuration(self):
        config = GeneratorConfig(prefix="qa", max_id_length=30)
        seed = {"x"}
        context = build_context("A.vue", config, component="A", framework="vue", existing_ids=seed)

        assert context.prefix == "qa"
        assert context.max_id_length == 30
        assert context.component == "A"
        assert context.framework == "vue"
        assert context.existing_ids == {"x"}
        assert context.existing_ids is not seed
