"""Tests for the structural Vue single-file component parser."""

from autotestid.core.models import (
    Element,
    SourcePosition,
    Transformation,
    TransformationType,
)
from autotestid.core.parsers import detect_framework, parse_source
from autotestid.core.parsers.vue_parser import (
    VueParser,
    mask_comments,
    parse_attributes,
    split_sections,
)


# =========================================================================
# Sample SFC fixtures
# =========================================================================

LOGIN_FORM_SFC = '''<template>
  <div class="login-form">
    <input v-model="email" type="email" placeholder="Email" />
    <button type="submit" @click="login">Sign In</button>
  </div>
</template>

<script>
export default {
  name: 'LoginForm',
}
</script>

<style scoped>
.login-form { display: flex; }
</style>
'''

LAYOUT_SFC = '''<template>
  <div class="page">
    <header class="top">
      <h1>Title</h1>
      <button class="menu">Menu</button>
    </header>
    <main>
      <p>Body text</p>
      <section>
        <button class="save">Save</button>
      </section>
    </main>
  </div>
</template>
'''

SCRIPT_ONLY_SFC = '''<script setup>
const count = 1
</script>
'''

COMMENTED_SFC = '''<template>
  <!-- <button>Hidden</button> -->
  <span>Shown</span>
</template>
'''

HANDLERS_SFC = '''<template>
  <div>
    <button @click="() => save()">Save</button>
    <button :disabled="count > 0" class="next">Next</button>
  </div>
</template>
'''

BLOCK_COMMENT_SFC = '''<template>
  <div>
    <span>Shown</span> <!-- <button>Inline</button> -->
    <!--
    <button>Hidden</button>
    -->
    <a href="/home">Home</a>
  </div>
</template>
'''

UNTERMINATED_SFC = '''<template>
  <div>
    <a href="/home">Home</a>
'''


def _add(element: Element, value: str, kind=TransformationType.ADD_ATTRIBUTE) -> Transformation:
    return Transformation(
        type=kind,
        element=element,
        attribute="data-testid",
        value=value,
        position=element.position,
    )


# =========================================================================
# Tests: Sections
# =========================================================================

class TestSections:
    def test_detect(self):
        assert detect_framework("components/LoginForm.vue") == "vue"

    def test_split(self):
        sections = split_sections(LOGIN_FORM_SFC)
        assert set(sections) == {"template", "script", "style"}

        template = sections["template"]
        assert template.open_line == 1
        assert template.close_line == 6
        assert template.start_line == 2
        assert template.end_line == 5

        assert sections["style"].open_line == 14

    def test_first_pair_wins(self):
        content = "<script>\na\n</script>\n<script>\nb\n</script>\n"
        sections = split_sections(content)
        assert sections["script"].lines == ["a"]

    def test_unterminated_section_runs_to_end(self):
        sections = split_sections(UNTERMINATED_SFC)
        assert sections["template"].close_line is None
        assert sections["template"].lines[-1] == ""

    def test_parse_attributes(self):
        attrs = parse_attributes(''' class="a b" :disabled='busy' @click.prevent="go" v-if="ok" #footer hidden''')
        assert attrs == {
            "class": "a b",
            ":disabled": "busy",
            "@click.prevent": "go",
            "v-if": "ok",
            "#footer": "",
            "hidden": "",
        }

    def test_parse_attributes_empty(self):
        assert parse_attributes("") == {}
        assert parse_attributes("   ") == {}

    def test_parse_attributes_unquoted(self):
        assert parse_attributes(" type=button disabled") == {"type": "button", "disabled": ""}

    def test_mask_comments(self):
        assert mask_comments("a <!-- b --> c") == ("a" + " " * 12 + "c", False)
        assert mask_comments("a <!-- b") == ("a" + " " * 7, True)
        assert mask_comments("b --> <i>", in_comment=True) == (" " * 6 + "<i>", False)


# =========================================================================
# Tests: Template elements
# =========================================================================

class TestVueElements:
    def test_elements(self):
        result = parse_source(LOGIN_FORM_SFC, "LoginForm.vue")
        assert not result.has_errors
        # Self-closing <input /> is not collected
        assert [e.tag for e in result.elements] == ["div", "button"]

    def test_file_relative_positions(self):
        result = parse_source(LOGIN_FORM_SFC, "LoginForm.vue")
        div, button = result.elements
        assert (div.position.line, div.position.column) == (2, 3)
        assert (button.position.line, button.position.column) == (4, 5)
        assert LOGIN_FORM_SFC[button.position.offset:].startswith("<button")

    def test_attributes_and_inline_content(self):
        result = parse_source(LOGIN_FORM_SFC, "LoginForm.vue")
        div, button = result.elements
        assert div.attributes == {"class": "login-form"}
        assert div.content is None
        assert button.attributes == {"type": "submit", "@click": "login"}
        assert button.content == "Sign In"

    def test_comment_lines_skipped(self):
        result = parse_source(COMMENTED_SFC, "Note.vue")
        assert [e.tag for e in result.elements] == ["span"]

    def test_mid_line_and_block_comments_skipped(self):
        result = parse_source(BLOCK_COMMENT_SFC, "Note.vue")
        assert [e.tag for e in result.elements] == ["div", "span", "a"]
        assert result.elements[-1].position.line == 7

    def test_greater_than_inside_attribute_values(self):
        result = parse_source(HANDLERS_SFC, "Toolbar.vue")
        _, save, next_button = result.elements
        assert save.attributes == {"@click": "() => save()"}
        assert save.content == "Save"
        assert next_button.attributes == {":disabled": "count > 0", "class": "next"}
        assert next_button.content == "Next"

    def test_missing_template_is_a_warning(self):
        result = parse_source(SCRIPT_ONLY_SFC, "Counter.vue")
        assert result.elements == []
        assert not result.has_errors
        assert [d.severity for d in result.diagnostics] == ["warning"]

    def test_component_name_from_script(self):
        result = parse_source(LOGIN_FORM_SFC, "components/Other.vue")
        assert result.metadata["component"] == "LoginForm"

    def test_component_name_from_file(self):
        assert VueParser().extract_component_name(LAYOUT_SFC, "views/HomePage.vue") == "HomePage"


# =========================================================================
# Tests: Rewriting
# =========================================================================

class TestVueRewrite:
    def test_insert_before_closing_bracket(self):
        parser = VueParser()
        button = parser.parse(LOGIN_FORM_SFC, "LoginForm.vue").elements[1]
        result = parser.apply_transformations(LOGIN_FORM_SFC, [_add(button, "sign-btn")])

        assert not result.has_errors
        lines = result.code.split("\n")
        assert lines[3] == '    <button type="submit" @click="login" data-testid="sign-btn">Sign In</button>'

    def test_other_sections_untouched(self):
        parser = VueParser()
        div = parser.parse(LOGIN_FORM_SFC, "LoginForm.vue").elements[0]
        result = parser.apply_transformations(LOGIN_FORM_SFC, [_add(div, "root")])

        before = LOGIN_FORM_SFC.split("\n")
        after = result.code.split("\n")
        assert len(before) == len(after)
        assert [i for i, (a, b) in enumerate(zip(before, after)) if a != b] == [1]
        assert after[1] == '  <div class="login-form" data-testid="root">'

    def test_edit_ordering_keeps_earlier_lines_intact(self):
        parser = VueParser()
        elements = parser.parse(LAYOUT_SFC, "Layout.vue").elements
        by_line = {e.position.line: e for e in elements}
        first, second = by_line[5], by_line[10]

        original = LAYOUT_SFC.split("\n")

        only_second = parser.apply_transformations(LAYOUT_SFC, [_add(second, "save-btn")]).code.split("\n")
        assert only_second[4] == original[4]

        both = parser.apply_transformations(
            LAYOUT_SFC, [_add(first, "menu-btn"), _add(second, "save-btn")]
        ).code.split("\n")
        assert both[4] == '      <button class="menu" data-testid="menu-btn">Menu</button>'
        assert both[9] == '        <button class="save" data-testid="save-btn">Save</button>'
        unchanged = [i for i in range(len(original)) if i not in (4, 9)]
        assert all(both[i] == original[i] for i in unchanged)

    def test_modify_existing(self):
        source = '<template>\n  <span data-testid="old" class="x">Hi</span>\n</template>\n'
        parser = VueParser()
        span = parser.parse(source, "A.vue").elements[0]
        result = parser.apply_transformations(
            source, [_add(span, "new", TransformationType.MODIFY_ATTRIBUTE)]
        )
        assert result.code == '<template>\n  <span data-testid="new" class="x">Hi</span>\n</template>\n'

    def test_remove_existing(self):
        source = '<template>\n  <span class="x" data-testid="old">Hi</span>\n</template>\n'
        parser = VueParser()
        span = parser.parse(source, "A.vue").elements[0]
        result = parser.apply_transformations(
            source, [_add(span, "", TransformationType.REMOVE_ATTRIBUTE)]
        )
        assert result.code == '<template>\n  <span class="x">Hi</span>\n</template>\n'

    def test_insert_after_arrow_function_handler(self):
        parser = VueParser()
        _, save, next_button = parser.parse(HANDLERS_SFC, "Toolbar.vue").elements
        result = parser.apply_transformations(
            HANDLERS_SFC, [_add(save, "save-btn"), _add(next_button, "next-btn")]
        )

        assert not result.has_errors
        lines = result.code.split("\n")
        assert lines[2] == '    <button @click="() => save()" data-testid="save-btn">Save</button>'
        assert lines[3] == '    <button :disabled="count > 0" class="next" data-testid="next-btn">Next</button>'

    def test_modify_after_arrow_function_handler(self):
        source = '<template>\n  <a @click="() => go()" data-testid="old">Go</a>\n</template>\n'
        parser = VueParser()
        link = parser.parse(source, "A.vue").elements[0]
        result = parser.apply_transformations(
            source, [_add(link, "new", TransformationType.MODIFY_ATTRIBUTE)]
        )
        assert result.code == '<template>\n  <a @click="() => go()" data-testid="new">Go</a>\n</template>\n'

    def test_self_closing_insert(self):
        source = '<template>\n  <input type="text" />\n</template>\n'
        element = Element(tag="input", attributes={}, position=SourcePosition(line=2, column=3))
        result = VueParser().apply_transformations(source, [_add(element, "field")])
        assert result.code == '<template>\n  <input type="text" data-testid="field" />\n</template>\n'

    def test_quotes_are_escaped(self):
        source = '<template>\n  <span>Hi</span>\n</template>\n'
        parser = VueParser()
        span = parser.parse(source, "A.vue").elements[0]
        result = parser.apply_transformations(source, [_add(span, 'a"b')])
        assert '<span data-testid="a&quot;b">Hi</span>' in result.code

    def test_transformation_outside_template(self):
        parser = VueParser()
        ghost = Element(tag="div", attributes={}, position=SourcePosition(line=10, column=1))
        result = parser.apply_transformations(LOGIN_FORM_SFC, [_add(ghost, "ghost")])
        assert result.code == LOGIN_FORM_SFC
        assert [d.severity for d in result.diagnostics] == ["warning"]

    def test_missing_tag_on_line(self):
        parser = VueParser()
        ghost = Element(tag="table", attributes={}, position=SourcePosition(line=2, column=3))
        result = parser.apply_transformations(LOGIN_FORM_SFC, [_add(ghost, "ghost")])
        assert result.code == LOGIN_FORM_SFC
        assert result.applied == []

    def test_no_template(self):
        ghost = Element(tag="div", attributes={}, position=SourcePosition(line=1, column=1))
        result = VueParser().apply_transformations(SCRIPT_ONLY_SFC, [_add(ghost, "x")])
        assert result.code == SCRIPT_ONLY_SFC
        assert result.has_errors
