"""Vue single-file component parser (regex-based).

Splits a .vue file into its top-level sections (template, script, style)
by their opening/closing marker lines, then scans the template section line
by line for opening tags.

Does NOT use tree-sitter. Known limitations of the line-based approach:
- opening tags spanning several lines are not recognised
- several same-name tags nested on one line resolve to the first one
- a nested <template> closes the template section at its closing line
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..constants import FRAMEWORK_VUE, SEVERITY_WARNING
from ..models import (
    Diagnostic,
    Element,
    ParseResult,
    SourcePosition,
    Transformation,
    TransformationType,
    TransformResult,
)
from .base import (
    TransformationError,
    build_metadata,
    component_from_path,
    failed_parse,
    failed_transform,
    line_start_offsets,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

# <template>, <script setup lang="ts">, <style scoped>
_SECTION_OPEN_RE = re.compile(r"^\s*<(template|script|style)(?=[\s>/]|$)", re.IGNORECASE)
_SECTION_CLOSE_RE = re.compile(r"^\s*</(template|script|style)\s*>", re.IGNORECASE)

# Opening tags: <div class="x">, <el-button @click="() => go()">, <br />
# Quoted values may contain ">"
_OPEN_TAG_RE = re.compile(
    r"""<([a-zA-Z][a-zA-Z0-9-]*)"""
    r"""((?:\s+[^\s"'>/=]+(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s"'>]+))?)*)"""
    r"""\s*(/?)>"""
)

# One attribute with its leading whitespace, for in-place edits
_ATTR_SPAN_RE = re.compile(r"""\s+([^\s"'>/=]+)(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s"'>]+))?""")

# name="v", name='v', name=v, bare name, :bound="v", @event="v", v-on:click.prevent="v", #slot
_ATTR_RE = re.compile(
    r"""([:@#]?[A-Za-z_][\w.:-]*)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+)))?"""
)

_COMMENT_OPEN = "<!--"
_COMMENT_CLOSE = "-->"

# export default { name: 'LoginForm' } / defineOptions({ name: "LoginForm" })
_COMPONENT_NAME_RE = re.compile(r"""\bname\s*:\s*['"`]([^'"`]+)['"`]""")


@dataclass
class Section:
    """A top-level section of a Vue SFC.

    start_line/end_line are the 1-based first and last content lines, i.e.
    the lines between the opening and closing markers.
    """
    name: str
    open_line: int
    close_line: Optional[int]
    lines: List[str] = field(default_factory=list)

    @property
    def start_line(self) -> int:
        return self.open_line + 1

    @property
    def end_line(self) -> int:
        return self.open_line + len(self.lines)

    @property
    def content(self) -> str:
        return "\n".join(self.lines)


def split_sections(content: str) -> Dict[str, Section]:
    """Split an SFC into named sections.

    The first open/close pair wins per section name; later sections with the
    same name are ignored. An unterminated section runs to end of file.
    """
    lines = content.split("\n")
    sections: Dict[str, Section] = {}
    current: Optional[str] = None
    open_index = 0

    for index, line in enumerate(lines):
        if current is None:
            match = _SECTION_OPEN_RE.match(line)
            if match and match.group(1).lower() not in sections:
                current = match.group(1).lower()
                open_index = index
            continue

        match = _SECTION_CLOSE_RE.match(line)
        if match and match.group(1).lower() == current:
            sections[current] = Section(
                name=current,
                open_line=open_index + 1,
                close_line=index + 1,
                lines=lines[open_index + 1:index],
            )
            current = None

    if current is not None:
        sections[current] = Section(
            name=current,
            open_line=open_index + 1,
            close_line=None,
            lines=lines[open_index + 1:],
        )

    return sections


def parse_attributes(attributes_string: str) -> Dict[str, str]:
    """Parse the attribute list of an opening tag."""
    attributes: Dict[str, str] = {}
    if not attributes_string or not attributes_string.strip():
        return attributes

    for match in _ATTR_RE.finditer(attributes_string):
        name, double_quoted, single_quoted, unquoted = match.groups()
        if double_quoted is not None:
            attributes[name] = double_quoted
        elif single_quoted is not None:
            attributes[name] = single_quoted
        else:
            attributes[name] = unquoted or ""
    return attributes


def mask_comments(line: str, in_comment: bool = False) -> Tuple[str, bool]:
    """Blank out HTML comment text on one line, keeping columns.

    Args:
        line: Template line
        in_comment: Whether the line starts inside an open comment

    Returns:
        (masked line, whether a comment is still open at end of line)
    """
    chars = list(line)
    index = 0
    while index < len(line):
        if not in_comment:
            start = line.find(_COMMENT_OPEN, index)
            if start == -1:
                break
            in_comment = True
            index = start
            continue

        end = line.find(_COMMENT_CLOSE, index)
        stop = len(line) if end == -1 else end + len(_COMMENT_CLOSE)
        chars[index:stop] = " " * (stop - index)
        if end == -1:
            break
        in_comment = False
        index = stop

    return "".join(chars), in_comment


class VueParser:
    """Regex-based Vue SFC parser extracting template elements.

    Each opening tag in the template section becomes one Element with
    file-relative position.
    """

    framework = FRAMEWORK_VUE
    extensions = (".vue",)

    def can_handle(self, file_path: str) -> bool:
        return file_path.lower().endswith(self.extensions)

    def parse(self, content: str, file_path: str) -> ParseResult:
        """Parse the template section of an SFC into elements."""
        logger.debug(f"Parsing Vue file: {file_path}")
        try:
            sections = split_sections(content)
            component = self._component_name(sections, file_path)

            template = sections.get("template")
            if template is None:
                logger.warning(f"No template section found in {file_path}")
                return ParseResult(
                    file_path=file_path,
                    framework=self.framework,
                    elements=[],
                    diagnostics=[Diagnostic(
                        message="No template section found in Vue single-file component",
                        severity=SEVERITY_WARNING,
                    )],
                    metadata=build_metadata(self.framework, content, file_path, 0, component),
                )

            elements = self._parse_template(template, line_start_offsets(content))
        except Exception as e:
            logger.error(f"Failed to parse Vue file {file_path}: {e}")
            return failed_parse(self.framework, content, file_path, f"Parse error: {e}")

        logger.info(f"Parsed {len(elements)} elements from {file_path}")
        return ParseResult(
            file_path=file_path,
            framework=self.framework,
            elements=elements,
            diagnostics=[],
            metadata=build_metadata(self.framework, content, file_path, len(elements), component),
        )

    def _parse_template(self, template: Section, line_starts: List[int]) -> List[Element]:
        elements: List[Element] = []
        in_comment = False

        for index, raw_line in enumerate(template.lines):
            line, in_comment = mask_comments(raw_line, in_comment)
            if not line.strip():
                continue

            for match in _OPEN_TAG_RE.finditer(line):
                tag = match.group(1)
                if match.group(3):
                    # Self-closing
                    continue

                content = None
                content_match = re.match(
                    rf"([^<]*)</{re.escape(tag)}\s*>",
                    line[match.end():],
                )
                if content_match:
                    content = " ".join(content_match.group(1).split()) or None

                line_number = template.start_line + index
                elements.append(Element(
                    tag=tag,
                    attributes=parse_attributes(match.group(2) or ""),
                    content=content,
                    position=SourcePosition(
                        line=line_number,
                        column=match.start() + 1,
                        offset=line_starts[line_number - 1] + match.start(),
                    ),
                    framework=self.framework,
                ))

        return elements

    def extract_component_name(self, content: str, file_path: str) -> Optional[str]:
        """Component name from the script section, else the file name."""
        try:
            return self._component_name(split_sections(content), file_path)
        except Exception as e:
            logger.debug(f"Could not extract component name: {e}")
            return component_from_path(file_path)

    def _component_name(self, sections: Dict[str, Section], file_path: str) -> Optional[str]:
        script = sections.get("script")
        if script is not None:
            match = _COMPONENT_NAME_RE.search(script.content)
            if match:
                return match.group(1)
        return component_from_path(file_path)

    # ------------------------------------------------------------------
    # Rewriting
    # ------------------------------------------------------------------

    def apply_transformations(
        self,
        content: str,
        transformations: Sequence[Transformation],
        file_path: Optional[str] = None,
    ) -> TransformResult:
        """Apply transformations to the template section only.

        Edits run bottom-up (descending line, then column) so an edit never
        shifts the lines or columns an earlier edit relies on. All other
        sections are left byte-identical.
        """
        if not transformations:
            return TransformResult(code=content)

        logger.debug(f"Applying {len(transformations)} transformations to Vue file")
        try:
            sections = split_sections(content)
            template = sections.get("template")
            if template is None:
                return failed_transform(content, "No template section found for transformation")

            lines = list(template.lines)
            diagnostics: List[Diagnostic] = []
            applied: List[Transformation] = []

            ordered = sorted(
                transformations,
                key=lambda t: (t.position.line, t.position.column),
                reverse=True,
            )
            for transformation in ordered:
                relative = transformation.position.line - template.start_line
                try:
                    if not 0 <= relative < len(lines):
                        raise TransformationError(
                            f"line {transformation.position.line} is outside the template section"
                        )
                    lines[relative] = self._apply_to_line(lines[relative], transformation)
                except TransformationError as e:
                    diagnostics.append(Diagnostic(
                        message=f"Failed to apply transformation: {e}",
                        severity=SEVERITY_WARNING,
                        position=transformation.position,
                    ))
                    continue
                applied.append(transformation)

            if not applied:
                return TransformResult(code=content, diagnostics=diagnostics, applied=[])

            code = self._reconstruct(content, template, lines)
            if set(split_sections(code)) != set(sections):
                logger.error("Rewritten Vue file changed its section layout, keeping original")
                return failed_transform(content, "Transform error: rewritten file changed its section layout")
        except Exception as e:
            logger.error(f"Transform error: {e}")
            return failed_transform(content, f"Transform error: {e}")

        logger.info(f"Applied {len(applied)} of {len(transformations)} transformations")
        return TransformResult(code=code, diagnostics=diagnostics, applied=applied)

    def _apply_to_line(self, line: str, transformation: Transformation) -> str:
        tag = transformation.element.tag
        tag_re = re.compile(rf"<{re.escape(tag)}(?=[\s>/]|$)")

        match = tag_re.match(line, max(transformation.position.column - 1, 0))
        if match is None:
            match = tag_re.search(line)
        if match is None:
            raise TransformationError(f"could not find opening tag <{tag}> in line")

        start = match.start()
        opening_match = _OPEN_TAG_RE.match(line, start)
        if opening_match is None:
            raise TransformationError(f"opening tag <{tag}> does not end on its line")
        # Up to, not including, the closing ">"
        tag_end = opening_match.end() - 1
        opening = line[start:tag_end]

        existing = next(
            (
                attribute
                for attribute in _ATTR_SPAN_RE.finditer(opening, match.end() - start)
                if attribute.group(1) == transformation.attribute
            ),
            None,
        )

        if transformation.type is TransformationType.REMOVE_ATTRIBUTE:
            if existing is None:
                raise TransformationError(f"attribute {transformation.attribute} not present")
            updated = opening[:existing.start()] + opening[existing.end():]
            return line[:start] + updated + line[tag_end:]

        value = transformation.value.replace('"', "&quot;")
        rendered = f'{transformation.attribute}="{value}"'

        if existing is not None:
            updated = opening[:existing.start()] + opening[existing.start()] + rendered + opening[existing.end():]
        else:
            body, self_closing = opening, ""
            if opening_match.group(3):
                body, self_closing = body[:-1], "/"
            stripped = body.rstrip()
            updated = stripped + " " + rendered + body[len(stripped):] + self_closing

        return line[:start] + updated + line[tag_end:]

    @staticmethod
    def _reconstruct(content: str, template: Section, template_lines: List[str]) -> str:
        """Splice new template lines back between the recorded section lines."""
        lines = content.split("\n")
        before = lines[:template.start_line - 1]
        after = lines[template.end_line:]
        return "\n".join(before + template_lines + after)
