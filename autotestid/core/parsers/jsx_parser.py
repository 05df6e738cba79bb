"""JSX/TSX parser using tree-sitter.

Walks the tree-sitter AST of JavaScript/TypeScript sources to collect every
embedded JSX element, and writes attribute transformations back into the
source as byte-span splices so that untouched text stays byte-identical.
"""

import json
import logging
import os
import re
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import tree_sitter
import tree_sitter_javascript
import tree_sitter_typescript

from ..constants import FRAMEWORK_REACT, SEVERITY_WARNING
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
    position_from_offset,
)

logger = logging.getLogger(__name__)

_JS_LANGUAGE = tree_sitter.Language(tree_sitter_javascript.language())
_TSX_LANGUAGE = tree_sitter.Language(tree_sitter_typescript.language_tsx())
_TS_LANGUAGE = tree_sitter.Language(tree_sitter_typescript.language_typescript())

# Grammars tried in order per extension; the first clean parse wins.
# Plain .js files may still carry type annotations, hence the TSX fallback.
_GRAMMARS: Dict[str, Tuple[tree_sitter.Language, ...]] = {
    ".js": (_JS_LANGUAGE, _TSX_LANGUAGE),
    ".jsx": (_JS_LANGUAGE, _TSX_LANGUAGE),
    ".tsx": (_TSX_LANGUAGE,),
    ".ts": (_TS_LANGUAGE, _TSX_LANGUAGE),
}
_DEFAULT_GRAMMARS = (_TSX_LANGUAGE, _JS_LANGUAGE, _TS_LANGUAGE)

_ELEMENT_TYPES = ("jsx_element", "jsx_self_closing_element")
_TEMPLATE_SUBSTITUTION_RE = re.compile(r"\$\{.*?\}", re.DOTALL)


class JsxParser:
    """tree-sitter based parser for React components.

    Extracts:
    - jsx_element / jsx_self_closing_element -> Element (document order)
    - Fragments are not elements, their descendants are
    - Member/namespaced tags (<Foo.Bar>, <svg:rect>) are skipped
    """

    framework = FRAMEWORK_REACT
    extensions = (".jsx", ".tsx", ".js", ".ts")

    def can_handle(self, file_path: str) -> bool:
        return file_path.lower().endswith(self.extensions)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, content: str, file_path: str) -> ParseResult:
        """Parse source text into JSX elements."""
        logger.debug(f"Parsing React file: {file_path}")
        try:
            source = content.encode("utf-8")
            tree = self._parse_tree(source, file_path)
            if tree is None:
                logger.error(f"Failed to parse React file {file_path}: syntax errors")
                return failed_parse(
                    self.framework, content, file_path,
                    "Parse error: source contains syntax errors",
                )

            offsets = _OffsetMap(content, source)
            elements: List[Element] = []
            diagnostics: List[Diagnostic] = []

            for node in _iter_jsx_nodes(tree.root_node):
                try:
                    element = self._extract_element(node, source, offsets)
                except Exception as e:
                    diagnostics.append(Diagnostic(
                        message=f"Failed to extract JSX element: {e}",
                        severity=SEVERITY_WARNING,
                        position=offsets.position(node.start_byte),
                    ))
                    continue
                if element is not None:
                    elements.append(element)

            component = self._component_name_from_tree(tree.root_node, source, file_path)
        except Exception as e:
            logger.error(f"Failed to parse React file {file_path}: {e}")
            return failed_parse(self.framework, content, file_path, f"Parse error: {e}")

        logger.info(f"Parsed {len(elements)} elements from {file_path}")
        return ParseResult(
            file_path=file_path,
            framework=self.framework,
            elements=elements,
            diagnostics=diagnostics,
            metadata=build_metadata(self.framework, content, file_path, len(elements), component),
        )

    def _parse_tree(
        self, source: bytes, file_path: Optional[str]
    ) -> Optional[tree_sitter.Tree]:
        """Parse with the first grammar that accepts the source without errors."""
        grammars = _DEFAULT_GRAMMARS
        if file_path:
            _, ext = os.path.splitext(file_path)
            grammars = _GRAMMARS.get(ext.lower(), _DEFAULT_GRAMMARS)

        for language in grammars:
            tree = tree_sitter.Parser(language).parse(source)
            if not tree.root_node.has_error:
                return tree
        return None

    def _extract_element(
        self, node: tree_sitter.Node, source: bytes, offsets: "_OffsetMap"
    ) -> Optional[Element]:
        opening = _opening_tag(node)
        if opening is None:
            return None

        name_node = opening.child_by_field_name("name")
        if name_node is None:
            # Fragment
            return None
        if name_node.type != "identifier":
            return None

        tag = _text(name_node, source)
        if not tag:
            return None

        attributes: Dict[str, str] = {}
        for attr in _attribute_nodes(opening):
            attr_name, value_node = _split_attribute(attr, source)
            attributes[attr_name] = self._attribute_value(value_node, source)

        content = None
        if node.type == "jsx_element":
            parts = [_text(child, source).strip() for child in node.children if child.type == "jsx_text"]
            text = " ".join(" ".join(p for p in parts if p).split())
            content = text or None

        return Element(
            tag=tag,
            attributes=attributes,
            content=content,
            position=offsets.position(node.start_byte),
            framework=self.framework,
        )

    def _attribute_value(self, node: Optional[tree_sitter.Node], source: bytes) -> str:
        """Stringify an attribute value node.

        String literals are taken verbatim, literals are stringified, anything
        dynamic becomes a bracketed placeholder.
        """
        if node is None:
            return ""
        if node.type == "string":
            return _text(node, source)[1:-1]
        if node.type != "jsx_expression":
            # Element used as a value: <Foo icon=<Icon /> />
            return "{...}"

        expression = next((c for c in node.named_children if c.type != "comment"), None)
        if expression is None:
            return ""
        if expression.type == "string":
            return _text(expression, source)[1:-1]
        if expression.type in ("number", "true", "false"):
            return _text(expression, source)
        if expression.type == "identifier":
            return "{" + _text(expression, source) + "}"
        if expression.type == "template_string":
            return _TEMPLATE_SUBSTITUTION_RE.sub("${...}", _text(expression, source)[1:-1])
        return "{...}"

    # ------------------------------------------------------------------
    # Component name
    # ------------------------------------------------------------------

    def extract_component_name(self, content: str, file_path: str) -> Optional[str]:
        """Name of the first top-level component that renders JSX.

        Falls back to the file name when no component is found.
        """
        try:
            source = content.encode("utf-8")
            tree = self._parse_tree(source, file_path)
            if tree is not None:
                return self._component_name_from_tree(tree.root_node, source, file_path)
        except Exception as e:
            logger.debug(f"Could not extract component name: {e}")
        return component_from_path(file_path)

    def _component_name_from_tree(
        self, root: tree_sitter.Node, source: bytes, file_path: str
    ) -> Optional[str]:
        for node in _top_level_declarations(root):
            if node.type in ("function_declaration", "class_declaration"):
                name = _text(node.child_by_field_name("name"), source)
                if name and name[:1].isupper() and _contains_jsx(node):
                    return name
            elif node.type in ("lexical_declaration", "variable_declaration"):
                for declarator in node.named_children:
                    if declarator.type != "variable_declarator":
                        continue
                    name = _text(declarator.child_by_field_name("name"), source)
                    value = declarator.child_by_field_name("value")
                    if name and name[:1].isupper() and value is not None and _contains_jsx(value):
                        return name
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
        """Apply attribute transformations to matching opening tags.

        Transformations are matched to tags by line:column of the opening
        tag. The rewritten source must parse cleanly, otherwise the original
        content is returned with an error diagnostic.
        """
        if not transformations:
            return TransformResult(code=content)

        logger.debug(f"Applying {len(transformations)} transformations to React code")
        try:
            source = content.encode("utf-8")
            tree = self._parse_tree(source, file_path)
            if tree is None:
                return failed_transform(content, "Transform error: source contains syntax errors")

            offsets = _OffsetMap(content, source)
            pending: Dict[str, List[Transformation]] = {}
            for transformation in transformations:
                pending.setdefault(transformation.position.key, []).append(transformation)

            diagnostics: List[Diagnostic] = []
            applied: List[Transformation] = []
            edits: List[Tuple[int, int, bytes, int]] = []

            for node in _iter_jsx_nodes(tree.root_node):
                if not pending:
                    break
                position = offsets.position(node.start_byte)
                matched = pending.pop(position.key, None)
                if not matched:
                    continue
                opening = _opening_tag(node)
                for transformation in matched:
                    try:
                        start, end, text = self._edit_for(opening, transformation, source)
                    except TransformationError as e:
                        diagnostics.append(Diagnostic(
                            message=f"Failed to apply transformation: {e}",
                            severity=SEVERITY_WARNING,
                            position=position,
                        ))
                        continue
                    edits.append((start, end, text.encode("utf-8"), len(edits)))
                    applied.append(transformation)

            for key, unmatched in pending.items():
                for transformation in unmatched:
                    diagnostics.append(Diagnostic(
                        message=f"No <{transformation.element.tag}> opening tag found at {key}",
                        severity=SEVERITY_WARNING,
                        position=transformation.position,
                    ))

            new_source, skipped = _splice(source, edits)
            for start in skipped:
                diagnostics.append(Diagnostic(
                    message="Overlapping edit skipped",
                    severity=SEVERITY_WARNING,
                    position=offsets.position(start),
                ))

            code = new_source.decode("utf-8")
            if self._parse_tree(new_source, file_path) is None:
                logger.error("Rewritten React source no longer parses, keeping original")
                return failed_transform(content, "Transform error: rewritten source failed to parse")
        except Exception as e:
            logger.error(f"Transform error: {e}")
            return failed_transform(content, f"Transform error: {e}")

        logger.info(f"Applied {len(applied)} of {len(transformations)} transformations")
        return TransformResult(code=code, diagnostics=diagnostics, applied=applied)

    def _edit_for(
        self, opening: tree_sitter.Node, transformation: Transformation, source: bytes
    ) -> Tuple[int, int, str]:
        """Compute the (start_byte, end_byte, replacement) splice for one edit."""
        existing = None
        previous = None
        for child in opening.named_children:
            if child.type == "comment":
                continue
            if child.type == "jsx_attribute" and _split_attribute(child, source)[0] == transformation.attribute:
                existing = child
                break
            previous = child
        if previous is None:
            raise TransformationError("opening tag has no name")

        if transformation.type is TransformationType.REMOVE_ATTRIBUTE:
            if existing is None:
                raise TransformationError(f"attribute {transformation.attribute} not present")
            return previous.end_byte, existing.end_byte, ""

        rendered = f"{transformation.attribute}={_jsx_string(transformation.value)}"
        if existing is not None:
            return existing.start_byte, existing.end_byte, rendered

        return previous.end_byte, previous.end_byte, " " + rendered


class _OffsetMap:
    """Converts tree-sitter byte offsets to character based positions."""

    def __init__(self, content: str, source: bytes):
        self._source = source
        self._ascii = len(source) == len(content)
        self._line_starts = line_start_offsets(content)

    def char_offset(self, byte_offset: int) -> int:
        if self._ascii:
            return byte_offset
        return len(self._source[:byte_offset].decode("utf-8", errors="replace"))

    def position(self, byte_offset: int) -> SourcePosition:
        return position_from_offset(self.char_offset(byte_offset), self._line_starts)


def _iter_jsx_nodes(root: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    """Yield JSX element nodes in document (pre-)order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in _ELEMENT_TYPES:
            yield node
        stack.extend(reversed(node.children))


def _opening_tag(node: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    if node.type == "jsx_self_closing_element":
        return node
    for child in node.children:
        if child.type == "jsx_opening_element":
            return child
    return None


def _attribute_nodes(opening: tree_sitter.Node) -> List[tree_sitter.Node]:
    return [child for child in opening.named_children if child.type == "jsx_attribute"]


def _split_attribute(
    attr: tree_sitter.Node, source: bytes
) -> Tuple[str, Optional[tree_sitter.Node]]:
    named = [c for c in attr.named_children if c.type != "comment"]
    name = _text(named[0], source) if named else _text(attr, source)
    value = named[1] if len(named) > 1 else None
    return name, value


def _top_level_declarations(root: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    for child in root.named_children:
        if child.type == "export_statement":
            for sub in child.named_children:
                yield sub
        else:
            yield child


def _contains_jsx(node: tree_sitter.Node) -> bool:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in _ELEMENT_TYPES or current.type == "jsx_fragment":
            return True
        stack.extend(current.children)
    return False


def _splice(
    source: bytes, edits: List[Tuple[int, int, bytes, int]]
) -> Tuple[bytes, List[int]]:
    """Apply edits from the end of the buffer backwards.

    Returns the new buffer and the start offsets of edits skipped because
    they overlap an edit further down the buffer.
    """
    buffer = source
    skipped: List[int] = []
    boundary = len(source)
    for start, end, text, _ in sorted(edits, key=lambda e: (e[0], e[3]), reverse=True):
        if end > boundary:
            skipped.append(start)
            continue
        buffer = buffer[:start] + text + buffer[end:]
        boundary = start
    return buffer, skipped


def _jsx_string(value: str) -> str:
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    return "{" + json.dumps(value) + "}"


def _text(node: Optional[tree_sitter.Node], source: bytes) -> str:
    if node is None:
        return ""
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")
