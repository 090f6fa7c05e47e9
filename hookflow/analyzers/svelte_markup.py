"""Regex-based scanning of Svelte markup blocks.

    {#if user}<Profile {user} />{:else if loading}<Spinner />{:else}<Login />{/if}
    {#each items as item, index (item.id)}<li>{item.title}</li>{:else}<p>Empty</p>{/each}

Block tags are paired on a stack, so blocks nest. Each branch becomes one
element holding the expressions and directives of its direct content.
Known blind spots:

- A ``}`` inside a tag expression (object literals, template literals)
  ends the tag early.
- ``{#await}``, ``{#key}`` and ``{#snippet}`` add no structure; their
  content belongs to the enclosing branch.
- Unclosed blocks are closed at the end of the markup, and stray closing
  tags are ignored.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from hookflow.analyzers.structures import StructureExtractor
from hookflow.analyzers.vue_template import handler_name, template_variables
from hookflow.logging_config import get_logger
from hookflow.models import (
    AttributeReference,
    ConditionalStructure,
    ConditionExpression,
    ElementStructure,
    LoopStructure,
    Structure,
    TemplateBinding,
)

logger = get_logger(__name__)

BLOCK_TAG = re.compile(r"\{([#:/])(if|else|each|await|then|catch|key|snippet)\b([^}]*)\}")
EXPRESSION_TAG = re.compile(r"(?<![=\w])\{(?![#:/@])([^{}]+)\}")
OPEN_TAG = re.compile(r"<([a-zA-Z][\w.:-]*)[\s/>]")

ON_DIRECTIVE = re.compile(r"\bon:([a-zA-Z0-9-]+)(?:\|[a-zA-Z|]+)?=\{([^}]+)\}")
BIND_DIRECTIVE = re.compile(r"\bbind:([a-zA-Z0-9-]+)(?:=\{([^}]+)\})?")
TOGGLE_DIRECTIVE = re.compile(r"\b(class|style):([a-zA-Z0-9-]+)=\{([^}]+)\}")
ATTRIBUTE_EXPRESSION = re.compile(r"(?<=\s)([a-zA-Z][a-zA-Z0-9-]*)=\{([^}]+)\}")
EVENT_ATTRIBUTE = re.compile(r"^on[a-z]+$")

EACH_HEADER = re.compile(r"^(.+?)\s+as\s+(.+?)\s*(?:\(([^)]*)\))?\s*$", re.DOTALL)

TRANSPARENT_BLOCKS = frozenset({"await", "key", "snippet"})


@dataclass
class _Branch:
    kind: str
    expression: str
    start: int
    segments: List[str] = field(default_factory=list)
    children: List[Structure] = field(default_factory=list)

    @property
    def content(self) -> str:
        return "".join(self.segments)


@dataclass
class _Block:
    name: str
    branches: List[_Branch]


class SvelteMarkupExtractor(StructureExtractor):
    """``{#if}`` and ``{#each}`` structures and directive bindings from Svelte markup.

    Args:
        line_offset: 1-based line in the enclosing file where the markup
            starts
    """

    source_kind = "svelte-markup"

    def __init__(self, line_offset: int = 1):
        self.line_offset = line_offset

    def line_of(self, template: str, position: int) -> int:
        return template.count("\n", 0, position) + self.line_offset

    @staticmethod
    def column_of(template: str, position: int) -> int:
        return position - (template.rfind("\n", 0, position) + 1)

    def extract(self, template: str) -> List[Structure]:
        """Top-level block structures, in markup order."""
        if not template:
            return []

        root = _Block("root", [_Branch("root", "", 0)])
        stack = [root]
        position = 0
        for match in BLOCK_TAG.finditer(template):
            stack[-1].branches[-1].segments.append(template[position:match.start()])
            position = match.end()
            marker, name, rest = match.group(1), match.group(2), match.group(3).strip()

            if marker == "#":
                stack.append(_Block(name, [_Branch(name, rest, match.start())]))
            elif marker == ":":
                if len(stack) == 1:
                    logger.debug(f"Orphan {{:{name}}} at line {self.line_of(template, match.start())}")
                    continue
                kind, expression = name, rest
                if name == "else" and rest.startswith("if "):
                    kind, expression = "else-if", rest[3:].strip()
                stack[-1].branches.append(_Branch(kind, expression, match.start()))
            else:
                if len(stack) == 1 or stack[-1].name != name:
                    logger.debug(f"Unmatched {{/{name}}} at line {self.line_of(template, match.start())}")
                    continue
                block = stack.pop()
                self._close(template, block, stack[-1].branches[-1])

        stack[-1].branches[-1].segments.append(template[position:])
        while len(stack) > 1:
            block = stack.pop()
            logger.debug(f"Unclosed {{#{block.name}}} at line {self.line_of(template, block.branches[0].start)}")
            self._close(template, block, stack[-1].branches[-1])

        return root.branches[0].children

    def _close(self, template: str, block: _Block, parent: _Branch) -> None:
        if block.name == "if":
            parent.children.append(self._if_chain(template, block.branches))
        elif block.name == "each":
            parent.children.append(self._each(template, block.branches))
        else:
            for branch in block.branches:
                parent.segments.extend(branch.segments)
                parent.children.extend(branch.children)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _if_chain(self, template: str, branches: List[_Branch]) -> ConditionalStructure:
        """Fold ``{#if}``/``{:else if}``*/``{:else}`` into nested conditionals.

        The outermost structure carries the variables of every link.
        """
        all_variables: List[str] = []
        for branch in branches:
            for name in template_variables(branch.expression):
                if name not in all_variables:
                    all_variables.append(name)

        false_branch: Optional[Structure] = None
        for branch in reversed(branches[1:]):
            element = self._element(template, branch)
            if branch.kind == "else":
                false_branch = element
            else:
                false_branch = self._conditional(template, branch, element, false_branch)

        first = branches[0]
        root = self._conditional(template, first, self._element(template, first), false_branch)
        root.condition.variables = all_variables
        return root

    def _conditional(self, template, branch, element, false_branch) -> ConditionalStructure:
        return ConditionalStructure(
            kind=branch.kind,
            condition=ConditionExpression(
                variables=template_variables(branch.expression),
                expression=branch.expression or "condition",
            ),
            true_branch=element,
            false_branch=false_branch,
            line=self.line_of(template, branch.start),
            column=self.column_of(template, branch.start),
        )

    def _each(self, template: str, branches: List[_Branch]) -> Structure:
        """``{#each}`` as a loop; with an ``{:else}`` branch, wrapped in an ``each-else`` conditional."""
        first = branches[0]
        header = first.expression
        source, loop_variable, index, key = header, None, None, None
        match = EACH_HEADER.match(header)
        if match:
            source = match.group(1).strip()
            binding = match.group(2).strip()
            key = match.group(3).strip() if match.group(3) else None
            if binding[:1] in "{[":
                loop_variable = binding
            else:
                names = [part.strip() for part in binding.split(",")]
                loop_variable = names[0] or None
                if len(names) > 1:
                    index = names[1] or None
        else:
            logger.debug(f"Unrecognized each expression: {header!r}")

        attributes = {"each": header}
        if index:
            attributes["index"] = index
        if key:
            attributes["key"] = key

        condition = ConditionExpression(variables=template_variables(source), expression=source)
        loop = LoopStructure(
            kind="each",
            source=source,
            condition=condition,
            loop_variable=loop_variable,
            body=self._element(template, first),
            attributes=attributes,
            line=self.line_of(template, first.start),
            column=self.column_of(template, first.start),
        )

        fallback = next((branch for branch in branches[1:] if branch.kind == "else"), None)
        if fallback is None:
            return loop
        return ConditionalStructure(
            kind="each-else",
            condition=ConditionExpression(variables=list(condition.variables), expression=source),
            true_branch=loop,
            false_branch=self._element(template, fallback),
            line=loop.line,
            column=loop.column,
        )

    # ------------------------------------------------------------------
    # Elements and bindings
    # ------------------------------------------------------------------

    def _element(self, template: str, branch: _Branch) -> ElementStructure:
        """Element for one branch: its expression tags, directives and nested blocks."""
        content = branch.content
        tag = OPEN_TAG.search(content)

        display_dependencies: List[str] = []
        for match in EXPRESSION_TAG.finditer(content):
            for name in template_variables(match.group(1)):
                if name not in display_dependencies:
                    display_dependencies.append(name)

        return ElementStructure(
            tag_name=tag.group(1) if tag else "fragment",
            display_dependencies=display_dependencies,
            attribute_references=self._attribute_references(content),
            children=list(branch.children),
            line=self.line_of(template, branch.start),
            column=self.column_of(template, branch.start),
        )

    @staticmethod
    def _attribute_references(content: str) -> List[AttributeReference]:
        references = []
        for match in ON_DIRECTIVE.finditer(content):
            name = handler_name(match.group(2))
            if name:
                references.append(AttributeReference(f"on:{match.group(1)}", [name]))
        for match in BIND_DIRECTIVE.finditer(content):
            names = template_variables(match.group(2)) if match.group(2) else [match.group(1)]
            if names:
                references.append(AttributeReference(f"bind:{match.group(1)}", names))
        for match in TOGGLE_DIRECTIVE.finditer(content):
            names = template_variables(match.group(3))
            if names:
                references.append(AttributeReference(f"{match.group(1)}:{match.group(2)}", names))
        for match in ATTRIBUTE_EXPRESSION.finditer(content):
            attribute, expression = match.group(1), match.group(2)
            if EVENT_ATTRIBUTE.match(attribute):
                name = handler_name(expression)
                names = [name] if name else []
            else:
                names = template_variables(expression)
            if names:
                references.append(AttributeReference(attribute, names))
        return references

    def extract_bindings(self, template: str) -> List[TemplateBinding]:
        """Every expression tag, directive and block condition in ``template``."""
        bindings: List[TemplateBinding] = []

        for match in EXPRESSION_TAG.finditer(template):
            expression = match.group(1).strip()
            variables = template_variables(expression)
            if variables:
                bindings.append(TemplateBinding(
                    kind="display",
                    target=self._containing_element(template, match.start()),
                    expression=expression,
                    variables=variables,
                    line=self.line_of(template, match.start()),
                ))

        for match in ATTRIBUTE_EXPRESSION.finditer(template):
            attribute, expression = match.group(1), match.group(2).strip()
            if EVENT_ATTRIBUTE.match(attribute):
                name = handler_name(expression)
                if name:
                    bindings.append(TemplateBinding(
                        kind="event",
                        target=attribute[2:],
                        expression=expression,
                        variables=[name],
                        line=self.line_of(template, match.start()),
                    ))
                continue
            variables = template_variables(expression)
            if variables:
                bindings.append(TemplateBinding(
                    kind="bind",
                    target=attribute,
                    expression=expression,
                    variables=variables,
                    line=self.line_of(template, match.start()),
                ))

        for match in TOGGLE_DIRECTIVE.finditer(template):
            variables = template_variables(match.group(3))
            if variables:
                bindings.append(TemplateBinding(
                    kind="bind",
                    target=f"{match.group(1)}:{match.group(2)}",
                    expression=match.group(3).strip(),
                    variables=variables,
                    line=self.line_of(template, match.start()),
                ))

        for match in ON_DIRECTIVE.finditer(template):
            name = handler_name(match.group(2))
            if name:
                bindings.append(TemplateBinding(
                    kind="event",
                    target=match.group(1),
                    expression=match.group(2).strip(),
                    variables=[name],
                    line=self.line_of(template, match.start()),
                ))

        for match in BIND_DIRECTIVE.finditer(template):
            expression = (match.group(2) or match.group(1)).strip()
            variables = template_variables(expression)
            if variables:
                bindings.append(TemplateBinding(
                    kind="model",
                    target=f"bind:{match.group(1)}",
                    expression=expression,
                    variables=variables[:1],
                    line=self.line_of(template, match.start()),
                ))

        for match in BLOCK_TAG.finditer(template):
            marker, name, rest = match.group(1), match.group(2), match.group(3).strip()
            if marker == "#" and name == "if":
                target, expression = "{#if}", rest
            elif marker == ":" and name == "else" and rest.startswith("if "):
                target, expression = "{:else if}", rest[3:].strip()
            else:
                continue
            variables = template_variables(expression)
            if variables:
                bindings.append(TemplateBinding(
                    kind="condition",
                    target=target,
                    expression=expression,
                    variables=variables,
                    line=self.line_of(template, match.start()),
                ))

        bindings.sort(key=lambda binding: binding.line or 0)
        return bindings

    @staticmethod
    def _containing_element(template: str, position: int) -> str:
        tags = OPEN_TAG.findall(template, 0, position)
        return f"<{tags[-1]}>" if tags else "<element>"
