"""Regex-based scanning of Vue-style template markup.

This is a pragmatic stand-in for a real template parser and has known blind
spots:

- Elements are matched up to the first closing tag with the same name, so
  nested same-name elements inside a conditional element cut it short.
- A ``v-else-if``/``v-else`` element joins the preceding chain only when the
  text between the two elements is whitespace and closing tags. Comments,
  text or sibling elements in between start a new, independent conditional.
- Elements carrying both ``v-for`` and ``v-if`` are reported once, as loops,
  with the condition stored in the loop's ``attributes``.
"""

import re
from typing import List, Optional, Tuple

from hookflow.analyzers.structures import TEMPLATE_KEYWORDS, StructureExtractor
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

CONDITIONAL_ELEMENT = re.compile(
    r"<([a-zA-Z0-9-]+)([^>]*?\b(v-if|v-else-if|v-else)(?:=[\"']([^\"']+)[\"'])?[^>]*)>(.*?)</\1>",
    re.DOTALL,
)
LOOP_ELEMENT = re.compile(
    r"<([a-zA-Z0-9-]+)([^>]*?v-for=[\"']([^\"']+)[\"'][^>]*)>(.*?)</\1>",
    re.DOTALL,
)
LOOP_SOURCE = re.compile(r"\s+(?:in|of)\s+([a-zA-Z0-9_.]+)")
LOOP_VARIABLE = re.compile(r"^(\([^)]+\)|[a-zA-Z0-9_]+)\s+(?:in|of)")
LOOP_CONDITION = re.compile(r"v-if=[\"']([^\"']+)[\"']")

MUSTACHE = re.compile(r"\{\{\s*([^}]+?)\s*\}\}")
V_BIND = re.compile(r"(?<![\w-])(?:v-bind:|:)([a-zA-Z0-9-]+)=[\"']([^\"']+)[\"']")
V_ON = re.compile(r"(?<![\w-])(?:v-on:|@)([a-zA-Z0-9-]+)(?:\.[a-zA-Z]+)*=[\"']([^\"']+)[\"']")
V_MODEL = re.compile(r"v-model(?:\.[a-zA-Z]+)?=[\"']([^\"']+)[\"']")
V_CONDITION = re.compile(r"\bv-(if|else-if|show)=[\"']([^\"']+)[\"']")
OPEN_TAG = re.compile(r"<(\w[\w-]*)(?:\s|>)")

# Whitespace and closing tags only: the glue allowed between chain links
CHAIN_GLUE = re.compile(r"^(?:\s|</[a-zA-Z0-9-]+\s*>)*$")

_STRING_LITERAL = re.compile(r"'[^']*'|\"[^\"]*\"|`[^`]*`")
_IDENTIFIER = re.compile(r"(?<![.\w$])([A-Za-z_$][\w$]*)")
_OBJECT_KEY = re.compile(r"[{,]\s*$")
_FIRST_IDENTIFIER = re.compile(r"^([a-zA-Z_$][a-zA-Z0-9_$]*)")
_SIMPLE_COMPARISON = re.compile(r"^([a-zA-Z0-9_.]+\s*[=!<>]+)")


def template_variables(expression: str) -> List[str]:
    """Root identifiers read by a template expression.

    Property names (``user.name`` yields only ``user``), string contents,
    object-literal keys and keywords are skipped.
    """
    stripped = _STRING_LITERAL.sub("''", expression)
    variables: List[str] = []
    for match in _IDENTIFIER.finditer(stripped):
        name = match.group(1)
        if name in TEMPLATE_KEYWORDS or name in variables:
            continue
        rest = stripped[match.end():].lstrip()
        if rest.startswith(":") and _OBJECT_KEY.search(stripped[:match.start()]):
            continue
        variables.append(name)
    return variables


def handler_name(expression: str) -> Optional[str]:
    """First identifier of a handler expression (``increment`` for ``increment(1)``)."""
    match = _FIRST_IDENTIFIER.match(re.sub(r"\([^)]*\)$", "", expression.strip()))
    return match.group(1) if match else None


class TemplateStructureExtractor(StructureExtractor):
    """Conditional/loop structures and directive bindings from raw markup.

    Args:
        line_offset: 1-based line in the enclosing file where the template
            string starts
    """

    source_kind = "markup"

    def __init__(self, line_offset: int = 1):
        self.line_offset = line_offset

    def line_of(self, template: str, position: int) -> int:
        return template.count("\n", 0, position) + self.line_offset

    def extract(self, template: str) -> List[Structure]:
        """Conditional chains and loops, ordered by position in the markup."""
        if not template:
            return []
        positioned = self._conditionals(template) + self._loops(template)
        positioned.sort(key=lambda item: item[0])
        return [structure for _, structure in positioned]

    def extract_conditionals(self, template: str) -> List[ConditionalStructure]:
        return [structure for _, structure in self._conditionals(template)]

    def extract_loops(self, template: str) -> List[LoopStructure]:
        return [structure for _, structure in self._loops(template)]

    # ------------------------------------------------------------------
    # Conditionals
    # ------------------------------------------------------------------

    def _conditionals(self, template: str) -> List[Tuple[int, ConditionalStructure]]:
        links = []
        for match in CONDITIONAL_ELEMENT.finditer(template):
            if "v-for=" in match.group(2):
                continue
            links.append(match)

        structures = []
        index = 0
        while index < len(links):
            first = links[index]
            if first.group(3) != "v-if":
                logger.debug(f"Orphan {first.group(3)} at line {self.line_of(template, first.start())}")
                index += 1
                continue

            chain = [first]
            index += 1
            while index < len(links) and links[index].group(3) in ("v-else-if", "v-else"):
                glue = template[chain[-1].end():links[index].start()]
                if not CHAIN_GLUE.match(glue):
                    break
                chain.append(links[index])
                index += 1

            structures.append((first.start(), self._chain_structure(template, chain)))
        return structures

    def _chain_structure(self, template: str, chain: List[re.Match]) -> ConditionalStructure:
        """Fold ``v-if``/``v-else-if``*/``v-else`` links into nested conditionals.

        The outermost structure carries the variables of every link so that
        consumers see everything the chain depends on.
        """
        all_variables: List[str] = []
        for link in chain:
            for name in template_variables(link.group(4) or ""):
                if name not in all_variables:
                    all_variables.append(name)

        false_branch: Optional[Structure] = None
        for link in reversed(chain[1:]):
            element = self._element(template, link)
            if link.group(3) == "v-else":
                false_branch = element
            else:
                false_branch = self._conditional(template, link, element, false_branch)

        first = chain[0]
        root = self._conditional(template, first, self._element(template, first), false_branch)
        root.condition.variables = all_variables
        return root

    def _conditional(self, template, link, element, false_branch) -> ConditionalStructure:
        condition = (link.group(4) or "").strip()
        return ConditionalStructure(
            kind=link.group(3),
            condition=ConditionExpression(
                variables=template_variables(condition),
                expression=condition or "condition",
            ),
            true_branch=element,
            false_branch=false_branch,
            line=self.line_of(template, link.start()),
            column=link.start() - (template.rfind("\n", 0, link.start()) + 1),
        )

    # ------------------------------------------------------------------
    # Loops
    # ------------------------------------------------------------------

    def _loops(self, template: str) -> List[Tuple[int, LoopStructure]]:
        structures = []
        for match in LOOP_ELEMENT.finditer(template):
            for_expression = match.group(3).strip()
            source_match = LOOP_SOURCE.search(for_expression)
            if source_match is None:
                logger.debug(f"Unrecognized v-for expression: {for_expression!r}")
                continue

            source = source_match.group(1)
            variable_match = LOOP_VARIABLE.match(for_expression)
            loop_variable = None
            if variable_match:
                loop_variable = variable_match.group(1).strip("()").split(",")[0].strip()

            attributes = {"v-for": for_expression}
            condition_match = LOOP_CONDITION.search(match.group(2))
            if condition_match:
                attributes["v-if"] = condition_match.group(1).strip()

            root = source.split(".")[0]
            structures.append((match.start(), LoopStructure(
                kind="v-for",
                source=source,
                condition=ConditionExpression(variables=[root], expression=source),
                loop_variable=loop_variable,
                body=self._element(template, match),
                attributes=attributes,
                line=self.line_of(template, match.start()),
                column=match.start() - (template.rfind("\n", 0, match.start()) + 1),
            )))
        return structures

    # ------------------------------------------------------------------
    # Elements and bindings
    # ------------------------------------------------------------------

    def _element(self, template: str, match: re.Match) -> ElementStructure:
        """Element leaf for a matched tag: mustache reads and bound attributes."""
        tag_name = match.group(1)
        attributes = match.group(2)
        content = match.groups()[-1]

        display_dependencies: List[str] = []
        for mustache in MUSTACHE.finditer(content):
            for name in template_variables(mustache.group(1)):
                if name not in display_dependencies:
                    display_dependencies.append(name)

        attribute_references = []
        for bind in V_BIND.finditer(attributes):
            if bind.group(1) == "key":
                continue
            names = template_variables(bind.group(2))
            if names:
                attribute_references.append(AttributeReference(bind.group(1), names))
        for event in V_ON.finditer(attributes):
            name = handler_name(event.group(2))
            if name:
                attribute_references.append(AttributeReference(f"@{event.group(1)}", [name]))

        return ElementStructure(
            tag_name=tag_name,
            display_dependencies=display_dependencies,
            attribute_references=attribute_references,
            line=self.line_of(template, match.start()),
            column=match.start() - (template.rfind("\n", 0, match.start()) + 1),
        )

    def extract_bindings(self, template: str) -> List[TemplateBinding]:
        """Every directive and interpolation binding in ``template``."""
        bindings: List[TemplateBinding] = []

        for match in MUSTACHE.finditer(template):
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

        for match in V_BIND.finditer(template):
            if match.group(1) == "key":
                continue
            variables = template_variables(match.group(2))
            if variables:
                bindings.append(TemplateBinding(
                    kind="bind",
                    target=match.group(1),
                    expression=match.group(2).strip(),
                    variables=variables,
                    line=self.line_of(template, match.start()),
                ))

        for match in V_ON.finditer(template):
            name = handler_name(match.group(2))
            if name:
                bindings.append(TemplateBinding(
                    kind="event",
                    target=match.group(1),
                    expression=match.group(2).strip(),
                    variables=[name],
                    line=self.line_of(template, match.start()),
                ))

        for match in V_MODEL.finditer(template):
            variables = template_variables(match.group(1))
            if variables:
                bindings.append(TemplateBinding(
                    kind="model",
                    target="v-model",
                    expression=match.group(1).strip(),
                    variables=variables[:1],
                    line=self.line_of(template, match.start()),
                ))

        for match in V_CONDITION.finditer(template):
            variables = template_variables(match.group(2))
            if variables:
                bindings.append(TemplateBinding(
                    kind="condition",
                    target=f"v-{match.group(1)}",
                    expression=match.group(2).strip(),
                    variables=variables,
                    line=self.line_of(template, match.start()),
                ))

        bindings.sort(key=lambda binding: binding.line or 0)
        return bindings

    @staticmethod
    def _containing_element(template: str, position: int) -> str:
        tags = OPEN_TAG.findall(template, 0, position)
        return f"<{tags[-1]}>" if tags else "<element>"
