"""Conditional and loop structure extraction from JSX.

Recognized shapes:

- ``cond ? <A/> : <B/>`` becomes a ``ternary`` conditional with both branches
- ``cond && <A/>`` becomes ``logical-and`` with a true branch
- ``cond || <A/>`` becomes ``logical-or`` with a false branch
- ``items.map(item => <Row/>)`` becomes a ``map`` loop over ``items``

JSX elements become element structures. Any other expression (a bare
``{count}``, ``null``) adds no node; its variables are recorded as the
enclosing element's display dependencies.
"""

from typing import List, Optional

from hookflow.analyzers.position import PositionIndex
from hookflow.analyzers.structures import StructureExtractor
from hookflow.analyzers.syntax import (
    FUNCTION_DECLARATION_TYPES,
    FUNCTION_LITERAL_TYPES,
    call_arguments,
    function_parameters,
    is_function_literal,
    string_value,
    unique,
    unwrap_expression,
)
from hookflow.logging_config import get_logger
from hookflow.models import (
    AttributeReference,
    ConditionalStructure,
    ConditionExpression,
    ElementStructure,
    LoopStructure,
    Structure,
)
from hookflow.parsers.tree_sitter_adapter import UniversalASTNode

logger = get_logger(__name__)

JSX_ELEMENT_TYPES = frozenset({"jsx_element", "jsx_self_closing_element"})

_LOGICAL_KINDS = {"&&": "logical-and", "||": "logical-or"}

# Expression kinds whose operands are scanned for display variables
_VARIABLE_CONTAINERS = frozenset({
    "binary_expression",
    "unary_expression",
    "update_expression",
    "ternary_expression",
    "parenthesized_expression",
    "array",
    "arguments",
    "template_string",
    "template_substitution",
    "spread_element",
    "as_expression",
    "satisfies_expression",
    "non_null_expression",
})


def expression_to_string(node: Optional[UniversalASTNode]) -> str:
    """Best-effort display rendering of a condition (``!user.isAdmin``).

    Literals and other unsupported kinds render as ``expression``.
    """
    if node is None:
        return "expression"
    node_type = node.node_type
    if node_type == "identifier":
        return node.text
    if node_type == "unary_expression":
        operator = node.get_field("operator")
        return f"{operator.text if operator else ''}{expression_to_string(node.get_field('argument'))}"
    if node_type == "binary_expression":
        operator = node.get_field("operator")
        left = expression_to_string(node.get_field("left"))
        right = expression_to_string(node.get_field("right"))
        return f"{left} {operator.text if operator else '?'} {right}"
    if node_type == "member_expression":
        prop = node.get_field("property")
        name = prop.text if prop is not None and prop.node_type == "property_identifier" else "computed"
        return f"{expression_to_string(node.get_field('object'))}.{name}"
    if node_type == "call_expression":
        return f"{expression_to_string(node.get_field('function'))}()"
    if node_type == "parenthesized_expression":
        return f"({expression_to_string(unwrap_expression(node))})"
    return "expression"


def condition_variables(node: Optional[UniversalASTNode]) -> List[str]:
    """Free variables of a condition; call arguments are not included."""
    variables: List[str] = []

    def traverse(current: Optional[UniversalASTNode]) -> None:
        if current is None:
            return
        node_type = current.node_type
        if node_type == "identifier":
            variables.append(current.text)
        elif node_type == "member_expression":
            traverse(current.get_field("object"))
        elif node_type == "unary_expression":
            traverse(current.get_field("argument"))
        elif node_type == "binary_expression":
            traverse(current.get_field("left"))
            traverse(current.get_field("right"))
        elif node_type == "call_expression":
            traverse(current.get_field("function"))
        elif node_type == "parenthesized_expression":
            traverse(unwrap_expression(current))

    traverse(node)
    return unique(variables)


def expression_variables(node: Optional[UniversalASTNode]) -> List[str]:
    """Every variable an expression reads, skipping nested functions and JSX."""
    variables: List[str] = []

    def traverse(current: Optional[UniversalASTNode]) -> None:
        if current is None:
            return
        node_type = current.node_type
        if node_type in ("identifier", "shorthand_property_identifier"):
            variables.append(current.text)
        elif node_type == "member_expression":
            traverse(current.get_field("object"))
        elif node_type == "subscript_expression":
            traverse(current.get_field("object"))
            traverse(current.get_field("index"))
        elif node_type == "call_expression":
            traverse(current.get_field("function"))
            traverse(current.get_field("arguments"))
        elif node_type == "object":
            for prop in current.named_children:
                if prop.node_type == "pair":
                    traverse(prop.get_field("value"))
                else:
                    traverse(prop)
        elif node_type in _VARIABLE_CONTAINERS:
            for child in current.named_children:
                traverse(child)

    traverse(node)
    return unique(variables)


class JSXStructureExtractor(StructureExtractor):
    """Walk JSX returned by a component body."""

    source_kind = "jsx"

    def __init__(self, positions: PositionIndex):
        self.positions = positions

    def extract(self, template: Optional[UniversalASTNode]) -> List[Structure]:
        """Structures for every JSX value returned from ``template``.

        ``template`` is a component body (a block, or the expression body of
        an arrow component) or a JSX node.
        """
        if template is None:
            return []
        if template.node_type != "statement_block" and template.node_type != "program":
            values = [template]
        else:
            values = _returned_values(template)
        structures = [self.process_expression(value) for value in values]
        return [structure for structure in structures if structure is not None]

    # ------------------------------------------------------------------

    def process_expression(self, node: Optional[UniversalASTNode]) -> Optional[Structure]:
        """Structure rendered by an expression, or None when it renders no element."""
        node = unwrap_expression(node)
        if node is None:
            return None

        node_type = node.node_type
        if node_type == "ternary_expression":
            return self._ternary(node)
        if node_type == "binary_expression":
            operator = node.get_field("operator")
            if operator is not None and operator.text in _LOGICAL_KINDS:
                return self._logical(node, _LOGICAL_KINDS[operator.text])
        if node_type == "call_expression" and _is_map_call(node):
            return self._loop(node)
        if node_type in JSX_ELEMENT_TYPES:
            return self.analyze_element(node)
        if node_type == "jsx_expression":
            named = node.named_children
            return self.process_expression(named[0]) if named else None
        return None

    def analyze_element(self, element: UniversalASTNode) -> ElementStructure:
        opening = element if element.node_type == "jsx_self_closing_element" else element.get_field("open_tag")
        name_node = opening.get_field("name") if opening is not None else None
        line, column = self.positions.of(element)

        if name_node is None:
            return ElementStructure(
                tag_name="Fragment",
                children=self._children(element),
                line=line,
                column=column,
            )

        tag_name = name_node.text
        attributes = opening.get_fields("attribute")
        attribute_references = self.attribute_references(attributes)

        display_dependencies: List[str] = []
        if element.node_type == "jsx_element":
            for child in element.named_children:
                if child.node_type == "jsx_expression" and child.named_children:
                    display_dependencies.extend(expression_variables(child.named_children[0]))

        return ElementStructure(
            tag_name=tag_name,
            display_dependencies=unique(display_dependencies),
            attribute_references=attribute_references,
            children=self._children(element),
            metadata=self._register_metadata(tag_name, attributes, attribute_references),
            line=line,
            column=column,
        )

    def _children(self, element: UniversalASTNode) -> List[Structure]:
        if element.node_type != "jsx_element":
            return []
        children: List[Structure] = []
        for child in element.named_children:
            if child.node_type in JSX_ELEMENT_TYPES:
                children.append(self.analyze_element(child))
            elif child.node_type == "jsx_expression":
                structure = self.process_expression(child)
                if structure is not None:
                    children.append(structure)
        return children

    def _ternary(self, node: UniversalASTNode) -> ConditionalStructure:
        condition = node.get_field("condition")
        line, column = self.positions.of(node)
        return ConditionalStructure(
            kind="ternary",
            condition=_condition(condition),
            true_branch=self.process_expression(node.get_field("consequence")),
            false_branch=self.process_expression(node.get_field("alternative")),
            line=line,
            column=column,
        )

    def _logical(self, node: UniversalASTNode, kind: str) -> ConditionalStructure:
        branch = self.process_expression(node.get_field("right"))
        line, column = self.positions.of(node)
        structure = ConditionalStructure(
            kind=kind,
            condition=_condition(node.get_field("left")),
            line=line,
            column=column,
        )
        if kind == "logical-and":
            structure.true_branch = branch
        else:
            structure.false_branch = branch
        return structure

    def _loop(self, call: UniversalASTNode) -> LoopStructure:
        callee = call.get_field("function")
        target = unwrap_expression(callee.get_field("object"))
        source = target.text if target is not None and target.node_type == "identifier" else None
        line, column = self.positions.of(call)

        loop_variable = None
        body = None
        args = call_arguments(call)
        callback = unwrap_expression(args[0]) if args else None
        if callback is not None and callback.node_type in FUNCTION_LITERAL_TYPES:
            params = function_parameters(callback)
            if params and params[0].node_type == "identifier":
                loop_variable = params[0].text
            callback_body = callback.get_field("body")
            if callback_body is not None and callback_body.node_type == "statement_block":
                for statement in callback_body.named_children:
                    if statement.node_type == "return_statement" and statement.named_children:
                        body = self.process_expression(statement.named_children[0])
            elif callback_body is not None:
                body = self.process_expression(callback_body)

        return LoopStructure(
            kind="map",
            source=source or "array",
            condition=ConditionExpression(
                variables=[source] if source else [],
                expression=source or "array",
            ),
            loop_variable=loop_variable,
            body=body,
            line=line,
            column=column,
        )

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def attribute_references(self, attributes: List[UniversalASTNode]) -> List[AttributeReference]:
        references = []
        for attribute in attributes:
            if attribute.node_type == "jsx_attribute":
                reference = _plain_attribute(attribute)
            elif attribute.node_type == "jsx_expression":
                reference = _spread_attribute(attribute)
            else:
                reference = None
            if reference is not None and reference.references:
                references.append(reference)
        return references

    @staticmethod
    def _register_metadata(tag_name, attributes, attribute_references) -> dict:
        """Field binding details for ``<input {...register('email')} />``."""
        if tag_name != "input":
            return {}
        register_refs = [ref for ref in attribute_references if "register" in ref.references]
        if not register_refs:
            return {}

        metadata = {"hasRegister": True}
        for attribute in attributes:
            if attribute.node_type != "jsx_attribute":
                continue
            named = attribute.named_children
            if len(named) < 2 or named[0].text not in ("name", "data-field"):
                continue
            value = named[1]
            if value.node_type == "jsx_expression" and value.named_children:
                value = value.named_children[0]
            field_name = string_value(value)
            if field_name is not None:
                metadata["fieldName"] = field_name
                break
        else:
            for ref in register_refs:
                if ref.attribute_name.startswith("spread:register:"):
                    metadata["fieldName"] = ref.attribute_name.split(":", 2)[2]
                    break
        return metadata


def _plain_attribute(attribute: UniversalASTNode) -> Optional[AttributeReference]:
    named = attribute.named_children
    if len(named) < 2 or named[1].node_type != "jsx_expression":
        return None
    name = named[0].text
    container = named[1].named_children
    expression = unwrap_expression(container[0]) if container else None
    if expression is None:
        return None

    if expression.node_type == "identifier":
        return AttributeReference(name, [expression.text])
    if is_function_literal(expression):
        body = expression.get_field("body")
        variables: List[str] = []
        if body is not None and body.node_type == "statement_block":
            for statement in body.named_children:
                if statement.node_type == "expression_statement" and statement.named_children:
                    variables.extend(expression_variables(statement.named_children[0]))
        else:
            variables = expression_variables(body)
        return AttributeReference(name, unique(variables))
    return AttributeReference(name, expression_variables(expression))


def _spread_attribute(container: UniversalASTNode) -> Optional[AttributeReference]:
    named = container.named_children
    if not named or named[0].node_type != "spread_element":
        return None
    spread = named[0].named_children
    expression = unwrap_expression(spread[0]) if spread else None
    if expression is None:
        return None

    if expression.node_type == "identifier":
        name = "spread:field" if expression.text == "field" else "spread"
        return AttributeReference(name, [expression.text])

    if expression.node_type == "call_expression":
        callee = expression.get_field("function")
        if callee is None or callee.node_type != "identifier":
            return None
        function_name = callee.text
        args = call_arguments(expression)
        if function_name == "register" and args:
            first = unwrap_expression(args[0])
            field_name = string_value(first)
            if field_name is not None:
                return AttributeReference(f"spread:register:{field_name}", [function_name])
            if first is not None and first.node_type == "identifier":
                return AttributeReference("spread:register", [function_name])
            return None
        return AttributeReference("spread", [function_name])
    return None


def _condition(node: Optional[UniversalASTNode]) -> ConditionExpression:
    return ConditionExpression(
        variables=condition_variables(node),
        expression=expression_to_string(node),
    )


def _is_map_call(call: UniversalASTNode) -> bool:
    callee = call.get_field("function")
    if callee is None or callee.node_type != "member_expression":
        return False
    prop = callee.get_field("property")
    return prop is not None and prop.text == "map"


def _returned_values(block: UniversalASTNode) -> List[UniversalASTNode]:
    """Arguments of return statements in ``block``, not crossing into nested functions."""
    values = []
    stack = list(reversed(block.named_children))
    while stack:
        node = stack.pop()
        if node.node_type in FUNCTION_LITERAL_TYPES or node.node_type in FUNCTION_DECLARATION_TYPES:
            continue
        if node.node_type == "return_statement":
            if node.named_children:
                values.append(node.named_children[0])
            continue
        stack.extend(reversed(node.named_children))
    return values
