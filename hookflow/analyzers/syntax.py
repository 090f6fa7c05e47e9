"""Shared helpers for reading JavaScript/TypeScript syntax nodes."""

from typing import List, Optional

from hookflow.models import ArgumentValue
from hookflow.parsers.tree_sitter_adapter import UniversalASTNode

FUNCTION_LITERAL_TYPES = frozenset({
    "arrow_function",
    "function_expression",
    "function",
    "generator_function",
})

FUNCTION_DECLARATION_TYPES = frozenset({
    "function_declaration",
    "generator_function_declaration",
})

DECLARATION_TYPES = frozenset({"lexical_declaration", "variable_declaration"})

# Wrappers that do not change the value of the wrapped expression
_TRANSPARENT_WRAPPERS = frozenset({
    "parenthesized_expression",
    "as_expression",
    "satisfies_expression",
    "non_null_expression",
    "type_assertion",
})

_LITERAL_TYPES = {
    "string": "string",
    "number": "number",
    "true": "boolean",
    "false": "boolean",
}


def unwrap_expression(node: Optional[UniversalASTNode]) -> Optional[UniversalASTNode]:
    """Strip parentheses, ``as``/``satisfies`` assertions and ``!``."""
    while node is not None and node.node_type in _TRANSPARENT_WRAPPERS:
        named = node.named_children
        if not named:
            return None
        # <T>value puts the type first
        node = named[-1] if node.node_type == "type_assertion" else named[0]
    return node


def is_function_literal(node: Optional[UniversalASTNode]) -> bool:
    return node is not None and node.node_type in FUNCTION_LITERAL_TYPES


def is_call(node: Optional[UniversalASTNode]) -> bool:
    return node is not None and node.node_type == "call_expression"


def call_arguments(call: UniversalASTNode) -> List[UniversalASTNode]:
    """Argument expressions of a call (empty for tagged templates)."""
    arguments = call.get_field("arguments")
    if arguments is None or arguments.node_type != "arguments":
        return []
    return arguments.named_children


def dotted_name(node: Optional[UniversalASTNode]) -> Optional[str]:
    """``a.b.c`` for identifier/member chains, None for anything computed."""
    if node is None:
        return None
    node_type = node.node_type
    if node_type in ("identifier", "this", "property_identifier", "super"):
        return node.text
    if node_type == "member_expression":
        obj = dotted_name(node.get_field("object"))
        prop = node.get_field("property")
        if obj is None or prop is None:
            return None
        return f"{obj}.{prop.text}"
    if node_type in ("parenthesized_expression", "non_null_expression"):
        return dotted_name(unwrap_expression(node))
    return None


def callee_tail(callee: Optional[UniversalASTNode]) -> Optional[str]:
    """Called identifier, or the final property of a member-access callee."""
    if callee is None:
        return None
    if callee.node_type == "identifier":
        return callee.text
    if callee.node_type == "member_expression":
        prop = callee.get_field("property")
        if prop is not None and prop.node_type == "property_identifier":
            return prop.text
    return None


def root_identifier(node: Optional[UniversalASTNode]) -> Optional[str]:
    """Leftmost identifier of a member chain (``a`` for ``a.b.c()``)."""
    while node is not None:
        if node.node_type == "identifier":
            return node.text
        if node.node_type == "member_expression":
            node = node.get_field("object")
        elif node.node_type == "call_expression":
            node = node.get_field("function")
        elif node.node_type in _TRANSPARENT_WRAPPERS:
            node = unwrap_expression(node)
        else:
            return None
    return None


def string_value(node: Optional[UniversalASTNode]) -> Optional[str]:
    """Value of a string literal or a substitution-free template literal."""
    if node is None:
        return None
    if node.node_type == "string":
        return node.text[1:-1]
    if node.node_type == "template_string":
        if any(child.node_type == "template_substitution" for child in node.named_children):
            return None
        return node.text[1:-1]
    return None


def literal_argument(node: UniversalASTNode) -> ArgumentValue:
    """Describe a call argument as a literal type/value pair."""
    node = unwrap_expression(node) or node
    literal_type = _LITERAL_TYPES.get(node.node_type)
    if literal_type == "string":
        return ArgumentValue("string", string_value(node))
    if literal_type == "number":
        return ArgumentValue("number", _number_value(node.text))
    if literal_type == "boolean":
        return ArgumentValue("boolean", node.node_type == "true")
    if node.node_type == "template_string":
        value = string_value(node)
        if value is not None:
            return ArgumentValue("string", value)
    return ArgumentValue(node.node_type)


def _number_value(text: str):
    cleaned = text.replace("_", "")
    try:
        return int(cleaned, 0)
    except ValueError:
        try:
            return float(cleaned)
        except ValueError:
            return cleaned


def type_argument_name(call: UniversalASTNode) -> Optional[str]:
    """Name of the first explicit type argument when it is a plain type reference."""
    type_arguments = call.get_field("type_arguments")
    if type_arguments is None:
        return None
    named = type_arguments.named_children
    if not named:
        return None
    first = named[0]
    if first.node_type in ("type_identifier", "nested_type_identifier"):
        return first.text
    return None


def function_parameters(function: UniversalASTNode) -> List[UniversalASTNode]:
    """Parameter patterns of a function-like node, type annotations stripped."""
    single = function.get_field("parameter")
    if single is not None:
        return [single]
    parameters = function.get_field("parameters")
    if parameters is None:
        return []
    patterns = []
    for param in parameters.named_children:
        if param.node_type in ("required_parameter", "optional_parameter"):
            pattern = param.get_field("pattern")
            if pattern is not None:
                patterns.append(pattern)
        else:
            patterns.append(param)
    return patterns


def parameter_names(function: UniversalASTNode) -> List[str]:
    """Flat list of names bound by a function's parameters.

    Object patterns contribute their keys, array patterns their elements.
    """
    names: List[str] = []
    for pattern in function_parameters(function):
        names.extend(pattern_names(pattern, object_keys=True))
    return names


def pattern_names(pattern: Optional[UniversalASTNode], object_keys: bool = False) -> List[str]:
    """Names bound by a binding pattern, in source order.

    Rest elements are skipped.

    Args:
        pattern: Identifier or destructuring pattern
        object_keys: Report property keys instead of local aliases for
            ``{key: alias}`` entries
    """
    if pattern is None:
        return []
    node_type = pattern.node_type
    if node_type in ("identifier", "shorthand_property_identifier_pattern"):
        return [pattern.text]
    if node_type == "assignment_pattern":
        return pattern_names(pattern.get_field("left"), object_keys)
    if node_type == "array_pattern":
        names: List[str] = []
        for element in pattern.named_children:
            if element.node_type == "rest_pattern":
                continue
            names.extend(pattern_names(element, object_keys))
        return names
    if node_type == "object_pattern":
        names = []
        for prop in pattern.named_children:
            if prop.node_type == "shorthand_property_identifier_pattern":
                names.append(prop.text)
            elif prop.node_type == "object_assignment_pattern":
                names.extend(pattern_names(prop.get_field("left"), object_keys))
            elif prop.node_type == "pair_pattern":
                if object_keys:
                    key = prop.get_field("key")
                    if key is not None:
                        names.append(key.text)
                else:
                    names.extend(pattern_names(prop.get_field("value"), object_keys))
        return names
    return []


def is_async(function: UniversalASTNode) -> bool:
    return function.has_token("async")


def statements_of(body: Optional[UniversalASTNode]) -> List[UniversalASTNode]:
    """Statements of a block, or the body itself when it is a single statement."""
    if body is None:
        return []
    if body.node_type in ("statement_block", "program"):
        return body.named_children
    return [body]


def declarators(statement: UniversalASTNode) -> List[UniversalASTNode]:
    """Variable declarators of a (possibly exported) declaration statement."""
    if statement.node_type == "export_statement":
        declaration = statement.get_field("declaration")
        if declaration is None:
            return []
        statement = declaration
    if statement.node_type not in DECLARATION_TYPES:
        return []
    return [child for child in statement.named_children if child.node_type == "variable_declarator"]


def unique(items: List[str]) -> List[str]:
    """Deduplicate preserving first occurrence order."""
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
