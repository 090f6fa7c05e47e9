"""Vue ``<script setup>`` matchers: reactive state, props and emits.

    const count = ref<number>(0)
    const form = reactive({ name: '' })
    const doubled = computed(() => count.value * 2)
    const props = defineProps<{ title: string }>()
    const emit = defineEmits(['save', 'cancel'])
"""

from typing import List, Optional, Tuple

from hookflow.analyzers.position import PositionIndex
from hookflow.analyzers.syntax import (
    call_arguments,
    declarators,
    is_call,
    is_function_literal,
    statements_of,
    string_value,
    unique,
    unwrap_expression,
)
from hookflow.logging_config import get_logger
from hookflow.models import EventDeclaration, PropInfo, VueStateInfo
from hookflow.parsers.tree_sitter_adapter import UniversalASTNode

logger = get_logger(__name__)

STATE_FUNCTIONS = ("ref", "reactive", "computed")

# Runtime prop constructors and the data type they declare
RUNTIME_PROP_TYPES = {
    "String": "string",
    "Number": "number",
    "Boolean": "boolean",
    "Array": "array",
    "Object": "object",
    "Function": "function",
    "Date": "Date",
    "Symbol": "symbol",
}

_LITERAL_DATA_TYPES = {
    "string": "string",
    "template_string": "string",
    "number": "number",
    "true": "boolean",
    "false": "boolean",
    "array": "array",
    "object": "object",
    "null": "null",
    "arrow_function": "function",
    "function_expression": "function",
    "function": "function",
}

# Nodes whose identifiers a computed getter can read
_GETTER_CONTAINERS = frozenset({
    "statement_block",
    "return_statement",
    "expression_statement",
    "binary_expression",
    "unary_expression",
    "ternary_expression",
    "parenthesized_expression",
    "template_string",
    "template_substitution",
    "array",
    "object",
    "pair",
    "arguments",
    "call_expression",
})


def type_string(node: Optional[UniversalASTNode]) -> str:
    """Render a TypeScript type node as a short display string.

    Keyword types keep their name, references keep their (qualified) name,
    object and function types collapse to ``object``/``function``.
    """
    if node is None:
        return "unknown"
    node_type = node.node_type
    if node_type == "type_annotation":
        named = node.named_children
        return type_string(named[0]) if named else "unknown"
    if node_type in ("predefined_type", "type_identifier", "nested_type_identifier"):
        return node.text
    if node_type == "generic_type":
        return type_string(node.get_field("name") or node.named_children[0])
    if node_type == "array_type":
        named = node.named_children
        return f"{type_string(named[0])}[]" if named else "unknown[]"
    if node_type == "union_type":
        return " | ".join(type_string(child) for child in node.named_children)
    if node_type == "intersection_type":
        return " & ".join(type_string(child) for child in node.named_children)
    if node_type == "literal_type":
        return node.text
    if node_type == "function_type":
        return "function"
    if node_type == "object_type":
        return "object"
    if node_type == "parenthesized_type":
        named = node.named_children
        return type_string(named[0]) if named else "unknown"
    if node_type == "tuple_type":
        return node.text
    return "unknown"


def declared_data_type(declarator: UniversalASTNode, call: UniversalASTNode, default: str = "unknown") -> str:
    """Declared annotation, then explicit type argument, then literal argument."""
    annotation = declarator.get_field("type")
    if annotation is not None:
        return type_string(annotation)

    type_argument = first_type_argument(call)
    if type_argument is not None:
        return type_string(type_argument)

    args = call_arguments(call)
    if args:
        first = unwrap_expression(args[0])
        if first is not None:
            return _LITERAL_DATA_TYPES.get(first.node_type, "unknown")

    return default


def first_type_argument(call: UniversalASTNode) -> Optional[UniversalASTNode]:
    type_arguments = call.get_field("type_arguments")
    if type_arguments is None:
        return None
    named = type_arguments.named_children
    return named[0] if named else None


def _callee_name(call: UniversalASTNode) -> Optional[str]:
    callee = call.get_field("function")
    if callee is not None and callee.node_type == "identifier":
        return callee.text
    return None


def _property_key(node: Optional[UniversalASTNode]) -> Optional[str]:
    if node is None:
        return None
    if node.node_type in ("property_identifier", "identifier", "shorthand_property_identifier"):
        return node.text
    return string_value(node)


class VueScriptAnalyzer:
    """Match Vue Composition API declarations in a script body.

    Args:
        positions: Position index for the parsed script
    """

    def __init__(self, positions: PositionIndex):
        self.positions = positions

    # ------------------------------------------------------------------
    # Reactive state
    # ------------------------------------------------------------------

    def analyze_state(self, body: Optional[UniversalASTNode]) -> List[VueStateInfo]:
        """``ref``/``reactive``/``computed`` declarations bound to an identifier."""
        state = []
        for statement in statements_of(body):
            for declarator in declarators(statement):
                info = self._state_from_declarator(declarator)
                if info is not None:
                    state.append(info)
        logger.debug(f"Found {len(state)} reactive state declaration(s)")
        return state

    def _state_from_declarator(self, declarator: UniversalASTNode) -> Optional[VueStateInfo]:
        call = unwrap_expression(declarator.get_field("value"))
        if not is_call(call):
            return None
        kind = _callee_name(call)
        if kind not in STATE_FUNCTIONS:
            return None

        name_node = declarator.get_field("name")
        if name_node is None or name_node.node_type != "identifier":
            # Destructured reactive state is not tracked
            return None

        dependencies = None
        if kind == "computed":
            dependencies = self.computed_dependencies(call)

        line, column = self.positions.of(name_node)
        return VueStateInfo(
            name=name_node.text,
            kind=kind,
            data_type=self._data_type(declarator, call, kind),
            line=line,
            column=column,
            dependencies=dependencies,
        )

    @staticmethod
    def _data_type(declarator: UniversalASTNode, call: UniversalASTNode, kind: str) -> str:
        return declared_data_type(declarator, call, default="object" if kind == "reactive" else "unknown")

    @staticmethod
    def computed_dependencies(call: UniversalASTNode) -> List[str]:
        """Root identifiers read by a computed getter (``count`` for ``count.value * 2``)."""
        args = call_arguments(call)
        if not args:
            return []
        getter = unwrap_expression(args[0])
        if not is_function_literal(getter):
            return []

        names: List[str] = []

        def visit(node: Optional[UniversalASTNode]) -> None:
            if node is None:
                return
            if node.node_type == "identifier":
                names.append(node.text)
            elif node.node_type == "member_expression":
                visit(node.get_field("object"))
            elif node.node_type == "pair":
                visit(node.get_field("value"))
            elif node.node_type in _GETTER_CONTAINERS:
                for child in node.named_children:
                    visit(child)

        visit(getter.get_field("body"))
        return unique(names)

    # ------------------------------------------------------------------
    # Props
    # ------------------------------------------------------------------

    def analyze_props(self, body: Optional[UniversalASTNode]) -> List[PropInfo]:
        """Props declared by the first ``defineProps`` call.

        Supports ``defineProps<{...}>()``, ``defineProps({...})``,
        ``defineProps(['a', 'b'])`` and any of these wrapped in
        ``withDefaults``. A named props interface yields a single ``props``
        entry typed with the interface name.
        """
        call = self._find_macro(body, "defineProps")
        if call is None:
            return []

        type_argument = first_type_argument(call)
        if type_argument is not None:
            if type_argument.node_type == "object_type":
                return self.props_from_object_type(type_argument)
            line, column = self.positions.of(type_argument)
            return [PropInfo(name="props", type=type_string(type_argument), line=line, column=column)]

        args = call_arguments(call)
        if not args:
            return []
        argument = unwrap_expression(args[0])
        if argument is None:
            return []
        if argument.node_type == "object":
            return self._props_from_object(argument)
        if argument.node_type == "array":
            props = []
            for element in argument.named_children:
                name = string_value(element)
                if name:
                    line, column = self.positions.of(element)
                    props.append(PropInfo(name=name, line=line, column=column))
            return props
        return []

    def props_from_object_type(self, object_type: UniversalASTNode) -> List[PropInfo]:
        props = []
        for member in object_type.named_children:
            if member.node_type not in ("property_signature", "method_signature"):
                continue
            name = _property_key(member.get_field("name"))
            if not name:
                continue
            prop_type = "function" if member.node_type == "method_signature" else type_string(member.get_field("type"))
            line, column = self.positions.of(member)
            props.append(PropInfo(name=name, type=prop_type, line=line, column=column))
        return props

    def _props_from_object(self, obj: UniversalASTNode) -> List[PropInfo]:
        props = []
        for member in obj.named_children:
            if member.node_type == "pair":
                name = _property_key(member.get_field("key"))
                prop_type = self.runtime_prop_type(member.get_field("value"))
            elif member.node_type == "shorthand_property_identifier":
                name, prop_type = member.text, "unknown"
            else:
                continue
            if name:
                line, column = self.positions.of(member)
                props.append(PropInfo(name=name, type=prop_type, line=line, column=column))
        return props

    @classmethod
    def runtime_prop_type(cls, value: Optional[UniversalASTNode]) -> str:
        """Data type of a runtime prop declaration.

        ``String`` maps to ``string``, ``[String, Number]`` to
        ``string | number`` and ``{ type: Boolean }`` to ``boolean``.
        """
        value = unwrap_expression(value)
        if value is None:
            return "unknown"
        if value.node_type == "identifier":
            return RUNTIME_PROP_TYPES.get(value.text, value.text.lower())
        if value.node_type == "array":
            return " | ".join(cls.runtime_prop_type(element) for element in value.named_children)
        if value.node_type == "object":
            for member in value.named_children:
                if member.node_type == "pair" and _property_key(member.get_field("key")) == "type":
                    return cls.runtime_prop_type(member.get_field("value"))
        return "unknown"

    # ------------------------------------------------------------------
    # Emits
    # ------------------------------------------------------------------

    def analyze_emits(self, body: Optional[UniversalASTNode]) -> Tuple[Optional[str], List[EventDeclaration]]:
        """The emit variable and declared events of ``defineEmits``.

        Returns:
            ``(variable, events)``; variable is None for a standalone call
        """
        call, variable = self._find_macro_binding(body, "defineEmits")
        if call is None:
            return None, []

        type_argument = first_type_argument(call)
        if type_argument is not None and type_argument.node_type == "object_type":
            events = event_declarations(type_argument, self.positions)
        else:
            events = []
            args = call_arguments(call)
            argument = unwrap_expression(args[0]) if args else None
            if argument is not None and argument.node_type == "array":
                for element in argument.named_children:
                    name = string_value(element)
                    if name:
                        line, column = self.positions.of(element)
                        events.append(EventDeclaration(name=name, line=line, column=column))
            elif argument is not None and argument.node_type == "object":
                for member in argument.named_children:
                    key = member.get_field("key") if member.node_type == "pair" else member
                    name = _property_key(key)
                    if name:
                        line, column = self.positions.of(member)
                        events.append(EventDeclaration(name=name, line=line, column=column))

        logger.debug(f"defineEmits bound to {variable!r} declares {len(events)} event(s)")
        return variable, events

    # ------------------------------------------------------------------
    # Macro lookup
    # ------------------------------------------------------------------

    def _find_macro(self, body, name: str) -> Optional[UniversalASTNode]:
        return self._find_macro_binding(body, name)[0]

    def _find_macro_binding(self, body, name: str) -> Tuple[Optional[UniversalASTNode], Optional[str]]:
        """First top-level ``name(...)`` call and the identifier it is bound to."""
        for statement in statements_of(body):
            if statement.node_type == "expression_statement":
                named = statement.named_children
                call = _macro_call(named[0] if named else None, name)
                if call is not None:
                    return call, None
                continue
            for declarator in declarators(statement):
                call = _macro_call(declarator.get_field("value"), name)
                if call is not None:
                    target = declarator.get_field("name")
                    variable = target.text if target is not None and target.node_type == "identifier" else None
                    return call, variable
        return None, None


def _macro_call(node: Optional[UniversalASTNode], name: str) -> Optional[UniversalASTNode]:
    """``name(...)`` itself, or the one wrapped as ``withDefaults(name(...), {...})``."""
    call = unwrap_expression(node)
    if not is_call(call):
        return None
    callee = _callee_name(call)
    if callee == name:
        return call
    if callee == "withDefaults":
        args = call_arguments(call)
        if args:
            return _macro_call(args[0], name)
    return None


def event_declarations(object_type: UniversalASTNode, positions: PositionIndex) -> List[EventDeclaration]:
    """Event names declared by a type literal.

    Three member shapes are understood::

        { save: [id: number] }              # property signature
        { save(id: number): void }          # method signature
        { (e: 'save', id: number): void }   # call signature
    """
    events = []
    for member in object_type.named_children:
        name = None
        data_type = None
        if member.node_type in ("property_signature", "method_signature"):
            name = _property_key(member.get_field("name"))
            if member.node_type == "property_signature":
                data_type = _payload_type(member.get_field("type"))
        elif member.node_type == "call_signature":
            name, data_type = _call_signature_event(member)
        if name:
            line, column = positions.of(member)
            events.append(EventDeclaration(name=name, data_type=data_type, line=line, column=column))
    return events


def _payload_type(annotation: Optional[UniversalASTNode]) -> Optional[str]:
    if annotation is None:
        return None
    rendered = type_string(annotation)
    return None if rendered == "unknown" else rendered


def _call_signature_event(signature: UniversalASTNode) -> Tuple[Optional[str], Optional[str]]:
    parameters = signature.get_field("parameters")
    if parameters is None:
        return None, None
    params = [p for p in parameters.named_children if p.node_type in ("required_parameter", "optional_parameter")]
    if not params:
        return None, None

    annotation = params[0].get_field("type")
    literal = None
    if annotation is not None:
        for node in annotation.walk():
            if node.node_type == "string":
                literal = string_value(node)
                break
    data_type = _payload_type(params[1].get_field("type")) if len(params) > 1 else None
    return literal, data_type
