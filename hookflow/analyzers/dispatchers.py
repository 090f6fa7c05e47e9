"""Event dispatch matchers.

Svelte components create a dispatcher and call it with an event name::

    const dispatch = createEventDispatcher<{ save: Item; cancel: null }>();
    function onSave() { dispatch('save', item); }

Vue ``<script setup>`` does the same through ``defineEmits``; both end up
as :class:`~hookflow.models.DispatchCall` records attributed to the
enclosing function.
"""

from typing import Iterable, List, Optional, Tuple

from hookflow.analyzers.position import PositionIndex
from hookflow.analyzers.syntax import (
    FUNCTION_DECLARATION_TYPES,
    call_arguments,
    declarators,
    is_call,
    is_function_literal,
    statements_of,
    string_value,
    unwrap_expression,
)
from hookflow.analyzers.vue_script import event_declarations
from hookflow.logging_config import get_logger
from hookflow.models import DispatchCall, EventDeclaration
from hookflow.parsers.tree_sitter_adapter import UniversalASTNode

logger = get_logger(__name__)

DISPATCHER_FACTORY = "createEventDispatcher"


class DispatcherAnalyzer:
    """Find dispatcher declarations and the calls made through them.

    Args:
        positions: Position index for the parsed script
        max_depth: Recursion limit for the call search
    """

    def __init__(self, positions: PositionIndex, max_depth: int = 200):
        self.positions = positions
        self.max_depth = max_depth

    def find_dispatcher(self, body: Optional[UniversalASTNode]) -> Tuple[Optional[str], List[EventDeclaration]]:
        """Variable bound to ``createEventDispatcher()`` and its typed events."""
        for statement in statements_of(body):
            for declarator in declarators(statement):
                call = unwrap_expression(declarator.get_field("value"))
                if not is_call(call):
                    continue
                callee = call.get_field("function")
                if callee is None or callee.text != DISPATCHER_FACTORY:
                    continue
                name = declarator.get_field("name")
                if name is None or name.node_type != "identifier":
                    continue

                events: List[EventDeclaration] = []
                type_arguments = call.get_field("type_arguments")
                if type_arguments is not None:
                    for argument in type_arguments.named_children:
                        if argument.node_type == "object_type":
                            events = event_declarations(argument, self.positions)
                logger.debug(f"Dispatcher {name.text!r} declares {len(events)} event(s)")
                return name.text, events
        return None, []

    def find_calls(self, body: Optional[UniversalASTNode], dispatchers: Iterable[str]) -> List[DispatchCall]:
        """Calls of any dispatcher variable with a string-literal event name."""
        names = {name for name in dispatchers if name}
        calls: List[DispatchCall] = []
        if body is None or not names:
            return calls
        self._visit(body, names, None, calls, 0)
        logger.debug(f"Found {len(calls)} dispatch call(s)")
        return calls

    def _visit(self, node: UniversalASTNode, names, caller: Optional[str], calls: List[DispatchCall], depth: int) -> None:
        if depth > self.max_depth:
            logger.debug(f"Dispatch search stopped at depth {depth}")
            return

        node_type = node.node_type
        if node_type in FUNCTION_DECLARATION_TYPES or node_type == "method_definition":
            name = node.get_field("name")
            caller = name.text if name is not None else caller
        elif node_type == "variable_declarator":
            value = unwrap_expression(node.get_field("value"))
            target = node.get_field("name")
            if is_function_literal(value) and target is not None and target.node_type == "identifier":
                self._visit(value, names, target.text, calls, depth + 1)
                return
        elif node_type == "call_expression":
            callee = node.get_field("function")
            if callee is not None and callee.node_type == "identifier" and callee.text in names:
                args = call_arguments(node)
                event = string_value(unwrap_expression(args[0])) if args else None
                if event:
                    line, column = self.positions.of(node)
                    calls.append(DispatchCall(event_name=event, caller_process=caller, line=line, column=column))

        for child in node.named_children:
            self._visit(child, names, caller, calls, depth + 1)
