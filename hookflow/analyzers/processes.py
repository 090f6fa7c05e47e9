"""Process extraction: effect/memo/callback bodies, functions and inline handlers."""

from itertools import count
from typing import Iterator, List, Optional

from hookflow.analyzers.hooks import HookAnalyzer
from hookflow.analyzers.imperative_handle import ImperativeHandleAnalyzer
from hookflow.analyzers.position import PositionIndex
from hookflow.analyzers.references import ReferenceExtractor
from hookflow.analyzers.syntax import (
    FUNCTION_DECLARATION_TYPES,
    call_arguments,
    callee_tail,
    declarators,
    is_call,
    is_function_literal,
    statements_of,
    unwrap_expression,
)
from hookflow.logging_config import get_logger
from hookflow.models import Diagnostic, JSXUsage, ProcessOccurrence
from hookflow.parsers.tree_sitter_adapter import UniversalASTNode

logger = get_logger(__name__)

PROCESS_HOOKS = frozenset({
    "useEffect",
    "useLayoutEffect",
    "useInsertionEffect",
    "useCallback",
    "useMemo",
    "useImperativeHandle",
})

EFFECT_HOOKS = frozenset({"useEffect", "useLayoutEffect", "useInsertionEffect"})

_JSX_OPENING_TYPES = ("jsx_opening_element", "jsx_self_closing_element")


def is_process_hook(node: Optional[UniversalASTNode]) -> bool:
    return is_call(node) and callee_tail(node.get_field("function")) in PROCESS_HOOKS


class ProcessAnalyzer:
    """Extract :class:`ProcessOccurrence` records from a component body.

    Every named function is a ``custom-function``; whether it acts as an
    event handler is decided by how the diagram layer sees it used.
    """

    def __init__(
        self,
        positions: PositionIndex,
        references: ReferenceExtractor,
        imperative: Optional[ImperativeHandleAnalyzer] = None,
    ):
        self.positions = positions
        self.references = references
        self.imperative = imperative or ImperativeHandleAnalyzer(positions, references)
        self.diagnostics: List[Diagnostic] = []

    def analyze(self, body: Optional[UniversalASTNode]) -> List[ProcessOccurrence]:
        processes: List[ProcessOccurrence] = []
        self.diagnostics = []
        for statement in statements_of(body):
            try:
                processes.extend(self.analyze_statement(statement))
            except Exception as e:
                line = self.positions.of(statement)[0]
                logger.warning(f"Skipping process statement at line {line}: {e}", exc_info=True)
                self.diagnostics.append(Diagnostic(stage="processes", message=str(e), line=line))
        logger.debug(f"Found {len(processes)} process(es)")
        return processes

    def analyze_statement(self, statement: UniversalASTNode) -> List[ProcessOccurrence]:
        if statement.node_type == "export_statement":
            declaration = statement.get_field("declaration")
            if declaration is None:
                return []
            if declaration.node_type in FUNCTION_DECLARATION_TYPES:
                statement = declaration

        if statement.node_type in FUNCTION_DECLARATION_TYPES:
            process = self.from_function_declaration(statement)
            return [process] if process else []

        if statement.node_type == "expression_statement":
            named = statement.named_children
            call = unwrap_expression(named[0]) if named else None
            if is_process_hook(call):
                return [self.from_hook_call(call, name=None)]
            return []

        processes = []
        for declarator in declarators(statement):
            value = unwrap_expression(declarator.get_field("value"))
            name_node = declarator.get_field("name")
            name = name_node.text if name_node is not None and name_node.node_type == "identifier" else None
            if is_process_hook(value):
                processes.append(self.from_hook_call(value, name=name))
            elif is_function_literal(value) and name:
                processes.append(self._custom_function(name, value, position_node=declarator))
        return processes

    def from_function_declaration(self, declaration: UniversalASTNode) -> Optional[ProcessOccurrence]:
        name_node = declaration.get_field("name")
        if name_node is None:
            return None
        return self._custom_function(name_node.text, declaration, position_node=declaration)

    def _custom_function(
        self,
        name: str,
        function: UniversalASTNode,
        position_node: UniversalASTNode,
    ) -> ProcessOccurrence:
        analysis = self.references.analyze_function(function)
        line, column = self.positions.of(position_node)
        logger.debug(f"Extracted function {name} at line {line}")
        return ProcessOccurrence(
            name=name,
            type="custom-function",
            line=line,
            column=column,
            references=analysis.references,
            external_calls=analysis.external_calls,
            writes=analysis.writes,
        )

    def from_hook_call(self, call: UniversalASTNode, name: Optional[str]) -> ProcessOccurrence:
        """Process for an effect-like hook; ``name`` defaults to the hook name."""
        hook_name = callee_tail(call.get_field("function"))
        args = call_arguments(call)
        line, column = self.positions.of(call)

        if hook_name == "useImperativeHandle":
            handlers = self.imperative.analyze(call)
            if handlers:
                return ProcessOccurrence(
                    name=name or hook_name,
                    type=hook_name,
                    line=line,
                    column=column,
                    dependencies=HookAnalyzer.extract_dependencies(args, index=2),
                    exported_handlers=handlers,
                )
            dependencies = HookAnalyzer.extract_dependencies(args, index=2)
            function = unwrap_expression(args[1]) if len(args) > 1 else None
        else:
            dependencies = HookAnalyzer.extract_dependencies(args, index=1)
            function = unwrap_expression(args[0]) if args else None

        process = ProcessOccurrence(
            name=name or hook_name,
            type=hook_name,
            line=line,
            column=column,
            dependencies=dependencies,
        )
        if is_function_literal(function):
            analysis = self.references.analyze_function(function)
            process.references = analysis.references
            process.external_calls = analysis.external_calls
            process.writes = analysis.writes
            if hook_name in EFFECT_HOOKS:
                process.cleanup_process = self._cleanup(function)
        return process

    def _cleanup(self, effect: UniversalASTNode) -> Optional[ProcessOccurrence]:
        """A function returned from an effect body, as a ``cleanup`` process."""
        body = effect.get_field("body")
        if body is None or body.node_type != "statement_block":
            return None
        for statement in body.named_children:
            if statement.node_type != "return_statement":
                continue
            named = statement.named_children
            returned = unwrap_expression(named[0]) if named else None
            if is_function_literal(returned):
                analysis = self.references.analyze_function(returned)
                line, column = self.positions.of(returned)
                return ProcessOccurrence(
                    name="cleanup",
                    type="cleanup",
                    line=line,
                    column=column,
                    references=analysis.references,
                    external_calls=analysis.external_calls,
                )
        return None

    # ------------------------------------------------------------------
    # Inline JSX callbacks
    # ------------------------------------------------------------------

    def extract_inline_handlers(self, root: Optional[UniversalASTNode]) -> List[ProcessOccurrence]:
        """``onX={() => ...}`` attributes as ``inline_<attr>_<n>`` event handlers.

        The counter runs over the whole tree in source order.
        """
        if root is None:
            return []
        counter = count()
        processes = []
        for element in _jsx_openings(root):
            for attribute in element.get_fields("attribute"):
                process = self._inline_handler(attribute, element, counter)
                if process is not None:
                    processes.append(process)
        return processes

    def _inline_handler(self, attribute, element, counter) -> Optional[ProcessOccurrence]:
        if attribute.node_type != "jsx_attribute":
            return None
        named = attribute.named_children
        if len(named) < 2:
            return None
        attribute_name = named[0].text
        value = named[1]
        if not attribute_name.startswith("on") or value.node_type != "jsx_expression":
            return None
        expression = unwrap_expression(value.named_children[0]) if value.named_children else None
        if not is_function_literal(expression):
            return None

        analysis = self.references.analyze_function(expression)
        line, column = self.positions.of(expression)
        element_line, element_column = self.positions.of(element)
        return ProcessOccurrence(
            name=f"inline_{attribute_name}_{next(counter)}",
            type="event-handler",
            line=line,
            column=column,
            references=analysis.references,
            external_calls=analysis.external_calls,
            writes=analysis.writes,
            is_inline_handler=True,
            used_in_jsx_element=JSXUsage(
                line=element_line,
                column=element_column,
                attribute_name=attribute_name,
            ),
        )


def _jsx_openings(root: UniversalASTNode) -> Iterator[UniversalASTNode]:
    for node in root.walk():
        if node.node_type in _JSX_OPENING_TYPES:
            yield node
