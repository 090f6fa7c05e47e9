"""Free-variable, external-call and write extraction for function bodies.

Nested function literals are opaque: their bodies are only read when the
literal is passed as a call argument, in which case the callback's
references are folded into the enclosing function.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from hookflow.analyzers.syntax import (
    DECLARATION_TYPES,
    FUNCTION_DECLARATION_TYPES,
    FUNCTION_LITERAL_TYPES,
    call_arguments,
    dotted_name,
    is_function_literal,
    root_identifier,
    unique,
    unwrap_expression,
)
from hookflow.config import AnalysisConfig
from hookflow.logging_config import get_logger
from hookflow.models import ExternalCall
from hookflow.parsers.tree_sitter_adapter import UniversalASTNode

logger = get_logger(__name__)

# Conventional ref-current access, e.g. ``inputRef.current.focus``
REF_CURRENT_PATTERN = re.compile(r"Ref\.current\.")

MUTATING_METHODS = frozenset({"push", "pop", "shift", "unshift", "splice", "set", "update"})

# Subtrees that never contribute references
_OPAQUE_TYPES = (
    FUNCTION_LITERAL_TYPES
    | FUNCTION_DECLARATION_TYPES
    | {
        "class_declaration",
        "class",
        "method_definition",
        "type_annotation",
        "type_arguments",
        "type_alias_declaration",
        "interface_declaration",
        "import_statement",
        "regex",
    }
)

_PATTERN_TYPES = frozenset({"array_pattern", "object_pattern"})

_LOOP_TYPES = frozenset({"for_statement", "for_in_statement", "while_statement", "do_statement"})


@dataclass
class FunctionAnalysis:
    """What one function body reads, calls and mutates."""
    references: List[str] = field(default_factory=list)
    external_calls: List[ExternalCall] = field(default_factory=list)
    writes: Optional[List[str]] = None


class _Collector:
    """Mutable accumulator threaded through one traversal."""

    def __init__(self):
        self.references: List[str] = []
        self._seen = set()
        self.external_calls: List[ExternalCall] = []

    def add(self, name: str) -> None:
        if name not in self._seen:
            self._seen.add(name)
            self.references.append(name)

    def extend(self, names: List[str]) -> None:
        for name in names:
            self.add(name)


class ReferenceExtractor:
    """Collect references, external calls and writes from function bodies.

    Args:
        config: Analysis settings; supplies the external-call prefixes, the
            built-in exclusions and the ref-variable suffixes.

    Example:
        >>> extractor = ReferenceExtractor()
        >>> result = extractor.analyze_function(function_node)
        >>> result.references
        ['setCount', 'count']
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()
        self._prefixes = tuple(self.config.external_call_prefixes)
        self._exclusions = tuple(self.config.builtin_exclusions)
        self._ref_suffixes = tuple(self.config.ref_suffixes)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def analyze_function(self, function: UniversalASTNode) -> FunctionAnalysis:
        """Analyze the body of a function literal or declaration."""
        body = function.get_field("body")
        if body is None:
            return FunctionAnalysis()

        collector = _Collector()
        writes: List[str] = []
        if body.node_type == "statement_block":
            for statement in body.named_children:
                self._visit(statement, collector, 0)
                self._collect_writes(statement, writes)
        else:
            # Arrow function with an expression body
            self._visit(body, collector, 0)
            self._collect_expression_writes(unwrap_expression(body), writes)

        return FunctionAnalysis(
            references=collector.references,
            external_calls=collector.external_calls,
            writes=unique(writes) or None,
        )

    def analyze_expression(self, expression: Optional[UniversalASTNode]) -> FunctionAnalysis:
        """References and external calls of a standalone expression."""
        collector = _Collector()
        if expression is not None:
            self._visit(expression, collector, 0)
        return FunctionAnalysis(
            references=collector.references,
            external_calls=collector.external_calls,
        )

    def is_external_call(self, function_name: str) -> bool:
        """True for dotted names with an external prefix and no built-in exclusion."""
        if "." not in function_name:
            return False
        is_external = function_name.startswith(self._prefixes) or bool(
            REF_CURRENT_PATTERN.search(function_name)
        )
        return is_external and not function_name.startswith(self._exclusions)

    def imperative_handle_call(self, callee: UniversalASTNode) -> Optional[Tuple[str, str]]:
        """``(refName, methodName)`` for ``someRef.current.method``, else None."""
        if callee.node_type != "member_expression":
            return None
        method = callee.get_field("property")
        inner = unwrap_expression(callee.get_field("object"))
        if method is None or inner is None or inner.node_type != "member_expression":
            return None
        current = inner.get_field("property")
        ref = unwrap_expression(inner.get_field("object"))
        if current is None or current.text != "current":
            return None
        if ref is None or ref.node_type != "identifier":
            return None
        if not ref.text.endswith(self._ref_suffixes):
            return None
        return ref.text, method.text

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def _visit(self, node: Optional[UniversalASTNode], collector: _Collector, depth: int) -> None:
        if node is None:
            return
        if depth > self.config.max_depth:
            logger.debug(f"Reference traversal depth limit reached at line {node.start_line + 1}")
            return

        node_type = node.node_type
        if node_type in _OPAQUE_TYPES:
            return
        if node_type == "identifier":
            collector.add(node.text)
            return
        if node_type == "shorthand_property_identifier":
            collector.add(node.text)
            return

        if node_type == "member_expression":
            self._visit(node.get_field("object"), collector, depth + 1)
        elif node_type == "subscript_expression":
            self._visit(node.get_field("object"), collector, depth + 1)
            self._visit(node.get_field("index"), collector, depth + 1)
        elif node_type == "call_expression":
            self._visit_call(node, collector, depth)
        elif node_type in ("assignment_expression", "augmented_assignment_expression"):
            left = node.get_field("left")
            if left is not None and left.node_type not in _PATTERN_TYPES:
                self._visit(left, collector, depth + 1)
            self._visit(node.get_field("right"), collector, depth + 1)
        elif node_type == "pair":
            self._visit(node.get_field("value"), collector, depth + 1)
        elif node_type in DECLARATION_TYPES:
            for declarator in node.named_children:
                if declarator.node_type == "variable_declarator":
                    self._visit(declarator.get_field("value"), collector, depth + 1)
        elif node_type == "for_in_statement":
            self._visit(node.get_field("right"), collector, depth + 1)
            self._visit(node.get_field("body"), collector, depth + 1)
        elif node_type == "catch_clause":
            self._visit(node.get_field("body"), collector, depth + 1)
        elif node_type == "jsx_attribute":
            # Only the value matters
            for child in node.named_children[1:]:
                self._visit(child, collector, depth + 1)
        elif node_type in ("jsx_opening_element", "jsx_self_closing_element"):
            for attribute in node.get_fields("attribute"):
                self._visit(attribute, collector, depth + 1)
        elif node_type == "jsx_element":
            for child in node.named_children:
                if child.node_type not in ("jsx_closing_element", "jsx_text"):
                    self._visit(child, collector, depth + 1)
        else:
            for child in node.named_children:
                self._visit(child, collector, depth + 1)

    def _visit_call(self, call: UniversalASTNode, collector: _Collector, depth: int) -> None:
        callee = unwrap_expression(call.get_field("function"))
        args = call_arguments(call)

        if callee is not None and callee.node_type == "member_expression":
            handle = self.imperative_handle_call(callee)
            function_name = dotted_name(callee)
            if handle is not None:
                ref_name, method_name = handle
                collector.external_calls.append(ExternalCall(
                    function_name=method_name,
                    arguments=self._identifier_arguments(args),
                    is_imperative_handle_call=True,
                    ref_name=ref_name,
                    method_name=method_name,
                ))
            elif function_name and self.is_external_call(function_name):
                callback_references: List[str] = []
                for arg in args:
                    if is_function_literal(unwrap_expression(arg)):
                        callback_references.extend(
                            self.analyze_function(unwrap_expression(arg)).references
                        )
                collector.external_calls.append(ExternalCall(
                    function_name=function_name,
                    arguments=self._identifier_arguments(args),
                    callback_references=unique(callback_references) or None,
                ))
            self._visit(callee.get_field("object"), collector, depth + 1)
        elif callee is not None and callee.node_type == "identifier":
            collector.add(callee.text)
        else:
            self._visit(callee, collector, depth + 1)

        for arg in args:
            expression = unwrap_expression(arg)
            if is_function_literal(expression):
                callback = self.analyze_function(expression)
                collector.extend(callback.references)
                collector.external_calls.extend(callback.external_calls)
            else:
                self._visit(arg, collector, depth + 1)

    @staticmethod
    def _identifier_arguments(args: List[UniversalASTNode]) -> List[str]:
        names = []
        for arg in args:
            expression = unwrap_expression(arg)
            if expression is not None and expression.node_type == "identifier":
                names.append(expression.text)
        return names

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _collect_writes(self, statement: Optional[UniversalASTNode], writes: List[str]) -> None:
        if statement is None:
            return
        node_type = statement.node_type
        if node_type == "expression_statement":
            for child in statement.named_children:
                self._collect_expression_writes(unwrap_expression(child), writes)
        elif node_type == "statement_block":
            for child in statement.named_children:
                self._collect_writes(child, writes)
        elif node_type == "if_statement":
            self._collect_writes(statement.get_field("consequence"), writes)
            alternative = statement.get_field("alternative")
            if alternative is not None:
                for child in alternative.named_children:
                    self._collect_writes(child, writes)
        elif node_type in _LOOP_TYPES:
            self._collect_writes(statement.get_field("body"), writes)
        elif node_type == "switch_statement":
            body = statement.get_field("body")
            for case in body.named_children if body is not None else []:
                for child in case.named_children:
                    self._collect_writes(child, writes)
        elif node_type == "try_statement":
            self._collect_writes(statement.get_field("body"), writes)
            handler = statement.get_field("handler")
            if handler is not None:
                self._collect_writes(handler.get_field("body"), writes)
            finalizer = statement.get_field("finalizer")
            if finalizer is not None:
                self._collect_writes(finalizer.get_field("body"), writes)

    @staticmethod
    def _collect_expression_writes(expression: Optional[UniversalASTNode], writes: List[str]) -> None:
        if expression is None:
            return
        node_type = expression.node_type
        if node_type == "sequence_expression":
            for child in expression.named_children:
                ReferenceExtractor._collect_expression_writes(unwrap_expression(child), writes)
        elif node_type in ("assignment_expression", "augmented_assignment_expression"):
            left = unwrap_expression(expression.get_field("left"))
            if left is None:
                return
            if left.node_type == "identifier":
                writes.append(left.text)
            elif left.node_type in ("member_expression", "subscript_expression"):
                root = root_identifier(left)
                if root:
                    writes.append(root)
        elif node_type == "update_expression":
            argument = unwrap_expression(expression.get_field("argument"))
            if argument is not None and argument.node_type == "identifier":
                writes.append(argument.text)
        elif node_type == "call_expression":
            callee = unwrap_expression(expression.get_field("function"))
            if callee is None or callee.node_type != "member_expression":
                return
            target = unwrap_expression(callee.get_field("object"))
            method = callee.get_field("property")
            if (
                target is not None
                and target.node_type == "identifier"
                and method is not None
                and method.text in MUTATING_METHODS
            ):
                writes.append(target.text)
