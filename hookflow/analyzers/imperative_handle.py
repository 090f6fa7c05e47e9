"""Exported handler extraction for ``useImperativeHandle``.

    useImperativeHandle(ref, () => ({
      focus: () => inputRef.current.focus(),
      async reset(value) { api.reset(value); },
    }), [inputRef]);

yields one :class:`ExportedHandler` per method of the returned object.
"""

from typing import List, Optional

from hookflow.analyzers.position import PositionIndex
from hookflow.analyzers.references import ReferenceExtractor
from hookflow.analyzers.syntax import (
    call_arguments,
    is_async,
    is_function_literal,
    parameter_names,
    string_value,
    unwrap_expression,
)
from hookflow.logging_config import get_logger
from hookflow.models import ExportedHandler
from hookflow.parsers.tree_sitter_adapter import UniversalASTNode

logger = get_logger(__name__)


class ImperativeHandleAnalyzer:
    """Extract the methods exposed by a ``useImperativeHandle`` factory."""

    def __init__(self, positions: PositionIndex, references: ReferenceExtractor):
        self.positions = positions
        self.references = references

    def analyze(self, call: UniversalASTNode) -> List[ExportedHandler]:
        """Handlers for one ``useImperativeHandle(ref, factory, deps)`` call.

        Returns an empty list when the factory is not a function literal or
        does not return an object literal.
        """
        args = call_arguments(call)
        if len(args) < 2:
            return []
        factory = unwrap_expression(args[1])
        if not is_function_literal(factory):
            return []

        returned = self.find_returned_object(factory)
        if returned is None:
            logger.debug("useImperativeHandle factory does not return an object literal")
            return []

        handlers = []
        for prop in returned.named_children:
            handler = self._handler_from_property(prop)
            if handler is not None:
                handlers.append(handler)
        return handlers

    @staticmethod
    def find_returned_object(factory: UniversalASTNode) -> Optional[UniversalASTNode]:
        body = factory.get_field("body")
        if body is None:
            return None
        if body.node_type != "statement_block":
            body = unwrap_expression(body)
            return body if body is not None and body.node_type == "object" else None

        for statement in body.named_children:
            if statement.node_type != "return_statement":
                continue
            named = statement.named_children
            value = unwrap_expression(named[0]) if named else None
            if value is not None and value.node_type == "object":
                return value
        return None

    def _handler_from_property(self, prop: UniversalASTNode) -> Optional[ExportedHandler]:
        if prop.node_type == "pair":
            name = _property_key(prop.get_field("key"))
            function = unwrap_expression(prop.get_field("value"))
            if name is None or not is_function_literal(function):
                return None
            return self._analyze_method(name, function)
        if prop.node_type == "method_definition":
            name = _property_key(prop.get_field("name"))
            if name is None:
                return None
            return self._analyze_method(name, prop)
        return None

    def _analyze_method(self, name: str, function: UniversalASTNode) -> ExportedHandler:
        analysis = self.references.analyze_function(function)
        line, column = self.positions.of(function)
        return ExportedHandler(
            name=name,
            parameters=parameter_names(function),
            references=analysis.references,
            external_calls=analysis.external_calls,
            returns_value=_returns_value(function),
            is_async=is_async(function),
            line=line,
            column=column,
        )


def _property_key(key: Optional[UniversalASTNode]) -> Optional[str]:
    if key is None:
        return None
    if key.node_type in ("property_identifier", "identifier"):
        return key.text
    return string_value(key)


def _returns_value(function: UniversalASTNode) -> bool:
    """Expression-bodied arrows always return; blocks need a top-level ``return x``."""
    body = function.get_field("body")
    if body is None:
        return False
    if body.node_type != "statement_block":
        return True
    return any(
        statement.node_type == "return_statement" and statement.named_children
        for statement in body.named_children
    )
