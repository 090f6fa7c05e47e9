"""Svelte 5 rune matchers.

    let count = $state(0);
    let items = $state.raw<Item[]>([]);
    const doubled = $derived(count * 2);
    const total = $derived.by(() => items.reduce(sum, 0));
    let { title, onSave } = $props();
    $effect(() => { document.title = title; });

Runes are compiler macros, not hooks: they are reported as
:class:`~hookflow.models.RuneInfo` records, and ``$effect`` bodies as
processes, instead of going through the processor registry.
"""

from itertools import count
from typing import Dict, Iterator, List, Optional, Tuple

from hookflow.analyzers.conditionals import expression_variables
from hookflow.analyzers.position import PositionIndex
from hookflow.analyzers.references import ReferenceExtractor
from hookflow.analyzers.syntax import (
    call_arguments,
    declarators,
    is_call,
    is_function_literal,
    pattern_names,
    statements_of,
    unwrap_expression,
)
from hookflow.analyzers.vue_script import (
    VueScriptAnalyzer,
    declared_data_type,
    first_type_argument,
    type_string,
)
from hookflow.logging_config import get_logger
from hookflow.models import Diagnostic, ProcessOccurrence, PropInfo, RuneInfo
from hookflow.parsers.tree_sitter_adapter import UniversalASTNode

logger = get_logger(__name__)

# Rune and the member variants that still declare it (``$state.raw``)
RUNES = {
    "$state": frozenset({"raw"}),
    "$derived": frozenset({"by"}),
    "$effect": frozenset({"pre"}),
    "$props": frozenset(),
}


def rune_call(node: Optional[UniversalASTNode]) -> Tuple[Optional[str], Optional[str]]:
    """``("$derived", "by")`` for ``$derived.by(...)``, ``(None, None)`` for other calls.

    Non-declaring members such as ``$state.snapshot(x)`` are not runes here.
    """
    if not is_call(node):
        return None, None
    callee = node.get_field("function")
    if callee is None:
        return None, None
    if callee.node_type == "identifier" and callee.text in RUNES:
        return callee.text, None
    if callee.node_type == "member_expression":
        obj = callee.get_field("object")
        prop = callee.get_field("property")
        if obj is not None and prop is not None and obj.node_type == "identifier":
            if prop.text in RUNES.get(obj.text, ()):
                return obj.text, prop.text
    return None, None


class SvelteRunesAnalyzer:
    """Extract rune declarations from a Svelte ``<script>`` body.

    After :meth:`analyze`, ``effect_processes`` holds one process per
    ``$effect`` and ``diagnostics`` lists statements that were skipped.

    Args:
        positions: Position index for the parsed script
        references: Extractor used for ``$effect`` and ``$derived.by`` bodies
    """

    def __init__(self, positions: PositionIndex, references: Optional[ReferenceExtractor] = None):
        self.positions = positions
        self.references = references or ReferenceExtractor()
        self.effect_processes: List[ProcessOccurrence] = []
        self.diagnostics: List[Diagnostic] = []

    def analyze(self, body: Optional[UniversalASTNode]) -> List[RuneInfo]:
        runes: List[RuneInfo] = []
        self.effect_processes = []
        self.diagnostics = []
        effects = count(1)
        for statement in statements_of(body):
            try:
                runes.extend(self.analyze_statement(statement, effects))
            except Exception as e:
                line = self.positions.of(statement)[0]
                logger.warning(f"Skipping rune statement at line {line}: {e}", exc_info=True)
                self.diagnostics.append(Diagnostic(stage="runes", message=str(e), line=line))
        logger.debug(f"Found {len(runes)} rune(s)")
        return runes

    def analyze_statement(self, statement: UniversalASTNode, effects: Iterator[int]) -> List[RuneInfo]:
        if statement.node_type == "expression_statement":
            named = statement.named_children
            call = unwrap_expression(named[0]) if named else None
            rune, variant = rune_call(call)
            if rune == "$effect":
                return [self._effect(call, variant, f"effect_{next(effects)}")]
            return []

        runes = []
        for declarator in declarators(statement):
            call = unwrap_expression(declarator.get_field("value"))
            rune, variant = rune_call(call)
            if rune == "$state":
                info = self._state(declarator, call)
            elif rune == "$derived":
                info = self._derived(declarator, call, variant)
            elif rune == "$props":
                info = self._props(declarator, call)
            else:
                info = None
            if info is not None:
                runes.append(info)
        return runes

    def _state(self, declarator: UniversalASTNode, call: UniversalASTNode) -> Optional[RuneInfo]:
        name_node = declarator.get_field("name")
        if name_node is None or name_node.node_type != "identifier":
            logger.debug("Destructured $state declaration is not tracked")
            return None
        line, column = self.positions.of(call)
        return RuneInfo(
            name=name_node.text,
            kind="state",
            data_type=declared_data_type(declarator, call),
            line=line,
            column=column,
        )

    def _derived(self, declarator: UniversalASTNode, call: UniversalASTNode,
                 variant: Optional[str]) -> Optional[RuneInfo]:
        name_node = declarator.get_field("name")
        if name_node is None or name_node.node_type != "identifier":
            return None

        args = call_arguments(call)
        argument = unwrap_expression(args[0]) if args else None
        if variant == "by" and is_function_literal(argument):
            dependencies = self.references.analyze_function(argument).references
        else:
            dependencies = expression_variables(argument)

        declared = declarator.get_field("type") or first_type_argument(call)
        line, column = self.positions.of(call)
        return RuneInfo(
            name=name_node.text,
            kind="derived",
            data_type=type_string(declared) if declared is not None else "computed",
            line=line,
            column=column,
            dependencies=dependencies,
        )

    def _props(self, declarator: UniversalASTNode, call: UniversalASTNode) -> RuneInfo:
        name_node = declarator.get_field("name")
        declared = declarator.get_field("type") or first_type_argument(call)
        declared_types = self._declared_prop_types(declared)

        if name_node is not None and name_node.node_type == "object_pattern":
            name = "props"
            props = []
            for member in name_node.named_children:
                key = _pattern_key(member)
                if key:
                    line, column = self.positions.of(member)
                    props.append(PropInfo(name=key, type=declared_types.get(key, "unknown"), line=line, column=column))
        else:
            name = name_node.text if name_node is not None else "props"
            props = self._typed_props(declared)

        line, column = self.positions.of(call)
        return RuneInfo(
            name=name,
            kind="props",
            data_type=type_string(declared) if declared is not None else "object",
            line=line,
            column=column,
            props=props,
        )

    def _typed_props(self, declared: Optional[UniversalASTNode]) -> List[PropInfo]:
        object_type = _object_type(declared)
        if object_type is None:
            return []
        return VueScriptAnalyzer(self.positions).props_from_object_type(object_type)

    def _declared_prop_types(self, declared: Optional[UniversalASTNode]) -> Dict[str, str]:
        return {prop.name: prop.type for prop in self._typed_props(declared)}

    def _effect(self, call: UniversalASTNode, variant: Optional[str], name: str) -> RuneInfo:
        args = call_arguments(call)
        callback = unwrap_expression(args[0]) if args else None
        line, column = self.positions.of(call)

        process = ProcessOccurrence(
            name=name,
            type="$effect.pre" if variant == "pre" else "$effect",
            line=line,
            column=column,
        )
        if is_function_literal(callback):
            analysis = self.references.analyze_function(callback)
            process.references = analysis.references
            process.external_calls = analysis.external_calls
            process.writes = analysis.writes
        self.effect_processes.append(process)

        return RuneInfo(
            name=name,
            kind="effect",
            line=line,
            column=column,
            dependencies=list(process.references),
        )


def _object_type(declared: Optional[UniversalASTNode]) -> Optional[UniversalASTNode]:
    """The object literal type of ``: { a: string }`` or ``<{ a: string }>``."""
    if declared is None:
        return None
    if declared.node_type == "type_annotation":
        named = declared.named_children
        declared = named[0] if named else None
    if declared is not None and declared.node_type == "object_type":
        return declared
    return None


def _pattern_key(member: UniversalASTNode) -> Optional[str]:
    """Prop name bound by one member of a ``$props()`` destructuring pattern."""
    if member.node_type == "rest_pattern":
        return None
    if member.node_type == "pair_pattern":
        key = member.get_field("key")
        return key.text if key is not None else None
    if member.node_type == "object_assignment_pattern":
        left = member.get_field("left")
        return left.text if left is not None else None
    names = pattern_names(member)
    return names[0] if names else None
