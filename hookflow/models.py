"""Data models for Hookflow analysis results.

Records flow through three stages:

1. Matchers produce :class:`HookMatch` (pure syntax, optionally tagged with
   the library it was imported from).
2. The classification engine turns each match into a :class:`HookOccurrence`
   carrying ``variable_types`` and reducer details.
3. Library processors turn occurrences into :class:`DFDNode` and
   :class:`DFDEdge` lists wrapped in a :class:`ProcessorResult`.

Every record has a ``to_dict()`` producing the camelCase keys the diagram
builder consumes.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional, Union


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None."""
    return {key: value for key, value in data.items() if value is not None}


# ============================================================================
# Hooks
# ============================================================================


@dataclass(frozen=True)
class ArgumentValue:
    """A call argument reduced to its literal type (and value when literal).

    ``type`` is ``string``/``number``/``boolean`` for literals, otherwise the
    syntax node kind of the argument (``identifier``, ``arrow_function``, ...).
    """
    type: str
    value: Optional[Union[str, int, float, bool]] = None

    @property
    def is_literal(self) -> bool:
        return self.type in ("string", "number", "boolean")

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"type": self.type, "value": self.value})


@dataclass(frozen=True)
class ReducerPattern:
    """Syntactic shape of a ``useReducer`` destructuring."""
    state_variable: Optional[str] = None
    dispatch_variable: Optional[str] = None
    state_properties: Optional[List[str]] = None


@dataclass(frozen=True)
class HookMatch:
    """One matched state/data-producing call site, before classification."""
    hook_name: str
    variables: List[str]
    line: int
    column: int
    dependencies: Optional[List[str]] = None
    arguments: List[ArgumentValue] = field(default_factory=list)
    argument_identifiers: List[str] = field(default_factory=list)
    type_parameter: Optional[str] = None
    initial_value: Optional[str] = None
    is_read_write_pair: bool = False
    is_function_only: bool = False
    reducer_pattern: Optional[ReducerPattern] = None
    library_name: Optional[str] = None
    # Bound through an object or array pattern rather than a plain identifier
    destructured: bool = False
    source: Optional[str] = None
    # Full dotted callee for member calls (``trpc.user.get.useQuery``)
    callee_path: Optional[str] = None

    def with_library(self, library_name: Optional[str], source: Optional[str] = None) -> "HookMatch":
        """Return a copy tagged with the library the hook was imported from."""
        return replace(self, library_name=library_name, source=source or self.source)

    def base_fields(self) -> Dict[str, Any]:
        """Field values shared with :class:`HookOccurrence`."""
        return {f.name: getattr(self, f.name) for f in fields(HookMatch)}

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "hookName": self.hook_name,
            "variables": list(self.variables),
            "line": self.line,
            "column": self.column,
            "dependencies": self.dependencies,
            "arguments": [arg.to_dict() for arg in self.arguments] or None,
            "argumentIdentifiers": self.argument_identifiers or None,
            "typeParameter": self.type_parameter,
            "initialValue": self.initial_value,
            "isReadWritePair": self.is_read_write_pair,
            "isFunctionOnly": self.is_function_only,
            "libraryName": self.library_name,
            "source": self.source,
            "calleePath": self.callee_path,
        })

    @property
    def qualified_name(self) -> str:
        """Dotted callee when called through a member chain, else the hook name."""
        return self.callee_path or self.hook_name

    @property
    def callee_depth(self) -> int:
        return self.qualified_name.count(".") + 1


@dataclass(frozen=True)
class ReducerInfo:
    """Classified ``useReducer`` occurrence details."""
    state_variable: Optional[str] = None
    dispatch_variable: Optional[str] = None
    reducer_name: Optional[str] = None
    state_properties: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "stateVariable": self.state_variable,
            "dispatchVariable": self.dispatch_variable,
            "reducerName": self.reducer_name,
            "stateProperties": self.state_properties,
        })


@dataclass(frozen=True)
class HookOccurrence(HookMatch):
    """A hook occurrence after the classification pass.

    ``variable_types`` maps variable name to ``"function"`` or ``"data"``.
    ``None`` means the hook was not classified and consumers apply their own
    default.
    """
    variable_types: Optional[Dict[str, str]] = None
    reducer: Optional[ReducerInfo] = None

    @classmethod
    def from_match(
        cls,
        match: HookMatch,
        variable_types: Optional[Dict[str, str]] = None,
        reducer: Optional[ReducerInfo] = None,
    ) -> "HookOccurrence":
        return cls(**match.base_fields(), variable_types=variable_types, reducer=reducer)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.variable_types is not None:
            data["variableTypes"] = dict(self.variable_types)
        if self.reducer is not None:
            data.update(self.reducer.to_dict())
        return data


# ============================================================================
# Processes
# ============================================================================


@dataclass
class ExternalCall:
    """A call to a recognized external service or an imperative handle."""
    function_name: str
    arguments: List[str] = field(default_factory=list)
    callback_references: Optional[List[str]] = None
    is_imperative_handle_call: bool = False
    ref_name: Optional[str] = None
    method_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = _compact({
            "functionName": self.function_name,
            "arguments": list(self.arguments),
            "callbackReferences": self.callback_references,
            "refName": self.ref_name,
            "methodName": self.method_name,
        })
        if self.is_imperative_handle_call:
            data["isImperativeHandleCall"] = True
        return data


@dataclass
class JSXUsage:
    """Where an inline handler is attached in JSX."""
    line: int
    column: int
    attribute_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"line": self.line, "column": self.column, "attributeName": self.attribute_name}


@dataclass
class ExportedHandler:
    """A method exposed through ``useImperativeHandle``."""
    name: str
    parameters: List[str] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
    external_calls: List[ExternalCall] = field(default_factory=list)
    returns_value: bool = False
    is_async: bool = False
    line: Optional[int] = None
    column: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "name": self.name,
            "parameters": list(self.parameters),
            "references": list(self.references),
            "externalCalls": [call.to_dict() for call in self.external_calls],
            "returnsValue": self.returns_value,
            "isAsync": self.is_async,
            "line": self.line,
            "column": self.column,
        })


@dataclass
class ProcessOccurrence:
    """One executable unit: effect/memo/callback body, function, or inline handler."""
    name: str
    type: str
    line: Optional[int] = None
    column: Optional[int] = None
    dependencies: Optional[List[str]] = None
    references: List[str] = field(default_factory=list)
    external_calls: List[ExternalCall] = field(default_factory=list)
    writes: Optional[List[str]] = None
    cleanup_process: Optional["ProcessOccurrence"] = None
    exported_handlers: Optional[List[ExportedHandler]] = None
    is_inline_handler: bool = False
    used_in_jsx_element: Optional[JSXUsage] = None

    def to_dict(self) -> Dict[str, Any]:
        data = _compact({
            "name": self.name,
            "type": self.type,
            "line": self.line,
            "column": self.column,
            "dependencies": self.dependencies,
            "references": list(self.references),
            "externalCalls": [call.to_dict() for call in self.external_calls],
            "writes": self.writes,
            "cleanupProcess": self.cleanup_process.to_dict() if self.cleanup_process else None,
            "exportedHandlers": (
                [handler.to_dict() for handler in self.exported_handlers]
                if self.exported_handlers is not None else None
            ),
            "usedInJSXElement": (
                self.used_in_jsx_element.to_dict() if self.used_in_jsx_element else None
            ),
        })
        if self.is_inline_handler:
            data["isInlineHandler"] = True
        return data


# ============================================================================
# Conditional / loop structures
# ============================================================================


@dataclass
class ConditionExpression:
    """Free variables of a condition plus a display rendering."""
    variables: List[str] = field(default_factory=list)
    expression: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"variables": list(self.variables), "expression": self.expression}


@dataclass
class AttributeReference:
    attribute_name: str
    references: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"attributeName": self.attribute_name, "references": list(self.references)}


@dataclass
class ElementStructure:
    """A rendered JSX or template element."""
    tag_name: str
    display_dependencies: List[str] = field(default_factory=list)
    attribute_references: List[AttributeReference] = field(default_factory=list)
    children: List["Structure"] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    line: Optional[int] = None
    column: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "type": "element",
            "tagName": self.tag_name,
            "displayDependencies": list(self.display_dependencies),
            "attributeReferences": [ref.to_dict() for ref in self.attribute_references],
            "children": [child.to_dict() for child in self.children],
            "metadata": self.metadata or None,
            "line": self.line,
            "column": self.column,
        })


@dataclass
class ConditionalStructure:
    """A conditional render: ternary, ``&&``, ``||`` or a ``v-if`` chain."""
    kind: str
    condition: ConditionExpression
    true_branch: Optional["Structure"] = None
    false_branch: Optional["Structure"] = None
    line: Optional[int] = None
    column: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "type": "conditional",
            "kind": self.kind,
            "condition": self.condition.to_dict(),
            "trueBranch": self.true_branch.to_dict() if self.true_branch else None,
            "falseBranch": self.false_branch.to_dict() if self.false_branch else None,
            "line": self.line,
            "column": self.column,
        })


@dataclass
class LoopStructure:
    """An iteration: ``.map()`` or ``v-for``."""
    kind: str
    source: str
    condition: ConditionExpression
    loop_variable: Optional[str] = None
    body: Optional["Structure"] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    line: Optional[int] = None
    column: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "type": "loop",
            "kind": self.kind,
            "source": self.source,
            "condition": self.condition.to_dict(),
            "loopVariable": self.loop_variable,
            "body": self.body.to_dict() if self.body else None,
            "attributes": self.attributes or None,
            "line": self.line,
            "column": self.column,
        })


Structure = Union[ElementStructure, ConditionalStructure, LoopStructure]


# ============================================================================
# Diagram output
# ============================================================================


@dataclass
class DFDNode:
    """A typed diagram node."""
    id: str
    label: str
    type: str  # data-store | external-entity-input | external-entity-output | process
    line: Optional[int] = None
    column: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "id": self.id,
            "label": self.label,
            "type": self.type,
            "line": self.line,
            "column": self.column,
            "metadata": dict(self.metadata),
        })


@dataclass
class DFDEdge:
    """A directed edge between two diagram nodes."""
    from_id: str
    to_id: str
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {"from": self.from_id, "to": self.to_id, "label": self.label}


@dataclass
class ProcessorResult:
    """Output of one library processor for one hook occurrence."""
    nodes: List[DFDNode] = field(default_factory=list)
    edges: List[DFDEdge] = field(default_factory=list)
    handled: bool = True
    subgraphs: Optional[List[Dict[str, Any]]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "handled": self.handled,
            "subgraphs": self.subgraphs,
        })


# ============================================================================
# Auxiliary matcher output
# ============================================================================


@dataclass
class ImportedItem:
    name: str
    alias: Optional[str] = None
    is_default: bool = False

    @property
    def local_name(self) -> str:
        return self.alias or self.name


@dataclass
class ImportInfo:
    """One import declaration."""
    source: str
    imports: List[ImportedItem] = field(default_factory=list)
    is_namespace_import: bool = False
    namespace: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "source": self.source,
            "imports": [
                _compact({"name": item.name, "alias": item.alias, "isDefault": item.is_default})
                for item in self.imports
            ],
            "isNamespaceImport": self.is_namespace_import,
            "namespace": self.namespace,
        })


@dataclass
class VueStateInfo:
    """A ``ref``/``reactive``/``computed`` declaration."""
    name: str
    kind: str
    data_type: str
    line: Optional[int] = None
    column: Optional[int] = None
    dependencies: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "name": self.name,
            "type": self.kind,
            "dataType": self.data_type,
            "line": self.line,
            "column": self.column,
            "dependencies": self.dependencies,
        })


@dataclass
class RuneInfo:
    """A Svelte 5 rune: ``$state``, ``$derived``, ``$effect`` or ``$props``."""
    name: str
    kind: str  # state | derived | effect | props
    data_type: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    dependencies: Optional[List[str]] = None
    props: List["PropInfo"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "name": self.name,
            "type": self.kind,
            "dataType": self.data_type,
            "line": self.line,
            "column": self.column,
            "dependencies": self.dependencies,
            "propsProperties": [prop.to_dict() for prop in self.props] or None,
        })


@dataclass
class PropInfo:
    name: str
    type: str = "unknown"
    line: Optional[int] = None
    column: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"name": self.name, "type": self.type, "line": self.line, "column": self.column})


@dataclass
class EventDeclaration:
    """An event declared via ``defineEmits`` or ``createEventDispatcher``."""
    name: str
    data_type: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"name": self.name, "dataType": self.data_type, "line": self.line, "column": self.column})


@dataclass
class DispatchCall:
    """A call of an emit/dispatch function with a literal event name."""
    event_name: str
    caller_process: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "eventName": self.event_name,
            "callerProcess": self.caller_process,
            "line": self.line,
            "column": self.column,
        })


@dataclass
class TemplateBinding:
    """A directive binding found in markup (``:attr``, ``@event``, ``v-model``)."""
    kind: str  # bind | event | model | display | condition
    target: str
    expression: str
    variables: List[str] = field(default_factory=list)
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "kind": self.kind,
            "target": self.target,
            "expression": self.expression,
            "variables": list(self.variables),
            "line": self.line,
        })


@dataclass
class Diagnostic:
    """A non-fatal problem recorded while analyzing one component."""
    stage: str
    message: str
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"stage": self.stage, "message": self.message, "line": self.line})
