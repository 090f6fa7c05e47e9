"""Shared node/edge builders for library processors."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from hookflow.classification.heuristics import FUNCTION
from hookflow.models import DFDEdge, DFDNode, HookOccurrence, ProcessorResult

PROCESS = "process"
DATA_STORE = "data-store"
EXTERNAL_INPUT = "external-entity-input"
EXTERNAL_OUTPUT = "external-entity-output"


@dataclass(frozen=True)
class ReturnMapping:
    """How one returned member of a library hook is drawn.

    A mapping matches a bound variable by ``property_name`` (object
    destructuring) or by ``position`` (array destructuring).
    """
    property_name: Optional[str] = None
    element_type: str = DATA_STORE
    metadata: Dict[str, Any] = field(default_factory=dict)
    position: Optional[int] = None


@dataclass
class MappedVariables:
    data_properties: List[str] = field(default_factory=list)
    process_properties: List[str] = field(default_factory=list)
    property_metadata: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @property
    def properties(self) -> List[str]:
        return self.data_properties + self.process_properties


def find_mapping(variable: str, index: int, mappings: List[ReturnMapping]) -> Optional[ReturnMapping]:
    for mapping in mappings:
        if mapping.property_name is not None and mapping.property_name == variable:
            return mapping
    for mapping in mappings:
        if mapping.position is not None and mapping.position == index:
            return mapping
    return None


def map_variables_to_types(variables: List[str], mappings: List[ReturnMapping]) -> MappedVariables:
    """Sort bound variables into data and process members.

    Unmapped variables are data stores.
    """
    mapped = MappedVariables()
    for index, variable in enumerate(variables):
        mapping = find_mapping(variable, index, mappings)
        if mapping is None:
            mapped.property_metadata[variable] = {"dfdElementType": DATA_STORE}
            mapped.data_properties.append(variable)
            continue

        mapped.property_metadata[variable] = {"dfdElementType": mapping.element_type, **mapping.metadata}
        if mapping.element_type == PROCESS:
            mapped.process_properties.append(variable)
        else:
            mapped.data_properties.append(variable)
    return mapped


def create_consolidated_node(
    occurrence: HookOccurrence,
    session,
    library_name: str,
    mapped: MappedVariables,
    server_node_id: Optional[str] = None,
    label: Optional[str] = None,
    additional_metadata: Optional[Dict[str, Any]] = None,
) -> DFDNode:
    """One ``library-hook`` node standing for a whole call site."""
    return DFDNode(
        id=session.next_id("library_hook"),
        label=label or occurrence.hook_name,
        type=DATA_STORE,
        line=occurrence.line,
        column=occurrence.column,
        metadata={
            "category": "library-hook",
            "hookName": occurrence.hook_name,
            "libraryName": library_name,
            "isLibraryHook": True,
            "properties": mapped.properties,
            "dataProperties": mapped.data_properties,
            "processProperties": mapped.process_properties,
            "propertyMetadata": mapped.property_metadata,
            "serverNodeId": server_node_id,
            "line": occurrence.line,
            "column": occurrence.column,
            **(additional_metadata or {}),
        },
    )


def data_fetching_edges(server_node_id: Optional[str], hook_node_id: str, edge_type: str) -> List[DFDEdge]:
    """Edge between a server node and a hook node.

    ``mutate`` flows from the hook to the server; ``fetch``, ``query`` and
    ``subscribe`` flow from the server to the hook.
    """
    if not server_node_id:
        return []
    if edge_type == "mutate":
        return [DFDEdge(from_id=hook_node_id, to_id=server_node_id, label=edge_type)]
    return [DFDEdge(from_id=server_node_id, to_id=hook_node_id, label=edge_type)]


def process_hook_with_subgraphs(
    occurrence: HookOccurrence,
    session,
    processor_id: str,
    data_category: str,
    function_category: str,
    data_node_type: str = EXTERNAL_INPUT,
    function_node_type: str = EXTERNAL_OUTPUT,
    library_name: Optional[str] = None,
    additional_metadata: Optional[Dict[str, Any]] = None,
    classify_variable: Optional[Callable[[str], str]] = None,
) -> ProcessorResult:
    """One node per bound variable, split into input and output subgraphs.

    Variables are classified by ``classify_variable`` when given, else by
    the occurrence's ``variable_types``; with neither, everything is data.
    """
    log = session.logger_for(processor_id)
    data_values: List[str] = []
    function_values: List[str] = []

    if classify_variable is not None:
        for variable in occurrence.variables:
            (function_values if classify_variable(variable) == FUNCTION else data_values).append(variable)
    elif occurrence.variable_types:
        for variable in occurrence.variables:
            kind = occurrence.variable_types.get(variable)
            (function_values if kind == FUNCTION else data_values).append(variable)
    else:
        log.warn(f"No type classification for {occurrence.hook_name}, treating all as data")
        data_values.extend(occurrence.variables)

    log.debug(f"Data values: {', '.join(data_values)}")
    log.debug(f"Function values: {', '.join(function_values)}")

    library_metadata = {"libraryName": library_name, "isLibraryHook": True} if library_name else {}

    def build(variable: str, category: str, node_type: str, direction: str) -> DFDNode:
        node = DFDNode(
            id=session.next_id(category.replace("-", "_")),
            label=variable,
            type=node_type,
            line=occurrence.line,
            column=occurrence.column,
            metadata={
                "category": category,
                "hookName": occurrence.hook_name,
                "variableName": variable,
                "subgraph": f"{occurrence.hook_name}-{direction}",
                "line": occurrence.line,
                "column": occurrence.column,
                **library_metadata,
                **(additional_metadata or {}),
            },
        )
        log.node("created", node)
        return node

    nodes = [build(v, data_category, data_node_type, "input") for v in data_values]
    nodes.extend(build(v, function_category, function_node_type, "output") for v in function_values)

    result = ProcessorResult(nodes=nodes)
    log.complete(result)
    return result
