"""Table-driven processor for data-fetching and form libraries.

SWR, TanStack Query, Apollo Client, RTK Query and React Hook Form all
follow the same recipe: map the bound variables through a return-value
table, draw one consolidated ``library-hook`` node per call site and,
for fetching hooks, connect it to a server node. Each library is a
:class:`LibrarySpec`; the tables live in :mod:`hookflow.libraries.specs`.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from hookflow.libraries.base import LibraryProcessor, ProcessorMetadata
from hookflow.libraries.helpers import (
    ReturnMapping,
    create_consolidated_node,
    data_fetching_edges,
    map_variables_to_types,
)
from hookflow.models import HookOccurrence, ProcessorResult

EndpointStrategy = Callable[[HookOccurrence], Optional[str]]


@dataclass(frozen=True)
class HookRule:
    """How one hook of a library is drawn.

    Attributes:
        mappings: Return-value table for the hook
        edge: ``fetch``, ``mutate``, ``query`` or ``subscribe``; None means
            no server node
        endpoint: Derives the server label from the occurrence
        server_when_bound: Only create the server node when this member is
            bound, and then without an endpoint
    """
    mappings: Tuple[ReturnMapping, ...] = ()
    edge: Optional[str] = None
    endpoint: Optional[EndpointStrategy] = None
    server_when_bound: Optional[str] = None


@dataclass(frozen=True)
class LibrarySpec:
    metadata: ProcessorMetadata
    rules: Dict[str, HookRule] = field(default_factory=dict)


# ----------------------------------------------------------------------
# Endpoint strategies
# ----------------------------------------------------------------------


def string_argument(occurrence: HookOccurrence) -> Optional[str]:
    """First argument when it is a string literal (``useSWR('/api/user')``)."""
    if occurrence.arguments and occurrence.arguments[0].type == "string":
        return occurrence.arguments[0].value
    return None


def keyed_argument(generic: str) -> EndpointStrategy:
    """String first argument, or ``generic`` for an object/array key."""
    def strategy(occurrence: HookOccurrence) -> Optional[str]:
        value = string_argument(occurrence)
        if value is not None:
            return value
        if occurrence.arguments and occurrence.arguments[0].type in ("object", "array"):
            return generic
        return None
    return strategy


def with_fallback(strategy: EndpointStrategy, fallback: str) -> EndpointStrategy:
    def wrapped(occurrence: HookOccurrence) -> Optional[str]:
        return strategy(occurrence) or fallback
    return wrapped


class TableDrivenProcessor(LibraryProcessor):
    """Processor whose behaviour is fully described by a :class:`LibrarySpec`."""

    def __init__(self, spec: LibrarySpec):
        self.library_spec = spec
        self.metadata = spec.metadata

    def rule_for(self, occurrence: HookOccurrence) -> Optional[HookRule]:
        return self.library_spec.rules.get(occurrence.hook_name)

    def extra_metadata(self, occurrence: HookOccurrence) -> Dict[str, Any]:
        return {}

    def label_for(self, occurrence: HookOccurrence) -> str:
        return occurrence.hook_name

    def endpoint_for(self, occurrence: HookOccurrence, rule: HookRule) -> Optional[str]:
        return rule.endpoint(occurrence) if rule.endpoint is not None else None

    def process(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        log = session.logger_for(self.metadata.id)
        log.start(occurrence.hook_name, occurrence)

        rule = self.rule_for(occurrence)
        if rule is None:
            log.warn(f"Unknown {self.metadata.library_name} hook: {occurrence.hook_name}")
            return ProcessorResult(handled=False)

        mapped = map_variables_to_types(occurrence.variables, list(rule.mappings))

        server = None
        if rule.edge is not None:
            if rule.server_when_bound is not None:
                if rule.server_when_bound in mapped.process_properties:
                    server = session.create_server_node(None, occurrence.line, occurrence.column)
            else:
                endpoint = self.endpoint_for(occurrence, rule)
                if endpoint:
                    server = session.create_server_node(endpoint, occurrence.line, occurrence.column)
                    log.debug(f"Created server node with endpoint: {endpoint}")
                else:
                    log.warn(f"No endpoint found for {occurrence.hook_name}; it may be dynamic")
            if server is not None:
                log.node("created", server)

        node = create_consolidated_node(
            occurrence,
            session,
            library_name=self.metadata.library_name,
            mapped=mapped,
            server_node_id=server.id if server is not None else None,
            label=self.label_for(occurrence),
            additional_metadata=self.extra_metadata(occurrence),
        )
        log.node("created", node)

        result = ProcessorResult(nodes=[node])
        if server is not None:
            result.nodes.append(server)
            result.edges.extend(data_fetching_edges(server.id, node.id, rule.edge))
            for edge in result.edges:
                log.edge("created", edge)

        log.complete(result)
        return result
