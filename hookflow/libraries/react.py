"""Processor for React's built-in hooks."""

from typing import List

from hookflow.libraries.base import LibraryProcessor, ProcessorMetadata
from hookflow.libraries.helpers import (
    DATA_STORE,
    EXTERNAL_INPUT,
    EXTERNAL_OUTPUT,
    process_hook_with_subgraphs,
)
from hookflow.models import DFDNode, HookOccurrence, ProcessorResult


class ReactProcessor(LibraryProcessor):
    """State, reducer and context hooks become nodes; the rest are acknowledged.

    Effects, memos and callbacks are drawn as processes by the process
    extractor, and ``useRef`` does not take part in data flow, so those
    produce an empty handled result.
    """

    metadata = ProcessorMetadata(
        id="react",
        library_name="react",
        package_patterns=("react",),
        hook_names=(
            "useState",
            "useReducer",
            "useContext",
            "useImperativeHandle",
            "useEffect",
            "useLayoutEffect",
            "useCallback",
            "useMemo",
            "useRef",
        ),
        priority=100,
        description="React standard hooks processor",
    )

    def process(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        log = session.logger_for(self.metadata.id)
        log.start(occurrence.hook_name, occurrence)

        if occurrence.hook_name == "useState":
            return self._process_state(occurrence, session)
        if occurrence.hook_name == "useReducer":
            return self._process_reducer(occurrence, session)
        if occurrence.hook_name == "useContext":
            return self._process_context(occurrence, session)

        log.debug(f"{occurrence.hook_name} does not create diagram nodes")
        return ProcessorResult()

    def _process_state(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        log = session.logger_for(self.metadata.id)
        nodes: List[DFDNode] = []

        if occurrence.is_read_write_pair and len(occurrence.variables) == 2:
            read_variable, write_variable = occurrence.variables
            nodes.append(DFDNode(
                id=session.next_id("state"),
                label=read_variable,
                type=DATA_STORE,
                line=occurrence.line,
                column=occurrence.column,
                metadata={
                    "category": "state",
                    "hookName": occurrence.hook_name,
                    "isReadWritePair": True,
                    "readVariable": read_variable,
                    "writeVariable": write_variable,
                    "initialValue": occurrence.initial_value,
                    "line": occurrence.line,
                    "column": occurrence.column,
                },
            ))
        else:
            for variable in occurrence.variables:
                nodes.append(DFDNode(
                    id=session.next_id("state"),
                    label=variable,
                    type=DATA_STORE,
                    line=occurrence.line,
                    column=occurrence.column,
                    metadata={
                        "category": "state",
                        "hookName": occurrence.hook_name,
                        "isReadWritePair": occurrence.is_read_write_pair,
                        "line": occurrence.line,
                        "column": occurrence.column,
                    },
                ))

        for node in nodes:
            log.node("created", node)
        result = ProcessorResult(nodes=nodes)
        log.complete(result)
        return result

    def _process_reducer(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        log = session.logger_for(self.metadata.id)
        reducer = occurrence.reducer
        if reducer is None or reducer.state_variable is None:
            log.debug("useReducer result is not destructured into [state, dispatch]")
            return ProcessorResult()

        node = DFDNode(
            id=session.next_id("state"),
            label=reducer.reducer_name or reducer.state_variable,
            type=DATA_STORE,
            line=occurrence.line,
            column=occurrence.column,
            metadata={
                "category": "state",
                "hookName": occurrence.hook_name,
                "isReadWritePair": True,
                "readVariable": reducer.state_variable,
                "writeVariable": reducer.dispatch_variable,
                "stateProperties": reducer.state_properties,
                "reducerName": reducer.reducer_name,
                "isReducer": True,
                "line": occurrence.line,
                "column": occurrence.column,
            },
        )
        log.node("created", node)
        result = ProcessorResult(nodes=[node])
        log.complete(result)
        return result

    def _process_context(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        if occurrence.variable_types:
            return process_hook_with_subgraphs(
                occurrence,
                session,
                self.metadata.id,
                data_category="context-data",
                function_category="context-function",
                data_node_type=EXTERNAL_INPUT,
                function_node_type=EXTERNAL_OUTPUT,
            )

        log = session.logger_for(self.metadata.id)
        log.warn("No type classification available for useContext, using read/write shape")

        if occurrence.is_function_only:
            node_type = EXTERNAL_OUTPUT
        elif occurrence.is_read_write_pair:
            node_type = DATA_STORE
        else:
            node_type = EXTERNAL_INPUT

        base = {
            "category": "context",
            "hookName": occurrence.hook_name,
            "isFunctionOnly": occurrence.is_function_only,
            "line": occurrence.line,
            "column": occurrence.column,
        }
        nodes: List[DFDNode] = []
        if occurrence.is_read_write_pair and len(occurrence.variables) == 2:
            read_variable, write_variable = occurrence.variables
            nodes.append(DFDNode(
                id=session.next_id("context"),
                label=read_variable,
                type=node_type,
                line=occurrence.line,
                column=occurrence.column,
                metadata={
                    **base,
                    "isReadWritePair": True,
                    "readVariable": read_variable,
                    "writeVariable": write_variable,
                },
            ))
        else:
            for variable in occurrence.variables:
                nodes.append(DFDNode(
                    id=session.next_id("context"),
                    label=variable,
                    type=node_type,
                    line=occurrence.line,
                    column=occurrence.column,
                    metadata={**base, "isReadWritePair": occurrence.is_read_write_pair},
                ))

        for node in nodes:
            log.node("created", node)
        result = ProcessorResult(nodes=nodes)
        log.complete(result)
        return result
