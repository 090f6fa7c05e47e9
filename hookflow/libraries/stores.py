"""State-store processors: Zustand, Pinia, Vue core, MobX, Svelte stores and Jotai."""

import re
from typing import Dict, List, Optional

from hookflow.classification.heuristics import DATA, FUNCTION, looks_like_action
from hookflow.libraries.base import LibraryProcessor, ProcessorMetadata
from hookflow.libraries.helpers import (
    DATA_STORE,
    EXTERNAL_INPUT,
    EXTERNAL_OUTPUT,
    PROCESS,
    process_hook_with_subgraphs,
)
from hookflow.models import DFDNode, HookOccurrence, ProcessorResult


def _split_actions(variables: List[str]):
    data, actions = [], []
    for variable in variables:
        (actions if looks_like_action(variable) else data).append(variable)
    return data, actions


def _store_node(
    occurrence: HookOccurrence,
    session,
    library_name: str,
    data: List[str],
    actions: List[str],
    extra: Optional[Dict] = None,
) -> DFDNode:
    return DFDNode(
        id=session.next_id("library_hook"),
        label=occurrence.hook_name,
        type=DATA_STORE,
        line=occurrence.line,
        column=occurrence.column,
        metadata={
            "category": "library-hook",
            "hookName": occurrence.hook_name,
            "libraryName": library_name,
            "isLibraryHook": True,
            "properties": data + actions,
            "dataProperties": data,
            "processProperties": actions,
            "line": occurrence.line,
            "column": occurrence.column,
            **(extra or {}),
        },
    )


def _single(processor: LibraryProcessor, session, node: DFDNode) -> ProcessorResult:
    log = session.logger_for(processor.metadata.id)
    log.node("created", node)
    result = ProcessorResult(nodes=[node])
    log.complete(result)
    return result


# ============================================================================
# Zustand / Pinia
# ============================================================================


class ZustandProcessor(LibraryProcessor):
    """``useXxxStore`` selectors, drawn as one store node per call site."""

    metadata = ProcessorMetadata(
        id="zustand",
        library_name="zustand",
        package_patterns=("zustand",),
        hook_names=(re.compile(r"^use\w*Store$"),),
        priority=80,
        description="Zustand state management library processor",
        mergeable=True,
    )

    def should_handle(self, occurrence: HookOccurrence, session) -> bool:
        if not self.matches_hook_name(occurrence):
            return False
        if occurrence.library_name is None:
            # Untagged *Store hooks in Vue components are Pinia stores
            return session.framework != "vue"
        return self.accepts_library(occurrence)

    def process(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        log = session.logger_for(self.metadata.id)
        log.start(occurrence.hook_name, occurrence)
        data, actions = _split_actions(occurrence.variables)
        log.debug(f"Data properties: {', '.join(data)}; action properties: {', '.join(actions)}")
        return _single(self, session, _store_node(occurrence, session, "zustand", data, actions))


class PiniaProcessor(LibraryProcessor):
    """Pinia ``defineStore`` consumers and ``storeToRefs``."""

    metadata = ProcessorMetadata(
        id="pinia",
        library_name="pinia",
        package_patterns=("pinia",),
        hook_names=(re.compile(r"^use\w+Store$"), "storeToRefs"),
        priority=95,
        description="Pinia state management library processor for Vue 3",
    )

    def should_handle(self, occurrence: HookOccurrence, session) -> bool:
        if not self.matches_hook_name(occurrence):
            return False
        if occurrence.library_name is None:
            return session.framework == "vue"
        return self.accepts_library(occurrence)

    def process(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        log = session.logger_for(self.metadata.id)
        log.start(occurrence.hook_name, occurrence)

        if occurrence.hook_name == "storeToRefs":
            log.debug("storeToRefs creates no nodes; its properties belong to the store")
            result = ProcessorResult()
            log.complete(result)
            return result

        data, actions = _split_actions(occurrence.variables)
        property_metadata = {}
        for name in data:
            property_metadata[name] = {"dfdElementType": EXTERNAL_INPUT, "isStateOrGetter": True}
        for name in actions:
            property_metadata[name] = {"dfdElementType": PROCESS, "isAction": True}

        node = _store_node(
            occurrence,
            session,
            "pinia",
            data,
            actions,
            extra={"isPiniaStore": True, "propertyMetadata": property_metadata},
        )
        return _single(self, session, node)


# ============================================================================
# Vue core
# ============================================================================


class VueProcessor(LibraryProcessor):
    """``provide``/``inject`` and user composables in Vue components."""

    COMPOSABLE = re.compile(r"^use[A-Z]\w+$")

    metadata = ProcessorMetadata(
        id="vue",
        library_name="vue",
        package_patterns=("vue",),
        hook_names=("provide", "inject", COMPOSABLE),
        priority=90,
        description="Vue 3 core processor for provide/inject and composables",
    )

    def should_handle(self, occurrence: HookOccurrence, session) -> bool:
        if not self.matches_hook_name(occurrence) or not self.accepts_library(occurrence):
            return False
        if occurrence.hook_name in ("provide", "inject"):
            return True
        # React custom hooks share the use* convention
        return session.framework == "vue"

    def process(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        log = session.logger_for(self.metadata.id)
        log.start(occurrence.hook_name, occurrence)
        if occurrence.hook_name == "provide":
            nodes = [self._provide_node(occurrence, session)]
        elif occurrence.hook_name == "inject":
            nodes = self._inject_nodes(occurrence, session)
        else:
            nodes = self._composable_nodes(occurrence, session)

        for node in nodes:
            log.node("created", node)
        result = ProcessorResult(nodes=nodes)
        log.complete(result)
        return result

    @staticmethod
    def _provide_node(occurrence: HookOccurrence, session) -> DFDNode:
        keys = list(occurrence.variables)
        if not keys and occurrence.arguments and occurrence.arguments[0].type == "string":
            keys = [occurrence.arguments[0].value]
        elif not keys and occurrence.argument_identifiers:
            keys = [occurrence.argument_identifiers[0]]
        return DFDNode(
            id=session.next_id("provide"),
            label=f"provide: {keys[0]}" if keys else "provide",
            type=EXTERNAL_OUTPUT,
            line=occurrence.line,
            column=occurrence.column,
            metadata={
                "category": "provide-inject",
                "hookName": occurrence.hook_name,
                "libraryName": "vue",
                "isProvide": True,
                "providedKeys": keys,
                "line": occurrence.line,
                "column": occurrence.column,
            },
        )

    @staticmethod
    def _inject_nodes(occurrence: HookOccurrence, session) -> List[DFDNode]:
        return [
            DFDNode(
                id=session.next_id("inject"),
                label=variable,
                type=EXTERNAL_INPUT,
                line=occurrence.line,
                column=occurrence.column,
                metadata={
                    "category": "provide-inject",
                    "hookName": occurrence.hook_name,
                    "libraryName": "vue",
                    "isInject": True,
                    "variableName": variable,
                    "line": occurrence.line,
                    "column": occurrence.column,
                },
            )
            for variable in occurrence.variables
        ]

    @staticmethod
    def _composable_nodes(occurrence: HookOccurrence, session) -> List[DFDNode]:
        base = {
            "category": "composable",
            "hookName": occurrence.hook_name,
            "libraryName": "vue",
            "isCustomComposable": True,
            "line": occurrence.line,
            "column": occurrence.column,
        }
        if not occurrence.variable_types:
            return [
                DFDNode(
                    id=session.next_id("composable"),
                    label=variable,
                    type=EXTERNAL_INPUT,
                    line=occurrence.line,
                    column=occurrence.column,
                    metadata={**base, "variableName": variable},
                )
                for variable in occurrence.variables
            ]

        data, functions, property_metadata = [], [], {}
        for variable in occurrence.variables:
            if occurrence.variable_types.get(variable) == FUNCTION:
                functions.append(variable)
                property_metadata[variable] = {"dfdElementType": FUNCTION, "isFunction": True}
            else:
                data.append(variable)
                property_metadata[variable] = {"dfdElementType": DATA, "isData": True}
        return [DFDNode(
            id=session.next_id("composable"),
            label=occurrence.hook_name,
            type=DATA_STORE,
            line=occurrence.line,
            column=occurrence.column,
            metadata={
                **base,
                "properties": data + functions,
                "dataProperties": data,
                "functionProperties": functions,
                "propertyMetadata": property_metadata,
            },
        )]


# ============================================================================
# MobX
# ============================================================================

_MOBX_ACTIONS = (
    re.compile(r"^(set|update|add|remove|delete|clear|reset|toggle|increment|decrement)", re.IGNORECASE),
    re.compile(r"^(on|handle)", re.IGNORECASE),
    re.compile(r"Action$", re.IGNORECASE),
)


def classify_mobx_member(name: str) -> str:
    return FUNCTION if any(pattern.search(name) for pattern in _MOBX_ACTIONS) else DATA


class MobxProcessor(LibraryProcessor):
    """``useLocalObservable`` members split into observables and actions."""

    metadata = ProcessorMetadata(
        id="mobx",
        library_name="mobx-react-lite",
        package_patterns=("mobx-react-lite", "mobx-react"),
        hook_names=("useLocalObservable", "useObserver"),
        priority=50,
        description="MobX React bindings processor",
    )

    def process(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        session.logger_for(self.metadata.id).start(occurrence.hook_name, occurrence)
        return process_hook_with_subgraphs(
            occurrence,
            session,
            self.metadata.id,
            data_category="mobx-observable",
            function_category="mobx-action",
            data_node_type=DATA_STORE,
            function_node_type=EXTERNAL_OUTPUT,
            classify_variable=classify_mobx_member,
        )


# ============================================================================
# Svelte stores
# ============================================================================


class SvelteStoreProcessor(LibraryProcessor):
    """``writable``/``readable``/``derived`` stores and ``get`` reads."""

    metadata = ProcessorMetadata(
        id="svelte-store",
        library_name="svelte/store",
        package_patterns=("svelte", "svelte/store"),
        hook_names=("writable", "readable", "derived", "get"),
        priority=50,
        description="Svelte store processor",
    )

    def should_handle(self, occurrence: HookOccurrence, session) -> bool:
        if not self.matches_hook_name(occurrence):
            return False
        if occurrence.library_name is None:
            return session.framework == "svelte"
        return self.accepts_library(occurrence)

    def process(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        log = session.logger_for(self.metadata.id)
        log.start(occurrence.hook_name, occurrence)

        nodes = []
        for variable in occurrence.variables:
            if occurrence.hook_name == "get":
                node = DFDNode(
                    id=session.next_id("store_get"),
                    label=variable,
                    type=EXTERNAL_INPUT,
                    line=occurrence.line,
                    column=occurrence.column,
                    metadata={
                        "category": "svelte-store-get",
                        "hookName": occurrence.hook_name,
                        "libraryName": self.metadata.library_name,
                        "variableName": variable,
                        "line": occurrence.line,
                        "column": occurrence.column,
                    },
                )
            else:
                node = DFDNode(
                    id=session.next_id("svelte_store"),
                    label=variable,
                    type=DATA_STORE,
                    line=occurrence.line,
                    column=occurrence.column,
                    metadata={
                        "category": f"svelte-store-{occurrence.hook_name}",
                        "hookName": occurrence.hook_name,
                        "libraryName": self.metadata.library_name,
                        "svelteStoreType": occurrence.hook_name,
                        "variableName": variable,
                        "line": occurrence.line,
                        "column": occurrence.column,
                    },
                )
            log.node("created", node)
            nodes.append(node)

        result = ProcessorResult(nodes=nodes)
        log.complete(result)
        return result


# ============================================================================
# Jotai
# ============================================================================


def atom_name(occurrence: HookOccurrence) -> Optional[str]:
    if occurrence.argument_identifiers:
        return occurrence.argument_identifiers[0]
    if occurrence.arguments and occurrence.arguments[0].type == "string":
        return occurrence.arguments[0].value
    return None


class JotaiProcessor(LibraryProcessor):
    """Atom hooks. Every atom gets one node per component, shared by its hooks."""

    metadata = ProcessorMetadata(
        id="jotai",
        library_name="jotai",
        package_patterns=("jotai", "jotai/react"),
        hook_names=("useAtom", "useAtomValue", "useSetAtom"),
        priority=50,
        description="Jotai atomic state library processor",
    )

    def process(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        log = session.logger_for(self.metadata.id)
        log.start(occurrence.hook_name, occurrence)

        name = atom_name(occurrence)
        if name is None:
            log.warn(f"No atom name found for {occurrence.hook_name}; cannot create atom node")
            return ProcessorResult()
        if not occurrence.variables:
            log.warn(f"No variables bound from {occurrence.hook_name}")
            return ProcessorResult()

        if occurrence.hook_name == "useSetAtom":
            read_variable, write_variable = None, occurrence.variables[0]
        else:
            read_variable = occurrence.variables[0]
            write_variable = occurrence.variables[1] if len(occurrence.variables) >= 2 else None

        existing = session.atom_nodes.get(name)
        if existing is not None:
            # Later hooks on the same atom fill in the missing side
            metadata = existing.metadata
            if read_variable and not metadata.get("readVariable"):
                metadata["readVariable"] = read_variable
            if write_variable and not metadata.get("writeVariable"):
                metadata["writeVariable"] = write_variable
            metadata["isReadWritePair"] = bool(metadata.get("readVariable") and metadata.get("writeVariable"))
            metadata["isReadOnly"] = not metadata.get("writeVariable")
            metadata["isWriteOnly"] = not metadata.get("readVariable")
            log.debug(f"Reusing existing atom node: {name}")
            result = ProcessorResult()
            log.complete(result)
            return result

        node = DFDNode(
            id=session.next_id("jotai_atom"),
            label=name,
            type=DATA_STORE,
            line=occurrence.line,
            column=occurrence.column,
            metadata={
                "category": "jotai-atom",
                "hookName": occurrence.hook_name,
                "libraryName": "jotai",
                "atomName": name,
                "isReadWritePair": bool(read_variable and write_variable),
                "readVariable": read_variable,
                "writeVariable": write_variable,
                "isReadOnly": occurrence.hook_name == "useAtomValue",
                "isWriteOnly": occurrence.hook_name == "useSetAtom",
                "line": occurrence.line,
                "column": occurrence.column,
            },
        )
        session.atom_nodes[name] = node
        return _single(self, session, node)


def store_processors() -> List[LibraryProcessor]:
    return [
        PiniaProcessor(),
        VueProcessor(),
        ZustandProcessor(),
        MobxProcessor(),
        SvelteStoreProcessor(),
        JotaiProcessor(),
    ]
