"""Router and navigation processors.

Every router hook becomes one node. Hooks that read the URL are fed by a
shared ``URL: Input`` node (``provides``); hooks that change it feed a
shared ``URL: Output`` node (``navigates``). The shared nodes are created
once per :class:`~hookflow.libraries.session.AnalysisSession`.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from hookflow.libraries.base import LibraryProcessor, ProcessorMetadata
from hookflow.libraries.helpers import (
    DATA_STORE,
    EXTERNAL_INPUT,
    PROCESS,
    ReturnMapping,
    map_variables_to_types,
)
from hookflow.models import DFDEdge, DFDNode, HookOccurrence, ProcessorResult

INPUT = "input"
OUTPUT = "output"
LIFECYCLE = "lifecycle"
PASSIVE = "passive"


@dataclass(frozen=True)
class RouteHook:
    """How one router hook is drawn.

    Attributes:
        role: ``input`` (reads the URL), ``output`` (navigates),
            ``lifecycle`` (triggered by navigation) or ``passive``
        node_type: Diagram node type of the hook node
        mappings: Positional return-value table
        category: Node category
        label: Fixed label; defaults to the router's label format
        metadata: Extra node metadata
    """
    role: str
    node_type: str
    mappings: Tuple[ReturnMapping, ...] = ()
    category: str = "library-hook"
    label: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


def _first(element_type: str, **metadata) -> Tuple[ReturnMapping, ...]:
    return (ReturnMapping(position=0, element_type=element_type, metadata=metadata),)


class RouterProcessor(LibraryProcessor):
    """Processor for one routing library, described by a hook table.

    Args:
        metadata: Processor metadata
        hooks: Hook name to :class:`RouteHook`
        require_library: Only accept occurrences tagged with this library
        frameworks: Frameworks in which untagged occurrences are accepted
        label_format: Builds the node label from the hook name
        node_flags: Metadata added to every hook node
    """

    def __init__(
        self,
        metadata: ProcessorMetadata,
        hooks: Dict[str, RouteHook],
        require_library: bool = False,
        frameworks: Tuple[str, ...] = ("react",),
        label_format: Callable[[str], str] = lambda hook_name: hook_name,
        node_flags: Optional[Dict[str, Any]] = None,
    ):
        self.metadata = metadata
        self.hooks = hooks
        self.require_library = require_library
        self.frameworks = frameworks
        self.label_format = label_format
        self.node_flags = node_flags or {}

    def should_handle(self, occurrence: HookOccurrence, session) -> bool:
        if not self.matches_hook_name(occurrence):
            return False
        if occurrence.library_name is None:
            return not self.require_library and session.framework in self.frameworks
        return self.accepts_library(occurrence)

    def process(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        log = session.logger_for(self.metadata.id)
        log.start(occurrence.hook_name, occurrence)

        hook = self.hooks.get(occurrence.hook_name)
        if hook is None:
            log.warn(f"Unknown {self.metadata.library_name} hook: {occurrence.hook_name}")
            return ProcessorResult(handled=False)

        mapped = map_variables_to_types(occurrence.variables, list(hook.mappings))
        node = DFDNode(
            id=session.next_id("library_hook"),
            label=hook.label or self.label_format(occurrence.hook_name),
            type=hook.node_type,
            line=occurrence.line,
            column=occurrence.column,
            metadata={
                "category": hook.category,
                "hookName": occurrence.hook_name,
                "libraryName": self.metadata.library_name,
                "isLibraryHook": True,
                "properties": mapped.properties,
                "dataProperties": mapped.data_properties,
                "processProperties": mapped.process_properties,
                "propertyMetadata": mapped.property_metadata,
                "line": occurrence.line,
                "column": occurrence.column,
                **self.node_flags,
                **hook.metadata,
            },
        )
        nodes: List[DFDNode] = [node]
        edges: List[DFDEdge] = []
        log.node("created", node)

        created = None
        if hook.role in (INPUT, LIFECYCLE):
            url_id, created = session.url_input_node()
            label = "provides" if hook.role == INPUT else "triggers"
            edges.append(DFDEdge(from_id=url_id, to_id=node.id, label=label))
        elif hook.role == OUTPUT:
            url_id, created = session.url_output_node()
            edges.append(DFDEdge(from_id=node.id, to_id=url_id, label="navigates"))

        if created is not None:
            nodes.append(created)
            log.node("created", created)
        elif edges:
            log.debug(f"Reusing shared URL node {url_id}")
        for edge in edges:
            log.edge("created", edge)

        result = ProcessorResult(nodes=nodes, edges=edges)
        log.complete(result)
        return result


def react_router_processor() -> RouterProcessor:
    return RouterProcessor(
        ProcessorMetadata(
            id="react-router",
            library_name="react-router-dom",
            package_patterns=("react-router-dom", "react-router"),
            hook_names=("useNavigate", "useParams", "useLocation", "useSearchParams"),
            priority=50,
            description="React Router navigation library processor",
        ),
        hooks={
            "useNavigate": RouteHook(OUTPUT, PROCESS, _first(PROCESS, isNavigation=True)),
            "useParams": RouteHook(INPUT, EXTERNAL_INPUT, _first(EXTERNAL_INPUT, isRouteParams=True)),
            "useLocation": RouteHook(INPUT, EXTERNAL_INPUT, _first(EXTERNAL_INPUT, isLocation=True)),
            "useSearchParams": RouteHook(
                INPUT,
                EXTERNAL_INPUT,
                (
                    ReturnMapping(position=0, element_type=EXTERNAL_INPUT, metadata={"isSearchParams": True}),
                    ReturnMapping(position=1, element_type=PROCESS, metadata={"isSearchParamsSetter": True}),
                ),
            ),
        },
    )


def next_navigation_processor() -> RouterProcessor:
    return RouterProcessor(
        ProcessorMetadata(
            id="next",
            library_name="next/navigation",
            package_patterns=("next/navigation",),
            hook_names=("useRouter", "usePathname", "useSearchParams", "useParams"),
            priority=50,
            description="Next.js App Router navigation processor",
        ),
        hooks={
            "useRouter": RouteHook(OUTPUT, PROCESS, _first(PROCESS, isNavigation=True)),
            "usePathname": RouteHook(INPUT, PROCESS, _first(EXTERNAL_INPUT, isPathname=True)),
            "useSearchParams": RouteHook(INPUT, PROCESS, _first(EXTERNAL_INPUT, isSearchParams=True)),
            "useParams": RouteHook(INPUT, PROCESS, _first(EXTERNAL_INPUT, isRouteParams=True)),
        },
        require_library=True,
        label_format=lambda hook_name: f"{hook_name}\n<Next.js>",
        node_flags={"isNextJSHook": True},
    )


def tanstack_router_processor() -> RouterProcessor:
    return RouterProcessor(
        ProcessorMetadata(
            id="tanstack-router",
            library_name="@tanstack/react-router",
            package_patterns=("@tanstack/react-router",),
            hook_names=("useRouter", "useRouterState", "useSearch", "useParams", "useNavigate", "useLocation"),
            priority=50,
            description="TanStack Router navigation processor",
        ),
        hooks={
            "useRouter": RouteHook(OUTPUT, PROCESS, _first(PROCESS, isNavigation=True)),
            "useNavigate": RouteHook(OUTPUT, PROCESS, _first(PROCESS, isNavigation=True)),
            "useRouterState": RouteHook(INPUT, PROCESS, _first(EXTERNAL_INPUT, isRouterState=True)),
            "useSearch": RouteHook(INPUT, PROCESS, _first(EXTERNAL_INPUT, isSearchParams=True)),
            "useParams": RouteHook(INPUT, PROCESS, _first(EXTERNAL_INPUT, isRouteParams=True)),
            "useLocation": RouteHook(INPUT, PROCESS, _first(EXTERNAL_INPUT, isLocation=True)),
        },
        require_library=True,
        node_flags={"isTanStackRouterHook": True},
    )


def vue_router_processor() -> RouterProcessor:
    return RouterProcessor(
        ProcessorMetadata(
            id="vue-router",
            library_name="vue-router",
            package_patterns=("vue-router",),
            hook_names=("useRoute", "useRouter", "onBeforeRouteUpdate", "onBeforeRouteLeave"),
            priority=50,
            description="Vue Router navigation processor",
        ),
        hooks={
            "useRoute": RouteHook(INPUT, DATA_STORE, _first(EXTERNAL_INPUT, isRoute=True)),
            "useRouter": RouteHook(OUTPUT, PROCESS, _first(PROCESS, isRouter=True)),
            "onBeforeRouteUpdate": RouteHook(OUTPUT, PROCESS, metadata={"isNavigationGuard": True}),
            "onBeforeRouteLeave": RouteHook(OUTPUT, PROCESS, metadata={"isNavigationGuard": True}),
        },
        frameworks=("vue",),
    )


class SvelteKitProcessor(RouterProcessor):
    """``$app/stores`` and ``$app/navigation`` imports.

    These are synthesized from imports, so only occurrences tagged
    ``sveltekit`` (or coming from an ``$app/`` module) are accepted.
    """

    def __init__(self):
        super().__init__(
            ProcessorMetadata(
                id="sveltekit",
                library_name="sveltekit",
                package_patterns=("$app/stores", "$app/navigation"),
                hook_names=("page", "navigating", "updated", "goto", "beforeNavigate", "afterNavigate"),
                priority=50,
                description="SvelteKit stores and navigation processor",
            ),
            hooks={
                "page": RouteHook(
                    INPUT, DATA_STORE, category="svelte-store", label="page",
                    metadata={"isSvelteKitStore": True},
                ),
                "navigating": RouteHook(
                    PASSIVE, EXTERNAL_INPUT, category="sveltekit-store", label="$navigating",
                    metadata={"isSvelteKitStore": True},
                ),
                "updated": RouteHook(
                    PASSIVE, EXTERNAL_INPUT, category="sveltekit-store", label="$updated",
                    metadata={"isSvelteKitStore": True},
                ),
                "goto": RouteHook(
                    OUTPUT, PROCESS, category="sveltekit-navigation", label="goto",
                    metadata={"isNavigation": True},
                ),
                "beforeNavigate": RouteHook(
                    LIFECYCLE, PROCESS, category="lifecycle",
                    metadata={"isNavigationHook": True, "isSvelteKitLifecycle": True},
                ),
                "afterNavigate": RouteHook(
                    LIFECYCLE, PROCESS, category="lifecycle",
                    metadata={"isNavigationHook": True, "isSvelteKitLifecycle": True},
                ),
            },
            require_library=True,
        )

    def should_handle(self, occurrence: HookOccurrence, session) -> bool:
        if not self.matches_hook_name(occurrence):
            return False
        return occurrence.library_name == "sveltekit" or (occurrence.source or "").startswith("$app/")


def router_processors() -> List[RouterProcessor]:
    return [
        react_router_processor(),
        next_navigation_processor(),
        tanstack_router_processor(),
        vue_router_processor(),
        SvelteKitProcessor(),
    ]
