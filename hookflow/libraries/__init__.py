"""Library processors and the processor registry."""

from hookflow.libraries.base import LibraryProcessor, ProcessorLogger, ProcessorMetadata
from hookflow.libraries.custom import CustomHookProcessor
from hookflow.libraries.react import ReactProcessor
from hookflow.libraries.registry import ProcessorRegistry
from hookflow.libraries.routers import RouterProcessor, SvelteKitProcessor, router_processors
from hookflow.libraries.session import AnalysisSession
from hookflow.libraries.specs import RtkQueryProcessor, table_processors
from hookflow.libraries.stores import (
    JotaiProcessor,
    MobxProcessor,
    PiniaProcessor,
    SvelteStoreProcessor,
    VueProcessor,
    ZustandProcessor,
    store_processors,
)
from hookflow.libraries.table import TableDrivenProcessor
from hookflow.libraries.trpc import TrpcProcessor


def create_default_registry() -> ProcessorRegistry:
    """Registry with every built-in processor.

    Registration order settles ties between equal priorities: TanStack Query
    claims an untagged ``useQuery`` before Apollo, React Router claims an
    untagged ``useParams`` before TanStack Router.
    """
    registry = ProcessorRegistry()
    registry.register(ReactProcessor())
    for processor in store_processors():
        registry.register(processor)
    for processor in table_processors():
        registry.register(processor)
    registry.register(TrpcProcessor())
    for processor in router_processors():
        registry.register(processor)
    registry.register(CustomHookProcessor())
    return registry


__all__ = [
    "AnalysisSession",
    "CustomHookProcessor",
    "JotaiProcessor",
    "LibraryProcessor",
    "MobxProcessor",
    "PiniaProcessor",
    "ProcessorLogger",
    "ProcessorMetadata",
    "ProcessorRegistry",
    "ReactProcessor",
    "RouterProcessor",
    "RtkQueryProcessor",
    "SvelteKitProcessor",
    "SvelteStoreProcessor",
    "TableDrivenProcessor",
    "TrpcProcessor",
    "VueProcessor",
    "ZustandProcessor",
    "create_default_registry",
]
