"""Processor registry and priority-based dispatch."""

from typing import Dict, List, Optional

from hookflow.exceptions import ProcessorError, RegistryError
from hookflow.libraries.base import LibraryProcessor
from hookflow.logging_config import get_logger
from hookflow.models import HookOccurrence, ProcessorResult

logger = get_logger(__name__)


class ProcessorRegistry:
    """Registered library processors, kept in priority order.

    Lookup runs in two phases:

    1. Processors declaring the occurrence's hook name verbatim, for calls
       at most one member access deep.
    2. Every remaining processor in priority order, which is where pattern
       processors (RTK Query, tRPC, custom hooks) get their chance.

    Within each phase the first processor whose ``should_handle`` accepts
    wins. Equal priorities keep registration order.
    """

    def __init__(self):
        self._processors: List[LibraryProcessor] = []
        self._by_id: Dict[str, LibraryProcessor] = {}
        self._by_hook_name: Dict[str, List[LibraryProcessor]] = {}
        self._by_library: Dict[str, List[LibraryProcessor]] = {}

    def register(self, processor: LibraryProcessor) -> None:
        metadata = processor.metadata
        if metadata.id in self._by_id:
            raise RegistryError(f"Processor {metadata.id!r} is already registered")

        self._by_id[metadata.id] = processor
        self._processors.append(processor)
        # sort() is stable, so equal priorities keep registration order
        self._processors.sort(key=lambda p: -p.metadata.priority)

        for name in metadata.exact_names:
            bucket = self._by_hook_name.setdefault(name, [])
            bucket.append(processor)
            bucket.sort(key=lambda p: -p.metadata.priority)
        self._by_library.setdefault(metadata.library_name, []).append(processor)

        logger.debug(f"Registered processor {metadata.id} (priority {metadata.priority})")

    def find_processor(self, occurrence: HookOccurrence, session) -> Optional[LibraryProcessor]:
        """Highest-priority processor willing to handle ``occurrence``."""
        tried = set()
        if occurrence.callee_depth <= 2:
            for processor in self._by_hook_name.get(occurrence.hook_name, []):
                tried.add(processor.metadata.id)
                if processor.should_handle(occurrence, session):
                    return processor

        for processor in self._processors:
            if processor.metadata.id in tried:
                continue
            if processor.should_handle(occurrence, session):
                return processor
        return None

    def process(self, occurrence: HookOccurrence, session) -> Optional[ProcessorResult]:
        """Dispatch an occurrence to its processor.

        Returns:
            The processor's result, or None when no processor accepts it

        Raises:
            ProcessorError: If the selected processor fails
        """
        processor = self.find_processor(occurrence, session)
        if processor is None:
            logger.debug(f"No processor for {occurrence.qualified_name} at line {occurrence.line}")
            return None
        try:
            return processor.process(occurrence, session)
        except Exception as e:
            raise ProcessorError(processor.metadata.id, occurrence.hook_name, str(e), cause=e) from e

    def library_for_source(self, source: str) -> Optional[str]:
        """Library whose processor claims an import source, by priority."""
        for processor in self._processors:
            if source in processor.metadata.package_patterns:
                return processor.metadata.library_name
        return None

    def package_patterns(self) -> List[str]:
        patterns = []
        for processor in self._processors:
            for pattern in processor.metadata.package_patterns:
                if pattern not in patterns:
                    patterns.append(pattern)
        return patterns

    def get_processor(self, processor_id: str) -> Optional[LibraryProcessor]:
        return self._by_id.get(processor_id)

    def has_processor(self, processor_id: str) -> bool:
        return processor_id in self._by_id

    def get_processors_for_library(self, library_name: str) -> List[LibraryProcessor]:
        return list(self._by_library.get(library_name, []))

    def get_all_processors(self) -> List[LibraryProcessor]:
        return list(self._processors)

    def clear(self) -> None:
        self._processors.clear()
        self._by_id.clear()
        self._by_hook_name.clear()
        self._by_library.clear()

    @property
    def size(self) -> int:
        return len(self._processors)

    def __len__(self) -> int:
        return len(self._processors)
