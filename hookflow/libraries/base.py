"""Base library processor interface.

A processor turns one classified :class:`~hookflow.models.HookOccurrence`
into diagram nodes and edges. Processors declare what they handle through
an immutable :class:`ProcessorMetadata`; the registry uses it for
dispatch.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple, Union

from hookflow.logging_config import get_logger
from hookflow.models import DFDEdge, DFDNode, HookOccurrence, ProcessorResult

logger = get_logger(__name__)

HookNameMatcher = Union[str, Pattern[str]]


@dataclass(frozen=True)
class ProcessorMetadata:
    """Static description of a library processor.

    Attributes:
        id: Unique processor id (``swr``, ``react-router``, ...)
        library_name: Canonical library name tagged onto matches
        package_patterns: Import sources that belong to the library
        hook_names: Exact hook names or compiled patterns
        priority: Higher wins when several processors accept an occurrence
        description: Human-readable summary
        mergeable: Whether occurrences may be drawn as one merged box
    """
    id: str
    library_name: str
    package_patterns: Tuple[str, ...]
    hook_names: Tuple[HookNameMatcher, ...]
    priority: int = 50
    description: str = ""
    mergeable: bool = False

    @property
    def exact_names(self) -> Tuple[str, ...]:
        return tuple(name for name in self.hook_names if isinstance(name, str))


class LibraryProcessor(ABC):
    """Abstract base class for library processors.

    Subclasses set :attr:`metadata` and implement :meth:`process`. The
    default :meth:`should_handle` accepts an occurrence whose name matches
    the declared hook names and whose library tag, when present, belongs
    to this library.
    """

    metadata: ProcessorMetadata

    def should_handle(self, occurrence: HookOccurrence, session) -> bool:
        return self.matches_hook_name(occurrence) and self.accepts_library(occurrence)

    @abstractmethod
    def process(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        """Emit nodes and edges for one occurrence.

        Args:
            occurrence: Classified hook occurrence
            session: The :class:`~hookflow.libraries.session.AnalysisSession`
                of the component being analyzed

        Returns:
            ProcessorResult with the emitted nodes and edges
        """
        pass

    def matches_hook_name(self, occurrence: HookOccurrence) -> bool:
        """Test the declared hook names against an occurrence.

        Exact names only match calls at most one member access deep
        (``useQuery``, ``React.useState``). Patterns are tested against the
        full dotted callee, and against the bare name at that same depth.
        """
        shallow = occurrence.callee_depth <= 2
        for matcher in self.metadata.hook_names:
            if isinstance(matcher, str):
                if shallow and occurrence.hook_name == matcher:
                    return True
            elif matcher.match(occurrence.qualified_name):
                return True
            elif shallow and matcher.match(occurrence.hook_name):
                return True
        return False

    def accepts_library(self, occurrence: HookOccurrence) -> bool:
        """True when the occurrence is untagged or tagged with this library.

        Untagged occurrences are accepted because import detection is best
        effort.
        """
        if occurrence.library_name is None:
            return True
        return (
            occurrence.library_name == self.metadata.library_name
            or occurrence.library_name in self.metadata.package_patterns
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.metadata.id!r}, priority={self.metadata.priority})"


class ProcessorLogger:
    """Per-processor logging facade.

    Messages go through the standard ``hookflow.libraries`` logger with a
    ``[processor-id]`` prefix.
    """

    def __init__(self, processor_id: str):
        self.processor_id = processor_id
        self._logger = get_logger("hookflow.libraries.processor")

    def _prefix(self, message: str) -> str:
        return f"[{self.processor_id}] {message}"

    def start(self, hook_name: str, hook: Optional[HookOccurrence] = None) -> None:
        where = f" at line {hook.line}" if hook is not None else ""
        self._logger.debug(self._prefix(f"Processing {hook_name}{where}"))

    def node(self, action: str, node: DFDNode) -> None:
        self._logger.debug(self._prefix(f"{action}: node {node.id} ({node.type}) {node.label!r}"))

    def edge(self, action: str, edge: DFDEdge) -> None:
        self._logger.debug(self._prefix(f"{action}: edge {edge.from_id} -> {edge.to_id} [{edge.label}]"))

    def complete(self, result: ProcessorResult) -> None:
        self._logger.debug(
            self._prefix(f"Completed with {len(result.nodes)} node(s), {len(result.edges)} edge(s)")
        )

    def warn(self, message: str) -> None:
        self._logger.warning(self._prefix(message))

    def debug(self, message: str) -> None:
        self._logger.debug(self._prefix(message))
