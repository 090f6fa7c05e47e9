"""Per-component processing state.

One :class:`AnalysisSession` is created for every component analysis. It
owns the node id counter, the shared ``URL: Input`` / ``URL: Output``
nodes, server nodes and Jotai atom nodes. Nothing here outlives the
component, so state never leaks between components.
"""

from typing import Dict, List, Optional, Tuple

from hookflow.libraries.base import ProcessorLogger
from hookflow.logging_config import get_logger
from hookflow.models import DFDNode

logger = get_logger(__name__)

URL_INPUT_LABEL = "URL: Input"
URL_OUTPUT_LABEL = "URL: Output"


class AnalysisSession:
    """Mutable state shared by processors while one component is analyzed.

    Args:
        framework: ``react``, ``vue`` or ``svelte``
        component: Optional component name, for logging only
    """

    def __init__(self, framework: str = "react", component: Optional[str] = None):
        self.framework = framework
        self.component = component
        self.url_input_id: Optional[str] = None
        self.url_output_id: Optional[str] = None
        self.server_nodes: List[DFDNode] = []
        self.atom_nodes: Dict[str, DFDNode] = {}
        self._counter = 0
        self._loggers: Dict[str, ProcessorLogger] = {}

    def next_id(self, prefix: str) -> str:
        """Allocate a node id such as ``state_0``.

        The counter is shared by all prefixes, so ids are unique within the
        session.
        """
        node_id = f"{prefix}_{self._counter}"
        self._counter += 1
        return node_id

    def url_input_node(self) -> Tuple[str, Optional[DFDNode]]:
        """Id of the shared URL input node.

        Returns:
            ``(id, node)`` where ``node`` is the newly created node on first
            use and ``None`` once it already exists
        """
        if self.url_input_id is not None:
            return self.url_input_id, None
        self.url_input_id = self.next_id("url_input")
        node = DFDNode(
            id=self.url_input_id,
            label=URL_INPUT_LABEL,
            type="external-entity-input",
            metadata={"category": "external-entity", "isURLInput": True},
        )
        logger.debug(f"Created shared URL input node {self.url_input_id}")
        return self.url_input_id, node

    def url_output_node(self) -> Tuple[str, Optional[DFDNode]]:
        """Id of the shared URL output node; see :meth:`url_input_node`."""
        if self.url_output_id is not None:
            return self.url_output_id, None
        self.url_output_id = self.next_id("url_output")
        node = DFDNode(
            id=self.url_output_id,
            label=URL_OUTPUT_LABEL,
            type="external-entity-output",
            metadata={"category": "external-entity", "isURLOutput": True},
        )
        logger.debug(f"Created shared URL output node {self.url_output_id}")
        return self.url_output_id, node

    def create_server_node(
        self,
        endpoint: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> DFDNode:
        """Create a server node standing for a network endpoint or operation."""
        node = DFDNode(
            id=self.next_id("server"),
            label=f"Server: {endpoint}" if endpoint else "Server",
            type="external-entity-input",
            line=line,
            column=column,
            metadata={"category": "server", "endpoint": endpoint, "line": line, "column": column},
        )
        self.server_nodes.append(node)
        return node

    def logger_for(self, processor_id: str) -> ProcessorLogger:
        if processor_id not in self._loggers:
            self._loggers[processor_id] = ProcessorLogger(processor_id)
        return self._loggers[processor_id]
