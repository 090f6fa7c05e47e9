"""Fallback processor for user-defined hooks."""

import re

from hookflow.classification.heuristics import DATA, FUNCTION, looks_like_action
from hookflow.libraries.base import LibraryProcessor, ProcessorMetadata
from hookflow.libraries.helpers import DATA_STORE, EXTERNAL_OUTPUT, process_hook_with_subgraphs
from hookflow.models import HookOccurrence, ProcessorResult


def _classify_by_action_name(name: str) -> str:
    return FUNCTION if looks_like_action(name) else DATA


class CustomHookProcessor(LibraryProcessor):
    """Any ``useXxx`` hook nothing else claimed.

    Returned data becomes ``custom-hook-data`` stores and returned functions
    become ``custom-hook-function`` outputs.
    """

    metadata = ProcessorMetadata(
        id="custom-hook",
        library_name="custom",
        package_patterns=(),
        hook_names=(re.compile(r"^use[A-Z]\w*"),),
        priority=0,
        description="Custom hook processor for user-defined hooks",
    )

    def should_handle(self, occurrence: HookOccurrence, session) -> bool:
        # Import source is irrelevant for user-defined hooks
        return self.matches_hook_name(occurrence)

    def process(self, occurrence: HookOccurrence, session) -> ProcessorResult:
        session.logger_for(self.metadata.id).start(occurrence.hook_name, occurrence)
        classify = None if occurrence.variable_types else _classify_by_action_name
        return process_hook_with_subgraphs(
            occurrence,
            session,
            self.metadata.id,
            data_category="custom-hook-data",
            function_category="custom-hook-function",
            data_node_type=DATA_STORE,
            function_node_type=EXTERNAL_OUTPUT,
            classify_variable=classify,
        )
