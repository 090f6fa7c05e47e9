"""tRPC procedure hooks (``trpc.user.getById.useQuery``)."""

import re
from typing import Any, Dict, Optional

from hookflow.libraries.base import ProcessorMetadata
from hookflow.libraries.helpers import DATA_STORE, EXTERNAL_INPUT, PROCESS, ReturnMapping
from hookflow.libraries.table import HookRule, LibrarySpec, TableDrivenProcessor
from hookflow.models import HookOccurrence

TRPC_QUERY = re.compile(r"^trpc\.(.+)\.useQuery$")
TRPC_MUTATION = re.compile(r"^trpc\.(.+)\.useMutation$")

TRPC = LibrarySpec(
    metadata=ProcessorMetadata(
        id="trpc",
        library_name="@trpc/client",
        package_patterns=("@trpc/client", "@trpc/react", "@trpc/react-query"),
        hook_names=(TRPC_QUERY, TRPC_MUTATION),
        priority=50,
        description="tRPC type-safe API client processor",
    ),
    rules={
        "query": HookRule(
            mappings=(
                ReturnMapping("data", EXTERNAL_INPUT),
                ReturnMapping("error", DATA_STORE, {"isError": True}),
                ReturnMapping("isLoading", DATA_STORE, {"isLoading": True}),
                ReturnMapping("isFetching", DATA_STORE, {"isFetching": True}),
                ReturnMapping("isError", DATA_STORE, {"isError": True}),
                ReturnMapping("isSuccess", DATA_STORE),
                ReturnMapping("refetch", PROCESS, {"isRefetch": True}),
                ReturnMapping("status", DATA_STORE),
            ),
            edge="query",
        ),
        "mutation": HookRule(
            mappings=(
                ReturnMapping("mutate", PROCESS, {"isMutation": True}),
                ReturnMapping("mutateAsync", PROCESS, {"isMutation": True}),
                ReturnMapping("data", EXTERNAL_INPUT),
                ReturnMapping("error", DATA_STORE, {"isError": True}),
                ReturnMapping("isLoading", DATA_STORE, {"isLoading": True}),
                ReturnMapping("isError", DATA_STORE, {"isError": True}),
                ReturnMapping("isSuccess", DATA_STORE),
                ReturnMapping("reset", PROCESS),
                ReturnMapping("status", DATA_STORE),
            ),
            edge="mutate",
        ),
    },
)


def procedure_path(qualified_name: str) -> Optional[str]:
    """``user.getById`` for ``trpc.user.getById.useQuery``."""
    match = TRPC_QUERY.match(qualified_name) or TRPC_MUTATION.match(qualified_name)
    return match.group(1) if match else None


class TrpcProcessor(TableDrivenProcessor):
    """Procedure hooks are matched on the full member chain, not the tail name."""

    def __init__(self):
        super().__init__(TRPC)

    def accepts_library(self, occurrence: HookOccurrence) -> bool:
        if occurrence.library_name is None:
            return True
        return any(pattern in occurrence.library_name for pattern in self.metadata.package_patterns)

    def rule_for(self, occurrence: HookOccurrence) -> Optional[HookRule]:
        if TRPC_QUERY.match(occurrence.qualified_name):
            return self.library_spec.rules["query"]
        if TRPC_MUTATION.match(occurrence.qualified_name):
            return self.library_spec.rules["mutation"]
        return None

    def label_for(self, occurrence: HookOccurrence) -> str:
        return occurrence.qualified_name

    def endpoint_for(self, occurrence: HookOccurrence, rule: HookRule) -> Optional[str]:
        return procedure_path(occurrence.qualified_name)

    def extra_metadata(self, occurrence: HookOccurrence) -> Dict[str, Any]:
        return {"procedurePath": procedure_path(occurrence.qualified_name)}
