"""Return-value tables of the table-driven libraries."""

import re
from typing import Any, Dict, List, Optional

from hookflow.libraries.base import ProcessorMetadata
from hookflow.libraries.helpers import DATA_STORE, EXTERNAL_INPUT, PROCESS, ReturnMapping
from hookflow.libraries.table import (
    HookRule,
    LibrarySpec,
    TableDrivenProcessor,
    keyed_argument,
    string_argument,
    with_fallback,
)
from hookflow.models import HookOccurrence


def _m(name: Optional[str], element_type: str, position: Optional[int] = None, **metadata) -> ReturnMapping:
    return ReturnMapping(property_name=name, element_type=element_type, metadata=metadata, position=position)


# ============================================================================
# SWR
# ============================================================================

SWR = LibrarySpec(
    metadata=ProcessorMetadata(
        id="swr",
        library_name="swr",
        package_patterns=("swr", "swr/mutation"),
        hook_names=("useSWR", "useSWRMutation", "useSWRConfig"),
        priority=50,
        description="SWR data fetching library processor",
    ),
    rules={
        "useSWR": HookRule(
            mappings=(
                _m("data", EXTERNAL_INPUT),
                _m("error", DATA_STORE, isError=True),
                _m("isLoading", DATA_STORE, isLoading=True),
                _m("isValidating", DATA_STORE),
                _m("mutate", PROCESS, isMutation=True),
            ),
            edge="fetch",
            endpoint=string_argument,
        ),
        "useSWRMutation": HookRule(
            mappings=(
                _m("data", EXTERNAL_INPUT),
                _m("error", DATA_STORE, isError=True),
                _m("trigger", PROCESS, isMutation=True),
                _m("isMutating", DATA_STORE, isLoading=True),
            ),
            edge="mutate",
            endpoint=string_argument,
        ),
        "useSWRConfig": HookRule(
            mappings=(
                _m("mutate", PROCESS, isMutation=True, isGlobal=True),
                _m("cache", DATA_STORE, isCache=True),
            ),
            edge="mutate",
            server_when_bound="mutate",
        ),
    },
)

# ============================================================================
# TanStack Query
# ============================================================================

_TANSTACK_QUERY = (
    _m("data", EXTERNAL_INPUT),
    _m("error", DATA_STORE, isError=True),
    _m("isLoading", DATA_STORE, isLoading=True),
    _m("isFetching", DATA_STORE, isFetching=True),
    _m("isError", DATA_STORE, isError=True),
    _m("refetch", PROCESS, isRefetch=True),
    _m("status", DATA_STORE),
)

TANSTACK_QUERY = LibrarySpec(
    metadata=ProcessorMetadata(
        id="tanstack-query",
        library_name="@tanstack/react-query",
        package_patterns=("@tanstack/react-query", "react-query"),
        hook_names=("useQuery", "useMutation", "useInfiniteQuery"),
        priority=50,
        description="TanStack Query library processor",
    ),
    rules={
        "useQuery": HookRule(mappings=_TANSTACK_QUERY, edge="fetch", endpoint=keyed_argument("query")),
        "useMutation": HookRule(
            mappings=(
                _m("mutate", PROCESS, isMutation=True),
                _m("mutateAsync", PROCESS, isMutation=True),
                _m("data", EXTERNAL_INPUT),
                _m("error", DATA_STORE, isError=True),
                _m("isLoading", DATA_STORE, isLoading=True),
                _m("isError", DATA_STORE, isError=True),
                _m("status", DATA_STORE),
            ),
            edge="mutate",
            endpoint=keyed_argument("mutation"),
        ),
        "useInfiniteQuery": HookRule(
            mappings=_TANSTACK_QUERY + (
                _m("fetchNextPage", PROCESS, isFetch=True),
                _m("fetchPreviousPage", PROCESS, isFetch=True),
            ),
            edge="fetch",
            endpoint=keyed_argument("query"),
        ),
    },
)

# ============================================================================
# Apollo Client
# ============================================================================

# A missing operation name still gets a server node
_graphql_operation = with_fallback(string_argument, "GraphQL")

APOLLO_CLIENT = LibrarySpec(
    metadata=ProcessorMetadata(
        id="apollo-client",
        library_name="@apollo/client",
        package_patterns=("@apollo/client", "apollo-client"),
        hook_names=("useQuery", "useMutation", "useSubscription", "useLazyQuery"),
        priority=50,
        description="Apollo Client GraphQL library processor",
    ),
    rules={
        "useQuery": HookRule(
            mappings=(
                _m("data", EXTERNAL_INPUT),
                _m("loading", DATA_STORE, isLoading=True),
                _m("error", DATA_STORE, isError=True),
                _m("refetch", PROCESS, isRefetch=True),
                _m("fetchMore", PROCESS, isFetch=True),
                _m("networkStatus", DATA_STORE),
                _m("called", DATA_STORE),
            ),
            edge="fetch",
            endpoint=_graphql_operation,
        ),
        "useMutation": HookRule(
            mappings=(
                # const [addTodo, { data }] = useMutation(ADD_TODO)
                _m("mutate", PROCESS, position=0, isMutation=True),
                _m("data", EXTERNAL_INPUT),
                _m("loading", DATA_STORE, isLoading=True),
                _m("error", DATA_STORE, isError=True),
                _m("called", DATA_STORE),
                _m("reset", PROCESS),
            ),
            edge="mutate",
            endpoint=_graphql_operation,
        ),
        "useSubscription": HookRule(
            mappings=(
                _m("data", EXTERNAL_INPUT),
                _m("loading", DATA_STORE, isLoading=True),
                _m("error", DATA_STORE, isError=True),
            ),
            edge="subscribe",
            endpoint=_graphql_operation,
        ),
        "useLazyQuery": HookRule(
            mappings=(
                _m("execute", PROCESS, position=0, isQuery=True),
                _m("data", EXTERNAL_INPUT),
                _m("loading", DATA_STORE, isLoading=True),
                _m("error", DATA_STORE, isError=True),
                _m("called", DATA_STORE),
                _m("refetch", PROCESS, isRefetch=True),
                _m("fetchMore", PROCESS, isFetch=True),
            ),
            edge="query",
            endpoint=_graphql_operation,
        ),
    },
)

# ============================================================================
# RTK Query
# ============================================================================

RTK_QUERY_HOOK = re.compile(r"^use\w+Query$")
RTK_MUTATION_HOOK = re.compile(r"^use\w+Mutation$")
_RTK_ENDPOINT = re.compile(r"^use(\w+?)(Query|Mutation)$")

RTK_QUERY = LibrarySpec(
    metadata=ProcessorMetadata(
        id="rtk-query",
        library_name="@reduxjs/toolkit/query",
        package_patterns=("@reduxjs/toolkit/query", "@reduxjs/toolkit/query/react", "@reduxjs/toolkit"),
        hook_names=(RTK_QUERY_HOOK, RTK_MUTATION_HOOK),
        priority=50,
        description="RTK Query generated hooks processor",
    ),
    rules={
        "query": HookRule(
            mappings=(
                _m("data", EXTERNAL_INPUT),
                _m("error", DATA_STORE, isError=True),
                _m("isLoading", DATA_STORE, isLoading=True),
                _m("isFetching", DATA_STORE, isFetching=True),
                _m("isError", DATA_STORE, isError=True),
                _m("isSuccess", DATA_STORE),
                _m("refetch", PROCESS, isRefetch=True),
                _m("status", DATA_STORE),
            ),
            edge="fetch",
        ),
        "mutation": HookRule(
            mappings=(
                # const [updateUser, { isLoading }] = useUpdateUserMutation()
                _m("trigger", PROCESS, position=0, isMutation=True),
                _m("data", EXTERNAL_INPUT),
                _m("error", DATA_STORE, isError=True),
                _m("isLoading", DATA_STORE, isLoading=True),
                _m("isError", DATA_STORE, isError=True),
                _m("isSuccess", DATA_STORE),
                _m("reset", PROCESS),
                _m("status", DATA_STORE),
            ),
            edge="mutate",
        ),
    },
)


def rtk_endpoint_name(hook_name: str) -> Optional[str]:
    """Endpoint behind a generated hook name.

    >>> rtk_endpoint_name("useGetUserQuery"), rtk_endpoint_name("useUpdateUserMutation")
    ('getUser', 'updateUser')
    """
    match = _RTK_ENDPOINT.match(hook_name)
    if not match:
        return None
    name = match.group(1)
    return name[0].lower() + name[1:]


class RtkQueryProcessor(TableDrivenProcessor):
    """Generated ``use<Endpoint>Query`` / ``use<Endpoint>Mutation`` hooks."""

    def __init__(self):
        super().__init__(RTK_QUERY)

    def rule_for(self, occurrence: HookOccurrence) -> Optional[HookRule]:
        if RTK_MUTATION_HOOK.match(occurrence.hook_name):
            return self.library_spec.rules["mutation"]
        if RTK_QUERY_HOOK.match(occurrence.hook_name):
            return self.library_spec.rules["query"]
        return None

    def endpoint_for(self, occurrence: HookOccurrence, rule: HookRule) -> Optional[str]:
        return rtk_endpoint_name(occurrence.hook_name)

    def extra_metadata(self, occurrence: HookOccurrence) -> Dict[str, Any]:
        return {"endpointName": rtk_endpoint_name(occurrence.hook_name)}


# ============================================================================
# React Hook Form
# ============================================================================

REACT_HOOK_FORM = LibrarySpec(
    metadata=ProcessorMetadata(
        id="react-hook-form",
        library_name="react-hook-form",
        package_patterns=("react-hook-form",),
        hook_names=("useForm", "useController", "useWatch", "useFormState"),
        priority=50,
        description="React Hook Form library processor",
    ),
    rules={
        "useForm": HookRule(mappings=(
            _m("register", PROCESS, isFormHandler=True),
            _m("handleSubmit", PROCESS, isFormHandler=True),
            _m("formState", DATA_STORE, isFormState=True),
            _m("setValue", PROCESS, isFormHandler=True),
            _m("reset", PROCESS, isFormHandler=True),
            _m("watch", PROCESS, isFormHandler=True),
            _m("getValues", PROCESS, isFormHandler=True),
            _m("control", DATA_STORE, isFormControl=True),
            _m("unregister", PROCESS, isFormHandler=True),
            _m("trigger", PROCESS, isFormHandler=True),
            _m("clearErrors", PROCESS, isFormHandler=True),
        )),
        "useController": HookRule(mappings=(
            _m("field", DATA_STORE, isFieldState=True),
            _m("fieldState", DATA_STORE, isFieldState=True),
        )),
        "useWatch": HookRule(mappings=(
            _m("value", EXTERNAL_INPUT, isWatchedValue=True),
        )),
        "useFormState": HookRule(mappings=(
            _m("isDirty", DATA_STORE, isFormState=True),
            _m("isValid", DATA_STORE, isFormState=True),
            _m("errors", DATA_STORE, isFormState=True, isError=True),
            _m("isSubmitting", DATA_STORE, isFormState=True),
            _m("isLoading", DATA_STORE, isFormState=True, isLoading=True),
            _m("isValidating", DATA_STORE, isFormState=True),
            _m("touchedFields", DATA_STORE, isFormState=True),
            _m("dirtyFields", DATA_STORE, isFormState=True),
        )),
    },
)


def table_processors() -> List[TableDrivenProcessor]:
    return [
        TableDrivenProcessor(SWR),
        TableDrivenProcessor(TANSTACK_QUERY),
        TableDrivenProcessor(APOLLO_CLIENT),
        RtkQueryProcessor(),
        TableDrivenProcessor(REACT_HOOK_FORM),
    ]
