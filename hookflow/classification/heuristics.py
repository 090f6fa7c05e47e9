"""Naming heuristics and static return-shape tables for hook variables."""

import re
from typing import Dict, Optional

FUNCTION = "function"
DATA = "data"

# Prefix followed by an uppercase letter, or the bare verb itself
_FUNCTION_NAME_PATTERNS = (
    re.compile(r"^(on|handle)[A-Z]"),
    re.compile(
        r"^(set|get|update|delete|create|fetch|load|toggle|increment|decrement|dispatch"
        r"|navigate|logout|login|submit|register|reset|clear)([A-Z]|$)"
    ),
)

ACTION_PREFIXES = (
    "set", "update", "add", "remove", "delete", "create",
    "fetch", "load", "save", "clear", "reset", "toggle",
    "increment", "decrement", "increase", "decrease",
    "push", "pop", "shift", "unshift",
    "handle", "on", "dispatch",
)

# Hooks whose return values need no classification
REACT_BUILTIN_HOOKS = frozenset({
    "useState",
    "useReducer",
    "useContext",
    "useRef",
    "useMemo",
    "useCallback",
    "useEffect",
    "useLayoutEffect",
    "useInsertionEffect",
    "useImperativeHandle",
    "useDebugValue",
    "useDeferredValue",
    "useTransition",
    "useId",
    "useSyncExternalStore",
    "useOptimistic",
    "useActionState",
})

REACT_HOOK_FORM_RETURNS: Dict[str, Dict[str, str]] = {
    "useForm": {
        "register": FUNCTION,
        "handleSubmit": FUNCTION,
        "formState": DATA,
        "setValue": FUNCTION,
        "reset": FUNCTION,
        "watch": FUNCTION,
        "getValues": FUNCTION,
        "control": DATA,
        "unregister": FUNCTION,
        "trigger": FUNCTION,
        "clearErrors": FUNCTION,
    },
    "useController": {"field": DATA, "fieldState": DATA},
    "useWatch": {"value": DATA},
    "useFormState": {
        "isDirty": DATA,
        "isValid": DATA,
        "errors": DATA,
        "isSubmitting": DATA,
        "isLoading": DATA,
        "isValidating": DATA,
        "touchedFields": DATA,
        "dirtyFields": DATA,
    },
}

STATIC_RETURN_TABLES: Dict[str, Dict[str, Dict[str, str]]] = {
    "react-hook-form": REACT_HOOK_FORM_RETURNS,
}


def is_function_name(name: str) -> bool:
    """True when a variable name reads like a callable.

    >>> is_function_name("handleSubmit"), is_function_name("reset")
    (True, True)
    >>> is_function_name("settings")
    False
    """
    return any(pattern.match(name) for pattern in _FUNCTION_NAME_PATTERNS)


def classify_by_name(name: str) -> str:
    return FUNCTION if is_function_name(name) else DATA


def looks_like_action(name: str) -> bool:
    """Looser, case-insensitive verb-prefix check used for store members."""
    lowered = name.lower()
    return any(lowered.startswith(prefix) for prefix in ACTION_PREFIXES)


def static_return_table(library_name: Optional[str], hook_name: str) -> Optional[Dict[str, str]]:
    """Known return shape for a library hook, or None when the hook is not tabled.

    Without a library tag the React Hook Form table still applies, since its
    hook names are distinctive enough on their own.
    """
    if library_name is not None:
        tables = STATIC_RETURN_TABLES.get(library_name)
        return tables.get(hook_name) if tables else None
    return REACT_HOOK_FORM_RETURNS.get(hook_name)
