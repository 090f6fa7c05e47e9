"""Classification engine: decide which hook variables are data and which are functions.

Priority chain per variable:

1. A static return-shape table for the hook (React Hook Form).
2. The type resolver, when configured, unless its answer contradicts a
   strong function-like name (then the name wins).
3. Naming heuristics.

``useReducer`` occurrences get :class:`~hookflow.models.ReducerInfo`
instead, and React built-ins are left unclassified.
"""

from typing import Dict, List, Optional

from hookflow.classification.heuristics import (
    DATA,
    FUNCTION,
    REACT_BUILTIN_HOOKS,
    classify_by_name,
    is_function_name,
    static_return_table,
)
from hookflow.classification.resolver import ResolvedType, TypeQuery, TypeResolver
from hookflow.classification.type_classifier import TypeClassifier, object_type_properties
from hookflow.logging_config import get_logger
from hookflow.models import HookMatch, HookOccurrence, ReducerInfo

logger = get_logger(__name__)


class ClassificationEngine:
    """Turn :class:`HookMatch` records into classified :class:`HookOccurrence` records.

    Args:
        type_resolver: Optional resolver; without one only tables and
            heuristics are used
        use_batch: Send one batched query per call site when the resolver
            supports it
    """

    def __init__(self, type_resolver: Optional[TypeResolver] = None, use_batch: bool = True):
        self.type_resolver = type_resolver
        self.use_batch = use_batch
        self.classifier = TypeClassifier()

    def classify(self, match: HookMatch, file_path: str = "<memory>") -> HookOccurrence:
        """Classify one match. The match itself is left untouched."""
        if match.hook_name == "useReducer":
            return HookOccurrence.from_match(match, reducer=self._reducer_info(match, file_path))

        if match.hook_name == "useContext":
            return HookOccurrence.from_match(match, variable_types=self._context_types(match, file_path))

        table = None
        if match.library_name in (None, "react-hook-form"):
            table = static_return_table(match.library_name, match.hook_name)
        if table is not None:
            variable_types = {name: table.get(name, DATA) for name in match.variables}
            logger.debug(f"{match.hook_name}: classified from static table")
            return HookOccurrence.from_match(match, variable_types=variable_types)

        if match.hook_name in REACT_BUILTIN_HOOKS and match.library_name in (None, "react"):
            return HookOccurrence.from_match(match)

        if not match.variables:
            return HookOccurrence.from_match(match)

        return HookOccurrence.from_match(
            match,
            variable_types=self._resolve_or_guess(match, match.variables, file_path),
        )

    def classify_all(self, matches: List[HookMatch], file_path: str = "<memory>") -> List[HookOccurrence]:
        return [self.classify(match, file_path) for match in matches]

    # ------------------------------------------------------------------
    # Per-hook strategies
    # ------------------------------------------------------------------

    def _context_types(self, match: HookMatch, file_path: str) -> Optional[Dict[str, str]]:
        if not match.variables:
            return None
        if not match.destructured:
            # const theme = useContext(ThemeContext)
            return {name: DATA for name in match.variables}
        return self._resolve_or_guess(match, match.variables, file_path)

    def _reducer_info(self, match: HookMatch, file_path: str) -> Optional[ReducerInfo]:
        if len(match.variables) != 2:
            return None
        state_variable, dispatch_variable = match.variables

        reducer_name = None
        if match.arguments and match.arguments[0].type == "identifier" and match.argument_identifiers:
            reducer_name = match.argument_identifiers[0]

        state_properties = None
        if match.reducer_pattern is not None:
            state_properties = match.reducer_pattern.state_properties

        if state_properties is None and self.type_resolver is not None:
            resolved = self._query(file_path, state_variable, match)
            if resolved is not None:
                state_properties = object_type_properties(resolved.type_string) or None

        return ReducerInfo(
            state_variable=state_variable,
            dispatch_variable=dispatch_variable,
            reducer_name=reducer_name,
            state_properties=state_properties,
        )

    def _resolve_or_guess(self, match: HookMatch, names: List[str], file_path: str) -> Dict[str, str]:
        if self.type_resolver is None:
            return {name: classify_by_name(name) for name in names}

        if self.use_batch and self.type_resolver.supports_batch and len(names) > 1:
            resolved = self._query_batch(file_path, names, match)
            return {
                name: self._reconcile(name, resolved.get(name), None)
                for name in names
            }

        variable_types = {}
        for name in names:
            result = self._query(file_path, name, match)
            if result is None:
                variable_types[name] = classify_by_name(name)
            else:
                variable_types[name] = self._reconcile(name, result.type_string, result.is_function)
        return variable_types

    def _reconcile(self, name: str, type_string: Optional[str], resolver_says_function: Optional[bool]) -> str:
        """Combine a resolved type with the naming heuristic.

        A function-like name whose resolved type is ``boolean`` or otherwise
        non-callable is treated as a resolver mistake.
        """
        if not type_string:
            return classify_by_name(name)

        is_function = bool(resolver_says_function) or self.classifier.is_function(type_string)
        if is_function_name(name) and (type_string == "boolean" or not is_function):
            logger.debug(f"{name}: resolved type {type_string!r} looks suspicious, using name heuristic")
            return classify_by_name(name)
        return FUNCTION if is_function else DATA

    # ------------------------------------------------------------------
    # Resolver access
    # ------------------------------------------------------------------

    def _query(self, file_path: str, name: str, match: HookMatch) -> Optional[ResolvedType]:
        try:
            return self.type_resolver.resolve_type(file_path, name, match.line, match.column)
        except Exception as e:
            logger.warning(
                f"Type query for {name} ({match.hook_name} at line {match.line}) failed: {e}; "
                f"falling back to name heuristic"
            )
            return None

    def _query_batch(self, file_path: str, names: List[str], match: HookMatch) -> Dict[str, str]:
        queries = [
            TypeQuery(file_path=file_path, variable_name=name, line=match.line, column=match.column)
            for name in names
        ]
        try:
            return self.type_resolver.resolve_types(queries)
        except Exception as e:
            logger.warning(
                f"Batched type query for {match.hook_name} at line {match.line} failed: {e}; "
                f"falling back to name heuristics"
            )
            return {}
