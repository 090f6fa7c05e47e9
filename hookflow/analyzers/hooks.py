"""State hook pattern matcher.

Recognizes hook-style calls in a component body and extracts their
syntactic shape:

    const [count, setCount] = useState(0);
    const { data, error } = useSWR('/api/user') as Result;
    const [state, dispatch] = useReducer(reducer, initial);
    useEffect(() => {...}, [count]);          # bare statement, no variables

Matching is name based and deliberately permissive; later stages decide
whether a match belongs to a known library.
"""

import re
from typing import List, Optional, Tuple

from hookflow.analyzers.position import PositionIndex
from hookflow.analyzers.syntax import (
    call_arguments,
    callee_tail,
    declarators,
    dotted_name,
    is_call,
    literal_argument,
    pattern_names,
    statements_of,
    string_value,
    type_argument_name,
    unwrap_expression,
)
from hookflow.classification.heuristics import is_function_name
from hookflow.logging_config import get_logger
from hookflow.models import Diagnostic, HookMatch, ReducerPattern
from hookflow.parsers.tree_sitter_adapter import UniversalASTNode

logger = get_logger(__name__)

REDUCER_STATE_PLACEHOLDER = "__reducer_state__"

HOOK_NAME_PATTERN = re.compile(r"^use[A-Z0-9_]")

# Non-"use" calls that behave like hooks in each framework
FRAMEWORK_HOOK_CALLS = {
    "react": frozenset(),
    "vue": frozenset({
        "provide",
        "inject",
        "storeToRefs",
        "onBeforeRouteUpdate",
        "onBeforeRouteLeave",
    }),
    "svelte": frozenset({
        "writable",
        "readable",
        "derived",
        "get",
        "goto",
        "beforeNavigate",
        "afterNavigate",
    }),
}

_PREDICATE_NAME = re.compile(r"^(is|has|can|should)[A-Z]")


def is_read_write_pair(variables: List[str]) -> bool:
    """True for the ``[value, setValue]`` naming convention.

    >>> is_read_write_pair(["count", "setCount"])
    True
    >>> is_read_write_pair(["count", "resetCount"])
    False
    """
    if len(variables) != 2 or not variables[0]:
        return False
    first, second = variables
    return second == f"set{first[0].upper()}{first[1:]}"


def is_function_only(variables: List[str]) -> bool:
    """True when every bound name looks like a callable or predicate."""
    if not variables:
        return False
    return all(is_function_name(name) or _PREDICATE_NAME.match(name) for name in variables)


class HookAnalyzer:
    """Extract :class:`HookMatch` records from a component or script body.

    Args:
        positions: Position index for the parsed source
        framework: ``react``, ``vue`` or ``svelte``; widens the set of calls
            treated as hooks
    """

    def __init__(self, positions: PositionIndex, framework: str = "react"):
        self.positions = positions
        self.framework = framework
        self._extra_calls = FRAMEWORK_HOOK_CALLS.get(framework, frozenset())
        self.diagnostics: List[Diagnostic] = []

    def is_hook_name(self, name: Optional[str]) -> bool:
        if not name:
            return False
        return bool(HOOK_NAME_PATTERN.match(name)) or name in self._extra_calls

    def analyze(self, body: Optional[UniversalASTNode]) -> List[HookMatch]:
        """Match every hook call among the top-level statements of ``body``.

        A statement whose extraction raises is skipped and recorded in
        ``self.diagnostics``; the remaining statements are still matched.
        """
        matches: List[HookMatch] = []
        self.diagnostics = []
        for statement in statements_of(body):
            try:
                matches.extend(self.match_statement(statement))
            except Exception as e:
                line = self.positions.of(statement)[0]
                logger.warning(f"Skipping hook statement at line {line}: {e}", exc_info=True)
                self.diagnostics.append(Diagnostic(stage="hooks", message=str(e), line=line))
        logger.debug(f"Found {len(matches)} hook call(s)")
        return matches

    def match_statement(self, statement: UniversalASTNode) -> List[HookMatch]:
        """Matches for one statement (a declaration may hold several declarators)."""
        if statement.node_type == "expression_statement":
            named = statement.named_children
            if not named:
                return []
            call = unwrap_expression(named[0])
            if is_call(call):
                match = self.match_call(call, pattern=None)
                return [match] if match else []
            return []

        matches = []
        for declarator in declarators(statement):
            match = self.match_declarator(declarator)
            if match is not None:
                matches.append(match)
        return matches

    def match_declarator(self, declarator: UniversalASTNode) -> Optional[HookMatch]:
        value = unwrap_expression(declarator.get_field("value"))
        if not is_call(value):
            return None
        return self.match_call(value, pattern=declarator.get_field("name"))

    def match_call(
        self,
        call: UniversalASTNode,
        pattern: Optional[UniversalASTNode],
    ) -> Optional[HookMatch]:
        """Build a match for a call expression, or None if it is not a hook."""
        callee = call.get_field("function")
        hook_name = callee_tail(callee)
        if not self.is_hook_name(hook_name):
            return None

        callee_path = dotted_name(callee) if callee.node_type == "member_expression" else None
        args = call_arguments(call)

        reducer_pattern = None
        if hook_name == "useReducer" and pattern is not None and pattern.node_type == "array_pattern":
            variables, reducer_pattern = self._reducer_variables(pattern)
        else:
            variables = pattern_names(pattern)

        if hook_name == "provide" and not variables and args:
            key = string_value(unwrap_expression(args[0]))
            if key:
                variables = [key]

        initial_value = None
        if hook_name == "useState" and args:
            first = unwrap_expression(args[0])
            if first is not None and first.node_type == "identifier":
                initial_value = first.text

        line, column = self.positions.of(call)
        return HookMatch(
            hook_name=hook_name,
            variables=variables,
            line=line,
            column=column,
            dependencies=self.extract_dependencies(args, index=1),
            arguments=[literal_argument(arg) for arg in args if arg.node_type != "spread_element"],
            argument_identifiers=self._argument_identifiers(args),
            type_parameter=type_argument_name(call),
            initial_value=initial_value,
            is_read_write_pair=is_read_write_pair(variables),
            is_function_only=is_function_only(variables),
            reducer_pattern=reducer_pattern,
            callee_path=callee_path,
            destructured=pattern is not None and pattern.node_type in ("object_pattern", "array_pattern"),
        )

    @staticmethod
    def extract_dependencies(args: List[UniversalASTNode], index: int) -> Optional[List[str]]:
        """Identifier elements of the dependency array at ``args[index]``.

        An absent, non-array or empty array argument yields None.
        """
        if len(args) <= index:
            return None
        array = unwrap_expression(args[index])
        if array is None or array.node_type != "array":
            return None
        names = [
            element.text
            for element in array.named_children
            if element.node_type == "identifier"
        ]
        return names or None

    @staticmethod
    def _argument_identifiers(args: List[UniversalASTNode]) -> List[str]:
        identifiers = []
        for arg in args:
            expression = unwrap_expression(arg)
            if expression is not None and expression.node_type == "identifier":
                identifiers.append(expression.text)
        return identifiers

    @staticmethod
    def _reducer_variables(pattern: UniversalASTNode) -> Tuple[List[str], ReducerPattern]:
        """Variables of ``const [state, dispatch] = useReducer(...)``.

        A destructured state (``[{count, step}, dispatch]``) becomes a
        placeholder variable with its keys recorded as state properties.
        """
        variables: List[str] = []
        state_properties = None
        for element in pattern.named_children:
            if element.node_type == "assignment_pattern":
                element = element.get_field("left") or element
            if element.node_type == "identifier":
                variables.append(element.text)
            elif element.node_type == "object_pattern":
                variables.append(REDUCER_STATE_PLACEHOLDER)
                state_properties = pattern_names(element, object_keys=True)
            elif element.node_type == "array_pattern":
                variables.append(REDUCER_STATE_PLACEHOLDER)

        reducer_pattern = ReducerPattern(
            state_variable=variables[0] if variables else None,
            dispatch_variable=variables[1] if len(variables) > 1 else None,
            state_properties=state_properties,
        )
        return variables, reducer_pattern
