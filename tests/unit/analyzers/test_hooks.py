"""Tests for the state hook pattern matcher."""

import pytest

from hookflow.analyzers.hooks import (
    REDUCER_STATE_PLACEHOLDER,
    HookAnalyzer,
    is_function_only,
    is_read_write_pair,
)

pytestmark = pytest.mark.grammar


@pytest.fixture
def match_hooks(component_body):
    """Match hooks in the first component of a source string."""
    def _match(source, framework="react"):
        body, positions = component_body(source)
        return HookAnalyzer(positions, framework=framework).analyze(body)
    return _match


class TestNamingConventions:
    """Test read/write pair and function-only detection."""

    def test_read_write_pair(self):
        """Test the [value, setValue] convention."""
        assert is_read_write_pair(["count", "setCount"]) is True
        assert is_read_write_pair(["user", "setUser"]) is True

    def test_not_read_write_pair(self):
        """Test near misses of the convention."""
        assert is_read_write_pair(["count", "resetCount"]) is False
        assert is_read_write_pair(["count"]) is False
        assert is_read_write_pair(["count", "setcount"]) is False
        assert is_read_write_pair(["a", "setB", "c"]) is False

    def test_function_only(self):
        """Test that every name must look callable."""
        assert is_function_only(["handleClick", "onSubmit"]) is True
        assert is_function_only(["dispatch"]) is True
        assert is_function_only(["user", "setUser"]) is False
        assert is_function_only([]) is False

    def test_function_only_follows_name_heuristics(self):
        """Test that callable names agree with classification heuristics."""
        assert is_function_only(["reset", "toggleOpen", "clearErrors"]) is True
        assert is_function_only(["isOpen", "hasMore"]) is True
        assert is_function_only(["settings"]) is False


class TestHookAnalyzer:
    """Test HookAnalyzer matching."""

    def test_use_state_pair(self, match_hooks):
        """Test a useState read/write pair with a literal initial value."""
        matches = match_hooks("""
function Counter() {
  const [count, setCount] = useState(0);
  return <div>{count}</div>;
}
""")
        assert len(matches) == 1
        match = matches[0]
        assert match.hook_name == "useState"
        assert match.variables == ["count", "setCount"]
        assert match.is_read_write_pair is True
        assert match.initial_value is None
        assert match.arguments[0].type == "number"
        assert match.line == 3

    def test_use_state_identifier_initial_value(self, match_hooks):
        """Test that an identifier initial value is recorded."""
        matches = match_hooks("""
function Counter({ start }) {
  const [count, setCount] = useState(start);
  return null;
}
""")
        assert matches[0].initial_value == "start"
        assert matches[0].argument_identifiers == ["start"]

    def test_empty_dependency_array_is_absent(self, match_hooks):
        """Test that [] deps are reported as None."""
        matches = match_hooks("""
function Page() {
  useEffect(() => { load(); }, []);
  return null;
}
""")
        assert matches[0].hook_name == "useEffect"
        assert matches[0].dependencies is None
        assert matches[0].variables == []

    def test_dependency_identifiers(self, match_hooks):
        """Test that identifier elements of the deps array are collected."""
        matches = match_hooks("""
function Page({ id }) {
  const [user, setUser] = useState(null);
  useEffect(() => { fetchUser(id); }, [id, user.name, setUser]);
  return null;
}
""")
        effect = matches[1]
        assert effect.dependencies == ["id", "setUser"]

    def test_object_destructuring_with_assertion(self, match_hooks):
        """Test destructured results wrapped in an ``as`` assertion."""
        matches = match_hooks("""
function Profile() {
  const { data, error } = useSWR('/api/user') as Result;
  return null;
}
""")
        match = matches[0]
        assert match.hook_name == "useSWR"
        assert match.variables == ["data", "error"]
        assert match.destructured is True
        assert match.arguments[0].type == "string"
        assert match.arguments[0].value == "/api/user"

    def test_reducer_with_destructured_state(self, match_hooks):
        """Test useReducer with an object-pattern state."""
        matches = match_hooks("""
function Counter() {
  const [{ count, step }, dispatch] = useReducer(reducer, initialState);
  return null;
}
""")
        match = matches[0]
        assert match.variables == [REDUCER_STATE_PLACEHOLDER, "dispatch"]
        assert match.reducer_pattern.state_properties == ["count", "step"]
        assert match.reducer_pattern.dispatch_variable == "dispatch"

    def test_member_callee_path(self, match_hooks):
        """Test that member-call hooks keep the dotted callee."""
        matches = match_hooks("""
function User() {
  const { data } = trpc.user.getById.useQuery({ id: 1 });
  return null;
}
""")
        match = matches[0]
        assert match.hook_name == "useQuery"
        assert match.callee_path == "trpc.user.getById.useQuery"
        assert match.qualified_name == "trpc.user.getById.useQuery"
        assert match.callee_depth == 4

    def test_non_hook_calls_are_ignored(self, match_hooks):
        """Test that ordinary calls and lowercase use-prefixes do not match."""
        matches = match_hooks("""
function Page() {
  const value = compute();
  const used = user();
  return null;
}
""")
        assert matches == []

    def test_type_parameter(self, match_hooks):
        """Test that an explicit type argument is recorded."""
        matches = match_hooks("""
function Page() {
  const [user, setUser] = useState<User>(null);
  return null;
}
""")
        assert matches[0].type_parameter == "User"

    def test_vue_framework_calls(self, parse):
        """Test that provide/inject count as hooks in Vue scripts only."""
        tree, positions = parse(
            "provide('theme', theme);\nconst store = inject('store');\n",
            file_path="Component.vue",
        )
        vue = HookAnalyzer(positions, framework="vue").analyze(tree)
        react = HookAnalyzer(positions, framework="react").analyze(tree)

        assert [m.hook_name for m in vue] == ["provide", "inject"]
        assert vue[0].variables == ["theme"]
        assert react == []

    def test_match_is_not_mutated_by_with_library(self, match_hooks):
        """Test that tagging a match returns a copy."""
        match = match_hooks("""
function Page() {
  const { data } = useQuery(['todos'], fetchTodos);
  return null;
}
""")[0]
        tagged = match.with_library("@tanstack/react-query", source="@tanstack/react-query")

        assert match.library_name is None
        assert tagged.library_name == "@tanstack/react-query"
        assert tagged.variables == match.variables


class TestStatementIsolation:
    """Test that one failing statement does not drop its siblings."""

    def test_failing_statement_is_skipped(self, component_body, monkeypatch):
        original = HookAnalyzer.match_statement

        def match_statement(self, statement):
            if "useBoom" in statement.text:
                raise RuntimeError("boom")
            return original(self, statement)

        monkeypatch.setattr(HookAnalyzer, "match_statement", match_statement)
        body, positions = component_body("""
function Widget() {
  const [a, setA] = useState(0);
  const b = useBoom();
  const [c, setC] = useState(1);
  return null;
}
""")
        analyzer = HookAnalyzer(positions)
        matches = analyzer.analyze(body)

        assert [match.variables for match in matches] == [["a", "setA"], ["c", "setC"]]
        assert len(analyzer.diagnostics) == 1
        diagnostic = analyzer.diagnostics[0]
        assert diagnostic.stage == "hooks"
        assert diagnostic.line == 4
        assert diagnostic.message == "boom"

    def test_diagnostics_reset_between_runs(self, component_body):
        body, positions = component_body("function A() { const [a, setA] = useState(0); }")
        analyzer = HookAnalyzer(positions)
        analyzer.analyze(body)
        assert analyzer.diagnostics == []
