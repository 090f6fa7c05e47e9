"""Tests for JSX conditional and loop extraction."""

import pytest

from hookflow.analyzers.conditionals import JSXStructureExtractor
from hookflow.models import ConditionalStructure, ElementStructure, LoopStructure

pytestmark = pytest.mark.grammar


@pytest.fixture
def structures(component_body):
    """Structures returned by the first component of a snippet."""
    def _extract(source):
        body, positions = component_body(source)
        return JSXStructureExtractor(positions).extract(body)
    return _extract


class TestJSXStructureExtractor:
    """Test JSXStructureExtractor."""

    def test_ternary(self, structures):
        """Test a ternary with element branches."""
        result = structures("""
function Greeting({ user }) {
  return user.isLoggedIn ? <Dashboard user={user} /> : <Login />;
}
""")
        assert len(result) == 1
        conditional = result[0]
        assert isinstance(conditional, ConditionalStructure)
        assert conditional.kind == "ternary"
        assert conditional.condition.variables == ["user"]
        assert conditional.condition.expression == "user.isLoggedIn"
        assert conditional.true_branch.tag_name == "Dashboard"
        assert conditional.false_branch.tag_name == "Login"

    def test_logical_and_inside_element(self, structures):
        """Test && renders nested inside an element's children."""
        result = structures("""
function Panel() {
  return (
    <div>
      {isOpen && !isLoading && <Modal onClose={close} />}
    </div>
  );
}
""")
        root = result[0]
        assert isinstance(root, ElementStructure)
        assert root.tag_name == "div"
        conditional = root.children[0]
        assert conditional.kind == "logical-and"
        assert conditional.condition.variables == ["isOpen", "isLoading"]
        assert conditional.condition.expression == "isOpen && !isLoading"
        assert conditional.true_branch.tag_name == "Modal"
        assert conditional.false_branch is None
        assert conditional.true_branch.attribute_references[0].attribute_name == "onClose"
        assert conditional.true_branch.attribute_references[0].references == ["close"]

    def test_logical_or(self, structures):
        """Test || puts the rendered branch on the false side."""
        result = structures("""
function Avatar() {
  return <div>{image || <Placeholder />}</div>;
}
""")
        conditional = result[0].children[0]
        assert conditional.kind == "logical-or"
        assert conditional.true_branch is None
        assert conditional.false_branch.tag_name == "Placeholder"

    def test_map_loop(self, structures):
        """Test items.map(item => <li/>) loops."""
        result = structures("""
function TodoList({ todos }) {
  return (
    <ul>
      {todos.map((todo) => <li key={todo.id}>{todo.title}</li>)}
    </ul>
  );
}
""")
        loop = result[0].children[0]
        assert isinstance(loop, LoopStructure)
        assert loop.kind == "map"
        assert loop.source == "todos"
        assert loop.loop_variable == "todo"
        assert loop.condition.variables == ["todos"]
        assert loop.body.tag_name == "li"
        assert loop.body.display_dependencies == ["todo"]

    def test_display_dependencies(self, structures):
        """Test that expression children become display dependencies."""
        result = structures("""
function Counter() {
  return <p>{count} of {total + offset}</p>;
}
""")
        assert result[0].display_dependencies == ["count", "total", "offset"]
        assert result[0].children == []

    def test_non_element_branches_add_no_nodes(self, structures):
        """Test that null and bare-value branches are left empty."""
        result = structures("""
function Status() {
  return (
    <div>
      {error ? <Alert /> : null}
      {label}
    </div>
  );
}
""")
        root = result[0]
        assert len(root.children) == 1
        conditional = root.children[0]
        assert conditional.true_branch.tag_name == "Alert"
        assert conditional.false_branch is None
        assert root.display_dependencies == ["error", "label"]

    def test_component_returning_null(self, structures):
        assert structures("function Empty() { return null; }") == []

    def test_multiple_returns(self, structures):
        """Test early returns each produce a structure."""
        result = structures("""
function Page() {
  if (loading) {
    return <Spinner />;
  }
  const render = () => <Ignored />;
  return <Content />;
}
""")
        assert [s.tag_name for s in result] == ["Spinner", "Content"]

    def test_register_spread_metadata(self, structures):
        """Test React Hook Form register spreads on inputs."""
        result = structures("""
function Form() {
  return <input {...register('email')} />;
}
""")
        element = result[0]
        assert element.metadata == {"hasRegister": True, "fieldName": "email"}
