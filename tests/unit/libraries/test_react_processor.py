"""Tests for the React built-in hook processor."""

import pytest

from hookflow.libraries.react import ReactProcessor
from hookflow.models import ReducerInfo


@pytest.fixture
def processor():
    return ReactProcessor()


class TestState:
    """Test useState nodes."""

    def test_read_write_pair(self, processor, session, make_occurrence):
        """Test that [value, setter] becomes one state node."""
        occurrence = make_occurrence(
            "useState",
            ["count", "setCount"],
            is_read_write_pair=True,
            initial_value="0",
            line=3,
            column=26,
        )
        result = processor.process(occurrence, session)

        assert len(result.nodes) == 1
        node = result.nodes[0]
        assert node.id == "state_0"
        assert node.label == "count"
        assert node.type == "data-store"
        assert node.metadata["readVariable"] == "count"
        assert node.metadata["writeVariable"] == "setCount"
        assert node.metadata["initialValue"] == "0"
        assert (node.line, node.column) == (3, 26)

    def test_plain_binding(self, processor, session, make_occurrence):
        result = processor.process(make_occurrence("useState", ["state"]), session)
        assert [node.label for node in result.nodes] == ["state"]
        assert result.nodes[0].metadata["isReadWritePair"] is False


class TestReducer:
    """Test useReducer nodes."""

    def test_reducer_node(self, processor, session, make_occurrence):
        occurrence = make_occurrence(
            "useReducer",
            ["state", "dispatch"],
            reducer=ReducerInfo(
                state_variable="state",
                dispatch_variable="dispatch",
                reducer_name="todoReducer",
                state_properties=["items", "filter"],
            ),
        )
        node = processor.process(occurrence, session).nodes[0]

        assert node.label == "todoReducer"
        assert node.metadata["isReducer"] is True
        assert node.metadata["writeVariable"] == "dispatch"
        assert node.metadata["stateProperties"] == ["items", "filter"]

    def test_reducer_without_pattern(self, processor, session, make_occurrence):
        """Test that an undestructured reducer produces nothing."""
        result = processor.process(make_occurrence("useReducer", ["store"]), session)
        assert result.nodes == []


class TestContext:
    """Test useContext nodes."""

    def test_classified_context(self, processor, session, make_occurrence):
        occurrence = make_occurrence(
            "useContext",
            ["user", "logout"],
            variable_types={"user": "data", "logout": "function"},
        )
        result = processor.process(occurrence, session)

        assert [(n.label, n.type, n.metadata["category"]) for n in result.nodes] == [
            ("user", "external-entity-input", "context-data"),
            ("logout", "external-entity-output", "context-function"),
        ]

    def test_unclassified_function_only(self, processor, session, make_occurrence):
        occurrence = make_occurrence("useContext", ["dispatch"], is_function_only=True)
        node = processor.process(occurrence, session).nodes[0]
        assert node.type == "external-entity-output"
        assert node.metadata["category"] == "context"

    def test_unclassified_pair(self, processor, session, make_occurrence):
        occurrence = make_occurrence("useContext", ["theme", "setTheme"], is_read_write_pair=True)
        result = processor.process(occurrence, session)

        assert len(result.nodes) == 1
        assert result.nodes[0].type == "data-store"
        assert result.nodes[0].metadata["writeVariable"] == "setTheme"

    def test_unclassified_plain(self, processor, session, make_occurrence):
        node = processor.process(make_occurrence("useContext", ["config"]), session).nodes[0]
        assert node.type == "external-entity-input"


@pytest.mark.parametrize("hook_name", ["useEffect", "useMemo", "useCallback", "useRef"])
def test_other_hooks_are_acknowledged(processor, session, make_occurrence, hook_name):
    result = processor.process(make_occurrence(hook_name, ["value"]), session)
    assert result.handled is True
    assert result.nodes == []
    assert result.edges == []
