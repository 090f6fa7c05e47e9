"""Tests for the custom hook fallback processor."""

from hookflow.libraries.custom import CustomHookProcessor


class TestCustomHookProcessor:
    """Test CustomHookProcessor."""

    def test_handles_any_use_hook(self, session, make_occurrence):
        processor = CustomHookProcessor()
        assert processor.should_handle(make_occurrence("useFeatureFlags", library_name="./flags"), session)
        assert not processor.should_handle(make_occurrence("createStore"), session)
        assert not processor.should_handle(make_occurrence("user"), session)

    def test_name_based_split(self, session, make_occurrence):
        """Test action-named variables become outputs without type information."""
        result = CustomHookProcessor().process(
            make_occurrence("useCart", ["items", "total", "addItem"]),
            session,
        )

        assert [(n.label, n.type, n.metadata["category"]) for n in result.nodes] == [
            ("items", "data-store", "custom-hook-data"),
            ("total", "data-store", "custom-hook-data"),
            ("addItem", "external-entity-output", "custom-hook-function"),
        ]
        assert result.nodes[0].metadata["subgraph"] == "useCart-input"
        assert result.nodes[2].metadata["subgraph"] == "useCart-output"

    def test_variable_types_take_precedence(self, session, make_occurrence):
        """Test that resolved types override the naming heuristic."""
        occurrence = make_occurrence(
            "useToggle",
            ["on", "flip"],
            variable_types={"on": "data", "flip": "function"},
        )
        result = CustomHookProcessor().process(occurrence, session)

        assert [(n.label, n.type) for n in result.nodes] == [
            ("on", "data-store"),
            ("flip", "external-entity-output"),
        ]

    def test_node_ids_are_unique(self, session, make_occurrence):
        result = CustomHookProcessor().process(make_occurrence("useThing", ["a", "b"]), session)
        ids = [node.id for node in result.nodes]
        assert ids == ["custom_hook_data_0", "custom_hook_data_1"]
