"""Tests for state-store processors."""

import pytest

from hookflow.libraries import AnalysisSession, create_default_registry
from hookflow.libraries.stores import classify_mobx_member
from hookflow.models import ArgumentValue


@pytest.fixture
def registry():
    return create_default_registry()


class TestZustandAndPinia:
    """Test the store-hook split between React and Vue."""

    def test_zustand_store(self, registry, make_occurrence):
        result = registry.process(
            make_occurrence("useCartStore", ["items", "addItem", "clearCart"]),
            AnalysisSession("react"),
        )
        node = result.nodes[0]

        assert node.metadata["libraryName"] == "zustand"
        assert node.metadata["dataProperties"] == ["items"]
        assert node.metadata["processProperties"] == ["addItem", "clearCart"]

    def test_pinia_store(self, registry, make_occurrence):
        result = registry.process(
            make_occurrence("useCartStore", ["items", "addItem"]),
            AnalysisSession("vue"),
        )
        node = result.nodes[0]

        assert node.metadata["libraryName"] == "pinia"
        assert node.metadata["isPiniaStore"] is True
        assert node.metadata["propertyMetadata"]["items"] == {
            "dfdElementType": "external-entity-input",
            "isStateOrGetter": True,
        }
        assert node.metadata["propertyMetadata"]["addItem"]["isAction"] is True

    def test_tagged_zustand_in_vue(self, registry, make_occurrence):
        """Test that an explicit zustand import wins over the framework default."""
        occurrence = make_occurrence("useBearStore", ["bears"], library_name="zustand")
        processor = registry.find_processor(occurrence, AnalysisSession("vue"))
        assert processor.metadata.id == "zustand"

    def test_store_to_refs_creates_nothing(self, registry, make_occurrence):
        result = registry.process(make_occurrence("storeToRefs", ["name"]), AnalysisSession("vue"))
        assert result.nodes == []
        assert result.handled is True


class TestVueCore:
    """Test provide/inject and composables."""

    def test_provide_key_from_string_argument(self, registry, make_occurrence):
        occurrence = make_occurrence("provide", [], arguments=[ArgumentValue("string", "theme")])
        node = registry.process(occurrence, AnalysisSession("vue")).nodes[0]

        assert node.label == "provide: theme"
        assert node.type == "external-entity-output"
        assert node.metadata["providedKeys"] == ["theme"]

    def test_inject_nodes(self, registry, make_occurrence):
        nodes = registry.process(make_occurrence("inject", ["store"]), AnalysisSession("vue")).nodes
        assert [(node.label, node.type) for node in nodes] == [("store", "external-entity-input")]

    def test_classified_composable(self, registry, make_occurrence):
        occurrence = make_occurrence(
            "useMouse",
            ["x", "reset"],
            variable_types={"x": "data", "reset": "function"},
        )
        node = registry.process(occurrence, AnalysisSession("vue")).nodes[0]

        assert node.label == "useMouse"
        assert node.metadata["dataProperties"] == ["x"]
        assert node.metadata["functionProperties"] == ["reset"]

    def test_unclassified_composable(self, registry, make_occurrence):
        nodes = registry.process(make_occurrence("useMouse", ["x", "y"]), AnalysisSession("vue")).nodes
        assert [node.label for node in nodes] == ["x", "y"]
        assert all(node.metadata["isCustomComposable"] for node in nodes)


class TestMobx:
    """Test MobX local observables."""

    @pytest.mark.parametrize("name,expected", [
        ("count", "data"),
        ("increment", "function"),
        ("handleReset", "function"),
        ("saveAction", "function"),
    ])
    def test_member_classification(self, name, expected):
        assert classify_mobx_member(name) == expected

    def test_local_observable(self, registry, make_occurrence):
        result = registry.process(
            make_occurrence("useLocalObservable", ["count", "increment"]),
            AnalysisSession("react"),
        )
        assert [(n.label, n.type) for n in result.nodes] == [
            ("count", "data-store"),
            ("increment", "external-entity-output"),
        ]
        assert result.nodes[0].metadata["subgraph"] == "useLocalObservable-input"


class TestSvelteStores:
    """Test svelte/store processors."""

    def test_writable(self, registry, make_occurrence):
        result = registry.process(make_occurrence("writable", ["count"]), AnalysisSession("svelte"))
        node = result.nodes[0]
        assert node.type == "data-store"
        assert node.metadata["category"] == "svelte-store-writable"

    def test_get_reads(self, registry, make_occurrence):
        result = registry.process(make_occurrence("get", ["value"]), AnalysisSession("svelte"))
        assert result.nodes[0].metadata["category"] == "svelte-store-get"

    def test_untagged_store_calls_outside_svelte(self, registry, make_occurrence):
        """Test that a React ``get`` call is not a Svelte store read."""
        assert registry.find_processor(make_occurrence("get", ["value"]), AnalysisSession("react")) is None


class TestJotai:
    """Test Jotai atom node sharing."""

    def test_atom_node_is_reused(self, registry, make_occurrence):
        """Test that a second hook on the same atom fills the missing side."""
        session = AnalysisSession("react")
        first = registry.process(
            make_occurrence("useAtomValue", ["count"], argument_identifiers=["countAtom"]),
            session,
        )
        second = registry.process(
            make_occurrence("useSetAtom", ["setCount"], argument_identifiers=["countAtom"]),
            session,
        )

        node = first.nodes[0]
        assert node.label == "countAtom"
        assert second.nodes == []
        assert node.metadata["readVariable"] == "count"
        assert node.metadata["writeVariable"] == "setCount"
        assert node.metadata["isReadWritePair"] is True
        assert node.metadata["isReadOnly"] is False

    def test_use_atom_pair(self, registry, make_occurrence):
        result = registry.process(
            make_occurrence("useAtom", ["todos", "setTodos"], argument_identifiers=["todosAtom"]),
            AnalysisSession("react"),
        )
        metadata = result.nodes[0].metadata
        assert metadata["isReadWritePair"] is True
        assert metadata["isReadOnly"] is False
        assert metadata["isWriteOnly"] is False

    def test_missing_atom_name(self, registry, make_occurrence):
        result = registry.process(make_occurrence("useAtom", ["value"]), AnalysisSession("react"))
        assert result.nodes == []

    def test_sessions_do_not_share_atoms(self, registry, make_occurrence):
        occurrence = make_occurrence("useAtom", ["a", "setA"], argument_identifiers=["aAtom"])
        first = registry.process(occurrence, AnalysisSession("react"))
        second = registry.process(occurrence, AnalysisSession("react"))
        assert len(first.nodes) == len(second.nodes) == 1
