"""Tests for type-string classification."""

import pytest

from hookflow.classification.heuristics import is_function_name, looks_like_action
from hookflow.classification.type_classifier import (
    TypeClassifier,
    object_type_properties,
    split_union,
)


@pytest.fixture
def classifier():
    return TypeClassifier()


class TestSplitUnion:
    """Test top-level union splitting."""

    def test_simple_union(self):
        assert split_union("string | undefined") == ["string", "undefined"]

    def test_nested_members_are_not_split(self):
        """Test that unions inside generics and parentheses stay whole."""
        assert split_union("Map<string, A | B> | null") == ["Map<string, A | B>", "null"]
        assert split_union("((e: Event) => void) | undefined") == ["((e: Event) => void)", "undefined"]

    def test_arrow_does_not_close_bracket(self):
        """Test that => inside a generic keeps nesting balanced."""
        assert split_union("Array<() => void> | string") == ["Array<() => void>", "string"]


class TestTypeClassifier:
    """Test TypeClassifier.is_function."""

    @pytest.mark.parametrize("type_string", [
        "(value: string) => void",
        "() => Promise<void>",
        "<T>(item: T) => T",
        "Function",
        "function (x: number): void",
        "React.MouseEventHandler<HTMLButtonElement>",
        "ChangeEventHandler",
        "Dispatch<SetStateAction<number>>",
        "((id: string) => void) | undefined",
        "(instance: HTMLDivElement | null) => void",
        "EventDispatcher<{ save: Item }>",
        "SubmitHandler",
    ])
    def test_callable_types(self, classifier, type_string):
        assert classifier.is_function(type_string) is True

    @pytest.mark.parametrize("type_string", [
        "boolean",
        "string",
        "number[]",
        "User | undefined",
        "{ count: number }",
        "undefined | null",
        "Map<string, number>",
    ])
    def test_data_types(self, classifier, type_string):
        assert classifier.is_function(type_string) is False

    def test_classify_reports_union_members(self, classifier):
        """Test the structured classification result."""
        result = classifier.classify(" string | number ")
        assert result.base_type == "string | number"
        assert result.is_union is True
        assert result.union_types == ["string", "number"]
        assert result.is_function is False

    def test_detect_framework(self, classifier):
        """Test framework detection from type names."""
        assert classifier.detect_framework("React.Dispatch<number>") == "react"
        assert classifier.detect_framework("Writable<number>") == "svelte"
        assert classifier.detect_framework("Store<'cart'>") == "vue"
        assert classifier.detect_framework("number") == "unknown"


class TestObjectTypeProperties:
    """Test property extraction from object type strings."""

    def test_properties(self):
        assert object_type_properties("{ count: number; readonly step?: number }") == ["count", "step"]

    def test_nested_members(self):
        """Test that nested object and function types are skipped over."""
        type_string = "{ user: { id: string; name: string }, onSave: (a: number, b: string) => void }"
        assert object_type_properties(type_string) == ["user", "onSave"]

    def test_non_object(self):
        assert object_type_properties("number") == []


class TestNameHeuristics:
    """Test naming heuristics."""

    @pytest.mark.parametrize("name", ["handleClick", "onSubmit", "setUser", "reset", "fetchTodos", "dispatch"])
    def test_function_names(self, name):
        assert is_function_name(name) is True

    @pytest.mark.parametrize("name", ["settings", "user", "onboarding", "handler", "isLoading", "data"])
    def test_data_names(self, name):
        assert is_function_name(name) is False

    def test_looks_like_action(self):
        """Test the looser store-member check."""
        assert looks_like_action("addItem") is True
        assert looks_like_action("Increment") is True
        assert looks_like_action("items") is False
