"""Tests for Vue script setup matchers."""

import pytest

from hookflow.analyzers.vue_script import VueScriptAnalyzer

pytestmark = pytest.mark.grammar


@pytest.fixture
def vue(parse):
    """Parse a script setup block and return (program, analyzer)."""
    def _vue(source):
        tree, positions = parse(source, file_path="Component.vue")
        return tree, VueScriptAnalyzer(positions)
    return _vue


class TestReactiveState:
    """Test ref/reactive/computed matching."""

    def test_state_kinds_and_types(self, vue):
        """Test data types from literals, type arguments and annotations."""
        tree, analyzer = vue("""
const count = ref(0)
const name = ref<string>('')
const form = reactive({ email: '' })
const items: Ref<Item[]> = ref([])
const doubled = computed(() => count.value * 2 + offset)
""")
        state = analyzer.analyze_state(tree)

        summary = [(s.name, s.kind, s.data_type) for s in state]
        assert summary == [
            ("count", "ref", "number"),
            ("name", "ref", "string"),
            ("form", "reactive", "object"),
            ("items", "ref", "Ref"),
            ("doubled", "computed", "function"),
        ]
        assert state[0].line == 2
        assert state[0].dependencies is None
        assert state[-1].dependencies == ["count", "offset"]

    def test_destructured_state_is_skipped(self, vue):
        """Test that destructured reactive state is not tracked."""
        tree, analyzer = vue("const { x, y } = reactive({ x: 0, y: 0 })\n")
        assert analyzer.analyze_state(tree) == []

    def test_other_calls_are_ignored(self, vue):
        """Test that non-reactive calls are not state."""
        tree, analyzer = vue("const router = useRouter()\nconst value = compute(1)\n")
        assert analyzer.analyze_state(tree) == []


class TestProps:
    """Test defineProps forms."""

    def test_type_literal_props(self, vue):
        """Test props declared through a type literal."""
        tree, analyzer = vue("""
const props = defineProps<{
  title: string
  count?: number
  onSelect(id: number): void
}>()
""")
        props = analyzer.analyze_props(tree)
        assert [(p.name, p.type) for p in props] == [
            ("title", "string"),
            ("count", "number"),
            ("onSelect", "function"),
        ]

    def test_named_interface_props(self, vue):
        """Test that an interface reference yields a single props entry."""
        tree, analyzer = vue("const props = defineProps<Props>()\n")
        props = analyzer.analyze_props(tree)
        assert [(p.name, p.type) for p in props] == [("props", "Props")]

    def test_runtime_object_props(self, vue):
        """Test runtime constructors, unions and option objects."""
        tree, analyzer = vue("""
defineProps({
  title: String,
  size: [String, Number],
  active: { type: Boolean, default: false },
})
""")
        props = analyzer.analyze_props(tree)
        assert [(p.name, p.type) for p in props] == [
            ("title", "string"),
            ("size", "string | number"),
            ("active", "boolean"),
        ]

    def test_array_props_inside_with_defaults(self, vue):
        """Test withDefaults wrapping an array declaration."""
        tree, analyzer = vue("const props = withDefaults(defineProps(['title', 'size']), {})\n")
        props = analyzer.analyze_props(tree)
        assert [p.name for p in props] == ["title", "size"]
        assert props[0].type == "unknown"

    def test_no_props(self, vue):
        """Test a script without defineProps."""
        tree, analyzer = vue("const count = ref(0)\n")
        assert analyzer.analyze_props(tree) == []


class TestEmits:
    """Test defineEmits forms."""

    def test_array_emits(self, vue):
        """Test the emit variable and array-declared events."""
        tree, analyzer = vue("const emit = defineEmits(['save', 'cancel'])\n")
        variable, events = analyzer.analyze_emits(tree)
        assert variable == "emit"
        assert [e.name for e in events] == ["save", "cancel"]

    def test_call_signature_emits(self, vue):
        """Test typed call signatures with payload types."""
        tree, analyzer = vue("""
const emit = defineEmits<{
  (e: 'change', id: number): void
  (e: 'close'): void
}>()
""")
        variable, events = analyzer.analyze_emits(tree)
        assert variable == "emit"
        assert [(e.name, e.data_type) for e in events] == [("change", "number"), ("close", None)]

    def test_property_signature_emits(self, vue):
        """Test the named-tuple emits syntax."""
        tree, analyzer = vue("const emit = defineEmits<{ save: [item: Item] }>()\n")
        _, events = analyzer.analyze_emits(tree)
        assert [e.name for e in events] == ["save"]

    def test_standalone_emits(self, vue):
        """Test an unbound defineEmits call."""
        tree, analyzer = vue("defineEmits(['submit'])\n")
        variable, events = analyzer.analyze_emits(tree)
        assert variable is None
        assert [e.name for e in events] == ["submit"]
