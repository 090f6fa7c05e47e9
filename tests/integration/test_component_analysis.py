"""Integration tests for end-to-end component analysis.

These tests parse real component sources with tree-sitter and run every
stage: import detection, hook matching, classification, process and
structure extraction, and library processing.
"""

import pytest

from hookflow.analysis import ComponentAnalyzer
from hookflow.analyzers.hooks import HookAnalyzer
from hookflow.libraries import create_default_registry
from hookflow.libraries.base import LibraryProcessor, ProcessorMetadata
from hookflow.libraries.session import URL_INPUT_LABEL
from hookflow.models import ConditionalStructure, ElementStructure

pytestmark = [pytest.mark.integration, pytest.mark.grammar]


COUNTER = """
import { useState } from 'react';

export function Counter() {
  const [count, setCount] = useState(0);
  function inc() { setCount(count + 1); }
  return (
    <div>
      {count > 0 && <span>{count}</span>}
      <button onClick={inc}>+</button>
      <button onClick={() => setCount(0)}>reset</button>
    </div>
  );
}
"""


@pytest.fixture
def analyzer():
    return ComponentAnalyzer()


class TestReactComponent:
    """Test a React component through every stage."""

    def test_counter(self, analyzer):
        result = analyzer.analyze_source(COUNTER, file_path="Counter.tsx")

        assert result.component_name == "Counter"
        assert result.diagnostics == []
        assert [info.source for info in result.imports] == ["react"]

        hook = result.hooks[0]
        assert hook.hook_name == "useState"
        assert hook.library_name == "react"
        assert hook.is_read_write_pair is True

        assert len(result.nodes) == 1
        state = result.nodes[0]
        assert state.label == "count"
        assert state.type == "data-store"
        assert state.metadata["writeVariable"] == "setCount"

        names = [process.name for process in result.processes]
        assert names == ["inc", "inline_onClick_0"]
        assert result.processes[0].references == ["setCount", "count"]
        assert result.processes[1].is_inline_handler is True

        root = result.structures[0]
        assert isinstance(root, ElementStructure)
        conditional = root.children[0]
        assert isinstance(conditional, ConditionalStructure)
        assert conditional.kind == "logical-and"
        assert conditional.condition.variables == ["count"]

    def test_data_fetching_component(self, analyzer):
        """Test a library hook tagged from its import."""
        source = """
import useSWR from 'swr';

const Profile = () => {
  const { data, error, mutate } = useSWR('/api/user', fetcher);
  if (error) return <Failed />;
  return <Card user={data} onRefresh={mutate} />;
};
"""
        result = analyzer.analyze_source(source, file_path="Profile.tsx")

        assert result.component_name == "Profile"
        assert result.hooks[0].library_name == "swr"
        labels = {node.label for node in result.nodes}
        assert labels == {"useSWR", "Server: /api/user"}
        assert [edge.label for edge in result.edges] == ["fetch"]
        assert [structure.tag_name for structure in result.structures] == ["Failed", "Card"]

    def test_custom_hook_uses_name_heuristics(self, analyzer):
        """Test classification feeding the custom hook processor."""
        source = """
import { useAuth } from './auth';

function Header() {
  const { user, logout } = useAuth();
  return <Menu user={user} onLogout={logout} />;
}
"""
        result = analyzer.analyze_source(source, file_path="Header.tsx")

        hook = result.hooks[0]
        assert hook.library_name is None
        assert hook.source == "./auth"
        assert hook.variable_types == {"user": "data", "logout": "function"}
        assert [(node.label, node.type) for node in result.nodes] == [
            ("user", "data-store"),
            ("logout", "external-entity-output"),
        ]

    def test_generated_rtk_query_hook(self, analyzer):
        """Test an RTK Query hook re-exported from a local api module."""
        source = """
import { useGetUserQuery } from './api';

function User() {
  const { data, isLoading } = useGetUserQuery(1);
  return isLoading ? <Spinner /> : <Card user={data} />;
}
"""
        result = analyzer.analyze_source(source, file_path="User.tsx")

        assert result.diagnostics == []
        hook = next(node for node in result.nodes if node.label == "useGetUserQuery")
        assert hook.metadata["endpointName"] == "getUser"
        assert "Server: getUser" in [node.label for node in result.nodes]
        assert [edge.label for edge in result.edges] == ["fetch"]

    def test_router_component(self, analyzer):
        source = """
import { useParams, useNavigate } from 'react-router-dom';

function Product() {
  const { id } = useParams();
  const navigate = useNavigate();
  return <button onClick={() => navigate('/')}>{id}</button>;
}
"""
        result = analyzer.analyze_source(source, file_path="Product.jsx")

        labels = [node.label for node in result.nodes]
        assert URL_INPUT_LABEL in labels
        assert [edge.label for edge in result.edges] == ["provides", "navigates"]

    def test_processor_failure_is_a_diagnostic(self):
        """Test that one failing processor does not stop the analysis."""

        class BrokenProcessor(LibraryProcessor):
            metadata = ProcessorMetadata(
                id="broken",
                library_name="broken",
                package_patterns=(),
                hook_names=("useBroken",),
                priority=100,
            )

            def process(self, occurrence, session):
                raise RuntimeError("unsupported shape")

        registry = create_default_registry()
        registry.register(BrokenProcessor())
        analyzer = ComponentAnalyzer(registry=registry)

        result = analyzer.analyze_source(
            """
function Widget() {
  const value = useBroken();
  const [open, setOpen] = useState(false);
  return null;
}
""",
            file_path="Widget.tsx",
        )

        assert [hook.hook_name for hook in result.hooks] == ["useBroken", "useState"]
        assert [node.label for node in result.nodes] == ["open"]
        assert len(result.diagnostics) == 1
        diagnostic = result.diagnostics[0]
        assert diagnostic.stage == "processor"
        assert diagnostic.line == 3
        assert "broken" in diagnostic.message

    def test_hook_statement_failure_keeps_siblings(self, analyzer, monkeypatch):
        """Test that a failing hook statement only drops its own hook."""
        original = HookAnalyzer.match_statement

        def match_statement(self, statement):
            if "useBoom" in statement.text:
                raise RuntimeError("boom")
            return original(self, statement)

        monkeypatch.setattr(HookAnalyzer, "match_statement", match_statement)
        result = analyzer.analyze_source(
            """
function Widget() {
  const [a, setA] = useState(0);
  const b = useBoom();
  const [c, setC] = useState(1);
  function reset() { setA(0); setC(1); }
  return null;
}
""",
            file_path="Widget.tsx",
        )

        assert [hook.variables[0] for hook in result.hooks] == ["a", "c"]
        assert [node.label for node in result.nodes] == ["a", "c"]
        assert [process.name for process in result.processes] == ["reset"]
        assert [(d.stage, d.line) for d in result.diagnostics] == [("hooks", 4)]

    def test_syntax_errors_are_reported(self, analyzer):
        result = analyzer.analyze_source("function Broken() { const = ; }", file_path="Broken.tsx")
        assert any(diagnostic.stage == "parse" for diagnostic in result.diagnostics)

    def test_to_dict(self, analyzer):
        data = analyzer.analyze_source(COUNTER, file_path="Counter.tsx").to_dict()

        assert data["componentName"] == "Counter"
        assert data["hooks"][0]["hookName"] == "useState"
        assert data["nodes"][0]["label"] == "count"
        assert data["diagnostics"] == []


class TestVueComponent:
    """Test Vue script and template analysis."""

    SCRIPT = """
import { ref, computed } from 'vue';

const props = defineProps<{ step: number }>();
const emit = defineEmits<{ (e: 'change', value: number): void }>();
const count = ref(0);
const doubled = computed(() => count.value * 2);

function inc() {
  count.value += props.step;
  emit('change', count.value);
}
"""

    TEMPLATE = """<div>
  <p v-if="count">{{ doubled }}</p>
  <p v-else>Empty</p>
  <button @click="inc">+</button>
</div>"""

    def test_script(self):
        analyzer = ComponentAnalyzer(framework="vue")
        result = analyzer.analyze_source(self.SCRIPT, file_path="Counter.vue", line_offset=5)

        assert result.component_name is None
        assert [(state.name, state.kind) for state in result.vue_state] == [
            ("count", "ref"),
            ("doubled", "computed"),
        ]
        assert [(prop.name, prop.type) for prop in result.props] == [("step", "number")]
        assert [(event.name, event.data_type) for event in result.emits] == [("change", "number")]

        call = result.dispatch_calls[0]
        assert call.event_name == "change"
        assert call.caller_process == "inc"
        assert "inc" in [process.name for process in result.processes]

    def test_template(self):
        analyzer = ComponentAnalyzer(framework="vue")
        result = analyzer.analyze_template(self.TEMPLATE, line_offset=20)

        assert result.diagnostics == []
        conditional = result.structures[0]
        assert conditional.condition.variables == ["count"]
        assert conditional.line == 21
        events = [binding for binding in result.bindings if binding.kind == "event"]
        assert [(binding.target, binding.variables) for binding in events] == [("click", ["inc"])]


class TestSvelteComponent:
    """Test Svelte script and markup analysis."""

    SCRIPT = """
import { createEventDispatcher } from 'svelte';
import { page } from '$app/stores';

const dispatch = createEventDispatcher<{ save: Item }>();

function onSave() {
  dispatch('save', item);
}
"""

    def test_script(self):
        analyzer = ComponentAnalyzer(framework="svelte")
        result = analyzer.analyze_source(self.SCRIPT, file_path="Editor.svelte")

        assert [(event.name, event.data_type) for event in result.emits] == [("save", "Item")]
        assert [(call.event_name, call.caller_process) for call in result.dispatch_calls] == [
            ("save", "onSave"),
        ]

        page = next(hook for hook in result.hooks if hook.hook_name == "page")
        assert page.library_name == "sveltekit"
        assert page.line == 3
        labels = [node.label for node in result.nodes]
        assert "page" in labels
        assert URL_INPUT_LABEL in labels


    RUNES_SCRIPT = """
let { initial = 0, label }: { initial?: number; label: string } = $props();
let count = $state(initial);
const doubled = $derived(count * 2);

$effect(() => {
  log(label, doubled);
});

function increment() {
  count += 1;
}
"""

    MARKUP = """<button on:click={increment}>{count}</button>
{#if doubled > 10}
  <p>{label}</p>
{/if}"""

    def test_runes(self):
        analyzer = ComponentAnalyzer(framework="svelte")
        result = analyzer.analyze_source(self.RUNES_SCRIPT, file_path="Counter.svelte")

        assert result.diagnostics == []
        assert [(rune.name, rune.kind) for rune in result.runes] == [
            ("props", "props"),
            ("count", "state"),
            ("doubled", "derived"),
            ("effect_1", "effect"),
        ]
        assert [(prop.name, prop.type) for prop in result.props] == [
            ("initial", "number"),
            ("label", "string"),
        ]
        effect = next(process for process in result.processes if process.name == "effect_1")
        assert effect.type == "$effect"
        assert effect.references == ["log", "label", "doubled"]
        assert "increment" in [process.name for process in result.processes]
        assert result.to_dict()["runes"][2]["dependencies"] == ["count"]

    def test_markup(self):
        analyzer = ComponentAnalyzer(framework="svelte")
        result = analyzer.analyze_template(self.MARKUP, line_offset=11)

        assert result.diagnostics == []
        conditional = result.structures[0]
        assert conditional.kind == "if"
        assert conditional.condition.variables == ["doubled"]
        assert conditional.line == 12
        assert conditional.true_branch.display_dependencies == ["label"]
        events = [binding for binding in result.bindings if binding.kind == "event"]
        assert [(binding.target, binding.variables) for binding in events] == [("click", ["increment"])]
