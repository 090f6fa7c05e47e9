"""Tests for markup template scanning (Vue-style directives)."""

from hookflow.analyzers.vue_template import (
    TemplateStructureExtractor,
    handler_name,
    template_variables,
)
from hookflow.models import ConditionalStructure, ElementStructure, LoopStructure


CHAIN_TEMPLATE = """<div>
  <p v-if="loading">Loading</p>
  <p v-else-if="error">{{ error.message }}</p>
  <p v-else>{{ user.name }}</p>
</div>"""


class TestTemplateVariables:
    """Test identifier extraction from template expressions."""

    def test_member_access_yields_root(self):
        """Test that properties are not reported as variables."""
        assert template_variables("user.name") == ["user"]

    def test_strings_and_keywords_are_skipped(self):
        """Test string contents and literals."""
        assert template_variables("item.done ? 'yes' : 'no'") == ["item"]
        assert template_variables("visible === true") == ["visible"]

    def test_object_keys_are_skipped(self):
        """Test class-binding style object literals."""
        assert template_variables("{ active: isActive, 'text-bold': bold }") == ["isActive", "bold"]

    def test_handler_name(self):
        """Test handler names with and without call syntax."""
        assert handler_name("increment") == "increment"
        assert handler_name("save(form)") == "save"
        assert handler_name("  ") is None


class TestConditionalChains:
    """Test v-if / v-else-if / v-else folding."""

    def test_chain_is_nested(self):
        """Test a three-link chain folds into nested conditionals."""
        structures = TemplateStructureExtractor().extract(CHAIN_TEMPLATE)

        assert len(structures) == 1
        root = structures[0]
        assert isinstance(root, ConditionalStructure)
        assert root.kind == "v-if"
        assert root.condition.expression == "loading"
        assert root.condition.variables == ["loading", "error"]
        assert root.line == 2
        assert root.column == 2
        assert root.true_branch.tag_name == "p"

        middle = root.false_branch
        assert isinstance(middle, ConditionalStructure)
        assert middle.kind == "v-else-if"
        assert middle.condition.variables == ["error"]
        assert middle.true_branch.display_dependencies == ["error"]

        last = middle.false_branch
        assert isinstance(last, ElementStructure)
        assert last.display_dependencies == ["user"]

    def test_sibling_element_breaks_chain(self):
        """Test that an unrelated element between links ends the chain."""
        template = """<p v-if="a">A</p>
<span>between</span>
<p v-else>B</p>"""
        structures = TemplateStructureExtractor().extract(template)

        assert len(structures) == 1
        assert structures[0].kind == "v-if"
        assert structures[0].false_branch is None

    def test_closing_tags_are_allowed_between_links(self):
        """Test that closing tags count as chain glue."""
        template = """<section><p v-if="a">A</p></section>
<p v-else>B</p>"""
        conditionals = TemplateStructureExtractor().extract_conditionals(template)

        assert len(conditionals) == 1
        assert conditionals[0].false_branch.tag_name == "p"

    def test_line_offset(self):
        """Test that positions are shifted by the template's start line."""
        structures = TemplateStructureExtractor(line_offset=10).extract(CHAIN_TEMPLATE)
        assert structures[0].line == 11

    def test_bound_attributes_on_branch(self):
        """Test attribute references of a branch element."""
        template = '<button v-if="editing" :disabled="isSaving" @click="save(form)">Save</button>'
        root = TemplateStructureExtractor().extract(template)[0]

        references = root.true_branch.attribute_references
        assert [(r.attribute_name, r.references) for r in references] == [
            ("disabled", ["isSaving"]),
            ("@click", ["save"]),
        ]


class TestLoops:
    """Test v-for extraction."""

    def test_v_for(self):
        """Test source, loop variable and body of a v-for."""
        template = """<ul>
  <li v-for="(item, index) in items" :key="item.id">{{ item.label }}</li>
</ul>"""
        structures = TemplateStructureExtractor().extract(template)

        assert len(structures) == 1
        loop = structures[0]
        assert isinstance(loop, LoopStructure)
        assert loop.kind == "v-for"
        assert loop.source == "items"
        assert loop.loop_variable == "item"
        assert loop.condition.variables == ["items"]
        assert loop.attributes == {"v-for": "(item, index) in items"}
        assert loop.body.display_dependencies == ["item"]
        assert loop.body.attribute_references == []

    def test_v_for_with_v_if_is_a_loop(self):
        """Test that v-for wins over v-if on the same element."""
        template = '<li v-for="todo of store.todos" v-if="todo.visible">{{ todo.text }}</li>'
        extractor = TemplateStructureExtractor()

        loops = extractor.extract_loops(template)
        assert extractor.extract_conditionals(template) == []
        assert len(loops) == 1
        assert loops[0].source == "store.todos"
        assert loops[0].condition.variables == ["store"]
        assert loops[0].attributes["v-if"] == "todo.visible"

    def test_structures_are_ordered_by_position(self):
        """Test mixed loops and conditionals keep markup order."""
        template = """<div>
  <li v-for="row in rows">{{ row }}</li>
  <p v-if="empty">Nothing</p>
</div>"""
        structures = TemplateStructureExtractor().extract(template)
        assert [s.kind for s in structures] == ["v-for", "v-if"]

    def test_empty_template(self):
        """Test an empty template yields nothing."""
        assert TemplateStructureExtractor().extract("") == []


class TestBindings:
    """Test directive and interpolation bindings."""

    def test_binding_kinds(self):
        """Test display, bind, event and model bindings."""
        template = """<div>
  <span>{{ count }}</span>
  <input v-model="form.email" :disabled="isSaving" @click="save(form)" />
</div>"""
        bindings = TemplateStructureExtractor().extract_bindings(template)

        summary = [(b.kind, b.target, b.variables) for b in bindings]
        assert summary == [
            ("display", "<span>", ["count"]),
            ("bind", "disabled", ["isSaving"]),
            ("event", "click", ["save"]),
            ("model", "v-model", ["form"]),
        ]
        assert bindings[0].line == 2
        assert bindings[-1].line == 3

    def test_condition_bindings(self):
        """Test v-if and v-show produce condition bindings."""
        template = '<p v-show="visible">x</p>\n<p v-if="user.isAdmin">y</p>'
        bindings = TemplateStructureExtractor().extract_bindings(template)

        conditions = [(b.target, b.variables) for b in bindings if b.kind == "condition"]
        assert conditions == [("v-show", ["visible"]), ("v-if", ["user"])]

    def test_key_binding_is_ignored(self):
        """Test that :key is not reported."""
        template = '<li v-for="item in items" :key="item.id">{{ item }}</li>'
        bindings = TemplateStructureExtractor().extract_bindings(template)
        assert all(b.target != "key" for b in bindings)
