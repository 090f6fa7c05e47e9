"""Tests for structure extractor selection."""

from hookflow.analyzers import StructureExtractor, get_structure_extractor
from hookflow.analyzers.conditionals import JSXStructureExtractor
from hookflow.analyzers.position import PositionIndex
from hookflow.analyzers.svelte_markup import SvelteMarkupExtractor
from hookflow.analyzers.vue_template import TemplateStructureExtractor


class TestGetStructureExtractor:
    """Test get_structure_extractor."""

    def test_react_uses_jsx_walker(self):
        extractor = get_structure_extractor("react", PositionIndex("return null;"))
        assert isinstance(extractor, JSXStructureExtractor)
        assert isinstance(extractor, StructureExtractor)

    def test_vue_uses_directive_scanner(self):
        extractor = get_structure_extractor("vue", line_offset=7)
        assert isinstance(extractor, TemplateStructureExtractor)
        assert extractor.extract('<p v-if="ready">x</p>')[0].line == 7

    def test_svelte_uses_block_scanner(self):
        extractor = get_structure_extractor("svelte", line_offset=7)
        assert isinstance(extractor, SvelteMarkupExtractor)
        assert isinstance(extractor, StructureExtractor)
        assert extractor.extract("{#if ready}<p>x</p>{/if}")[0].line == 7

    def test_jsx_extractor_without_template(self):
        assert get_structure_extractor("react", PositionIndex("")).extract(None) == []
