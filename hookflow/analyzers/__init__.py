"""Syntax analyzers for component scripts and templates."""

from hookflow.analyzers.conditionals import JSXStructureExtractor
from hookflow.analyzers.dispatchers import DispatcherAnalyzer
from hookflow.analyzers.hooks import HookAnalyzer, is_function_only, is_read_write_pair
from hookflow.analyzers.imperative_handle import ImperativeHandleAnalyzer
from hookflow.analyzers.imports import detect_imports, library_for_hook, sveltekit_hooks
from hookflow.analyzers.position import PositionIndex
from hookflow.analyzers.processes import ProcessAnalyzer
from hookflow.analyzers.references import ReferenceExtractor
from hookflow.analyzers.structures import StructureExtractor, get_structure_extractor
from hookflow.analyzers.svelte_markup import SvelteMarkupExtractor
from hookflow.analyzers.svelte_runes import SvelteRunesAnalyzer
from hookflow.analyzers.vue_script import VueScriptAnalyzer
from hookflow.analyzers.vue_template import TemplateStructureExtractor

__all__ = [
    "DispatcherAnalyzer",
    "HookAnalyzer",
    "ImperativeHandleAnalyzer",
    "JSXStructureExtractor",
    "PositionIndex",
    "ProcessAnalyzer",
    "ReferenceExtractor",
    "StructureExtractor",
    "SvelteMarkupExtractor",
    "SvelteRunesAnalyzer",
    "TemplateStructureExtractor",
    "VueScriptAnalyzer",
    "detect_imports",
    "get_structure_extractor",
    "is_function_only",
    "is_read_write_pair",
    "library_for_hook",
    "sveltekit_hooks",
]
