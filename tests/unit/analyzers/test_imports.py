"""Tests for import detection and library tagging."""

import pytest

from hookflow.analyzers.imports import (
    active_libraries,
    detect_imports,
    imported_original_name,
    library_for_hook,
    local_bindings,
    sveltekit_hooks,
)
from hookflow.libraries import create_default_registry
from hookflow.models import HookMatch, ImportedItem, ImportInfo

pytestmark = pytest.mark.grammar


IMPORTS = """
import React, { useState } from 'react';
import { useQuery as useQ, useMutation } from '@tanstack/react-query';
import * as api from './api';
import './styles.css';

const x = 1;
"""


@pytest.fixture
def registry():
    return create_default_registry()


class TestDetectImports:
    """Test detect_imports."""

    def test_import_shapes(self, parse):
        """Test default, named, aliased, namespace and side-effect imports."""
        tree, _ = parse(IMPORTS)
        imports = detect_imports(tree)

        assert [info.source for info in imports] == [
            "react",
            "@tanstack/react-query",
            "./api",
            "./styles.css",
        ]
        react = imports[0]
        assert react.imports[0] == ImportedItem(name="default", alias="React", is_default=True)
        assert react.imports[1] == ImportedItem(name="useState")

        query = imports[1]
        assert query.imports[0].name == "useQuery"
        assert query.imports[0].alias == "useQ"
        assert query.imports[0].local_name == "useQ"

        namespace = imports[2]
        assert namespace.is_namespace_import is True
        assert namespace.namespace == "api"
        assert imports[3].imports == []

    def test_local_bindings(self, parse):
        """Test that every local name maps back to its import."""
        tree, _ = parse(IMPORTS)
        bindings = local_bindings(detect_imports(tree))

        assert bindings["React"].source == "react"
        assert bindings["useQ"].source == "@tanstack/react-query"
        assert bindings["api"].source == "./api"
        assert "useQuery" not in bindings

    def test_active_libraries(self, parse, registry):
        """Test that only claimed sources are active."""
        tree, _ = parse(IMPORTS)
        active = active_libraries(detect_imports(tree), registry.package_patterns())
        assert active == ["react", "@tanstack/react-query"]


class TestLibraryForHook:
    """Test tagging matches with their library."""

    def _match(self, hook_name, callee_path=None):
        return HookMatch(hook_name=hook_name, variables=["data"], line=1, column=0, callee_path=callee_path)

    def test_aliased_import_resolves_original_name(self, parse, registry):
        """Test that useQ is reported as TanStack's useQuery."""
        tree, _ = parse(IMPORTS)
        tagged = library_for_hook(self._match("useQ"), detect_imports(tree), registry)

        assert tagged.hook_name == "useQuery"
        assert tagged.library_name == "@tanstack/react-query"
        assert tagged.source == "@tanstack/react-query"

    def test_member_callee_uses_root_binding(self, registry):
        """Test that trpc.user.get.useQuery is looked up by ``trpc``."""
        imports = [ImportInfo(source="@trpc/react-query", imports=[ImportedItem(name="trpc")])]
        match = self._match("useQuery", callee_path="trpc.user.get.useQuery")
        tagged = library_for_hook(match, imports, registry)

        assert tagged.hook_name == "useQuery"
        assert tagged.library_name == "@trpc/client"

    def test_unclaimed_source_keeps_source_only(self, registry):
        """Test a local module import."""
        imports = [ImportInfo(source="./hooks", imports=[ImportedItem(name="useCart")])]
        tagged = library_for_hook(self._match("useCart"), imports, registry)

        assert tagged.library_name is None
        assert tagged.source == "./hooks"

    def test_unbound_hook_is_unchanged(self, registry):
        """Test that a hook without an import binding is returned as is."""
        match = self._match("useThing")
        assert library_for_hook(match, [], registry) is match

    def test_already_tagged_match_is_unchanged(self, registry):
        """Test that existing tags win."""
        match = self._match("page").with_library("sveltekit", source="$app/stores")
        assert library_for_hook(match, [], registry) is match

    def test_imported_original_name_ignores_defaults(self):
        """Test that default imports have no original name."""
        imports = [ImportInfo(source="x", imports=[ImportedItem(name="default", alias="useX", is_default=True)])]
        assert imported_original_name("useX", imports) is None


class TestSvelteKitHooks:
    """Test synthesized SvelteKit matches."""

    def test_store_and_navigation_imports(self, parse):
        """Test one match per imported name, positioned at the import."""
        source = (
            "import { onMount } from 'svelte';\n"
            "import { page, navigating as nav } from '$app/stores';\n"
            "import { goto } from '$app/navigation';\n"
        )
        tree, positions = parse(source, file_path="Component.svelte")
        matches = sveltekit_hooks(tree, detect_imports(tree), positions)

        assert [(m.hook_name, m.variables, m.line) for m in matches] == [
            ("page", ["page"], 2),
            ("navigating", ["nav"], 2),
            ("goto", ["goto"], 3),
        ]
        assert all(m.library_name == "sveltekit" for m in matches)
        assert matches[2].source == "$app/navigation"
