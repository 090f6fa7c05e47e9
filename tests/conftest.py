"""Global pytest configuration and fixtures.

This module provides shared fixtures and configuration for all tests.
"""

import importlib.util
import sys
from pathlib import Path

import pytest


# =============================================================================
# Path Setup
# =============================================================================

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Environment Detection
# =============================================================================


def _has_typescript_grammar() -> bool:
    """Check if the tree-sitter TypeScript grammar is installed."""
    return importlib.util.find_spec("tree_sitter_typescript") is not None


# =============================================================================
# Skip Markers
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (parse real component sources)"
    )
    config.addinivalue_line(
        "markers", "slow: Slow tests"
    )
    config.addinivalue_line(
        "markers", "grammar: Tests requiring the tree-sitter TypeScript grammar"
    )


def pytest_collection_modifyitems(config, items):
    """Skip grammar tests when tree-sitter-typescript is not installed."""
    if _has_typescript_grammar():
        return

    skip_grammar = pytest.mark.skip(reason="tree-sitter-typescript not installed")
    for item in items:
        if "grammar" in item.keywords:
            item.add_marker(skip_grammar)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory.

    Returns:
        Path to project root.
    """
    return PROJECT_ROOT


@pytest.fixture
def parse():
    """Parse component source with the grammar chosen for ``file_path``.

    Returns:
        Callable ``(source, file_path="Component.tsx") -> (program, PositionIndex)``
    """
    pytest.importorskip("tree_sitter_typescript", reason="tree-sitter-typescript not installed")
    from hookflow.analyzers.position import PositionIndex
    from hookflow.parsers import get_parser

    def _parse(source: str, file_path: str = "Component.tsx", line_offset: int = 1):
        return get_parser(file_path).parse(source), PositionIndex(source, line_offset)

    return _parse


@pytest.fixture
def component_body(parse):
    """Parse a component and return the body of its first function component.

    Returns:
        Callable ``(source, file_path="Component.tsx") -> (body, PositionIndex)``
    """
    from hookflow.analysis import find_component

    def _body(source: str, file_path: str = "Component.tsx"):
        tree, positions = parse(source, file_path)
        _, body = find_component(tree)
        return body, positions

    return _body


@pytest.fixture
def session():
    """A fresh React analysis session."""
    from hookflow.libraries import AnalysisSession
    return AnalysisSession(framework="react")


@pytest.fixture
def make_occurrence():
    """Build a HookOccurrence with sensible position defaults."""
    from hookflow.models import HookOccurrence

    def _make(hook_name: str, variables=None, **kwargs):
        kwargs.setdefault("line", 1)
        kwargs.setdefault("column", 0)
        return HookOccurrence(hook_name=hook_name, variables=list(variables or []), **kwargs)

    return _make
