"""Tree-sitter parser front-ends for component source."""

from hookflow.parsers.tree_sitter_adapter import TreeSitterAdapter, UniversalASTNode
from hookflow.parsers.tree_sitter_typescript import (
    TreeSitterJavaScriptParser,
    TreeSitterTypeScriptParser,
    get_parser,
)

__all__ = [
    "UniversalASTNode",
    "TreeSitterAdapter",
    "TreeSitterTypeScriptParser",
    "TreeSitterJavaScriptParser",
    "get_parser",
]
