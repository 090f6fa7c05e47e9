"""Tree-sitter based TypeScript/JavaScript parsers.

Components are parsed with the TSX grammar by default since most component
files contain JSX; plain ``.ts`` files use the TypeScript grammar so that
``<T>value`` type assertions keep parsing.
"""

from pathlib import Path
from typing import Union

from hookflow.logging_config import get_logger
from hookflow.parsers.tree_sitter_adapter import TreeSitterAdapter, UniversalASTNode

logger = get_logger(__name__)


class TreeSitterTypeScriptParser:
    """TypeScript/TSX parser using tree-sitter with the universal AST adapter.

    Example:
        >>> parser = TreeSitterTypeScriptParser(use_tsx=True)
        >>> tree = parser.parse("const [count, setCount] = useState(0);")
        >>> tree.node_type
        'program'
    """

    def __init__(self, use_tsx: bool = False):
        """Initialize TypeScript parser with tree-sitter adapter.

        Args:
            use_tsx: If True, use TSX grammar (for React files). Default False.
        """
        try:
            if use_tsx:
                from tree_sitter_typescript import language_tsx as ts_language
            else:
                from tree_sitter_typescript import language_typescript as ts_language
        except ImportError:
            raise ImportError(
                "tree-sitter-typescript is required for TypeScript parsing. "
                "Install with: pip install tree-sitter-typescript"
            )

        self.adapter = TreeSitterAdapter(ts_language())
        self.language_name = "tsx" if use_tsx else "typescript"

    def parse(self, source: str) -> UniversalASTNode:
        return self.adapter.parse(source)


class TreeSitterJavaScriptParser:
    """JavaScript/JSX parser using tree-sitter-javascript."""

    def __init__(self):
        try:
            from tree_sitter_javascript import language as js_language
        except ImportError:
            raise ImportError(
                "tree-sitter-javascript is required for JavaScript parsing. "
                "Install with: pip install tree-sitter-javascript"
            )

        self.adapter = TreeSitterAdapter(js_language())
        self.language_name = "javascript"

    def parse(self, source: str) -> UniversalASTNode:
        return self.adapter.parse(source)


_EXTENSION_LANGUAGES = {
    ".tsx": "tsx",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".jsx": "tsx",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".vue": "typescript",
    ".svelte": "typescript",
}


def get_parser(
    file_path_or_language: Union[str, Path],
) -> Union[TreeSitterTypeScriptParser, TreeSitterJavaScriptParser]:
    """Select a parser from a file path or a language name.

    Vue and Svelte script blocks are parsed with the TypeScript grammar.
    Unknown extensions fall back to TSX.
    """
    value = str(file_path_or_language)
    suffix = Path(value).suffix.lower()
    language = _EXTENSION_LANGUAGES.get(suffix, value if not suffix else "tsx")

    if language == "javascript":
        return TreeSitterJavaScriptParser()
    if language == "typescript":
        return TreeSitterTypeScriptParser(use_tsx=False)
    if language != "tsx":
        logger.debug(f"Unknown language {language!r}, defaulting to TSX grammar")
    return TreeSitterTypeScriptParser(use_tsx=True)
