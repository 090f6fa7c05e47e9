"""Universal AST adapter over tree-sitter syntax trees.

The analyzers never touch tree-sitter objects directly; they work with
:class:`UniversalASTNode`, a thin read-only wrapper that exposes node type,
text, children, named fields and positions.
"""

from typing import Iterator, List, Optional

from tree_sitter import Language, Node, Parser

from hookflow.exceptions import ParserError
from hookflow.logging_config import get_logger

logger = get_logger(__name__)

# Node types that can appear anywhere between named children
_EXTRA_NODE_TYPES = frozenset({"comment", "html_comment"})


class UniversalASTNode:
    """Read-only wrapper around a tree-sitter node.

    Attributes:
        node_type: Grammar node kind (``call_expression``, ``identifier``, ...)
        start_line: 0-based start row
        end_line: 0-based end row
        start_byte: Byte offset of the node start in the source
    """

    __slots__ = ("_raw_node", "_source", "_parent")

    def __init__(self, raw_node: Node, source: bytes, parent: Optional["UniversalASTNode"] = None):
        self._raw_node = raw_node
        self._source = source
        self._parent = parent

    def __repr__(self) -> str:
        return f"UniversalASTNode({self.node_type!r}, line={self.start_line + 1})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UniversalASTNode):
            return NotImplemented
        return (
            self._raw_node.type == other._raw_node.type
            and self._raw_node.start_byte == other._raw_node.start_byte
            and self._raw_node.end_byte == other._raw_node.end_byte
        )

    def __hash__(self) -> int:
        return hash((self._raw_node.type, self._raw_node.start_byte, self._raw_node.end_byte))

    def _wrap(self, raw: Optional[Node]) -> Optional["UniversalASTNode"]:
        if raw is None:
            return None
        return UniversalASTNode(raw, self._source, self)

    @property
    def node_type(self) -> str:
        return self._raw_node.type

    @property
    def is_named(self) -> bool:
        return self._raw_node.is_named

    @property
    def text(self) -> str:
        return self._source[self._raw_node.start_byte:self._raw_node.end_byte].decode(
            "utf-8", errors="replace"
        )

    @property
    def start_byte(self) -> int:
        return self._raw_node.start_byte

    @property
    def end_byte(self) -> int:
        return self._raw_node.end_byte

    @property
    def start_line(self) -> int:
        return self._raw_node.start_point[0]

    @property
    def end_line(self) -> int:
        return self._raw_node.end_point[0]

    @property
    def start_column(self) -> int:
        return self._raw_node.start_point[1]

    @property
    def has_error(self) -> bool:
        return self._raw_node.has_error

    @property
    def parent(self) -> Optional["UniversalASTNode"]:
        if self._parent is not None:
            return self._parent
        return self._wrap(self._raw_node.parent)

    @property
    def children(self) -> List["UniversalASTNode"]:
        """All children, including anonymous tokens such as ``async`` or ``=>``."""
        return [UniversalASTNode(child, self._source, self) for child in self._raw_node.children]

    @property
    def named_children(self) -> List["UniversalASTNode"]:
        """Named children with comments filtered out."""
        return [
            UniversalASTNode(child, self._source, self)
            for child in self._raw_node.named_children
            if child.type not in _EXTRA_NODE_TYPES
        ]

    def get_field(self, name: str) -> Optional["UniversalASTNode"]:
        """Return the child stored under a grammar field name."""
        return self._wrap(self._raw_node.child_by_field_name(name))

    def get_fields(self, name: str) -> List["UniversalASTNode"]:
        """Return every child stored under a (repeated) grammar field name."""
        return [
            UniversalASTNode(child, self._source, self)
            for child in self._raw_node.children_by_field_name(name)
        ]

    def has_token(self, token: str) -> bool:
        """True when an anonymous child token with this text exists (``async``, ``?.``)."""
        return any(
            not child.is_named and child.type == token for child in self._raw_node.children
        )

    def walk(self) -> Iterator["UniversalASTNode"]:
        """Depth-first pre-order traversal including this node."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.named_children))

    def find_all(self, node_type: str) -> List["UniversalASTNode"]:
        """Find all descendants (and self) of a given node type."""
        return [node for node in self.walk() if node.node_type == node_type]


class TreeSitterAdapter:
    """Parse source text with a tree-sitter language into UniversalASTNodes.

    Example:
        >>> import tree_sitter_typescript
        >>> adapter = TreeSitterAdapter(tree_sitter_typescript.language_tsx())
        >>> root = adapter.parse("const [a, setA] = useState(0);")
        >>> root.node_type
        'program'
    """

    def __init__(self, language_ptr):
        try:
            self.language = Language(language_ptr)
            self.parser = Parser(self.language)
        except (TypeError, ValueError) as e:
            raise ParserError(f"Failed to load tree-sitter language: {e}") from e

    def parse(self, source: str) -> UniversalASTNode:
        """Parse source into a UniversalASTNode tree.

        tree-sitter is error tolerant, so syntax errors produce ``ERROR``
        nodes rather than exceptions; they are logged at debug level.
        """
        encoded = source.encode("utf-8")
        tree = self.parser.parse(encoded)
        root = UniversalASTNode(tree.root_node, encoded)
        if root.has_error:
            logger.debug("Source contains syntax errors; continuing with partial tree")
        return root
