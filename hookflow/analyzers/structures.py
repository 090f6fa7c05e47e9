"""Common interface for conditional/loop structure extraction.

:class:`~hookflow.analyzers.conditionals.JSXStructureExtractor` walks a
parsed JSX subtree.
:class:`~hookflow.analyzers.vue_template.TemplateStructureExtractor` scans Vue
directives and :class:`~hookflow.analyzers.svelte_markup.SvelteMarkupExtractor`
scans Svelte block tags, both with regular expressions. Callers depend only on
:class:`StructureExtractor`, so the markup scanner can be swapped for a
real template parser later.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from hookflow.models import Structure

# Names that never count as template variables
TEMPLATE_KEYWORDS = frozenset({
    "true",
    "false",
    "null",
    "undefined",
    "this",
    "if",
    "else",
    "for",
    "while",
    "return",
    "function",
    "const",
    "let",
    "var",
    "new",
    "typeof",
    "instanceof",
    "in",
    "of",
})


class StructureExtractor(ABC):
    """Recover conditional and loop rendering structure from a template.

    Subclasses must implement :meth:`extract`.
    """

    #: Human-readable source kind, used in logs
    source_kind: str = "template"

    @abstractmethod
    def extract(self, template: Any) -> List[Structure]:
        """Extract the top-level structures of ``template``.

        Args:
            template: A parsed subtree or raw markup, depending on the
                implementation

        Returns:
            Structures in source order; empty when nothing is found
        """
        pass


def get_structure_extractor(framework: str, positions: Optional[Any] = None,
                            line_offset: int = 1) -> StructureExtractor:
    """Pick the extractor for a framework.

    React uses the JSX walker and needs a position index; Vue templates and
    Svelte markup each have their own scanner.
    """
    if framework == "react":
        from hookflow.analyzers.conditionals import JSXStructureExtractor
        return JSXStructureExtractor(positions)

    if framework == "svelte":
        from hookflow.analyzers.svelte_markup import SvelteMarkupExtractor
        return SvelteMarkupExtractor(line_offset=line_offset)

    from hookflow.analyzers.vue_template import TemplateStructureExtractor
    return TemplateStructureExtractor(line_offset=line_offset)
