"""Import detection and library tagging for hook matches."""

from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from hookflow.analyzers.position import PositionIndex
from hookflow.analyzers.syntax import string_value
from hookflow.logging_config import get_logger
from hookflow.models import HookMatch, ImportedItem, ImportInfo
from hookflow.parsers.tree_sitter_adapter import UniversalASTNode

logger = get_logger(__name__)

SVELTEKIT_SOURCES = ("$app/stores", "$app/navigation")


def detect_imports(tree: UniversalASTNode) -> List[ImportInfo]:
    """Every top-level ``import`` declaration of a module, in source order."""
    imports = []
    for statement in tree.named_children:
        if statement.node_type != "import_statement":
            continue
        info = _import_info(statement)
        if info is not None:
            imports.append(info)
    logger.debug(f"Detected {len(imports)} import(s)")
    return imports


def _import_info(statement: UniversalASTNode) -> Optional[ImportInfo]:
    source = string_value(statement.get_field("source"))
    if source is None:
        return None

    info = ImportInfo(source=source)
    clause = next(
        (child for child in statement.named_children if child.node_type == "import_clause"),
        None,
    )
    if clause is None:
        # Side-effect import: import './styles.css'
        return info

    for child in clause.named_children:
        if child.node_type == "identifier":
            info.imports.append(ImportedItem(name="default", alias=child.text, is_default=True))
        elif child.node_type == "namespace_import":
            names = [n for n in child.named_children if n.node_type == "identifier"]
            if names:
                info.is_namespace_import = True
                info.namespace = names[0].text
        elif child.node_type == "named_imports":
            for specifier in child.named_children:
                if specifier.node_type != "import_specifier":
                    continue
                name_node = specifier.get_field("name")
                alias_node = specifier.get_field("alias")
                if name_node is None:
                    continue
                name = string_value(name_node) or name_node.text
                alias = alias_node.text if alias_node is not None and alias_node.text != name else None
                info.imports.append(ImportedItem(name=name, alias=alias))
    return info


def local_bindings(imports: Iterable[ImportInfo]) -> Dict[str, ImportInfo]:
    """Map each locally bound name (alias, default or namespace) to its import."""
    bindings: Dict[str, ImportInfo] = {}
    for info in imports:
        if info.namespace:
            bindings[info.namespace] = info
        for item in info.imports:
            bindings[item.local_name] = info
    return bindings


def active_libraries(imports: Iterable[ImportInfo], registered_patterns: Iterable[str]) -> List[str]:
    """Import sources that some registered processor claims, without duplicates."""
    patterns = set(registered_patterns)
    active = []
    for info in imports:
        if info.source in patterns and info.source not in active:
            active.append(info.source)
    return active


def library_for_hook(match: HookMatch, imports: Iterable[ImportInfo], registry) -> HookMatch:
    """Tag a match with the library its callee was imported from.

    The callee's root identifier (``trpc`` for ``trpc.user.get.useQuery``)
    is looked up among the import bindings; the import source is mapped to a
    library through the registry's package patterns. Matches with no import
    binding are returned unchanged.
    """
    if match.library_name:
        return match

    root = match.qualified_name.split(".")[0]
    info = local_bindings(imports).get(root)
    if info is None:
        return match

    if match.callee_path is None:
        original = imported_original_name(match.hook_name, [info])
        if original and original != match.hook_name:
            logger.debug(f"Resolved aliased hook {match.hook_name} to {original}")
            match = replace(match, hook_name=original)

    library_name = registry.library_for_source(info.source)
    if library_name is None:
        logger.debug(f"No processor claims import source {info.source!r} of {match.hook_name}")
    return match.with_library(library_name, source=info.source)


def imported_original_name(local_name: str, imports: Iterable[ImportInfo]) -> Optional[str]:
    """Exported name behind a local alias (``useQuery`` for ``useQuery as useQ``)."""
    for info in imports:
        for item in info.imports:
            if item.local_name == local_name and not item.is_default:
                return item.name
    return None


def sveltekit_hooks(
    tree: UniversalASTNode,
    imports: Iterable[ImportInfo],
    positions: PositionIndex,
) -> List[HookMatch]:
    """Synthesize matches for SvelteKit store/navigation imports.

    ``import { page } from '$app/stores'`` has no call site, so the import
    itself stands in for the hook, positioned at the import declaration.
    """
    declaration_positions = {}
    for statement in tree.named_children:
        if statement.node_type == "import_statement":
            source = string_value(statement.get_field("source"))
            if source is not None and source not in declaration_positions:
                declaration_positions[source] = positions.of(statement)

    matches = []
    for info in imports:
        if info.source not in SVELTEKIT_SOURCES:
            continue
        line, column = declaration_positions.get(info.source, (positions.line_offset, 0))
        for item in info.imports:
            matches.append(HookMatch(
                hook_name=item.name,
                variables=[item.local_name],
                line=line,
                column=column,
                library_name="sveltekit",
                source=info.source,
            ))
    return matches
