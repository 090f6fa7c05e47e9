"""Component analysis entry point.

:class:`ComponentAnalyzer` runs every stage over one component body:

1. Parse the source and detect imports.
2. Match hooks and tag each with the library it was imported from.
3. Classify hook return values (data vs. function).
4. Extract processes and, for JSX, conditional/loop structures.
5. Dispatch every occurrence to its library processor.

A failure in one occurrence is recorded as a :class:`~hookflow.models.Diagnostic`
and the remaining occurrences are still analyzed, so partial results stay
usable.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from hookflow.analyzers.conditionals import JSXStructureExtractor
from hookflow.analyzers.dispatchers import DispatcherAnalyzer
from hookflow.analyzers.hooks import HookAnalyzer
from hookflow.analyzers.imports import detect_imports, library_for_hook, sveltekit_hooks
from hookflow.analyzers.position import PositionIndex
from hookflow.analyzers.processes import ProcessAnalyzer
from hookflow.analyzers.references import ReferenceExtractor
from hookflow.analyzers.structures import get_structure_extractor
from hookflow.analyzers.svelte_runes import SvelteRunesAnalyzer
from hookflow.analyzers.syntax import is_call, is_function_literal, unwrap_expression
from hookflow.analyzers.vue_script import VueScriptAnalyzer
from hookflow.classification import ClassificationEngine, TypeResolver, create_type_resolver
from hookflow.config import HookflowConfig
from hookflow.libraries import AnalysisSession, ProcessorRegistry, create_default_registry
from hookflow.logging_config import LogContext, get_logger
from hookflow.models import (
    DFDEdge,
    DFDNode,
    Diagnostic,
    DispatchCall,
    EventDeclaration,
    HookMatch,
    HookOccurrence,
    ImportInfo,
    ProcessOccurrence,
    PropInfo,
    RuneInfo,
    Structure,
    TemplateBinding,
    VueStateInfo,
)
from hookflow.parsers import UniversalASTNode, get_parser

logger = get_logger(__name__)

_COMPONENT_NAME = re.compile(r"^[A-Z]")
_COMPONENT_WRAPPERS = ("memo", "forwardRef", "observer")


@dataclass
class ComponentAnalysis:
    """Everything found in one component."""
    component_name: Optional[str] = None
    hooks: List[HookOccurrence] = field(default_factory=list)
    processes: List[ProcessOccurrence] = field(default_factory=list)
    structures: List[Structure] = field(default_factory=list)
    nodes: List[DFDNode] = field(default_factory=list)
    edges: List[DFDEdge] = field(default_factory=list)
    imports: List[ImportInfo] = field(default_factory=list)
    dispatch_calls: List[DispatchCall] = field(default_factory=list)
    vue_state: List[VueStateInfo] = field(default_factory=list)
    runes: List[RuneInfo] = field(default_factory=list)
    props: List[PropInfo] = field(default_factory=list)
    emits: List[EventDeclaration] = field(default_factory=list)
    bindings: List[TemplateBinding] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "componentName": self.component_name,
            "hooks": [hook.to_dict() for hook in self.hooks],
            "processes": [process.to_dict() for process in self.processes],
            "structures": [structure.to_dict() for structure in self.structures],
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "imports": [info.to_dict() for info in self.imports],
            "dispatchCalls": [call.to_dict() for call in self.dispatch_calls],
            "vueState": [state.to_dict() for state in self.vue_state],
            "runes": [rune.to_dict() for rune in self.runes],
            "props": [prop.to_dict() for prop in self.props],
            "emits": [event.to_dict() for event in self.emits],
            "bindings": [binding.to_dict() for binding in self.bindings],
            "diagnostics": [diagnostic.to_dict() for diagnostic in self.diagnostics],
        }


def find_component(program: UniversalASTNode) -> Tuple[Optional[str], UniversalASTNode]:
    """First PascalCase function component of a module.

    Handles ``function Counter() {}``, ``const Counter = () => ...`` and
    wrapped forms such as ``memo(() => ...)``, exported or not.

    Returns:
        ``(name, body)``; the program itself when no component is found
    """
    for statement in program.named_children:
        candidate = statement
        if candidate.node_type == "export_statement":
            candidate = candidate.get_field("declaration") or candidate.get_field("value")
            if candidate is None:
                continue

        if candidate.node_type == "function_declaration":
            name_node = candidate.get_field("name")
            body = candidate.get_field("body")
            if name_node is not None and body is not None and _COMPONENT_NAME.match(name_node.text):
                return name_node.text, body

        if candidate.node_type in ("lexical_declaration", "variable_declaration"):
            for declarator in candidate.named_children:
                if declarator.node_type != "variable_declarator":
                    continue
                name_node = declarator.get_field("name")
                if name_node is None or name_node.node_type != "identifier":
                    continue
                if not _COMPONENT_NAME.match(name_node.text):
                    continue
                function = _component_function(declarator.get_field("value"))
                if function is not None and function.get_field("body") is not None:
                    return name_node.text, function.get_field("body")

    return None, program


def _component_function(value: Optional[UniversalASTNode]) -> Optional[UniversalASTNode]:
    value = unwrap_expression(value)
    if is_function_literal(value):
        return value
    if is_call(value):
        callee = value.get_field("function")
        tail = callee.text.split(".")[-1] if callee is not None else None
        if tail in _COMPONENT_WRAPPERS:
            arguments = value.get_field("arguments")
            for argument in arguments.named_children if arguments is not None else []:
                found = _component_function(argument)
                if found is not None:
                    return found
    return None


class ComponentAnalyzer:
    """Analyze component sources into hooks, processes, structures and diagram elements.

    Args:
        registry: Processor registry; defaults to every built-in processor
        type_resolver: Optional type resolver; defaults to the one configured
            in ``config.type_resolver``
        config: Hookflow configuration
        framework: ``react``, ``vue`` or ``svelte``

    Example:
        >>> analyzer = ComponentAnalyzer()
        >>> result = analyzer.analyze_source(source, file_path="Counter.tsx")
        >>> [node.label for node in result.nodes]
        ['count']
    """

    def __init__(
        self,
        registry: Optional[ProcessorRegistry] = None,
        type_resolver: Optional[TypeResolver] = None,
        config: Optional[HookflowConfig] = None,
        framework: str = "react",
    ):
        self.config = config or HookflowConfig()
        self.registry = registry or create_default_registry()
        self.framework = framework
        if type_resolver is None:
            type_resolver = create_type_resolver(self.config.type_resolver)
        self.classifier = ClassificationEngine(type_resolver, use_batch=self.config.type_resolver.batch)
        self.references = ReferenceExtractor(self.config.analysis)

    def analyze_source(self, source: str, file_path: str = "<memory>", line_offset: int = 1) -> ComponentAnalysis:
        """Analyze one component (or one script block).

        Args:
            source: Component source text
            file_path: Used to pick the grammar and passed to the type resolver
            line_offset: 1-based line of ``source`` within its file

        Returns:
            ComponentAnalysis; stage failures are listed in ``diagnostics``
        """
        with LogContext(operation="analyze_component", file=file_path, framework=self.framework):
            tree = get_parser(file_path).parse(source)
            positions = PositionIndex(source, line_offset)
            component_name, body = find_component(tree)
            analysis = ComponentAnalysis(component_name=component_name)
            if tree.has_error:
                logger.warning(f"{file_path} contains syntax errors; results may be incomplete")
                analysis.diagnostics.append(Diagnostic(stage="parse", message="Source contains syntax errors"))

            logger.info(f"Analyzing component {component_name or '<module>'} in {file_path}")
            analysis.imports = detect_imports(tree)

            matches = self._match_hooks(tree, body, positions, analysis)
            session = AnalysisSession(framework=self.framework, component=component_name)
            for match in matches:
                self._process_match(match, session, file_path, analysis)

            self._extract_processes(body, positions, analysis)
            if self.framework == "react":
                self._extract_structures(body, positions, analysis)
            else:
                self._analyze_script(body, positions, analysis)

            logger.info(
                f"Found {len(analysis.hooks)} hook(s), {len(analysis.processes)} process(es), "
                f"{len(analysis.nodes)} node(s) in {component_name or file_path}"
            )
            return analysis

    def analyze_template(self, template: str, line_offset: int = 1) -> ComponentAnalysis:
        """Structures and directive bindings of Vue or Svelte markup."""
        with LogContext(operation="analyze_template", framework=self.framework):
            markup = "svelte" if self.framework == "svelte" else "vue"
            extractor = get_structure_extractor(markup, line_offset=line_offset)
            analysis = ComponentAnalysis()
            try:
                analysis.structures = extractor.extract(template)
                analysis.bindings = extractor.extract_bindings(template)
            except Exception as e:
                logger.warning(f"Template analysis failed: {e}", exc_info=True)
                analysis.diagnostics.append(Diagnostic(stage="template", message=str(e)))
            return analysis

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _match_hooks(self, tree, body, positions, analysis: ComponentAnalysis) -> List[HookMatch]:
        matches: List[HookMatch] = []
        hooks = HookAnalyzer(positions, framework=self.framework)
        try:
            matches = hooks.analyze(body)
        except Exception as e:
            logger.warning(f"Hook matching failed: {e}", exc_info=True)
            analysis.diagnostics.append(Diagnostic(stage="hooks", message=str(e)))
        analysis.diagnostics.extend(hooks.diagnostics)

        tagged = []
        for match in matches:
            try:
                tagged.append(library_for_hook(match, analysis.imports, self.registry))
            except Exception as e:
                logger.warning(f"Library detection failed for {match.hook_name}: {e}", exc_info=True)
                tagged.append(match)

        if self.framework == "svelte":
            called = {match.hook_name for match in tagged}
            synthesized = [
                match for match in sveltekit_hooks(tree, analysis.imports, positions)
                if match.hook_name not in called
            ]
            tagged.extend(synthesized)
        return tagged

    def _process_match(self, match: HookMatch, session: AnalysisSession, file_path: str,
                       analysis: ComponentAnalysis) -> None:
        try:
            occurrence = self.classifier.classify(match, file_path)
        except Exception as e:
            logger.warning(f"Classification of {match.hook_name} at line {match.line} failed: {e}", exc_info=True)
            analysis.diagnostics.append(Diagnostic(stage="classification", message=str(e), line=match.line))
            occurrence = HookOccurrence.from_match(match)
        analysis.hooks.append(occurrence)

        try:
            result = self.registry.process(occurrence, session)
        except Exception as e:
            logger.warning(f"Skipping {occurrence.hook_name} at line {occurrence.line}: {e}", exc_info=True)
            analysis.diagnostics.append(Diagnostic(stage="processor", message=str(e), line=occurrence.line))
            return

        if result is not None:
            analysis.nodes.extend(result.nodes)
            analysis.edges.extend(result.edges)

    def _extract_processes(self, body, positions, analysis: ComponentAnalysis) -> None:
        processes = ProcessAnalyzer(positions, self.references)
        try:
            analysis.processes.extend(processes.analyze(body))
        except Exception as e:
            logger.warning(f"Process extraction failed: {e}", exc_info=True)
            analysis.diagnostics.append(Diagnostic(stage="processes", message=str(e)))
        analysis.diagnostics.extend(processes.diagnostics)
        if self.framework == "react":
            try:
                analysis.processes.extend(processes.extract_inline_handlers(body))
            except Exception as e:
                logger.warning(f"Inline handler extraction failed: {e}", exc_info=True)
                analysis.diagnostics.append(Diagnostic(stage="inline-handlers", message=str(e)))

    def _extract_structures(self, body, positions, analysis: ComponentAnalysis) -> None:
        try:
            analysis.structures = JSXStructureExtractor(positions).extract(body)
        except Exception as e:
            logger.warning(f"Structure extraction failed: {e}", exc_info=True)
            analysis.diagnostics.append(Diagnostic(stage="structures", message=str(e)))

    def _analyze_script(self, body, positions, analysis: ComponentAnalysis) -> None:
        """Vue macros/state, Svelte runes and Svelte/Vue event dispatch."""
        if self.framework == "svelte":
            self._match_runes(body, positions, analysis)

        dispatchers: List[str] = []
        try:
            if self.framework == "vue":
                script = VueScriptAnalyzer(positions)
                analysis.vue_state = script.analyze_state(body)
                analysis.props = script.analyze_props(body)
                emit_variable, analysis.emits = script.analyze_emits(body)
                if emit_variable:
                    dispatchers.append(emit_variable)

            dispatcher = DispatcherAnalyzer(positions, max_depth=self.config.analysis.max_depth)
            if self.framework == "svelte":
                variable, events = dispatcher.find_dispatcher(body)
                if variable:
                    dispatchers.append(variable)
                    analysis.emits = events
            if dispatchers:
                analysis.dispatch_calls = dispatcher.find_calls(body, dispatchers)
        except Exception as e:
            logger.warning(f"Script analysis failed: {e}", exc_info=True)
            analysis.diagnostics.append(Diagnostic(stage="script", message=str(e)))

    def _match_runes(self, body, positions, analysis: ComponentAnalysis) -> None:
        runes = SvelteRunesAnalyzer(positions, self.references)
        try:
            analysis.runes = runes.analyze(body)
        except Exception as e:
            logger.warning(f"Rune matching failed: {e}", exc_info=True)
            analysis.diagnostics.append(Diagnostic(stage="runes", message=str(e)))
        analysis.diagnostics.extend(runes.diagnostics)
        analysis.processes.extend(runes.effect_processes)
        for rune in analysis.runes:
            if rune.kind == "props":
                analysis.props.extend(rune.props)
