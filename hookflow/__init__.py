"""
Hookflow - Data-Flow Analysis for Front-End Components

Extracts hooks, processes and template structure from React, Vue and
Svelte components and turns them into data-flow diagram elements.
"""

__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy imports for public API - avoids loading tree-sitter grammars at import time."""
    if name == "ComponentAnalyzer":
        from hookflow.analysis import ComponentAnalyzer
        return ComponentAnalyzer
    if name == "ComponentAnalysis":
        from hookflow.analysis import ComponentAnalysis
        return ComponentAnalysis
    if name == "HookflowConfig":
        from hookflow.config import HookflowConfig
        return HookflowConfig
    if name == "load_config":
        from hookflow.config import load_config
        return load_config
    if name == "ProcessorRegistry":
        from hookflow.libraries import ProcessorRegistry
        return ProcessorRegistry
    if name == "create_default_registry":
        from hookflow.libraries import create_default_registry
        return create_default_registry
    if name == "ClassificationEngine":
        from hookflow.classification import ClassificationEngine
        return ClassificationEngine
    if name == "get_parser":
        from hookflow.parsers import get_parser
        return get_parser
    raise AttributeError(f"module 'hookflow' has no attribute {name!r}")


__all__ = [
    "__version__",
    "ComponentAnalyzer",
    "ComponentAnalysis",
    "HookflowConfig",
    "load_config",
    "ProcessorRegistry",
    "create_default_registry",
    "ClassificationEngine",
    "get_parser",
]
