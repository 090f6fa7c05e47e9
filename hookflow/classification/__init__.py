"""Data/function classification of hook return values."""

from hookflow.classification.engine import ClassificationEngine
from hookflow.classification.heuristics import is_function_name, looks_like_action
from hookflow.classification.resolver import (
    HttpTypeResolver,
    ResolvedType,
    TypeQuery,
    TypeResolver,
    create_type_resolver,
)
from hookflow.classification.type_classifier import TypeClassifier

__all__ = [
    "ClassificationEngine",
    "HttpTypeResolver",
    "ResolvedType",
    "TypeClassifier",
    "TypeQuery",
    "TypeResolver",
    "create_type_resolver",
    "is_function_name",
    "looks_like_action",
]
