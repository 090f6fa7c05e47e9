"""Classification of TypeScript type strings as callable or not.

Type strings come from the external type resolver in the compiler's display
form, e.g. ``(value: string) => void``, ``React.MouseEventHandler<Element>``
or ``((e: Event) => void) | undefined``.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

_ARROW = re.compile(r"^(<[^>]+>)?\s*\([^)]*\)\s*=>\s*.+")
_FUNCTION_KEYWORD = re.compile(r"^function\s*\([^)]*\)\s*:\s*.+")
_REF_CALLBACK = re.compile(r"^\([^)]*:\s*\w+\s*\|\s*null\)\s*=>\s*void$")
_VOID_SIGNATURE = re.compile(r"^\(.*\)\s*=>\s*void$")

REACT_EVENT_HANDLERS = (
    "MouseEventHandler",
    "ChangeEventHandler",
    "ClickEventHandler",
    "KeyboardEventHandler",
    "FocusEventHandler",
    "FormEventHandler",
    "TouchEventHandler",
    "PointerEventHandler",
    "WheelEventHandler",
    "AnimationEventHandler",
    "TransitionEventHandler",
    "DragEventHandler",
    "ClipboardEventHandler",
    "CompositionEventHandler",
    "UIEventHandler",
    "EventHandler",
)

_NULLISH = ("undefined", "null")


@dataclass(frozen=True)
class TypeClassification:
    """Result of :meth:`TypeClassifier.classify`."""
    base_type: str
    is_function: bool
    is_union: bool
    union_types: Optional[List[str]] = None


def split_union(type_string: str) -> List[str]:
    """Split on top-level ``|``, respecting ``<>``, ``()`` and ``[]`` nesting.

    The ``>`` of an arrow (``=>``) does not close a bracket.
    """
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    previous = ""
    for char in type_string:
        if char in "<([":
            depth += 1
        elif char in ")]" or (char == ">" and previous != "="):
            depth -= 1
        elif char == "|" and depth == 0:
            parts.append("".join(current).strip())
            current = []
            previous = char
            continue
        current.append(char)
        previous = char
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return [part for part in parts if part]


class TypeClassifier:
    """Decide whether a resolved type string denotes a function.

    Example:
        >>> TypeClassifier().is_function("((id: string) => void) | undefined")
        True
        >>> TypeClassifier().is_function("boolean")
        False
    """

    def classify(self, type_string: str) -> TypeClassification:
        normalized = type_string.strip()
        members = split_union(normalized)
        is_union = len(members) > 1
        return TypeClassification(
            base_type=normalized,
            is_function=self.is_function(normalized),
            is_union=is_union,
            union_types=members if is_union else None,
        )

    def is_function(self, type_string: str) -> bool:
        normalized = type_string.strip()

        members = split_union(normalized)
        if len(members) > 1:
            # Optional callbacks: every non-nullish member must be callable
            callable_members = [m for m in members if m not in _NULLISH]
            if not callable_members:
                return False
            return all(self.is_function(member) for member in callable_members)

        if normalized.startswith("(") and normalized.endswith(")") and _balanced(normalized[1:-1]):
            return self.is_function(normalized[1:-1])

        if self.is_arrow(normalized) or _FUNCTION_KEYWORD.match(normalized) or normalized == "Function":
            return True
        if self.is_event_handler(normalized):
            return True
        if _REF_CALLBACK.match(normalized):
            return True
        if self.is_arrow(normalized) and "event" in normalized:
            return True
        if "Action" in normalized:
            return True
        if normalized == "EventDispatcher" or normalized.startswith("EventDispatcher<"):
            return True
        if _VOID_SIGNATURE.match(normalized) and "value" in normalized:
            return True
        return False

    @staticmethod
    def is_arrow(type_string: str) -> bool:
        return bool(_ARROW.match(type_string))

    @staticmethod
    def is_event_handler(type_string: str) -> bool:
        for handler in REACT_EVENT_HANDLERS:
            for name in (handler, f"React.{handler}"):
                if type_string == name or type_string.startswith(f"{name}<"):
                    return True
        return type_string.endswith("Callback") or type_string.endswith("Handler")

    @staticmethod
    def detect_framework(type_string: str) -> str:
        """``react``, ``vue``, ``svelte`` or ``unknown`` from telltale type names."""
        normalized = type_string.strip()
        if "React." in normalized or "EventHandler" in normalized:
            return "react"
        if any(marker in normalized for marker in ("defineProps", "defineEmits", "EmitFn", "Pinia", "Store<")):
            return "vue"
        if any(marker in normalized for marker in ("Writable<", "Readable<", "EventDispatcher")):
            return "svelte"
        return "unknown"


def _balanced(inner: str) -> bool:
    """True when ``inner`` never closes more parentheses than it opened."""
    depth = 0
    for char in inner:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def object_type_properties(type_string: str) -> List[str]:
    """Property names of an object type string.

    ``{ count: number; readonly step?: number }`` yields ``["count", "step"]``.
    Members are split on ``;`` or ``,`` at brace depth zero.
    """
    text = type_string.strip()
    if not (text.startswith("{") and text.endswith("}")):
        return []
    body = text[1:-1]

    members: List[str] = []
    current: List[str] = []
    depth = 0
    previous = ""
    for char in body:
        if char in "{<([":
            depth += 1
        elif char in "})]" or (char == ">" and previous != "="):
            depth -= 1
        elif char in ";," and depth == 0:
            members.append("".join(current))
            current = []
            previous = char
            continue
        current.append(char)
        previous = char
    members.append("".join(current))

    names = []
    for member in members:
        member = member.strip()
        if ":" not in member:
            continue
        name = member.split(":", 1)[0].strip()
        if name.startswith("readonly "):
            name = name[len("readonly "):].strip()
        name = name.rstrip("?").strip()
        if name and name not in names and re.match(r"^[A-Za-z_$][\w$]*$", name):
            names.append(name)
    return names
