"""
Static rule tables used while building locators.

Tables map a pattern to the reason it applies so that tests can walk them
row by row.
"""

import re
from typing import Dict, List, Optional

import soupsieve
from bs4.element import Tag

# Class names that reflect transient UI state rather than structure.
VOLATILE_CLASS_RULES: Dict[str, str] = {
    r"active": "interaction state",
    r"hover": "pointer state",
    r"focus": "focus state",
    r"selected": "selection state",
    r"^_": "generated or private name",
    r"^.?$": "too short to be meaningful",
}

_VOLATILE_CLASS_PATTERNS = [
    (re.compile(pattern, re.IGNORECASE), reason)
    for pattern, reason in VOLATILE_CLASS_RULES.items()
]

MAX_COMBINED_CLASSES = 3

# Test, automation, accessibility and form hooks, in probe order.
SEMANTIC_ATTRIBUTES = (
    "data-testid",
    "data-test",
    "data-qa",
    "data-cy",
    "data-e2e",
    "data-automation-id",
    "role",
    "aria-label",
    "name",
    "itemprop",
)


def volatile_class_reason(class_name: str) -> Optional[str]:
    """Return why a class is considered volatile, or None when it is stable."""
    for pattern, reason in _VOLATILE_CLASS_PATTERNS:
        if pattern.search(class_name):
            return reason
    return None


def eligible_classes(node: Tag) -> List[str]:
    """Classes of ``node`` that survive the volatile-class filter, in document order."""
    classes = node.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return [name for name in classes if volatile_class_reason(name) is None]


def element_children(parent: Tag) -> List[Tag]:
    return [child for child in parent.children if isinstance(child, Tag)]


def css_identifier(value: str) -> str:
    return soupsieve.escape(value)


def css_string(value: str) -> str:
    """Quote an attribute value for use inside ``[attr="..."]``."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\a ")
    )
    return f'"{escaped}"'
