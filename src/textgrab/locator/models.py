"""
Data types for element locators and their resolution outcomes.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from bs4.element import Tag

SEGMENT_SEPARATOR = " > "


class SegmentKind(Enum):
    """How a path segment singles out its node among siblings."""
    TAG = "tag"
    ID = "id"
    CLASS = "class"
    ATTRIBUTE = "attribute"
    POSITIONAL = "positional"


@dataclass(frozen=True)
class PathSegment:
    """One step of a locator, scoped to one tree level."""
    kind: SegmentKind
    selector: str

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind.value, "selector": self.selector}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PathSegment":
        return cls(kind=SegmentKind(data["kind"]), selector=data["selector"])


@dataclass
class Locator:
    """
    Structural descriptor for one node in a document tree.

    Attributes:
        scope: Host of the originating document
        path: Segments in root-to-target order
        created_at: POSIX timestamp of synthesis
        label: Short human-readable description of the target
        fallback: True when built from positional indices only
    """
    scope: str
    path: List[PathSegment]
    created_at: float = field(default_factory=time.time)
    label: str = ""
    fallback: bool = False

    @property
    def selector(self) -> str:
        return SEGMENT_SEPARATOR.join(segment.selector for segment in self.path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scope": self.scope,
            "path": [segment.to_dict() for segment in self.path],
            "created_at": self.created_at,
            "label": self.label,
            "fallback": self.fallback,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Locator":
        return cls(
            scope=data.get("scope", ""),
            path=[PathSegment.from_dict(item) for item in data.get("path", [])],
            created_at=float(data.get("created_at", 0.0)),
            label=data.get("label", ""),
            fallback=bool(data.get("fallback", False)),
        )


class ResolutionOutcome(Enum):
    ZERO = "zero"
    ONE = "one"
    MANY = "many"


@dataclass
class Resolution:
    """Result of re-evaluating a locator against a tree."""
    outcome: ResolutionOutcome
    node: Optional[Tag] = None
    count: int = 0
    warning: Optional[str] = None
    malformed: bool = False

    @property
    def found(self) -> bool:
        return self.node is not None
