"""
Locator synthesis.

Builds a minimal, verified-unique path from a root down to a target element.
Each tree level picks its segment from an ordered list of strategies; the
assembled path is replayed against the root before it is returned, and a
purely positional path is used whenever that verification fails.
"""

import logging
import time
from typing import Callable, List, Optional, Sequence

import soupsieve
from bs4.element import Tag

from ..errors import SynthesisUnverifiable
from .labels import describe_node
from .models import Locator, PathSegment, SegmentKind
from .resolver import LocatorResolver, Root
from .rules import (
    MAX_COMBINED_CLASSES,
    SEMANTIC_ATTRIBUTES,
    css_identifier,
    css_string,
    element_children,
    eligible_classes,
)

SegmentStrategy = Callable[[Tag, Sequence[Tag]], Optional[PathSegment]]


def _tag(node: Tag) -> str:
    return css_identifier(node.name)


def _matches_only(selector: str, node: Tag, siblings: Sequence[Tag]) -> bool:
    """Uniqueness probe: does ``selector`` match ``node`` and no other sibling?"""
    try:
        matcher = soupsieve.compile(selector)
    except soupsieve.SelectorSyntaxError:
        return False
    matches = [sibling for sibling in siblings if matcher.match(sibling)]
    return len(matches) == 1 and matches[0] is node


def _base_form(node: Tag) -> str:
    """``tag.firstEligibleClass`` when the node has a stable class, else ``tag``."""
    classes = eligible_classes(node)
    if classes:
        return f"{_tag(node)}.{css_identifier(classes[0])}"
    return _tag(node)


def _sibling_position(node: Tag, siblings: Sequence[Tag]) -> int:
    for index, sibling in enumerate(siblings, start=1):
        if sibling is node:
            return index
    raise ValueError(f"<{node.name}> is not among its parent's children")


def identifier_segment(node: Tag, siblings: Sequence[Tag]) -> Optional[PathSegment]:
    node_id = node.get("id")
    if not isinstance(node_id, str) or not node_id.strip():
        return None
    selector = f"{_tag(node)}#{css_identifier(node_id)}"
    if _matches_only(selector, node, siblings):
        return PathSegment(SegmentKind.ID, selector)
    return None


def class_combination_segment(node: Tag, siblings: Sequence[Tag]) -> Optional[PathSegment]:
    classes = eligible_classes(node)[:MAX_COMBINED_CLASSES]
    if not classes:
        return None
    selector = _tag(node) + "".join(f".{css_identifier(name)}" for name in classes)
    if _matches_only(selector, node, siblings):
        return PathSegment(SegmentKind.CLASS, selector)
    return None


def sole_tag_segment(node: Tag, siblings: Sequence[Tag]) -> Optional[PathSegment]:
    same_tag = [sibling for sibling in siblings if sibling.name == node.name]
    if len(same_tag) != 1:
        return None
    base = _base_form(node)
    kind = SegmentKind.TAG if base == _tag(node) else SegmentKind.CLASS
    return PathSegment(kind, base)


def attribute_segment(node: Tag, siblings: Sequence[Tag]) -> Optional[PathSegment]:
    for attr in SEMANTIC_ATTRIBUTES:
        value = node.get(attr)
        if isinstance(value, list):
            value = " ".join(value)
        if not value or not value.strip():
            continue
        selector = f"{_tag(node)}[{attr}={css_string(value)}]"
        if _matches_only(selector, node, siblings):
            return PathSegment(SegmentKind.ATTRIBUTE, selector)
    return None


def positional_segment(node: Tag, siblings: Sequence[Tag]) -> Optional[PathSegment]:
    position = _sibling_position(node, siblings)
    return PathSegment(SegmentKind.POSITIONAL, f"{_base_form(node)}:nth-child({position})")


# Preference order; the first strategy returning a segment wins its level.
SEGMENT_STRATEGIES: List[SegmentStrategy] = [
    identifier_segment,
    class_combination_segment,
    sole_tag_segment,
    attribute_segment,
    positional_segment,
]


class PathSynthesizer:
    """Produces verified locators for elements of a parsed document."""

    def __init__(
        self,
        resolver: Optional[LocatorResolver] = None,
        strategies: Optional[List[SegmentStrategy]] = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.resolver = resolver or LocatorResolver()
        self.strategies = strategies or SEGMENT_STRATEGIES

    def synthesize(self, target: Tag, root: Root, scope: str = "") -> Locator:
        """
        Build a locator for ``target`` relative to ``root``.

        The returned path always resolves to exactly ``target`` at call time:
        either the strategy-built path verified, or the positional fallback.

        Raises:
            ValueError: if ``target`` is not a descendant of ``root``
        """
        chain = self._ancestor_chain(target, root)
        path: List[PathSegment] = []
        for node in chain:
            path.append(self._segment_for(node, element_children(node.parent)))
        path.reverse()

        locator = Locator(
            scope=scope,
            path=path,
            created_at=time.time(),
            label=describe_node(target),
        )
        try:
            self._verify(locator, target, root)
        except SynthesisUnverifiable as e:
            self.logger.warning(f"{e.message}: '{locator.selector}'; using positional fallback")
            return self.synthesize_fallback(target, root, scope)

        self.logger.debug(f"Synthesized locator '{locator.selector}' for scope '{scope}'")
        return locator

    def synthesize_fallback(self, target: Tag, root: Root, scope: str = "") -> Locator:
        """Positional-only locator; always constructible, only as stable as sibling order."""
        chain = self._ancestor_chain(target, root)
        path: List[PathSegment] = []
        for node in chain:
            position = _sibling_position(node, element_children(node.parent))
            path.append(PathSegment(SegmentKind.POSITIONAL, f"{_tag(node)}:nth-child({position})"))
        path.reverse()

        return Locator(
            scope=scope,
            path=path,
            created_at=time.time(),
            label=describe_node(target),
            fallback=True,
        )

    def _segment_for(self, node: Tag, siblings: Sequence[Tag]) -> PathSegment:
        for strategy in self.strategies:
            segment = strategy(node, siblings)
            if segment is not None:
                return segment
        return positional_segment(node, siblings)

    def _verify(self, locator: Locator, target: Tag, root: Root) -> None:
        try:
            matches = self.resolver.match_path([s.selector for s in locator.path], root)
        except (soupsieve.SelectorSyntaxError, ValueError) as e:
            raise SynthesisUnverifiable(f"Synthesized locator is malformed ({e})") from e
        if len(matches) != 1 or matches[0] is not target:
            raise SynthesisUnverifiable(
                f"Synthesized locator matched {len(matches)} elements instead of the target"
            )

    @staticmethod
    def _ancestor_chain(target: Tag, root: Root) -> List[Tag]:
        """Nodes from ``target`` up to, but excluding, ``root``."""
        chain: List[Tag] = []
        node = target
        while node is not root:
            if node is None:
                raise ValueError("Target element is not a descendant of the given root")
            chain.append(node)
            node = node.parent
        if not chain:
            raise ValueError("Target element must be a strict descendant of the root")
        return chain
