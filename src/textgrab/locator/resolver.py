"""
Re-resolution of stored locators against a (possibly changed) document tree.
"""

import logging
from typing import List, Sequence, Union

import soupsieve
from bs4 import BeautifulSoup
from bs4.element import Tag

from .models import Locator, Resolution, ResolutionOutcome
from .rules import element_children

Root = Union[BeautifulSoup, Tag]


def split_selector(selector: str) -> List[str]:
    """
    Split a child-combinator chain (``a > b > c``) into its segments.

    ``>`` inside quoted attribute values or brackets is left alone.
    """
    segments: List[str] = []
    current: List[str] = []
    quote = None
    depth = 0
    escaped = False
    for char in selector:
        if escaped:
            current.append(char)
            escaped = False
            continue
        if char == "\\":
            current.append(char)
            escaped = True
            continue
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char in "[(":
            depth += 1
        elif char in ")]":
            depth -= 1
        elif char == ">" and depth == 0:
            segments.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    segments.append("".join(current).strip())
    return segments


class LocatorResolver:
    """
    Evaluates locator paths as a child-combinator chain anchored at a root.

    Equivalent to ``root.select(":scope > s1 > s2 ...")`` but also works when
    the root is the BeautifulSoup document itself. Never mutates the tree.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def match_path(self, selectors: Sequence[str], root: Root) -> List[Tag]:
        """
        Return every node reached by the segment chain, in document order.

        Raises:
            soupsieve.SelectorSyntaxError: if a segment is not valid CSS
        """
        if not selectors:
            return []
        matchers = [soupsieve.compile(selector) for selector in selectors]
        candidates: List[Tag] = [root]
        for matcher in matchers:
            candidates = [
                child
                for parent in candidates
                for child in element_children(parent)
                if matcher.match(child)
            ]
            if not candidates:
                break
        return candidates

    def resolve(self, locator: Locator, root: Root) -> Resolution:
        """
        Resolve a stored locator.

        Malformed descriptors are reported as a zero-match outcome so callers
        treat them exactly like stale ones.
        """
        selectors = [segment.selector for segment in locator.path]
        return self._resolve_segments(selectors, root, label=locator.selector)

    def resolve_selector(self, selector: str, root: Root) -> Resolution:
        """Resolve a raw ``a > b > c`` descriptor string."""
        return self._resolve_segments(split_selector(selector), root, label=selector)

    def _resolve_segments(self, selectors: Sequence[str], root: Root, label: str) -> Resolution:
        try:
            matches = self.match_path(selectors, root)
        except (soupsieve.SelectorSyntaxError, ValueError) as e:
            self.logger.warning(f"Malformed locator '{label}': {e}")
            return Resolution(outcome=ResolutionOutcome.ZERO, malformed=True)

        if not matches:
            self.logger.info(f"Locator '{label}' matched no element")
            return Resolution(outcome=ResolutionOutcome.ZERO)

        if len(matches) == 1:
            return Resolution(outcome=ResolutionOutcome.ONE, node=matches[0], count=1)

        warning = f"Locator matched {len(matches)} elements; using the first one"
        self.logger.warning(f"{warning}: '{label}'")
        return Resolution(
            outcome=ResolutionOutcome.MANY,
            node=matches[0],
            count=len(matches),
            warning=warning,
        )
