"""
Heuristic labelling of selected regions.

The label is descriptive only; it never participates in resolution.
"""

import logging
import re
from enum import Enum
from typing import Dict, List, Tuple

from bs4.element import Tag

from .rules import eligible_classes


class RegionKind(Enum):
    """Coarse kinds of page regions a user typically selects."""
    ARTICLE = "article"
    NAVIGATION = "navigation"
    LISTING = "listing"
    TABLE = "table"
    CODE = "code"
    COMMENTS = "comments"
    FORM = "form"
    GENERIC = "generic"


# Tag name -> kind it hints at, with weight.
TAG_HINTS: Dict[str, Tuple[RegionKind, float]] = {
    "article": (RegionKind.ARTICLE, 0.6),
    "main": (RegionKind.ARTICLE, 0.5),
    "nav": (RegionKind.NAVIGATION, 0.6),
    "ul": (RegionKind.LISTING, 0.3),
    "ol": (RegionKind.LISTING, 0.3),
    "table": (RegionKind.TABLE, 0.6),
    "pre": (RegionKind.CODE, 0.6),
    "code": (RegionKind.CODE, 0.5),
    "form": (RegionKind.FORM, 0.6),
}

# Class/id/role fragments -> kind they hint at.
NAME_PATTERNS: Dict[RegionKind, List[str]] = {
    RegionKind.ARTICLE: [r"article", r"post", r"entry", r"story", r"content", r"body"],
    RegionKind.NAVIGATION: [r"nav", r"menu", r"breadcrumb", r"toc"],
    RegionKind.LISTING: [r"list", r"results", r"feed", r"grid"],
    RegionKind.TABLE: [r"table", r"grid"],
    RegionKind.CODE: [r"code", r"highlight", r"snippet"],
    RegionKind.COMMENTS: [r"comment", r"reply", r"thread", r"discussion"],
    RegionKind.FORM: [r"form", r"search", r"login"],
}

SNIPPET_LENGTH = 40
MIN_SCORE = 0.3


def classify_region(node: Tag) -> Tuple[RegionKind, float]:
    """
    Guess what kind of region ``node`` is from its tag, role, classes and id.

    Returns:
        Tuple of (RegionKind, confidence_score)
    """
    scores = {kind: 0.0 for kind in RegionKind}

    hint = TAG_HINTS.get(node.name)
    if hint:
        scores[hint[0]] += hint[1]

    names = " ".join(
        [node.get("id") or "", node.get("role") or ""] + eligible_classes(node)
    ).lower()
    if names.strip():
        for kind, patterns in NAME_PATTERNS.items():
            for pattern in patterns:
                if re.search(pattern, names):
                    scores[kind] += 0.4
                    break

    if len(node.find_all("li")) > 5:
        scores[RegionKind.LISTING] += 0.2
    if len(node.find_all("p")) >= 3:
        scores[RegionKind.ARTICLE] += 0.2

    best_kind, best_score = max(scores.items(), key=lambda item: item[1])
    if best_score < MIN_SCORE:
        return RegionKind.GENERIC, best_score
    return best_kind, min(best_score, 1.0)


def describe_node(node: Tag) -> str:
    """Short human-readable description, e.g. ``article: div.post "Hello wor..."``."""
    kind, _ = classify_region(node)
    head = node.name
    if node.get("id"):
        head += f"#{node['id']}"
    else:
        classes = eligible_classes(node)
        if classes:
            head += f".{classes[0]}"

    text = " ".join(node.get_text(" ").split())
    if len(text) > SNIPPET_LENGTH:
        text = text[:SNIPPET_LENGTH].rstrip() + "..."

    label = f"{kind.value}: {head}"
    if text:
        label += f' "{text}"'
    logging.getLogger(__name__).debug(f"Labelled region as {label}")
    return label
