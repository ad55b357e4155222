"""
Element locators: synthesis, labelling and re-resolution.
"""

from .models import (
    Locator,
    PathSegment,
    Resolution,
    ResolutionOutcome,
    SegmentKind,
)
from .resolver import LocatorResolver, split_selector
from .synthesizer import PathSynthesizer, SEGMENT_STRATEGIES
from .labels import RegionKind, classify_region, describe_node

__all__ = [
    "Locator",
    "PathSegment",
    "Resolution",
    "ResolutionOutcome",
    "SegmentKind",
    "LocatorResolver",
    "split_selector",
    "PathSynthesizer",
    "SEGMENT_STRATEGIES",
    "RegionKind",
    "classify_region",
    "describe_node",
]
