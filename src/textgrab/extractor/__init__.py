from .content_extractor import ContentExtractor, squeeze_whitespace
from .models import ExtractionResult, NormalizeOptions, TextStats
from .text_processor import TextNormalizer

__all__ = [
    "ContentExtractor",
    "squeeze_whitespace",
    "ExtractionResult",
    "NormalizeOptions",
    "TextStats",
    "TextNormalizer",
]
