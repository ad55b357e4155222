from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class TextStats:
    characters: int = 0
    words: int = 0
    sentences: int = 0
    paragraphs: int = 0
    estimated_tokens: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "characters": self.characters,
            "words": self.words,
            "sentences": self.sentences,
            "paragraphs": self.paragraphs,
            "estimated_tokens": self.estimated_tokens,
        }


@dataclass
class NormalizeOptions:
    max_length: int = 50000
    clean_formatting: bool = True


@dataclass
class ExtractionResult:
    """
    Output of one extraction call. Built fresh each time, never persisted.

    Attributes:
        raw_text: Text as read from the document
        normalized_text: Text after cleanup, before any truncation
        output: Bounded text; ends with ``trailer`` when truncated
        stats: Statistics of ``normalized_text``
        truncated: Whether ``output`` was cut to fit the budget
        cut_character_count: Characters of ``normalized_text`` left out
        original_length: Length of ``normalized_text``
        trailer: Truncation notice appended to ``output`` ("" when not truncated)
    """
    raw_text: str
    normalized_text: str
    output: str
    stats: TextStats = field(default_factory=TextStats)
    truncated: bool = False
    cut_character_count: int = 0
    original_length: int = 0
    trailer: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.output,
            "stats": self.stats.to_dict(),
            "truncated": self.truncated,
            "cut_character_count": self.cut_character_count,
            "original_length": self.original_length,
        }
