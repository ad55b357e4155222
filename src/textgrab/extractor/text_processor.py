"""
Text normalization for AI consumption: cleanup, statistics and length bounding.
Truncation prefers sentence, then paragraph, then word boundaries and always
appends a notice recording how much was cut.
"""

import logging
import math
import re
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from .models import ExtractionResult, NormalizeOptions, TextStats

# Format characters removed outright.
ZERO_WIDTH_CHARACTERS = {
    "\u200b": "zero width space",
    "\u200c": "zero width non-joiner",
    "\u200d": "zero width joiner",
    "\u2060": "word joiner",
    "\ufeff": "byte order mark",
    "\u00ad": "soft hyphen",
}

QUOTE_REPLACEMENTS = {
    "\u201c": '"',
    "\u201d": '"',
    "\u201e": '"',
    "\u201f": '"',
    "\u2018": "'",
    "\u2019": "'",
    "\u201a": "'",
    "\u201b": "'",
}

_CLEANUP_TABLE = str.maketrans(
    {**{char: None for char in ZERO_WIDTH_CHARACTERS}, **QUOTE_REPLACEMENTS}
)

TRAILER_ALLOWANCE = 200
SENTENCE_TIER_MIN_RATIO = 0.7
PARAGRAPH_TIER_MIN_RATIO = 0.5
WORD_BOUNDARY_MIN_RATIO = 0.8
TOKENS_PER_WORD = 1.3

FULL_TRAILER = (
    "\n\n[Truncated {cut} characters]"
    "\n[Original length: {original} characters]"
    "\n[Tip: re-extract smaller regions to capture the full content]"
)
COMPACT_TRAILER = "\n\n[Truncated {cut} of {original} chars]"

HEADER_RULE = "=" * 50


class TextNormalizer:
    """Cleans extracted text, computes statistics and enforces a length budget."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def clean(self, text: str) -> str:
        """
        Whitespace and punctuation cleanup. Applying it twice changes nothing.
        """
        if not text:
            return ""
        text = text.translate(_CLEANUP_TABLE)
        text = re.sub(r"[^\S\n]+", " ", text)
        text = re.sub(r"\n\s*\n\s*\n", "\n\n", text)
        text = "\n".join(line.strip() for line in text.split("\n"))
        text = re.sub(r"([.!?])\1+", r"\1", text)
        # Re-paragraph: sentence end, line break, capitalized next sentence.
        text = re.sub(r"([.!?])\s*\n\s*([A-Z])", r"\1\n\n\2", text)
        return text.strip()

    def compute_stats(self, text: str) -> TextStats:
        words = text.split()
        sentences = [s for s in re.split(r"[.!?]+", text) if s.strip()]
        paragraphs = [p for p in re.split(r"\n\s*\n", text) if p.strip()]
        return TextStats(
            characters=len(text),
            words=len(words),
            sentences=len(sentences),
            paragraphs=len(paragraphs),
            estimated_tokens=math.ceil(len(words) * TOKENS_PER_WORD),
        )

    def normalize(self, text: str, options: Optional[NormalizeOptions] = None) -> ExtractionResult:
        """
        Clean ``text``, compute statistics and bound it to ``options.max_length``.

        Raises:
            ValueError: if the budget is not positive or cannot hold a truncation notice
        """
        options = options or NormalizeOptions()
        if options.max_length <= 0:
            raise ValueError(f"max_length must be positive, got {options.max_length}")

        raw_text = text or ""
        normalized = self.clean(raw_text) if options.clean_formatting else raw_text.strip()
        stats = self.compute_stats(normalized)

        result = ExtractionResult(
            raw_text=raw_text,
            normalized_text=normalized,
            output=normalized,
            stats=stats,
            original_length=len(normalized),
        )
        if len(normalized) <= options.max_length:
            return result

        output, trailer, cut = self.truncate(normalized, options.max_length)
        result.output = output
        result.trailer = trailer
        result.truncated = True
        result.cut_character_count = cut
        self.logger.info(
            f"Truncated text from {len(normalized)} to {len(output)} characters "
            f"({cut} cut, budget {options.max_length})"
        )
        return result

    def truncate(self, text: str, max_length: int) -> Tuple[str, str, int]:
        """
        Bound ``text`` to ``max_length`` characters including the trailer.

        Returns:
            Tuple of (output, trailer, cut_character_count)
        """
        template, reserve = self._plan_trailer(max_length, len(text))
        target = max_length - reserve

        body = self._sentence_prefix(text, target)
        if len(body) < target * SENTENCE_TIER_MIN_RATIO:
            body = self._paragraph_prefix(text, target)
        if len(body) < target * PARAGRAPH_TIER_MIN_RATIO:
            body = self._character_prefix(text, target)

        body = body.rstrip()
        cut = len(text) - len(body)
        trailer = template.format(cut=cut, original=len(text))
        return body + trailer, trailer, cut

    @staticmethod
    def _plan_trailer(max_length: int, original_length: int) -> Tuple[str, int]:
        """Pick the trailer template and how many characters to reserve for it."""
        if max_length >= 2 * TRAILER_ALLOWANCE:
            return FULL_TRAILER, TRAILER_ALLOWANCE
        reserve = len(COMPACT_TRAILER.format(cut=original_length, original=original_length))
        if reserve >= max_length:
            raise ValueError(
                f"max_length {max_length} is too small to hold the truncation notice"
            )
        return COMPACT_TRAILER, reserve

    @staticmethod
    def _sentence_prefix(text: str, target: int) -> str:
        parts = re.split(r"([.!?]+\s*)", text)
        result = ""
        for i in range(0, len(parts), 2):
            sentence = parts[i] + (parts[i + 1] if i + 1 < len(parts) else "")
            if len(result) + len(sentence) > target:
                break
            result += sentence
        return result

    @staticmethod
    def _paragraph_prefix(text: str, target: int) -> str:
        result = ""
        for paragraph in re.split(r"\n\s*\n", text):
            if len(result) + len(paragraph) + 2 > target:
                break
            result += paragraph + "\n\n"
        return result

    @staticmethod
    def _character_prefix(text: str, target: int) -> str:
        result = text[:target]
        last_space = result.rfind(" ")
        if last_space > target * WORD_BOUNDARY_MIN_RATIO:
            result = result[:last_space]
        return result

    def render_header(
        self,
        stats: TextStats,
        title: str = "",
        url: str = "",
        truncated: bool = False,
        max_length: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """Metadata block placed above copied text."""
        timestamp = (now or datetime.now(timezone.utc)).isoformat()
        lines: List[str] = [f"[AI Text Extract - {title or 'Untitled'}]"]
        if url:
            lines.append(f"Source: {url}")
        lines.append(f"Extracted at: {timestamp}")
        lines.append(
            f"Stats: {stats.characters} characters, {stats.words} words, "
            f"{stats.sentences} sentences, {stats.paragraphs} paragraphs"
        )
        lines.append(f"Estimated tokens: ~{stats.estimated_tokens}")
        if truncated and max_length:
            lines.append(f"Warning: text truncated to {max_length} characters to fit AI input limits")
        lines.append(HEADER_RULE)
        return "\n".join(lines)

    def format_payload(
        self,
        result: ExtractionResult,
        title: str = "",
        url: str = "",
        include_header: bool = True,
        max_length: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """Text handed to the clipboard: optional header, blank line, bounded text."""
        if not include_header:
            return result.output
        header = self.render_header(
            result.stats,
            title=title,
            url=url,
            truncated=result.truncated,
            max_length=max_length,
            now=now,
        )
        return f"{header}\n\n{result.output}"
