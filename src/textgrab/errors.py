"""
Error taxonomy for locating and extracting regions.

Synthesis failures are recovered internally. Resolution, empty-content and
clipboard failures end the current invocation and carry a user-facing message.
"""

from typing import Optional


class TextgrabError(Exception):
    """Base exception for textgrab errors."""

    default_message = "Extraction failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class SynthesisUnverifiable(TextgrabError):
    """Raised when a synthesized path does not resolve to exactly its target."""

    default_message = "Synthesized locator could not be verified"


class ResolutionStale(TextgrabError):
    """Raised when a stored locator no longer matches any element."""

    default_message = "Element no longer found on this page"


class ResolutionAmbiguous(TextgrabError):
    """Raised in strict mode when a stored locator matches several elements."""

    default_message = "Multiple elements matched the saved selection"

    def __init__(self, count: int, message: Optional[str] = None):
        self.count = count
        super().__init__(message or f"{self.default_message} ({count} candidates)")


class EmptyContent(TextgrabError):
    """Raised when the resolved element has no extractable text."""

    default_message = "Selected element contains no extractable text"


class SinkFailure(TextgrabError):
    """Raised when neither the clipboard nor its fallback accepted the text."""

    default_message = "Copy failed, please try again"
