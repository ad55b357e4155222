"""
Services orchestrating locators, extraction and clipboard delivery.
"""

from .clipboard import (
    ClipboardSink,
    CommandClipboard,
    FileSink,
    MemoryClipboard,
    copy_with_fallback,
)
from .extraction_service import ExtractionService, Reextraction, document_title
from .session import SessionState, apply

__all__ = [
    "ClipboardSink",
    "CommandClipboard",
    "FileSink",
    "MemoryClipboard",
    "copy_with_fallback",
    "ExtractionService",
    "Reextraction",
    "document_title",
    "SessionState",
    "apply",
]
