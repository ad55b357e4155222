"""
Extraction service.

Wires synthesis, persistence, resolution, extraction, normalization and the
clipboard into the user-level operations: remember a selection, re-extract it
later, extract the whole page or its main content, and copy the result.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

import soupsieve
from bs4 import BeautifulSoup
from bs4.element import Tag

from ..config import Settings
from ..errors import EmptyContent, ResolutionAmbiguous, ResolutionStale, TextgrabError
from ..extractor import ContentExtractor, ExtractionResult, NormalizeOptions, TextNormalizer
from ..locator import Locator, LocatorResolver, PathSynthesizer, Resolution, ResolutionOutcome
from ..store import LocatorStore, UsageTracker, scope_for_url
from .clipboard import ClipboardSink, CommandClipboard, FileSink, copy_with_fallback

MAIN_FALLBACK_MAX_LENGTH = 30000

Document = Union[BeautifulSoup, Tag]


@dataclass
class Reextraction:
    """Outcome of re-extracting a persisted selection."""
    result: ExtractionResult
    locator: Locator
    resolution: Resolution

    @property
    def warning(self) -> Optional[str]:
        return self.resolution.warning


def document_title(document: Document) -> str:
    title = document.find("title")
    if title is None:
        return ""
    return " ".join(title.get_text().split())


class ExtractionService:
    """
    High-level operations over one locator store.

    Failures that end an invocation (stale or missing selection, empty
    content, clipboard failure) are raised as ``TextgrabError`` subclasses;
    ``handle_message`` turns them into ``{"error": ...}`` replies.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[LocatorStore] = None,
        usage: Optional[UsageTracker] = None,
        synthesizer: Optional[PathSynthesizer] = None,
        resolver: Optional[LocatorResolver] = None,
        extractor: Optional[ContentExtractor] = None,
        normalizer: Optional[TextNormalizer] = None,
        clipboard: Optional[ClipboardSink] = None,
        fallback_clipboard: Optional[ClipboardSink] = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.settings = settings or Settings.from_env()
        self.store = store or LocatorStore(
            db_path=self.settings.store_path,
            ttl_seconds=self.settings.locator_ttl_seconds,
        )
        self.usage = usage or UsageTracker(
            db_path=self.settings.store_path,
            retention_days=self.settings.usage_retention_days,
        )
        self.resolver = resolver or LocatorResolver()
        self.synthesizer = synthesizer or PathSynthesizer(resolver=self.resolver)
        self.extractor = extractor or ContentExtractor()
        self.normalizer = normalizer or TextNormalizer()
        self.clipboard = clipboard or CommandClipboard()
        self.fallback_clipboard = fallback_clipboard or FileSink()

    def _options(self, max_length: Optional[int] = None) -> NormalizeOptions:
        return NormalizeOptions(
            max_length=self.settings.max_length if max_length is None else max_length,
            clean_formatting=self.settings.clean_formatting,
        )

    # ------------------------------------------------------------------
    # Selection persistence
    # ------------------------------------------------------------------

    def remember_selection(self, target: Tag, root: Document, url: str) -> Locator:
        """Synthesize a locator for ``target`` and persist it for the URL's scope."""
        scope = scope_for_url(url)
        locator = self.synthesizer.synthesize(target, root, scope=scope)
        self.store.put(scope, locator)
        self.logger.info(
            f"Remembered selection for '{scope}': {locator.selector}"
            + (" (positional fallback)" if locator.fallback else "")
        )
        return locator

    def recall(self, url: str) -> Optional[Locator]:
        return self.store.get(scope_for_url(url))

    def forget(self, url: str) -> bool:
        return self.store.delete(scope_for_url(url))

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract_node(self, node: Tag, max_length: Optional[int] = None) -> ExtractionResult:
        """
        Ad-hoc extraction of one element.

        Raises:
            EmptyContent: if the element has no extractable text
        """
        raw_text = self.extractor.extract(node)
        return self._normalize(raw_text, max_length)

    def extract_text(self, text: str, max_length: Optional[int] = None) -> ExtractionResult:
        """
        Normalize text the user highlighted on the page.

        Raises:
            EmptyContent: if the text is blank
        """
        return self._normalize(text or "", max_length)

    def reextract(self, root: Document, url: str, strict: bool = False) -> Reextraction:
        """
        Re-extract the persisted selection for ``url`` from ``root``.

        Raises:
            ResolutionStale: if nothing is stored or the locator matches nothing
            ResolutionAmbiguous: if ``strict`` and several elements match
            EmptyContent: if the matched element has no extractable text
        """
        scope = scope_for_url(url)
        locator = self.store.get(scope)
        if locator is None:
            raise ResolutionStale(f"No saved selection for {scope or 'this page'}")

        resolution = self.resolver.resolve(locator, root)
        if resolution.outcome == ResolutionOutcome.ZERO:
            raise ResolutionStale()
        if resolution.outcome == ResolutionOutcome.MANY and strict:
            raise ResolutionAmbiguous(resolution.count)

        result = self.extract_node(resolution.node)
        return Reextraction(result=result, locator=locator, resolution=resolution)

    def extract_page(self, document: BeautifulSoup, max_length: Optional[int] = None) -> ExtractionResult:
        raw_text = self.extractor.extract_page(document)
        return self._normalize(raw_text, max_length)

    def extract_main(self, document: BeautifulSoup) -> ExtractionResult:
        """Main content region if one is recognizable, else the page with a tighter budget."""
        main = self.extractor.find_main_content(document)
        if main is not None:
            return self.extract_node(main)
        self.logger.info("No main content region found; extracting the full page")
        return self.extract_page(
            document, max_length=min(self.settings.max_length, MAIN_FALLBACK_MAX_LENGTH)
        )

    def _normalize(self, raw_text: str, max_length: Optional[int]) -> ExtractionResult:
        options = self._options(max_length)
        result = self.normalizer.normalize(raw_text, options)
        if not result.normalized_text:
            raise EmptyContent()
        return result

    # ------------------------------------------------------------------
    # Clipboard
    # ------------------------------------------------------------------

    def copy(
        self,
        result: ExtractionResult,
        title: str = "",
        url: str = "",
        record_usage: bool = True,
    ) -> str:
        """
        Copy a result (with metadata header if enabled).

        The copy is recorded in the usage statistics unless ``record_usage`` is
        False; message-driven copies leave that to the ``copy-success`` action
        the requesting surface sends once the copy has landed.

        Returns:
            The payload that was copied

        Raises:
            SinkFailure: if neither clipboard sink accepted the payload
        """
        payload = self.normalizer.format_payload(
            result,
            title=title,
            url=url,
            include_header=self.settings.include_header,
            max_length=self.settings.max_length,
        )
        sink = copy_with_fallback(payload, self.clipboard, self.fallback_clipboard)
        if record_usage:
            self.usage.record_copy(len(payload))
        self.logger.info(f"Copied {len(payload)} characters via {sink.name}")
        return payload

    # ------------------------------------------------------------------
    # Message dispatch
    # ------------------------------------------------------------------

    def handle_message(self, message: Dict[str, Any], document: Optional[Document] = None) -> Dict[str, Any]:
        """
        Handle one ``{"action": ..., ...}`` request.

        Returns ``{"success": True, ...}`` or ``{"error": message}``; never raises.
        """
        action = message.get("action")
        handlers: Dict[str, Callable[[Dict[str, Any], Optional[Document]], Dict[str, Any]]] = {
            "copy-all": self._on_copy_all,
            "copy-main": self._on_copy_main,
            "copy-selection": self._on_copy_selection,
            "remember-selection": self._on_remember_selection,
            "copy-success": self._on_copy_success,
            "get-settings": self._on_get_settings,
            "test-extraction": self._on_test_extraction,
        }
        handler = handlers.get(action)
        if handler is None:
            return {"error": f"Unknown action: {action}"}

        try:
            return handler(message, document)
        except TextgrabError as e:
            self.logger.warning(f"Action '{action}' failed: {e.message}")
            return {"error": e.message}
        except ValueError as e:
            self.logger.warning(f"Action '{action}' rejected: {e}")
            return {"error": str(e)}
        except Exception as e:
            self.logger.exception(f"Action '{action}' crashed: {e}")
            return {"error": "Copy failed, please try again"}

    @staticmethod
    def _require_document(document: Optional[Document]) -> Document:
        if document is None:
            raise ValueError("This action needs a page document")
        return document

    def _copy_reply(self, result: ExtractionResult, document: Optional[Document], url: str, **extra) -> Dict[str, Any]:
        title = document_title(document) if document is not None else ""
        payload = self.copy(result, title=title, url=url, record_usage=False)
        reply = {
            "success": True,
            "textLength": len(payload),
            "truncated": result.truncated,
            "stats": result.stats.to_dict(),
        }
        reply.update({key: value for key, value in extra.items() if value is not None})
        return reply

    def _on_copy_all(self, message: Dict[str, Any], document: Optional[Document]) -> Dict[str, Any]:
        document = self._require_document(document)
        result = self.extract_page(document)
        return self._copy_reply(result, document, message.get("url", ""))

    def _on_copy_main(self, message: Dict[str, Any], document: Optional[Document]) -> Dict[str, Any]:
        document = self._require_document(document)
        result = self.extract_main(document)
        return self._copy_reply(result, document, message.get("url", ""))

    def _on_copy_selection(self, message: Dict[str, Any], document: Optional[Document]) -> Dict[str, Any]:
        """Copy highlighted ``text`` when given, else re-extract the saved selection."""
        url = message.get("url", "")
        if "text" in message:
            result = self.extract_text(message.get("text") or "")
            return self._copy_reply(result, document, url)

        document = self._require_document(document)
        outcome = self.reextract(document, url)
        return self._copy_reply(
            outcome.result,
            document,
            url,
            selector=outcome.locator.selector,
            warning=outcome.warning,
        )

    def _on_remember_selection(self, message: Dict[str, Any], document: Optional[Document]) -> Dict[str, Any]:
        document = self._require_document(document)
        selector = message.get("selector")
        if not selector:
            raise ValueError("remember-selection needs a 'selector' for the chosen element")
        try:
            target = document.select_one(selector)
        except soupsieve.SelectorSyntaxError as e:
            raise ValueError(f"Invalid selector '{selector}': {e}") from e
        if target is None:
            raise ValueError(f"No element matches '{selector}'")
        locator = self.remember_selection(target, document, message.get("url", ""))
        return {"success": True, "locator": locator.to_dict(), "label": locator.label}

    def _on_copy_success(self, message: Dict[str, Any], document: Optional[Document]) -> Dict[str, Any]:
        self.usage.record_copy(int(message.get("textLength", 0)))
        return {"success": True}

    def _on_get_settings(self, message: Dict[str, Any], document: Optional[Document]) -> Dict[str, Any]:
        return {"success": True, "settings": self.settings.to_public_dict()}

    def _on_test_extraction(self, message: Dict[str, Any], document: Optional[Document]) -> Dict[str, Any]:
        return {"success": True, "message": "Extraction is working"}
