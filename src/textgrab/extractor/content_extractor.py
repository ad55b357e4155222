"""
Raw text extraction from document regions.

Works on a copy of the selected subtree, drops non-content subtrees listed in
static denylist tables, and reads the remaining text with line breaks at block
boundaries.
"""

import copy
import logging
import re
from typing import Dict, List, Optional, Union

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

# Tags whose subtrees never carry readable content.
NON_CONTENT_TAGS: Dict[str, str] = {
    "script": "executable code",
    "style": "stylesheet",
    "noscript": "script fallback markup",
    "template": "inert template",
    "object": "embedded object",
    "embed": "embedded object",
    "iframe": "embedded document",
    "svg": "vector graphics",
    "canvas": "bitmap drawing surface",
}

# Class/id fragments that mark advertisement containers.
AD_PATTERNS: Dict[str, str] = {
    r"(?:^|[\s_-])ads?(?:[\s_-]|$)": "ad slot",
    r"advert": "advertisement",
    r"sponsor": "sponsored content",
    r"promo": "promotional content",
    r"adsbygoogle|google_ads": "ad network container",
    r"doubleclick": "ad network container",
    r"banner-ad": "banner advertisement",
}

# Inline styles that hide an element outright.
HIDDEN_STYLE_PATTERNS: Dict[str, str] = {
    r"display\s*:\s*none": "display none",
    r"visibility\s*:\s*hidden": "visibility hidden",
}

# Page chrome removed for whole-page extraction only.
PAGE_CHROME_SELECTORS: List[str] = [
    "head",
    "nav",
    "header",
    "footer",
    "aside",
    ".advertisement",
    ".ads",
    ".sidebar",
    ".menu",
    '[role="banner"]',
    '[role="navigation"]',
    '[role="complementary"]',
]

# Candidates for the main content region, most specific first.
MAIN_CONTENT_SELECTORS: List[str] = [
    "main",
    "article",
    '[role="main"]',
    ".main-content",
    "#content",
    ".content",
    ".post",
    ".entry",
]

BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "body", "dd", "details", "dialog",
    "div", "dl", "dt", "fieldset", "figcaption", "figure", "footer", "form",
    "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "li", "main", "nav",
    "ol", "p", "pre", "section", "summary", "table", "tbody", "thead", "tfoot",
    "tr", "ul",
})
PARAGRAPH_TAGS = frozenset({
    "article", "blockquote", "h1", "h2", "h3", "h4", "h5", "h6", "p", "pre",
    "section", "table", "ul", "ol", "dl", "figure",
})
CELL_TAGS = frozenset({"td", "th"})

_AD_REGEXES = [re.compile(pattern, re.IGNORECASE) for pattern in AD_PATTERNS]
_HIDDEN_STYLE_REGEXES = [re.compile(pattern, re.IGNORECASE) for pattern in HIDDEN_STYLE_PATTERNS]

_BLOCK_END = object()
_PARAGRAPH_END = object()


def squeeze_whitespace(text: str) -> str:
    """
    Conservative cleanup that keeps paragraph boundaries: horizontal runs
    become one space, lines are trimmed, 3+ newlines become two.
    """
    if not text:
        return ""
    text = re.sub(r"[^\S\n]+", " ", text)
    lines = [line.strip() for line in text.split("\n")]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def removal_reason(node: Tag) -> Optional[str]:
    """Why ``node`` is excluded from extracted content, or None to keep it."""
    if node.name in NON_CONTENT_TAGS:
        return NON_CONTENT_TAGS[node.name]

    if node.has_attr("hidden"):
        return "hidden attribute"
    if str(node.get("aria-hidden", "")).lower() == "true":
        return "aria-hidden"

    style = node.get("style")
    if style:
        for regex, reason in zip(_HIDDEN_STYLE_REGEXES, HIDDEN_STYLE_PATTERNS.values()):
            if regex.search(style):
                return reason

    classes = node.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    names = " ".join(classes + [node.get("id") or ""]).strip()
    if names:
        for regex, reason in zip(_AD_REGEXES, AD_PATTERNS.values()):
            if regex.search(names):
                return reason
    return None


class _TextBuffer:
    """Accumulates text while tracking how many newlines it currently ends with."""

    def __init__(self):
        self.parts: List[str] = []
        self.trailing_newlines = 2

    def write(self, text: str) -> None:
        if not text:
            return
        self.parts.append(text)
        if text.strip():
            tail = text[len(text.rstrip()):]
            self.trailing_newlines = tail.count("\n")
        else:
            self.trailing_newlines += text.count("\n")

    def ensure_newlines(self, count: int) -> None:
        if self.trailing_newlines < count:
            self.write("\n" * (count - self.trailing_newlines))

    def getvalue(self) -> str:
        return "".join(self.parts)


class ContentExtractor:
    """Reads the textual content of a region without touching the live document."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def extract(self, node: Tag) -> str:
        """
        Extract raw text from ``node``.

        Text hidden only by layout (collapsed sections and the like) is kept;
        only denylisted subtrees are dropped.
        """
        if isinstance(node, BeautifulSoup):
            return self.extract_page(node)
        clone = copy.copy(node)
        removed = self.strip_non_content(clone)
        if removed:
            self.logger.debug(f"Removed {removed} non-content subtrees from <{node.name}>")
        return squeeze_whitespace(self.read_text(clone))

    def extract_page(self, document: BeautifulSoup) -> str:
        """Extract the whole page minus navigation, headers, footers and sidebars."""
        clone = copy.copy(document)
        for selector in PAGE_CHROME_SELECTORS:
            for tag in clone.select(selector):
                tag.extract()
        body = clone.body or clone
        self.strip_non_content(body)
        return squeeze_whitespace(self.read_text(body))

    def find_main_content(self, document: Union[BeautifulSoup, Tag]) -> Optional[Tag]:
        """First element that looks like the page's main content, if any."""
        for selector in MAIN_CONTENT_SELECTORS:
            element = document.select_one(selector)
            if element is not None:
                self.logger.debug(f"Main content found via '{selector}'")
                return element
        return None

    def strip_non_content(self, root: Tag) -> int:
        """Detach denylisted descendants of ``root`` in place. Returns how many were removed."""
        removed = 0
        for tag in root.find_all(True):
            reason = removal_reason(tag)
            if reason:
                self.logger.debug(f"Dropping <{tag.name}>: {reason}")
                tag.extract()
                removed += 1
        return removed

    @staticmethod
    def read_text(root: Tag) -> str:
        """Complete text content with line breaks at block-level boundaries."""
        buffer = _TextBuffer()
        stack: list = [root]
        while stack:
            item = stack.pop()
            if item is _BLOCK_END:
                buffer.ensure_newlines(1)
                continue
            if item is _PARAGRAPH_END:
                buffer.ensure_newlines(2)
                continue
            if isinstance(item, NavigableString):
                if not isinstance(item, PreformattedString):
                    buffer.write(str(item))
                continue
            if not isinstance(item, Tag):
                continue

            if item.name == "br":
                buffer.write("\n")
                continue
            if item.name in CELL_TAGS:
                buffer.write(" ")
            elif item.name in PARAGRAPH_TAGS:
                buffer.ensure_newlines(2)
                stack.append(_PARAGRAPH_END)
            elif item.name in BLOCK_TAGS:
                buffer.ensure_newlines(1)
                stack.append(_BLOCK_END)
            stack.extend(reversed(list(item.children)))
        return buffer.getvalue()
