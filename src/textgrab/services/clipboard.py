"""
Clipboard sinks for copied text.

The primary sink is the system clipboard; when it fails the caller retries
once through a synchronous fallback sink before reporting failure.
"""

import logging
import shutil
import subprocess
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, TextIO

from ..errors import SinkFailure


class ClipboardSink(ABC):
    """Destination for copied text."""

    name = "sink"

    @abstractmethod
    def write(self, text: str) -> bool:
        """
        Deliver ``text``.

        Returns:
            True on success, False if the sink could not accept the text
        """
        pass


class MemoryClipboard(ClipboardSink):
    """In-process clipboard, mainly for tests and embedding."""

    name = "memory"

    def __init__(self, fail: bool = False):
        self.contents: Optional[str] = None
        self.fail = fail
        self.writes = 0

    def write(self, text: str) -> bool:
        self.writes += 1
        if self.fail:
            return False
        self.contents = text
        return True


class CommandClipboard(ClipboardSink):
    """Pipes text into the platform's clipboard utility."""

    name = "system clipboard"

    CANDIDATES: List[List[str]] = [
        ["pbcopy"],
        ["wl-copy"],
        ["xclip", "-selection", "clipboard"],
        ["xsel", "--clipboard", "--input"],
        ["clip"],
    ]

    def __init__(self, command: Optional[List[str]] = None, timeout: float = 5.0):
        self.logger = logging.getLogger(__name__)
        self.command = command or self._detect_command()
        self.timeout = timeout

    def _detect_command(self) -> Optional[List[str]]:
        for candidate in self.CANDIDATES:
            if shutil.which(candidate[0]):
                return candidate
        return None

    def write(self, text: str) -> bool:
        if not self.command:
            self.logger.warning("No clipboard utility found on PATH")
            return False
        try:
            subprocess.run(
                self.command,
                input=text.encode("utf-8"),
                check=True,
                timeout=self.timeout,
            )
            return True
        except (OSError, subprocess.SubprocessError) as e:
            self.logger.warning(f"Clipboard command {self.command[0]} failed: {e}")
            return False


class FileSink(ClipboardSink):
    """Synchronous fallback: writes the text to a file or stream."""

    name = "file"

    def __init__(self, path: Optional[str] = None, stream: Optional[TextIO] = None):
        self.logger = logging.getLogger(__name__)
        self.path = path
        self.stream = stream

    def write(self, text: str) -> bool:
        try:
            if self.path:
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
                Path(self.path).write_text(text, encoding="utf-8")
            else:
                stream = self.stream or sys.stdout
                stream.write(text)
                if not text.endswith("\n"):
                    stream.write("\n")
                stream.flush()
            return True
        except OSError as e:
            self.logger.warning(f"Fallback write failed: {e}")
            return False


def copy_with_fallback(
    text: str,
    primary: ClipboardSink,
    fallback: Optional[ClipboardSink] = None,
) -> ClipboardSink:
    """
    Write ``text`` to ``primary``, trying ``fallback`` once if that fails.

    Returns:
        The sink that accepted the text

    Raises:
        SinkFailure: if no sink accepted the text
    """
    logger = logging.getLogger(__name__)
    if primary.write(text):
        return primary

    logger.warning(f"{primary.name} rejected {len(text)} characters")
    if fallback is not None:
        if fallback.write(text):
            logger.info(f"Copied through fallback sink ({fallback.name})")
            return fallback
        logger.error(f"Fallback sink ({fallback.name}) also failed")
    raise SinkFailure()
