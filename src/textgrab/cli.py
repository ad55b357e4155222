"""
Command-line interface for textgrab.

Provides:
- Remembering a region of a saved HTML page
- Re-extracting the remembered region from a newer copy of the page
- One-off extraction of a single element without remembering it
- Whole-page and main-content extraction
- Locator store and usage statistics maintenance
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from bs4 import BeautifulSoup

from .config import Settings
from .errors import TextgrabError
from .extractor import ExtractionResult
from .services import ExtractionService, document_title
from .store import scope_for_url


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("textgrab").setLevel(level)
    return logging.getLogger(__name__)


def load_document(path: str) -> BeautifulSoup:
    html = Path(path).read_text(encoding="utf-8", errors="replace")
    return BeautifulSoup(html, "html.parser")


def build_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if args.db:
        settings.store_path = args.db
    if args.max_length is not None:
        settings.max_length = args.max_length
    if args.no_header:
        settings.include_header = False
    return settings


def emit_result(
    service: ExtractionService,
    result: ExtractionResult,
    document: BeautifulSoup,
    args: argparse.Namespace,
) -> None:
    """Copy or print an extraction result according to the CLI flags."""
    url = getattr(args, "url", "") or ""
    title = document_title(document)
    if args.copy:
        payload = service.copy(result, title=title, url=url)
        print(f"Copied {len(payload)} characters", file=sys.stderr)
        return

    if args.format == "json":
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    print(service.normalizer.format_payload(
        result,
        title=title,
        url=url,
        include_header=service.settings.include_header,
        max_length=service.settings.max_length,
    ))


# ============================================================================
# Commands
# ============================================================================

def cmd_remember(service: ExtractionService, args: argparse.Namespace) -> None:
    """Remember the element matching --select as this site's region."""
    document = load_document(args.file)
    target = document.select_one(args.select)
    if target is None:
        raise TextgrabError(f"No element matches '{args.select}'")

    locator = service.remember_selection(target, document, args.url)
    if args.format == "json":
        print(json.dumps(locator.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(f"Scope:    {locator.scope}")
        print(f"Locator:  {locator.selector}")
        print(f"Label:    {locator.label}")
        if locator.fallback:
            print("Note:     positional fallback; may break if the page layout changes")


def cmd_select(service: ExtractionService, args: argparse.Namespace) -> None:
    """Extract the element matching --select once, without remembering it."""
    document = load_document(args.file)
    target = document.select_one(args.select)
    if target is None:
        raise TextgrabError(f"No element matches '{args.select}'")
    emit_result(service, service.extract_node(target), document, args)


def cmd_extract(service: ExtractionService, args: argparse.Namespace) -> None:
    """Re-extract the remembered region of a site."""
    document = load_document(args.file)
    outcome = service.reextract(document, args.url, strict=args.strict)
    if outcome.warning:
        print(f"Warning: {outcome.warning}", file=sys.stderr)
    emit_result(service, outcome.result, document, args)


def cmd_page(service: ExtractionService, args: argparse.Namespace) -> None:
    """Extract the full page text."""
    document = load_document(args.file)
    emit_result(service, service.extract_page(document), document, args)


def cmd_main(service: ExtractionService, args: argparse.Namespace) -> None:
    """Extract the page's main content."""
    document = load_document(args.file)
    emit_result(service, service.extract_main(document), document, args)


def cmd_show(service: ExtractionService, args: argparse.Namespace) -> None:
    """Show the stored locator of a site."""
    locator = service.recall(args.url)
    if locator is None:
        print(f"No saved selection for {scope_for_url(args.url)}")
        return
    if args.format == "json":
        print(json.dumps(locator.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(f"{locator.scope}: {locator.selector}")
        print(f"  {locator.label}")


def cmd_forget(service: ExtractionService, args: argparse.Namespace) -> None:
    """Delete the stored locator of a site."""
    if service.forget(args.url):
        print(f"Forgot selection for {scope_for_url(args.url)}")
    else:
        print(f"No saved selection for {scope_for_url(args.url)}")


def cmd_stats(service: ExtractionService, args: argparse.Namespace) -> None:
    """Show usage and store statistics."""
    stats = {
        "usage": service.usage.get_stats(),
        "locators": service.store.get_stats(),
    }
    if args.format == "json":
        print(json.dumps(stats, indent=2))
        return
    usage = stats["usage"]
    print(f"Total copies:    {usage['total_copies']}")
    print(f"Last copy:       {usage['last_copy_time'] or '-'}")
    for day, copies in usage["daily_usage"].items():
        print(f"  {day}: {copies}")
    locators = stats["locators"]
    print(f"Saved locators:  {locators['valid_entries']} valid, {locators['expired_entries']} expired")


def cmd_cleanup(service: ExtractionService, args: argparse.Namespace) -> None:
    """Evict expired locators."""
    removed = service.store.cleanup_expired()
    print(f"Removed {removed} expired locators")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="textgrab",
        description="Remember page regions and extract AI-ready text from HTML",
    )
    parser.add_argument("--db", help="Path to the SQLite store (default: TEXTGRAB_STORE_PATH)")
    parser.add_argument("--max-length", type=int, help="Maximum output length in characters")
    parser.add_argument("--no-header", action="store_true", help="Omit the metadata header")
    parser.add_argument("--copy", action="store_true", help="Copy to the clipboard instead of printing")
    parser.add_argument("--format", choices=["text", "json"], default="text", help="Output format")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    remember = subparsers.add_parser("remember", help="Remember a region of a page")
    remember.add_argument("file", help="Saved HTML file")
    remember.add_argument("--url", required=True, help="URL the page was loaded from")
    remember.add_argument("--select", required=True, help="CSS selector of the chosen element")

    extract = subparsers.add_parser("extract", help="Re-extract the remembered region")
    extract.add_argument("file", help="Saved HTML file")
    extract.add_argument("--url", required=True, help="URL the page was loaded from")
    extract.add_argument("--strict", action="store_true", help="Fail when several elements match")

    page = subparsers.add_parser("page", help="Extract the full page")
    page.add_argument("file", help="Saved HTML file")
    page.add_argument("--url", default="", help="Source URL for the header")

    select = subparsers.add_parser("select", help="Extract one element without remembering it")
    select.add_argument("file", help="Saved HTML file")
    select.add_argument("--select", required=True, help="CSS selector of the element")
    select.add_argument("--url", default="", help="Source URL for the header")

    main_cmd = subparsers.add_parser("main", help="Extract the main content")
    main_cmd.add_argument("file", help="Saved HTML file")
    main_cmd.add_argument("--url", default="", help="Source URL for the header")

    show = subparsers.add_parser("show", help="Show the remembered locator")
    show.add_argument("--url", required=True)

    forget = subparsers.add_parser("forget", help="Forget the remembered locator")
    forget.add_argument("--url", required=True)

    subparsers.add_parser("stats", help="Usage statistics")
    subparsers.add_parser("cleanup", help="Evict expired locators")

    return parser


def main(argv=None) -> None:
    """Main entry point for the textgrab CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = build_settings(args)
    verbose = args.verbose or settings.debug
    logger = setup_logging(verbose)

    commands = {
        "remember": cmd_remember,
        "extract": cmd_extract,
        "select": cmd_select,
        "page": cmd_page,
        "main": cmd_main,
        "show": cmd_show,
        "forget": cmd_forget,
        "stats": cmd_stats,
        "cleanup": cmd_cleanup,
    }

    handler = commands.get(args.command)
    if not handler:
        parser.print_help()
        sys.exit(1)

    service = ExtractionService(settings=settings)
    try:
        handler(service, args)
    except TextgrabError as e:
        logger.error(e.message)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Command failed: {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
