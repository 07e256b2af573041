#!/usr/bin/env python3
"""
Command line entry point: crawl URLs and print their most frequent words.
"""

import asyncio
import argparse
import json
import logging
import signal
import sys
from typing import List, Optional

from wordcrawl import __version__
from wordcrawl.pipeline import (
    InvalidRequestError, NoContentError, WordCloudReport, build_word_cloud
)
from wordcrawl.utils.config import load_config
from wordcrawl.utils.logger import setup_logging


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2


class WordCloudApp:
    """Main application class for the word cloud crawler."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._shutdown_event: Optional[asyncio.Event] = None

    def setup_signal_handlers(self):
        """Abandon the run on SIGINT/SIGTERM."""
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self._request_shutdown, signum)
            except NotImplementedError:
                # add_signal_handler is unavailable on Windows event loops
                signal.signal(signum, lambda s, f: self._request_shutdown(s))

    def _request_shutdown(self, signum):
        self.logger.info(f"Received signal {signum}, abandoning crawl...")
        self._shutdown_event.set()

    async def run(self, args: argparse.Namespace) -> int:
        """Run the crawl and print the report."""
        try:
            config = load_config(args.config)
        except (FileNotFoundError, ValueError, TypeError) as e:
            print(f"Configuration error: {e}", file=sys.stderr)
            return EXIT_INVALID

        if args.top_n is not None:
            config.analyzer.top_n = args.top_n
        if args.min_frequency is not None:
            config.analyzer.min_frequency = args.min_frequency
        if args.verbose:
            config.logging.level = 'DEBUG'
        setup_logging(config.logging)

        self._shutdown_event = asyncio.Event()
        self.setup_signal_handlers()

        crawl_task = asyncio.create_task(build_word_cloud(
            args.urls,
            follow_links=args.follow_links,
            max_pages=args.max_pages,
            config=config
        ))
        shutdown_task = asyncio.create_task(self._shutdown_event.wait())

        done, pending = await asyncio.wait(
            [crawl_task, shutdown_task],
            return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        if crawl_task not in done:
            self.logger.info("Crawl abandoned")
            return EXIT_FAILURE

        try:
            report = crawl_task.result()
        except InvalidRequestError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_INVALID
        except NoContentError as e:
            print(f"Error: {e}", file=sys.stderr)
            for error in e.errors:
                print(f"  {error}", file=sys.stderr)
            return EXIT_FAILURE
        except Exception as e:
            self.logger.error(f"Fatal error: {e}", exc_info=True)
            return EXIT_FAILURE

        if args.json:
            print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
        else:
            print_report(report)
        return EXIT_OK


def print_report(report: WordCloudReport, stream=None):
    """Print a ranked word table followed by the crawl summary."""
    stream = stream or sys.stdout
    width = max((len(word.text) for word in report.word_frequencies), default=4)

    for rank, word in enumerate(report.word_frequencies, start=1):
        print(f"{rank:>4}  {word.text:<{width}}  {word.value}", file=stream)

    print(file=stream)
    print(f"Total words: {report.total_words}", file=stream)
    print(f"Processed URLs: {report.processed_urls}", file=stream)
    print(f"Discovered URLs: {report.discovered_urls}", file=stream)
    if report.errors:
        print("Errors:", file=stream)
        for error in report.errors:
            print(f"  {error}", file=stream)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Crawl web pages and rank their most frequent words",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py example.com                      # Analyze one page
  python main.py example.com --follow-links       # Also follow same-site links
  python main.py example.com --no-follow-links    # Override a config that follows links
  python main.py a.com b.com --max-pages 10       # Several sites, bigger budget
  python main.py example.com --json               # JSON report
  python main.py example.com --config my.yaml     # Custom configuration
        """
    )

    parser.add_argument('urls', nargs='+', help='Entry URLs (scheme optional)')
    parser.add_argument('--config', help='Path to a YAML configuration file')
    parser.add_argument('--follow-links', action=argparse.BooleanOptionalAction, default=None,
                        help='Follow same-origin links from fetched pages; overrides crawler.follow_links')
    parser.add_argument('--max-pages', type=int, help='Maximum number of pages to fetch (1-30)')
    parser.add_argument('--top-n', type=int, help='Number of words to report')
    parser.add_argument('--min-frequency', type=int, help='Minimum occurrences for a word')
    parser.add_argument('--json', action='store_true', help='Print the report as JSON')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    parser.add_argument('--version', action='version', version=f'wordcrawl {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    app = WordCloudApp()
    try:
        return asyncio.run(app.run(args))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == '__main__':
    sys.exit(main())
