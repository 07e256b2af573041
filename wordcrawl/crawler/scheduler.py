"""
Crawler scheduler: bounded breadth-first fetch-and-discover over a page budget.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .url_frontier import URLFrontier, URLTask
from .fetcher import WebFetcher
from .parser import ContentParser, LinkExtraction
from ..utils.logger import get_crawler_logger


MAX_PAGES_LIMIT = 30
MAX_CONCURRENT_FETCHES_LIMIT = 6


def _clamp(value: int, lower: int, upper: int) -> int:
    return min(max(int(value), lower), upper)


@dataclass
class CrawlOptions:
    """
    Options for one crawl.

    max_pages is clamped to 1..30 and max_concurrent_fetches to 1..6 on
    construction. With refetch_for_links the page is requested a second
    time for link discovery instead of reusing the markup of the first
    fetch.
    """
    follow_links: bool = False
    max_pages: int = 5
    max_concurrent_fetches: int = 4
    timeout_ms: int = 10000
    refetch_for_links: bool = False

    def __post_init__(self):
        self.max_pages = _clamp(self.max_pages, 1, MAX_PAGES_LIMIT)
        self.max_concurrent_fetches = _clamp(
            self.max_concurrent_fetches, 1, MAX_CONCURRENT_FETCHES_LIMIT
        )
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


@dataclass
class FetchOutcome:
    """Text retrieved from one URL, or why it could not be retrieved."""
    url: str
    text: str = ''
    error: Optional[str] = None

    @property
    def usable(self) -> bool:
        return not self.error and bool(self.text)


@dataclass
class CrawlResult:
    """Aggregate of a crawl run."""
    outcomes: List[FetchOutcome] = field(default_factory=list)
    discovered_count: int = 0

    @property
    def usable_outcomes(self) -> List[FetchOutcome]:
        return [outcome for outcome in self.outcomes if outcome.usable]

    @property
    def failed_outcomes(self) -> List[FetchOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.usable]


@dataclass
class CrawlStats:
    """Statistics for crawl operations."""
    start_time: float
    urls_crawled: int = 0
    errors: int = 0
    batches: int = 0
    discovery_failures: int = 0

    @property
    def elapsed_time(self) -> float:
        return time.time() - self.start_time


class CrawlerScheduler:
    """
    Runs a crawl: fetches batches of URLs concurrently and, when link
    following is on, queues same-origin links found on usable pages.

    The frontier and outcome list are created fresh by every run() call.
    Concurrency only exists while a batch of fetches is awaited, so the
    frontier is never touched by two tasks at once.
    """

    def __init__(self, options: CrawlOptions, fetcher, parser: Optional[ContentParser] = None):
        self.options = options
        self.fetcher = fetcher
        self.parser = parser or ContentParser()
        self.logger = get_crawler_logger(__name__)

    async def run(self, entry_urls: Sequence[str]) -> CrawlResult:
        """
        Crawl from the given entry URLs.

        Args:
            entry_urls: Bare hosts/paths or scheme-qualified URLs

        Returns:
            CrawlResult with at most max_pages outcomes
        """
        if not entry_urls:
            raise ValueError("At least one entry URL must be provided")

        options = self.options
        frontier = URLFrontier(options.max_pages)
        frontier.add_seed_urls(entry_urls)
        outcomes: List[FetchOutcome] = []
        stats = CrawlStats(start_time=time.time())

        while not frontier.is_empty() and len(outcomes) < options.max_pages:
            batch_size = min(options.max_concurrent_fetches, options.max_pages - len(outcomes))
            batch = frontier.next_batch(batch_size)
            stats.batches += 1

            batch_results = await self._fetch_batch(batch)
            for task, outcome, _ in batch_results:
                stats.urls_crawled += 1
                if not outcome.usable:
                    stats.errors += 1
                    self.logger.log_url_event(logging.WARNING, task.url,
                                              f"Failed to fetch {task.url}: {outcome.error}")
            outcomes.extend(outcome for _, outcome, _ in batch_results)

            if not options.follow_links:
                continue

            for task, outcome, html in batch_results:
                if len(outcomes) >= options.max_pages:
                    break
                if not outcome.usable:
                    continue

                extraction = await self._discover_links(task, html)
                if not extraction.ok:
                    stats.discovery_failures += 1
                    self.logger.debug(f"Link discovery failed for {task.url}: {extraction.error}")
                    continue
                frontier.add_discovered_urls(extraction.links, task)

        self._log_final_stats(stats, frontier)
        return CrawlResult(
            outcomes=outcomes[:options.max_pages],
            discovered_count=frontier.discovered_count
        )

    async def _fetch_batch(self, batch: List[URLTask]) -> List[Tuple[URLTask, FetchOutcome, Optional[str]]]:
        """Fetch a batch concurrently; results are in completion order."""
        tasks = [asyncio.create_task(self._scrape(task)) for task in batch]
        results = []
        for future in asyncio.as_completed(tasks):
            results.append(await future)
        return results

    async def _scrape(self, task: URLTask) -> Tuple[URLTask, FetchOutcome, Optional[str]]:
        """Fetch one page and reduce it to text; the raw HTML is returned alongside."""
        result = await self.fetcher.fetch(task.url)
        if result.error or result.content is None:
            return task, FetchOutcome(url=task.url, error=result.error or "Empty response"), None

        try:
            text = self.parser.extract_text(result.content)
        except Exception as e:
            self.logger.debug(f"Could not extract text from {task.url}: {e}")
            return task, FetchOutcome(url=task.url, error=f"Unparseable response: {e}"), None

        if not text:
            return task, FetchOutcome(url=task.url, error="No text content"), None
        return task, FetchOutcome(url=task.url, text=text), result.content

    async def _discover_links(self, task: URLTask, html: Optional[str]) -> LinkExtraction:
        """Harvest links from a usable page, re-fetching it when configured to."""
        if self.options.refetch_for_links or html is None:
            result = await self.fetcher.fetch(task.url)
            if result.error or result.content is None:
                return LinkExtraction.failed(task.url, result.error or "Empty response")
            html = result.content
        return self.parser.extract_links(html, task.url)

    def _log_final_stats(self, stats: CrawlStats, frontier: URLFrontier):
        """Log final crawl statistics."""
        self.logger.log_crawler_stat('urls_crawled', stats.urls_crawled)
        self.logger.log_crawler_stat('errors', stats.errors)
        self.logger.log_crawler_stat('discovered_urls', frontier.discovered_count)
        self.logger.info(
            f"Crawl finished: batches={stats.batches}, "
            f"discovery_failures={stats.discovery_failures}, "
            f"remaining_in_queue={frontier.get_stats()['total_queued']}, "
            f"time={stats.elapsed_time:.2f}s"
        )


async def crawl(entry_urls: Sequence[str], options: Optional[CrawlOptions] = None,
                fetcher=None, parser: Optional[ContentParser] = None,
                user_agent: Optional[str] = None, accept: Optional[str] = None,
                accept_language: Optional[str] = None) -> CrawlResult:
    """
    Crawl entry URLs and return every page outcome.

    A WebFetcher is created and closed around the crawl unless one is
    passed in. Page failures are reported in the outcomes, never raised.
    """
    options = options or CrawlOptions()

    if fetcher is not None:
        return await CrawlerScheduler(options, fetcher, parser).run(entry_urls)

    header_overrides = {
        key: value for key, value in (
            ('user_agent', user_agent), ('accept', accept), ('accept_language', accept_language)
        ) if value
    }
    async with WebFetcher(
        request_timeout=options.timeout_seconds,
        max_concurrent_requests=options.max_concurrent_fetches,
        **header_overrides
    ) as web_fetcher:
        result = await CrawlerScheduler(options, web_fetcher, parser).run(entry_urls)
        logging.getLogger(__name__).debug(f"Fetcher stats: {web_fetcher.get_stats()}")
        return result
