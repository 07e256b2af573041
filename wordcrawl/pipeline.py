"""
Word cloud pipeline: validate the request, crawl, and rank the words found.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .analysis import WordFrequency, analyze, load_stopwords, default_stopwords
from .crawler import CrawlResult, crawl
from .utils.config import Config


class PipelineError(Exception):
    """Base error for requests the pipeline cannot serve."""
    pass


class InvalidRequestError(PipelineError):
    """The request itself is malformed."""
    pass


class NoContentError(PipelineError):
    """No URL produced usable text."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


@dataclass
class WordCloudReport:
    """Ranked words plus a summary of the crawl that produced them."""
    word_frequencies: List[WordFrequency]
    total_words: int
    processed_urls: int
    discovered_urls: int
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {
            'wordFrequencies': [word.to_dict() for word in self.word_frequencies],
            'totalWords': self.total_words,
            'processedUrls': self.processed_urls,
            'discoveredUrls': self.discovered_urls,
        }
        if self.errors:
            data['errors'] = list(self.errors)
        return data


logger = logging.getLogger(__name__)


def validate_urls(urls, max_entry_urls: int) -> List[str]:
    """Check the shape of the requested URL list."""
    if not urls or not isinstance(urls, (list, tuple)):
        raise InvalidRequestError("Please provide a non-empty list of URLs")
    if not all(isinstance(url, str) and url.strip() for url in urls):
        raise InvalidRequestError("Every URL must be a non-empty string")
    if len(urls) > max_entry_urls:
        raise InvalidRequestError(f"At most {max_entry_urls} URLs can be analyzed at once")
    return list(urls)


def partition_outcomes(result: CrawlResult):
    """Split a crawl into usable page texts and '<url>: <reason>' error lines."""
    texts = []
    errors = []
    for outcome in result.outcomes:
        if outcome.usable:
            texts.append(outcome.text)
        else:
            errors.append(f"{outcome.url}: {outcome.error or 'No content retrieved'}")
    return texts, errors


async def build_word_cloud(urls: Sequence[str], follow_links: Optional[bool] = None,
                           max_pages: Optional[int] = None,
                           config: Optional[Config] = None,
                           fetcher=None) -> WordCloudReport:
    """
    Crawl the given URLs and rank the words found across all pages.

    Args:
        urls: Entry URLs, bare hosts allowed
        follow_links: Follow same-origin links; the configured value when None
        max_pages: Page budget; the configured value when None
        config: Loaded configuration, defaults when omitted
        fetcher: Optional fetcher to crawl with instead of a new WebFetcher

    Raises:
        InvalidRequestError: The URL list is empty, malformed or too long
        NoContentError: None of the pages yielded text
    """
    config = config or Config()
    entry_urls = validate_urls(urls, config.crawler.max_entry_urls)
    options = config.crawl_options(follow_links=follow_links, max_pages=max_pages)

    logger.info(f"Crawling {len(entry_urls)} entry URLs (follow_links={options.follow_links}, "
                f"max_pages={options.max_pages})")
    result = await crawl(
        entry_urls, options, fetcher=fetcher,
        user_agent=config.crawler.user_agent,
        accept=config.crawler.accept,
        accept_language=config.crawler.accept_language
    )

    texts, errors = partition_outcomes(result)
    if not texts:
        logger.error(f"No content retrieved from any of {len(result.outcomes)} pages")
        raise NoContentError("Could not retrieve content from any URL", errors)

    analyzer = config.analyzer
    if analyzer.stopwords_file or analyzer.extra_stopwords:
        stopwords = load_stopwords(analyzer.stopwords_file, analyzer.extra_stopwords)
    else:
        stopwords = default_stopwords()

    word_frequencies = analyze(texts, analyzer.top_n, analyzer.min_frequency, stopwords)
    logger.info(f"Ranked {len(word_frequencies)} words from {len(texts)} pages")

    return WordCloudReport(
        word_frequencies=word_frequencies,
        total_words=sum(word.value for word in word_frequencies),
        processed_urls=len(texts),
        discovered_urls=result.discovered_count,
        errors=errors
    )
