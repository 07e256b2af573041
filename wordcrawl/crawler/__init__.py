"""
Web crawler core components.
"""

from .url_frontier import URLFrontier, URLTask, normalize_url
from .fetcher import WebFetcher, FetchResult
from .parser import ContentParser, LinkExtraction
from .scheduler import CrawlerScheduler, CrawlOptions, CrawlResult, FetchOutcome, crawl

__all__ = [
    'URLFrontier', 'URLTask', 'normalize_url',
    'WebFetcher', 'FetchResult',
    'ContentParser', 'LinkExtraction',
    'CrawlerScheduler', 'CrawlOptions', 'CrawlResult', 'FetchOutcome', 'crawl'
]
