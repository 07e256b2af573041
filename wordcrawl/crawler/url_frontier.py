"""
URL Frontier for a single bounded crawl.
Holds the FIFO queue and the seen-set; one instance per crawl invocation.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Optional, Set
from urllib.parse import urlsplit, urlunsplit


def normalize_url(url: str) -> str:
    """Trim a URL and give it an https:// scheme if it has none."""
    url = url.strip()
    if not url.lower().startswith(('http://', 'https://')):
        url = 'https://' + url
    return url


def dedup_key(url: str) -> str:
    """Key under which a URL is recorded as seen; an empty path counts as '/'."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if parts.path:
        return url
    return urlunsplit(parts._replace(path='/'))


@dataclass
class URLTask:
    """Represents a URL crawling task."""
    url: str
    depth: int = 0
    parent_url: Optional[str] = None


class URLFrontier:
    """
    Breadth-first queue of URLs with a seen-set capped by the page budget.

    The seen-set records every URL ever enqueued, so its size is the number
    of URLs discovered during the crawl. Tasks keep the URL as given; only
    the seen-set compares https://host and https://host/ as one page.
    """

    def __init__(self, max_pages: int):
        self.max_pages = max_pages
        self.queue: Deque[URLTask] = deque()
        self.seen: Set[str] = set()
        self.logger = logging.getLogger(__name__)

    def _mark_seen(self, url: str) -> bool:
        """Record a URL; False when it was already seen."""
        key = dedup_key(url)
        if key in self.seen:
            return False
        self.seen.add(key)
        return True

    def add_seed_urls(self, urls: Iterable[str]) -> int:
        """
        Enqueue entry URLs.

        Seeds are normalized and deduplicated but never limited by the page
        budget.

        Returns:
            Number of URLs added
        """
        added_count = 0
        for url in urls:
            normalized = normalize_url(url)
            if not self._mark_seen(normalized):
                continue
            self.queue.append(URLTask(url=normalized, depth=0))
            added_count += 1

        self.logger.debug(f"Added {added_count} seed URLs to frontier")
        return added_count

    def add_discovered_urls(self, urls: Iterable[str], parent: URLTask) -> int:
        """
        Enqueue links found on a page.

        Stops adding once the seen-set holds max_pages URLs.

        Returns:
            Number of URLs added
        """
        added_count = 0
        for url in urls:
            if len(self.seen) >= self.max_pages:
                break
            if not self._mark_seen(url):
                continue
            self.queue.append(URLTask(url=url, depth=parent.depth + 1, parent_url=parent.url))
            added_count += 1

        if added_count:
            self.logger.debug(
                f"Queued {added_count} new URLs at depth {parent.depth + 1} from {parent.url}"
            )
        return added_count

    def next_batch(self, size: int) -> List[URLTask]:
        """Dequeue up to size tasks in FIFO order."""
        batch = []
        while self.queue and len(batch) < size:
            batch.append(self.queue.popleft())
        return batch

    def is_empty(self) -> bool:
        return not self.queue

    @property
    def discovered_count(self) -> int:
        return len(self.seen)

    def get_stats(self) -> dict:
        return {
            'total_queued': len(self.queue),
            'total_seen': len(self.seen)
        }
