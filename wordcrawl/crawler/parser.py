"""
HTML parsing: reducing a page to its text and harvesting same-origin links.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from urllib.parse import urljoin, urlparse, urlunparse, ParseResult
from bs4 import BeautifulSoup


DEFAULT_PORTS = {'http': 80, 'https': 443}

SKIPPED_SCHEMES = ('mailto:', 'tel:', 'javascript:')

# Images, PDF, archives, audio and video are never crawled as pages
ASSET_EXTENSION_PATTERN = re.compile(
    r'\.(png|jpe?g|gif|bmp|webp|svg|ico|tiff?'
    r'|pdf'
    r'|zip|rar|7z|tar|gz|tgz|bz2|xz'
    r'|mp3|wav|ogg|flac|aac|m4a'
    r'|mp4|webm|avi|mov|wmv|flv|mkv|m4v)$',
    re.IGNORECASE
)


@dataclass
class LinkExtraction:
    """Outcome of harvesting links from one page."""
    url: str
    links: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, url: str, reason: str) -> 'LinkExtraction':
        return cls(url=url, links=[], error=reason)


class ContentParser:
    """
    Parses HTML content into plain text and same-origin links.
    """

    def __init__(self, features: str = 'lxml'):
        self.features = features
        self.logger = logging.getLogger(__name__)
        self.whitespace_pattern = re.compile(r'\s+')

    def _soup(self, html_content: str) -> BeautifulSoup:
        return BeautifulSoup(html_content, self.features)

    def extract_text(self, html_content: str) -> str:
        """
        Reduce a page to title, meta description and body text.

        Script, style, noscript and iframe elements are removed first.
        """
        soup = self._soup(html_content)

        for element in soup(['script', 'style', 'noscript', 'iframe']):
            element.decompose()

        title_tag = soup.find('title')
        title = title_tag.get_text() if title_tag else ''

        meta_desc = soup.find('meta', attrs={'name': 'description'})
        meta_description = meta_desc.get('content', '') if meta_desc else ''

        body = soup.find('body')
        body_text = body.get_text(separator=' ') if body else ''

        full_text = ' '.join([title, meta_description, body_text])
        return self.whitespace_pattern.sub(' ', full_text).strip()

    def extract_links(self, html_content: str, base_url: str) -> LinkExtraction:
        """
        Collect same-origin page links from HTML content.

        Args:
            html_content: Raw HTML of the page
            base_url: URL of the page, used to resolve relative links

        Returns:
            LinkExtraction with links in document order, or with an error
            when the page itself cannot be processed
        """
        try:
            base_origin = self._origin(urlparse(base_url))
        except ValueError as e:
            return LinkExtraction.failed(base_url, f"Invalid base URL: {e}")

        try:
            soup = self._soup(html_content)
        except Exception as e:
            self.logger.debug(f"Could not parse HTML from {base_url}: {e}")
            return LinkExtraction.failed(base_url, f"Unparseable HTML: {e}")

        links = {}
        for anchor in soup.find_all('a', href=True):
            link = self._resolve_link(anchor['href'], base_url, base_origin)
            if link:
                links[link] = None

        self.logger.debug(f"Extracted {len(links)} same-origin links from {base_url}")
        return LinkExtraction(url=base_url, links=list(links))

    def _resolve_link(self, href: str, base_url: str,
                      base_origin: Tuple[str, str, int]) -> Optional[str]:
        """Resolve one href, or return None if it should not be followed."""
        href = href.strip()
        if not href or href.startswith('#'):
            return None
        if href.lower().startswith(SKIPPED_SCHEMES):
            return None

        try:
            parsed = urlparse(urljoin(base_url, href))
            if self._origin(parsed) != base_origin:
                return None
        except ValueError:
            return None

        if ASSET_EXTENSION_PATTERN.search(parsed.path):
            return None

        return self._normalize_url(parsed)

    def _origin(self, parsed: ParseResult) -> Tuple[str, str, int]:
        """Scheme, host and port of a URL; default ports are made explicit."""
        scheme = parsed.scheme.lower()
        if scheme not in DEFAULT_PORTS or not parsed.hostname:
            raise ValueError(f"Not an http(s) URL: {parsed.geturl()}")
        return scheme, parsed.hostname, parsed.port or DEFAULT_PORTS[scheme]

    def _normalize_url(self, parsed: ParseResult) -> str:
        """Normalize URL by lowercasing scheme and host and removing the fragment."""
        return urlunparse((
            parsed.scheme.lower(),
            parsed.netloc.lower(),
            parsed.path,
            parsed.params,
            parsed.query,
            ''  # Remove fragment
        ))
