import asyncio

from wordcrawl.crawler import FetchResult


def html_page(body: str = "", links=(), title: str = "Page") -> str:
    anchors = "".join(f'<a href="{href}">link</a>' for href in links)
    return f"<html><head><title>{title}</title></head><body><p>{body}</p>{anchors}</body></html>"


class FakeFetcher:
    """In-memory fetcher: serves canned HTML and records every request."""

    def __init__(self, pages=None, errors=None, delays=None):
        self.pages = pages or {}
        self.errors = errors or {}
        self.delays = delays or {}
        self.calls = []

    async def fetch(self, url: str) -> FetchResult:
        self.calls.append(url)
        delay = self.delays.get(url)
        if delay:
            await asyncio.sleep(delay)

        if url in self.errors:
            return FetchResult(url=url, status_code=0, error=self.errors[url])
        if url not in self.pages:
            return FetchResult(url=url, status_code=404, error="HTTP 404")
        return FetchResult(url=url, status_code=200, content=self.pages[url],
                           content_type="text/html")
