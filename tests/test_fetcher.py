import asyncio
import logging

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as LocalServer

from wordcrawl.crawler import CrawlOptions, WebFetcher, crawl
from wordcrawl.crawler.fetcher import DEFAULT_USER_AGENT


def make_app(seen_headers=None):
    async def home(request):
        if seen_headers is not None:
            seen_headers.append(dict(request.headers))
        return web.Response(
            text='<html><head><title>Home</title></head><body>Welcome '
                 '<a href="/docs">docs</a> <a href="/logo.png">logo</a> '
                 '<a href="https://elsewhere.org/">away</a></body></html>',
            content_type='text/html'
        )

    async def docs(request):
        return web.Response(text='<html><body>Documentation pages</body></html>',
                            content_type='text/html')

    async def image(request):
        return web.Response(body=b'\x89PNG', content_type='image/png')

    async def missing(request):
        return web.Response(status=404, text='nope')

    async def slow(request):
        await asyncio.sleep(1)
        return web.Response(text='late', content_type='text/html')

    app = web.Application()
    app.router.add_get('/', home)
    app.router.add_get('/docs', docs)
    app.router.add_get('/image', image)
    app.router.add_get('/missing', missing)
    app.router.add_get('/slow', slow)
    return app


async def fetch_paths(paths, request_timeout=5.0, seen_headers=None, **kwargs):
    async with LocalServer(make_app(seen_headers)) as server:
        async with WebFetcher(request_timeout=request_timeout, **kwargs) as fetcher:
            results = [await fetcher.fetch(str(server.make_url(path))) for path in paths]
            return results, fetcher.get_stats()


def test_fetch_success():
    (result,), stats = asyncio.run(fetch_paths(['/']))

    assert result.ok
    assert result.status_code == 200
    assert 'Welcome' in result.content
    assert result.content_type.startswith('text/html')
    assert stats['successful_requests'] == 1


def test_fetch_sends_browser_like_headers():
    seen_headers = []
    asyncio.run(fetch_paths(['/'], seen_headers=seen_headers, accept_language='zh-CN'))

    headers = seen_headers[0]
    assert headers['User-Agent'] == DEFAULT_USER_AGENT
    assert headers['Accept'].startswith('text/html')
    assert headers['Accept-Language'] == 'zh-CN'


def test_fetch_non_2xx_is_an_error():
    (result,), stats = asyncio.run(fetch_paths(['/missing']))

    assert not result.ok
    assert result.status_code == 404
    assert result.error == 'HTTP 404'
    assert stats['failed_requests'] == 1


def test_fetch_non_text_content_is_an_error():
    (result,), _ = asyncio.run(fetch_paths(['/image']))

    assert result.error == 'Non-text content type'
    assert result.content is None


def test_fetch_timeout_is_an_error():
    (result,), _ = asyncio.run(fetch_paths(['/slow'], request_timeout=0.2))

    assert result.error == 'Request timeout'
    assert result.status_code == 0


def test_fetch_connection_error_is_an_error():
    async def scenario():
        async with WebFetcher(request_timeout=2) as fetcher:
            return await fetcher.fetch('http://127.0.0.1:1/')

    result = asyncio.run(scenario())
    assert result.error.startswith('Client error')


def test_fetch_requires_started_session():
    with pytest.raises(RuntimeError):
        asyncio.run(WebFetcher().fetch('http://example.com'))


def test_crawl_against_live_server_follows_same_origin_links():
    async def scenario():
        async with LocalServer(make_app()) as server:
            root = str(server.make_url('/'))
            options = CrawlOptions(follow_links=True, max_pages=5, timeout_ms=2000)
            return root, await crawl([root], options)

    root, result = asyncio.run(scenario())

    assert [o.url for o in result.outcomes] == [root, root + 'docs']
    assert all(o.usable for o in result.outcomes)
    assert 'Documentation pages' in result.outcomes[1].text
    assert result.discovered_count == 2


def test_failed_page_is_reported_once_at_warning(caplog):
    async def scenario():
        async with LocalServer(make_app()) as server:
            urls = [str(server.make_url('/missing')), str(server.make_url('/slow'))]
            options = CrawlOptions(max_pages=5, timeout_ms=200)
            return urls, await crawl(urls, options)

    with caplog.at_level(logging.DEBUG):
        urls, result = asyncio.run(scenario())

    assert [o.usable for o in result.outcomes] == [False, False]
    warnings = [r for r in caplog.records
                if r.name.startswith('wordcrawl') and r.levelno >= logging.WARNING]
    assert sorted(r.url for r in warnings) == sorted(urls)
    assert {r.name for r in warnings} == {'wordcrawl.crawler.scheduler'}
    fetcher_records = [r for r in caplog.records if r.name == 'wordcrawl.crawler.fetcher']
    assert {r.levelno for r in fetcher_records} == {logging.DEBUG}
