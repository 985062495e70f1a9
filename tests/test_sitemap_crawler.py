# Test-suite for the sitemap crawler, served by a local aiohttp app
from __future__ import annotations

from collections import Counter
from collections.abc import AsyncIterator
from typing import Dict

import pytest
import pytest_asyncio
from aiohttp import web

from conftest import serve_app
from seoq.crawler.models import SitemapEntry
from seoq.crawler.sitemap import (
    SitemapCrawler,
    analyze_sitemap,
    normalize_document_url,
    resolve_sitemap_url,
    split_location,
)
from seoq.errors import FetchErrorKind, SitemapFetchError, SitemapParseError, SitemapSchemaError

NS = 'xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"'


# --------------------------------------------------------------------------- #
#                               Helper utilities                              #
# --------------------------------------------------------------------------- #


def urlset(*urls: str, priority: bool = False) -> str:
    body = "".join(
        f"<url><loc>{u}</loc>{f'<priority>0.{i + 1}</priority>' if priority else ''}</url>"
        for i, u in enumerate(urls)
    )
    return f'<?xml version="1.0" encoding="UTF-8"?><urlset {NS}>{body}</urlset>'


def sitemapindex(*locations: str) -> str:
    body = "".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locations)
    return f'<?xml version="1.0" encoding="UTF-8"?><sitemapindex {NS}>{body}</sitemapindex>'


class SitemapSite:
    """Serves XML documents by path and counts every request."""

    def __init__(self) -> None:
        self.documents: Dict[str, str] = {}
        self.hits: Counter[str] = Counter()
        self.base = ""

    def url(self, path: str) -> str:
        return f"{self.base}{path}"

    async def handle(self, request: web.Request) -> web.Response:
        self.hits[request.path_qs] += 1
        body = self.documents.get(request.path_qs)
        if body is None:
            return web.Response(status=404, text="not found")
        return web.Response(text=body, content_type="application/xml")


# --------------------------------------------------------------------------- #
#                                  Fixtures                                   #
# --------------------------------------------------------------------------- #


@pytest_asyncio.fixture
async def site(unused_tcp_port: int) -> AsyncIterator[SitemapSite]:
    state = SitemapSite()
    app = web.Application()
    app.router.add_route("GET", "/{tail:.*}", state.handle)
    async for base in serve_app(app, unused_tcp_port):
        state.base = base
        yield state


# --------------------------------------------------------------------------- #
#                                   Tests                                     #
# --------------------------------------------------------------------------- #


def test_resolve_and_split_helpers():
    assert resolve_sitemap_url("https://example.com/blog/") == "https://example.com/sitemap.xml"
    assert resolve_sitemap_url("https://example.com", "/maps/a.xml") == "https://example.com/maps/a.xml"
    assert split_location("https://example.com/maps/b.xml?page=2#top") == ("https://example.com", "/maps/b.xml")
    assert split_location("https://example.com") == ("https://example.com", "/")
    assert normalize_document_url("HTTPS://Example.COM/sitemap.xml#top") == "https://example.com/sitemap.xml"


@pytest.mark.asyncio()
async def test_leaf_sitemap_respects_limit_and_order(site: SitemapSite, basic_config):
    pages = [site.url(f"/page{i}") for i in range(1, 6)]
    site.documents["/sitemap.xml"] = urlset(*pages)

    result = await analyze_sitemap(site.base, limit=3, config=basic_config)

    assert result == [SitemapEntry(url) for url in pages[:3]]


@pytest.mark.asyncio()
async def test_priority_is_preserved_or_absent(site: SitemapSite, basic_config):
    site.documents["/sitemap.xml"] = (
        f"<urlset {NS}>"
        f"<url><loc>{site.url('/a')}</loc><priority>0.8</priority></url>"
        f"<url><loc>{site.url('/b')}</loc></url>"
        "</urlset>"
    )
    result = await analyze_sitemap(site.base, config=basic_config)
    assert result == [SitemapEntry(site.url("/a"), 0.8), SitemapEntry(site.url("/b"), None)]
    assert result[1].priority is None


@pytest.mark.asyncio()
async def test_custom_sitemap_path(site: SitemapSite, basic_config):
    site.documents["/maps/main.xml"] = urlset(site.url("/x"))
    result = await analyze_sitemap(site.base, "/maps/main.xml", 10, config=basic_config)
    assert [e.url for e in result] == [site.url("/x")]
    assert site.hits["/sitemap.xml"] == 0


@pytest.mark.asyncio()
async def test_index_is_flattened_depth_first(site: SitemapSite, basic_config):
    site.documents["/sitemap.xml"] = sitemapindex(site.url("/a.xml"), site.url("/b.xml"))
    site.documents["/a.xml"] = sitemapindex(site.url("/a1.xml"))
    site.documents["/a1.xml"] = urlset(site.url("/a1-page"))
    site.documents["/b.xml"] = urlset(site.url("/b-page1"), site.url("/b-page2"))

    result = await analyze_sitemap(site.base, limit=10, config=basic_config)

    assert [e.url for e in result] == [site.url("/a1-page"), site.url("/b-page1"), site.url("/b-page2")]


@pytest.mark.asyncio()
async def test_limit_stops_before_fetching_remaining_children(site: SitemapSite, basic_config):
    site.documents["/sitemap.xml"] = sitemapindex(site.url("/a.xml"), site.url("/b.xml"))
    site.documents["/a.xml"] = urlset(site.url("/1"), site.url("/2"))
    site.documents["/b.xml"] = urlset(site.url("/3"))

    result = await analyze_sitemap(site.base, limit=2, config=basic_config)

    assert len(result) == 2
    assert site.hits["/b.xml"] == 0


@pytest.mark.asyncio()
async def test_self_referencing_index_terminates(site: SitemapSite, basic_config):
    site.documents["/sitemap.xml"] = sitemapindex(site.url("/sitemap.xml"))

    result = await analyze_sitemap(site.base, limit=10, config=basic_config)

    assert result == []
    assert site.hits["/sitemap.xml"] == 1


@pytest.mark.asyncio()
async def test_mutual_references_terminate_with_leaf_entries(site: SitemapSite, basic_config):
    site.documents["/sitemap.xml"] = sitemapindex(site.url("/a.xml"), site.url("/leaf.xml"))
    site.documents["/a.xml"] = sitemapindex(site.url("/sitemap.xml"))
    site.documents["/leaf.xml"] = urlset(site.url("/p"))

    result = await analyze_sitemap(site.base, limit=10, config=basic_config)

    assert [e.url for e in result] == [site.url("/p")]
    assert site.hits["/sitemap.xml"] == 1
    assert site.hits["/a.xml"] == 1


@pytest.mark.asyncio()
async def test_duplicate_child_is_fetched_once(site: SitemapSite, basic_config):
    site.documents["/sitemap.xml"] = sitemapindex(site.url("/b.xml"), site.url("/b.xml"))
    site.documents["/b.xml"] = urlset(site.url("/only"))

    result = await analyze_sitemap(site.base, limit=10, config=basic_config)

    assert [e.url for e in result] == [site.url("/only")]
    assert site.hits["/b.xml"] == 1


@pytest.mark.asyncio()
async def test_children_differing_only_by_query_are_one_document(site: SitemapSite, basic_config):
    site.documents["/sitemap.xml"] = sitemapindex(site.url("/s.xml?page=1"), site.url("/s.xml?page=2"))
    site.documents["/s.xml"] = urlset(site.url("/p1"), site.url("/p2"))

    result = await analyze_sitemap(site.base, limit=10, config=basic_config)

    assert [e.url for e in result] == [site.url("/p1"), site.url("/p2")]
    assert site.hits["/s.xml"] == 1
    assert site.hits["/s.xml?page=1"] == 0
    assert site.hits["/s.xml?page=2"] == 0


@pytest.mark.asyncio()
async def test_deep_index_chain_does_not_recurse(site: SitemapSite, basic_config):
    depth = 300
    site.documents["/sitemap.xml"] = sitemapindex(site.url("/level1.xml"))
    for level in range(1, depth):
        site.documents[f"/level{level}.xml"] = sitemapindex(site.url(f"/level{level + 1}.xml"))
    site.documents[f"/level{depth}.xml"] = urlset(site.url("/bottom"))

    result = await analyze_sitemap(site.base, limit=5, config=basic_config)

    assert [e.url for e in result] == [site.url("/bottom")]


@pytest.mark.asyncio()
async def test_http_error_aborts_whole_crawl(site: SitemapSite, basic_config):
    site.documents["/sitemap.xml"] = sitemapindex(site.url("/a.xml"), site.url("/missing.xml"))
    site.documents["/a.xml"] = urlset(site.url("/1"))

    with pytest.raises(SitemapFetchError) as exc_info:
        await analyze_sitemap(site.base, limit=10, config=basic_config)

    assert exc_info.value.status == 404
    assert exc_info.value.kind is FetchErrorKind.HTTP_STATUS
    assert str(exc_info.value) == "Failed to fetch sitemap: 404 Not Found"


@pytest.mark.asyncio()
async def test_malformed_or_unknown_documents_abort(site: SitemapSite, basic_config):
    site.documents["/broken.xml"] = "<urlset><url>"
    site.documents["/rss.xml"] = "<rss><channel/></rss>"

    with pytest.raises(SitemapParseError):
        await analyze_sitemap(site.base, "/broken.xml", config=basic_config)
    with pytest.raises(SitemapSchemaError):
        await analyze_sitemap(site.base, "/rss.xml", config=basic_config)


@pytest.mark.asyncio()
async def test_network_error_is_wrapped(unused_tcp_port: int, basic_config):
    # nothing listens on this port
    with pytest.raises(SitemapFetchError) as exc_info:
        await analyze_sitemap(f"http://localhost:{unused_tcp_port}", config=basic_config)
    assert exc_info.value.kind is FetchErrorKind.NETWORK


@pytest.mark.asyncio()
async def test_zero_limit_is_rejected(basic_config):
    async with SitemapCrawler(basic_config) as crawler:
        with pytest.raises(ValueError):
            await crawler.crawl("https://example.com", limit=0)
