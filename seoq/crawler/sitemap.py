"""
seoq.crawler.sitemap: обход sitemap и sitemap index.

По базовому URL и пути к sitemap строит ограниченный и дедуплицированный список
страниц, проходя sitemap index в глубину. Обход идёт по явному стеку, поэтому
длинная цепочка вложенных index не растит стек вызовов Python. Порядок
результата: прямой обход дерева слева направо, обрезанный до ``limit`` записей.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple
from urllib.parse import urljoin, urlsplit, urlunsplit

from aiohttp import ClientError, ClientSession

from seoq.config import SeoqConfig
from seoq.crawler.fetcher import create_session
from seoq.crawler.models import SitemapEntry, SitemapIndex
from seoq.errors import FetchErrorKind, SitemapFetchError
from seoq.parser.sitemap_parser import parse_sitemap

__all__ = ("DEFAULT_SITEMAP_PATH", "TraversalContext", "SitemapCrawler", "analyze_sitemap")

DEFAULT_SITEMAP_PATH = "/sitemap.xml"


@dataclass(slots=True)
class TraversalContext:
    """Состояние одного обхода: посещённые документы и набранные записи."""

    limit: int
    visited: Set[str] = field(default_factory=set)
    results: List[SitemapEntry] = field(default_factory=list)

    @property
    def exhausted(self) -> bool:
        return len(self.results) >= self.limit


def resolve_sitemap_url(base_url: str, sitemap_path: Optional[str] = None) -> str:
    """Склеивает *sitemap_path* (по умолчанию ``/sitemap.xml``) с *base_url*."""
    return urljoin(base_url, sitemap_path or DEFAULT_SITEMAP_PATH)


def normalize_document_url(url: str) -> str:
    """Ключ для множества посещённых: схема и хост в нижнем регистре, без фрагмента."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path or "/", parts.query, ""))


def split_location(location_url: str) -> Tuple[str, str]:
    """Делит адрес дочернего sitemap на ``(origin, path)``; query и фрагмент отбрасываются."""
    parts = urlsplit(location_url)
    origin = urlunsplit((parts.scheme, parts.netloc, "", "", ""))
    return origin, parts.path or "/"


class SitemapCrawler:
    """Асинхронный обход sitemap и sitemap index с лимитом и защитой от циклов."""

    def __init__(self, config: Optional[SeoqConfig] = None, session: Optional[ClientSession] = None) -> None:
        self.config = config or SeoqConfig()
        self.session = session
        self._owns_session = session is None
        self.logger = logging.getLogger("seoq")

    async def __aenter__(self) -> SitemapCrawler:
        if self.session is None:
            self.session = create_session(self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def crawl(
        self,
        base_url: str,
        sitemap_path: Optional[str] = None,
        limit: int = 25,
    ) -> List[SitemapEntry]:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self.logger.info("Sitemap crawl: %s (limit %d)", base_url, limit)
        start = time.monotonic()
        ctx = TraversalContext(limit=limit)
        # пары (base, path); дочерние кладём в обратном порядке, чтобы обход шёл слева направо
        stack: List[Tuple[str, Optional[str]]] = [(base_url, sitemap_path)]

        while stack and not ctx.exhausted:
            base, path = stack.pop()
            document_url = resolve_sitemap_url(base, path)
            key = normalize_document_url(document_url)
            if key in ctx.visited:
                self.logger.debug("Sitemap already visited, skipping: %s", document_url)
                continue
            # отмечаем до загрузки: упавший или ссылающийся на себя документ не посещается повторно
            ctx.visited.add(key)

            document = parse_sitemap(await self._fetch_document(document_url))

            if isinstance(document, SitemapIndex):
                self.logger.debug("Sitemap index %s: %d child sitemaps", document_url, len(document.entries))
                stack.extend(split_location(child.location_url) for child in reversed(document.entries))
                continue

            self.logger.debug("Sitemap %s: %d urls", document_url, len(document.entries))
            for entry in document.entries:
                if ctx.exhausted:
                    break
                ctx.results.append(entry)

        self.logger.info(
            "Sitemap crawl finished: %d urls from %d documents in %.2f s",
            len(ctx.results),
            len(ctx.visited),
            time.monotonic() - start,
        )
        return ctx.results

    async def _fetch_document(self, url: str) -> bytes:
        if not self.session:
            raise RuntimeError("Session not initialized")
        self.logger.debug("Fetching sitemap %s", url)
        try:
            async with self.session.get(url) as resp:
                if not 200 <= resp.status < 300:
                    raise SitemapFetchError(
                        f"Failed to fetch sitemap: {resp.status} {resp.reason or ''}".rstrip(),
                        kind=FetchErrorKind.HTTP_STATUS,
                        status=resp.status,
                    )
                return await resp.read()
        except asyncio.TimeoutError as exc:
            raise SitemapFetchError(
                f"Failed to fetch sitemap: timeout after {self.config.timeout:g}s ({url})",
                kind=FetchErrorKind.TIMEOUT,
            ) from exc
        except ClientError as exc:
            raise SitemapFetchError(
                f"Failed to fetch sitemap: {exc}",
                kind=FetchErrorKind.NETWORK,
            ) from exc


async def analyze_sitemap(
    base_url: str,
    sitemap_path: Optional[str] = None,
    limit: int = 25,
    *,
    config: Optional[SeoqConfig] = None,
    session: Optional[ClientSession] = None,
) -> List[SitemapEntry]:
    """Обходит sitemap сайта *base_url* и возвращает не более *limit* записей.

    Любая ошибка загрузки или разбора прерывает весь вызов, частичного результата нет.
    """
    async with SitemapCrawler(config, session=session) as crawler:
        return await crawler.crawl(base_url, sitemap_path, limit)
