"""
seoq.analysis.analyzer: поиск SEO-проблем на страницах и пакетный запуск.

``analyze_page`` загружает, очищает и анализирует одну страницу и падает при
любой ошибке. ``analyze_page_safe`` превращает любую ошибку, кроме ошибок
учётных данных, в одну синтетическую issue уровня "High". ``analyze_pages``
запускает анализ по списку URL, держа в работе не более ``concurrency`` страниц
и используя один фетчер (один браузер) на весь пакет.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, List, Optional, Sequence

from seoq.analysis.extractor import Extractor, OpenAIExtractor
from seoq.analysis.models import PageAnalysisResult, SEOAnalysis, SEOIssue
from seoq.analysis.text import normalize_sentence
from seoq.config import FetchMode, SeoqConfig
from seoq.crawler.fetcher import PageFetcher, open_fetcher
from seoq.errors import ConfigurationError, RateLimitError
from seoq.parser.html_cleaner import clean_html

__all__ = [
    "ProgressCallback",
    "CompleteCallback",
    "RATE_LIMIT_ADVICE",
    "GENERIC_ADVICE",
    "build_issues_prompt",
    "error_result",
    "analyze_page",
    "analyze_page_safe",
    "analyze_pages",
]

ProgressCallback = Callable[[int, int, str], None]
CompleteCallback = Callable[[str, int], None]

RATE_LIMIT_ADVICE = "Wait a moment and try again, or reduce concurrency with --concurrency option."
GENERIC_ADVICE = "Check if the URL is accessible and try again."

logger = logging.getLogger("seoq")


def build_issues_prompt(url: str, html: str, max_issues: int) -> str:
    return f"""You are an SEO expert analyzing a webpage. Analyze the following HTML and identify SEO issues.

Page URL: {url}

HTML:
{html}

Analyze this page for common SEO issues including:
- Missing or poor meta descriptions
- Missing or duplicate title tags
- Missing or improper heading structure (H1, H2, etc.)
- Missing alt text on images
- Content quality issues
- Missing Open Graph tags
- Missing canonical URLs
- Other SEO best practices

IMPORTANT REQUIREMENTS:
- All responses must be in English, regardless of the language of the analyzed page content
- Return AT MOST {max_issues} issues, prioritized by impact (most important first)
- Each "issue" must be just a few words describing the problem clearly
- Each "how_to_fix" must be a very compact and small sentence with specific, actionable advice
- Use simple, direct language without bullets, prefixes, or multiple sentences
- "severity": "High", "Medium", or "Low"

If no issues are found, return an empty issues array."""


def error_result(url: str, error: BaseException) -> PageAnalysisResult:
    """Результат из одной синтетической issue для страницы, которую не удалось проанализировать."""
    message = str(error) or "Unknown error"
    advice = RATE_LIMIT_ADVICE if isinstance(error, RateLimitError) else GENERIC_ADVICE
    return PageAnalysisResult(
        url=url,
        issues=[SEOIssue(issue=f"Failed to analyze page: {message}", severity="High", how_to_fix=advice)],
    )


async def analyze_page(
    url: str,
    max_issues: int = 3,
    *,
    fetcher: PageFetcher,
    extractor: Extractor,
) -> PageAnalysisResult:
    """Загружает, очищает и анализирует одну страницу. Ошибки не перехватываются."""
    raw_html = await fetcher.fetch(url)
    html = clean_html(raw_html)
    analysis = await extractor.extract(
        SEOAnalysis,
        build_issues_prompt(url, html, max_issues),
        task=f"analyze SEO issues for {url}",
    )
    issues = [
        SEOIssue(
            issue=normalize_sentence(item.issue),
            severity=item.severity,
            how_to_fix=normalize_sentence(item.how_to_fix),
        )
        for item in analysis.issues[:max_issues]
    ]
    return PageAnalysisResult(url=url, issues=issues)


async def analyze_page_safe(
    url: str,
    max_issues: int = 3,
    *,
    fetcher: PageFetcher,
    extractor: Extractor,
) -> PageAnalysisResult:
    """Как :func:`analyze_page`, но наружу выходят только ошибки учётных данных."""
    try:
        return await analyze_page(url, max_issues, fetcher=fetcher, extractor=extractor)
    except ConfigurationError:
        raise
    except Exception as exc:
        logger.warning("Page analysis failed for %s: %s", url, exc)
        return error_result(url, exc)


async def _run_batch(
    urls: Sequence[str],
    *,
    concurrency: int,
    max_issues: int,
    fetcher: PageFetcher,
    extractor: Extractor,
    on_progress: Optional[ProgressCallback],
    on_complete: Optional[CompleteCallback],
) -> List[PageAnalysisResult]:
    semaphore = asyncio.Semaphore(concurrency)
    results: List[PageAnalysisResult] = []
    total = len(urls)

    async def _worker(index: int, url: str) -> None:
        async with semaphore:
            if on_progress:
                on_progress(index + 1, total, url)
            result = await analyze_page_safe(url, max_issues, fetcher=fetcher, extractor=extractor)
            results.append(result)
            if on_complete:
                on_complete(url, len(result.issues))

    tasks = [asyncio.create_task(_worker(i, url)) for i, url in enumerate(urls)]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        # фатальная ошибка: снимаем ожидающие и текущие страницы до закрытия общего фетчера
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return results


async def analyze_pages(
    urls: Sequence[str],
    *,
    concurrency: int = 1,
    max_issues: int = 3,
    on_progress: Optional[ProgressCallback] = None,
    on_complete: Optional[CompleteCallback] = None,
    config: Optional[SeoqConfig] = None,
    fetch_mode: Optional[FetchMode] = None,
    fetcher: Optional[PageFetcher] = None,
    extractor: Optional[Extractor] = None,
) -> List[PageAnalysisResult]:
    """Анализирует *urls*, держа в работе не более *concurrency* страниц.

    Результаты идут в порядке завершения. ``on_progress(i, total, url)`` вызывается,
    когда страница ``i`` получает слот, ``on_complete(url, issue_count)`` после её
    анализа. :class:`~seoq.errors.ConfigurationError` с любой страницы прерывает
    весь пакет. Без явного *fetcher* он открывается на весь пакет (в режиме
    ``browser`` один браузер) и закрывается один раз по его окончании.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")
    config = config or SeoqConfig()
    extractor = extractor or OpenAIExtractor(config)
    logger.info("Analyzing %d pages (concurrency %d)", len(urls), concurrency)
    start = time.monotonic()

    batch = dict(
        concurrency=concurrency,
        max_issues=max_issues,
        extractor=extractor,
        on_progress=on_progress,
        on_complete=on_complete,
    )
    if fetcher is not None:
        results = await _run_batch(urls, fetcher=fetcher, **batch)
    else:
        async with open_fetcher(config, fetch_mode) as shared:
            results = await _run_batch(urls, fetcher=shared, **batch)

    logger.info("Analyzed %d pages in %.2f s", len(results), time.monotonic() - start)
    return results
