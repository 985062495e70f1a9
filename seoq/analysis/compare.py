"""Сравнение двух сайтов: что основному сайту стоит перенять у конкурента."""
from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from seoq.analysis.extractor import Extractor
from seoq.analysis.models import ComparisonAnalysis, ComparisonResult
from seoq.crawler.fetcher import PageFetcher
from seoq.parser.html_cleaner import clean_html

MAX_INSIGHTS = 5


def build_compare_prompt(
    main_url: str,
    secondary_url: str,
    main_html: str,
    secondary_html: str,
    keywords: Optional[Sequence[str]] = None,
) -> str:
    keywords_context = (
        f"\n\nFocus the analysis on these specific keywords: {', '.join(keywords)}" if keywords else ""
    )
    return f"""You are an SEO expert comparing two websites to help the main site improve and catch up with the secondary site (competitor).

Main Site URL: {main_url}
Secondary Site URL: {secondary_url}

Main Site HTML:
{main_html}

Secondary Site HTML:
{secondary_html}

Analyze and compare both sites across key SEO dimensions:
- Meta tags (title, description, Open Graph)
- Heading structure (H1, H2, etc.)
- Content quality and keyword optimization
- Image alt text
- URL structure
- Internal linking
- Structured data
- Mobile optimization signals
- Content depth and comprehensiveness
{keywords_context}

IMPORTANT REQUIREMENTS:
- Return AT MOST {MAX_INSIGHTS} insights, prioritized by SEO impact (most important first)
- "title": very short (2-5 words max) summarizing the improvement
- "explanation": a short, actionable sentence describing what the main site should do
- Relevance: 1.0 = critical for SEO, 0.7+ = high impact, 0.5-0.7 = moderate, 0.1-0.5 = nice to have
- Focus on differences where the secondary site performs better
- All insights must be in English

If no meaningful insights can be generated, return an empty insights array."""


def parse_keywords(raw: Optional[str]) -> Optional[list[str]]:
    """``"a, b,,c"`` -> ``["a", "b", "c"]``; пустой ввод -> None."""
    if not raw:
        return None
    keywords = [k.strip() for k in raw.split(",") if k.strip()]
    return keywords or None


async def compare_sites(
    main_url: str,
    secondary_url: str,
    keywords: Optional[Sequence[str]] = None,
    *,
    fetcher: PageFetcher,
    extractor: Extractor,
) -> ComparisonResult:
    """Загружает обе страницы параллельно и возвращает до 5 insights по релевантности."""
    # ждём обе загрузки, чтобы общий браузер не закрылся под второй из них
    pages = await asyncio.gather(fetcher.fetch(main_url), fetcher.fetch(secondary_url), return_exceptions=True)
    for page in pages:
        if isinstance(page, BaseException):
            raise page
    main_raw, secondary_raw = pages
    analysis = await extractor.extract(
        ComparisonAnalysis,
        build_compare_prompt(main_url, secondary_url, clean_html(main_raw), clean_html(secondary_raw), keywords),
        task=f"compare {main_url} with {secondary_url}",
    )
    insights = sorted(analysis.insights, key=lambda i: i.relevance, reverse=True)[:MAX_INSIGHTS]
    return ComparisonResult(main_url=main_url, secondary_url=secondary_url, insights=insights)
