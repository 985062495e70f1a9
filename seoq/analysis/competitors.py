"""Поиск конкурентов сайта (модель с инструментом веб-поиска)."""
from __future__ import annotations

from seoq.analysis.extractor import Extractor
from seoq.analysis.models import Competitor, CompetitorAnalysis, CompetitorAnalysisResult
from seoq.analysis.text import clean_competitor_name
from seoq.crawler.fetcher import PageFetcher
from seoq.parser.html_cleaner import clean_html

MAX_COMPETITORS = 5


def build_competitors_prompt(html: str) -> str:
    return f"""You are an SEO expert analyzing a website to find its top competitors.

HTML Content:
{html}

Analyze this website to understand:
1. The primary language of the website
2. The products and services offered
3. The business context and industry

Based on this analysis, use the web search tool to find the top {MAX_COMPETITORS} most relevant competitors. Look for companies that:
- Offer similar products or services
- Target the same audience and market
- Operate in the same language and region

IMPORTANT REQUIREMENTS:
- "name" must contain only the company name, without URLs or extra text
- "website" must be a valid URL of the competitor's website
- Assign relevance scores from 0.1 to 1.0, where 1.0 is the most relevant competitor
- Return AT MOST {MAX_COMPETITORS} competitors, sorted by relevance (highest first)

If no competitors can be found, return an empty competitors array."""


async def analyze_competitors(url: str, *, fetcher: PageFetcher, extractor: Extractor) -> CompetitorAnalysisResult:
    html = clean_html(await fetcher.fetch(url))
    analysis = await extractor.extract(
        CompetitorAnalysis,
        build_competitors_prompt(html),
        task=f"find competitors for {url}",
        web_search=True,
    )
    cleaned = [
        Competitor(
            name=clean_competitor_name(item.name, item.website),
            website=item.website,
            relevance=item.relevance,
        )
        for item in analysis.competitors
    ]
    cleaned.sort(key=lambda c: c.relevance, reverse=True)
    return CompetitorAnalysisResult(url=url, competitors=cleaned[:MAX_COMPETITORS])
