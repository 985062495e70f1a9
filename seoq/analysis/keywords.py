"""Извлечение ключевых слов страницы."""
from __future__ import annotations

from seoq.analysis.extractor import Extractor
from seoq.analysis.models import KeywordAnalysis, KeywordAnalysisResult
from seoq.crawler.fetcher import PageFetcher
from seoq.parser.html_cleaner import clean_html

MAX_KEYWORDS = 10


def build_keywords_prompt(url: str, html: str) -> str:
    return f"""You are an SEO expert analyzing a webpage to extract the most relevant keywords.

Page URL: {url}

HTML:
{html}

Extract the most relevant keywords from this page. Consider:
- Content relevance and prominence
- SEO importance
- Keyword frequency and distribution
- Semantic relevance to the page topic
- Heading tags, meta tags, and structured data

IMPORTANT REQUIREMENTS:
- Extract keywords in the same language as the page content (infer the language from the page content)
- Maintain the natural language of the original content
- Return AT MOST {MAX_KEYWORDS} keywords, prioritized by relevance (most relevant first)
- Each keyword should be a single word or short phrase (1-3 words)
- Assign relevance scores from 0.1 to 1.0, where 1.0 is the most relevant keyword
- Keywords should be sorted by relevance (highest first)
- Relevance scores should be realistic and distributed (not all 1.0)

If no keywords can be extracted, return an empty keywords array."""


async def analyze_keywords(url: str, *, fetcher: PageFetcher, extractor: Extractor) -> KeywordAnalysisResult:
    """Возвращает до 10 ключевых слов страницы, отсортированных по релевантности."""
    html = clean_html(await fetcher.fetch(url))
    analysis = await extractor.extract(
        KeywordAnalysis,
        build_keywords_prompt(url, html),
        task=f"extract keywords for {url}",
    )
    keywords = sorted(analysis.keywords, key=lambda k: k.relevance, reverse=True)[:MAX_KEYWORDS]
    return KeywordAnalysisResult(url=url, keywords=keywords)
