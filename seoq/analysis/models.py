"""
Data models for model-backed SEO analysis.

The ``*Analysis`` models describe the structured output requested from the
model (their JSON schema is sent with the request); the ``*Result`` models are
what the analyzers return to the CLI and the reports.
"""
from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field

Severity = Literal["High", "Medium", "Low"]


class SEOIssue(BaseModel):
    issue: str = Field(..., description="A clear description of the SEO issue")
    severity: Severity = Field(..., description="The severity level of the issue")
    how_to_fix: str = Field(..., description="Specific, actionable advice on how to fix the issue")


class SEOAnalysis(BaseModel):
    issues: List[SEOIssue] = Field(..., description="Array of SEO issues found on the page")


class Keyword(BaseModel):
    keyword: str = Field(..., description="The keyword extracted from the page")
    relevance: float = Field(..., ge=0.1, le=1.0, description="The relevance score of the keyword (0.1 to 1.0)")


class KeywordAnalysis(BaseModel):
    keywords: List[Keyword] = Field(..., description="Array of keywords with relevance scores")


class Competitor(BaseModel):
    name: str = Field(
        ...,
        description="The competitor's company name only (no URLs, no extra text, just the company/competitor name)",
    )
    website: str = Field(..., description="The competitor's website URL (must be a valid URL)")
    relevance: float = Field(..., ge=0.1, le=1.0, description="The relevance score of the competitor (0.1 to 1.0)")


class CompetitorAnalysis(BaseModel):
    competitors: List[Competitor] = Field(
        ..., max_length=5, description="Array of competitors with relevance scores (max 5)"
    )


class SEOInsight(BaseModel):
    title: str = Field(
        ..., description="A very short title with just a few words summarizing the SEO improvement opportunity"
    )
    explanation: str = Field(
        ..., description="A short explanation describing the SEO improvement opportunity for the main site"
    )
    relevance: float = Field(
        ...,
        ge=0.1,
        le=1.0,
        description="The SEO relevance score of this insight (0.1 to 1.0, where 1.0 is most important)",
    )


class ComparisonAnalysis(BaseModel):
    insights: List[SEOInsight] = Field(..., max_length=5, description="Array of SEO improvement insights (max 5)")


class PageAnalysisResult(BaseModel):
    url: str
    issues: List[SEOIssue] = Field(default_factory=list)


class KeywordAnalysisResult(BaseModel):
    url: str
    keywords: List[Keyword] = Field(default_factory=list)


class CompetitorAnalysisResult(BaseModel):
    url: str
    competitors: List[Competitor] = Field(default_factory=list)


class ComparisonResult(BaseModel):
    main_url: str
    secondary_url: str
    insights: List[SEOInsight] = Field(default_factory=list)


__all__ = [
    "Severity",
    "SEOIssue",
    "SEOAnalysis",
    "Keyword",
    "KeywordAnalysis",
    "Competitor",
    "CompetitorAnalysis",
    "SEOInsight",
    "ComparisonAnalysis",
    "PageAnalysisResult",
    "KeywordAnalysisResult",
    "CompetitorAnalysisResult",
    "ComparisonResult",
]
