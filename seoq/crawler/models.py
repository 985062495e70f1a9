"""
Data models for the sitemap crawler.

A parsed sitemap document is a tagged variant: either :class:`SitemapIndex`
(pointers to child sitemaps) or :class:`UrlSet` (page entries). The kind is
decided once by the parser and never re-validated downstream.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Literal, Optional, Tuple, Union


@dataclass(frozen=True, slots=True)
class SitemapEntry:
    """A page URL listed by a leaf sitemap."""

    url: str
    priority: Optional[float] = None


@dataclass(frozen=True, slots=True)
class SitemapIndexEntry:
    """A pointer to a child sitemap document."""

    location_url: str
    last_modified: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SitemapIndex:
    kind: ClassVar[Literal["index"]] = "index"
    entries: Tuple[SitemapIndexEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class UrlSet:
    kind: ClassVar[Literal["leaf"]] = "leaf"
    entries: Tuple[SitemapEntry, ...] = field(default_factory=tuple)


SitemapDocument = Union[SitemapIndex, UrlSet]

__all__ = ["SitemapEntry", "SitemapIndexEntry", "SitemapIndex", "UrlSet", "SitemapDocument"]
