"""seoq.report.console: цветной табличный вывод результатов в терминал (click.style)."""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

import click

from seoq.analysis.models import (
    ComparisonResult,
    CompetitorAnalysisResult,
    KeywordAnalysisResult,
    PageAnalysisResult,
)
from seoq.crawler.models import SitemapEntry

Rgb = Tuple[int, int, int]

_GRAY: Rgb = (128, 128, 128)
_BLUE: Rgb = (59, 130, 246)
_GREEN: Rgb = (34, 197, 94)

SEVERITY_COLORS = {"High": "red", "Medium": "yellow", "Low": "green"}


@dataclass
class Cell:
    """Текст ячейки и параметры click.style, применяемые к каждой строке."""

    text: str
    style: Dict[str, Any] = field(default_factory=dict)


CellT = Union[str, Cell]


def _mix(start: Rgb, end: Rgb, ratio: float) -> Rgb:
    return tuple(round(a + (b - a) * ratio) for a, b in zip(start, end))  # type: ignore[return-value]


def relevance_rgb(relevance: float) -> Rgb:
    """Градиент: серый→синий на [0.1, 0.5), синий→зелёный на [0.5, 0.7), зелёный от 0.7."""
    value = max(0.1, min(1.0, relevance))
    if value >= 0.7:
        return _GREEN
    if value >= 0.5:
        return _mix(_BLUE, _GREEN, (value - 0.5) / 0.2)
    return _mix(_GRAY, _BLUE, (value - 0.1) / 0.4)


def _relevance_cell(relevance: float) -> Cell:
    return Cell(f"{relevance:.1f}", {"fg": relevance_rgb(relevance)})


def _wrap(text: str, width: int) -> List[str]:
    return [line for para in text.split("\n") for line in (textwrap.wrap(para, width) or [""])]


def render_table(headers: Sequence[str], rows: Iterable[Sequence[CellT]], widths: Sequence[int]) -> str:
    """Рисует таблицу с рамкой; текст переносится по ширине колонки."""
    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def _line(cells: Sequence[Cell]) -> List[str]:
        wrapped = [_wrap(c.text, w) for c, w in zip(cells, widths)]
        height = max(len(lines) for lines in wrapped)
        out = []
        for i in range(height):
            parts = []
            for cell, lines, width in zip(cells, wrapped, widths):
                text = lines[i] if i < len(lines) else ""
                padded = text.ljust(width)
                parts.append(click.style(padded, **cell.style) if cell.style and text else padded)
            out.append("| " + " | ".join(parts) + " |")
        return out

    lines = [border]
    lines.extend(_line([Cell(h, {"fg": "bright_black"}) for h in headers]))
    lines.append(border)
    for row in rows:
        lines.extend(_line([c if isinstance(c, Cell) else Cell(c) for c in row]))
        lines.append(border)
    return "\n".join(lines)


def format_sitemap_entries(entries: Sequence[SitemapEntry]) -> str:
    return "\n".join(
        f"- {e.url} {e.priority:g}" if e.priority is not None else f"- {e.url}" for e in entries
    )


def format_page_result(result: PageAnalysisResult) -> str:
    title = click.style(result.url, bold=True)
    if not result.issues:
        return f"{title}\n{click.style('No issues found.', fg='yellow')}"
    rows = [
        [
            Cell(issue.issue, {"bold": True}),
            Cell(issue.severity, {"fg": SEVERITY_COLORS[issue.severity]}),
            Cell(issue.how_to_fix, {"fg": "bright_black"}),
        ]
        for issue in result.issues
    ]
    return f"{title}\n" + render_table(["Issue", "Severity", "How to fix"], rows, [36, 8, 44])


def format_keywords(result: KeywordAnalysisResult) -> str:
    if not result.keywords:
        return click.style("No keywords found.", fg="yellow")
    rows = [[_relevance_cell(k.relevance), k.keyword] for k in result.keywords]
    return render_table(["Relevance", "Keyword"], rows, [10, 78])


def format_competitors(result: CompetitorAnalysisResult) -> str:
    if not result.competitors:
        return click.style("No competitors found.", fg="yellow")
    rows = [[c.name, c.website, _relevance_cell(c.relevance)] for c in result.competitors]
    return render_table(["Competitor", "Website", "Relevance"], rows, [23, 38, 10])


def format_insights(result: ComparisonResult) -> str:
    if not result.insights:
        return click.style("No insights found.", fg="yellow")
    rows = [
        [insight.title + "\n" + insight.explanation, _relevance_cell(insight.relevance)]
        for insight in result.insights
    ]
    return render_table(["Insight", "Relevance"], rows, [68, 10])


__all__ = [
    "Cell",
    "relevance_rgb",
    "render_table",
    "format_sitemap_entries",
    "format_page_result",
    "format_keywords",
    "format_competitors",
    "format_insights",
]
