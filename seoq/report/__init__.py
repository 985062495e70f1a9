"""seoq.report: вывод результатов анализа в консоль, JSON и HTML."""

from __future__ import annotations

from seoq.report.html_report import render_html
from seoq.report.json_report import render_json

__all__ = ["render_json", "render_html"]
