# === FILE: seoq/parser/html_cleaner.py ===
"""HTML cleaning for SEO analysis.

Only markup that matters for SEO is kept before the page is sent to the
model:

* HTML comments are removed.
* ``<script>`` tags are removed, except ``type="application/ld+json"``
  (structured data), compared case-insensitively.
* ``<style>`` and ``<noscript>`` tags are removed.
"""
from __future__ import annotations

from collections.abc import Sequence

from bs4 import BeautifulSoup, Comment
from bs4.element import Tag

__all__: Sequence[str] = ("clean_html",)

_STRUCTURED_DATA_TYPE = "application/ld+json"


def _is_structured_data(tag: Tag) -> bool:
    script_type = tag.get("type")
    if not isinstance(script_type, str):
        return False
    return script_type.strip().lower() == _STRUCTURED_DATA_TYPE


def clean_html(html: str) -> str:
    """Return *html* without comments, non-JSON-LD scripts, styles and noscript blocks."""
    soup = BeautifulSoup(html, "html.parser")

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for script in soup.find_all("script"):
        if isinstance(script, Tag) and not _is_structured_data(script):
            script.decompose()

    for element in soup(["style", "noscript"]):
        element.decompose()

    return str(soup)
