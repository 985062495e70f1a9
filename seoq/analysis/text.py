"""Утилиты нормализации текста, который возвращает модель."""

from __future__ import annotations

import re
from urllib.parse import urlparse

__all__ = ["normalize_sentence", "clean_competitor_name"]

_WHITESPACE_RE = re.compile(r"\s+")
_FIRST_SENTENCE_RE = re.compile(r"^[^.!?]+[.!?]?")

_URL_RE = re.compile(r"https?://\S+", re.IGNORECASE)
_WWW_RE = re.compile(r"www\.\S+", re.IGNORECASE)
_DOMAIN_RE = re.compile(r"\S+\.(com|org|net|io|co|ai|dev)\S*", re.IGNORECASE)
_PREFIX_RE = re.compile(r"^(visit|go to|see|check|homepage|website)\s*", re.IGNORECASE)
_SUFFIX_RE = re.compile(r"\s*-\s*(website|homepage|official|site)$", re.IGNORECASE)


def normalize_sentence(text: str) -> str:
    """Сводит текст к одному короткому предложению.

    Пробелы по краям убираются, серии пробельных символов схлопываются в один
    пробел, текст обрезается после первого ``.``, ``?`` или ``!``. Если знака
    конца предложения нет, возвращается вся нормализованная строка.

    >>> normalize_sentence(" Hello   world.  Extra stuff ")
    'Hello world.'
    """
    normalized = _WHITESPACE_RE.sub(" ", text.strip())
    match = _FIRST_SENTENCE_RE.match(normalized)
    if match:
        return match.group(0).strip()
    return normalized


def clean_competitor_name(name: str, website: str = "") -> str:
    """Оставляет в имени конкурента только название компании.

    Удаляются URL, домены и служебные слова ("visit", "- official" и т.п.).
    Если после чистки ничего не осталось, имя берётся из домена сайта.
    """
    cleaned = name.strip()
    cleaned = _URL_RE.sub("", cleaned).strip()
    cleaned = _WWW_RE.sub("", cleaned).strip()
    cleaned = _DOMAIN_RE.sub("", cleaned).strip()
    cleaned = _PREFIX_RE.sub("", cleaned).strip()
    cleaned = _SUFFIX_RE.sub("", cleaned).strip()

    if not cleaned and website:
        host = urlparse(website).hostname or ""
        label = re.sub(r"^www\.", "", host).split(".")[0]
        cleaned = label[:1].upper() + label[1:]

    return cleaned or name.strip()
