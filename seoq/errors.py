"""seoq.errors: иерархия исключений seoq.

Вид ошибки определяется в месте её возникновения (фетчер, парсер sitemap,
клиент модели), а не угадывается позже по тексту сообщения.

* ``ConfigurationError`` – фатальная, всегда доходит до CLI.
* ``FetchError`` – сетевые ошибки, таймауты, HTTP-статусы; на уровне страницы
  превращается в синтетическую issue.
* ``SeoqValidationError`` – битый XML sitemap или ответ модели не по схеме.
* ``RateLimitError`` – лимит запросов к модели.
"""
from __future__ import annotations

import enum
from typing import Optional

__all__ = [
    "SeoqError",
    "ConfigurationError",
    "MissingCredentialError",
    "InvalidCredentialError",
    "FetchErrorKind",
    "FetchError",
    "SitemapFetchError",
    "BrowserLaunchError",
    "SeoqValidationError",
    "SitemapParseError",
    "SitemapSchemaError",
    "ResponseValidationError",
    "RateLimitError",
    "ExtractionError",
]


class SeoqError(Exception):
    """Базовое исключение проекта."""

    @property
    def message(self) -> str:
        return str(self)


# --------------------------------------------------------------------------- #
# Configuration                                                               #
# --------------------------------------------------------------------------- #


class ConfigurationError(SeoqError):
    """Ошибка учётных данных: прерывает весь пакетный анализ."""


class MissingCredentialError(ConfigurationError):
    def __init__(self, variable: str = "OPENAI_API_KEY") -> None:
        super().__init__(
            f"{variable} environment variable is required. "
            "Please set it before running the analysis."
        )
        self.variable = variable


class InvalidCredentialError(ConfigurationError):
    def __init__(self, variable: str = "OPENAI_API_KEY") -> None:
        super().__init__(
            f"Invalid OpenAI API key. Please check your {variable} environment variable."
        )
        self.variable = variable


# --------------------------------------------------------------------------- #
# Fetching                                                                    #
# --------------------------------------------------------------------------- #


class FetchErrorKind(str, enum.Enum):
    HTTP_STATUS = "http_status"
    TIMEOUT = "timeout"
    NETWORK = "network"


class FetchError(SeoqError):
    """Страница или sitemap не загружены."""

    def __init__(
        self,
        message: str,
        kind: FetchErrorKind = FetchErrorKind.NETWORK,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status = status


class SitemapFetchError(FetchError):
    """Sitemap недоступен: обход sitemap прерывается целиком."""


class BrowserLaunchError(FetchError):
    """Не удалось запустить headless-браузер."""

    HINT = "Ensure Playwright browsers are installed with 'playwright install chromium'."

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to launch browser: {reason}. {self.HINT}")
        self.reason = reason


# --------------------------------------------------------------------------- #
# Validation                                                                  #
# --------------------------------------------------------------------------- #


class SeoqValidationError(SeoqError):
    """Данные не соответствуют ожидаемой схеме."""


class SitemapParseError(SeoqValidationError):
    """XML sitemap синтаксически некорректен."""


class SitemapSchemaError(SeoqValidationError):
    """Документ не является ни sitemap index, ни urlset."""


class ResponseValidationError(SeoqValidationError):
    """Структурированный ответ модели не прошёл валидацию."""


# --------------------------------------------------------------------------- #
# Model calls                                                                 #
# --------------------------------------------------------------------------- #


class RateLimitError(SeoqError):
    """Превышен лимит запросов к модели."""


class ExtractionError(SeoqError):
    """Прочие ошибки обращения к модели."""
