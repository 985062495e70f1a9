# File: tests/conftest.py
import asyncio
from collections.abc import AsyncIterator
from typing import Callable, Dict, List, Optional, Type

import pytest
from aiohttp import web
from pydantic import BaseModel

from seoq.config import SeoqConfig
from seoq.errors import FetchError, FetchErrorKind


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Тесты не должны зависеть от ключа в окружении разработчика."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


@pytest.fixture()
def basic_config() -> SeoqConfig:
    """
    Return a basic valid SeoqConfig for crawler and analyzer tests.
    """
    return SeoqConfig(
        openai_api_key="sk-test-0000000000",
        timeout=2.0,
        user_agent="TestAgent/1.0",
        retry_times=0,
        fetch_mode="http",
    )


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


class FakeFetcher:
    """Returns canned HTML; an Exception value is raised instead."""

    def __init__(self, pages: Optional[Dict[str, object]] = None, delay: float = 0.0) -> None:
        self.pages = pages or {}
        self.delay = delay
        self.calls: List[str] = []

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        value = self.pages.get(url, f"<html><head><title>{url}</title></head><body></body></html>")
        if isinstance(value, BaseException):
            raise value
        return value  # type: ignore[return-value]


class FakeExtractor:
    """Builds the response with *respond(schema, prompt)*; exceptions are raised."""

    def __init__(self, respond: Callable[[Type[BaseModel], str], object]) -> None:
        self.respond = respond
        self.prompts: List[str] = []
        self.tasks: List[str] = []
        self.web_search: List[bool] = []

    async def extract(self, schema, prompt, *, task, web_search=False):
        self.prompts.append(prompt)
        self.tasks.append(task)
        self.web_search.append(web_search)
        await asyncio.sleep(0)
        value = self.respond(schema, prompt)
        if isinstance(value, BaseException):
            raise value
        return schema.model_validate(value)


@pytest.fixture()
def timeout_error() -> FetchError:
    return FetchError("Failed to fetch page content: Navigation timeout after 30s.", kind=FetchErrorKind.TIMEOUT)
