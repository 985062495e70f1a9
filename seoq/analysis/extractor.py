"""
Structured-output extraction through the OpenAI Responses API.

The extractor sends a prompt together with the JSON schema of a pydantic model
and validates the answer against that model. Provider exceptions are mapped to
the :mod:`seoq.errors` taxonomy right here, where their type is still known.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol, Type, TypeVar

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from seoq.config import API_KEY_ENV, SeoqConfig
from seoq.errors import (
    ExtractionError,
    InvalidCredentialError,
    MissingCredentialError,
    RateLimitError,
    ResponseValidationError,
)

__all__ = ["Extractor", "OpenAIExtractor"]

SchemaT = TypeVar("SchemaT", bound=BaseModel)

logger = logging.getLogger("seoq")


class Extractor(Protocol):
    async def extract(
        self,
        schema: Type[SchemaT],
        prompt: str,
        *,
        task: str,
        web_search: bool = False,
    ) -> SchemaT: ...


class OpenAIExtractor:
    """Calls the model and returns a validated instance of *schema*.

    ``task`` is a short verb phrase ("analyze SEO issues for https://…") used in
    error messages.
    """

    def __init__(self, config: SeoqConfig, client: Optional[AsyncOpenAI] = None) -> None:
        self.config = config
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.config.openai_api_key:
                raise MissingCredentialError(API_KEY_ENV)
            self._client = AsyncOpenAI(api_key=self.config.openai_api_key, timeout=self.config.timeout * 4)
        return self._client

    async def extract(
        self,
        schema: Type[SchemaT],
        prompt: str,
        *,
        task: str,
        web_search: bool = False,
    ) -> SchemaT:
        client = self.client
        tools = [{"type": "web_search"}] if web_search else []
        logger.debug("Model request: %s (%s)", task, schema.__name__)
        try:
            response = await client.responses.create(
                model=self.config.model,
                input=[{"role": "user", "content": prompt}],
                tools=tools,
                text={
                    "format": {
                        "type": "json_schema",
                        "name": schema.__name__,
                        "schema": schema.model_json_schema(),
                        "strict": False,
                    }
                },
            )
        except openai.AuthenticationError as exc:
            raise InvalidCredentialError(API_KEY_ENV) from exc
        except openai.RateLimitError as exc:
            raise RateLimitError(
                "OpenAI API rate limit exceeded. Please wait a moment and try again, "
                f"or reduce concurrency. Original error: {exc}"
            ) from exc
        except openai.OpenAIError as exc:
            raise ExtractionError(f"Failed to {task}: {exc}") from exc

        try:
            return schema.model_validate_json(response.output_text or "")
        except ValidationError as exc:
            raise ResponseValidationError(f"Failed to validate AI response ({task}): {exc}") from exc
