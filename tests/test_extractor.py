# Test-suite for the OpenAI extractor with a stub client
import json
from types import SimpleNamespace

import pytest

from seoq.analysis.extractor import OpenAIExtractor
from seoq.analysis.models import KeywordAnalysis
from seoq.errors import ResponseValidationError


class StubResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        return SimpleNamespace(output_text=self.output_text)


def make_extractor(basic_config, output_text):
    responses = StubResponses(output_text)
    client = SimpleNamespace(responses=responses)
    return OpenAIExtractor(basic_config, client=client), responses


@pytest.mark.asyncio()
async def test_request_carries_schema_and_tools(basic_config):
    body = json.dumps({"keywords": [{"keyword": "shoes", "relevance": 0.8}]})
    extractor, responses = make_extractor(basic_config, body)

    result = await extractor.extract(KeywordAnalysis, "prompt", task="extract keywords", web_search=True)

    assert result.keywords[0].keyword == "shoes"
    request = responses.requests[0]
    assert request["model"] == basic_config.model
    assert request["tools"] == [{"type": "web_search"}]
    assert request["input"] == [{"role": "user", "content": "prompt"}]
    fmt = request["text"]["format"]
    assert fmt["type"] == "json_schema"
    assert fmt["name"] == "KeywordAnalysis"
    assert "keywords" in fmt["schema"]["properties"]


@pytest.mark.asyncio()
async def test_no_tools_without_web_search(basic_config):
    extractor, responses = make_extractor(basic_config, '{"keywords": []}')
    await extractor.extract(KeywordAnalysis, "prompt", task="extract keywords")
    assert responses.requests[0]["tools"] == []


@pytest.mark.asyncio()
@pytest.mark.parametrize("output_text", ["not json", '{"keywords": [{"keyword": "x", "relevance": 5}]}', ""])
async def test_invalid_answer_is_a_validation_error(basic_config, output_text):
    extractor, _ = make_extractor(basic_config, output_text)
    with pytest.raises(ResponseValidationError) as exc_info:
        await extractor.extract(KeywordAnalysis, "prompt", task="extract keywords")
    assert "extract keywords" in str(exc_info.value)
