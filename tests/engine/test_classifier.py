from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from devmind.config import ClassifierConfig
from devmind.engine import ClassificationRequest, HttpClassifier
from devmind.engine.classifier import ClassificationItem
from devmind.exceptions import ServiceError

REQUEST = ClassificationRequest(
    items=[
        ClassificationItem(title="React Docs", url="https://react.dev/"),
        ClassificationItem(title="FastAPI", url="https://fastapi.tiangolo.com/"),
    ]
)


def _completion(content: object) -> dict:
    if not isinstance(content, str):
        content = json.dumps(content)
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


def _classify(handler, **kwargs):
    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            classifier = HttpClassifier(ClassifierConfig(), client=client, api_key="sk-test", **kwargs)
            return await classifier.classify(REQUEST)

    return asyncio.run(_run())


GOOD_ITEMS = {
    "items": [
        {
            "url": "https://react.dev/",
            "category": "Frontend",
            "description": "Official React documentation",
            "tags": ["React", "JavaScript", "UI"],
        },
        {
            "url": "https://fastapi.tiangolo.com/",
            "category": "Backend",
            "description": "Python web framework docs",
            "tags": ["Python", "API", "ASGI"],
        },
    ]
}


def test_classify_sends_structured_request_and_parses_answer() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion(GOOD_ITEMS))

    response = _classify(handler)

    assert [item.category.value for item in response.items] == ["Frontend", "Backend"]
    assert response.items[0].tags == ["React", "JavaScript", "UI"]
    assert captured["url"] == "https://api.openai.com/v1/chat/completions"
    assert captured["auth"] == "Bearer sk-test"
    body = captured["body"]
    assert body["model"] == "gpt-4o-mini"
    assert body["response_format"]["type"] == "json_schema"
    schema = body["response_format"]["json_schema"]["schema"]
    assert "AI/ML" in schema["properties"]["items"]["items"]["properties"]["category"]["enum"]
    user_prompt = body["messages"][-1]["content"]
    assert "https://fastapi.tiangolo.com/" in user_prompt
    assert "15 words" in user_prompt


def test_classify_tolerates_missing_items_in_answer() -> None:
    partial = {"items": GOOD_ITEMS["items"][:1]}
    response = _classify(lambda request: httpx.Response(200, json=_completion(partial)))
    assert len(response.items) == 1


@pytest.mark.parametrize(
    "content",
    [
        {"items": [dict(GOOD_ITEMS["items"][0], category="Blockchain")]},
        {"items": [dict(GOOD_ITEMS["items"][0], tags=[])]},
        {"items": [dict(GOOD_ITEMS["items"][0], description="")]},
        {"items": [{"url": "https://react.dev/"}]},
        {"results": []},
        "not json at all",
    ],
)
def test_classify_rejects_off_schema_answers(content) -> None:
    with pytest.raises(ServiceError):
        _classify(lambda request: httpx.Response(200, json=_completion(content)))


def test_classify_rejects_error_status() -> None:
    with pytest.raises(ServiceError, match="HTTP 503"):
        _classify(lambda request: httpx.Response(503, text="overloaded"))


def test_classify_rejects_malformed_body() -> None:
    with pytest.raises(ServiceError):
        _classify(lambda request: httpx.Response(200, text="<html>gateway</html>"))
    with pytest.raises(ServiceError):
        _classify(lambda request: httpx.Response(200, json={"choices": []}))
    with pytest.raises(ServiceError):
        _classify(lambda request: httpx.Response(200, json=_completion("")))


def test_classify_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ServiceError):
        _classify(handler)


def test_classify_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DEVMIND_TEST_KEY", raising=False)
    classifier = HttpClassifier(ClassifierConfig(api_key_env="DEVMIND_TEST_KEY"))
    with pytest.raises(ServiceError, match="DEVMIND_TEST_KEY"):
        asyncio.run(classifier.classify(REQUEST))


def test_classify_reads_key_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEVMIND_TEST_KEY", "sk-env")
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Authorization"])
        return httpx.Response(200, json=_completion(GOOD_ITEMS))

    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            classifier = HttpClassifier(ClassifierConfig(api_key_env="DEVMIND_TEST_KEY"), client=client)
            return await classifier.classify(REQUEST)

    asyncio.run(_run())
    assert seen == ["Bearer sk-env"]


def test_request_states_the_limits_enforced_on_answers() -> None:
    classifier = HttpClassifier(ClassifierConfig(), api_key="sk-test")
    payload = classifier.build_payload(REQUEST)
    item_schema = payload["response_format"]["json_schema"]["schema"]["properties"]["items"]["items"]

    assert item_schema["properties"]["tags"]["minItems"] == 1
    assert "300 characters" in item_schema["properties"]["description"]["description"]
    assert "300 characters" in payload["messages"][-1]["content"]


def test_overlong_description_is_rejected() -> None:
    too_long = {"items": [dict(GOOD_ITEMS["items"][0], description="x" * 301)]}
    with pytest.raises(ServiceError):
        _classify(lambda request: httpx.Response(200, json=_completion(too_long)))
