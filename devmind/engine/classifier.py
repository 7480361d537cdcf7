"""Classification service client and its request/response contract."""

from __future__ import annotations

import json
import os
from typing import Annotated, Any, Iterable, Protocol

import httpx
import structlog
from pydantic import BaseModel, Field, StringConstraints, ValidationError

from ..catalog.entry import BookmarkEntry, Category
from ..config import ClassifierConfig
from ..exceptions import ServiceError

DESCRIPTION_MAX_CHARS = 300

SYSTEM_PROMPT = (
    "You classify developer bookmarks. Answer with JSON only, following the "
    "provided schema, and echo every input url unchanged."
)

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ClassificationItem(BaseModel):
    title: str
    url: str


class ClassificationRequest(BaseModel):
    """Minimal projection of one batch sent to the service."""

    items: list[ClassificationItem]

    @classmethod
    def from_entries(cls, entries: Iterable[BookmarkEntry]) -> "ClassificationRequest":
        return cls(items=[ClassificationItem(title=entry.title, url=entry.url) for entry in entries])


class ClassifiedItem(BaseModel):
    url: NonEmptyStr
    category: Category
    description: Annotated[
        str, StringConstraints(strip_whitespace=True, min_length=1, max_length=DESCRIPTION_MAX_CHARS)
    ]
    tags: list[NonEmptyStr] = Field(min_length=1)


class ClassificationResponse(BaseModel):
    items: list[ClassifiedItem]


class Classifier(Protocol):
    """Anything able to classify one batch."""

    async def classify(self, request: ClassificationRequest) -> ClassificationResponse:
        ...


def response_json_schema() -> dict[str, Any]:
    """JSON schema handed to the model as the structured output contract."""

    return {
        "type": "object",
        "properties": {
            "items": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "url": {"type": "string"},
                        "category": {"type": "string", "enum": Category.values()},
                        "description": {
                            "type": "string",
                            "description": f"Non-empty, at most {DESCRIPTION_MAX_CHARS} characters.",
                        },
                        "tags": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                    },
                    "required": ["url", "category", "description", "tags"],
                    "additionalProperties": False,
                },
            }
        },
        "required": ["items"],
        "additionalProperties": False,
    }


class HttpClassifier:
    """Call an OpenAI-compatible chat completions endpoint for one batch at a time."""

    def __init__(
        self,
        config: ClassifierConfig,
        client: httpx.AsyncClient | None = None,
        api_key: str | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self._client = client
        self._api_key = api_key
        self.logger = logger or structlog.get_logger("devmind.classifier")

    def build_prompt(self, request: ClassificationRequest) -> str:
        categories = ", ".join(f'"{value}"' for value in Category.values())
        instructions = (
            "Analyze the following developer tools and bookmarks. For each one provide:\n"
            f"1. a category, strictly one of: {categories};\n"
            f"2. a short, non-empty description of at most {self.config.description_max_words} words"
            f" and never longer than {DESCRIPTION_MAX_CHARS} characters;\n"
            '3. 3-4 relevant, non-empty tags (for example "React", "Python", "CSS").'
        )
        return instructions + "\n\nInput: " + request.model_dump_json()

    def build_payload(self, request: ClassificationRequest) -> dict[str, Any]:
        return {
            "model": self.config.model,
            "temperature": self.config.temperature,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": self.build_prompt(request)},
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": "bookmark_classification",
                    "strict": True,
                    "schema": response_json_schema(),
                },
            },
        }

    async def classify(self, request: ClassificationRequest) -> ClassificationResponse:
        api_key = self._api_key or os.environ.get(self.config.api_key_env)
        if not api_key:
            raise ServiceError(f"No API key: set the {self.config.api_key_env} environment variable")
        headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
        payload = self.build_payload(request)
        self.logger.debug("classify_request", items=len(request.items), model=self.config.model)
        try:
            if self._client is not None:
                response = await self._client.post(
                    self.config.endpoint, json=payload, headers=headers, timeout=self.config.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                    response = await client.post(self.config.endpoint, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise ServiceError(f"Classification request failed: {exc!r}") from exc
        if response.is_error:
            raise ServiceError(f"Classification service returned HTTP {response.status_code}")
        return self.parse_completion(response.text)

    @staticmethod
    def parse_completion(body: str) -> ClassificationResponse:
        """Validate a chat completion body down to a ClassificationResponse."""

        try:
            completion = json.loads(body)
            content = completion["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ServiceError(f"Malformed completion body: {exc!r}") from exc
        if not isinstance(content, str) or not content.strip():
            raise ServiceError("Completion carried no content")
        try:
            return ClassificationResponse.model_validate_json(content)
        except ValidationError as exc:
            raise ServiceError(
                f"Classification response does not match schema ({exc.error_count()} error(s))"
            ) from exc


__all__ = [
    "ClassificationItem",
    "ClassificationRequest",
    "ClassificationResponse",
    "ClassifiedItem",
    "Classifier",
    "DESCRIPTION_MAX_CHARS",
    "HttpClassifier",
    "response_json_schema",
]
