"""Shared fixtures: entry builders, in-memory storage and a scripted classifier."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator

import pytest

from devmind.catalog import BookmarkEntry, CatalogStore
from devmind.config import ConfigLocator, ConfigRepository
from devmind.engine.classifier import (
    ClassificationRequest,
    ClassificationResponse,
    ClassifiedItem,
)
from devmind.exceptions import PersistenceError
from devmind.infra import BlobStore
from devmind.orchestrator import Orchestrator


class MemoryBlobStore(BlobStore):
    """Dictionary-backed blob store that can be told to fail writes."""

    def __init__(self, initial: dict[str, str] | None = None, fail_writes: bool = False) -> None:
        self.blobs: dict[str, str] = dict(initial or {})
        self.fail_writes = fail_writes
        self.writes = 0

    def read(self, key: str) -> str | None:
        return self.blobs.get(key)

    def write(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise PersistenceError("disk full")
        self.writes += 1
        self.blobs[key] = value


def classify_all(request: ClassificationRequest, category: str = "Frontend") -> ClassificationResponse:
    return ClassificationResponse(
        items=[
            ClassifiedItem(
                url=item.url,
                category=category,
                description=f"About {item.title}",
                tags=["web", "docs", "tools"],
            )
            for item in request.items
        ]
    )


class ScriptedClassifier:
    """Fake classifier answering batches from a script.

    Each step is consumed by one call: an exception is raised, a callable is
    invoked with the request, a response is returned as-is. Once the script
    runs out every item is classified as ``Frontend``.
    """

    def __init__(self, steps: Iterable[Any] | None = None) -> None:
        self.steps = list(steps or [])
        self.requests: list[ClassificationRequest] = []

    async def classify(self, request: ClassificationRequest) -> ClassificationResponse:
        self.requests.append(request)
        step = self.steps.pop(0) if self.steps else None
        if isinstance(step, Exception):
            raise step
        if callable(step):
            step = step(request)
        if step is None:
            return classify_all(request)
        return step


@pytest.fixture
def make_entry() -> Callable[..., BookmarkEntry]:
    counter = iter(range(1, 100_000))

    def _builder(**overrides: Any) -> BookmarkEntry:
        number = next(counter)
        base: dict[str, Any] = {
            "id": f"id-{number}",
            "title": f"Bookmark {number}",
            "url": f"https://example.com/{number}",
            "added_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }
        if overrides.get("processed"):
            base.update({"category": "Frontend", "description": "A page", "tags": ("web",)})
        base.update(overrides)
        return BookmarkEntry(**base)

    return _builder


@pytest.fixture
def memory_blob_store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def catalog(memory_blob_store: MemoryBlobStore) -> CatalogStore:
    return CatalogStore(memory_blob_store, key="test-catalog")


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigRepository:
    monkeypatch.setenv("DEVMIND_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    return ConfigRepository(locator)


@pytest.fixture
def bookmarks_html() -> str:
    return """<!DOCTYPE NETSCAPE-Bookmark-file-1>
<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">
<TITLE>Bookmarks</TITLE>
<H1>Bookmarks</H1>
<DL><p>
    <DT><H3 ADD_DATE="1700000000">Dev</H3>
    <DL><p>
        <DT><A HREF="https://react.dev/" ADD_DATE="1700000001">React Docs</A>
        <DT><A HREF="https://fastapi.tiangolo.com/" ADD_DATE="1700000002">FastAPI</A>
        <DT><A HREF="javascript:alert(1)">Bookmarklet</A>
        <DT><A HREF="https://react.dev/">React again</A>
        <DT><A HREF="https://kubernetes.io/"></A>
    </DL><p>
    <DT><A HREF="place:sort=8&maxResults=10">Recent Tags</A>
</DL><p>
"""


@pytest.fixture
def scripted_classifier() -> Callable[..., ScriptedClassifier]:
    return ScriptedClassifier


@pytest.fixture
def classify() -> Callable[..., ClassificationResponse]:
    return classify_all


@pytest.fixture
def make_orchestrator(
    temp_config_repository: ConfigRepository, memory_blob_store: MemoryBlobStore
) -> Iterator[Callable[..., Orchestrator]]:
    created: list[Orchestrator] = []

    def _builder(classifier: Any = None, blob_store: BlobStore | None = None) -> Orchestrator:
        orchestrator = Orchestrator(
            temp_config_repository,
            classifier=classifier or ScriptedClassifier(),
            blob_store=blob_store or memory_blob_store,
        )
        created.append(orchestrator)
        return orchestrator

    yield _builder
    for orchestrator in created:
        orchestrator.close()
