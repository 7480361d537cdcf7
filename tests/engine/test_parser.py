from __future__ import annotations

import pytest

from devmind.engine import BookmarkParser, RawBookmark
from devmind.exceptions import BookmarkImportError


def test_parse_netscape_export(bookmarks_html: str) -> None:
    result = BookmarkParser().parse(bookmarks_html)
    assert result.records == [
        RawBookmark(title="React Docs", url="https://react.dev/"),
        RawBookmark(title="FastAPI", url="https://fastapi.tiangolo.com/"),
        RawBookmark(title="React again", url="https://react.dev/"),
        RawBookmark(title="Untitled", url="https://kubernetes.io/"),
    ]
    assert result.skipped == 2
    assert result.truncated == 0
    assert result.anchors == 6


def test_parse_applies_limit_after_skipping(bookmarks_html: str) -> None:
    result = BookmarkParser().parse(bookmarks_html, limit=2)
    assert [record.title for record in result.records] == ["React Docs", "FastAPI"]
    assert result.truncated == 2
    assert result.skipped == 2


@pytest.mark.parametrize(
    "html",
    [
        "<a>no href</a>",
        "<a href=''>empty</a>",
        "<a href='/relative/path'>relative</a>",
        "<a href='localhost:8080/x'>no scheme</a>",
        "<a href='data:text/html,hi'>data</a>",
    ],
)
def test_parse_skips_non_bookmark_targets(html: str) -> None:
    result = BookmarkParser().parse(html)
    assert result.records == []
    assert result.skipped == 1


def test_parse_tolerates_garbage() -> None:
    result = BookmarkParser().parse("<<<not really html")
    assert result.records == []


def test_parse_file(tmp_path, bookmarks_html: str) -> None:
    path = tmp_path / "bookmarks.html"
    path.write_text(bookmarks_html, encoding="utf-8")
    result = BookmarkParser().parse_file(path, limit=50)
    assert len(result.records) == 4


def test_parse_missing_file(tmp_path) -> None:
    with pytest.raises(BookmarkImportError):
        BookmarkParser().parse_file(tmp_path / "missing.html")
