"""Netscape bookmark export parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from selectolax.parser import HTMLParser

from ..catalog.entry import UNTITLED
from ..exceptions import BookmarkImportError

SKIPPED_SCHEMES = ("javascript", "place", "data")


@dataclass(slots=True)
class RawBookmark:
    """A (title, url) pair extracted from an export."""

    title: str
    url: str


@dataclass(slots=True)
class ParseResult:
    """Accepted records plus counters for what was dropped."""

    records: list[RawBookmark] = field(default_factory=list)
    skipped: int = 0
    truncated: int = 0

    @property
    def anchors(self) -> int:
        return len(self.records) + self.skipped + self.truncated


class BookmarkParser:
    """Extract bookmarks from the HTML every browser writes on export."""

    def parse(self, html: str, limit: int | None = None) -> ParseResult:
        result = ParseResult()
        tree = HTMLParser(html)
        for node in tree.css("a"):
            href = (node.attributes.get("href") or "").strip()
            if not self._is_bookmark_url(href):
                result.skipped += 1
                continue
            if limit is not None and len(result.records) >= limit:
                result.truncated += 1
                continue
            title = node.text(separator=" ", strip=True) or UNTITLED
            result.records.append(RawBookmark(title=title, url=href))
        return result

    def parse_file(self, path: Path, limit: int | None = None) -> ParseResult:
        try:
            html = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise BookmarkImportError(str(path), exc.strerror or str(exc)) from exc
        return self.parse(html, limit=limit)

    @staticmethod
    def _is_bookmark_url(href: str) -> bool:
        if not href:
            return False
        parsed = urlparse(href)
        if not parsed.scheme or parsed.scheme.lower() in SKIPPED_SCHEMES:
            return False
        # urlparse treats "localhost:8080" as scheme "localhost"
        return bool(parsed.netloc) or parsed.scheme.lower() in ("file", "about", "mailto")


__all__ = ["BookmarkParser", "ParseResult", "RawBookmark"]
