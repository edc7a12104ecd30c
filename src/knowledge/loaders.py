"""Document sources: local text files and raw web pages."""

from __future__ import annotations

import logging
import re
from html.parser import HTMLParser
from pathlib import Path

import requests

from chains.errors import DocumentLoadError, DocumentTimeoutError

from .models import Document

logger = logging.getLogger(__name__)

_SKIPPED_TAGS = {"script", "style", "noscript", "template", "svg"}
_WHITESPACE = re.compile(r"\s+")


class _TextExtractor(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._parts: list[str] = []
        self._skip_depth = 0
        self.title: str | None = None
        self._in_title = False

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in _SKIPPED_TAGS:
            self._skip_depth += 1
        elif tag == "title":
            self._in_title = True

    def handle_endtag(self, tag: str) -> None:
        if tag in _SKIPPED_TAGS and self._skip_depth:
            self._skip_depth -= 1
        elif tag == "title":
            self._in_title = False

    def handle_data(self, data: str) -> None:
        if self._skip_depth:
            return
        if self._in_title and self.title is None and data.strip():
            self.title = data.strip()
        self._parts.append(data)

    def text(self) -> str:
        return _WHITESPACE.sub(" ", " ".join(self._parts)).strip()


def html_to_text(html: str) -> tuple[str, str | None]:
    """Return visible text and the page title."""
    extractor = _TextExtractor()
    extractor.feed(html)
    extractor.close()
    return extractor.text(), extractor.title


class TextFileLoader:
    """Load one UTF-8 (by default) text file as a single document."""

    def __init__(self, path: str | Path, encoding: str = "utf-8") -> None:
        self._path = Path(path)
        self._encoding = encoding

    def load(self) -> list[Document]:
        try:
            content = self._path.read_text(encoding=self._encoding)
        except OSError as exc:
            raise DocumentLoadError(f"Cannot read '{self._path}': {exc}") from exc
        return [Document(page_content=content, metadata={"source": str(self._path)})]


class WebPageLoader:
    """Fetch one page and keep its visible text. No crawling, no script execution."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._session = session or requests.Session()

    def load(self) -> list[Document]:
        logger.info("Fetching %s", self._url)
        try:
            response = self._session.get(self._url, timeout=self._timeout)
            response.raise_for_status()
        except requests.Timeout as exc:
            raise DocumentTimeoutError(f"'{self._url}' did not respond within {self._timeout} seconds") from exc
        except requests.RequestException as exc:
            raise DocumentLoadError(f"Cannot fetch '{self._url}': {exc}") from exc

        text, title = html_to_text(response.text)
        metadata: dict[str, str] = {"source": self._url}
        if title:
            metadata["title"] = title
        return [Document(page_content=text, metadata=metadata)]


__all__ = ["TextFileLoader", "WebPageLoader", "html_to_text"]
