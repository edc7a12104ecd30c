from types import SimpleNamespace

import pytest
import requests

from chains.errors import DocumentLoadError, DocumentTimeoutError
from knowledge.loaders import TextFileLoader, WebPageLoader, html_to_text

PAGE = """
<html>
  <head><title>LCEL | LangChain</title><style>body { color: red; }</style></head>
  <body>
    <script>window.analytics = true;</script>
    <h1>LangChain Expression Language</h1>
    <p>LCEL is a declarative way to   compose chains.</p>
  </body>
</html>
"""


class FakeSession:
    def __init__(self, text: str = PAGE, error: Exception | None = None, status_error: Exception | None = None):
        self.text = text
        self.error = error
        self.status_error = status_error
        self.requests: list[tuple[str, float]] = []

    def get(self, url: str, timeout: float):
        self.requests.append((url, timeout))
        if self.error is not None:
            raise self.error

        def raise_for_status():
            if self.status_error is not None:
                raise self.status_error

        return SimpleNamespace(text=self.text, raise_for_status=raise_for_status)


def test_html_to_text_drops_markup_scripts_and_styles():
    text, title = html_to_text(PAGE)

    assert title == "LCEL | LangChain"
    assert "LCEL is a declarative way to compose chains." in text
    assert "analytics" not in text
    assert "color" not in text
    assert "<p>" not in text


def test_web_page_loader_returns_one_document_with_source():
    session = FakeSession()
    loader = WebPageLoader("https://example.com/lcel", timeout=5.0, session=session)

    documents = loader.load()

    assert len(documents) == 1
    assert documents[0].metadata == {"source": "https://example.com/lcel", "title": "LCEL | LangChain"}
    assert session.requests == [("https://example.com/lcel", 5.0)]


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.ConnectionError("unreachable")),
        FakeSession(status_error=requests.HTTPError("404 Client Error")),
    ],
)
def test_web_page_loader_wraps_request_failures(session):
    with pytest.raises(DocumentLoadError):
        WebPageLoader("https://example.com/missing", session=session).load()


def test_web_page_loader_reports_timeouts_separately():
    session = FakeSession(error=requests.Timeout("read timed out"))

    with pytest.raises(DocumentTimeoutError, match="did not respond within 2.5 seconds"):
        WebPageLoader("https://example.com/slow", timeout=2.5, session=session).load()


def test_text_file_loader_reads_file(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("The passphrase is LangChain is awesome!", encoding="utf-8")

    documents = TextFileLoader(path).load()

    assert documents[0].page_content == "The passphrase is LangChain is awesome!"
    assert documents[0].metadata == {"source": str(path)}


def test_text_file_loader_reports_missing_file(tmp_path):
    with pytest.raises(DocumentLoadError):
        TextFileLoader(tmp_path / "missing.txt").load()
