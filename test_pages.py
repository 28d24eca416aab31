import asyncio

import httpx
import pytest

from omni_mount import pages
from omni_mount.config import DEFAULT_USER_AGENT

HTML = """
<html>
  <head><title>  Example Domain </title><style>body { color: red }</style></head>
  <body>
    <header>Site header</header>
    <nav>Home | About</nav>
    <h1>Hello</h1>
    <p>World of <b>pages</b>.</p>
    <script>alert("x")</script>
    <footer>Copyright</footer>
  </body>
</html>
"""


def _fetcher(handler) -> pages.PageFetcher:
    return pages.PageFetcher(transport=httpx.MockTransport(handler))


def test_html_to_text_drops_chrome_and_keeps_content():
    text = pages.html_to_text(HTML)

    assert "# Hello" in text
    assert "World of **pages**." in text
    for noise in ("Site header", "Home | About", "alert", "Copyright", "color: red"):
        assert noise not in text


def test_extract_title_trims_whitespace():
    assert pages.extract_title(HTML) == "Example Domain"
    assert pages.extract_title("<p>no title</p>") == ""


def test_fetcher_returns_title_and_markdown_and_sends_user_agent():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["ua"] = request.headers["user-agent"]
        return httpx.Response(200, html=HTML)

    title, content = asyncio.run(_fetcher(handler)("https://example.com"))

    assert title == "Example Domain"
    assert "# Hello" in content
    assert seen["ua"] == DEFAULT_USER_AGENT


def test_fetcher_falls_back_to_hostname_for_title():
    def handler(request):
        return httpx.Response(200, html="<p>untitled</p>")

    title, content = asyncio.run(_fetcher(handler)("https://docs.example.org/page"))

    assert title == "docs.example.org"
    assert content == "untitled"


def test_fetcher_raises_on_http_error_status():
    def handler(request):
        return httpx.Response(404)

    with pytest.raises(pages.FetchError, match="HTTP 404 Not Found"):
        asyncio.run(_fetcher(handler)("https://example.com/missing"))


def test_fetcher_wraps_transport_errors():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(pages.FetchError, match="connection refused"):
        asyncio.run(_fetcher(handler)("https://unreachable.invalid"))


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://example.com", True),
        ("http://localhost:8080/a", True),
        ("example.com", False),
        ("ftp://example.com", False),
        ("", False),
    ],
)
def test_looks_like_url(url, expected):
    assert pages.looks_like_url(url) is expected
