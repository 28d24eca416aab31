from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup
from markdownify import markdownify

from .config import DEFAULT_USER_AGENT

# Page chrome that never carries the content we want to cache.
STRIP_TAGS = ["script", "style", "nav", "footer", "header"]


class FetchError(Exception):
    pass


def looks_like_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def extract_title(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    title_tag = soup.find("title")
    if title_tag and title_tag.get_text():
        return title_tag.get_text().strip()
    return ""


def clean_html(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(STRIP_TAGS):
        tag.decompose()
    body = soup.body or soup
    return str(body)


def html_to_text(html: str) -> str:
    """Convert an HTML document to Markdown, dropping scripts, styles and page chrome."""
    return markdownify(clean_html(html), heading_style="atx").strip()


class PageFetcher:
    """
    Fetch a URL and convert it to Markdown.

    Calling the fetcher returns `(title, content)`; any transport failure or a
    non-2xx status raises `FetchError` with a readable reason. The title falls
    back to the URL's host name when the page has no `<title>`.
    """

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self.transport = transport
        self.name = "PageFetcher"

    async def __call__(self, url: str) -> tuple[str, str]:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            return await fetch_and_convert(client, url, user_agent=self.user_agent)


async def fetch_and_convert(
    client: httpx.AsyncClient, url: str, user_agent: str = DEFAULT_USER_AGENT
) -> tuple[str, str]:
    try:
        response = await client.get(url, headers={"User-Agent": user_agent})
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise FetchError(str(e) or type(e).__name__) from e

    if not response.is_success:
        raise FetchError(f"HTTP {response.status_code} {response.reason_phrase}")

    html = response.text
    title = extract_title(html) or urlparse(url).hostname or url
    return title, html_to_text(html)
