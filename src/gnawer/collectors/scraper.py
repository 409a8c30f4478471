import logging

import httpx
import soupsieve
from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup
from soupsieve import SelectorSyntaxError

from ..models import Article, Task
from ..text import html_to_text
from .base import CollectionError

logger = logging.getLogger(__name__)

HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/rss+xml,application/atom+xml,*/*",
}


def make_client(timeout: float, user_agent: str) -> httpx.Client:
    """Build the HTTP client shared by every collector in a run."""
    return httpx.Client(
        follow_redirects=True,
        timeout=timeout,
        headers={"User-Agent": user_agent, **HEADERS},
    )


def fetch(client: httpx.Client, url: str) -> httpx.Response:
    """GET ``url``. Anything but a 200 response raises CollectionError."""
    logger.debug(f"Fetching {url}")
    # ValueError covers hosts httpx cannot IDNA-encode
    try:
        response = client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
        raise CollectionError(f"Failed to fetch {url}: {exc}") from exc

    if response.status_code != 200:
        raise CollectionError(
            f"status code error: {response.status_code} {response.reason_phrase} for {url}"
        )
    return response


class SelectorEngine:
    """CSS selector queries over parsed HTML documents.

    Collectors only talk to this class, so selector expressions stay opaque
    strings everywhere else.
    """

    def __init__(self, parser: str = "lxml") -> None:
        self.parser = parser

    def parse(self, markup: bytes | str) -> BeautifulSoup:
        try:
            return BeautifulSoup(markup, self.parser)
        except ParserRejectedMarkup as exc:
            raise CollectionError(f"Could not parse HTML: {exc}") from exc

    def select(self, node: Tag, selector: str) -> list[Tag]:
        try:
            return list(node.select(selector))
        except SelectorSyntaxError as exc:
            raise CollectionError(f"Invalid selector {selector!r}: {exc}") from exc

    def select_one(self, node: Tag, selector: str) -> Tag | None:
        try:
            return node.select_one(selector)
        except SelectorSyntaxError as exc:
            raise CollectionError(f"Invalid selector {selector!r}: {exc}") from exc

    def inner_html(self, node: Tag) -> str:
        return node.decode_contents()

    def attr(self, node: Tag, name: str) -> str | None:
        value = node.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def check(self, selector: str) -> None:
        """Raise ValueError if ``selector`` is not valid CSS."""
        try:
            soupsieve.compile(selector)
        except SelectorSyntaxError as exc:
            raise ValueError(f"Invalid selector {selector!r}: {exc}") from exc


def fetch_document(client: httpx.Client, url: str, engine: SelectorEngine) -> BeautifulSoup:
    """Fetch ``url`` and parse it as HTML."""
    response = fetch(client, url)
    return engine.parse(response.content)


def extract_article(
    task: Task, url: str, document: Tag, engine: SelectorEngine
) -> Article | None:
    """Build an Article from a page using the task's title and content selectors.

    Returns None when either selector matches nothing or yields no text.
    """
    title_node = engine.select_one(document, task.title)
    content_node = engine.select_one(document, task.content)
    if title_node is None or content_node is None:
        return None

    title = html_to_text(engine.inner_html(title_node))
    content = html_to_text(engine.inner_html(content_node))
    if not title or not content:
        return None
    return Article(url=url, title=title, content=content)
