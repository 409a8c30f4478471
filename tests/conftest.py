"""
Shared fixtures for gnawer tests.

HTTP traffic is served by httpx.MockTransport from a dict of URL -> page,
so no test touches the network.
"""

import httpx
import pytest

from gnawer.config import Settings
from gnawer.db import Storage
from gnawer.models import Task


def article_page(title: str, body: str) -> str:
    return f"""<html>
      <head><title>Site</title></head>
      <body>
        <h1 class="title">{title}</h1>
        <div class="body">{body}</div>
      </body>
    </html>"""


def listing_page(hrefs: list[str]) -> str:
    links = "\n".join(f'<li><a class="item" href="{h}">link</a></li>' for h in hrefs)
    return f"<html><body><ul>{links}</ul></body></html>"


class FakeWeb:
    """Routes requests to canned responses and records what was fetched."""

    def __init__(self, pages: dict | None = None):
        self.pages = dict(pages or {})
        self.requested: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        page = self.pages.get(url)
        if page is None:
            return httpx.Response(404, text="not found")
        if isinstance(page, Exception):
            raise page
        if isinstance(page, tuple):
            status, body = page
            return httpx.Response(status, text=body)
        return httpx.Response(200, text=page, headers={"content-type": "text/html"})

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self), follow_redirects=True)


@pytest.fixture
def fake_web():
    return FakeWeb()


@pytest.fixture
def settings():
    return Settings(fetch_workers=2, resolve_links_against_page=False)


@pytest.fixture
def storage(tmp_path):
    """Open storage backed by a temporary SQLite file."""
    store = Storage(str(tmp_path / "db" / "news.db"))
    store.open()
    yield store
    store.close()


@pytest.fixture
def html_task():
    return Task(
        name="example",
        kind="HTML",
        url="http://example.com/news",
        link="a.item",
        title="h1.title",
        content="div.body",
    )


@pytest.fixture
def rss_task():
    return Task(name="feed", kind="RSS", url="http://example.com/feed.xml")
