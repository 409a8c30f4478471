import logging

import feedparser
import httpx

from ..models import Article, Task
from .base import BaseCollector, CollectionError
from .scraper import fetch

logger = logging.getLogger(__name__)


class RSSCollector(BaseCollector):
    """Collects articles from an RSS or Atom feed."""

    def __init__(self, client: httpx.Client):
        self.client = client

    @property
    def name(self) -> str:
        return "RSS"

    def collect(self, task: Task) -> list[Article]:
        response = fetch(self.client, task.url)
        # Entry text is stored exactly as the feed publishes it
        feed = feedparser.parse(
            response.content, sanitize_html=False, resolve_relative_uris=False
        )
        if not feed.version:
            reason = feed.get("bozo_exception", "unrecognized feed format")
            raise CollectionError(f"Could not parse feed {task.url}: {reason}")
        if feed.bozo:
            logger.warning(f"Feed {task.url} is not well-formed: {feed.bozo_exception}")

        articles = [self._to_article(entry) for entry in feed.entries]
        logger.info(f"RSS collector gathered {len(articles)} articles from {task.url}")
        return articles

    def _to_article(self, entry) -> Article:
        content = ""
        if entry.get("content"):
            content = entry.content[0].get("value", "")
        # Feeds frequently carry only a summary
        if not content:
            content = entry.get("description", "")

        return Article(
            url=entry.get("link", ""),
            title=entry.get("title", ""),
            content=content,
        )
