import httpx

from ..config import Settings
from ..models import Article, Task, TaskKind
from .base import BaseCollector, CollectionError
from .html import HTMLCollector
from .rss import RSSCollector

__all__ = [
    "BaseCollector",
    "CollectionError",
    "HTMLCollector",
    "RSSCollector",
    "collect_articles",
    "get_collector",
]


def get_collector(kind: str, client: httpx.Client, settings: Settings) -> BaseCollector:
    """Pick the collection strategy for a task kind."""
    if kind == TaskKind.RSS:
        return RSSCollector(client)
    return HTMLCollector(
        client,
        workers=settings.fetch_workers,
        resolve_against_page=settings.resolve_links_against_page,
    )


def collect_articles(task: Task, client: httpx.Client, settings: Settings) -> list[Article]:
    return get_collector(task.kind, client, settings).collect(task)
