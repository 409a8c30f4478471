import logging
from concurrent.futures import ThreadPoolExecutor

import httpx

from ..models import Article, ExtractionResult, ExtractionStatus, Task
from ..urls import resolve_link
from .base import BaseCollector, CollectionError
from .scraper import SelectorEngine, extract_article, fetch_document

logger = logging.getLogger(__name__)


class HTMLCollector(BaseCollector):
    """Collects articles linked from an HTML listing page using CSS selectors."""

    def __init__(
        self,
        client: httpx.Client,
        workers: int = 4,
        resolve_against_page: bool = False,
        engine: SelectorEngine | None = None,
    ):
        self.client = client
        self.workers = max(1, workers)
        self.resolve_against_page = resolve_against_page
        self.engine = engine or SelectorEngine()

    @property
    def name(self) -> str:
        return "HTML"

    def collect(self, task: Task) -> list[Article]:
        listing = fetch_document(self.client, task.url, self.engine)
        urls = self._candidate_urls(task, listing)

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            results = list(pool.map(lambda url: self._collect_one(task, url), urls))

        articles = [r.article for r in results if r.ok]
        logger.info(
            f"HTML collector gathered {len(articles)} of {len(urls)} candidates from {task.url}"
        )
        return articles

    def _candidate_urls(self, task: Task, listing) -> list[str]:
        urls = []
        for node in self.engine.select(listing, task.link):
            href = self.engine.attr(node, "href")
            if href is None:
                continue
            url = resolve_link(href, task.link, task.url, against_page=self.resolve_against_page)
            if url is None:
                logger.debug(f"Skipping unresolvable link: {href!r}")
                continue
            urls.append(url)
        return urls

    def _collect_one(self, task: Task, url: str) -> ExtractionResult:
        try:
            document = fetch_document(self.client, url, self.engine)
            article = extract_article(task, url, document, self.engine)
        except CollectionError as exc:
            logger.debug(f"Skipping {url}: {exc}")
            return ExtractionResult(url=url, status=ExtractionStatus.FAILED, error=str(exc))
        except Exception as exc:
            logger.exception(f"Unexpected error collecting {url}, skipping")
            return ExtractionResult(url=url, status=ExtractionStatus.FAILED, error=repr(exc))

        if article is None:
            logger.debug(f"No title/content match on {url}")
            return ExtractionResult(url=url, status=ExtractionStatus.NO_MATCH)
        return ExtractionResult(url=url, status=ExtractionStatus.EXTRACTED, article=article)
