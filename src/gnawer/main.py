import argparse
import logging
import sqlite3
import sys

from .collectors import CollectionError, collect_articles
from .collectors.scraper import SelectorEngine, make_client
from .config import LogLevel, Settings, settings
from .db import Storage
from .models import Task, TaskKind

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def add_task(storage: Storage, args: argparse.Namespace) -> int:
    try:
        task = Task(
            name=args.name,
            kind=args.kind,
            url=args.url,
            link=args.link,
            title=args.title,
            content=args.content,
        )
        if task.kind == TaskKind.HTML:
            engine = SelectorEngine()
            for selector in (task.link, task.title, task.content):
                engine.check(selector)
    except ValueError as exc:
        logger.error(f"Invalid task: {exc}")
        return 1

    storage.upsert_task(task)
    print(f'Task "{task.name}" added.')
    return 0


def list_tasks(storage: Storage, args: argparse.Namespace) -> int:
    print("Tasks:")
    for task in storage.list_tasks():
        line = f"{task.name} [{task.kind}] {task.url}"
        if task.kind == TaskKind.HTML:
            line += f" link={task.link!r} title={task.title!r} content={task.content!r}"
        print(line)
    return 0


def remove_task(storage: Storage, args: argparse.Namespace) -> int:
    if not storage.delete_task(args.name):
        logger.error(f'No task named "{args.name}"')
        return 1
    print(f'Task "{args.name}" removed.')
    return 0


def run_update(storage: Storage, config: Settings) -> int:
    """Collect every stored task and upsert the resulting articles."""
    tasks = storage.list_tasks()
    logger.info(f"Updating {len(tasks)} task(s)")

    collected = 0
    failed = 0
    print("Loaded news:")
    with make_client(config.http_timeout, config.user_agent) as client:
        for task in tasks:
            try:
                articles = collect_articles(task, client, config)
            except CollectionError:
                logger.exception(f'Task "{task.name}": collection failed, skipping')
                failed += 1
                continue

            for article in articles:
                print(f"Title: {article.title}; Link: {article.url}")
                storage.upsert_article(article)
            collected += len(articles)
            logger.info(f'Task "{task.name}": {len(articles)} articles')

    logger.info(
        f"Update finished: {collected} articles from {len(tasks) - failed} task(s), "
        f"{failed} failed, {storage.count_articles()} stored in total"
    )
    return 0


def list_news(storage: Storage, args: argparse.Namespace) -> int:
    print("News:")
    if args.keywords:
        print("Search: " + " ".join(args.keywords))
    for article in storage.list_articles(args.keywords):
        print(f"Title: {article.title}\n{article.content}\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gnawer",
        description="Collect news from RSS feeds and HTML pages into a local store",
    )
    parser.add_argument(
        "--db",
        dest="database_path",
        help=f"Database file (default: {settings.database_path})",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="Add or replace a task")
    add.add_argument("-n", "--name", default="", help="Unique name")
    add.add_argument(
        "-k", "--kind",
        default="HTML",
        type=str.upper,
        choices=[k.value for k in TaskKind],
        help="Kind: HTML|RSS. Default is HTML",
    )
    add.add_argument("-u", "--url", default="", help="URL")
    add.add_argument("-l", "--link", default="", help="Link query. Example: a.item__link")
    add.add_argument("-t", "--title", default="", help="Title query. Example: div.article__header")
    add.add_argument("-c", "--content", default="", help="Content query. Example: div.article__text")

    commands.add_parser("tasks", help="List tasks")

    remove = commands.add_parser("remove", help="Remove a task")
    remove.add_argument("name", help="Task name")

    commands.add_parser("update", help="Collect articles for all tasks")

    news = commands.add_parser("news", help="List or search stored articles")
    news.add_argument("keywords", nargs="*", help="Only show articles whose title contains all keywords")

    return parser


def run(argv: list[str] | None = None, config: Settings | None = None) -> int:
    config = config or settings
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else LogLevel(config.log_level).value
    logging.getLogger().setLevel(level)

    db_path = args.database_path or config.database_path
    try:
        with Storage(db_path) as storage:
            if args.command == "add":
                return add_task(storage, args)
            if args.command == "tasks":
                return list_tasks(storage, args)
            if args.command == "remove":
                return remove_task(storage, args)
            if args.command == "update":
                return run_update(storage, config)
            return list_news(storage, args)
    except sqlite3.Error:
        logger.exception(f"Storage error ({db_path})")
        return 1


def cli() -> None:
    """CLI entry point."""
    sys.exit(run())


if __name__ == "__main__":
    cli()
