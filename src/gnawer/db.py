import sqlite3
from datetime import datetime
from pathlib import Path

from .models import Article, Task, TaskKind


def get_connection(db_path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


class Storage:
    """SQLite store for tasks and articles.

    Open it before use and close it when done, or use it as a context
    manager. Every write is committed on its own.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> "Storage":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise sqlite3.ProgrammingError("Storage is not open")
        return self._conn

    def open(self) -> None:
        if self._conn is not None:
            return
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = get_connection(self.db_path)
        self.init_schema()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def init_schema(self) -> None:
        conn = self.conn
        conn.execute("""
            CREATE TABLE IF NOT EXISTS tasks (
                name TEXT PRIMARY KEY,
                kind TEXT NOT NULL CHECK (kind IN ('HTML', 'RSS')),
                url TEXT NOT NULL,
                link TEXT DEFAULT '',
                title TEXT DEFAULT '',
                content TEXT DEFAULT ''
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS articles (
                url TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                content TEXT NOT NULL,
                collected_at TEXT NOT NULL
            )
        """)
        conn.commit()

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def upsert_task(self, task: Task) -> None:
        """Insert a task, or replace every field of the task with the same name."""
        with self.conn:
            self.conn.execute(
                """INSERT INTO tasks (name, kind, url, link, title, content)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(name) DO UPDATE SET
                       kind = excluded.kind,
                       url = excluded.url,
                       link = excluded.link,
                       title = excluded.title,
                       content = excluded.content""",
                (
                    task.name,
                    TaskKind(task.kind).value,
                    task.url,
                    task.link,
                    task.title,
                    task.content,
                ),
            )

    def list_tasks(self) -> list[Task]:
        rows = self.conn.execute("SELECT * FROM tasks ORDER BY rowid").fetchall()
        return [_row_to_task(r) for r in rows]

    def get_task(self, name: str) -> Task | None:
        row = self.conn.execute("SELECT * FROM tasks WHERE name = ?", (name,)).fetchone()
        return _row_to_task(row) if row else None

    def delete_task(self, name: str) -> bool:
        """Delete a task. Returns True if it existed."""
        with self.conn:
            cursor = self.conn.execute("DELETE FROM tasks WHERE name = ?", (name,))
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Articles
    # ------------------------------------------------------------------

    def upsert_article(self, article: Article) -> None:
        """Insert an article, or replace the title and content stored for its URL.

        The first-seen ``collected_at`` is kept on update.
        """
        with self.conn:
            self.conn.execute(
                """INSERT INTO articles (url, title, content, collected_at)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(url) DO UPDATE SET
                       title = excluded.title,
                       content = excluded.content""",
                (
                    article.url,
                    article.title,
                    article.content,
                    article.collected_at.isoformat(),
                ),
            )

    def list_articles(self, keywords: list[str] | tuple[str, ...] = ()) -> list[Article]:
        """List stored articles.

        With keywords, only articles whose title contains every keyword are
        returned. Matching is case-sensitive.
        """
        query = "SELECT * FROM articles"
        if keywords:
            query += " WHERE " + " AND ".join("instr(title, ?) > 0" for _ in keywords)
        query += " ORDER BY rowid"
        rows = self.conn.execute(query, tuple(keywords)).fetchall()
        return [_row_to_article(r) for r in rows]

    def count_articles(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM articles").fetchone()[0]


def _row_to_task(row: sqlite3.Row) -> Task:
    return Task(
        name=row["name"],
        kind=row["kind"],
        url=row["url"],
        link=row["link"] or "",
        title=row["title"] or "",
        content=row["content"] or "",
    )


def _row_to_article(row: sqlite3.Row) -> Article:
    return Article(
        url=row["url"],
        title=row["title"],
        content=row["content"],
        collected_at=datetime.fromisoformat(row["collected_at"]),
    )
