from abc import ABC, abstractmethod

from ..models import Article, Task


class CollectionError(Exception):
    """A source could not be fetched or parsed."""


class BaseCollector(ABC):
    """Base interface for all content collectors."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this collector."""
        ...

    @abstractmethod
    def collect(self, task: Task) -> list[Article]:
        """Collect articles for a task. Raises CollectionError if the source is unusable."""
        ...
