from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from .urls import is_valid_url


class TaskKind(str, Enum):
    HTML = "HTML"
    RSS = "RSS"


class Task(BaseModel):
    """A named rule describing one source and how to pull articles from it.

    HTML tasks need the listing URL plus the link, title and content
    selectors. RSS tasks only need the feed URL.
    """

    name: str
    kind: TaskKind = TaskKind.HTML
    url: str
    link: str = ""
    title: str = ""
    content: str = ""

    class Config:
        use_enum_values = True
        validate_default = True

    @field_validator("kind", mode="before")
    @classmethod
    def _upper_kind(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def _check_required(self) -> "Task":
        if self.kind == TaskKind.HTML and not all(
            (self.name, self.url, self.link, self.title, self.content)
        ):
            raise ValueError(
                "Name, URL, link query, title query and content query should be specified."
            )
        if not self.name or not self.url:
            raise ValueError("Name and URL should be specified.")
        if not is_valid_url(self.url):
            raise ValueError(f"Invalid URL: {self.url}")
        return self


class Article(BaseModel):
    url: str
    title: str
    content: str
    collected_at: datetime = Field(default_factory=datetime.utcnow)


class ExtractionStatus(str, Enum):
    EXTRACTED = "extracted"
    NO_MATCH = "no_match"
    FAILED = "failed"


class ExtractionResult(BaseModel):
    """Outcome of processing one candidate link from a listing page."""

    url: str
    status: ExtractionStatus
    article: Article | None = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status == ExtractionStatus.EXTRACTED
