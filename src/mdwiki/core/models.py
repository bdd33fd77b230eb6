"""Data models for MdWiki."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class GitStatus(str, Enum):
    """Outcome of one git invocation."""

    OK = "ok"
    NOT_FOUND = "not_found"
    ERROR = "error"


class GitResult(BaseModel):
    """Captured result of a git command.

    ``output`` is always empty unless ``status`` is ``OK``.
    """

    status: GitStatus
    output: bytes = b""
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status is GitStatus.OK


class LogEntry(BaseModel):
    """One history record of a page, as printed by ``git log``."""

    model_config = ConfigDict(frozen=True)

    hash: str
    time: str
    message: str
    link: bool = True


class Directory(BaseModel):
    """Breadcrumb segment of a page path."""

    path: str
    name: str
    active: bool = False


class PageMode(str, Enum):
    """Which presentation the page is rendered with."""

    VIEW = "view"
    EDIT = "edit"


class Page(BaseModel):
    """A wiki page as assembled for one request."""

    path: str
    data: bytes = b""
    content: str = ""
    markup: str = ""
    revision: str = ""
    log: list[LogEntry] = Field(default_factory=list)
    show_history: bool = False
    mode: PageMode = PageMode.VIEW
    exists: bool = True
    error: str | None = None
    dirs: list[Directory] = Field(default_factory=list)
    url_base: str = ""

    @property
    def file(self) -> str:
        """Backing file, relative to the pages directory."""
        return f"{self.path}.md"

    @property
    def text(self) -> str:
        """Page bytes decoded for rendering and editing."""
        return self.data.decode("utf-8", errors="replace")

    @property
    def title(self) -> str:
        """Last path segment with underscores shown as spaces."""
        return self.path.rsplit("/", 1)[-1].replace("_", " ")

    @property
    def is_head(self) -> bool:
        """True when the displayed revision is the newest one in the log."""
        return bool(self.log) and self.revision == self.log[0].hash
