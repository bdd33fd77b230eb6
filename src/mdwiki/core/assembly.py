"""Request workflows: save, revert and view.

Exactly one workflow runs per request, chosen in that order of
precedence. Each is a fixed sequence of repository operations threaded
through the ``Page`` they return.
"""

import asyncio
import logging
import weakref
from datetime import datetime

from pydantic import BaseModel

from mdwiki.config import Settings
from mdwiki.core.gateway import PageRepository
from mdwiki.core.markup import render_markdown
from mdwiki.core.models import Directory, Page, PageMode

logger = logging.getLogger(__name__)


class PageRequest(BaseModel):
    """Normalized request parameters for one page."""

    path: str
    content: str = ""
    edit: bool = False
    save: bool = False
    revert: str = ""
    revision: str = ""
    message: str = ""
    author: str = ""
    show_history: bool = False
    client: str = ""


class PathLocks:
    """One asyncio lock per logical page path."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def get(self, path: str) -> asyncio.Lock:
        lock = self._locks.get(path)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[path] = lock
        return lock


def list_directories(path: str) -> list[Directory]:
    """Breadcrumbs for a logical path; the last one is active."""
    dirs = []
    parts = path.split("/")
    for i, name in enumerate(parts):
        dirs.append(
            Directory(
                path="/".join(parts[: i + 1]),
                name=name,
                active=i == len(parts) - 1,
            )
        )
    return dirs


def commit_message_for(client: str, now: datetime | None = None) -> str:
    """Default commit message for a save without one."""
    now = now or datetime.now().astimezone()
    return f"by {client} at {now.isoformat(timespec='seconds')}"


def render(page: Page) -> Page:
    """Set the page markup from its content."""
    return page.model_copy(
        update={"markup": render_markdown(page.text), "mode": PageMode.VIEW}
    )


def template_blocks(page: Page) -> list[str]:
    """Names of the templates that make up the response, in order."""
    if page.mode is PageMode.EDIT:
        return ["edit.html"]
    blocks = ["header.html"]
    if page.is_head:
        blocks.append("actions.html")
    elif page.revision:
        blocks.append("revision.html")
    blocks.append("page.html")
    if page.show_history:
        blocks.append("revisions.html")
    blocks.append("footer.html")
    return blocks


class PageAssembler:
    """Builds the page for a request by running one workflow."""

    def __init__(self, settings: Settings, repository: PageRepository | None = None):
        self.repository = repository or PageRepository(settings)
        self.url_base = settings.url_base
        self.locks = PathLocks()
        # git keeps a single index per repository
        self.write_lock = asyncio.Lock()

    def new_page(self, request: PageRequest) -> Page:
        return Page(
            path=request.path,
            show_history=request.show_history,
            dirs=list_directories(request.path),
            url_base=self.url_base,
        )

    async def handle(self, request: PageRequest) -> Page:
        """Run the workflow selected by the request parameters.

        Workflows on the same page never overlap, and the write
        workflows of different pages are serialized as well.
        """
        page = self.new_page(request)
        async with self.locks.get(request.path):
            if request.content and request.save:
                async with self.write_lock:
                    return await self.save(page, request)
            if request.revert:
                async with self.write_lock:
                    return await self.revert(page, request)
            return await self.view(page, request)

    async def save(self, page: Page, request: PageRequest) -> Page:
        repo = self.repository
        message = request.message or commit_message_for(request.client)
        try:
            page = repo.write(page, request.content.encode("utf-8"))
        except OSError as e:
            logger.error("cannot write to file %s: %s", repo.get_path(page), e)
            return page.model_copy(update={"error": f"Could not save {page.file}"})

        page = await repo.stage(page)
        page = await repo.commit(page, message, request.author)
        page = await repo.fetch_log(page)
        return render(page)

    async def revert(self, page: Page, request: PageRequest) -> Page:
        repo = self.repository
        page = page.model_copy(update={"revision": request.revert})
        page = await repo.revert(page)
        page = await repo.commit(page, f"reverted to: {request.revert}", request.author)

        page = page.model_copy(update={"revision": ""})
        page = await repo.show(page)
        page = await repo.fetch_log(page)
        return render(page)

    async def view(self, page: Page, request: PageRequest) -> Page:
        repo = self.repository
        page = page.model_copy(update={"revision": request.revision})
        page = await repo.show(page)
        page = await repo.fetch_log(page)
        if request.edit or not page.exists or not page.data:
            return page.model_copy(
                update={"mode": PageMode.EDIT, "content": page.text}
            )
        return render(page)
