"""Git-backed page repository.

Pages are Markdown files under the pages directory, which is (or lives
inside) a git work tree. Each operation below runs one git command for a
single page and returns the page it produced, so a request workflow is a
chain of awaited calls::

    page = await repo.show(page)
    page = await repo.fetch_log(page)

The repository decides nothing about which operations run for a request;
that is the job of ``mdwiki.core.assembly``.
"""

import logging
from pathlib import Path

from mdwiki.config import Settings
from mdwiki.core.history import LOG_DATE, LOG_FORMAT, parse_log
from mdwiki.core.models import GitStatus, Page
from mdwiki.core.runner import GitRunner

logger = logging.getLogger(__name__)


class PageRepository:
    """Stage, commit, show, log and revert pages in a git repository."""

    def __init__(self, settings: Settings, runner: GitRunner | None = None):
        self.pages_dir = settings.pages_dir
        self.log_limit = settings.log_limit
        self.author_email = settings.author_email
        self.init_repo = settings.init_repo
        self.runner = runner or GitRunner(
            self.pages_dir,
            binary=settings.git_binary,
            timeout=settings.git_timeout,
        )

    def get_path(self, page: Page) -> Path:
        """Full filesystem path of a page's backing file."""
        return self.pages_dir / page.file

    async def ensure_repository(self) -> None:
        """Create the pages directory and initialize git there if needed."""
        self.pages_dir.mkdir(parents=True, exist_ok=True)
        result = await self.runner.run("rev-parse", "--is-inside-work-tree")
        if result.ok:
            return
        if not self.init_repo:
            logger.warning("%s is not a git work tree", self.pages_dir)
            return
        logger.info("Initializing git repository in %s", self.pages_dir)
        await self.runner.run("init")

    def write(self, page: Page, data: bytes) -> Page:
        """Write new content to the page file, creating parent directories.

        Raises OSError when the file cannot be written.
        """
        path = self.get_path(page)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return page.model_copy(update={"data": data, "exists": True})

    async def stage(self, page: Page) -> Page:
        """Mark the page file for inclusion in the next commit."""
        await self.runner.run("add", "--", page.file)
        return page

    async def commit(self, page: Page, message: str, author: str = "") -> Page:
        """Commit the page file.

        With a non-empty author the commit is attributed to
        ``<author> <author_email>``; otherwise git's configured identity
        is used. Only the page's own path is committed.
        """
        args = ["commit", "-m", message]
        if author:
            args.append(f"--author={author} <{self.author_email}>")
        args.extend(["--", page.file])
        await self.runner.run(*args)
        return page

    async def show(self, page: Page) -> Page:
        """Fetch the page content at ``page.revision``.

        An empty revision reads the currently staged content. Missing
        files and failed commands both leave ``data`` empty; they are
        told apart by ``exists`` and ``error``.
        """
        result = await self.runner.run("show", f"{page.revision}:{page.file}")
        update: dict = {"data": result.output, "exists": True}
        if result.status is GitStatus.NOT_FOUND:
            update["exists"] = False
        elif result.status is GitStatus.ERROR:
            update["exists"] = False
            update["error"] = f"Could not read {page.file}: {result.detail}"
        return page.model_copy(update=update)

    async def fetch_log(self, page: Page) -> Page:
        """Load the most recent history entries of the page, newest first.

        The entry matching ``page.revision`` is not linkable. When no
        revision was selected, the newest entry becomes the revision.
        """
        result = await self.runner.run(
            "log",
            LOG_FORMAT,
            LOG_DATE,
            "-n",
            str(self.log_limit),
            "--",
            page.file,
        )
        revision = page.revision
        entries = parse_log(result.output)
        if not revision and entries:
            revision = entries[0].hash
        log = [
            entry.model_copy(update={"link": entry.hash != revision})
            for entry in entries
        ]
        return page.model_copy(update={"log": log, "revision": revision})

    async def revert(self, page: Page) -> Page:
        """Restore the page file to ``page.revision`` without committing."""
        logger.info("reverting %s to revision %s", page.file, page.revision)
        await self.runner.run("checkout", page.revision, "--", page.file)
        return page
