"""Subprocess runner for git commands.

Every command runs with the pages directory as its working directory.
Failures never raise: they are logged and reported through the status of
the returned ``GitResult``, whose output is empty unless the command
succeeded.
"""

import asyncio
import contextlib
import logging
import os
import re
import shlex
from pathlib import Path

from mdwiki.core.models import GitResult, GitStatus

logger = logging.getLogger(__name__)

# git's wording when the requested path, revision or history is absent
NOT_FOUND_PATTERN = re.compile(
    r"does not exist"
    r"|exists on disk, but not in"
    r"|invalid object name"
    r"|bad revision"
    r"|unknown revision"
    r"|does not have any commits"
    r"|did not match any file"
    r"|not a git repository",
    re.IGNORECASE,
)

# page files are never patterns: `*`, `[ab]` or `:(exclude)x` name one file
GIT_ENV = {"GIT_LITERAL_PATHSPECS": "1"}


class GitRunner:
    """Runs git with a fixed working directory."""

    def __init__(
        self,
        cwd: Path,
        binary: str = "git",
        timeout: float | None = None,
    ):
        self.cwd = cwd
        self.binary = binary
        self.timeout = timeout

    def describe(self, args: tuple[str, ...]) -> str:
        """Shell-like rendering of a command for log messages."""
        return shlex.join((self.binary, *args))

    async def run(self, *args: str) -> GitResult:
        """Run ``git <args>`` and capture its standard output."""
        command = self.describe(args)
        logger.debug("exec: %s", command)

        try:
            process = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                cwd=self.cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env={**os.environ, **GIT_ENV},
            )
        except OSError as e:
            logger.error("error: (%s) could not start: %s", e, command)
            return GitResult(status=GitStatus.ERROR, detail=str(e))

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            logger.error(
                "error: command timed out after %ss: %s", self.timeout, command
            )
            return GitResult(status=GitStatus.ERROR, detail="timed out")

        if process.returncode == 0:
            return GitResult(status=GitStatus.OK, output=stdout)

        detail = stderr.decode("utf-8", errors="replace").strip()
        if NOT_FOUND_PATTERN.search(detail):
            logger.info("not found: %s: %s", command, detail)
            return GitResult(status=GitStatus.NOT_FOUND, detail=detail)

        logger.error(
            'error: (exit status %s) %s failed with:\n"%s\n%s"',
            process.returncode,
            command,
            stdout.decode("utf-8", errors="replace"),
            detail,
        )
        return GitResult(status=GitStatus.ERROR, detail=detail)
