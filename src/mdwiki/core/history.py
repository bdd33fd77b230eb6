"""Parsing of ``git log`` output into history entries."""

import re

from mdwiki.core.models import LogEntry

# Output format requested from git log
LOG_FORMAT = "--pretty=format:%h %ad %s"
LOG_DATE = "--date=relative"

# "<hash> <N> <unit> ago <message>"; git may print "1 year, 2 months ago"
LOG_LINE_PATTERN = re.compile(
    r"^(?P<hash>\S+?) "
    r"(?P<time>\d+ \w+(?:, \d+ \w+)? ago) "
    r"(?P<message>.*)$"
)


def parse_log_line(line: str) -> LogEntry | None:
    """Convert one line of log output to a LogEntry.

    Returns None for lines that do not have the expected shape, such as
    blank lines or a truncated read.
    """
    match = LOG_LINE_PATTERN.match(line.rstrip("\r\n"))
    if match is None:
        return None
    return LogEntry(
        hash=match.group("hash"),
        time=match.group("time"),
        message=match.group("message"),
    )


def parse_log(output: bytes) -> list[LogEntry]:
    """Parse a whole log listing, skipping malformed lines."""
    entries = []
    for line in output.decode("utf-8", errors="replace").splitlines():
        entry = parse_log_line(line)
        if entry is not None:
            entries.append(entry)
    return entries
