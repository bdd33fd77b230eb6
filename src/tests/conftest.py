"""Shared fixtures: throwaway git repositories for the page store."""

import shutil
import subprocess
from pathlib import Path

import pytest

from mdwiki.config import Settings


def git(cwd: Path, *args: str) -> str:
    """Run git synchronously in cwd and return its stdout."""
    result = subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    )
    return result.stdout


@pytest.fixture
def wiki_settings(tmp_path, monkeypatch):
    """Settings pointing at a fresh git repository under tmp_path."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    for name in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(data_dir=tmp_path / "web", git_timeout=30.0)
    pages = settings.pages_dir
    pages.mkdir(parents=True)
    git(pages, "init", "-q")
    git(pages, "config", "user.name", "Wiki Tester")
    git(pages, "config", "user.email", "tester@example.com")
    git(pages, "config", "commit.gpgsign", "false")
    return settings


@pytest.fixture
def pages_dir(wiki_settings) -> Path:
    return wiki_settings.pages_dir
