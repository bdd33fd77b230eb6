"""Application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PAGES_DIR = "pages"
PUBLIC_DIR = "public"
ASSETS_DIR = "assets"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    data_dir: Path = Path("web")
    templates_dir: Path | None = None
    url_dir: str = ""
    app_title: str = "MdWiki"
    debug: bool = False

    host: str = "127.0.0.1"
    port: int = 8040
    log_level: str = "info"

    git_binary: str = "git"
    git_timeout: float | None = 30.0
    log_limit: int = 5
    author_email: str = "mdwiki@localhost"
    init_repo: bool = True

    model_config = SettingsConfigDict(
        env_prefix="MDWIKI_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @property
    def pages_dir(self) -> Path:
        """Directory holding the page files; also the git working directory."""
        return self.data_dir / PAGES_DIR

    @property
    def url_base(self) -> str:
        """URL prefix without trailing slash ("" when mounted at root)."""
        base = self.url_dir.strip().strip("/")
        return f"/{base}" if base else ""


settings = Settings()
