"""Command line entry point: ``python -m mdwiki``."""

import argparse
import logging
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import uvicorn

from mdwiki.config import Settings
from mdwiki.main import create_app


def get_version() -> str:
    try:
        return version("mdwiki")
    except PackageNotFoundError:
        return "unknown"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mdwiki",
        description="Markdown wiki with git page history.",
    )
    parser.add_argument("--host", help="http server bind host")
    parser.add_argument("--port", type=int, help="http server bind port")
    parser.add_argument("--data-dir", type=Path, help="directory to serve over http")
    parser.add_argument("--tpl-dir", type=Path, help="directory with template files")
    parser.add_argument("--url-dir", help="base directory for URL")
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> Settings:
    """Environment settings overridden by any flags given."""
    overrides = {
        "host": args.host,
        "port": args.port,
        "data_dir": args.data_dir,
        "templates_dir": args.tpl_dir,
        "url_dir": args.url_dir,
    }
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


def main(argv: list[str] | None = None) -> None:
    config = load_settings(parse_args(argv))
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logging.getLogger(__name__).info(
        "serving files over http from directory: %s", config.data_dir
    )
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
