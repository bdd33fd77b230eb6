"""MdWiki FastAPI application."""

import logging
import re
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from mdwiki.config import ASSETS_DIR, PUBLIC_DIR, Settings, settings
from mdwiki.core.assembly import PageAssembler, PageRequest, template_blocks

logger = logging.getLogger(__name__)

templates_path = Path(__file__).parent / "templates"
static_path = Path(__file__).parent / "static"

INDEX_PAGE = "index"
FAVICON = "favicon.ico"

REVISION_PATTERN = re.compile(r"^[0-9a-fA-F]{4,40}$")
INVALID_SEGMENT_PATTERN = re.compile(r"^[.-]|[\\\x00-\x1f\x7f]")

TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
CONFIRM_VALUE = "true"


def parse_bool(value: str | None) -> bool:
    """Interpret a form flag; anything unrecognized is false."""
    return value in TRUE_VALUES


def is_confirmed(value: str | None) -> bool:
    """Action flags (`edit`, `save`) fire only on the literal "true"."""
    return value == CONFIRM_VALUE


def resolve_page_path(url_path: str) -> str:
    """Map the URL path below the wiki root to a logical page path.

    The root maps to "index", as does a trailing slash inside a
    directory. Raises HTTPException(400) for paths that could escape
    the pages directory or be read as command options.
    """
    path = url_path.lstrip("/")
    if not path or path.endswith("/"):
        path += INDEX_PAGE

    for segment in path.split("/"):
        if not segment or INVALID_SEGMENT_PATTERN.search(segment):
            raise HTTPException(status_code=400, detail="Invalid page path")
    return path


def check_revision(value: str) -> str:
    """Accept an empty value or a hex commit hash."""
    if value and not REVISION_PATTERN.match(value):
        raise HTTPException(status_code=400, detail="Invalid revision")
    return value


def get_peer_ip(request: Request) -> str:
    """Client address, preferring reverse-proxy headers."""
    address = request.headers.get("X-Real-Ip")
    if not address:
        address = request.headers.get("X-Forwarded-For")
    if not address and request.client is not None:
        address = request.client.host
    return address or ""


async def read_params(request: Request) -> dict[str, str]:
    """Query parameters overlaid with form fields (form wins)."""
    params = dict(request.query_params)
    if request.method == "POST":
        form = await request.form()
        for key, value in form.items():
            if isinstance(value, str):
                params[key] = value
    return params


def build_page_request(path: str, params: dict[str, str], client: str) -> PageRequest:
    return PageRequest(
        path=path,
        content=params.get("content", ""),
        edit=is_confirmed(params.get("edit")),
        save=is_confirmed(params.get("save")),
        revert=check_revision(params.get("revert", "")),
        revision=check_revision(params.get("revision", "")),
        message=params.get("msg", ""),
        author=params.get("author", ""),
        show_history=parse_bool(params.get("revisions")),
        client=client,
    )


def create_app(config: Settings) -> FastAPI:
    """Build the wiki application for the given settings."""
    assembler = PageAssembler(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: make sure the page repository exists."""
        await assembler.repository.ensure_repository()
        yield

    app = FastAPI(
        title=config.app_title,
        debug=config.debug,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.assembler = assembler

    template_dirs = [str(templates_path)]
    if config.templates_dir is not None:
        template_dirs.insert(0, str(config.templates_dir))
    templates = Jinja2Templates(directory=template_dirs)

    base = config.url_base
    app.mount(f"{base}/static", StaticFiles(directory=str(static_path)), name="static")
    app.mount(
        f"{base}/{PUBLIC_DIR}",
        StaticFiles(directory=str(config.data_dir / PUBLIC_DIR), check_dir=False),
        name=PUBLIC_DIR,
    )
    app.mount(
        f"{base}/{ASSETS_DIR}",
        StaticFiles(directory=str(config.data_dir / ASSETS_DIR), check_dir=False),
        name=ASSETS_DIR,
    )

    async def wiki_page(request: Request, page_path: str):
        """Serve, save or revert a wiki page."""
        if page_path == FAVICON:
            return Response()

        path = resolve_page_path(page_path)
        params = await read_params(request)
        page_request = build_page_request(path, params, get_peer_ip(request))

        logger.info("serving file: %s", config.pages_dir / f"{path}.md")
        page = await assembler.handle(page_request)

        return templates.TemplateResponse(
            request,
            "wiki.html",
            {
                "app_title": config.app_title,
                "page": page,
                "blocks": template_blocks(page),
            },
        )

    async def wiki_root(request: Request):
        """The wiki root without a trailing slash."""
        return await wiki_page(request, "")

    methods = ["GET", "POST"]
    if base:
        app.add_api_route(base, wiki_root, methods=methods, response_class=HTMLResponse)
    app.add_api_route(
        f"{base}/{{page_path:path}}",
        wiki_page,
        methods=methods,
        response_class=HTMLResponse,
    )
    return app


app = create_app(settings)
