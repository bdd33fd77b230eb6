"""Markdown to HTML rendering for page content."""

from markdown import Markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import SimpleTagInlineProcessor

# Pattern for strikethrough: ~~text~~
# Group 2 must contain the text (SimpleTagInlineProcessor expectation)
STRIKETHROUGH_PATTERN = r"(~~)(.*?)~~"


class StrikethroughExtension(Extension):
    """Markdown extension for ~~strikethrough~~ text."""

    def extendMarkdown(self, md: Markdown) -> None:
        md.inlinePatterns.register(
            SimpleTagInlineProcessor(STRIKETHROUGH_PATTERN, "del"),
            "strikethrough",
            50,
        )


def create_renderer() -> Markdown:
    """Create a Markdown instance with the wiki's extension set."""
    return Markdown(
        extensions=[
            "extra",  # tables, fenced_code, footnotes, def_list, attr_list, ...
            "sane_lists",
            "smarty",
            "toc",
            "pymdownx.tasklist",
            StrikethroughExtension(),
        ]
    )


def render_markdown(content: str) -> str:
    """Render page markdown to HTML.

    A fresh parser is created per call, so rendering holds no state
    between pages.
    """
    return create_renderer().convert(content)
