"""Unit tests for the Markdown renderer."""

from mdwiki.core.markup import create_renderer, render_markdown


# ============================================================
# Strikethrough extension
# ============================================================


class TestStrikethrough:
    def test_basic_strikethrough(self):
        html = render_markdown("~~deleted~~")
        assert "<del>deleted</del>" in html

    def test_strikethrough_in_paragraph(self):
        html = render_markdown("This is ~~removed~~ text.")
        assert "<del>removed</del>" in html
        assert "This is" in html
        assert "text." in html

    def test_strikethrough_multiple(self):
        html = render_markdown("~~one~~ and ~~two~~")
        assert html.count("<del>") == 2


# ============================================================
# Standard Markdown
# ============================================================


class TestMarkdown:
    def test_heading(self):
        html = render_markdown("# Hello")
        assert "<h1" in html
        assert "Hello</h1>" in html

    def test_emphasis(self):
        html = render_markdown("**bold** and *italic*")
        assert "<strong>bold</strong>" in html
        assert "<em>italic</em>" in html

    def test_fenced_code(self):
        html = render_markdown("```\nprint('hi')\n```")
        assert "<code>" in html
        assert "print(" in html

    def test_table(self):
        html = render_markdown("| a | b |\n|---|---|\n| 1 | 2 |")
        assert "<table>" in html
        assert "<td>1</td>" in html

    def test_task_list(self):
        html = render_markdown("- [x] done\n- [ ] todo")
        assert 'type="checkbox"' in html

    def test_heading_gets_anchor(self):
        html = render_markdown("## Section Title")
        assert 'id="section-title"' in html

    def test_empty_content(self):
        assert render_markdown("") == ""


class TestRenderer:
    def test_fresh_instance_per_call(self):
        assert create_renderer() is not create_renderer()

    def test_rendering_is_repeatable(self):
        text = "# Title\n\nSome [link](http://example.com) and ~~text~~."
        assert render_markdown(text) == render_markdown(text)
