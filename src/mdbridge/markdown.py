"""Markdown delegates configured from :class:`~mdbridge.config.MarkdownSettings`."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, cast

from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.token import Token
from markdownify import ATX, MarkdownConverter
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.subscript import sub_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

from .config import MarkdownSettings
from .plugins import anchorlinks_plugin, code_style_plugin, tables_plugin, toc_plugin, youtube_plugin

EXTENSION_TABLES = "tables"
EXTENSION_STRIKETHROUGH_SUBSCRIPT = "strikethrough_subscript"
EXTENSION_TASKLISTS = "tasklists"
EXTENSION_TOC = "toc"
EXTENSION_AUTOLINK = "autolink"
EXTENSION_ANCHORLINK = "anchorlink"
EXTENSION_YOUTUBE = "youtube_embedded"


def enabled_extensions(settings: MarkdownSettings) -> list[str]:
    """Return the ordered extension names switched on by ``settings``."""
    extensions = [
        EXTENSION_TABLES,
        EXTENSION_STRIKETHROUGH_SUBSCRIPT,
        EXTENSION_TASKLISTS,
        EXTENSION_TOC,
    ]
    if settings.auto_link_urls:
        extensions.append(EXTENSION_AUTOLINK)
    if settings.anchor_links:
        extensions.append(EXTENSION_ANCHORLINK)
    if settings.enable_youtube_transformer:
        extensions.append(EXTENSION_YOUTUBE)
    return extensions


def _use_tables(md: MarkdownIt, settings: MarkdownSettings) -> None:
    table = settings.table_options
    md.use(
        tables_plugin,
        column_spans=table.column_spans,
        append_missing_columns=table.append_missing_columns,
        discard_extra_columns=table.discard_extra_columns,
        class_name=table.class_name,
        header_separation_column_match=table.header_separation_column_match,
    )


def _use_strikethrough_subscript(md: MarkdownIt, settings: MarkdownSettings) -> None:
    md.enable("strikethrough")
    md.use(sub_plugin)
    md.core.ruler.push("strikethrough_del", _strikethrough_as_del)


def _strikethrough_as_del(state: StateCore) -> None:
    for token in state.tokens:
        for child in token.children or []:
            if child.type in ("s_open", "s_close"):
                child.tag = "del"


def _use_tasklists(md: MarkdownIt, settings: MarkdownSettings) -> None:
    md.use(tasklists_plugin)


def _use_toc(md: MarkdownIt, settings: MarkdownSettings) -> None:
    md.use(toc_plugin)


def _use_autolink(md: MarkdownIt, settings: MarkdownSettings) -> None:
    md.enable("linkify")


def _use_anchorlink(md: MarkdownIt, settings: MarkdownSettings) -> None:
    md.use(
        anchorlinks_plugin,
        set_id=settings.anchor_set_id,
        set_name=settings.anchor_set_name,
        wrap_text=settings.anchor_wrap_text,
        anchor_class=settings.anchor_class,
        prefix=settings.anchor_prefix,
        suffix=settings.anchor_suffix,
    )


def _use_youtube(md: MarkdownIt, settings: MarkdownSettings) -> None:
    md.use(youtube_plugin)


_EXTENSIONS: dict[str, Callable[[MarkdownIt, MarkdownSettings], None]] = {
    EXTENSION_TABLES: _use_tables,
    EXTENSION_STRIKETHROUGH_SUBSCRIPT: _use_strikethrough_subscript,
    EXTENSION_TASKLISTS: _use_tasklists,
    EXTENSION_TOC: _use_toc,
    EXTENSION_AUTOLINK: _use_autolink,
    EXTENSION_ANCHORLINK: _use_anchorlink,
    EXTENSION_YOUTUBE: _use_youtube,
}


def create_markdown(settings: MarkdownSettings) -> MarkdownIt:
    """Configure a CommonMark-compliant markdown-it instance from ``settings``."""
    md = MarkdownIt(
        "commonmark",
        {
            "html": True,
            "linkify": settings.auto_link_urls,
            "langPrefix": settings.fenced_code_language_class_prefix,
        },
    )
    # Heading ids are needed by both the table of contents and anchor links.
    md.use(anchors_plugin, min_level=1, max_level=6)
    for name in enabled_extensions(settings):
        _EXTENSIONS[name](md, settings)
    md.use(
        code_style_plugin,
        open_html=settings.code_style_html_open,
        close_html=settings.code_style_html_close,
    )
    return md


@dataclass(slots=True)
class Document:
    """Parsed Markdown: the markdown-it token stream and its environment."""

    tokens: list[Token]
    env: dict[str, Any] = field(default_factory=dict)


class MarkdownParser:
    """Turn Markdown text into a :class:`Document`."""

    def __init__(self, md: MarkdownIt) -> None:
        self._md = md

    def parse(self, text: str) -> Document:
        env: dict[str, Any] = {}
        tokens = self._md.parse(text, env)
        return Document(tokens=tokens, env=env)


class HtmlRenderer:
    """Render a :class:`Document` to HTML."""

    def __init__(self, md: MarkdownIt) -> None:
        self._md = md

    def render(self, document: Document) -> str:
        return cast(str, self._md.renderer.render(document.tokens, self._md.options, document.env))


class HtmlConverter:
    """Convert HTML back to Markdown."""

    def __init__(self, converter: MarkdownConverter) -> None:
        self._converter = converter

    def convert(self, html: str) -> str:
        return cast(str, self._converter.convert(html))


def build_parser(settings: MarkdownSettings) -> MarkdownParser:
    return MarkdownParser(create_markdown(settings))


def build_renderer(settings: MarkdownSettings) -> HtmlRenderer:
    return HtmlRenderer(create_markdown(settings))


def build_converter(settings: MarkdownSettings) -> HtmlConverter:
    converter = MarkdownConverter(
        heading_style=ATX,
        bullets="-",
        sub_symbol="~",
        table_infer_header=True,
        escape_underscores=False,
    )
    return HtmlConverter(converter)
