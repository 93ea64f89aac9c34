"""Custom HTML around inline code spans."""

from __future__ import annotations

from collections.abc import Sequence

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.renderer import RendererHTML
from markdown_it.token import Token
from markdown_it.utils import EnvType, OptionsDict

DEFAULT_OPEN = "<code>"
DEFAULT_CLOSE = "</code>"


def code_style_plugin(md: MarkdownIt, open_html: str = DEFAULT_OPEN, close_html: str = DEFAULT_CLOSE) -> None:
    """Render inline code spans as ``open_html`` + escaped text + ``close_html``."""

    def _code_inline(
        self: RendererHTML,
        tokens: Sequence[Token],
        idx: int,
        options: OptionsDict,
        env: EnvType,
    ) -> str:
        token = tokens[idx]
        opening = open_html
        if open_html == DEFAULT_OPEN:
            opening = f"<code{self.renderAttrs(token)}>"
        return opening + escapeHtml(token.content) + close_html

    md.add_render_rule("code_inline", _code_inline)
