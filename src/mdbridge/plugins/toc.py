"""Table of contents generated from a ``[TOC]`` marker."""

from __future__ import annotations

import re
from collections.abc import Sequence

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.renderer import RendererHTML
from markdown_it.rules_block import StateBlock
from markdown_it.token import Token
from markdown_it.utils import EnvType, OptionsDict

TOC_RE = re.compile(r"^\[TOC(?:\s+levels=(\d)(?:-(\d))?)?\]$", re.IGNORECASE)
DEFAULT_LEVELS = (2, 3)


def toc_plugin(md: MarkdownIt, levels: tuple[int, int] = DEFAULT_LEVELS) -> None:
    """Render ``[TOC]`` as a nested list of links to the document headings.

    ``[TOC levels=1-4]`` selects the heading levels for a single marker;
    ``[TOC levels=3]`` is short for ``levels=1-3``. Headings need ids, see
    :func:`mdit_py_plugins.anchors.anchors_plugin`.
    """

    def _toc_block(state: StateBlock, startLine: int, endLine: int, silent: bool) -> bool:
        if state.sCount[startLine] - state.blkIndent >= 4:
            return False
        start = state.bMarks[startLine] + state.tShift[startLine]
        line = state.src[start : state.eMarks[startLine]].strip()
        match = TOC_RE.match(line)
        if match is None:
            return False
        if silent:
            return True
        if match.group(2):
            low, high = int(match.group(1)), int(match.group(2))
        elif match.group(1):
            low, high = 1, int(match.group(1))
        else:
            low, high = levels
        token = state.push("toc", "ul", 0)
        token.map = [startLine, startLine + 1]
        token.markup = line
        token.block = True
        token.meta = {"levels": (min(low, high), max(low, high))}
        state.line = startLine + 1
        return True

    md.block.ruler.before("paragraph", "toc", _toc_block)
    md.add_render_rule("toc", _render_toc)


def _collect_headings(tokens: Sequence[Token], low: int, high: int) -> list[tuple[int, str, str]]:
    headings: list[tuple[int, str, str]] = []
    for idx, token in enumerate(tokens):
        if token.type != "heading_open":
            continue
        level = int(token.tag[1])
        slug = token.attrGet("id")
        if not slug or not low <= level <= high:
            continue
        children = tokens[idx + 1].children or []
        title = "".join(child.content for child in children if child.type in ("text", "code_inline"))
        headings.append((level, str(slug), title))
    return headings


def _render_toc(
    self: RendererHTML,
    tokens: Sequence[Token],
    idx: int,
    options: OptionsDict,
    env: EnvType,
) -> str:
    low, high = tokens[idx].meta["levels"]
    headings = _collect_headings(tokens, low, high)
    if not headings:
        return ""

    parts: list[str] = []
    stack: list[int] = []
    for level, slug, title in headings:
        if not stack:
            parts.append("<ul>\n")
            stack.append(level)
        elif level > stack[-1]:
            parts.append("\n<ul>\n")
            stack.append(level)
        else:
            parts.append("</li>\n")
            while len(stack) > 1 and level < stack[-1]:
                stack.pop()
                parts.append("</ul>\n</li>\n")
        parts.append(f'<li><a href="#{escapeHtml(slug)}">{escapeHtml(title)}</a>')

    parts.append("</li>\n")
    while len(stack) > 1:
        stack.pop()
        parts.append("</ul>\n</li>\n")
    parts.append("</ul>\n")
    return "".join(parts)
