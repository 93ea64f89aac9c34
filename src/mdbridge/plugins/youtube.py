"""Embedded YouTube players for ``@[title](url)`` links."""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlparse

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.rules_core import StateCore
from markdown_it.token import Token

EMBED_BASE_URL = "https://www.youtube-nocookie.com/embed/"
_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{6,}$")
_YOUTUBE_HOSTS = {"youtube.com", "m.youtube.com", "music.youtube.com", "youtube-nocookie.com"}


def youtube_plugin(md: MarkdownIt, width: int = 420, height: int = 315) -> None:
    """Replace links prefixed with ``@`` that point at a YouTube video by an iframe.

    .. code-block:: md

        @[Launch video](https://www.youtube.com/watch?v=dQw4w9WgXcQ)

    Links to anything other than a recognised video are left alone.
    """

    def _youtube_func(state: StateCore) -> None:
        for token in state.tokens:
            if token.type != "inline" or not token.children:
                continue
            children = token.children
            idx = 1
            while idx < len(children):
                child = children[idx]
                previous = children[idx - 1]
                if (
                    child.type == "link_open"
                    and child.markup != "linkify"
                    and previous.type == "text"
                    and previous.content.endswith("@")
                ):
                    video_id = youtube_video_id(str(child.attrGet("href") or ""))
                    close = _find_link_close(children, idx)
                    if video_id and close is not None:
                        previous.content = previous.content[:-1]
                        embed = Token("html_inline", "", 0, content=embed_html(video_id, width, height))
                        children[idx : close + 1] = [embed]
                idx += 1

    md.core.ruler.push("youtube_embedded", _youtube_func)


def youtube_video_id(url: str) -> str | None:
    """Return the video id of a YouTube watch, short, embed or youtu.be URL."""
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]

    candidate = ""
    if host == "youtu.be":
        candidate = parsed.path.lstrip("/").split("/")[0]
    elif host in _YOUTUBE_HOSTS:
        if parsed.path.rstrip("/") == "/watch":
            candidate = parse_qs(parsed.query).get("v", [""])[0]
        else:
            segments = [segment for segment in parsed.path.split("/") if segment]
            if len(segments) >= 2 and segments[0] in {"embed", "shorts", "v", "live"}:
                candidate = segments[1]
    if candidate and _VIDEO_ID_RE.match(candidate):
        return candidate
    return None


def embed_html(video_id: str, width: int = 420, height: int = 315) -> str:
    src = escapeHtml(EMBED_BASE_URL + video_id)
    return (
        f'<iframe width="{width}" height="{height}" class="youtube-embedded" src="{src}" '
        'frameborder="0" allowfullscreen="true"></iframe>'
    )


def _find_link_close(children: list[Token], start: int) -> int | None:
    depth = 0
    for idx in range(start, len(children)):
        if children[idx].type == "link_open":
            depth += 1
        elif children[idx].type == "link_close":
            depth -= 1
            if depth == 0:
                return idx
    return None
