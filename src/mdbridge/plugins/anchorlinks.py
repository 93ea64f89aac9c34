"""Anchor links rendered inside headings.

Runs after the ``anchor`` core rule of
:func:`mdit_py_plugins.anchors.anchors_plugin`, which assigns the heading ids
this plugin links to.
"""

from __future__ import annotations

from collections.abc import Callable

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.rules_core import StateCore
from markdown_it.token import Token


def anchorlinks_plugin(
    md: MarkdownIt,
    *,
    set_id: bool = True,
    set_name: bool = True,
    wrap_text: bool = False,
    anchor_class: str = "anchor",
    prefix: str = "",
    suffix: str = "",
) -> None:
    """Add an ``<a href="#slug">`` to every heading that carries an id.

    .. code-block:: md

        #### Hello World

    renders as:

    .. code-block:: html

        <h4 id="hello-world"><a href="#hello-world" id="hello-world" name="hello-world" class="anchor"></a>Hello World</h4>

    :param set_id: put ``id`` on the anchor
    :param set_name: put ``name`` on the anchor
    :param wrap_text: wrap the heading text in the anchor rather than
        emitting an empty anchor in front of it
    :param anchor_class: class attribute of the anchor; empty for none
    :param prefix: raw HTML emitted inside the anchor before the text
    :param suffix: raw HTML emitted inside the anchor after the text
    """
    md.core.ruler.after(
        "anchor",
        "anchor_link",
        _make_anchor_link_func(set_id, set_name, wrap_text, anchor_class, prefix, suffix),
    )


def _make_anchor_link_func(
    set_id: bool,
    set_name: bool,
    wrap_text: bool,
    anchor_class: str,
    prefix: str,
    suffix: str,
) -> Callable[[StateCore], None]:
    def _anchor_link_func(state: StateCore) -> None:
        for idx, token in enumerate(state.tokens):
            if token.type != "heading_open":
                continue
            slug = token.attrGet("id")
            if not slug:
                continue
            inline_token = state.tokens[idx + 1]
            children = inline_token.children or []
            opening = _anchor_open_tag(str(slug), set_id, set_name, anchor_class)
            if wrap_text:
                inline_token.children = (
                    [Token("html_inline", "", 0, content=opening + prefix)]
                    + children
                    + [Token("html_inline", "", 0, content=suffix + "</a>")]
                )
            else:
                inline_token.children = [
                    Token("html_inline", "", 0, content=opening + prefix + suffix + "</a>")
                ] + children

    return _anchor_link_func


def _anchor_open_tag(slug: str, set_id: bool, set_name: bool, anchor_class: str) -> str:
    attrs = [("href", f"#{slug}")]
    if set_id:
        attrs.append(("id", slug))
    if set_name:
        attrs.append(("name", slug))
    if anchor_class:
        attrs.append(("class", anchor_class))
    rendered = "".join(f' {name}="{escapeHtml(value)}"' for name, value in attrs)
    return f"<a{rendered}>"
