"""markdown-it plugins backing the optional Markdown extensions."""

from .anchorlinks import anchorlinks_plugin
from .code import code_style_plugin
from .tables import tables_plugin
from .toc import toc_plugin
from .youtube import youtube_plugin

__all__ = [
    "anchorlinks_plugin",
    "code_style_plugin",
    "tables_plugin",
    "toc_plugin",
    "youtube_plugin",
]
