"""The Markdown conversion service."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar

from .config import MarkdownSettings
from .errors import ConfigurationError
from .markdown import (
    HtmlConverter,
    HtmlRenderer,
    MarkdownParser,
    build_converter,
    build_parser,
    build_renderer,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "markdownService"

T = TypeVar("T")

_UNSET: Any = object()


class Lazy(Generic[T]):
    """Build a value on first use and share it afterwards.

    Construction runs at most once even when many threads ask for the value at
    the same time; reads of a built value take no lock.
    """

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._lock = threading.Lock()
        self._value: T = _UNSET

    @property
    def initialized(self) -> bool:
        return self._value is not _UNSET

    def get(self) -> T:
        value = self._value
        if value is not _UNSET:
            return value
        with self._lock:
            if self._value is _UNSET:
                self._value = self._factory()
            return self._value


class MarkdownService:
    """Convert Markdown to HTML and back using the configured settings.

    The parser, renderer and converter are built from the settings the first
    time they are needed and reused for the lifetime of the service.
    """

    def __init__(
        self,
        settings: MarkdownSettings | Mapping[str, Any] | None = None,
        *,
        name: str = SERVICE_NAME,
    ) -> None:
        self.name = name
        if isinstance(settings, MarkdownSettings):
            self._settings = settings
        else:
            self._settings = MarkdownSettings.from_overrides(settings)
        self._parser: Lazy[MarkdownParser] = Lazy(lambda: self._construct("parser", build_parser))
        self._renderer: Lazy[HtmlRenderer] = Lazy(lambda: self._construct("renderer", build_renderer))
        self._converter: Lazy[HtmlConverter] = Lazy(lambda: self._construct("converter", build_converter))

    def get_settings(self) -> MarkdownSettings:
        """Return the effective settings of this service."""
        return self._settings

    def to_html(self, text: str) -> str:
        """Convert Markdown to HTML."""
        document = self._parser.get().parse(text.strip())
        return self._renderer.get().render(document)

    def to_markdown(self, html: str) -> str:
        """Convert HTML to Markdown."""
        return self._converter.get().convert(html.strip())

    def _construct(self, kind: str, builder: Callable[[MarkdownSettings], T]) -> T:
        logger.debug("Building markdown %s for service '%s'.", kind, self.name)
        try:
            return builder(self._settings)
        except ConfigurationError:
            raise
        except (TypeError, ValueError, KeyError) as exc:
            raise ConfigurationError(f"Unable to build markdown {kind}: {exc}") from exc
