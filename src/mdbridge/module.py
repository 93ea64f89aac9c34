"""Module wiring: build the service from settings and register it with the host."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from . import registry
from .component import COMPONENT_NAME, MarkdownComponent
from .config import MarkdownSettings, load_settings
from .service import SERVICE_NAME, MarkdownService

logger = logging.getLogger(__name__)

MODULE_NAME = "markdown"
TO_HTML_FUNCTION = "markdown"
TO_MARKDOWN_FUNCTION = "htmlToMarkdown"


class MarkdownModule:
    """Register the Markdown service, component and functions under their well-known names."""

    name = MODULE_NAME

    def __init__(self, settings: MarkdownSettings | Mapping[str, Any] | None = None) -> None:
        if isinstance(settings, MarkdownSettings):
            self.settings = settings
        else:
            self.settings = MarkdownSettings.from_overrides(settings)
        self.service: MarkdownService | None = None

    @classmethod
    def from_file(cls, path: str | Path) -> "MarkdownModule":
        return cls(load_settings(path))

    def on_load(self) -> MarkdownService:
        service = MarkdownService(self.settings, name=SERVICE_NAME)
        registry.register_service(SERVICE_NAME, service)
        registry.register_component(COMPONENT_NAME, MarkdownComponent(service))
        registry.register_function(TO_HTML_FUNCTION, service.to_html)
        registry.register_function(TO_MARKDOWN_FUNCTION, service.to_markdown)
        self.service = service
        logger.debug("Module '%s' registered service '%s'.", self.name, SERVICE_NAME)
        return service

    def on_unload(self) -> None:
        registry.unregister_function(TO_MARKDOWN_FUNCTION)
        registry.unregister_function(TO_HTML_FUNCTION)
        registry.unregister_component(COMPONENT_NAME)
        registry.unregister_service(SERVICE_NAME)
        self.service = None
        logger.debug("Module '%s' unregistered.", self.name)
