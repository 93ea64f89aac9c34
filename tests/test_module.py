from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from mdbridge import registry
from mdbridge.component import MarkdownComponent, ScriptContext
from mdbridge.errors import ServiceNotFoundError
from mdbridge.module import MarkdownModule
from mdbridge.service import SERVICE_NAME, MarkdownService


@pytest.fixture(autouse=True)
def _clean_registry() -> Iterator[None]:
    registry.clear_registry()
    yield
    registry.clear_registry()


def test_on_load_registers_service_component_and_functions() -> None:
    module = MarkdownModule({"anchorClass": "permalink"})

    service = module.on_load()

    assert isinstance(service, MarkdownService)
    assert module.service is service
    assert registry.get_service(SERVICE_NAME) is service
    assert service.get_settings().anchor_class == "permalink"

    component = registry.get_component("markdown")
    assert isinstance(component, MarkdownComponent)
    assert component.service is service


def test_registered_functions_use_the_service() -> None:
    MarkdownModule().on_load()

    to_html = registry.get_function("markdown")
    to_markdown = registry.get_function("htmlToMarkdown")

    assert to_html("*hi*") == "<p><em>hi</em></p>\n"
    assert to_markdown("<p><strong>hi</strong></p>") == "**hi**"


def test_registered_component_runs_bodies() -> None:
    MarkdownModule().on_load()
    context = ScriptContext()

    registry.get_component("markdown").invoke(context, lambda ctx, out: out.write("text") and None)

    assert context.getvalue() == "<p>text</p>\n"


def test_on_unload_removes_registrations() -> None:
    module = MarkdownModule()
    module.on_load()

    module.on_unload()

    assert module.service is None
    with pytest.raises(ServiceNotFoundError):
        registry.get_service(SERVICE_NAME)
    with pytest.raises(ServiceNotFoundError):
        registry.get_component("markdown")
    with pytest.raises(ServiceNotFoundError):
        registry.get_function("markdown")
    with pytest.raises(ServiceNotFoundError):
        registry.get_function("htmlToMarkdown")


def test_reload_replaces_the_service() -> None:
    first = MarkdownModule().on_load()
    second = MarkdownModule({"autoLinkUrls": False}).on_load()

    assert first is not second
    assert registry.get_service(SERVICE_NAME) is second


def test_module_from_settings_file(tmp_path: Path) -> None:
    path = tmp_path / "mdbridge.yml"
    path.write_text("markdown:\n  anchorLinks: false\n", encoding="utf-8")

    service = MarkdownModule.from_file(tmp_path).on_load()

    assert service.to_html("## Intro") == '<h2 id="intro">Intro</h2>\n'
