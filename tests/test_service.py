from __future__ import annotations

import threading
import time
from collections import Counter
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import pytest

from mdbridge import markdown, service as service_module
from mdbridge.config import MarkdownSettings
from mdbridge.errors import ConfigurationError
from mdbridge.service import Lazy, MarkdownService

HELLO_WORLD_HTML = (
    '<h4 id="hello-world"><a href="#hello-world" id="hello-world" name="hello-world" class="anchor"></a>'
    "Hello World</h4>"
)


def _counting(builder: Callable[[Any], Any], kind: str, counts: Counter[str], lock: threading.Lock) -> Callable:
    def _build(settings: Any) -> Any:
        with lock:
            counts[kind] += 1
        time.sleep(0.02)
        return builder(settings)

    return _build


def test_hello_world_heading_with_default_settings() -> None:
    service = MarkdownService()

    assert service.to_html("#### Hello World").strip() == HELLO_WORLD_HTML


def test_input_is_trimmed_before_parsing() -> None:
    service = MarkdownService()

    assert service.to_html("\n\n    #### Hello World   \n\n").strip() == HELLO_WORLD_HTML


def test_to_html_is_idempotent() -> None:
    service = MarkdownService()
    text = "# Title\n\nSome *text* with `code` and a [link](https://example.com)."

    assert service.to_html(text) == service.to_html(text)


def test_malformed_markdown_degrades_gracefully() -> None:
    service = MarkdownService()

    html = service.to_html("**unclosed *emphasis [link](\n| broken | table\n```")

    assert isinstance(html, str)
    assert "unclosed" in html


def test_to_markdown_converts_html() -> None:
    service = MarkdownService()

    result = service.to_markdown("  <h2>Title</h2><p>Some <strong>bold</strong> text.</p>  ")

    assert "## Title" in result
    assert "Some **bold** text." in result


def test_round_trip_does_not_fail() -> None:
    service = MarkdownService()
    source = "\n".join(
        [
            "# Release notes",
            "",
            "- [x] shipped",
            "- [ ] pending ~~dropped~~",
            "",
            "| a | b |",
            "|---|---|",
            "| 1 | 2 |",
            "",
            "```python",
            "print('hi')",
            "```",
        ]
    )

    result = service.to_markdown(service.to_html(source))

    assert "Release notes" in result
    assert "print('hi')" in result


def test_delegates_are_built_once_and_reused() -> None:
    service = MarkdownService()
    service.to_html("first")
    parser = service._parser.get()
    renderer = service._renderer.get()

    service.to_html("second")

    assert service._parser.get() is parser
    assert service._renderer.get() is renderer
    assert not service._converter.initialized


def test_concurrent_first_calls_build_each_delegate_once(monkeypatch: pytest.MonkeyPatch) -> None:
    counts: Counter[str] = Counter()
    lock = threading.Lock()
    monkeypatch.setattr(service_module, "build_parser", _counting(markdown.build_parser, "parser", counts, lock))
    monkeypatch.setattr(service_module, "build_renderer", _counting(markdown.build_renderer, "renderer", counts, lock))

    service = MarkdownService()
    workers = 12
    barrier = threading.Barrier(workers)

    def convert(_: int) -> str:
        barrier.wait()
        return service.to_html("# Title\n\nBody *text*")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(convert, range(workers)))

    assert counts == Counter({"parser": 1, "renderer": 1})
    assert results == [
        '<h1 id="title"><a href="#title" id="title" name="title" class="anchor"></a>Title</h1>\n'
        "<p>Body <em>text</em></p>\n"
    ] * workers


def test_lazy_builds_one_instance_under_contention() -> None:
    calls: list[object] = []

    def factory() -> object:
        time.sleep(0.02)
        instance = object()
        calls.append(instance)
        return instance

    lazy: Lazy[object] = Lazy(factory)
    barrier = threading.Barrier(16)

    def fetch(_: int) -> object:
        barrier.wait()
        return lazy.get()

    with ThreadPoolExecutor(max_workers=16) as pool:
        seen = list(pool.map(fetch, range(16)))

    assert len(calls) == 1
    assert all(item is calls[0] for item in seen)
    assert lazy.initialized


def test_delegate_failure_surfaces_as_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(settings: Any) -> Any:
        raise TypeError("expected str, got int")

    monkeypatch.setattr(service_module, "build_parser", broken)
    service = MarkdownService()

    with pytest.raises(ConfigurationError, match="Unable to build markdown parser"):
        service.to_html("text")


def test_service_accepts_prebuilt_settings() -> None:
    settings = MarkdownSettings(anchorLinks=False)

    service = MarkdownService(settings)

    assert service.get_settings() is settings
    assert service.to_html("## Intro").strip() == '<h2 id="intro">Intro</h2>'
