"""Jinja2 binding for the ``markdown`` component.

.. code-block:: jinja

    {% markdown %}
    #### Hello World
    {% endmarkdown %}

    {% markdown variable="intro" %}
    Some *emphasis* for {{ name }}.
    {% endmarkdown %}
    {{ intro }}

The body is rendered first, then converted as Markdown. Without ``variable``
the HTML is written to the output; with it the HTML is assigned to that name.
"""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, nodes, pass_environment
from jinja2.ext import Extension
from jinja2.parser import Parser
from markupsafe import Markup

from . import registry
from .service import SERVICE_NAME, MarkdownService

TO_HTML_FILTER = "markdown"
TO_MARKDOWN_FILTER = "html_to_markdown"


def _service_for(environment: Environment) -> MarkdownService:
    service = getattr(environment, "markdown_service", None)
    if service is None:
        service = registry.get_service(SERVICE_NAME)
    return service


@pass_environment
def markdown_filter(environment: Environment, value: Any) -> Markup:
    """Convert Markdown to HTML with the environment's service."""
    return Markup(_service_for(environment).to_html(str(value)))


@pass_environment
def html_to_markdown_filter(environment: Environment, value: Any) -> str:
    """Convert HTML to Markdown with the environment's service."""
    return _service_for(environment).to_markdown(str(value))


class MarkdownExtension(Extension):
    """Adds ``{% markdown %}`` blocks plus ``markdown`` / ``html_to_markdown`` filters and globals."""

    tags = {"markdown"}

    def __init__(self, environment: Environment) -> None:
        super().__init__(environment)
        environment.extend(markdown_service=None)
        environment.filters[TO_HTML_FILTER] = markdown_filter
        environment.filters[TO_MARKDOWN_FILTER] = html_to_markdown_filter
        environment.globals.setdefault(TO_HTML_FILTER, markdown_filter)
        environment.globals.setdefault(TO_MARKDOWN_FILTER, html_to_markdown_filter)

    def parse(self, parser: Parser) -> nodes.Node:
        lineno = next(parser.stream).lineno
        variable = ""
        if parser.stream.current.test("name:variable"):
            next(parser.stream)
            parser.stream.expect("assign")
            value = parser.parse_expression()
            if not isinstance(value, nodes.Const) or not isinstance(value.value, str):
                parser.fail("The markdown 'variable' attribute must be a string literal.", lineno)
            variable = value.value.strip()
            if variable and not variable.isidentifier():
                parser.fail(f"'{variable}' is not a valid variable name.", lineno)

        body = parser.parse_statements(("name:endmarkdown",), drop_needle=True)
        convert = nodes.Filter(None, TO_HTML_FILTER, [], [], None, None, lineno=lineno)
        if variable:
            target = nodes.Name(variable, "store", lineno=lineno)
            return nodes.AssignBlock(target, convert, body, lineno=lineno)
        return nodes.FilterBlock(body, convert, lineno=lineno)


def configure_environment(environment: Environment, service: MarkdownService | None = None) -> Environment:
    """Install :class:`MarkdownExtension` and bind ``service`` to ``environment``."""
    environment.add_extension(MarkdownExtension)
    if service is not None:
        environment.markdown_service = service  # type: ignore[attr-defined]
    return environment
