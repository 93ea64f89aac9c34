"""Body-capturing ``markdown`` component."""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, TextIO

from .service import MarkdownService

logger = logging.getLogger(__name__)

COMPONENT_NAME = "markdown"


@dataclass(frozen=True, slots=True)
class BodyResult:
    """Outcome of executing a component body.

    ``early_exit`` is set when the body returned before reaching its end;
    ``value`` carries whatever the body returned.
    """

    early_exit: bool = False
    value: Any = None

    @classmethod
    def early_return(cls, value: Any = None) -> "BodyResult":
        return cls(early_exit=True, value=value)


DEFAULT_RETURN = BodyResult()


class ExecutionContext(Protocol):
    """Host-side operations a component needs from the running script."""

    def write_to_buffer(self, text: str) -> None: ...

    def set_variable(self, name: str, value: Any) -> None: ...


Body = Callable[[ExecutionContext, TextIO], BodyResult | None]


@dataclass
class ScriptContext:
    """Minimal execution context: a variables scope and an output buffer."""

    variables: dict[str, Any] = field(default_factory=dict)
    output: io.StringIO = field(default_factory=io.StringIO)

    def write_to_buffer(self, text: str) -> None:
        self.output.write(text)

    def set_variable(self, name: str, value: Any) -> None:
        self.variables[name] = value

    def getvalue(self) -> str:
        return self.output.getvalue()


@dataclass(frozen=True, slots=True)
class Attribute:
    """Declared component attribute."""

    name: str
    type: type
    required: bool = False


class MarkdownComponent:
    """Run a body, treat everything it wrote as Markdown and emit the HTML.

    With a ``variable`` the HTML is bound to that name in the calling context,
    otherwise it is appended to the context's output buffer.
    """

    name = COMPONENT_NAME
    requires_body = True
    attributes = (Attribute("variable", str),)

    def __init__(self, service: MarkdownService) -> None:
        self._service = service

    @property
    def service(self) -> MarkdownService:
        return self._service

    def invoke(self, context: ExecutionContext, body: Body, variable: str | None = None) -> BodyResult:
        buffer = io.StringIO()
        result = body(context, buffer) or DEFAULT_RETURN

        # A return inside the body discards everything it wrote.
        if result.early_exit:
            logger.debug("Markdown body exited early; discarding %d buffered characters.", buffer.tell())
            return result

        html = self._service.to_html(buffer.getvalue())
        if variable:
            context.set_variable(variable, html)
        else:
            context.write_to_buffer(html)
        return DEFAULT_RETURN
