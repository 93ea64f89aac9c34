"""Markdown/HTML conversion service and body-capturing component."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as load_pkg_version
from pathlib import Path
import tomllib

from .component import DEFAULT_RETURN, BodyResult, MarkdownComponent, ScriptContext
from .config import MarkdownSettings, TableOptions, load_settings
from .errors import ConfigurationError, MdBridgeError, ServiceNotFoundError
from .module import MarkdownModule
from .service import SERVICE_NAME, MarkdownService

__all__ = [
    "__version__",
    "BodyResult",
    "ConfigurationError",
    "DEFAULT_RETURN",
    "MarkdownComponent",
    "MarkdownModule",
    "MarkdownService",
    "MarkdownSettings",
    "MdBridgeError",
    "SERVICE_NAME",
    "ScriptContext",
    "ServiceNotFoundError",
    "TableOptions",
    "load_settings",
]


def _read_local_project_version() -> str:
    """Read the project version from pyproject.toml when the package is uninstalled."""
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return "0.0.0"
    return data.get("project", {}).get("version", "0.0.0")


try:
    __version__ = load_pkg_version("mdbridge")
except PackageNotFoundError:
    __version__ = _read_local_project_version()
