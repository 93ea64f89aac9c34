"""Settings for the Markdown service and loading helpers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "mdbridge.yml"
SETTINGS_SECTION = "markdown"


class TableOptions(BaseModel):
    """Rendering knobs for GFM tables."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    column_spans: bool = Field(
        default=True,
        alias="columnSpans",
        description="Treat consecutive pipes at the end of a column as a spanning column.",
    )
    append_missing_columns: bool = Field(
        default=True,
        alias="appendMissingColumns",
        description="Pad body rows with empty cells up to the number of header columns.",
    )
    discard_extra_columns: bool = Field(
        default=True,
        alias="discardExtraColumns",
        description="Discard body cells beyond the columns defined by the header.",
    )
    class_name: str = Field(default="table", alias="className", description="Class name used on tables.")
    header_separation_column_match: bool = Field(
        default=True,
        alias="headerSeparationColumnMatch",
        description="Only recognise tables whose header and separator rows have the same column count.",
    )


class MarkdownSettings(BaseModel):
    """Effective configuration of a Markdown service.

    Keys are accepted both in the camelCase spelling used by module
    configuration files and in snake_case. Instances are immutable.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    auto_link_urls: bool = Field(default=True, alias="autoLinkUrls", description="Whether to auto link URLs.")
    anchor_links: bool = Field(default=True, alias="anchorLinks", description="Whether to enable anchor links.")
    anchor_set_id: bool = Field(default=True, alias="anchorSetId", description="Set the id on the anchor.")
    anchor_set_name: bool = Field(
        default=True,
        validation_alias=AliasChoices("anchorSetName", "achorSetName", "anchor_set_name"),
        serialization_alias="anchorSetName",
        description="Set the name on the anchor as well as the id.",
    )
    anchor_wrap_text: bool = Field(
        default=False,
        alias="anchorWrapText",
        description="Wrap the heading text in the anchor instead of emitting an empty anchor before it.",
    )
    anchor_class: str = Field(default="anchor", alias="anchorClass", description="Class(es) applied to the anchor.")
    anchor_prefix: str = Field(
        default="",
        alias="anchorPrefix",
        description="Raw HTML added inside the anchor before the heading text.",
    )
    anchor_suffix: str = Field(
        default="",
        alias="anchorSuffix",
        description="Raw HTML added inside the anchor after the heading text.",
    )
    enable_youtube_transformer: bool = Field(
        default=False,
        alias="enableYouTubeTransformer",
        description="Rewrite @[title](url) links to YouTube videos into an embedded player.",
    )
    code_style_html_open: str = Field(
        default="<code>",
        alias="codeStyleHTMLOpen",
        description="Opening HTML for inline code.",
    )
    code_style_html_close: str = Field(
        default="</code>",
        alias="codeStyleHTMLClose",
        description="Closing HTML for inline code.",
    )
    fenced_code_language_class_prefix: str = Field(
        default="language-",
        alias="fencedCodeLanguageClassPrefix",
        description="Prefix used for the class of fenced code blocks that declare a language.",
    )
    table_options: TableOptions = Field(default_factory=TableOptions, alias="tableOptions")

    @field_validator("table_options", mode="before")
    def _default_table_options(cls, value: Any) -> Any:
        if value is None:
            return {}
        return value

    @classmethod
    def from_overrides(cls, overrides: Mapping[str, Any] | None = None) -> "MarkdownSettings":
        """Overlay ``overrides`` on the documented defaults."""
        data = dict(overrides or {})
        _warn_unknown_keys(cls, data, scope="settings")
        table_data = data.get("tableOptions", data.get("table_options"))
        if isinstance(table_data, Mapping):
            _warn_unknown_keys(TableOptions, dict(table_data), scope="tableOptions")
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid markdown settings: {exc}") from exc

    def as_mapping(self) -> dict[str, Any]:
        """Return the effective settings keyed by their camelCase names."""
        return self.model_dump(by_alias=True)


def _known_keys(model: type[BaseModel]) -> set[str]:
    keys: set[str] = set()
    for name, info in model.model_fields.items():
        keys.add(name)
        if info.alias:
            keys.add(info.alias)
        if isinstance(info.validation_alias, AliasChoices):
            keys.update(choice for choice in info.validation_alias.choices if isinstance(choice, str))
        elif isinstance(info.validation_alias, str):
            keys.add(info.validation_alias)
    return keys


def _warn_unknown_keys(model: type[BaseModel], data: Mapping[str, Any], *, scope: str) -> None:
    unknown = sorted(str(key) for key in data if key not in _known_keys(model))
    for key in unknown:
        logger.warning("Ignoring unknown %s key '%s'.", scope, key)


def load_settings(path: str | Path) -> MarkdownSettings:
    """Load settings from a YAML file.

    ``path`` may point at a file or at a directory that holds ``mdbridge.yml``.
    A directory without that file yields the defaults. The settings may sit at
    the document root or under a top-level ``markdown`` key.
    """
    candidate = Path(path)
    data: Any = {}
    if candidate.is_dir():
        config_file = candidate / SETTINGS_FILENAME
        if config_file.exists():
            with config_file.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
    else:
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        with candidate.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}

    if not isinstance(data, Mapping):
        logger.warning("Settings file %s should define a mapping; using defaults.", candidate)
        data = {}
    section = data.get(SETTINGS_SECTION)
    if isinstance(section, Mapping):
        data = section
    return MarkdownSettings.from_overrides(data)
