from __future__ import annotations

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from mdbridge.config import MarkdownSettings, TableOptions, load_settings
from mdbridge.errors import ConfigurationError
from mdbridge.service import MarkdownService

DEFAULTS = {
    "autoLinkUrls": True,
    "anchorLinks": True,
    "anchorSetId": True,
    "anchorSetName": True,
    "anchorWrapText": False,
    "anchorClass": "anchor",
    "anchorPrefix": "",
    "anchorSuffix": "",
    "enableYouTubeTransformer": False,
    "codeStyleHTMLOpen": "<code>",
    "codeStyleHTMLClose": "</code>",
    "fencedCodeLanguageClassPrefix": "language-",
    "tableOptions": {
        "columnSpans": True,
        "appendMissingColumns": True,
        "discardExtraColumns": True,
        "className": "table",
        "headerSeparationColumnMatch": True,
    },
}

OVERRIDES = {
    "autoLinkUrls": False,
    "anchorLinks": False,
    "anchorSetId": False,
    "anchorSetName": False,
    "anchorWrapText": True,
    "anchorClass": "permalink",
    "anchorPrefix": "<span>",
    "anchorSuffix": "</span>",
    "enableYouTubeTransformer": True,
    "codeStyleHTMLOpen": "<kbd>",
    "codeStyleHTMLClose": "</kbd>",
    "fencedCodeLanguageClassPrefix": "lang-",
}


def test_omitted_keys_use_documented_defaults() -> None:
    assert MarkdownSettings.from_overrides(None).as_mapping() == DEFAULTS
    assert MarkdownSettings.from_overrides({}).as_mapping() == DEFAULTS


@pytest.mark.parametrize("key", sorted(OVERRIDES))
def test_each_key_overrides_its_default(key: str) -> None:
    effective = MarkdownSettings.from_overrides({key: OVERRIDES[key]}).as_mapping()

    assert effective[key] == OVERRIDES[key]
    untouched = {name: value for name, value in effective.items() if name != key}
    assert untouched == {name: value for name, value in DEFAULTS.items() if name != key}


def test_partial_table_options_keep_remaining_defaults() -> None:
    settings = MarkdownSettings.from_overrides({"tableOptions": {"columnSpans": False, "className": "grid"}})

    assert settings.table_options == TableOptions(
        column_spans=False,
        append_missing_columns=True,
        discard_extra_columns=True,
        class_name="grid",
        header_separation_column_match=True,
    )


def test_null_table_options_fall_back_to_defaults() -> None:
    settings = MarkdownSettings.from_overrides({"tableOptions": None})

    assert settings.table_options == TableOptions()


def test_snake_case_keys_are_accepted() -> None:
    settings = MarkdownSettings.from_overrides({"anchor_class": "hash", "table_options": {"class_name": ""}})

    assert settings.anchor_class == "hash"
    assert settings.table_options.class_name == ""


def test_legacy_anchor_name_spelling_is_accepted() -> None:
    settings = MarkdownSettings.from_overrides({"achorSetName": False})

    assert settings.anchor_set_name is False
    assert settings.as_mapping()["anchorSetName"] is False


def test_settings_are_visible_before_first_conversion() -> None:
    service = MarkdownService({"anchorClass": "permalink"})

    assert service.get_settings().anchor_class == "permalink"
    assert service.get_settings().as_mapping()["anchorClass"] == "permalink"


def test_invalid_value_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        MarkdownSettings.from_overrides({"anchorLinks": "sometimes"})

    with pytest.raises(ConfigurationError):
        MarkdownSettings.from_overrides({"tableOptions": {"columnSpans": [1, 2]}})


def test_unknown_keys_are_ignored_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="mdbridge.config"):
        settings = MarkdownSettings.from_overrides({"anchorClas": "typo", "tableOptions": {"stripes": True}})

    assert settings.anchor_class == "anchor"
    assert "Ignoring unknown settings key 'anchorClas'." in caplog.messages
    assert "Ignoring unknown tableOptions key 'stripes'." in caplog.messages


def test_settings_are_immutable() -> None:
    settings = MarkdownSettings()

    with pytest.raises(ValidationError):
        settings.anchor_class = "other"  # type: ignore[misc]


def test_load_settings_reads_markdown_section(tmp_path: Path) -> None:
    path = tmp_path / "module.yml"
    path.write_text(
        "markdown:\n  anchorClass: heading-link\n  tableOptions:\n    columnSpans: false\n",
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.anchor_class == "heading-link"
    assert settings.table_options.column_spans is False
    assert settings.table_options.class_name == "table"


def test_load_settings_reads_root_mapping(tmp_path: Path) -> None:
    path = tmp_path / "settings.yml"
    path.write_text("enableYouTubeTransformer: true\n", encoding="utf-8")

    assert load_settings(path).enable_youtube_transformer is True


def test_load_settings_from_directory(tmp_path: Path) -> None:
    assert load_settings(tmp_path) == MarkdownSettings()

    (tmp_path / "mdbridge.yml").write_text("autoLinkUrls: false\n", encoding="utf-8")
    assert load_settings(tmp_path).auto_link_urls is False


def test_load_settings_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yml")


def test_load_settings_non_mapping_uses_defaults(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "list.yml"
    path.write_text("- one\n- two\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="mdbridge.config"):
        settings = load_settings(path)

    assert settings == MarkdownSettings()
    assert any("should define a mapping" in message for message in caplog.messages)
