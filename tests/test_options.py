# PHPCBF Runner
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
"""Tests for formatter options and the YAML settings file."""

import dataclasses
from pathlib import Path

import pytest
import yaml

from phpcbf_runner.options import (
    DEFAULT_CONFIG_FILENAMES,
    FormatOptions,
    default_executable,
    load_settings,
    resolve_executable_path,
    save_settings,
)


class TestResolveExecutablePath:
    def test_workspace_placeholder(self):
        path = resolve_executable_path("{{workspaceFolder}}/vendor/bin/phpcbf", "/projects/site")
        assert path == "/projects/site/vendor/bin/phpcbf"

    def test_placeholder_without_workspace_is_kept(self):
        path = resolve_executable_path("{{workspaceFolder}}/vendor/bin/phpcbf", None)
        assert path == "{{workspaceFolder}}/vendor/bin/phpcbf"

    def test_home_shorthand(self):
        path = resolve_executable_path("~/bin/phpcbf")
        assert path == str(Path.home()) + "/bin/phpcbf"

    def test_tilde_in_middle_untouched(self):
        assert resolve_executable_path("/opt/~/phpcbf") == "/opt/~/phpcbf"

    def test_plain_name(self):
        assert resolve_executable_path("phpcbf", "/ws") == "phpcbf"


class TestFormatOptions:
    def test_defaults(self):
        options = FormatOptions()
        assert options.executable_path == default_executable()
        assert options.standard is None
        assert options.debug is False
        assert options.config_search is False
        assert options.config_filenames == DEFAULT_CONFIG_FILENAMES
        assert options.enable is True
        assert options.source_extension == "php"

    def test_default_filename_order(self):
        assert DEFAULT_CONFIG_FILENAMES == (
            ".phpcs.xml",
            ".phpcs.xml.dist",
            "phpcs.xml",
            "phpcs.xml.dist",
            "phpcs.ruleset.xml",
            "ruleset.xml",
        )

    def test_frozen(self):
        options = FormatOptions()
        with pytest.raises(dataclasses.FrozenInstanceError):
            options.standard = "PSR12"  # type: ignore[misc]

    def test_replace_returns_new_snapshot(self):
        options = FormatOptions()
        changed = options.replace(standard="PSR12", debug=True)
        assert changed is not options
        assert changed.standard == "PSR12"
        assert options.standard is None

    def test_from_settings(self):
        options = FormatOptions.from_settings(
            {
                "executablePath": "{{workspaceFolder}}/vendor/bin/phpcbf",
                "standard": "PSR12",
                "debug": True,
                "configSearch": True,
                "config_filenames": ["custom.xml"],
                "enable": True,
                "onsave": True,
                "documentFormattingProvider": False,
            },
            workspace="/ws",
        )
        assert options.executable_path == "/ws/vendor/bin/phpcbf"
        assert options.standard == "PSR12"
        assert options.debug is True
        assert options.config_search is True
        assert options.config_filenames == ("custom.xml",)
        assert options.on_save is True
        assert options.document_formatting_provider is False
        assert options.workspace == "/ws"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("false", False),
            ("False", False),
            ("no", False),
            ("off", False),
            ("0", False),
            ("true", True),
            ("yes", True),
            (1, True),
            (0, False),
            (None, True),
            ("maybe", True),
        ],
    )
    def test_from_settings_boolean_strings(self, value, expected):
        options = FormatOptions.from_settings({"enable": value})
        assert options.enable is expected

    def test_from_settings_quoted_false_disables_flags(self):
        options = FormatOptions.from_settings(
            {"debug": "false", "configSearch": "false", "onsave": "no", "documentFormattingProvider": "off"}
        )
        assert options.debug is False
        assert options.config_search is False
        assert options.on_save is False
        assert options.document_formatting_provider is False

    def test_from_settings_blank_standard_is_none(self):
        assert FormatOptions.from_settings({"standard": "  "}).standard is None

    def test_from_settings_empty_filenames_fall_back(self):
        options = FormatOptions.from_settings({"config_filenames": []})
        assert options.config_filenames == DEFAULT_CONFIG_FILENAMES

    def test_settings_round_trip(self):
        options = FormatOptions(standard="PSR2", on_save=True, config_filenames=("a.xml",))
        assert FormatOptions.from_settings(options.to_settings()) == options


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path: Path):
        options = load_settings(tmp_path / "nope.yaml", workspace="/ws")
        assert options == FormatOptions(workspace="/ws")

    def test_top_level_keys(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.dump({"standard": "PSR12", "configSearch": True}))
        options = load_settings(path)
        assert options.standard == "PSR12"
        assert options.config_search is True

    def test_phpcbf_section(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text("phpcbf:\n  executablePath: ~/bin/phpcbf\n  debug: true\n")
        options = load_settings(path)
        assert options.executable_path == str(Path.home()) + "/bin/phpcbf"
        assert options.debug is True

    def test_invalid_yaml_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text("phpcbf: [unclosed\n")
        assert load_settings(path) == FormatOptions()

    def test_non_mapping_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text("- just\n- a list\n")
        assert load_settings(path) == FormatOptions()

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert load_settings(path) == FormatOptions()

    def test_save_then_load(self, tmp_path: Path):
        path = tmp_path / "nested" / "settings.yaml"
        options = FormatOptions(standard="PSR12", debug=True, config_search=True)
        save_settings(options, path)

        raw = yaml.safe_load(path.read_text())
        assert raw["phpcbf"]["standard"] == "PSR12"
        assert load_settings(path) == options
