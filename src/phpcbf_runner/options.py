# PHPCBF Runner
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
#
# This file is part of PHPCBF Runner.
#
# PHPCBF Runner is dual-licensed:
#
# 1. Open Source: GNU Affero General Public License v3.0 (AGPL-3.0)
# 2. Commercial: Available from Phoenix Link (Pty) Ltd
#
# Contributions require a signed CLA. See COPYRIGHT.md and CLA.md.
"""Formatter options and the YAML settings file.

Settings use the same keys as the editor extension settings
(``executablePath``, ``configSearch``, ``onsave`` ...), either at the top
level of the file or under a ``phpcbf:`` section.

Settings location: ~/.phpcbf/settings.yaml  (override with PHPCBF_HOME)

A ``FormatOptions`` instance is an immutable snapshot.  Configuration
reloads build a new snapshot; a format call keeps the one it started with.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

logger = logging.getLogger("phpcbf_runner.options")

# ---------------------------------------------------------------------------
# Default paths
# ---------------------------------------------------------------------------
_PHPCBF_HOME = Path(os.environ.get("PHPCBF_HOME", Path.home() / ".phpcbf"))
DEFAULT_SETTINGS_PATH = _PHPCBF_HOME / "settings.yaml"

# ---------------------------------------------------------------------------
# Ruleset file names recognized by the config search, in priority order
# ---------------------------------------------------------------------------
DEFAULT_CONFIG_FILENAMES: tuple[str, ...] = (
    ".phpcs.xml",
    ".phpcs.xml.dist",
    "phpcs.xml",
    "phpcs.xml.dist",
    "phpcs.ruleset.xml",
    "ruleset.xml",
)

WORKSPACE_PLACEHOLDER = "{{workspaceFolder}}"
DEFAULT_EXTENSION = "php"


def default_executable() -> str:
    """Executable name looked up on PATH when none is configured."""
    return "phpcbf.bat" if sys.platform == "win32" else "phpcbf"


def resolve_executable_path(path: str, workspace: str | None = None) -> str:
    """Expand the workspace placeholder and the home shorthand in *path*.

    ``{{workspaceFolder}}/vendor/bin/phpcbf`` becomes
    ``<workspace>/vendor/bin/phpcbf`` and ``~/bin/phpcbf`` becomes
    ``<home>/bin/phpcbf``.  The placeholder is left as-is when no workspace
    is known.
    """
    if path.startswith(WORKSPACE_PLACEHOLDER) and workspace:
        path = workspace + path[len(WORKSPACE_PLACEHOLDER):]

    if path.startswith("~/"):
        path = str(Path.home()) + path[1:]

    return path


_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "off", "0", ""})


def _as_bool(settings: Mapping[str, Any], key: str, default: bool) -> bool:
    """Read a boolean setting; quoted ``"false"`` / ``"no"`` mean False."""
    value = settings.get(key, default)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    logger.warning("Invalid value for %s: %r -- using %s", key, value, default)
    return default


@dataclass(frozen=True)
class FormatOptions:
    """Snapshot of everything one format call needs."""

    executable_path: str = dataclasses.field(default_factory=default_executable)
    standard: str | None = None
    debug: bool = False
    config_search: bool = False
    config_filenames: tuple[str, ...] = DEFAULT_CONFIG_FILENAMES
    enable: bool = True
    on_save: bool = False
    document_formatting_provider: bool = True
    workspace: str | None = None
    source_extension: str = DEFAULT_EXTENSION

    def replace(self, **changes: Any) -> FormatOptions:
        """Return a new snapshot with *changes* applied."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_settings(
        cls,
        settings: Mapping[str, Any],
        workspace: str | None = None,
    ) -> FormatOptions:
        """Build options from editor-style settings keys."""
        workspace = workspace or settings.get("workspace") or None
        executable = settings.get("executablePath") or default_executable()

        filenames = settings.get("config_filenames") or DEFAULT_CONFIG_FILENAMES
        if isinstance(filenames, str):
            filenames = [filenames]
        filenames = tuple(str(f) for f in filenames if str(f).strip())

        standard = settings.get("standard")
        if standard is not None:
            standard = str(standard).strip() or None

        return cls(
            executable_path=resolve_executable_path(str(executable), workspace),
            standard=standard,
            debug=_as_bool(settings, "debug", False),
            config_search=_as_bool(settings, "configSearch", False),
            config_filenames=filenames or DEFAULT_CONFIG_FILENAMES,
            enable=_as_bool(settings, "enable", True),
            on_save=_as_bool(settings, "onsave", False),
            document_formatting_provider=_as_bool(settings, "documentFormattingProvider", True),
            workspace=workspace,
            source_extension=str(settings.get("extension") or DEFAULT_EXTENSION).lstrip(".")
            or DEFAULT_EXTENSION,
        )

    def to_settings(self) -> dict[str, Any]:
        """Serialize back to editor-style settings keys."""
        return {
            "enable": self.enable,
            "executablePath": self.executable_path,
            "standard": self.standard,
            "debug": self.debug,
            "configSearch": self.config_search,
            "config_filenames": list(self.config_filenames),
            "onsave": self.on_save,
            "documentFormattingProvider": self.document_formatting_provider,
            "extension": self.source_extension,
        }


def load_settings(
    path: Path | str | None = None,
    workspace: str | None = None,
) -> FormatOptions:
    """Load formatter options from a YAML settings file.

    If the file does not exist or cannot be parsed, returns the default
    options.
    """
    settings_path = Path(path) if path else DEFAULT_SETTINGS_PATH

    if not settings_path.exists():
        logger.info("No settings at %s -- using defaults", settings_path)
        return FormatOptions(workspace=workspace)

    try:
        raw = yaml.safe_load(settings_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        logger.error("Failed to load settings from %s: %s -- using defaults", settings_path, exc)
        return FormatOptions(workspace=workspace)

    if raw is None:
        return FormatOptions(workspace=workspace)
    if not isinstance(raw, dict):
        logger.warning("Invalid settings in %s (not a mapping) -- using defaults", settings_path)
        return FormatOptions(workspace=workspace)

    section = raw.get("phpcbf", raw)
    if not isinstance(section, dict):
        logger.warning("Invalid 'phpcbf' section in %s -- using defaults", settings_path)
        return FormatOptions(workspace=workspace)

    return FormatOptions.from_settings(section, workspace=workspace)


def save_settings(options: FormatOptions, path: Path | str | None = None) -> Path:
    """Save options to a YAML settings file under a ``phpcbf:`` section."""
    settings_path = Path(path) if path else DEFAULT_SETTINGS_PATH
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    settings_path.write_text(
        yaml.dump({"phpcbf": options.to_settings()}, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    logger.info("Saved settings to %s", settings_path)
    return settings_path
