# PHPCBF Runner
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
"""Tests for ruleset config discovery."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from phpcbf_runner.config_search import ConfigResolver, ancestor_directories, first_match
from phpcbf_runner.options import DEFAULT_CONFIG_FILENAMES

_real_listdir = os.listdir


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """<tmp>/a/b/c/file.php"""
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)
    (nested / "file.php").write_text("<?php\n")
    return tmp_path


class TestAncestorDirectories:
    def test_starts_at_parent_of_file(self, tree: Path):
        dirs = list(ancestor_directories(tree / "a" / "b" / "c" / "file.php"))
        assert dirs[:3] == [
            str(tree / "a" / "b" / "c"),
            str(tree / "a" / "b"),
            str(tree / "a"),
        ]

    def test_directory_starts_at_itself(self, tree: Path):
        dirs = list(ancestor_directories(tree / "a" / "b"))
        assert dirs[0] == str(tree / "a" / "b")

    def test_unsaved_file_in_missing_directory(self, tmp_path: Path):
        dirs = list(ancestor_directories(tmp_path / "nope" / "new.php"))
        assert dirs[0] == str(tmp_path / "nope")

    def test_nearest_to_furthest_without_empty_entries(self, tree: Path):
        dirs = list(ancestor_directories(tree / "a" / "b" / "c" / "file.php"))
        assert all(dirs)
        lengths = [len(d) for d in dirs]
        assert lengths == sorted(lengths, reverse=True)

    @pytest.mark.skipif(os.sep != "/", reason="POSIX paths")
    def test_posix_walk(self):
        assert list(ancestor_directories("/x/y/z/file.php")) == ["/x/y/z", "/x/y", "/x"]


class TestFirstMatch:
    def test_sorted_listing_order(self):
        entries = ["ruleset.xml", "composer.json", "phpcs.xml"]
        assert first_match("/p", entries, DEFAULT_CONFIG_FILENAMES) == os.path.join("/p", "phpcs.xml")

    def test_no_match(self):
        assert first_match("/p", ["composer.json"], DEFAULT_CONFIG_FILENAMES) is None


class TestConfigResolver:
    @pytest.mark.asyncio
    async def test_finds_ancestor_ruleset(self, tree: Path):
        (tree / "a" / "b" / "ruleset.xml").write_text("<ruleset/>")
        match = await ConfigResolver().resolve(tree / "a" / "b" / "c" / "file.php")
        assert match == str(tree / "a" / "b" / "ruleset.xml")

    @pytest.mark.asyncio
    async def test_nearer_match_wins(self, tree: Path):
        (tree / "a" / "b" / "ruleset.xml").write_text("<ruleset/>")
        (tree / "a" / "b" / "c" / "phpcs.xml.dist").write_text("<ruleset/>")
        match = await ConfigResolver().resolve(tree / "a" / "b" / "c" / "file.php")
        assert match == str(tree / "a" / "b" / "c" / "phpcs.xml.dist")

    @pytest.mark.asyncio
    async def test_no_match_returns_none(self, tree: Path):
        resolver = ConfigResolver(config_filenames=["no-such-ruleset-7f3a.xml"])
        assert await resolver.resolve(tree / "a" / "b" / "c" / "file.php") is None

    @pytest.mark.asyncio
    async def test_unrecognized_names_ignored(self, tree: Path):
        (tree / "a" / "b" / "c" / "phpcs.json").write_text("{}")
        (tree / "a" / "custom.xml").write_text("<ruleset/>")
        resolver = ConfigResolver(config_filenames=["custom.xml"])
        match = await resolver.resolve(tree / "a" / "b" / "c" / "file.php")
        assert match == str(tree / "a" / "custom.xml")

    @pytest.mark.asyncio
    async def test_listing_failure_is_reported_and_skipped(self, tree: Path):
        (tree / "a" / "phpcs.xml").write_text("<ruleset/>")
        blocked = str(tree / "a" / "b")
        errors: list[str] = []

        def _listdir(path):
            if path == blocked:
                raise PermissionError(13, "Permission denied", path)
            return _real_listdir(path)

        with patch("phpcbf_runner.config_search.os.listdir", side_effect=_listdir):
            match = await ConfigResolver(on_error=errors.append).resolve(
                tree / "a" / "b" / "c" / "file.php"
            )

        assert match == str(tree / "a" / "phpcs.xml")
        assert len(errors) == 1
        assert errors[0].startswith(f"{blocked} - ")
        assert "Permission denied" in errors[0]

    @pytest.mark.asyncio
    async def test_missing_directories_do_not_raise(self, tmp_path: Path):
        (tmp_path / "phpcs.xml").write_text("<ruleset/>")
        errors: list[str] = []
        resolver = ConfigResolver(on_error=errors.append)
        match = await resolver.resolve(tmp_path / "gone" / "deeper" / "file.php")
        assert match == str(tmp_path / "phpcs.xml")
        assert len(errors) == 2

    @pytest.mark.asyncio
    async def test_resolve_does_not_modify_tree(self, tree: Path):
        before = sorted(p for p in tree.rglob("*"))
        await ConfigResolver().resolve(tree / "a" / "b" / "c" / "file.php")
        assert sorted(p for p in tree.rglob("*")) == before

    def test_find_matches_resolve(self, tree: Path):
        (tree / "a" / ".phpcs.xml").write_text("<ruleset/>")
        match = ConfigResolver().find(tree / "a" / "b" / "c" / "file.php")
        assert match == str(tree / "a" / ".phpcs.xml")

    def test_find_without_match(self, tree: Path):
        resolver = ConfigResolver(config_filenames=["no-such-ruleset-7f3a.xml"])
        assert resolver.find(tree / "a" / "b" / "c" / "file.php") is None
