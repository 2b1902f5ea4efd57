"""Tests for Go package clause parsing (parsing/treesitter.py)."""

from __future__ import annotations

import pytest

from covtab.parsing.treesitter import get_parser, go_package_name


class TestGetParser:
    def test_parser_is_cached(self) -> None:
        assert get_parser("go") is get_parser("go")

    def test_unsupported_language(self) -> None:
        with pytest.raises(ValueError, match="Unsupported language"):
            get_parser("cobol")


class TestGoPackageName:
    def test_main_package(self) -> None:
        assert go_package_name(b"package main\n\nfunc main() {}\n") == "main"

    def test_library_package_after_doc_comment(self) -> None:
        source = b"// Package shop sells things.\n//\n// package main\npackage shop\n"
        assert go_package_name(source) == "shop"

    def test_build_constraint_before_clause(self) -> None:
        source = b"//go:build linux\n\npackage main\n"
        assert go_package_name(source) == "main"

    def test_marker_inside_raw_string_is_ignored(self) -> None:
        source = b"package gen\n\nvar tmpl = `\npackage main\n`\n"
        assert go_package_name(source) == "gen"

    def test_no_package_clause(self) -> None:
        assert go_package_name(b"// just a comment\n") is None
