"""Tree-sitter wrapper for reading Go package declarations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

import tree_sitter_language_pack as tslp

if TYPE_CHECKING:
    import tree_sitter
    from tree_sitter_language_pack import SupportedLanguage

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = frozenset({"go"})

# ── Module-level caches ──────────────────────────────────────────
_parser_cache: dict[str, tree_sitter.Parser] = {}


def get_parser(language: str) -> tree_sitter.Parser:
    """Get a (cached) tree-sitter parser for the given language."""
    if language not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language: {language}")
    cached = _parser_cache.get(language)
    if cached is not None:
        return cached
    parser = tslp.get_parser(cast("SupportedLanguage", language))
    _parser_cache[language] = parser
    return parser


def parse_code(source: bytes, language: str = "go") -> tree_sitter.Tree:
    """Parse source code bytes into a tree-sitter AST."""
    return get_parser(language).parse(source)


def go_package_name(source: bytes) -> str | None:
    """Return the name in the package clause of Go *source*.

    Comments and string literals are not mistaken for the clause. Returns
    None when the file has no package clause.
    """
    root = parse_code(source, "go").root_node
    for child in root.children:
        if child.type != "package_clause":
            continue
        for sub in child.children:
            if sub.type == "package_identifier":
                return _node_text(sub)
    return None


def _node_text(node: tree_sitter.Node) -> str:
    """Decode node text from bytes."""
    return node.text.decode("utf-8", errors="replace") if node.text else ""
