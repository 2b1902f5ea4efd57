"""Source parsing helpers."""

from covtab.parsing.treesitter import get_parser, go_package_name, parse_code

__all__ = [
    "get_parser",
    "go_package_name",
    "parse_code",
]
