"""Read the module path from a ``go.mod`` file."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from covtab.errors import ConfigurationError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_MODULE_KEYWORD = "module"
_QUOTES = ('"', "`")
_MIN_QUOTED_LENGTH = 2


def parse_module_path(text: str) -> str:
    """Return the path declared by the ``module`` directive in *text*.

    Only the first directive counts. Line comments are ignored and quoted
    paths are unquoted. Returns an empty string when no directive is found
    or the quoted path is malformed.
    """
    for raw_line in text.splitlines():
        line = raw_line.split("//", 1)[0].strip()
        if not line.startswith(_MODULE_KEYWORD):
            continue
        rest = line[len(_MODULE_KEYWORD) :]
        value = rest.strip()
        # "modulefoo" is not a directive; "module" alone has no path
        if len(value) == len(rest) or not value:
            continue
        if value[0] in _QUOTES:
            quote = value[0]
            if len(value) < _MIN_QUOTED_LENGTH or value[-1] != quote or quote in value[1:-1]:
                return ""
            return value[1:-1]
        return value
    return ""


def read_module_path(module_file: Path) -> str:
    """Read and return the module path declared in *module_file*.

    Raises:
        ConfigurationError: If the file is missing, unreadable, or has no
            module directive.
    """
    try:
        text = module_file.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Unable to read module file {module_file}: {exc}") from exc

    module_path = parse_module_path(text)
    if not module_path:
        raise ConfigurationError(f"No module directive found in {module_file}")

    logger.debug("Module path for %s: %s", module_file, module_path)
    return module_path
