"""covtab — per-file Go coverage tables that include untested files."""

__version__ = "0.1.0"
