"""Shared helpers for covtab."""
