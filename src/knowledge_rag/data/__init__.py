"""Bundled data files (seed corpus)."""
