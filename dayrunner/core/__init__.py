"""Shared helpers: YAML loading, logging, version-aware ordering."""
