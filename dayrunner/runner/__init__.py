"""Orchestration layer for the day projects.

``run_all`` discovers the ``day*`` directories, builds each one with the
configured build command, then runs the produced executables in
version-aware order. ``run_single`` does the same for one target.
"""

__all__ = [
    "run_all",
    "run_single",
]
