"""dayrunner: build and run a directory of day projects in order."""

__version__ = "1.0.0"
