"""Pre-run tools: config pre-check and day skeleton creation."""
