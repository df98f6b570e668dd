"""Domain modules of the marketplace settlement server."""
