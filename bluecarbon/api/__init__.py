"""Blue Carbon registry HTTP API."""
