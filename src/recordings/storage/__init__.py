"""Storage adapters for local and cloud recordings."""
