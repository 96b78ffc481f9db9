"""HTTP API for the AI proxy."""
