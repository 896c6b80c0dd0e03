"""HTTP API for message analysis, built with FastAPI."""
