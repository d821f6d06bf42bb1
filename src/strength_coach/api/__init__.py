"""HTTP API for the strength coach."""
