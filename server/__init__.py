"""HTTP API for toolscout."""
