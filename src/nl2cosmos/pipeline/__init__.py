"""Query pipeline stages."""
