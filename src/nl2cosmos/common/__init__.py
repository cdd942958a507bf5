"""Shared infrastructure: settings, logging, errors, resilience."""
