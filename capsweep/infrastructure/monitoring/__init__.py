"""Logging setup and log-backed progress reporting."""
