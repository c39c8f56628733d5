"""Domain Event definitions.

Represents significant occurrences during a run (phase changes, retries,
throttling, per-video progress) that reporters render or log.
"""
