"""API Resilience Implementations.

Contains services for tracking rate-limit headers, retrying with exponential
backoff, adaptive throttling and bounded concurrent execution.
Bounded Context: API Resilience
"""
