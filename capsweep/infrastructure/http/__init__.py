"""HTTP transport adapters (httpx)."""
