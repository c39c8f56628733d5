"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the application to the outside world (HTTP, environment, console)
by implementing the interfaces defined in the domain layer. Also includes the
resilience services (rate-limit tracking, retries, throttling).
"""
