"""Domain models: value objects and dataclasses shared across layers."""
