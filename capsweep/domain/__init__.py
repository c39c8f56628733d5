"""Domain Layer: value objects, events, errors and the ports (interfaces)
that the core depends on. Nothing here performs I/O.
"""
