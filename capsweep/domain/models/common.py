"""Defines common Value Objects used across different domain contexts.

These objects represent simple values like credentials, identifiers and
language tags, plus the callable types used to inject time and sleeping
into the resilience services.
"""

from typing import Awaitable, Callable, NewType

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are strings at runtime.
ApiKey = NewType("ApiKey", str)              # Long-lived key from the environment
AccessToken = NewType("AccessToken", str)    # Bearer token, valid for one run
ItemId = NewType("ItemId", str)              # Remote identifier (e.g. a videoId)
LanguageTag = NewType("LanguageTag", str)    # Caption language (srclang), e.g. 'en'

# === Time Injection ===

# Suspends the caller for the given number of seconds (asyncio.sleep by default).
Sleeper = Callable[[float], Awaitable[None]]
# Returns the current time in seconds (time.time by default).
Clock = Callable[[], float]
