"""api.video bindings.

Endpoint URL construction, response parsing and credential lookup. Implements
the `CaptionApi` and `CredentialProvider` ports.
"""
