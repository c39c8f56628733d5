"""Credential provider backed by the application configuration."""

import logging
from typing import Callable, Optional

from capsweep.domain.errors import ConfigurationError
from capsweep.domain.interfaces.credentials import CredentialProvider
from capsweep.domain.models.common import ApiKey
from capsweep.infrastructure.config.settings import get_api_key

logger = logging.getLogger(__name__)


class EnvCredentialProvider(CredentialProvider):
    """Reads API_KEY from the environment, .env or the YAML config."""

    def __init__(self, lookup: Callable[[], Optional[str]] = get_api_key):
        self._lookup = lookup

    def get_api_key(self) -> ApiKey:
        key = self._lookup()
        if not key:
            raise ConfigurationError("API_KEY is required. Please set it in your environment or .env file.")
        logger.debug("API key found.")
        return ApiKey(key)
