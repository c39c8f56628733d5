"""Interface for credential providers."""

import abc

from capsweep.domain.models.common import ApiKey


class CredentialProvider(abc.ABC):
    """Abstract Base Class for supplying the API key of a run."""

    @abc.abstractmethod
    def get_api_key(self) -> ApiKey:
        """Returns the API key.

        Raises:
            ConfigurationError: If no key is configured.
        """
        pass
