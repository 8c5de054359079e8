"""
External collaborator interfaces.

Token issuance/refresh and payload encryption are opaque to the engine;
it only relies on the contracts below.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


class IAuthProvider(ABC):
    """Abstract interface for the authenticated session."""

    @abstractmethod
    async def get_valid_access_token(self) -> str | None:
        """Get the current access token, or None when nobody is logged in."""
        pass

    @abstractmethod
    async def perform_authenticated_request(self, url: str, method: str = "GET") -> str:
        """Send an authenticated request and return the response body.

        Implementations refresh an expired token once internally.

        Raises:
            SessionExpiredError: If the session cannot be refreshed
            NetworkError: If the server cannot be reached
        """
        pass


class IEncryptionService(ABC):
    """Abstract interface for end-to-end payload encryption."""

    @abstractmethod
    def encrypt(self, fields: Mapping[str, Any]) -> str:
        """Encrypt fields into one opaque payload.

        Raises:
            EncryptionFailureError: If a payload cannot be produced
        """
        pass
