from abc import ABC, abstractmethod
from datetime import timedelta

from src.libs.result import Result


class ITokenIssuer(ABC):
    """Signs and verifies opaque bearer tokens"""

    @abstractmethod
    def issue(self, claims: dict, ttl: timedelta) -> str:
        """Return a signed token carrying claims, valid for ttl"""
        pass

    @abstractmethod
    def verify(self, token: str) -> Result[dict]:
        """Return the claims, or INVALID_TOKEN / TOKEN_EXPIRED"""
        pass
