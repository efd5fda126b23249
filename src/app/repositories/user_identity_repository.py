from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from src.domain.entities import RiskLevel, UserIdentity


class IUserIdentityRepository(ABC):
    """UserIdentity repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, identity_id: UUID) -> Optional[UserIdentity]:
        """Get identity by ID"""
        pass

    @abstractmethod
    async def get_by_user_and_hash(
        self, user_id: UUID, fingerprint_hash: str
    ) -> Optional[UserIdentity]:
        """Get the identity for one (user, device fingerprint) pair"""
        pass

    @abstractmethod
    async def get_recent_by_user_id(
        self, user_id: UUID, limit: int = 5
    ) -> List[UserIdentity]:
        """Most recently seen identities for a user, newest first"""
        pass

    @abstractmethod
    async def get_all_by_user_id(self, user_id: UUID) -> List[UserIdentity]:
        """Every identity a user has, active or not"""
        pass

    @abstractmethod
    async def list_by_user_id(
        self,
        user_id: UUID,
        is_active: Optional[bool] = None,
        is_blocked: Optional[bool] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[UserIdentity], int]:
        """Page of a user's identities (newest sighting first) and the total count"""
        pass

    @abstractmethod
    async def list_by_risk_levels(
        self, risk_levels: Sequence[RiskLevel], limit: int = 50, offset: int = 0
    ) -> Tuple[List[UserIdentity], int]:
        """Active identities in the given risk levels, riskiest first"""
        pass

    @abstractmethod
    async def create(self, identity: UserIdentity) -> UserIdentity:
        """Create a new identity"""
        pass

    @abstractmethod
    async def get_or_create(self, identity: UserIdentity) -> Tuple[UserIdentity, bool]:
        """
        Insert identity unless its (user_id, fingerprint_hash) already exists.

        Returns (stored identity, created). A concurrent insert of the same
        pair resolves to the existing row instead of failing.
        """
        pass

    @abstractmethod
    async def update(self, identity: UserIdentity) -> UserIdentity:
        """Update existing identity"""
        pass

    @abstractmethod
    async def deactivate_inactive(self, cutoff: datetime) -> int:
        """Deactivate active identities last seen before cutoff. Returns count."""
        pass

    @abstractmethod
    async def get_stats(self, user_id: Optional[UUID] = None) -> dict:
        """Aggregate counts and average risk/trust scores"""
        pass
