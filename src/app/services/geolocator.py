from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel


class GeoLocation(BaseModel):
    """IP-derived location and network details"""

    country: Optional[str] = None
    isp: Optional[str] = None
    timezone: Optional[str] = None


class IGeoLocator(ABC):
    """Optional IP enrichment. Must return None rather than raise."""

    @abstractmethod
    async def lookup(self, ip_address: Optional[str]) -> Optional[GeoLocation]:
        pass


class NullGeoLocator(IGeoLocator):
    """Geolocation disabled: every lookup is a miss"""

    async def lookup(self, ip_address: Optional[str]) -> Optional[GeoLocation]:
        return None
