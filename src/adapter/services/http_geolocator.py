import ipaddress
import logging
from typing import Optional

import httpx

from config import ApplicationConfig
from src.app.services.geolocator import GeoLocation, IGeoLocator

logger = logging.getLogger(__name__)


def is_public_ip(ip_address: Optional[str]) -> bool:
    if not ip_address:
        return False
    try:
        ip = ipaddress.ip_address(ip_address)
    except ValueError:
        return False
    return not (ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_reserved)


class HttpGeoLocator(IGeoLocator):
    """Looks up IP location with an ip-api.com compatible JSON endpoint"""

    def __init__(
        self,
        url_template: str = ApplicationConfig.GEOLOCATION_API_URL,
        timeout: float = ApplicationConfig.GEOLOCATION_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url_template = url_template
        self.timeout = timeout
        self.transport = transport

    async def lookup(self, ip_address: Optional[str]) -> Optional[GeoLocation]:
        if not is_public_ip(ip_address):
            logger.debug(f"Skipping geolocation for non-public IP: {ip_address}")
            return None

        url = self.url_template.format(ip=ip_address)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Geolocation lookup failed for {ip_address}: {exc}")
            return None

        if data.get("status") != "success":
            logger.info(f"Geolocation returned no result for {ip_address}")
            return None

        return GeoLocation(
            country=data.get("country"),
            isp=data.get("isp"),
            timezone=data.get("timezone"),
        )
