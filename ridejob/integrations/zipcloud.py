"""ZipCloud postal code -> address lookup."""

import logging
import re
from typing import Protocol

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

ZIPCLOUD_ENDPOINT = "https://zipcloud.ibsnet.co.jp/api/search"


class ZipcloudLocation(BaseModel):
    """Resolved address parts (any may be missing)."""

    prefecture_name: str | None = None
    municipality_name: str | None = None
    town_name: str | None = None


class AddressLookup(Protocol):
    """Resolves a postal code to an address, None when unknown."""

    async def fetch_address(self, postal_code: str) -> ZipcloudLocation | None: ...


def _clean(value: object) -> str | None:
    text = str(value or "").strip()
    return text or None


class ZipcloudClient:
    """Thin wrapper over the public ZipCloud search API.

    Every failure mode (bad code, HTTP error, empty result, network error)
    results in None.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        endpoint: str = ZIPCLOUD_ENDPOINT,
    ):
        self.client = client
        self.endpoint = endpoint

    async def fetch_address(self, postal_code: str) -> ZipcloudLocation | None:
        normalized = re.sub(r"[^0-9]", "", postal_code)
        if len(normalized) != 7:
            return None

        try:
            response = await self.client.get(
                self.endpoint,
                params={"zipcode": normalized, "limit": "1"},
                headers={"Accept": "application/json"},
            )
            if response.is_error:
                logger.warning(f"ZipCloud API request failed with status {response.status_code}")
                return None

            data = response.json()
            results = data.get("results") or []
            if data.get("status") != 200 or not results:
                if data.get("message"):
                    logger.warning(f"ZipCloud API responded with message: {data['message']}")
                return None

            first = results[0]
            return ZipcloudLocation(
                prefecture_name=_clean(first.get("address1")),
                municipality_name=_clean(first.get("address2")),
                town_name=_clean(first.get("address3")),
            )

        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"ZipCloud API request threw an error: {e}")
            return None
