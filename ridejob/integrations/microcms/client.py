"""microCMS client for the job inventory and location master data."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

PAGE_LIMIT = 100


class MicroCMSError(Exception):
    """Raised when microCMS is not configured or answers with an error."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class Prefecture(BaseModel):
    """Prefecture master record."""

    id: str
    region: str
    area: str = ""


class Municipality(BaseModel):
    """Municipality master record."""

    id: str
    name: str
    prefecture: Prefecture | None = None


class ListResponse(BaseModel):
    """microCMS list API envelope."""

    contents: list[dict[str, Any]] = Field(default_factory=list)
    total_count: int = Field(default=0, alias="totalCount")
    offset: int = 0
    limit: int = 0


class MicroCMSClient:
    """Async client for the microCMS REST API.

    Use as an async context manager, or pass an existing `httpx.AsyncClient`
    which is then left open.
    """

    def __init__(
        self,
        base_url: str | None,
        api_key: str | None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: `https://<domain>.microcms.io/api/v1` (None when unconfigured)
            api_key: X-MICROCMS-API-KEY value
            timeout: Request timeout in seconds
            client: Optional shared HTTP client
        """
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "MicroCMSClient":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    @property
    def client(self) -> httpx.AsyncClient:
        """Get HTTP client, raising if not initialized."""
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")
        return self._client

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        if not self.is_configured:
            raise MicroCMSError("microCMS environment variables are not set")

        response = await self.client.get(
            f"{self.base_url}{path}",
            params=params,
            headers={"X-MICROCMS-API-KEY": self.api_key},
        )
        return response

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = await self._get(path, params)
        if response.is_error:
            raise MicroCMSError(
                f"microCMS API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response.json()

    async def _count(self, filters: str) -> int:
        data = await self._get_json("/jobs", {"filters": filters, "limit": 1, "fields": "id"})
        return ListResponse.model_validate(data).total_count

    async def _list_all(self, endpoint: str, filters: str | None = None) -> list[dict[str, Any]]:
        """Fetch every page of a list endpoint."""
        contents: list[dict[str, Any]] = []
        offset = 0
        while True:
            params: dict[str, Any] = {"limit": PAGE_LIMIT, "offset": offset}
            if filters:
                params["filters"] = filters
            page = ListResponse.model_validate(await self._get_json(endpoint, params))
            contents.extend(page.contents)
            offset += len(page.contents)
            if not page.contents or offset >= page.total_count:
                return contents

    # =========================================================================
    # Jobs
    # =========================================================================

    async def get_job_count_by_prefecture(self, prefecture_name: str) -> int:
        """Number of published jobs whose prefecture region equals the name (e.g. 東京都)."""
        return await self._count(f"prefecture.region[equals]{prefecture_name}")

    async def get_job_count_by_prefecture_id(self, prefecture_id: str) -> int:
        return await self._count(f"prefecture[equals]{prefecture_id}")

    async def get_job_count_by_municipality(self, municipality_id: str) -> int:
        return await self._count(f"municipality[equals]{municipality_id}")

    # =========================================================================
    # Location master
    # =========================================================================

    async def fetch_prefectures(self) -> list[Prefecture]:
        items = await self._list_all("/prefectures")
        return [Prefecture.model_validate(item) for item in items]

    async def fetch_prefecture_by_id(self, prefecture_id: str) -> Prefecture | None:
        response = await self._get(f"/prefectures/{prefecture_id}")
        if response.status_code == 404:
            return None
        if response.is_error:
            raise MicroCMSError(
                f"microCMS API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        return Prefecture.model_validate(response.json())

    async def fetch_municipalities(self, prefecture_id: str | None = None) -> list[Municipality]:
        filters = f"prefecture[equals]{prefecture_id}" if prefecture_id else None
        items = await self._list_all("/municipalities", filters)
        return [Municipality.model_validate(item) for item in items]

    async def fetch_municipality_by_id(self, municipality_id: str) -> Municipality | None:
        response = await self._get(f"/municipalities/{municipality_id}")
        if response.status_code == 404:
            return None
        if response.is_error:
            raise MicroCMSError(
                f"microCMS API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        return Municipality.model_validate(response.json())
