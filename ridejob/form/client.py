"""HTTP client the form core uses to talk to the RIDE JOB API."""

import logging
from typing import Any

import httpx

from ridejob.form.models import JobCountResult

logger = logging.getLogger(__name__)

JOB_COUNT_FALLBACK_ERROR = "求人件数の取得に失敗しました"
SUBMISSION_FALLBACK_ERROR = "サーバーエラー"
SUBMISSION_NETWORK_ERROR = "フォームの送信中にエラーが発生しました。ネットワーク接続を確認してください。"


class JobCountLookupError(Exception):
    """Raised when the job-count endpoint answers with an error."""


class SubmissionError(Exception):
    """Raised when the applicant relay rejects or cannot receive a submission."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class FormApiClient:
    """Async client for `/api/jobs-count` and the applicant relay endpoints.

    Either pass an existing `httpx.AsyncClient` (not closed by this class) or
    use the instance as an async context manager.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "FormApiClient":
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get HTTP client, raising if not initialized."""
        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")
        return self._client

    async def fetch_job_count(
        self,
        postal_code: str | None = None,
        prefecture_id: str | None = None,
    ) -> JobCountResult:
        """Look up the job count for a postal code or a prefecture id.

        Raises:
            JobCountLookupError: If the endpoint returns a non-2xx status.
        """
        params = {"postalCode": postal_code} if postal_code else {"prefectureId": prefecture_id}
        response = await self.client.get("/api/jobs-count", params=params)
        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.is_error:
            raise JobCountLookupError(data.get("error") or JOB_COUNT_FALLBACK_ERROR)

        return JobCountResult(
            job_count=data.get("jobCount"),
            message=data.get("message", ""),
            error=data.get("error", "") or "",
            search_method=data.get("searchMethod"),
            search_area=data.get("searchArea"),
            prefecture_id=data.get("prefectureId"),
        )

    async def submit_application(self, body: dict[str, Any], path: str = "/api/applicants") -> str:
        """Post a submission to the relay endpoint and return its message.

        Raises:
            SubmissionError: On a non-2xx answer or a transport failure.
        """
        try:
            response = await self.client.post(path, json=body)
        except httpx.HTTPError as e:
            logger.error(f"Error submitting form: {e}")
            raise SubmissionError(SUBMISSION_NETWORK_ERROR) from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.is_error:
            raise SubmissionError(
                data.get("message") or SUBMISSION_FALLBACK_ERROR,
                status_code=response.status_code,
            )
        return data.get("message", "")
