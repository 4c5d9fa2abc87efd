"""Pytest configuration and fixtures."""

import json
import os
from datetime import date

import httpx
import pytest

# Set test environment
os.environ["APP_ENV"] = "development"

from ridejob.form.models import JobCountResult  # noqa: E402
from ridejob.form.tracking import InMemoryEventSink  # noqa: E402

TODAY = date(2025, 6, 15)


class FakeFormApi:
    """Stand-in for FormApiClient with scripted job counts."""

    def __init__(self, counts: dict[str, int] | None = None, submit_error: Exception | None = None):
        self.counts = counts or {}
        self.submit_error = submit_error
        self.job_count_calls: list[dict] = []
        self.submissions: list[dict] = []

    async def fetch_job_count(self, postal_code=None, prefecture_id=None) -> JobCountResult:
        self.job_count_calls.append({"postal_code": postal_code, "prefecture_id": prefecture_id})
        key = postal_code or prefecture_id
        count = self.counts.get(key, 0)
        return JobCountResult(
            job_count=count,
            message=f"東京都内で{count}件の求人が見つかりました" if count else "東京都内では現在求人がありません",
            search_method="prefecture",
            search_area="東京都内",
        )

    async def submit_application(self, body: dict, path: str = "/api/applicants") -> str:
        if self.submit_error is not None:
            raise self.submit_error
        self.submissions.append({"path": path, "body": body})
        return "Application submitted successfully!"


class StaticKanaConverter:
    """Kana converter returning fixed readings."""

    def __init__(self, readings: dict[str, str]):
        self.readings = readings

    async def convert(self, text: str) -> str:
        return self.readings.get(text, "")


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def event_sink():
    return InMemoryEventSink()


@pytest.fixture
def fake_api():
    return FakeFormApi(counts={"1010051": 8, "5320011": 0})


@pytest.fixture
def kana_converter():
    return StaticKanaConverter({"山田": "やまだ", "太郎": "たろう"})


@pytest.fixture
def postcode_file(tmp_path):
    """Small ken_all.json with integer codes (leading zeros dropped)."""
    path = tmp_path / "ken_all.json"
    path.write_text(
        json.dumps(
            [
                {"postal_code": 1010051, "prefecture": "東京都"},
                {"postal_code": 5320011, "prefecture": "大阪府"},
                {"postal_code": 600000, "prefecture": "北海道"},
            ],
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def make_http_client():
    """Factory for httpx clients backed by a request handler."""

    def _make(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make
