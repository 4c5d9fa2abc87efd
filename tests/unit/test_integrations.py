"""Tests for the microCMS, ZipCloud and Apps Script clients."""

import httpx
import pytest

from ridejob.integrations.gas import GasError, fetch_seminar_slots, fetch_step1_options
from ridejob.integrations.microcms import MicroCMSClient, MicroCMSError
from ridejob.integrations.zipcloud import ZipcloudClient

BASE_URL = "https://ridejob.microcms.io/api/v1"


class TestMicroCMSClient:
    """Tests for MicroCMSClient."""

    @pytest.mark.asyncio
    async def test_job_count_by_prefecture(self, make_http_client):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["filters"] = request.url.params["filters"]
            seen["key"] = request.headers["X-MICROCMS-API-KEY"]
            return httpx.Response(200, json={"contents": [], "totalCount": 12, "offset": 0, "limit": 1})

        client = MicroCMSClient(BASE_URL, "secret", client=make_http_client(handler))
        assert await client.get_job_count_by_prefecture("東京都") == 12

        assert seen["path"] == "/api/v1/jobs"
        assert seen["filters"] == "prefecture.region[equals]東京都"
        assert seen["key"] == "secret"

    @pytest.mark.asyncio
    async def test_unconfigured_client_raises(self, make_http_client):
        client = MicroCMSClient(None, None, client=make_http_client(lambda r: httpx.Response(200)))
        with pytest.raises(MicroCMSError):
            await client.get_job_count_by_prefecture("東京都")

    @pytest.mark.asyncio
    async def test_http_error_raises(self, make_http_client):
        client = MicroCMSClient(
            BASE_URL, "secret", client=make_http_client(lambda r: httpx.Response(401, json={}))
        )
        with pytest.raises(MicroCMSError) as exc_info:
            await client.fetch_prefectures()
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_list_paginates(self, make_http_client):
        """Test every page of a list endpoint is fetched."""

        def handler(request: httpx.Request) -> httpx.Response:
            offset = int(request.url.params["offset"])
            items = [
                {"id": f"m{i}", "name": f"市{i}", "prefecture": {"id": "tokyo", "region": "東京都"}}
                for i in range(offset, min(offset + 100, 150))
            ]
            return httpx.Response(200, json={"contents": items, "totalCount": 150})

        client = MicroCMSClient(BASE_URL, "secret", client=make_http_client(handler))
        municipalities = await client.fetch_municipalities("tokyo")

        assert len(municipalities) == 150
        assert municipalities[0].prefecture.id == "tokyo"

    @pytest.mark.asyncio
    async def test_prefecture_by_id_not_found(self, make_http_client):
        client = MicroCMSClient(
            BASE_URL, "secret", client=make_http_client(lambda r: httpx.Response(404, json={}))
        )
        assert await client.fetch_prefecture_by_id("nowhere") is None


class TestZipcloudClient:
    """Tests for ZipcloudClient."""

    @pytest.mark.asyncio
    async def test_address_resolved(self, make_http_client):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["zipcode"] == "1010051"
            return httpx.Response(
                200,
                json={
                    "status": 200,
                    "message": None,
                    "results": [{"address1": "東京都", "address2": "千代田区", "address3": "神田神保町"}],
                },
            )

        client = ZipcloudClient(make_http_client(handler))
        location = await client.fetch_address("101-0051")

        assert location.prefecture_name == "東京都"
        assert location.municipality_name == "千代田区"
        assert location.town_name == "神田神保町"

    @pytest.mark.asyncio
    async def test_bad_code_skips_request(self, make_http_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        client = ZipcloudClient(make_http_client(handler))
        assert await client.fetch_address("12345") is None

    @pytest.mark.asyncio
    async def test_empty_results(self, make_http_client):
        client = ZipcloudClient(
            make_http_client(
                lambda r: httpx.Response(200, json={"status": 400, "message": "bad", "results": None})
            )
        )
        assert await client.fetch_address("9999999") is None

    @pytest.mark.asyncio
    async def test_network_error(self, make_http_client):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        client = ZipcloudClient(make_http_client(handler))
        assert await client.fetch_address("1010051") is None


class TestSeminarSlots:
    """Tests for fetch_seminar_slots."""

    @pytest.mark.asyncio
    async def test_bare_list_is_wrapped(self, make_http_client):
        client = make_http_client(
            lambda r: httpx.Response(200, json=[{"date": "2025-07-01 10:00", "url": "https://meet/1"}])
        )
        slots = await fetch_seminar_slots(client, "https://script/slots")
        assert slots.events[0].date == "2025-07-01 10:00"

    @pytest.mark.asyncio
    async def test_events_object_accepted(self, make_http_client):
        client = make_http_client(
            lambda r: httpx.Response(200, json={"events": [{"date": "d", "url": "u"}]})
        )
        slots = await fetch_seminar_slots(client, "https://script/slots")
        assert len(slots.events) == 1

    @pytest.mark.asyncio
    async def test_unexpected_shape_raises(self, make_http_client):
        client = make_http_client(lambda r: httpx.Response(200, json={"rows": []}))
        with pytest.raises(GasError):
            await fetch_seminar_slots(client, "https://script/slots")

    @pytest.mark.asyncio
    async def test_missing_url_raises(self, make_http_client):
        with pytest.raises(GasError):
            await fetch_seminar_slots(make_http_client(lambda r: httpx.Response(200)), None)


class TestStep1Options:
    """Tests for fetch_step1_options."""

    @pytest.mark.asyncio
    async def test_options_deduplicated(self, make_http_client):
        payload = {
            "jobPositions": [" field_sales_tokyo ", "field_sales_tokyo", "", None, "account_manager_osaka"],
            "desiredLocations": ["東京", "大阪", "東京"],
            "combinations": [
                {"jobPosition": "field_sales_tokyo", "desiredLocation": "東京"},
                {"jobPosition": "field_sales_tokyo", "desiredLocation": "東京"},
                {"jobPosition": "", "desiredLocation": "大阪"},
                "junk",
            ],
            "updatedAt": "2025-06-01T00:00:00Z",
        }
        client = make_http_client(lambda r: httpx.Response(200, json=payload))

        options = await fetch_step1_options(client, "https://script/options")

        assert options.source == "gas"
        assert options.job_positions == ["field_sales_tokyo", "account_manager_osaka"]
        assert options.desired_locations == ["東京", "大阪"]
        assert len(options.combinations) == 1
        assert options.updated_at == "2025-06-01T00:00:00Z"

    @pytest.mark.asyncio
    async def test_empty_lists_fall_back(self, make_http_client):
        client = make_http_client(
            lambda r: httpx.Response(200, json={"jobPositions": ["a"], "desiredLocations": []})
        )
        options = await fetch_step1_options(client, "https://script/options")

        assert options.source == "fallback"
        assert options.job_positions == []

    @pytest.mark.asyncio
    async def test_http_error_falls_back(self, make_http_client):
        client = make_http_client(lambda r: httpx.Response(503))
        assert (await fetch_step1_options(client, "https://script/options")).source == "fallback"

    @pytest.mark.asyncio
    async def test_unset_url_falls_back(self, make_http_client):
        client = make_http_client(lambda r: httpx.Response(200))
        assert (await fetch_step1_options(client, None)).source == "fallback"
