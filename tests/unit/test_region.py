"""Tests for region resolution."""

from unittest.mock import AsyncMock

import pytest

from ridejob.api.schemas import ApplicantSubmission
from ridejob.integrations.microcms import MicroCMSError, Municipality, Prefecture
from ridejob.integrations.zipcloud import ZipcloudLocation
from ridejob.services.region import resolve_region


class TestResolveRegion:
    """Tests for resolve_region."""

    @pytest.mark.asyncio
    async def test_submitted_names_win(self):
        lookup = AsyncMock()
        submission = ApplicantSubmission(prefecture_name="大阪府", postal_code="1010051")

        region = await resolve_region(submission, lookup)

        assert region.prefecture == "大阪府"
        lookup.fetch_address.assert_not_called()

    @pytest.mark.asyncio
    async def test_postal_code_via_zipcloud(self):
        lookup = AsyncMock()
        lookup.fetch_address.return_value = ZipcloudLocation(
            prefecture_name="東京都", municipality_name="千代田区"
        )

        region = await resolve_region(ApplicantSubmission(postal_code="101-0051"), lookup)

        lookup.fetch_address.assert_awaited_once_with("1010051")
        assert region.display() == "東京都 千代田区"

    @pytest.mark.asyncio
    async def test_unknown_postal_code_is_empty(self):
        lookup = AsyncMock()
        lookup.fetch_address.return_value = None

        region = await resolve_region(ApplicantSubmission(postal_code="9999999"), lookup)
        assert region.display() == ""

    @pytest.mark.asyncio
    async def test_location_ids_via_microcms(self):
        microcms = AsyncMock()
        microcms.fetch_prefecture_by_id.return_value = Prefecture(id="tokyo", region="東京都")
        microcms.fetch_municipality_by_id.return_value = Municipality(id="chiyoda", name="千代田区")

        submission = ApplicantSubmission(prefecture_id="tokyo", municipality_id="chiyoda")
        region = await resolve_region(submission, None, microcms)

        assert region.prefecture == "東京都"
        assert region.municipality == "千代田区"

    @pytest.mark.asyncio
    async def test_microcms_failure_is_empty(self):
        microcms = AsyncMock()
        microcms.fetch_prefecture_by_id.side_effect = MicroCMSError("down", status_code=503)

        region = await resolve_region(ApplicantSubmission(prefecture_id="tokyo"), None, microcms)
        assert region.display() == ""
