"""Best-effort prefecture / municipality names for a submission."""

import logging

import httpx

from ridejob.api.schemas import ApplicantSubmission
from ridejob.form.validators import is_valid_postal_code, normalize_postal_code
from ridejob.integrations.microcms import MicroCMSClient, MicroCMSError
from ridejob.integrations.zipcloud import AddressLookup
from ridejob.services.notifications import Region

logger = logging.getLogger(__name__)


async def resolve_region(
    submission: ApplicantSubmission,
    address_lookup: AddressLookup | None = None,
    microcms: MicroCMSClient | None = None,
) -> Region:
    """
    Names sent with the submission win. Otherwise the postal code is resolved
    through ZipCloud, or the selected ids through microCMS. Lookup failures
    leave the region empty.
    """
    if submission.prefecture_name or submission.municipality_name:
        return Region(
            prefecture=submission.prefecture_name,
            municipality=submission.municipality_name,
        )

    if submission.postal_code and is_valid_postal_code(submission.postal_code):
        if address_lookup is None:
            return Region()
        location = await address_lookup.fetch_address(normalize_postal_code(submission.postal_code))
        if location is None:
            return Region()
        return Region(
            prefecture=location.prefecture_name or "",
            municipality=location.municipality_name or "",
        )

    if microcms is not None and (submission.prefecture_id or submission.municipality_id):
        try:
            region = Region()
            if submission.prefecture_id:
                prefecture = await microcms.fetch_prefecture_by_id(submission.prefecture_id)
                region.prefecture = prefecture.region if prefecture else ""
            if submission.municipality_id:
                municipality = await microcms.fetch_municipality_by_id(submission.municipality_id)
                region.municipality = municipality.name if municipality else ""
            return region
        except (MicroCMSError, httpx.HTTPError, ValueError) as e:
            logger.warning(f"Region lookup via microCMS failed: {e}")
            return Region()

    return Region()
