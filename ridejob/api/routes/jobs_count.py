"""Job-count lookup endpoint."""

import logging
import re

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ridejob.api.dependencies import MicroCMSDep, PostcodeDep
from ridejob.api.schemas import ErrorResponse, JobCountResponse
from ridejob.form.validators import normalize_postal_code

logger = logging.getLogger(__name__)

router = APIRouter()

MUNICIPALITY_AREA = "選択した市区町村"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def _count_message(search_area: str, job_count: int) -> str:
    if job_count > 0:
        return f"{search_area}で{job_count}件の求人が見つかりました"
    return f"{search_area}では現在求人がありません"


@router.get(
    "",
    response_model=JobCountResponse,
    response_model_exclude_none=True,
    responses={code: {"model": ErrorResponse} for code in (400, 404, 500)},
)
async def get_job_count(
    microcms: MicroCMSDep,
    postcodes: PostcodeDep,
    postalCode: str | None = None,
    prefectureId: str | None = None,
    municipalityId: str | None = None,
):
    """
    Count open jobs around the applicant.

    Lookup order: municipality id, prefecture id, then postal code. Postal
    codes are resolved to a prefecture and counted at prefecture level.
    """
    try:
        if municipalityId:
            job_count = await microcms.get_job_count_by_municipality(municipalityId)
            return JobCountResponse(
                job_count=job_count,
                search_method="municipality",
                search_area=MUNICIPALITY_AREA,
                message=_count_message(MUNICIPALITY_AREA, job_count),
            )

        if prefectureId:
            prefecture = await microcms.fetch_prefecture_by_id(prefectureId)
            if prefecture is None:
                return _error(404, "都道府県の取得に失敗しました")
            job_count = await microcms.get_job_count_by_prefecture_id(prefectureId)
            search_area = f"{prefecture.region}内"
            return JobCountResponse(
                job_count=job_count,
                search_method="prefecture",
                search_area=search_area,
                message=_count_message(search_area, job_count),
            )

        if not postalCode:
            return _error(400, "Postal code is required")

        normalized = normalize_postal_code(postalCode)
        if not re.fullmatch(r"[0-9]{7}", normalized):
            return _error(400, "Invalid postal code format. Must be 7 digits.")

        prefecture_name = postcodes.get_prefecture(normalized)
        if not prefecture_name:
            return _error(404, "Prefecture not found for this postal code")

        job_count = await microcms.get_job_count_by_prefecture(prefecture_name)
        search_area = f"{prefecture_name}内"
        logger.info(f"Job count for {normalized} ({prefecture_name}): {job_count}")

        return JobCountResponse(
            postal_code=normalized,
            job_count=job_count,
            search_method="prefecture",
            search_area=search_area,
            message=_count_message(search_area, job_count),
        )

    except Exception as e:
        logger.error(f"Error in jobs-count API: {e}")
        return _error(500, "Failed to fetch job count")
