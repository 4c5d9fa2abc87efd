"""Prefecture / municipality master endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ridejob.api.dependencies import MicroCMSDep
from ridejob.api.schemas import (
    ErrorResponse,
    MunicipalityItem,
    MunicipalityListResponse,
    PrefectureItem,
    PrefectureListResponse,
)
from ridejob.integrations.microcms import Municipality

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_item(municipality: Municipality) -> MunicipalityItem:
    return MunicipalityItem(
        id=municipality.id,
        name=municipality.name,
        prefecture_id=municipality.prefecture.id if municipality.prefecture else None,
    )


@router.get(
    "/prefectures",
    response_model=PrefectureListResponse,
    responses={500: {"model": ErrorResponse}},
)
async def list_prefectures(microcms: MicroCMSDep):
    try:
        prefectures = await microcms.fetch_prefectures()
        return PrefectureListResponse(
            contents=[PrefectureItem(**p.model_dump()) for p in prefectures]
        )
    except Exception as e:
        logger.error(f"Failed to fetch prefectures: {e}")
        error = ErrorResponse(error="Failed to fetch prefectures")
        return JSONResponse(status_code=500, content=error.model_dump())


@router.get(
    "/municipalities",
    response_model=MunicipalityListResponse,
    responses={500: {"model": ErrorResponse}},
)
async def list_municipalities(
    microcms: MicroCMSDep,
    prefectureId: str | None = None,
    municipalityId: str | None = None,
):
    """Municipalities of a prefecture, or the single municipality asked for by id."""
    try:
        if municipalityId:
            municipality = await microcms.fetch_municipality_by_id(municipalityId)
            contents = [_to_item(municipality)] if municipality else []
            return MunicipalityListResponse(contents=contents)

        municipalities = await microcms.fetch_municipalities(prefectureId or None)
        return MunicipalityListResponse(contents=[_to_item(m) for m in municipalities])
    except Exception as e:
        logger.error(f"Failed to fetch municipalities: {e}")
        error = ErrorResponse(error="Failed to fetch municipalities")
        return JSONResponse(status_code=500, content=error.model_dump())
