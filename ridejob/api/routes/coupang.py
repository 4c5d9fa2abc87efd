"""Coupang (Rocket Now) campaign endpoints."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ridejob.api.dependencies import HttpClientDep, NotifierDep, SettingsDep
from ridejob.api.routes.applicants import SUBMISSION_ACCEPTED, internal_error
from ridejob.api.schemas import CoupangSubmission, ErrorResponse, MessageResponse
from ridejob.integrations.gas import (
    GasError,
    SeminarSlotsResponse,
    Step1Options,
    fetch_seminar_slots,
    fetch_step1_options,
)
from ridejob.services.coupang import build_coupang_message, build_coupang_record
from ridejob.services.notifications import (
    Campaign,
    WebhookConfigError,
    build_request_metadata,
    require_targets,
    resolve_webhook_targets,
)

logger = logging.getLogger(__name__)

router = APIRouter()

SEMINAR_SLOTS_ERROR = "セミナー枠の取得に失敗しました"


@router.post("/applicants", response_model=MessageResponse)
async def submit_coupang_application(
    request: Request,
    settings: SettingsDep,
    notifier: NotifierDep,
):
    try:
        submission = CoupangSubmission.model_validate(await request.json())

        targets = resolve_webhook_targets(settings, Campaign.COUPANG)
        require_targets(targets, settings.lark_send_base_only)

        metadata = build_request_metadata(
            request.headers.get("user-agent"),
            request.headers.get("x-forwarded-for"),
            settings.app_env.value,
        )

        await notifier.fan_out(
            targets,
            build_coupang_message(submission),
            build_coupang_record(submission, metadata),
            send_base_only=settings.lark_send_base_only,
        )

        return MessageResponse(message=SUBMISSION_ACCEPTED)

    except WebhookConfigError as e:
        logger.error(f"{e} (coupang)")
        return internal_error()
    except Exception as e:
        logger.error(f"Error processing Coupang application: {e}")
        return internal_error()


@router.get(
    "/seminar-slots",
    response_model=SeminarSlotsResponse,
    responses={500: {"model": ErrorResponse}},
)
async def get_seminar_slots(settings: SettingsDep, client: HttpClientDep):
    try:
        return await fetch_seminar_slots(client, settings.gas_seminar_slots_url)
    except GasError as e:
        logger.error(f"Error fetching seminar slots: {e}")
        error = ErrorResponse(error=SEMINAR_SLOTS_ERROR)
        return JSONResponse(status_code=500, content=error.model_dump())


@router.get("/step1-options", response_model=Step1Options)
async def get_step1_options(settings: SettingsDep, client: HttpClientDep):
    """Job positions and desired locations for the first card (never fails)."""
    return await fetch_step1_options(client, settings.gas_coupang_step1_options_url)
