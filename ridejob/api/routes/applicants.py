"""Applicant relay endpoint (default and mechanic forms)."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ridejob.api.dependencies import AddressLookupDep, MicroCMSDep, NotifierDep, SettingsDep
from ridejob.api.schemas import ApplicantSubmission, MessageResponse
from ridejob.services.attribution import get_media_name
from ridejob.services.notifications import (
    Campaign,
    WebhookConfigError,
    build_applicant_message,
    build_applicant_record,
    build_request_metadata,
    require_targets,
    resolve_webhook_targets,
)
from ridejob.services.region import resolve_region

logger = logging.getLogger(__name__)

router = APIRouter()

SUBMISSION_ACCEPTED = "Application submitted successfully!"
INTERNAL_ERROR = "Internal Server Error"


def internal_error() -> JSONResponse:
    return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR})


@router.post("", response_model=MessageResponse)
async def submit_application(
    request: Request,
    settings: SettingsDep,
    notifier: NotifierDep,
    address_lookup: AddressLookupDep,
    microcms: MicroCMSDep,
):
    """
    Accept an application and relay it to Lark.

    The body is parsed here rather than by FastAPI so that a malformed
    payload answers 500 like every other failure. Delivery failures are
    logged only; the applicant always gets 200 once the body is accepted.
    """
    try:
        submission = ApplicantSubmission.model_validate(await request.json())

        targets = resolve_webhook_targets(settings, Campaign.DEFAULT)
        require_targets(targets, settings.lark_send_base_only)

        media_name = get_media_name(submission.utm_params)
        logger.info(f"Received application (origin={submission.form_origin}, media={media_name})")

        region = await resolve_region(submission, address_lookup, microcms)
        metadata = build_request_metadata(
            request.headers.get("user-agent"),
            request.headers.get("x-forwarded-for"),
            settings.app_env.value,
        )

        await notifier.fan_out(
            targets,
            build_applicant_message(submission, media_name, region),
            build_applicant_record(submission, media_name, region, metadata),
            send_base_only=settings.lark_send_base_only,
        )

        return MessageResponse(message=SUBMISSION_ACCEPTED)

    except WebhookConfigError as e:
        logger.error(str(e))
        return internal_error()
    except Exception as e:
        logger.error(f"Error processing application in API route: {e}")
        return internal_error()
