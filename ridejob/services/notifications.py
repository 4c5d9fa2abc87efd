"""Lark notification fan-out for accepted applications.

Every accepted application produces up to two webhook calls:
- a chat message (Lark bot webhook, `msg_type=text`)
- a structured record (Lark Base automation webhook)

Both run concurrently and their failures are logged, never raised: the
applicant's submission is accepted regardless of delivery.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel

from ridejob.api.schemas import ApplicantSubmission
from ridejob.config import Settings
from ridejob.form.models import (
    FormOrigin,
    map_desired_income_label,
    map_job_timing_label,
    map_mechanic_qualifications,
)

logger = logging.getLogger(__name__)

MISSING = "未入力"
SEPARATOR = "-------------------------"


class Campaign(str, Enum):
    """Webhook set to deliver to."""

    DEFAULT = "default"
    COUPANG = "coupang"


class WebhookConfigError(Exception):
    """Raised when the webhook required for the current mode is not configured."""


class WebhookTargets(BaseModel):
    """Resolved webhook URLs (either may be unset)."""

    message_url: str | None = None
    record_url: str | None = None


@dataclass
class RequestMetadata:
    """Request facts stored on every record."""

    user_agent: str = ""
    client_ip: str = ""
    environment: str = ""
    submitted_at: str = ""


@dataclass
class Region:
    """Prefecture and municipality names for the message."""

    prefecture: str = ""
    municipality: str = ""

    def display(self) -> str:
        return " ".join(part for part in (self.prefecture, self.municipality) if part)


@dataclass
class DispatchResult:
    """Outcome of one webhook call."""

    channel: str
    ok: bool
    status_code: int | None = None
    error: str | None = None


# ============================================================================
# Target resolution
# ============================================================================


def _first(*values: str | None) -> str | None:
    for value in values:
        if value:
            return value
    return None


def resolve_webhook_targets(settings: Settings, campaign: Campaign = Campaign.DEFAULT) -> WebhookTargets:
    """Pick webhook URLs for the environment.

    Default campaign, production: PROD -> plain -> TEST; elsewhere TEST -> plain -> PROD.
    Coupang campaign: PROD or TEST first, then plain, with no cross-environment fallback.
    """
    s = settings
    if campaign == Campaign.COUPANG:
        if s.is_production:
            return WebhookTargets(
                message_url=_first(s.lark_webhook_url_coupang_prod, s.lark_webhook_url_coupang),
                record_url=_first(s.lark_base_webhook_url_coupang_prod, s.lark_base_webhook_url_coupang),
            )
        return WebhookTargets(
            message_url=_first(s.lark_webhook_url_coupang_test, s.lark_webhook_url_coupang),
            record_url=_first(s.lark_base_webhook_url_coupang_test, s.lark_base_webhook_url_coupang),
        )

    if s.is_production:
        return WebhookTargets(
            message_url=_first(s.lark_webhook_url_prod, s.lark_webhook_url, s.lark_webhook_url_test),
            record_url=_first(
                s.lark_base_webhook_url_prod, s.lark_base_webhook_url, s.lark_base_webhook_url_test
            ),
        )
    return WebhookTargets(
        message_url=_first(s.lark_webhook_url_test, s.lark_webhook_url, s.lark_webhook_url_prod),
        record_url=_first(
            s.lark_base_webhook_url_test, s.lark_base_webhook_url, s.lark_base_webhook_url_prod
        ),
    )


def require_targets(targets: WebhookTargets, send_base_only: bool) -> None:
    """Raise WebhookConfigError when the URL needed for this mode is missing."""
    if send_base_only:
        if not targets.record_url:
            raise WebhookConfigError(
                "Lark Base Webhook URL is not configured while LARK_SEND_BASE_ONLY=true."
            )
    elif not targets.message_url:
        raise WebhookConfigError("Lark Webhook URL is not configured in environment variables.")


def build_request_metadata(user_agent: str | None, forwarded_for: str | None, environment: str) -> RequestMetadata:
    """Collect record metadata; the client IP is the first X-Forwarded-For entry."""
    client_ip = (forwarded_for or "").split(",")[0].strip()
    return RequestMetadata(
        user_agent=user_agent or "",
        client_ip=client_ip,
        environment=environment,
        submitted_at=datetime.now(timezone.utc).isoformat(),
    )


# ============================================================================
# Default campaign payloads
# ============================================================================


def build_applicant_message(submission: ApplicantSubmission, media_name: str, region: Region) -> str:
    s = submission
    lines = [
        "新しい応募がありました！",
        SEPARATOR,
        f"流入元: {media_name}",
        f"生年月日: {s.birth_date or MISSING}",
        f"氏名: {s.last_name} {s.first_name} ({s.last_name_kana} {s.first_name_kana})",
        f"郵便番号: {s.postal_code or MISSING}",
        f"地域: {region.display() or MISSING}",
        f"転職希望時期: {map_job_timing_label(s.job_timing) or MISSING}",
        f"電話番号: {s.phone_number or MISSING}",
    ]
    if s.form_origin == FormOrigin.MECHANIC.value:
        lines += [
            f"メールアドレス: {s.email or MISSING}",
            f"保有資格: {map_mechanic_qualifications(s.mechanic_qualifications)}",
            f"希望年収: {map_desired_income_label(s.desired_income) or MISSING}",
        ]
    lines.append(SEPARATOR)
    return "\n".join(lines)


def build_applicant_record(
    submission: ApplicantSubmission,
    media_name: str,
    region: Region,
    metadata: RequestMetadata,
) -> dict[str, Any]:
    s = submission
    utm = s.utm_params
    experiment = s.experiment
    return {
        "media_name": media_name,
        "utm_source": utm.utm_source if utm else "",
        "utm_medium": utm.utm_medium if utm else "",
        "utm_campaign": utm.utm_campaign if utm else "",
        "utm_term": utm.utm_term if utm else "",
        "birth_date": s.birth_date,
        "last_name": s.last_name,
        "first_name": s.first_name,
        "last_name_kana": s.last_name_kana,
        "first_name_kana": s.first_name_kana,
        "postal_code": s.postal_code,
        "prefecture": region.prefecture,
        "municipality": region.municipality,
        "phone_number": s.phone_number,
        "job_timing": map_job_timing_label(s.job_timing),
        "email": s.email,
        "mechanic_qualifications": (
            map_mechanic_qualifications(s.mechanic_qualifications)
            if s.form_origin == FormOrigin.MECHANIC.value
            else ""
        ),
        "desired_income": map_desired_income_label(s.desired_income),
        "experiment_name": experiment.name if experiment else "",
        "experiment_variant": experiment.variant if experiment else "",
        "form_origin": s.form_origin,
        "submitted_at": metadata.submitted_at,
        "environment": metadata.environment,
        "user_agent": metadata.user_agent,
        "client_ip": metadata.client_ip,
    }


# ============================================================================
# Dispatch
# ============================================================================


class WebhookNotifier:
    """Posts chat messages and Base records to Lark webhooks."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def post_message(self, url: str, text: str) -> DispatchResult:
        payload = {"msg_type": "text", "content": {"text": text}}
        try:
            response = await self.client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Failed to send notification to Lark: {e}")
            return DispatchResult(channel="message", ok=False, error=str(e))

        if response.is_error:
            logger.error(f"Failed to send notification to Lark ({response.status_code}): {response.text}")
            return DispatchResult(channel="message", ok=False, status_code=response.status_code)

        logger.info("Lark notification sent successfully")
        return DispatchResult(channel="message", ok=True, status_code=response.status_code)

    async def post_record(self, url: str, record: dict[str, Any]) -> DispatchResult:
        try:
            response = await self.client.post(url, json=record)
        except httpx.HTTPError as e:
            logger.error(f"Failed to send to Lark Base Webhook: {e}")
            return DispatchResult(channel="record", ok=False, error=str(e))

        if response.is_error:
            logger.error(f"Failed to send to Lark Base Webhook ({response.status_code}): {response.text}")
            return DispatchResult(channel="record", ok=False, status_code=response.status_code)

        logger.info("Lark Base webhook triggered successfully")
        return DispatchResult(channel="record", ok=True, status_code=response.status_code)

    async def fan_out(
        self,
        targets: WebhookTargets,
        message: str,
        record: dict[str, Any],
        send_base_only: bool = False,
    ) -> list[DispatchResult]:
        """Send the message and the record concurrently.

        In base-only mode the chat message is suppressed. A missing record URL
        is skipped with a warning.
        """
        tasks = []
        if not send_base_only and targets.message_url:
            tasks.append(self.post_message(targets.message_url, message))
        if targets.record_url:
            tasks.append(self.post_record(targets.record_url, record))
        else:
            logger.warning("Lark Base Webhook URL is not configured. Skipping Base record creation.")

        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results: list[DispatchResult] = []
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                logger.error(f"Webhook dispatch raised: {outcome}")
                results.append(DispatchResult(channel="unknown", ok=False, error=str(outcome)))
            else:
                results.append(outcome)
        return results
