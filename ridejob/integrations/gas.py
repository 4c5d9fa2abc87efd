"""Google Apps Script endpoints backing the Coupang campaign form.

Two published scripts are read:
- seminar slots: a JSON array of `{date, url}` (or `{"events": [...]}`)
- step 1 options: job positions, desired locations and their valid pairs
"""

import logging
from datetime import datetime, timezone
from typing import Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class GasError(Exception):
    """Raised when a script endpoint is missing or returns an unusable payload."""


class SeminarSlot(BaseModel):
    date: str
    url: str = ""


class SeminarSlotsResponse(BaseModel):
    events: list[SeminarSlot] = Field(default_factory=list)


class Step1Combination(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    job_position: str
    desired_location: str


class Step1Options(BaseModel):
    """Options for the first Coupang card."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    job_positions: list[str] = Field(default_factory=list)
    desired_locations: list[str] = Field(default_factory=list)
    combinations: list[Step1Combination] = Field(default_factory=list)
    updated_at: str
    source: Literal["gas", "fallback"]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def fallback_step1_options() -> Step1Options:
    return Step1Options(updated_at=_now_iso(), source="fallback")


def unique_non_empty(values: list[Any]) -> list[str]:
    """Trimmed, de-duplicated, non-empty strings in first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        normalized = str(value if value is not None else "").strip()
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        result.append(normalized)
    return result


def parse_combinations(raw: Any) -> list[Step1Combination]:
    if not isinstance(raw, list):
        return []

    seen: set[tuple[str, str]] = set()
    result: list[Step1Combination] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        job_position = str(item.get("jobPosition") or "").strip()
        desired_location = str(item.get("desiredLocation") or "").strip()
        if not job_position or not desired_location:
            continue
        key = (job_position, desired_location)
        if key in seen:
            continue
        seen.add(key)
        result.append(Step1Combination(job_position=job_position, desired_location=desired_location))
    return result


async def fetch_seminar_slots(client: httpx.AsyncClient, url: str | None) -> SeminarSlotsResponse:
    """Fetch seminar slots, raising GasError on any failure."""
    if not url:
        raise GasError("GAS_SEMINAR_SLOTS_URL is not set")

    try:
        response = await client.get(url, follow_redirects=True)
    except httpx.HTTPError as e:
        raise GasError(f"Seminar slot request failed: {e}") from e

    if response.is_error:
        raise GasError(
            f"Failed to fetch seminar slots: {response.status_code} {response.reason_phrase}"
        )

    try:
        raw = response.json()
    except ValueError as e:
        raise GasError(f"Seminar slot payload is not JSON: {e}") from e

    if isinstance(raw, list):
        raw = {"events": raw}
    elif not isinstance(raw, dict) or raw.get("events") is None:
        raise GasError(f"Unexpected response format: {raw!r}")

    try:
        return SeminarSlotsResponse.model_validate(raw)
    except ValueError as e:
        raise GasError(f"Unexpected response format: {e}") from e


async def fetch_step1_options(client: httpx.AsyncClient, url: str | None) -> Step1Options:
    """Fetch step 1 options; never raises, falls back to an empty option set."""
    if not url:
        logger.warning("GAS_COUPANG_STEP1_OPTIONS_URL is not set. Using fallback options.")
        return fallback_step1_options()

    try:
        response = await client.get(url, follow_redirects=True)
        if response.is_error:
            logger.error(
                f"Failed to fetch coupang step1 options: "
                f"{response.status_code} {response.reason_phrase}"
            )
            return fallback_step1_options()

        raw = response.json()
        if not isinstance(raw, dict):
            logger.error(f"Invalid step1 options payload from GAS: {raw!r}")
            return fallback_step1_options()

        job_positions = unique_non_empty(raw.get("jobPositions") or [])
        desired_locations = unique_non_empty(raw.get("desiredLocations") or [])
        if not job_positions or not desired_locations:
            logger.error(f"Invalid step1 options payload from GAS. Using empty fallback options: {raw!r}")
            return fallback_step1_options()

        return Step1Options(
            job_positions=job_positions,
            desired_locations=desired_locations,
            combinations=parse_combinations(raw.get("combinations")),
            updated_at=raw.get("updatedAt") or _now_iso(),
            source="gas",
        )

    except (httpx.HTTPError, ValueError, TypeError) as e:
        logger.error(f"Error fetching coupang step1 options. Using fallback options: {e}")
        return fallback_step1_options()
