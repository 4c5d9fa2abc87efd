"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ridejob.form.models import ExperimentInfo, UTMParams


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, matching the browser payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ============================================================================
# Applicant Schemas
# ============================================================================


class ApplicantSubmission(CamelModel):
    """Body posted by the default / mechanic application form."""

    birth_date: str = ""
    last_name: str = ""
    first_name: str = ""
    last_name_kana: str = ""
    first_name_kana: str = ""
    postal_code: str = ""
    prefecture_id: str = ""
    municipality_id: str = ""
    prefecture_name: str = ""
    municipality_name: str = ""
    phone_number: str = ""
    email: str = ""
    job_timing: str | None = None
    mechanic_qualifications: list[str] = Field(default_factory=list)
    desired_income: str | None = None
    utm_params: UTMParams | None = None
    experiment: ExperimentInfo | None = None
    form_origin: str = "default"


class CoupangSubmission(CamelModel):
    """Body posted by the Coupang (Rocket Now) campaign form."""

    email: str = ""
    full_name: str = ""
    full_name_kana: str = ""
    english_name: str = ""
    phone_number: str = ""
    job_position: str = ""
    application_reason: str = ""
    seminar_slot: str = ""
    past_experience: str = ""
    condition1: bool = False
    condition2: bool = False
    condition3: bool = False
    condition4: bool = False
    condition5: bool = False
    utm_params: UTMParams | None = None


class MessageResponse(BaseModel):
    """Generic `{message}` body."""

    message: str


# ============================================================================
# Job Count Schemas
# ============================================================================


class JobCountResponse(CamelModel):
    """Result of a job-count lookup."""

    postal_code: str | None = None
    job_count: int
    search_method: str
    search_area: str
    message: str


class ErrorResponse(BaseModel):
    """Generic `{error}` body."""

    error: str


# ============================================================================
# Location Schemas
# ============================================================================


class PrefectureItem(BaseModel):
    id: str
    region: str
    area: str = ""


class PrefectureListResponse(BaseModel):
    contents: list[PrefectureItem] = Field(default_factory=list)


class MunicipalityItem(CamelModel):
    id: str
    name: str
    prefecture_id: str | None = None


class MunicipalityListResponse(BaseModel):
    contents: list[MunicipalityItem] = Field(default_factory=list)


# ============================================================================
# Health
# ============================================================================


class HealthResponse(BaseModel):
    status: str
    environment: str
