"""Shared models for the application form core."""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qs

from pydantic import BaseModel, Field


class FormStep(str, Enum):
    """Cards a form flow is built from."""

    MECHANIC_QUALIFICATION = "mechanic_qualification"
    JOB_TIMING = "job_timing"
    DESIRED_INCOME = "desired_income"
    BIRTH_DATE = "birth_date"
    NAME_ADDRESS = "name_address"
    PHONE = "phone"
    CONFIRMATION = "confirmation"


class FormOrigin(str, Enum):
    """Campaign the form is served for."""

    DEFAULT = "default"
    COUPANG = "coupang"
    MECHANIC = "mechanic"


DEFAULT_FLOW: tuple[FormStep, ...] = (
    FormStep.BIRTH_DATE,
    FormStep.NAME_ADDRESS,
    FormStep.PHONE,
    FormStep.CONFIRMATION,
)

MECHANIC_FLOW: tuple[FormStep, ...] = (
    FormStep.MECHANIC_QUALIFICATION,
    FormStep.JOB_TIMING,
    FormStep.DESIRED_INCOME,
    *DEFAULT_FLOW,
)

STEP_FLOWS: dict[FormOrigin, tuple[FormStep, ...]] = {
    FormOrigin.DEFAULT: DEFAULT_FLOW,
    FormOrigin.COUPANG: DEFAULT_FLOW,
    FormOrigin.MECHANIC: MECHANIC_FLOW,
}

# Origins whose contact card asks for an email address
EMAIL_REQUIRED_ORIGINS = frozenset({FormOrigin.COUPANG, FormOrigin.MECHANIC})


class AddressMode(str, Enum):
    """How the applicant's location is collected on step 2."""

    POSTAL_CODE = "postal_code"
    LOCATION = "location"  # prefecture + municipality selects


class JobTiming(str, Enum):
    """When the applicant wants to change jobs."""

    ASAP = "asap"
    NO_PLAN = "no_plan"
    WITHIN_3_MONTHS = "within_3_months"
    WITHIN_6_MONTHS = "within_6_months"
    WITHIN_1_YEAR = "within_1_year"


JOB_TIMING_LABELS: dict[JobTiming, str] = {
    JobTiming.ASAP: "決まれば早く転職したい",
    JobTiming.NO_PLAN: "すぐに転職する気はない",
    JobTiming.WITHIN_3_MONTHS: "3ヶ月以内に転職したい",
    JobTiming.WITHIN_6_MONTHS: "半年以内に転職したい",
    JobTiming.WITHIN_1_YEAR: "1年以内に転職したい",
}


def map_job_timing_label(job_timing: "JobTiming | str | None") -> str:
    """Human-readable label for a timing preference ("" when unset or unknown)."""
    if not job_timing:
        return ""
    try:
        return JOB_TIMING_LABELS[JobTiming(job_timing)]
    except ValueError:
        return ""


class MechanicQualification(str, Enum):
    """Certifications offered on the mechanic qualification card (multi-select)."""

    NONE = "none"
    LEVEL3 = "level3"
    LEVEL2 = "level2"
    LEVEL1 = "level1"
    INSPECTOR = "inspector"
    BODY_PAINT = "body_paint"


MECHANIC_QUALIFICATION_LABELS: dict[MechanicQualification, str] = {
    MechanicQualification.NONE: "無資格",
    MechanicQualification.LEVEL3: "自動車整備士3級",
    MechanicQualification.LEVEL2: "自動車整備士2級",
    MechanicQualification.LEVEL1: "自動車整備士1級",
    MechanicQualification.INSPECTOR: "自動車検査員",
    MechanicQualification.BODY_PAINT: "板金塗装技能士",
}

NOT_SELECTED = "未選択"


def map_mechanic_qualifications(qualifications: "list[MechanicQualification | str]") -> str:
    """Selected certifications joined with "、" ("未選択" when nothing is selected)."""
    labels = []
    for qualification in qualifications:
        try:
            labels.append(MECHANIC_QUALIFICATION_LABELS[MechanicQualification(qualification)])
        except ValueError:
            labels.append(str(qualification))
    return "、".join(labels) if labels else NOT_SELECTED


class DesiredIncome(str, Enum):
    """Desired annual income, in units of 10,000 yen."""

    INCOME_300 = "300"
    INCOME_400 = "400"
    INCOME_500 = "500"
    INCOME_600 = "600"


def map_desired_income_label(desired_income: "DesiredIncome | str | None") -> str:
    if not desired_income:
        return ""
    try:
        return f"{DesiredIncome(desired_income).value}万円"
    except ValueError:
        return ""


class BirthDate(BaseModel):
    """Birth date as entered: numeric strings, empty string means unset."""

    year: str = ""
    month: str = ""
    day: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.year and self.month and self.day)

    def to_iso(self) -> str:
        """YYYY-MM-DD, or "" when incomplete."""
        if not self.is_complete:
            return ""
        return f"{self.year.zfill(4)}-{self.month.zfill(2)}-{self.day.zfill(2)}"


class FormData(BaseModel):
    """Field values for one form session."""

    birth_date: BirthDate = Field(default_factory=BirthDate)
    last_name: str = ""
    first_name: str = ""
    last_name_kana: str = ""
    first_name_kana: str = ""
    postal_code: str = ""
    prefecture_id: str = ""
    municipality_id: str = ""
    phone_number: str = ""
    job_timing: JobTiming | None = None
    # Mechanic / Coupang variants
    email: str = ""
    mechanic_qualifications: list[MechanicQualification] = Field(default_factory=list)
    desired_income: DesiredIncome | None = None


# Sparse field name -> message mapping. Empty means valid.
FormErrors = dict[str, str]


@dataclass
class ValidationResult:
    """Outcome of validating one step."""

    is_valid: bool
    errors: FormErrors


class JobCountResult(BaseModel):
    """Informational job-count state shown from step 3 onward."""

    job_count: int | None = None
    message: str = ""
    is_loading: bool = False
    error: str = ""
    search_method: str | None = None
    search_area: str | None = None
    prefecture_id: str | None = None

    @property
    def has_jobs(self) -> bool:
        return bool(self.job_count)

    @property
    def display_label(self) -> str:
        """Short label for the confirmation card."""
        if self.job_count is None:
            return ""
        return f"{self.job_count}件の求人があります"


class UTMParams(BaseModel):
    """Marketing attribution tags captured from the page query string."""

    utm_source: str = ""
    utm_medium: str = ""
    utm_campaign: str = ""
    utm_term: str = ""
    utm_creative: str = ""

    @classmethod
    def from_query_string(cls, query_string: str) -> "UTMParams":
        """Parse `?utm_source=...&utm_medium=...` (leading "?" optional)."""
        query = parse_qs(query_string.lstrip("?"), keep_blank_values=True)
        values = {name: query[name][0] for name in cls.model_fields if query.get(name)}
        return cls(**values)


class ExperimentInfo(BaseModel):
    """A/B experiment the session was bucketed into."""

    name: str = ""
    variant: str = ""


# =============================================================================
# Field update commands
# =============================================================================


@dataclass(frozen=True)
class SetBirthDate:
    year: str = ""
    month: str = ""
    day: str = ""


@dataclass(frozen=True)
class SetLastName:
    value: str


@dataclass(frozen=True)
class SetFirstName:
    value: str


@dataclass(frozen=True)
class SetLastNameKana:
    value: str


@dataclass(frozen=True)
class SetFirstNameKana:
    value: str


@dataclass(frozen=True)
class SetPostalCode:
    value: str


@dataclass(frozen=True)
class SetPrefecture:
    value: str


@dataclass(frozen=True)
class SetMunicipality:
    value: str


@dataclass(frozen=True)
class SetPhoneNumber:
    value: str


@dataclass(frozen=True)
class SetJobTiming:
    value: JobTiming | None


@dataclass(frozen=True)
class SetEmail:
    value: str


@dataclass(frozen=True)
class ToggleMechanicQualification:
    """Select the certification, or deselect it when already selected."""

    value: MechanicQualification


@dataclass(frozen=True)
class SetDesiredIncome:
    value: DesiredIncome | None


FieldUpdate = (
    SetBirthDate
    | SetLastName
    | SetFirstName
    | SetLastNameKana
    | SetFirstNameKana
    | SetPostalCode
    | SetPrefecture
    | SetMunicipality
    | SetPhoneNumber
    | SetJobTiming
    | SetEmail
    | ToggleMechanicQualification
    | SetDesiredIncome
)
