"""
Step-by-step application form state.

Holds the current card, field values, per-field errors and submit readiness
for one applicant session, and drives the collaborators around it:

- job-count lookups when a usable postal code / prefecture is known
- kana suggestions when a kanji name field loses focus
- the exit guard while the form holds unsaved edits
- the relay call on final confirmation

The card sequence depends on the campaign: the default and Coupang flows are
birth date, name/address, phone, confirmation. The mechanic flow asks for
certifications, job timing and desired income first.
"""

import asyncio
import logging
from datetime import date
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel

from ridejob.form.client import SubmissionError
from ridejob.form.exit_guard import FormExitGuard, LeaveDecision
from ridejob.form.kana import KanaConverter
from ridejob.form.models import (
    EMAIL_REQUIRED_ORIGINS,
    STEP_FLOWS,
    AddressMode,
    ExperimentInfo,
    FieldUpdate,
    FormData,
    FormErrors,
    FormOrigin,
    FormStep,
    JobCountResult,
    MechanicQualification,
    SetBirthDate,
    SetDesiredIncome,
    SetEmail,
    SetFirstName,
    SetFirstNameKana,
    SetJobTiming,
    SetLastName,
    SetLastNameKana,
    SetMunicipality,
    SetPhoneNumber,
    SetPostalCode,
    SetPrefecture,
    ToggleMechanicQualification,
    UTMParams,
    ValidationResult,
    map_desired_income_label,
    map_job_timing_label,
    map_mechanic_qualifications,
)
from ridejob.form.tracking import EventSink, LoggingEventSink, step_event_payload
from ridejob.form.validators import (
    PHONE_NUMBER_INVALID,
    is_valid_email,
    is_valid_phone_number,
    is_valid_postal_code,
    normalize_postal_code,
    validate_birth_date,
    validate_contact_step,
    validate_desired_income,
    validate_email_field,
    validate_job_timing,
    validate_mechanic_qualification,
    validate_name_address,
    validate_name_fields,
)

logger = logging.getLogger(__name__)

JOB_COUNT_LOOKUP_ERROR = "求人件数の取得中にエラーが発生しました"
SUBMISSION_FAILED = "フォームの送信中にエラーが発生しました。ネットワーク接続を確認してください。"

COMPLETION_PATHS: dict[FormOrigin, str] = {
    FormOrigin.DEFAULT: "/applicants/new",
    FormOrigin.COUPANG: "/coupang/applicants/new",
    FormOrigin.MECHANIC: "/mechanic/applicants/new",
}


class FormApi(Protocol):
    """Server calls the form needs. Implemented by FormApiClient."""

    async def fetch_job_count(
        self, postal_code: str | None = None, prefecture_id: str | None = None
    ) -> JobCountResult: ...

    async def submit_application(self, body: dict[str, Any], path: str = "/api/applicants") -> str: ...


class NameField(str, Enum):
    """Kanji name fields that offer a kana suggestion on blur."""

    LAST_NAME = "last_name"
    FIRST_NAME = "first_name"


_KANA_PAIRS: dict[NameField, str] = {
    NameField.LAST_NAME: "last_name_kana",
    NameField.FIRST_NAME: "first_name_kana",
}


class SubmissionOutcome(BaseModel):
    """Result of a submit attempt."""

    accepted: bool
    redirect_to: str | None = None
    error: str | None = None


class ConfirmationView(BaseModel):
    """Values shown on the confirmation card."""

    birth_date: str
    full_name: str
    full_name_kana: str
    postal_code: str
    phone_number: str
    email: str
    job_timing: str
    mechanic_qualifications: str
    desired_income: str
    job_count_label: str
    job_count_message: str
    show_success_banner: bool


class ApplicationForm:
    """State machine for the card-by-card application form.

    Transitions are strictly linear within the origin's flow: `advance()`
    validates the current card before moving forward, `retreat()` moves back
    one card without validating, and `submit()` sends the application from
    the confirmation card.
    """

    def __init__(
        self,
        api: FormApi,
        form_origin: FormOrigin = FormOrigin.DEFAULT,
        address_mode: AddressMode = AddressMode.POSTAL_CODE,
        kana_converter: KanaConverter | None = None,
        event_sink: EventSink | None = None,
        experiment: ExperimentInfo | None = None,
        today: date | None = None,
    ):
        """
        Initialize a fresh form session on the first card.

        Args:
            api: Job-count and relay endpoints
            form_origin: Campaign the form is served for
            address_mode: Postal code input or prefecture/municipality selects
            kana_converter: Kana suggestion source (no suggestions when None)
            event_sink: Analytics sink (defaults to logging)
            experiment: A/B experiment attached to the submission
            today: Fixed "today" for age checks (defaults to the current date)
        """
        self.api = api
        self.form_origin = form_origin
        self.address_mode = address_mode
        self.kana_converter = kana_converter
        self.event_sink = event_sink or LoggingEventSink()
        self.experiment = experiment or ExperimentInfo()
        self._today = today

        self.flow = STEP_FLOWS[form_origin]
        self.requires_email = form_origin in EMAIL_REQUIRED_ORIGINS
        self.step = self.flow[0]
        self.data = FormData()
        self.errors: FormErrors = {}
        self.phone_error: str | None = None
        self.email_error: str | None = None
        self.is_submit_disabled = True
        self.is_submitting = False
        self.alert_message: str | None = None
        self.completed_path: str | None = None
        self.job_result = JobCountResult()
        self.exit_guard = FormExitGuard(self.event_sink, phone_step=FormStep.PHONE, flow=self.flow)

        self._lookup_token = 0
        self._pending_lookups: set[asyncio.Task] = set()

        if self.experiment.name:
            self.event_sink.record(
                "experiment_impression",
                {"experiment": self.experiment.name, "variant": self.experiment.variant},
            )
        self.event_sink.record("step_view", step_event_payload(self.step_number))

    @property
    def step_number(self) -> int:
        """1-based position of the current card in this session's flow."""
        return self.flow.index(self.step) + 1

    @property
    def is_dirty(self) -> bool:
        return self.exit_guard.is_dirty

    @property
    def lookups_enabled(self) -> bool:
        return self.form_origin != FormOrigin.COUPANG

    # =========================================================================
    # Field updates
    # =========================================================================

    def apply(self, update: FieldUpdate) -> None:
        """Store one field edit and run its keystroke side effects."""
        data = self.data

        if isinstance(update, SetBirthDate):
            data.birth_date.year = _digits(update.year)[:4]
            data.birth_date.month = _digits(update.month)[:2]
            data.birth_date.day = _digits(update.day)[:2]
            self._clear_errors("birth_date")
        elif isinstance(update, SetLastName):
            data.last_name = update.value
            self._clear_errors("last_name")
        elif isinstance(update, SetFirstName):
            data.first_name = update.value
            self._clear_errors("first_name")
        elif isinstance(update, SetLastNameKana):
            data.last_name_kana = update.value
            self._clear_errors("last_name_kana")
        elif isinstance(update, SetFirstNameKana):
            data.first_name_kana = update.value
            self._clear_errors("first_name_kana")
        elif isinstance(update, SetPostalCode):
            data.postal_code = update.value
            data.prefecture_id = ""
            data.municipality_id = ""
            self._clear_errors("postal_code", "prefecture_id", "municipality_id")
            if self.lookups_enabled and is_valid_postal_code(update.value):
                self._schedule_lookup(postal_code=normalize_postal_code(update.value))
            else:
                self._invalidate_lookup()
        elif isinstance(update, SetPrefecture):
            data.prefecture_id = update.value
            data.municipality_id = ""
            data.postal_code = ""
            self._clear_errors("prefecture_id", "municipality_id", "postal_code")
            if self.lookups_enabled and update.value:
                self._schedule_lookup(prefecture_id=update.value)
            else:
                self._invalidate_lookup()
        elif isinstance(update, SetMunicipality):
            data.municipality_id = update.value
            data.postal_code = ""
            self._clear_errors("municipality_id", "postal_code")
        elif isinstance(update, SetPhoneNumber):
            data.phone_number = update.value.replace("-", "").replace("－", "").replace("ー", "")
            self._clear_errors("phone_number")
            self._validate_phone_input(data.phone_number)
        elif isinstance(update, SetJobTiming):
            data.job_timing = update.value
            self._clear_errors("job_timing")
        elif isinstance(update, SetEmail):
            data.email = update.value
            self._clear_errors("email")
            self._validate_email_input(data.email)
        elif isinstance(update, ToggleMechanicQualification):
            qualification = MechanicQualification(update.value)
            if qualification in data.mechanic_qualifications:
                data.mechanic_qualifications.remove(qualification)
            else:
                data.mechanic_qualifications.append(qualification)
            self._clear_errors("mechanic_qualifications")
        elif isinstance(update, SetDesiredIncome):
            data.desired_income = update.value
            self._clear_errors("desired_income")
        else:
            raise TypeError(f"Unknown field update: {update!r}")

        if not self.exit_guard.is_dirty:
            self.exit_guard.mark_dirty()

    def _clear_errors(self, *fields: str) -> None:
        for field in fields:
            self.errors.pop(field, None)

    def _validate_phone_input(self, phone_number: str) -> None:
        """Live check that gates the submit button before the field loses focus."""
        trimmed = phone_number.strip()
        if len(trimmed) < 11:
            self.phone_error = None
            self.is_submit_disabled = True
            return

        if not is_valid_phone_number(trimmed):
            self.phone_error = PHONE_NUMBER_INVALID
            self.is_submit_disabled = True
            self.event_sink.record("phone_number_invalid", {"phone_number_length": len(trimmed)})
            return

        self.phone_error = None
        self.is_submit_disabled = not self._is_submit_ready()

    def _validate_email_input(self, email: str) -> None:
        if not self.requires_email:
            return
        self.email_error = validate_email_field(email)
        self.is_submit_disabled = self.email_error is not None or not self._is_submit_ready()

    def _is_submit_ready(self) -> bool:
        phone_number = self.data.phone_number.strip()
        if len(phone_number) != 11 or not is_valid_phone_number(phone_number):
            return False
        if self.requires_email:
            return is_valid_email(self.data.email.strip())
        return True

    # =========================================================================
    # Job count lookups
    # =========================================================================

    def _schedule_lookup(self, postal_code: str | None = None, prefecture_id: str | None = None) -> None:
        """Start a lookup tagged with a fresh token; older in-flight results get dropped."""
        self._lookup_token += 1
        token = self._lookup_token

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, job count lookup skipped")
            self.job_result = JobCountResult()
            return

        self.job_result = self.job_result.model_copy(update={"is_loading": True, "error": ""})
        task = loop.create_task(self._run_lookup(token, postal_code, prefecture_id))
        self._pending_lookups.add(task)
        task.add_done_callback(self._pending_lookups.discard)

    def _invalidate_lookup(self) -> None:
        self._lookup_token += 1
        self.job_result = JobCountResult()

    async def _run_lookup(self, token: int, postal_code: str | None, prefecture_id: str | None) -> None:
        try:
            result = await self.api.fetch_job_count(postal_code=postal_code, prefecture_id=prefecture_id)
        except Exception as e:
            logger.warning(f"Error fetching job count: {e}")
            if token == self._lookup_token:
                self.job_result = JobCountResult(error=JOB_COUNT_LOOKUP_ERROR)
            return

        if token != self._lookup_token:
            logger.debug(f"Discarding stale job count response (token {token}, latest {self._lookup_token})")
            return
        self.job_result = result.model_copy(update={"is_loading": False})

    async def wait_for_lookups(self) -> None:
        """Wait until every in-flight job count lookup has finished."""
        while self._pending_lookups:
            await asyncio.gather(*list(self._pending_lookups), return_exceptions=True)

    # =========================================================================
    # Step transitions
    # =========================================================================

    def _validate_step(self, step: FormStep) -> ValidationResult:
        data = self.data
        if step == FormStep.MECHANIC_QUALIFICATION:
            return validate_mechanic_qualification(data.mechanic_qualifications)
        if step == FormStep.JOB_TIMING:
            return validate_job_timing(data.job_timing)
        if step == FormStep.DESIRED_INCOME:
            return validate_desired_income(data.desired_income)
        if step == FormStep.BIRTH_DATE:
            return validate_birth_date(data.birth_date, self._today)
        if step == FormStep.NAME_ADDRESS:
            return validate_name_address(data, self.address_mode)
        if step == FormStep.PHONE:
            return validate_contact_step(data, self.requires_email)
        return ValidationResult(True, {})

    def advance(self) -> bool:
        """Validate the current card and move forward one card when it is valid."""
        if self.step == FormStep.CONFIRMATION:
            return False

        result = self._validate_step(self.step)
        self.errors = dict(result.errors)
        if not result.is_valid:
            return False

        previous, previous_number = self.step, self.step_number
        self.step = self.flow[previous_number]
        self.event_sink.record("step_complete", step_event_payload(previous_number))
        self.event_sink.record("step_view", step_event_payload(self.step_number))

        if previous == FormStep.NAME_ADDRESS and self.lookups_enabled:
            if self.data.prefecture_id:
                self._schedule_lookup(prefecture_id=self.data.prefecture_id)
            elif is_valid_postal_code(self.data.postal_code):
                self._schedule_lookup(postal_code=normalize_postal_code(self.data.postal_code))
        elif previous == FormStep.PHONE:
            self.is_submit_disabled = False
        return True

    def retreat(self) -> None:
        """Move back one card (never below the first). Field values are kept."""
        index = self.flow.index(self.step)
        if index == 0:
            return
        self.step = self.flow[index - 1]
        self.event_sink.record("step_view", step_event_payload(self.step_number))

    def confirm(self) -> bool:
        """Phone card -> confirmation card."""
        if self.step != FormStep.PHONE:
            return False
        return self.advance()

    def modify(self) -> None:
        """Confirmation card -> phone card."""
        if self.step == FormStep.CONFIRMATION:
            self.retreat()

    # =========================================================================
    # Kana suggestion
    # =========================================================================

    async def on_name_blur(self, field: NameField) -> None:
        """Fill the paired kana field from the kanji name if the user left it empty."""
        if self.kana_converter is None:
            return
        value = getattr(self.data, field.value)
        if not value.strip():
            return

        try:
            hiragana = await self.kana_converter.convert(value)
        except Exception as e:
            logger.error(f"Kana conversion failed for {field.value}: {e}")
            return

        kana_field = _KANA_PAIRS[field]
        if hiragana and not getattr(self.data, kana_field):
            setattr(self.data, kana_field, hiragana)
            self._clear_errors(kana_field)

    # =========================================================================
    # Navigation guard
    # =========================================================================

    def request_leave(self, navigation: str = "history-back") -> LeaveDecision:
        return self.exit_guard.request_leave(self.step, navigation)

    def confirm_leave(self) -> str | None:
        return self.exit_guard.confirm_leave()

    def cancel_leave(self) -> None:
        self.exit_guard.cancel_leave()

    # =========================================================================
    # Confirmation and submission
    # =========================================================================

    def confirmation(self) -> ConfirmationView:
        data = self.data
        return ConfirmationView(
            birth_date=data.birth_date.to_iso(),
            full_name=f"{data.last_name} {data.first_name}".strip(),
            full_name_kana=f"{data.last_name_kana} {data.first_name_kana}".strip(),
            postal_code=data.postal_code,
            phone_number=data.phone_number,
            email=data.email.strip(),
            job_timing=map_job_timing_label(data.job_timing),
            mechanic_qualifications=(
                map_mechanic_qualifications(data.mechanic_qualifications)
                if self.form_origin == FormOrigin.MECHANIC
                else ""
            ),
            desired_income=map_desired_income_label(data.desired_income),
            job_count_label=self.job_result.display_label,
            job_count_message=self.job_result.message,
            show_success_banner=self.job_result.has_jobs,
        )

    def build_submission_body(self, utm_params: UTMParams) -> dict[str, Any]:
        """Request body for `/api/applicants`. Built fresh on every call."""
        data = self.data
        postal_code = data.postal_code
        if is_valid_postal_code(postal_code):
            postal_code = normalize_postal_code(postal_code)
        return {
            "birthDate": data.birth_date.to_iso(),
            "lastName": data.last_name,
            "firstName": data.first_name,
            "lastNameKana": data.last_name_kana,
            "firstNameKana": data.first_name_kana,
            "postalCode": postal_code,
            "prefectureId": data.prefecture_id,
            "municipalityId": data.municipality_id,
            "phoneNumber": data.phone_number.strip(),
            "email": data.email.strip(),
            "jobTiming": data.job_timing.value if data.job_timing else "",
            "mechanicQualifications": [q.value for q in data.mechanic_qualifications],
            "desiredIncome": data.desired_income.value if data.desired_income else "",
            "utmParams": utm_params.model_dump(),
            "experiment": self.experiment.model_dump(),
            "formOrigin": self.form_origin.value,
        }

    async def submit(self, query_string: str = "") -> SubmissionOutcome:
        """Send the application from the confirmation card.

        Args:
            query_string: Current page query string; UTM tags are read from it
                at submit time.

        Returns:
            SubmissionOutcome with the completion path on success.
        """
        if self.is_submitting or self.step != FormStep.CONFIRMATION:
            return SubmissionOutcome(accepted=False)

        for result in (
            validate_name_fields(self.data),
            validate_contact_step(self.data, self.requires_email),
        ):
            if not result.is_valid:
                self.errors.update(result.errors)
                self.is_submit_disabled = True
                return SubmissionOutcome(accepted=False, error=next(iter(result.errors.values())))

        self.is_submitting = True
        self.alert_message = None
        self.event_sink.record("form_submit", {"form_name": "ridejob_application"})

        body = self.build_submission_body(UTMParams.from_query_string(query_string))
        try:
            await self.api.submit_application(body)
        except SubmissionError as e:
            self.alert_message = f"エラーが発生しました: {e.message}"
            self.is_submitting = False
            return SubmissionOutcome(accepted=False, error=e.message)
        except Exception as e:
            logger.exception(f"Error submitting form: {e}")
            self.alert_message = SUBMISSION_FAILED
            self.is_submitting = False
            return SubmissionOutcome(accepted=False, error=SUBMISSION_FAILED)

        self.exit_guard.mark_clean()
        self.completed_path = COMPLETION_PATHS[self.form_origin]
        logger.info(f"Application accepted, redirecting to {self.completed_path}")
        return SubmissionOutcome(accepted=True, redirect_to=self.completed_path)


def _digits(value: str) -> str:
    return "".join(ch for ch in value if ch.isascii() and ch.isdigit())
