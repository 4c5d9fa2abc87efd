"""Application form core: validators, step state machine and its collaborators.

This module provides:
- ApplicationForm: the card-by-card form state machine (default, Coupang and
  mechanic flows)
- FormApiClient: HTTP client for job counts and the applicant relay
- FormExitGuard: navigation guard for unsaved input
- PykakasiConverter: kanji -> hiragana suggestions
"""

from ridejob.form.client import FormApiClient, JobCountLookupError, SubmissionError
from ridejob.form.exit_guard import FormExitGuard, LeaveDecision
from ridejob.form.kana import KanaConverter, PykakasiConverter
from ridejob.form.models import (
    AddressMode,
    BirthDate,
    DesiredIncome,
    ExperimentInfo,
    FormData,
    FormOrigin,
    FormStep,
    JobCountResult,
    MechanicQualification,
    UTMParams,
)
from ridejob.form.state import ApplicationForm, NameField, SubmissionOutcome
from ridejob.form.tracking import EventSink, InMemoryEventSink, LoggingEventSink

__all__ = [
    # State machine
    "ApplicationForm",
    "NameField",
    "SubmissionOutcome",
    # Collaborators
    "FormApiClient",
    "JobCountLookupError",
    "SubmissionError",
    "FormExitGuard",
    "LeaveDecision",
    "KanaConverter",
    "PykakasiConverter",
    "EventSink",
    "InMemoryEventSink",
    "LoggingEventSink",
    # Models
    "AddressMode",
    "BirthDate",
    "DesiredIncome",
    "ExperimentInfo",
    "FormData",
    "FormOrigin",
    "FormStep",
    "JobCountResult",
    "MechanicQualification",
    "UTMParams",
]
