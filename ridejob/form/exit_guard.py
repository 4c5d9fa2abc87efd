"""Navigation guard for a form holding unsaved input."""

import logging
from enum import Enum

from ridejob.form.models import DEFAULT_FLOW, FormStep
from ridejob.form.tracking import EventSink, LoggingEventSink, step_event_payload

logger = logging.getLogger(__name__)


class LeaveDecision(str, Enum):
    """Answer to a navigation request."""

    ALLOW = "allow"
    PROMPT = "prompt"


class ExitModalVariant(str, Enum):
    DEFAULT = "default"
    PHONE = "phone"


class FormExitGuard:
    """
    Intercepts back-navigation and unload while the form is dirty.

    A UI calls `request_leave()` from its history/unload hooks. When the form
    holds edits the guard answers PROMPT and keeps the navigation pending
    until the user confirms (`confirm_leave`) or stays (`cancel_leave`).
    """

    def __init__(
        self,
        event_sink: EventSink | None = None,
        phone_step: FormStep = FormStep.PHONE,
        flow: tuple[FormStep, ...] = DEFAULT_FLOW,
    ):
        self.event_sink = event_sink or LoggingEventSink()
        self.phone_step = phone_step
        self.flow = flow
        self.is_dirty = False
        self.show_exit_modal = False
        self.modal_variant = ExitModalVariant.DEFAULT
        self.pending_navigation: str | None = None

    def mark_dirty(self) -> None:
        self.is_dirty = True

    def mark_clean(self) -> None:
        self.is_dirty = False

    def request_leave(self, current_step: FormStep, navigation: str = "history-back") -> LeaveDecision:
        """Decide whether navigation may proceed right away."""
        if not self.is_dirty:
            return LeaveDecision.ALLOW

        step_number = self.flow.index(current_step) + 1
        if current_step != FormStep.CONFIRMATION:
            self.event_sink.record("step_abandon", step_event_payload(step_number))

        self.show_exit_modal = True
        self.pending_navigation = navigation
        self.modal_variant = (
            ExitModalVariant.PHONE if current_step == self.phone_step else ExitModalVariant.DEFAULT
        )
        logger.debug(f"Navigation '{navigation}' held at step {step_number}")
        return LeaveDecision.PROMPT

    def confirm_leave(self) -> str | None:
        """User chose to leave. Returns the navigation to perform, if any."""
        navigation = self.pending_navigation
        self.show_exit_modal = False
        self.pending_navigation = None
        self.modal_variant = ExitModalVariant.DEFAULT
        if navigation is not None:
            self.mark_clean()
        return navigation

    def cancel_leave(self) -> None:
        """User chose to stay on the form."""
        self.show_exit_modal = False
        self.pending_navigation = None
        self.modal_variant = ExitModalVariant.DEFAULT
