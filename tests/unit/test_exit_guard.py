"""Tests for the navigation exit guard."""

from ridejob.form.exit_guard import ExitModalVariant, FormExitGuard, LeaveDecision
from ridejob.form.models import MECHANIC_FLOW, FormStep
from ridejob.form.tracking import InMemoryEventSink


class TestFormExitGuard:
    """Tests for FormExitGuard."""

    def test_clean_guard_allows(self):
        guard = FormExitGuard(InMemoryEventSink())
        assert guard.request_leave(FormStep.NAME_ADDRESS) == LeaveDecision.ALLOW
        assert guard.show_exit_modal is False

    def test_no_abandon_event_on_confirmation_card(self):
        """Test leaving from the confirmation card prompts without an abandon event."""
        sink = InMemoryEventSink()
        guard = FormExitGuard(sink)
        guard.mark_dirty()

        assert guard.request_leave(FormStep.CONFIRMATION) == LeaveDecision.PROMPT
        assert sink.events == []
        assert guard.modal_variant == ExitModalVariant.DEFAULT

    def test_abandon_event_names_step(self):
        sink = InMemoryEventSink()
        guard = FormExitGuard(sink)
        guard.mark_dirty()

        guard.request_leave(FormStep.PHONE, navigation="unload")

        assert sink.events == [("step_abandon", {"step_name": "step_3", "step_number": 3})]
        assert guard.modal_variant == ExitModalVariant.PHONE
        assert guard.pending_navigation == "unload"

    def test_confirm_without_pending_navigation_keeps_dirty(self):
        """Test confirm_leave is a no-op when nothing was held."""
        guard = FormExitGuard(InMemoryEventSink())
        guard.mark_dirty()

        assert guard.confirm_leave() is None
        assert guard.is_dirty is True

    def test_step_number_follows_flow(self):
        """Test abandon events count cards within the session's own flow."""
        sink = InMemoryEventSink()
        guard = FormExitGuard(sink, flow=MECHANIC_FLOW)
        guard.mark_dirty()

        guard.request_leave(FormStep.PHONE)

        assert sink.events == [("step_abandon", {"step_name": "step_6", "step_number": 6})]
        assert guard.modal_variant == ExitModalVariant.PHONE
