"""
Tests for the reducer functions in `medtracker/services/state_reducer.py`.

Covers:
- Medication toggling and the capped, newest-first history log
- Partial report updates and symptom handling
- Day rollover and the explicit "new day" reset
- Profile, reminder and medication customization settings
- Derived dashboard numbers

Property-based tests pin the invariants the store relies on.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import pytest
from hypothesis import given
from hypothesis import strategies as st

from medtracker.domain.catalog import MEDICATIONS, SYMPTOMS
from medtracker.domain.models import (
    HISTORY_LIMIT,
    AppState,
    HealthReport,
    HistoryAction,
    SleepQuality,
    TimeSlot,
)
from medtracker.services import state_reducer

TODAY = "2024-05-01"
TOMORROW = "2024-05-02"
NOW = datetime(2024, 5, 1, 9, 30, tzinfo=UTC)
MEDICATION_IDS = [m.id for m in MEDICATIONS]


def _state_with_taken(taken: set[str]) -> AppState:
    return AppState.initial(TODAY).model_copy(
        update={"taken_medications": {med_id: True for med_id in taken}}
    )


class TestToggleMedication:
    def test_toggle_marks_taken_and_logs(self, fresh_state: AppState) -> None:
        state = state_reducer.toggle_medication(fresh_state, "plavix", NOW)

        assert state.is_taken("plavix")
        assert len(state.history) == 1
        entry = state.history[0]
        assert entry.action == HistoryAction.MEDICATION_TAKEN.value
        assert entry.details == "Plavix"
        assert entry.date == TODAY
        assert entry.timestamp == "09:30"

    def test_toggle_does_not_mutate_input(self, fresh_state: AppState) -> None:
        state_reducer.toggle_medication(fresh_state, "plavix", NOW)

        assert fresh_state.taken_medications == {}
        assert fresh_state.history == []

    def test_unknown_medication_logged_by_id(self, fresh_state: AppState) -> None:
        state = state_reducer.toggle_medication(fresh_state, "vitamin-d", NOW)

        assert state.is_taken("vitamin-d")
        assert state.history[0].details == "vitamin-d"

    def test_history_is_newest_first(self, fresh_state: AppState) -> None:
        state = state_reducer.toggle_medication(fresh_state, "concor", NOW)
        state = state_reducer.toggle_medication(state, "concor", NOW.replace(minute=45))

        assert [e.action for e in state.history] == [
            HistoryAction.MEDICATION_UNTAKEN.value,
            HistoryAction.MEDICATION_TAKEN.value,
        ]
        assert state.history[0].timestamp == "09:45"

    def test_timestamp_is_local_wall_clock_time(
        self, fresh_state: AppState, local_timezone: Callable[[str], None]
    ) -> None:
        local_timezone("Asia/Tokyo")

        entry = state_reducer.toggle_medication(fresh_state, "concor", NOW).history[0]

        assert entry.timestamp == "18:30"
        assert entry.date == TODAY

    @given(
        taken=st.sets(st.sampled_from(MEDICATION_IDS)),
        medication_id=st.sampled_from([*MEDICATION_IDS, "unlisted"]),
    )
    def test_toggling_twice_restores_taken_state(
        self, taken: set[str], medication_id: str
    ) -> None:
        """Property: double toggle is an identity on taken state and logs two entries."""
        state = _state_with_taken(taken)

        twice = state_reducer.toggle_medication(
            state_reducer.toggle_medication(state, medication_id, NOW), medication_id, NOW
        )

        assert twice.taken_medications == state.taken_medications
        assert len(twice.history) == len(state.history) + 2

    @given(toggles=st.lists(st.sampled_from(MEDICATION_IDS), max_size=3 * HISTORY_LIMIT))
    def test_history_never_exceeds_limit(self, toggles: list[str]) -> None:
        state = AppState.initial(TODAY)
        for medication_id in toggles:
            state = state_reducer.toggle_medication(state, medication_id, NOW)
            assert len(state.history) <= HISTORY_LIMIT

        assert len(state.history) == min(len(toggles), HISTORY_LIMIT)


class TestUpdateReport:
    def test_partial_merge_keeps_other_fields(self, fresh_state: AppState) -> None:
        state = state_reducer.update_report(fresh_state, pain_level=6, notes="slept badly")
        state = state_reducer.update_report(state, sleep_quality=SleepQuality.POOR)

        report = state.current_report
        assert report.pain_level == 6
        assert report.notes == "slept badly"
        assert report.sleep_quality == SleepQuality.POOR
        assert report.date == TODAY

    def test_enum_values_accepted_as_strings(self, fresh_state: AppState) -> None:
        state = state_reducer.update_report(fresh_state, appetite="fair")
        assert state.current_report.appetite.value == "fair"

    def test_unknown_field_rejected(self, fresh_state: AppState) -> None:
        with pytest.raises(ValueError, match="Unknown report fields: mood"):
            state_reducer.update_report(fresh_state, mood="great")

    def test_date_cannot_be_changed(self, fresh_state: AppState) -> None:
        with pytest.raises(ValueError, match="date"):
            state_reducer.update_report(fresh_state, date=TOMORROW)

    def test_invalid_value_rejected(self, fresh_state: AppState) -> None:
        with pytest.raises(ValueError):
            state_reducer.update_report(fresh_state, health_rating=9)

    def test_toggle_symptom_adds_then_removes(self, fresh_state: AppState) -> None:
        state = state_reducer.toggle_symptom(fresh_state, "Headache")
        state = state_reducer.toggle_symptom(state, "Nausea")
        assert state.current_report.symptoms == ["Headache", "Nausea"]

        state = state_reducer.toggle_symptom(state, "Headache")
        assert state.current_report.symptoms == ["Nausea"]

    def test_toggle_symptom_ignores_surrounding_whitespace(self, fresh_state: AppState) -> None:
        state = state_reducer.toggle_symptom(fresh_state, " Headache")
        assert state.current_report.symptoms == ["Headache"]

        state = state_reducer.toggle_symptom(state, " Headache ")
        assert state.current_report.symptoms == []

    def test_custom_symptoms_ignore_blank_and_known(self, fresh_state: AppState) -> None:
        state = state_reducer.add_custom_symptom(fresh_state, "  Tinnitus ")
        state = state_reducer.add_custom_symptom(state, "Tinnitus")
        state = state_reducer.add_custom_symptom(state, "   ")
        state = state_reducer.add_custom_symptom(state, SYMPTOMS[0])

        assert state.custom_symptoms == ["Tinnitus"]


class TestDayRollover:
    def test_same_day_returns_state_unchanged(self, fresh_state: AppState) -> None:
        assert state_reducer.roll_over_day(fresh_state, TODAY) is fresh_state

    def test_new_day_archives_report_verbatim(self, fresh_state: AppState) -> None:
        state = state_reducer.toggle_medication(fresh_state, "concor", NOW)
        state = state_reducer.update_report(
            state, health_rating=4, pain_level=2, symptoms=["Fatigue"], notes="ok"
        )
        state = state_reducer.mark_notifications_sent(state, ["plavix"])
        yesterday = state.current_report

        rolled = state_reducer.roll_over_day(state, TOMORROW)

        assert rolled.daily_reports[TODAY] == yesterday
        assert rolled.current_report == HealthReport.blank(TOMORROW)
        assert rolled.taken_medications == {}
        assert rolled.sent_notifications == []

    def test_rollover_keeps_history_and_settings(self, fresh_state: AppState) -> None:
        state = state_reducer.toggle_medication(fresh_state, "concor", NOW)
        state = state_reducer.update_profile(state, patient_name="Sami", notifications_enabled=True)

        rolled = state_reducer.roll_over_day(state, TOMORROW)

        assert rolled.history == state.history
        assert rolled.patient_name == "Sami"
        assert rolled.notifications_enabled
        assert rolled.patient_id == state.patient_id

    def test_earlier_archives_are_kept(self, fresh_state: AppState) -> None:
        day_two = state_reducer.roll_over_day(fresh_state, TOMORROW)
        day_three = state_reducer.roll_over_day(day_two, "2024-05-03")

        assert set(day_three.daily_reports) == {TODAY, TOMORROW}

    def test_start_new_day_resets_even_on_same_date(self, fresh_state: AppState) -> None:
        state = state_reducer.toggle_medication(fresh_state, "lasix", NOW)
        state = state_reducer.update_report(state, pain_level=5)

        reset = state_reducer.start_new_day(state, TODAY)

        assert reset.daily_reports[TODAY].pain_level == 5
        assert reset.current_report.pain_level == 0
        assert reset.taken_medications == {}

    def test_repeated_new_day_keeps_archived_report(self, fresh_state: AppState) -> None:
        state = state_reducer.update_report(fresh_state, pain_level=5, notes="knee")
        archived = state.current_report

        once = state_reducer.start_new_day(state, TODAY)
        twice = state_reducer.start_new_day(once, TODAY)

        assert twice.daily_reports[TODAY] == archived

    def test_rollover_after_new_day_keeps_archived_report(self, fresh_state: AppState) -> None:
        state = state_reducer.update_report(fresh_state, health_rating=2, pain_level=6)
        archived = state.current_report

        reset = state_reducer.start_new_day(state, TODAY)
        rolled = state_reducer.roll_over_day(reset, TOMORROW)

        assert rolled.daily_reports[TODAY] == archived
        assert rolled.current_report == HealthReport.blank(TOMORROW)

    def test_edited_report_after_new_day_replaces_archive(self, fresh_state: AppState) -> None:
        state = state_reducer.update_report(fresh_state, pain_level=5)
        reset = state_reducer.start_new_day(state, TODAY)
        edited = state_reducer.update_report(reset, pain_level=1)

        rolled = state_reducer.roll_over_day(edited, TOMORROW)

        assert rolled.daily_reports[TODAY].pain_level == 1

    @given(
        rating=st.integers(min_value=0, max_value=5),
        pain=st.integers(min_value=0, max_value=10),
        symptoms=st.lists(st.sampled_from(SYMPTOMS), max_size=4),
    )
    def test_archived_report_matches_prior_current_report(
        self, rating: int, pain: int, symptoms: list[str]
    ) -> None:
        state = state_reducer.update_report(
            AppState.initial(TODAY), health_rating=rating, pain_level=pain, symptoms=symptoms
        )

        rolled = state_reducer.roll_over_day(state, TOMORROW)

        assert rolled.daily_reports[TODAY] == state.current_report
        assert rolled.current_report.date == TOMORROW


class TestSettings:
    def test_update_profile(self, fresh_state: AppState) -> None:
        state = state_reducer.update_profile(
            fresh_state, patient_name="Mona", patient_age=71, caregiver_mode=True
        )

        assert (state.patient_name, state.patient_age, state.caregiver_mode) == ("Mona", 71, True)
        assert state.patient_id == fresh_state.patient_id

    def test_update_profile_rejects_unknown_fields(self, fresh_state: AppState) -> None:
        with pytest.raises(ValueError, match="patient_id"):
            state_reducer.update_profile(fresh_state, patient_id="ABCDEF")

    def test_set_reminder_time(self, fresh_state: AppState) -> None:
        state = state_reducer.set_reminder_time(fresh_state, TimeSlot.EVENING, "19:15")
        assert state.custom_reminder_times == {TimeSlot.EVENING: "19:15"}

        with pytest.raises(ValueError):
            state_reducer.set_reminder_time(state, TimeSlot.EVENING, "7pm")

    def test_customization_applies_to_effective_medications(
        self, fresh_state: AppState
    ) -> None:
        state = state_reducer.customize_medication(fresh_state, "lipitor", dosage="40 mg")
        lipitor = next(m for m in state_reducer.effective_medications(state) if m.id == "lipitor")

        assert lipitor.dosage == "40 mg"
        assert lipitor.notes == next(m for m in MEDICATIONS if m.id == "lipitor").notes

    def test_customization_cleared_when_empty(self, fresh_state: AppState) -> None:
        state = state_reducer.customize_medication(fresh_state, "lipitor", notes="with water")
        state = state_reducer.customize_medication(state, "lipitor")

        assert state.medication_customizations == {}

    def test_customizing_unknown_medication_rejected(self, fresh_state: AppState) -> None:
        with pytest.raises(ValueError, match="Unknown medication"):
            state_reducer.customize_medication(fresh_state, "aspirin", dosage="81 mg")

    def test_mark_notifications_sent_dedupes(self, fresh_state: AppState) -> None:
        state = state_reducer.mark_notifications_sent(fresh_state, ["concor", "plavix"])
        state = state_reducer.mark_notifications_sent(state, ["plavix", "lasix"])

        assert state.sent_notifications == ["concor", "plavix", "lasix"]


class TestDerivedViews:
    def test_medications_grouped_in_slot_order(self) -> None:
        grouped = state_reducer.medications_by_slot(MEDICATIONS)

        assert list(grouped) == [
            TimeSlot.MORNING,
            TimeSlot.AFTERNOON,
            TimeSlot.EVENING,
            TimeSlot.NIGHT,
        ]
        assert sum(len(meds) for meds in grouped.values()) == len(MEDICATIONS)

    def test_empty_slots_omitted(self) -> None:
        night_only = [m for m in MEDICATIONS if m.time_slot == TimeSlot.NIGHT]
        assert list(state_reducer.medications_by_slot(night_only)) == [TimeSlot.NIGHT]

    def test_daily_summary(self, fresh_state: AppState) -> None:
        state = state_reducer.toggle_medication(fresh_state, "concor", NOW)
        state = state_reducer.update_report(state, health_rating=5, pain_level=7)

        summary = state_reducer.build_daily_summary(state)

        assert summary.taken_count == 1
        assert summary.total_count == len(MEDICATIONS)
        assert summary.progress_percent == round(100 / len(MEDICATIONS))
        assert summary.pain_display == "7/10"
        assert summary.status_label == "good"

    def test_daily_summary_defaults(self, fresh_state: AppState) -> None:
        summary = state_reducer.build_daily_summary(fresh_state)

        assert summary.progress_percent == 0
        assert summary.pain_display == "none"
        assert summary.status_label == "needs attention"

    def test_unlisted_medications_do_not_count_towards_progress(
        self, fresh_state: AppState
    ) -> None:
        state = state_reducer.toggle_medication(fresh_state, "unlisted", NOW)
        assert state_reducer.taken_count(state) == 0

    def test_progress_with_empty_catalog(self, fresh_state: AppState) -> None:
        assert state_reducer.progress_percent(fresh_state, catalog=[]) == 0.0
