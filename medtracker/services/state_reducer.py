"""
Pure reducer functions over ``AppState``.

Every operation takes the current state and returns a new one; inputs are never
mutated. The store in ``services.tracker`` applies these and persists the result.
"""

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from pydantic import BaseModel

from medtracker.domain.catalog import MEDICATIONS, SYMPTOMS, TIME_SLOT_CONFIG, get_medication
from medtracker.domain.models import (
    HISTORY_LIMIT,
    AppState,
    HealthReport,
    HistoryAction,
    HistoryEntry,
    Medication,
    MedicationCustomization,
    TimeSlot,
    validate_clock_time,
)

# The report date only changes through a rollover
_REPORT_FIELDS = frozenset(HealthReport.model_fields) - {"date"}
_PROFILE_FIELDS = frozenset(
    {
        "patient_name",
        "patient_age",
        "caregiver_mode",
        "caregiver_target_id",
        "notifications_enabled",
    }
)


class DailySummary(BaseModel):
    """Headline numbers for today's dashboard."""

    taken_count: int
    total_count: int
    progress_percent: int
    pain_display: str
    status_label: str


def today_iso(now: datetime | None = None) -> str:
    """Calendar date used to key reports, taken from the UTC clock."""
    return (now or datetime.now(UTC)).date().isoformat()


def toggle_medication(state: AppState, medication_id: str, now: datetime) -> AppState:
    """
    Flip a medication's taken flag and log the change at the head of the history.

    The entry is dated by ``now`` and stamped with its local wall-clock time.
    """
    now_taken = not state.is_taken(medication_id)
    medication = get_medication(medication_id)

    entry = HistoryEntry(
        date=now.date().isoformat(),
        action=(
            HistoryAction.MEDICATION_TAKEN if now_taken else HistoryAction.MEDICATION_UNTAKEN
        ).value,
        details=medication.name if medication else medication_id,
        timestamp=now.astimezone().strftime("%H:%M"),
    )

    taken = dict(state.taken_medications)
    if now_taken:
        taken[medication_id] = True
    else:
        taken.pop(medication_id, None)

    return state.model_copy(
        update={
            "taken_medications": taken,
            "history": [entry, *state.history][:HISTORY_LIMIT],
        }
    )


def update_report(state: AppState, **updates: object) -> AppState:
    """Partially merge field updates into today's report."""
    unknown = set(updates) - _REPORT_FIELDS
    if unknown:
        raise ValueError(f"Unknown report fields: {', '.join(sorted(unknown))}")

    merged = HealthReport.model_validate({**state.current_report.model_dump(), **updates})
    return state.model_copy(update={"current_report": merged})


def toggle_symptom(state: AppState, symptom: str) -> AppState:
    symptom = symptom.strip()
    symptoms = list(state.current_report.symptoms)
    if symptom in symptoms:
        symptoms.remove(symptom)
    else:
        symptoms.append(symptom)
    return update_report(state, symptoms=symptoms)


def add_custom_symptom(state: AppState, symptom: str) -> AppState:
    """Extend the symptom vocabulary; blanks and known symptoms are ignored."""
    symptom = symptom.strip()
    if not symptom or symptom in SYMPTOMS or symptom in state.custom_symptoms:
        return state
    return state.model_copy(update={"custom_symptoms": [*state.custom_symptoms, symptom]})


def roll_over_day(state: AppState, today: str) -> AppState:
    """Archive the report and reset taken state when the calendar date has moved on."""
    if state.current_report.date == today:
        return state
    return start_new_day(state, today)


def start_new_day(state: AppState, today: str) -> AppState:
    """
    Archive the current report verbatim and start a blank one for ``today``.

    Medication-taken state and already-sent reminders reset. The history log and
    all settings are kept. A still-blank report never replaces an archived one.
    """
    report = state.current_report
    archived = dict(state.daily_reports)
    if report.date not in archived or report != HealthReport.blank(report.date):
        archived[report.date] = report
    return state.model_copy(
        update={
            "daily_reports": archived,
            "taken_medications": {},
            "sent_notifications": [],
            "current_report": HealthReport.blank(today),
        }
    )


def update_profile(state: AppState, **changes: object) -> AppState:
    """Update patient details and caregiver/notification settings."""
    unknown = set(changes) - _PROFILE_FIELDS
    if unknown:
        raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
    return AppState.model_validate({**state.model_dump(), **changes})


def set_reminder_time(state: AppState, slot: TimeSlot, clock_time: str) -> AppState:
    times = {**state.custom_reminder_times, slot: validate_clock_time(clock_time)}
    return state.model_copy(update={"custom_reminder_times": times})


def customize_medication(
    state: AppState,
    medication_id: str,
    dosage: str | None = None,
    notes: str | None = None,
) -> AppState:
    """Override dosage/notes for a catalog medication; passing neither clears the override."""
    if get_medication(medication_id) is None:
        raise ValueError(f"Unknown medication: {medication_id}")

    customizations = dict(state.medication_customizations)
    if dosage is None and notes is None:
        customizations.pop(medication_id, None)
    else:
        customizations[medication_id] = MedicationCustomization(dosage=dosage, notes=notes)
    return state.model_copy(update={"medication_customizations": customizations})


def mark_notifications_sent(state: AppState, medication_ids: Iterable[str]) -> AppState:
    sent = list(dict.fromkeys([*state.sent_notifications, *medication_ids]))
    return state.model_copy(update={"sent_notifications": sent})


def effective_medications(
    state: AppState, catalog: Sequence[Medication] = MEDICATIONS
) -> list[Medication]:
    """Catalog medications with the user's customizations applied."""
    medications = []
    for medication in catalog:
        custom = state.medication_customizations.get(medication.id)
        if custom is not None:
            overrides = custom.model_dump(exclude_none=True)
            medication = medication.model_copy(update=overrides)
        medications.append(medication)
    return medications


def medications_by_slot(medications: Iterable[Medication]) -> dict[TimeSlot, list[Medication]]:
    """Group medications by time slot in display order, omitting empty slots."""
    grouped: dict[TimeSlot, list[Medication]] = {slot: [] for slot in TIME_SLOT_CONFIG}
    for medication in medications:
        grouped.setdefault(medication.time_slot, []).append(medication)
    return {slot: meds for slot, meds in grouped.items() if meds}


def taken_count(state: AppState, catalog: Sequence[Medication] = MEDICATIONS) -> int:
    return sum(1 for m in catalog if state.is_taken(m.id))


def progress_percent(state: AppState, catalog: Sequence[Medication] = MEDICATIONS) -> float:
    if not catalog:
        return 0.0
    return taken_count(state, catalog) / len(catalog) * 100


def build_daily_summary(
    state: AppState, catalog: Sequence[Medication] = MEDICATIONS
) -> DailySummary:
    report = state.current_report
    return DailySummary(
        taken_count=taken_count(state, catalog),
        total_count=len(catalog),
        progress_percent=round(progress_percent(state, catalog)),
        pain_display=f"{report.pain_level}/10" if report.pain_level > 0 else "none",
        status_label="good" if report.health_rating > 3 else "needs attention",
    )
