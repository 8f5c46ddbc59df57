"""
Medication reminder selection.

Works out which reminders are due at a given moment. Actually delivering them
(desktop notification, push, ...) is left to the caller, which records what it sent
with ``state_reducer.mark_notifications_sent`` so a reminder fires once per day.
"""

from collections.abc import Sequence
from datetime import datetime

from medtracker.domain.catalog import MEDICATIONS, TIME_SLOT_CONFIG
from medtracker.domain.models import AppState, Medication, TimeSlot


def reminder_time(state: AppState, slot: TimeSlot) -> str:
    """User's reminder time for a slot, falling back to the slot default."""
    return state.custom_reminder_times.get(slot, TIME_SLOT_CONFIG[slot].default_time)


def due_reminders(
    state: AppState,
    now: datetime,
    catalog: Sequence[Medication] = MEDICATIONS,
) -> list[Medication]:
    """Untaken, not yet reminded medications whose slot time has passed."""
    if not state.notifications_enabled:
        return []

    # Reminder times are wall-clock times
    clock = now.astimezone().strftime("%H:%M")
    return [
        medication
        for medication in catalog
        if not state.is_taken(medication.id)
        and medication.id not in state.sent_notifications
        and reminder_time(state, medication.time_slot) <= clock
    ]
