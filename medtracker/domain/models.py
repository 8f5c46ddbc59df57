"""
Domain models for daily medication and symptom tracking.

These models represent the core business concepts and are framework-agnostic.
They use Pydantic for validation. Attributes are snake_case while the persisted
blob keeps the camelCase keys written by earlier releases (``patientName``,
``takenMedications``, ...), so both spellings are accepted on input.
"""

import secrets
import string
from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

HISTORY_LIMIT = 50
PATIENT_ID_LENGTH = 6
DEFAULT_PATIENT_NAME = "Dear Father"
DEFAULT_PATIENT_AGE = 65

_PATIENT_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_patient_id() -> str:
    """Random 6-character upper-case token identifying this device's patient."""
    return "".join(secrets.choice(_PATIENT_ID_ALPHABET) for _ in range(PATIENT_ID_LENGTH))


def validate_clock_time(value: str) -> str:
    """Accept ``HH:MM`` (24h) and return it zero-padded."""
    hours, sep, minutes = value.partition(":")
    if not sep or not hours.isdigit() or not minutes.isdigit():
        raise ValueError(f"Time {value!r} must be formatted as HH:MM")
    h, m = int(hours), int(minutes)
    if not (0 <= h < 24 and 0 <= m < 60):
        raise ValueError(f"Time {value!r} is outside 00:00-23:59")
    return f"{h:02d}:{m:02d}"


class TimeSlot(str, Enum):
    """Labeled periods of the day used to group medications."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class SleepQuality(str, Enum):
    UNSET = ""
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class Appetite(str, Enum):
    UNSET = ""
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class HistoryAction(str, Enum):
    MEDICATION_TAKEN = "Medication taken"
    MEDICATION_UNTAKEN = "Medication untaken"


class CamelModel(BaseModel):
    """Base model serializing to the camelCase storage keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Medication(CamelModel):
    """A scheduled medication from the catalog."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    name: str
    dosage: str
    time_slot: TimeSlot
    is_critical: bool = False
    notes: str = ""


class MedicationCustomization(CamelModel):
    """User overrides applied on top of a catalog medication."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    dosage: str | None = None
    notes: str | None = None


class HealthReport(CamelModel):
    """One day's self-reported health snapshot."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    date: str = Field(description="ISO date (YYYY-MM-DD) the report belongs to")
    health_rating: int = Field(default=0, ge=0, le=5, description="1-5 stars, 0 = not rated")
    pain_level: int = Field(default=0, ge=0, le=10)
    pain_location: str = ""
    sleep_quality: SleepQuality = SleepQuality.UNSET
    appetite: Appetite = Appetite.UNSET
    symptoms: list[str] = Field(default_factory=list)
    notes: str = ""

    @field_validator("date")
    @classmethod
    def validate_iso_date(cls, v: str) -> str:
        date.fromisoformat(v)
        return v

    @field_validator("symptoms")
    @classmethod
    def dedupe_symptoms(cls, v: list[str]) -> list[str]:
        # Behaves as a set but keeps the order the user picked them in
        return list(dict.fromkeys(s.strip() for s in v if s.strip()))

    @classmethod
    def blank(cls, day: str) -> "HealthReport":
        return cls(date=day)


class HistoryEntry(CamelModel):
    """Single line of the activity log."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    date: str
    action: str
    details: str
    timestamp: str = Field(description="Local clock time, HH:MM")


class AppState(CamelModel):
    """
    Entire persisted application state.

    Loaded once at startup, replaced by reducer output on every user action and
    serialized back after each change.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    patient_name: str = DEFAULT_PATIENT_NAME
    patient_age: int = Field(default=DEFAULT_PATIENT_AGE, ge=0, le=130)
    patient_id: str = Field(default_factory=generate_patient_id)
    caregiver_mode: bool = False
    caregiver_target_id: str | None = None

    taken_medications: dict[str, bool] = Field(default_factory=dict)

    # Notification settings
    notifications_enabled: bool = False
    sent_notifications: list[str] = Field(default_factory=list)
    custom_reminder_times: dict[TimeSlot, str] = Field(default_factory=dict)

    # Customizations
    medication_customizations: dict[str, MedicationCustomization] = Field(default_factory=dict)
    custom_symptoms: list[str] = Field(default_factory=list)

    history: list[HistoryEntry] = Field(default_factory=list)
    daily_reports: dict[str, HealthReport] = Field(default_factory=dict)
    current_report: HealthReport

    @field_validator("taken_medications")
    @classmethod
    def drop_untaken(cls, v: dict[str, bool]) -> dict[str, bool]:
        # Untaken medications are represented by absence
        return {med_id: True for med_id, taken in v.items() if taken}

    @field_validator("history")
    @classmethod
    def cap_history(cls, v: list[HistoryEntry]) -> list[HistoryEntry]:
        return v[:HISTORY_LIMIT]

    @field_validator("custom_reminder_times")
    @classmethod
    def validate_reminder_times(cls, v: dict[TimeSlot, str]) -> dict[TimeSlot, str]:
        return {slot: validate_clock_time(t) for slot, t in v.items()}

    @classmethod
    def initial(cls, today: str) -> "AppState":
        """Default state for a first launch (or after unreadable storage)."""
        return cls(current_report=HealthReport.blank(today))

    def is_taken(self, medication_id: str) -> bool:
        return self.taken_medications.get(medication_id, False)


class AIAnalysisResult(CamelModel):
    """Structured answer expected back from the text-generation service."""

    summary: str = Field(description="Overall reading of the patient's day")
    recommendations: list[str] = Field(description="Practical steps to take")
    warnings: list[str] = Field(description="Urgent concerns, interactions or red flags")
    positive_points: list[str] = Field(description="Encouraging observations")
