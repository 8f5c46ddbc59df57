"""
Static medication schedule and symptom vocabulary.

The catalog is the patient's prescribed regimen. Per-user overrides live in
``AppState.medication_customizations`` and are applied by
``state_reducer.effective_medications``.
"""

from pydantic import BaseModel, ConfigDict

from medtracker.domain.models import Medication, TimeSlot


class TimeSlotInfo(BaseModel):
    """Display label and default reminder time for a time slot."""

    model_config = ConfigDict(frozen=True)

    label: str
    default_time: str


TIME_SLOT_CONFIG: dict[TimeSlot, TimeSlotInfo] = {
    TimeSlot.MORNING: TimeSlotInfo(label="Morning", default_time="08:00"),
    TimeSlot.AFTERNOON: TimeSlotInfo(label="Afternoon", default_time="14:00"),
    TimeSlot.EVENING: TimeSlotInfo(label="Evening", default_time="20:00"),
    TimeSlot.NIGHT: TimeSlotInfo(label="Bedtime", default_time="22:30"),
}

MEDICATIONS: tuple[Medication, ...] = (
    Medication(
        id="concor",
        name="Concor",
        dosage="5 mg",
        time_slot=TimeSlot.MORNING,
        is_critical=True,
        notes="Blood pressure, before breakfast",
    ),
    Medication(
        id="nexium",
        name="Nexium",
        dosage="40 mg",
        time_slot=TimeSlot.MORNING,
        notes="Stomach protection, on an empty stomach",
    ),
    Medication(
        id="plavix",
        name="Plavix",
        dosage="75 mg",
        time_slot=TimeSlot.MORNING,
        is_critical=True,
        notes="Blood thinner, after breakfast",
    ),
    Medication(
        id="lasix",
        name="Lasix",
        dosage="40 mg",
        time_slot=TimeSlot.MORNING,
        notes="Diuretic, avoid late in the day",
    ),
    Medication(
        id="glucophage",
        name="Glucophage",
        dosage="500 mg",
        time_slot=TimeSlot.AFTERNOON,
        notes="With lunch",
    ),
    Medication(
        id="eliquis",
        name="Eliquis",
        dosage="5 mg",
        time_slot=TimeSlot.EVENING,
        is_critical=True,
        notes="Blood thinner, every 12 hours",
    ),
    Medication(
        id="lipitor",
        name="Lipitor",
        dosage="20 mg",
        time_slot=TimeSlot.NIGHT,
        notes="Cholesterol, at bedtime",
    ),
)

SYMPTOMS: tuple[str, ...] = (
    "Dizziness",
    "Headache",
    "Fatigue",
    "Nausea",
    "Shortness of breath",
    "Chest pain",
    "Palpitations",
    "Unusual bruising",
    "Bleeding gums",
    "Leg swelling",
)

_MEDICATIONS_BY_ID = {m.id: m for m in MEDICATIONS}


def get_medication(medication_id: str) -> Medication | None:
    return _MEDICATIONS_BY_ID.get(medication_id)
