"""
The application store.

``HealthTracker`` owns the single in-memory ``AppState``: every user action runs a
reducer from ``state_reducer``, replaces the state and writes it back to storage.
It is also the only place that talks to the AI service, guarding the call with an
in-flight flag so a second request cannot be submitted while one is awaited.
"""

from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime
from typing import Any

import structlog

from medtracker.config import AppConfig, get_config
from medtracker.domain.catalog import MEDICATIONS
from medtracker.domain.models import AIAnalysisResult, AppState, Medication, TimeSlot
from medtracker.logging_config import configure_logging
from medtracker.services import state_reducer
from medtracker.services.ai_analysis import (
    AIAnalysisConfig,
    AnalysisInProgressError,
    AnalysisNotConfiguredError,
    HealthAnalysisAgent,
)
from medtracker.services.alerts import AlertDispatcher, AlertHandler, UserAlert
from medtracker.services.reminders import due_reminders
from medtracker.services.result import Result
from medtracker.services.storage import JsonFileStorage, StateRepository

logger = structlog.get_logger(__name__)


class HealthTracker:
    """
    Holds the state, applies user actions and persists after each one.

    The first action on a new calendar date rolls the state over before it is
    applied, so yesterday's report is archived even if the app stayed open overnight.
    """

    def __init__(
        self,
        repository: StateRepository,
        analysis_agent: HealthAnalysisAgent | None = None,
        alerts: AlertDispatcher | None = None,
        catalog: Sequence[Medication] = MEDICATIONS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.repository = repository
        self.analysis_agent = analysis_agent
        self.alerts = alerts or AlertDispatcher()
        self.catalog = catalog
        self.logger = logger.bind(component="health_tracker")
        self._clock = clock or (lambda: datetime.now(UTC))

        self._is_analyzing = False
        self.last_analysis: AIAnalysisResult | None = None

        self._state = repository.load(self._today())
        self.repository.save(self._state)
        self.logger.info(
            "tracker_started",
            patient_id=self._state.patient_id,
            report_date=self._state.current_report.date,
            analysis_enabled=analysis_agent is not None,
        )

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def is_analyzing(self) -> bool:
        return self._is_analyzing

    def _today(self) -> str:
        return state_reducer.today_iso(self._clock())

    def _commit(self, new_state: AppState, event: str, **context: Any) -> AppState:
        if new_state is self._state:
            return new_state
        self._state = new_state
        self.repository.save(new_state)
        self.logger.info(event, **context)
        return new_state

    def _current(self) -> AppState:
        """State to act on, rolled over first if the date changed since the last action."""
        today = self._today()
        previous_date = self._state.current_report.date
        rolled = state_reducer.roll_over_day(self._state, today)
        return self._commit(rolled, "day_rolled_over", archived_date=previous_date, today=today)

    # Medications

    def medications(self) -> list[Medication]:
        return state_reducer.effective_medications(self._state, self.catalog)

    def medications_by_slot(self) -> dict[TimeSlot, list[Medication]]:
        return state_reducer.medications_by_slot(self.medications())

    def toggle_medication(self, medication_id: str) -> bool:
        """Mark a medication taken (or undo it). Returns the new taken flag."""
        state = state_reducer.toggle_medication(self._current(), medication_id, self._clock())
        taken = state.is_taken(medication_id)
        self._commit(state, "medication_toggled", medication_id=medication_id, taken=taken)
        return taken

    def customize_medication(
        self, medication_id: str, dosage: str | None = None, notes: str | None = None
    ) -> None:
        state = state_reducer.customize_medication(
            self._current(), medication_id, dosage=dosage, notes=notes
        )
        self._commit(state, "medication_customized", medication_id=medication_id)

    # Daily report

    def update_report(self, **updates: Any) -> None:
        state = state_reducer.update_report(self._current(), **updates)
        self._commit(state, "report_updated", fields=sorted(updates))

    def toggle_symptom(self, symptom: str) -> None:
        state = state_reducer.toggle_symptom(self._current(), symptom)
        self._commit(state, "symptom_toggled", symptom=symptom)

    def add_custom_symptom(self, symptom: str) -> None:
        state = state_reducer.add_custom_symptom(self._current(), symptom)
        self._commit(state, "custom_symptom_added", symptom=symptom.strip())

    def start_new_day(self) -> None:
        """Explicit "new day": archive today's report and reset taken state."""
        previous = self._state
        state = state_reducer.start_new_day(previous, self._today())
        self._commit(state, "new_day_started", archived_date=previous.current_report.date)

    def summary(self) -> state_reducer.DailySummary:
        return state_reducer.build_daily_summary(self._current(), self.catalog)

    # Settings and reminders

    def update_profile(self, **changes: Any) -> None:
        state = state_reducer.update_profile(self._current(), **changes)
        self._commit(state, "profile_updated", fields=sorted(changes))

    def set_reminder_time(self, slot: TimeSlot, clock_time: str) -> None:
        state = state_reducer.set_reminder_time(self._current(), slot, clock_time)
        self._commit(state, "reminder_time_set", slot=slot.value, time=clock_time)

    def due_reminders(self) -> list[Medication]:
        return due_reminders(self._current(), self._clock(), self.medications())

    def mark_reminders_sent(self, medication_ids: Iterable[str]) -> None:
        ids = list(medication_ids)
        state = state_reducer.mark_notifications_sent(self._current(), ids)
        self._commit(state, "reminders_sent", medication_ids=ids)

    # AI analysis

    async def request_analysis(self) -> Result[AIAnalysisResult, Exception]:
        """
        Ask the AI service for a summary of today's data.

        Failures are shown to the user as an alert and returned as an error result.
        A request made while another is in flight is dropped without reaching the
        service.
        """
        if self._is_analyzing:
            self.logger.info("analysis_already_in_flight")
            return Result.err(AnalysisInProgressError("An analysis is already running"))

        if self.analysis_agent is None:
            error = AnalysisNotConfiguredError("AI analysis is not configured")
            await self.alerts.dispatch(UserAlert(message=f"Sorry, an error occurred: {error}"))
            return Result.err(error)

        state = self._current()
        self._is_analyzing = True
        self.last_analysis = None
        try:
            analysis = await self.analysis_agent.analyze(state, self.medications())
        except Exception as e:
            self.logger.error("analysis_failed", error=str(e), error_type=type(e).__name__)
            await self.alerts.dispatch(UserAlert(message=f"Sorry, an error occurred: {e}"))
            return Result.err(e)
        finally:
            self._is_analyzing = False

        self.last_analysis = analysis
        return Result.ok(analysis)


def create_tracker(
    config: AppConfig | None = None,
    alert_handlers: list[AlertHandler] | None = None,
) -> HealthTracker:
    """Wire a tracker from configuration: logging, file storage and the AI agent."""
    config = config or get_config()
    configure_logging(config.logging)

    repository = StateRepository(
        JsonFileStorage(config.storage.data_file), key=config.storage.state_key
    )

    analysis_agent = None
    if config.ai_provider.analysis_enabled:
        analysis_agent = HealthAnalysisAgent(
            AIAnalysisConfig(
                model_name=config.ai_provider.analysis_model,
                thinking_budget=config.ai_provider.thinking_budget,
                temperature=config.ai_provider.temperature,
                response_language=config.ai_provider.response_language,
            )
        )
    else:
        logger.info("analysis_disabled", reason="no_api_key")

    return HealthTracker(
        repository=repository,
        analysis_agent=analysis_agent,
        alerts=AlertDispatcher(alert_handlers),
    )
