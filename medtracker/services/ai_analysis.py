"""
AI-powered daily health analysis using Pydantic AI.

Key architectural decisions:
- Type-safe AI responses: the answer is validated against AIAnalysisResult
- Native structured output: the provider receives the JSON schema and must answer
  with a matching JSON object, not prose
- Single attempt: an empty or malformed answer surfaces as AnalysisError, no retries
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, cast

import structlog
from pydantic import BaseModel, Field
from pydantic_ai import Agent, NativeOutput
from pydantic_ai.exceptions import UnexpectedModelBehavior
from pydantic_ai.settings import ModelSettings

from medtracker.config import DEFAULT_ANALYSIS_MODEL
from medtracker.domain.catalog import MEDICATIONS
from medtracker.domain.models import AIAnalysisResult, Appetite, AppState, Medication, SleepQuality

logger = structlog.get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to get a response from the AI service"

SLEEP_LABELS: dict[SleepQuality, str] = {
    SleepQuality.GOOD: "very good and restful",
    SleepQuality.FAIR: "interrupted or average",
    SleepQuality.POOR: "poor or insufficient",
}
APPETITE_LABELS: dict[Appetite, str] = {
    Appetite.GOOD: "excellent",
    Appetite.FAIR: "normal",
    Appetite.POOR: "very weak",
}


class AnalysisError(Exception):
    """The AI service did not produce a usable analysis."""


class AnalysisNotConfiguredError(AnalysisError):
    """No AI provider credentials are configured."""


class AnalysisInProgressError(AnalysisError):
    """An analysis request is already in flight."""


class AIAnalysisConfig(BaseModel):
    """Configuration for the health analysis agent."""

    model_name: str = DEFAULT_ANALYSIS_MODEL
    thinking_budget: int = Field(default=8000, ge=0)
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    response_language: str = Field(default="English", min_length=1)


def build_analysis_prompt(
    state: AppState, medications: Sequence[Medication] = MEDICATIONS
) -> str:
    """
    Describe the patient's day for the model.

    Every medication is listed exactly once: taken ones with their dosage, the rest
    by name under the missed list.
    """
    report = state.current_report

    taken = [f"{m.name} ({m.dosage})" for m in medications if state.is_taken(m.id)]
    missed = [m.name for m in medications if not state.is_taken(m.id)]

    rating = str(report.health_rating) if report.health_rating else "not rated yet"

    return f"""Analyze the following health data for the patient {state.patient_name} \
(age: {state.patient_age} years).

DAILY HEALTH CONTEXT:
- Medications taken: {", ".join(taken) or "No medications recorded as taken"}
- Medications not taken yet: {", ".join(missed) or "All scheduled medications have been taken"}
- Overall condition rating (out of 5): {rating}
- Pain scale (0-10): {report.pain_level}
- Reported pain location: {report.pain_location or "No specific pain location"}
- Last night's sleep quality: {SLEEP_LABELS.get(report.sleep_quality, "Not specified")}
- Appetite today: {APPETITE_LABELS.get(report.appetite, "Not specified")}
- Observed symptoms: {", ".join(report.symptoms) or "No troubling symptoms recorded"}
- Additional notes from the patient: {report.notes or "None"}"""


class HealthAnalysisAgent:
    """
    AI agent that turns the day's state into a summary with advice.

    Design principles:
    - One request, one structured answer
    - Reassuring but professional tone, safety warnings first
    - Failures are reported, never papered over with a fallback answer
    """

    def __init__(self, config: AIAnalysisConfig) -> None:
        self.config = config
        self.logger = logger.bind(component="health_analysis_agent")

        self.agent = Agent(
            model=self.config.model_name,
            output_type=NativeOutput(
                AIAnalysisResult,
                name="health_analysis",
                description="Daily health analysis for the patient",
            ),
            system_prompt=self._build_system_prompt(),
            model_settings=self._build_model_settings(),
            retries=0,
            defer_model_check=True,
        )

    def _build_system_prompt(self) -> str:
        """Build system prompt that creates a consulting physician personality."""
        return f"""You are a consulting medical expert and smart health assistant.
You review a patient's self-reported day and help them and their caregivers.

Provide:
1. SUMMARY: an analytical reading of the patient's condition, linking the reported
   symptoms to the medications taken, especially blood pressure medication and blood
   thinners. Use a reassuring but professional tone.
2. RECOMMENDATIONS: practical actions (diet changes, when to drink water, light
   exercise, or seeing the doctor).
3. WARNINGS: focus on drug interactions, pain in a sensitive area such as the chest,
   and symptoms suggesting problems with blood clotting or blood pressure.
4. POSITIVE POINTS: encourage the patient for the medications they did take and for
   any improving indicators.

Important: if the patient takes blood thinners and reports bleeding, bruising or a
severe headache, this must appear in the warnings immediately.

Answer only with the requested JSON object, written in {self.config.response_language}."""

    def _build_model_settings(self) -> ModelSettings:
        settings: dict[str, Any] = {
            # Only read by Gemini models, ignored by other providers
            "google_thinking_config": {"thinking_budget": self.config.thinking_budget},
        }
        if self.config.temperature is not None:
            settings["temperature"] = self.config.temperature
        return cast(ModelSettings, settings)

    async def analyze(
        self, state: AppState, medications: Sequence[Medication] = MEDICATIONS
    ) -> AIAnalysisResult:
        """
        Run one analysis of the current state.

        Raises AnalysisError when the service answers with empty text or JSON that
        does not match the schema. Transport errors propagate unchanged.
        """
        prompt = build_analysis_prompt(state, medications)
        start_time = datetime.now(UTC)
        self.logger.debug("health_analysis_prompt_prepared", prompt_chars=len(prompt))

        try:
            result = await self.agent.run(prompt)
        except UnexpectedModelBehavior as e:
            self.logger.error("health_analysis_invalid_response", error=str(e))
            raise AnalysisError(GENERIC_FAILURE_MESSAGE) from e

        analysis = cast(Any, result).output
        if not isinstance(analysis, AIAnalysisResult):
            self.logger.error("health_analysis_empty_response")
            raise AnalysisError(GENERIC_FAILURE_MESSAGE)

        self.logger.info(
            "health_analysis_completed",
            recommendations=len(analysis.recommendations),
            warnings=len(analysis.warnings),
            positive_points=len(analysis.positive_points),
            duration_seconds=round((datetime.now(UTC) - start_time).total_seconds(), 3),
        )
        return analysis
