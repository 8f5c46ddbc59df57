"""
End-to-end smoke check of the tracker.

This script exercises:
1. Configuration loading and validation
2. Medication tracking and the daily report
3. Persistence and day rollover through a temporary storage file
4. AI analysis (skipped when no GOOGLE_API_KEY is configured)

Run with: python system_check.py
"""

import asyncio
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from medtracker.config import get_config, print_config_summary, validate_config
from medtracker.console import print_dashboard, render_analysis
from medtracker.domain.models import Appetite, SleepQuality
from medtracker.services.ai_analysis import AIAnalysisConfig, HealthAnalysisAgent
from medtracker.services.alerts import AlertDispatcher
from medtracker.services.storage import JsonFileStorage, StateRepository
from medtracker.services.tracker import HealthTracker

console = Console()


class ShiftableClock:
    """Clock the check can move forward to simulate the next day."""

    def __init__(self) -> None:
        self.now = datetime.now(UTC)

    def __call__(self) -> datetime:
        return self.now


async def check_configuration() -> bool:
    console.print(Panel("🔧 Checking Configuration", style="blue"))

    try:
        validate_config()
        print_config_summary()
        console.print("✅ Configuration loaded successfully", style="green")
        return True
    except Exception as e:
        console.print(f"❌ Configuration check failed: {e}", style="red")
        return False


async def check_tracking(data_file: Path) -> bool:
    console.print(Panel("💊 Checking Medication Tracking", style="blue"))

    try:
        tracker = HealthTracker(StateRepository(JsonFileStorage(data_file)))

        tracker.toggle_medication("concor")
        tracker.toggle_medication("plavix")
        tracker.update_report(
            health_rating=4,
            pain_level=3,
            pain_location="lower back",
            sleep_quality=SleepQuality.FAIR,
            appetite=Appetite.GOOD,
        )
        tracker.toggle_symptom("Fatigue")

        print_dashboard(
            console, tracker.state, tracker.summary(), tracker.medications_by_slot()
        )

        if tracker.summary().taken_count != 2:
            raise AssertionError("expected two medications marked as taken")

        console.print("✅ Tracking actions applied", style="green")
        return True
    except Exception as e:
        console.print(f"❌ Tracking check failed: {e}", style="red")
        return False


async def check_persistence(data_file: Path) -> bool:
    console.print(Panel("💾 Checking Persistence and Rollover", style="blue"))

    try:
        clock = ShiftableClock()
        tracker = HealthTracker(StateRepository(JsonFileStorage(data_file)), clock=clock)
        reloaded_taken = sorted(tracker.state.taken_medications)
        report_date = tracker.state.current_report.date

        clock.now += timedelta(days=1)
        tracker.toggle_medication("lasix")

        table = Table(title="Persistence")
        table.add_column("Check", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("Reloaded taken medications", ", ".join(reloaded_taken) or "none")
        table.add_row("Archived report dates", ", ".join(tracker.state.daily_reports))
        table.add_row("New report date", tracker.state.current_report.date)
        table.add_row("History entries", str(len(tracker.state.history)))
        console.print(table)

        if report_date not in tracker.state.daily_reports:
            raise AssertionError("previous report was not archived")
        if tracker.state.taken_medications != {"lasix": True}:
            raise AssertionError("taken medications were not reset on the new day")

        console.print("✅ State survived reload and rolled over", style="green")
        return True
    except Exception as e:
        console.print(f"❌ Persistence check failed: {e}", style="red")
        return False


async def check_ai_analysis(data_file: Path) -> bool:
    console.print(Panel("🤖 Checking AI Analysis", style="blue"))

    config = get_config()
    if not config.ai_provider.analysis_enabled:
        console.print("⏭️  GOOGLE_API_KEY not set, skipping", style="yellow")
        return True

    agent = HealthAnalysisAgent(
        AIAnalysisConfig(
            model_name=config.ai_provider.analysis_model,
            thinking_budget=config.ai_provider.thinking_budget,
            response_language=config.ai_provider.response_language,
        )
    )
    tracker = HealthTracker(
        StateRepository(JsonFileStorage(data_file)),
        analysis_agent=agent,
        alerts=AlertDispatcher(console=console),
    )

    console.print("🔍 Analyzing today's data...", style="yellow")
    result = await tracker.request_analysis()
    if result.is_err():
        console.print(f"❌ AI analysis failed: {result.unwrap_err()}", style="red")
        return False

    console.print(render_analysis(result.unwrap()))
    return True


async def run_all_checks() -> None:
    console.print(Panel("🧪 Daily Care Tracker - System Check", style="bold blue"))

    with tempfile.TemporaryDirectory() as tmp:
        data_file = Path(tmp) / "storage.json"
        checks = [
            ("Configuration", check_configuration()),
            ("Tracking", check_tracking(data_file)),
            ("Persistence", check_persistence(data_file)),
            ("AI Analysis", check_ai_analysis(data_file)),
        ]

        results = []
        for name, check in checks:
            console.print(f"\n{'=' * 60}")
            results.append((name, await check))

    summary_table = Table(title="📋 Check Results")
    summary_table.add_column("Check", style="cyan")
    summary_table.add_column("Result", style="white")

    passed = 0
    for name, ok in results:
        summary_table.add_row(name, "✅ PASSED" if ok else "❌ FAILED")
        passed += ok

    console.print(summary_table)
    console.print(f"\n🎯 Results: {passed}/{len(results)} checks passed")


if __name__ == "__main__":
    try:
        asyncio.run(run_all_checks())
    except KeyboardInterrupt:
        console.print("\n👋 Check stopped by user", style="yellow")
