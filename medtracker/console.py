"""
Terminal rendering of the tracker with rich.

Mirrors what the dashboard shows: headline stats, the medication schedule grouped
by time slot, the activity log and the AI analysis card.
"""

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from medtracker.domain.catalog import TIME_SLOT_CONFIG
from medtracker.domain.models import AIAnalysisResult, AppState, Medication, TimeSlot
from medtracker.services.state_reducer import DailySummary


def render_summary(state: AppState, summary: DailySummary) -> Panel:
    table = Table.grid(padding=(0, 3))
    for _ in range(4):
        table.add_column(justify="center")

    table.add_row("Progress", "Medications", "Pain", "Status")
    table.add_row(
        Text(f"{summary.progress_percent}%", style="bold green"),
        Text(f"{summary.taken_count}/{summary.total_count}", style="bold blue"),
        Text(summary.pain_display, style="bold red" if summary.pain_display != "none" else ""),
        Text(summary.status_label, style="bold cyan"),
    )
    return Panel(table, title=f"Hello, {state.patient_name}", subtitle=state.current_report.date)


def render_schedule(state: AppState, schedule: dict[TimeSlot, list[Medication]]) -> Table:
    table = Table(title="Medication Schedule")
    table.add_column("Time", style="cyan")
    table.add_column("Medication", style="magenta")
    table.add_column("Dosage", style="yellow")
    table.add_column("Notes")
    table.add_column("Taken", justify="center")

    for slot, medications in schedule.items():
        label = TIME_SLOT_CONFIG[slot].label
        for medication in medications:
            name = medication.name + (" (critical)" if medication.is_critical else "")
            taken = state.is_taken(medication.id)
            table.add_row(
                label,
                Text(name, style="strike dim" if taken else ""),
                medication.dosage,
                medication.notes,
                "✅" if taken else "·",
            )
            label = ""
    return table


def render_history(state: AppState, limit: int = 10) -> Table:
    table = Table(title="Activity Log")
    table.add_column("Time", style="cyan")
    table.add_column("Action", style="white")
    table.add_column("Details", style="dim")

    if not state.history:
        table.add_row("", "No activity recorded today", "")
    for entry in state.history[:limit]:
        table.add_row(entry.timestamp, entry.action, entry.details)
    return table


def render_analysis(result: AIAnalysisResult) -> Panel:
    sections: list[Text] = [Text(result.summary, style="bold")]

    for title, items, style in (
        ("Recommendations", result.recommendations, "green"),
        ("Urgent warnings", result.warnings, "red"),
        ("Positive signs", result.positive_points, "yellow"),
    ):
        # Warnings are only shown when there are any
        if not items and title == "Urgent warnings":
            continue
        block = Text(f"\n{title}\n", style=f"bold {style}")
        for item in items:
            block.append(f"  • {item}\n")
        sections.append(block)

    return Panel(Group(*sections), title="AI Analysis", border_style="blue")


def print_dashboard(
    console: Console,
    state: AppState,
    summary: DailySummary,
    schedule: dict[TimeSlot, list[Medication]],
) -> None:
    console.print(render_summary(state, summary))
    console.print(render_schedule(state, schedule))
    console.print(render_history(state))
