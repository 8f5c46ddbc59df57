"""
User-facing alerts.

Failures the user must see (the AI analysis not coming back) are turned into
alerts and handed to whatever handlers the front end registers. Without handlers
they are printed to the console.
"""

import inspect
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

import structlog
from rich.console import Console
from rich.panel import Panel

logger = structlog.get_logger(__name__)


@dataclass
class UserAlert:
    """A message that should interrupt the user."""

    message: str
    level: Literal["info", "error"] = "error"
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


AlertHandler = Callable[[UserAlert], None] | Callable[[UserAlert], Awaitable[None]]


class AlertDispatcher:
    """Fans alerts out to handlers and keeps a short history of them."""

    def __init__(
        self,
        handlers: list[AlertHandler] | None = None,
        console: Console | None = None,
    ) -> None:
        self.console = console or Console(stderr=True)
        self.handlers: list[AlertHandler] = (
            list(handlers) if handlers else [self._console_alert_handler]
        )
        self.alert_history: deque[UserAlert] = deque(maxlen=100)
        self.logger = logger.bind(component="alert_dispatcher")

    async def dispatch(self, alert: UserAlert) -> None:
        self.alert_history.append(alert)
        self.logger.info("alert_raised", level=alert.level, message=alert.message)

        for handler in self.handlers:
            try:
                outcome = handler(alert)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                self.logger.error("alert_dispatch_failed", error=str(e), message=alert.message)

    def _console_alert_handler(self, alert: UserAlert) -> None:
        """Development alert handler that prints to the console."""
        style = "red" if alert.level == "error" else "cyan"
        title = "⚠️  Alert" if alert.level == "error" else "ℹ️  Notice"
        self.console.print(Panel(alert.message, title=title, style=style))
