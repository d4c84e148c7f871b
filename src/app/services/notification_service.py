#!/usr/bin/env python3
"""
Hour alert planning and scheduling.

Plans one alert per upcoming planetary hour of a computed day and hands
them to a scheduler. Delivery (push, desktop, email) belongs to the
scheduler implementation; the in-memory scheduler only records alerts.
"""

import asyncio
import logging

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from api.services.metrics import metrics_collector
from app.utils.hash_keys import alert_id_hash
from modules.planetary_hours import HourSpan, PlanetaryHoursResult
from modules.planetary_hours.formatting import CLOCK_24H, TimeFormatPolicy, span_label
from shared.time_utils import ensure_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HourAlert:
    """A notification due at the start of a planetary hour."""

    alert_id: str
    title: str
    body: str
    fire_at: datetime
    span: HourSpan

    def to_dict(self) -> dict[str, Any]:
        return {
            "alert_id": self.alert_id,
            "title": self.title,
            "body": self.body,
            "fire_at": self.fire_at.isoformat(),
            "ruler": self.span.ruler.value,
            "half": self.span.half.value,
            "ordinal": self.span.ordinal,
        }


def _alert_id(result: PlanetaryHoursResult, span: HourSpan) -> str:
    loc = result.location
    return alert_id_hash(
        f"{result.civil_date.isoformat()}:{span.half.value}:{span.ordinal}:"
        f"{loc.latitude:.4f}:{loc.longitude:.4f}"
    )


def plan_hour_alerts(
    result: PlanetaryHoursResult,
    now: datetime,
    policy: TimeFormatPolicy = CLOCK_24H,
) -> list[HourAlert]:
    """
    Plan alerts for every hour that has not started yet

    Args:
        result: Computed planetary hours
        now: Current instant; spans starting at or before it are skipped
        policy: Format used for the end time in the alert body

    Returns:
        Alerts in chronological order
    """
    now = ensure_utc(now)
    alerts = []
    for span in result.hours:
        if span.start <= now:
            continue
        ruler = span.ruler.value
        alerts.append(
            HourAlert(
                alert_id=_alert_id(result, span),
                title=f"{span_label(span)} - {ruler} Hour",
                body=f"The {ruler} hour begins now and ends at {policy.format(span.end)}",
                fire_at=span.start,
                span=span,
            )
        )
    return alerts


class NotificationScheduler(Protocol):
    """Anything that can hold alerts until they are due."""

    async def schedule(self, alert: HourAlert) -> None: ...

    async def cancel_all(self) -> int: ...

    async def pending(self) -> list[HourAlert]: ...


class InMemoryNotificationScheduler:
    """Scheduler that keeps pending alerts in process memory."""

    def __init__(self):
        self._alerts: dict[str, HourAlert] = {}
        self._lock = asyncio.Lock()

    async def schedule(self, alert: HourAlert) -> None:
        async with self._lock:
            self._alerts[alert.alert_id] = alert

    async def cancel_all(self) -> int:
        async with self._lock:
            count = len(self._alerts)
            self._alerts.clear()
            return count

    async def pending(self) -> list[HourAlert]:
        async with self._lock:
            return sorted(self._alerts.values(), key=lambda a: a.fire_at)


async def schedule_hour_alerts(
    scheduler: NotificationScheduler,
    result: PlanetaryHoursResult,
    now: datetime,
    policy: TimeFormatPolicy = CLOCK_24H,
) -> int:
    """
    Replace all scheduled alerts with those for the upcoming hours of result

    Returns:
        Number of alerts scheduled
    """
    cancelled = await scheduler.cancel_all()
    alerts = plan_hour_alerts(result, now, policy)
    for alert in alerts:
        await scheduler.schedule(alert)

    metrics_collector.record_alerts_planned(len(alerts))
    logger.info(
        f"Scheduled {len(alerts)} hour alerts for {result.civil_date.isoformat()} "
        f"(cancelled {cancelled})"
    )
    return len(alerts)


# Process-wide scheduler used by the API
_scheduler: InMemoryNotificationScheduler | None = None


def get_notification_scheduler() -> InMemoryNotificationScheduler:
    """Get singleton in-memory scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = InMemoryNotificationScheduler()
    return _scheduler


def reset_notification_scheduler() -> None:
    global _scheduler
    _scheduler = None
