from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from app.services.notification_service import (
    InMemoryNotificationScheduler,
    plan_hour_alerts,
    schedule_hour_alerts,
)
from modules.planetary_hours import GeoLocation, compute
from modules.planetary_hours.formatting import CLOCK_12H

UTC = timezone.utc


@pytest.fixture
def sunday(sunday_window):
    return compute(date(2024, 1, 7), GeoLocation(40.7128, -74.006), sunday_window)


def test_plans_only_hours_that_have_not_started(sunday):
    # 10:00 is the start of the 5th hour; it has started, so the 6th is first
    alerts = plan_hour_alerts(sunday, datetime(2024, 1, 7, 10, 0, tzinfo=UTC))

    assert len(alerts) == 19
    first = alerts[0]
    assert first.span.ordinal == 6
    assert first.fire_at == datetime(2024, 1, 7, 11, 0, tzinfo=UTC)
    assert first.title == "6th Solar Hour - Jupiter Hour"
    assert first.body == "The Jupiter hour begins now and ends at 12:00:00"


def test_before_sunrise_every_hour_is_planned(sunday):
    alerts = plan_hour_alerts(sunday, datetime(2024, 1, 7, 0, 0, tzinfo=UTC), CLOCK_12H)
    assert len(alerts) == 24
    assert alerts[-1].title == "12th Lunar Hour - Mercury Hour"
    assert alerts[-1].body.endswith("06:00 AM")
    assert len({a.alert_id for a in alerts}) == 24


def test_alert_ids_are_stable(sunday):
    now = datetime(2024, 1, 7, 0, 0, tzinfo=UTC)
    assert [a.alert_id for a in plan_hour_alerts(sunday, now)] == [
        a.alert_id for a in plan_hour_alerts(sunday, now)
    ]


def test_alert_to_dict(sunday):
    alert = plan_hour_alerts(sunday, datetime(2024, 1, 7, 17, 30, tzinfo=UTC))[0]
    assert alert.to_dict() == {
        "alert_id": alert.alert_id,
        "title": "1st Lunar Hour - Jupiter Hour",
        "body": "The Jupiter hour begins now and ends at 19:00:00",
        "fire_at": "2024-01-07T18:00:00+00:00",
        "ruler": "Jupiter",
        "half": "lunar",
        "ordinal": 1,
    }


@pytest.mark.asyncio
async def test_schedule_replaces_previous_alerts(sunday):
    scheduler = InMemoryNotificationScheduler()

    count = await schedule_hour_alerts(scheduler, sunday, datetime(2024, 1, 7, 0, tzinfo=UTC))
    assert count == 24

    count = await schedule_hour_alerts(scheduler, sunday, datetime(2024, 1, 8, 4, 30, tzinfo=UTC))
    assert count == 1

    pending = await scheduler.pending()
    assert len(pending) == 1
    assert pending[0].fire_at == datetime(2024, 1, 8, 5, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_nothing_left_after_the_day_ends(sunday):
    scheduler = InMemoryNotificationScheduler()
    count = await schedule_hour_alerts(scheduler, sunday, datetime(2024, 1, 8, 6, 0, tzinfo=UTC))
    assert count == 0
    assert await scheduler.pending() == []
