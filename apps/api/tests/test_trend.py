from __future__ import annotations

import math
from datetime import date

from points_skill.aggregator import build_totals, date_labels, window_dates
from points_skill.schemas import Period, PointEvent
from points_skill.trend import (
    MAX_BAR_HEIGHT,
    NEGATIVE_COLOR,
    POSITIVE_COLOR,
    SPARKLINE_HEIGHT,
    build_trend_payload,
    layout_for,
    scaled_height,
    visible_labels,
)

PERSONS = ["Krish", "Adith"]


def _payload(period: Period, events, today: date = date(2026, 10, 17)):
    dates = window_dates(today, period)
    totals = build_totals(events, dates, PERSONS)
    return dates, build_trend_payload(dates, date_labels(dates), totals, PERSONS, title="Trend")


def _event(day: str, person: str, delta: int) -> PointEvent:
    return PointEvent(timestamp=f"{day}T12:00:00+02:00", date=day, person=person, delta=delta)


def test_bar_heights_scale_against_max_abs_value() -> None:
    events = [
        _event("2026-10-15", "Krish", 4),
        _event("2026-10-16", "Adith", -2),
        _event("2026-10-17", "Krish", 1),
    ]
    _, payload = _payload(Period.TODAY, events)
    krish, adith = payload["people"]
    assert [bar["height"] for bar in krish["bars"]] == [200, 0, 50]
    assert [bar["height"] for bar in adith["bars"]] == [0, 100, 0]
    assert adith["bars"][1]["color"] == NEGATIVE_COLOR
    assert adith["bars"][0]["color"] == POSITIVE_COLOR
    assert krish["total"] == 5
    assert payload["summary"] == ["Krish: +5", "Adith: -2"]


def test_all_zero_values_do_not_divide_by_zero() -> None:
    _, payload = _payload(Period.WEEK, [])
    heights = [bar["height"] for person in payload["people"] for bar in person["bars"]]
    assert heights == [0] * 14
    assert payload["sparkline"]["max"] == 1


def test_heights_stay_within_bounds() -> None:
    events = [_event(f"2026-10-{day:02d}", "Krish" if day % 2 else "Adith", (day * 7) % 11 - 5) for day in range(1, 18)]
    _, payload = _payload(Period.MONTH, events)
    values = [abs(bar["value"]) for person in payload["people"] for bar in person["bars"]]
    max_abs = max(values)
    for person in payload["people"]:
        for bar in person["bars"]:
            assert 0 <= bar["height"] <= MAX_BAR_HEIGHT
            assert bar["height"] == math.floor(abs(bar["value"]) / max_abs * MAX_BAR_HEIGHT + 0.5)
    for point in payload["sparkline"]["points"]:
        assert 0 <= point["height"] <= SPARKLINE_HEIGHT


def test_sparkline_combines_people_per_date() -> None:
    events = [
        _event("2026-10-17", "Krish", 3),
        _event("2026-10-17", "Adith", -1),
        _event("2026-10-16", "Adith", 4),
    ]
    _, payload = _payload(Period.TODAY, events)
    points = payload["sparkline"]["points"]
    assert [point["value"] for point in points] == [0, 4, 2]
    assert payload["sparkline"]["max"] == 4
    assert [point["height"] for point in points] == [0, 60, 30]


def test_scaled_height_rounds_half_up() -> None:
    assert scaled_height(1, 8, 200) == 25
    assert scaled_height(1, 400, 200) == 1
    assert scaled_height(1, 8, 4) == 1
    assert scaled_height(-3, 3, 60) == 60


def test_label_thinning_for_long_windows() -> None:
    assert visible_labels(7) == [True] * 7
    shown = visible_labels(17)
    # ceil(17 / 5) == 4
    assert [index for index, flag in enumerate(shown) if flag] == [0, 4, 8, 12, 16]
    shown = visible_labels(10)
    assert [index for index, flag in enumerate(shown) if flag] == [0, 2, 4, 6, 8, 9]


def test_layout_tiers() -> None:
    assert layout_for(3) == {"barWidth": 48, "barSpacing": 16}
    assert layout_for(7) == {"barWidth": 32, "barSpacing": 10}
    assert layout_for(14) == {"barWidth": 18, "barSpacing": 6}
    assert layout_for(31) == {"barWidth": 10, "barSpacing": 3}


def test_month_payload_covers_exact_window() -> None:
    dates, payload = _payload(Period.MONTH, [])
    labels = [bar["label"] for bar in payload["people"][0]["bars"]]
    assert len(labels) == len(dates) == 17
    assert labels[0] == "Oct 1"
    assert labels[-1] == "Oct 17"
    assert payload["subtitle"] == "Oct 1 – Oct 17"
    assert payload["title"] == "Trend"
