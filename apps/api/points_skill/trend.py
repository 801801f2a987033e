"""Chart-ready trend payload for devices with a screen."""
from __future__ import annotations

import math
from datetime import date
from typing import Any, Dict, List, Sequence

from .aggregator import Totals, date_label

MAX_BAR_HEIGHT = 200
SPARKLINE_HEIGHT = 60
MAX_VISIBLE_LABELS = 5
NEGATIVE_COLOR = "#D9480F"
POSITIVE_COLOR = "#2F9E44"

# (max date count, bar width, bar spacing)
LAYOUT_TIERS = [
    (3, 48, 16),
    (7, 32, 10),
    (14, 18, 6),
]
WIDE_LAYOUT = (10, 3)


def scaled_height(value: int, max_abs: int, scale: int) -> int:
    # Half-up, not banker's rounding.
    return int(math.floor(abs(value) / max(1, max_abs) * scale + 0.5))


def bar_color(value: int) -> str:
    return NEGATIVE_COLOR if value < 0 else POSITIVE_COLOR


def visible_labels(count: int) -> List[bool]:
    if count <= 7:
        return [True] * count
    step = math.ceil(count / MAX_VISIBLE_LABELS)
    return [index % step == 0 or index == count - 1 for index in range(count)]


def layout_for(count: int) -> Dict[str, int]:
    for limit, width, spacing in LAYOUT_TIERS:
        if count <= limit:
            return {"barWidth": width, "barSpacing": spacing}
    width, spacing = WIDE_LAYOUT
    return {"barWidth": width, "barSpacing": spacing}


def _signed(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


def build_trend_payload(
    dates: Sequence[date],
    labels: Sequence[str],
    totals: Totals,
    persons: Sequence[str],
    *,
    title: str,
) -> Dict[str, Any]:
    keys = [day.isoformat() for day in dates]
    series = {
        person: [totals.get(key, {}).get(person, 0) for key in keys] for person in persons
    }
    max_abs = max([1] + [abs(value) for values in series.values() for value in values])
    shown = visible_labels(len(keys))

    people = []
    for person in persons:
        values = series[person]
        people.append(
            {
                "name": person,
                "total": sum(values),
                "bars": [
                    {
                        "label": labels[index],
                        "showLabel": shown[index],
                        "value": value,
                        "height": scaled_height(value, max_abs, MAX_BAR_HEIGHT),
                        "color": bar_color(value),
                    }
                    for index, value in enumerate(values)
                ],
            }
        )

    combined = [sum(series[person][index] for person in persons) for index in range(len(keys))]
    spark_max = max([1] + [abs(value) for value in combined])
    sparkline = {
        "max": spark_max,
        "points": [
            {
                "label": labels[index],
                "showLabel": shown[index],
                "value": value,
                "height": scaled_height(value, spark_max, SPARKLINE_HEIGHT),
                "color": bar_color(value),
            }
            for index, value in enumerate(combined)
        ],
    }

    subtitle = ""
    if dates:
        subtitle = f"{date_label(dates[0])} – {date_label(dates[-1])}"

    return {
        "title": title,
        "subtitle": subtitle,
        "layout": layout_for(len(keys)),
        "people": people,
        "sparkline": sparkline,
        "summary": [f"{entry['name']}: {_signed(entry['total'])}" for entry in people],
    }
