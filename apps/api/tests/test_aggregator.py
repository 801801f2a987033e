import unittest
from datetime import date
from zoneinfo import ZoneInfo

from points_skill.aggregator import (
    build_totals,
    date_labels,
    local_now,
    window_dates,
    window_totals,
)
from points_skill.schemas import Period, PointEvent


def _event(day: str, person: str, delta: int) -> PointEvent:
    return PointEvent(timestamp=f"{day}T10:00:00+02:00", date=day, person=person, delta=delta)


class WindowDatesTests(unittest.TestCase):
    def test_today_window_is_three_days(self):
        dates = window_dates(date(2026, 10, 17), Period.TODAY)
        self.assertEqual(dates, [date(2026, 10, 15), date(2026, 10, 16), date(2026, 10, 17)])

    def test_week_window_is_seven_days(self):
        dates = window_dates(date(2026, 3, 3), Period.WEEK)
        self.assertEqual(len(dates), 7)
        self.assertEqual(dates[0], date(2026, 2, 25))
        self.assertEqual(dates[-1], date(2026, 3, 3))

    def test_month_window_starts_on_the_first(self):
        dates = window_dates(date(2026, 10, 17), Period.MONTH)
        self.assertEqual(len(dates), 17)
        self.assertEqual(dates[0], date(2026, 10, 1))
        self.assertEqual(dates[-1], date(2026, 10, 17))

    def test_month_window_on_the_first_is_one_day(self):
        self.assertEqual(window_dates(date(2026, 11, 1), Period.MONTH), [date(2026, 11, 1)])

    def test_month_window_across_dst_change_counts_calendar_days(self):
        # Europe/Oslo leaves summer time on 2026-10-25.
        dates = window_dates(date(2026, 10, 31), Period.MONTH)
        self.assertEqual(len(dates), 31)
        self.assertEqual(len(set(dates)), 31)

    def test_labels(self):
        self.assertEqual(date_labels([date(2026, 10, 1), date(2026, 9, 30)]), ["Oct 1", "Sep 30"])

    def test_local_now_uses_family_timezone(self):
        now = local_now(ZoneInfo("Pacific/Kiritimati"))
        self.assertEqual(now.utcoffset().total_seconds(), 14 * 3600)


class BuildTotalsTests(unittest.TestCase):
    def setUp(self):
        self.dates = window_dates(date(2026, 10, 17), Period.TODAY)
        self.persons = ["Krish", "Adith"]

    def test_missing_pairs_default_to_zero(self):
        totals = build_totals([], self.dates, self.persons)
        self.assertEqual(set(totals), {"2026-10-15", "2026-10-16", "2026-10-17"})
        for day_totals in totals.values():
            self.assertEqual(day_totals, {"Krish": 0, "Adith": 0})

    def test_sums_signed_deltas_and_collapses_case(self):
        events = [
            _event("2026-10-17", "Krish", 2),
            _event("2026-10-17", "KRISH", 1),
            _event("2026-10-17", "krish", -4),
            _event("2026-10-16", "Adith", 3),
        ]
        totals = build_totals(events, self.dates, self.persons)
        self.assertEqual(totals["2026-10-17"]["Krish"], -1)
        self.assertEqual(totals["2026-10-16"]["Adith"], 3)
        self.assertEqual(totals["2026-10-15"], {"Krish": 0, "Adith": 0})

    def test_ignores_out_of_range_and_unknown_people(self):
        events = [
            _event("2026-10-14", "Krish", 10),
            _event("2026-10-17", "Grandma", 5),
            _event("not-a-date", "Krish", 5),
        ]
        totals = build_totals(events, self.dates, self.persons)
        self.assertTrue(all(value == 0 for day in totals.values() for value in day.values()))
        self.assertNotIn("Grandma", totals["2026-10-17"])

    def test_is_idempotent(self):
        events = [_event("2026-10-17", "Krish", 2), _event("2026-10-15", "Adith", -1)]
        first = build_totals(events, self.dates, self.persons)
        second = build_totals(events, self.dates, self.persons)
        self.assertEqual(first, second)

    def test_window_totals_sum_across_dates(self):
        events = [
            _event("2026-10-15", "Krish", 2),
            _event("2026-10-16", "Krish", 3),
            _event("2026-10-17", "Adith", -1),
        ]
        totals = build_totals(events, self.dates, self.persons)
        self.assertEqual(window_totals(totals, self.dates, self.persons), {"Krish": 5, "Adith": -1})


if __name__ == "__main__":
    unittest.main()
