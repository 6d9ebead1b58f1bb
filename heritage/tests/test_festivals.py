import unittest

from heritage.festivals import (
    FESTIVAL_COLOR,
    HOLIDAY_COLOR,
    dedupe_events,
    fill_defaults,
    flatten_calendar,
    resolve_date,
)


class ResolveDateTests(unittest.TestCase):
    def test_iso_string_is_returned_unchanged(self):
        for value in ["2025-01-26", "1999-12-31", "2024-02-29"]:
            self.assertEqual(resolve_date(value), value)

    def test_iso_pattern_is_not_calendar_checked(self):
        self.assertEqual(resolve_date("2025-13-45"), "2025-13-45")

    def test_month_day_uses_default_year(self):
        self.assertEqual(resolve_date("01-26", 2025), "2025-01-26")
        self.assertEqual(resolve_date("11-01", "2024"), "2024-11-01")

    def test_empty_values_are_unresolvable(self):
        self.assertIsNone(resolve_date(None))
        self.assertIsNone(resolve_date(""))
        self.assertIsNone(resolve_date({}))

    def test_free_form_string_is_parsed(self):
        self.assertEqual(resolve_date("March 10, 2025"), "2025-03-10")
        self.assertEqual(resolve_date("2025/3/9"), "2025-03-09")

    def test_free_form_string_keeps_written_calendar_fields(self):
        self.assertEqual(resolve_date("2025-03-10T23:30:00-08:00"), "2025-03-10")
        self.assertEqual(resolve_date("2025-03-10T01:00:00+05:30"), "2025-03-10")

    def test_free_form_string_without_year_uses_default_year(self):
        self.assertEqual(resolve_date("March 10", 2030), "2030-03-10")

    def test_unparseable_string_is_unresolvable(self):
        self.assertIsNone(resolve_date("not-a-date"))
        self.assertIsNone(resolve_date("Bad"))

    def test_non_ascii_digits_are_unresolvable(self):
        self.assertIsNone(resolve_date("٢٠٢٥-٠١-٢٦"))
        self.assertIsNone(resolve_date("２０２５-01-26"))
        self.assertIsNone(resolve_date("٠١-٢٦", 2025))

    def test_string_missing_month_or_day_is_unresolvable(self):
        self.assertIsNone(resolve_date("10:00"))
        self.assertIsNone(resolve_date("Monday"))
        self.assertIsNone(resolve_date("March 2025"))
        self.assertIsNone(resolve_date("2025"))

    def test_month_day_pads_short_default_year(self):
        self.assertEqual(resolve_date("03-10", 24), "0024-03-10")

    def test_structured_month_one_and_zero_indexed_agree(self):
        for month in range(1, 13):
            one_indexed = resolve_date({"year": 2025, "month": month, "day": 5})
            zero_indexed = resolve_date({"year": 2025, "month": month - 1, "day": 5})
            self.assertEqual(one_indexed, zero_indexed)
            self.assertEqual(one_indexed, f"2025-{month:02d}-05")

    def test_structured_day_falls_back_to_date_then_one(self):
        self.assertEqual(resolve_date({"year": 2025, "month": 3, "date": 7}), "2025-03-07")
        self.assertEqual(resolve_date({"year": 2025, "month": 3}), "2025-03-01")

    def test_structured_uses_default_year(self):
        self.assertEqual(resolve_date({"month": 8, "day": 15}, 2026), "2026-08-15")

    def test_structured_day_overflow_rolls_over(self):
        self.assertEqual(resolve_date({"year": 2025, "month": 2, "day": 30}), "2025-03-02")
        self.assertEqual(resolve_date({"year": 2025, "month": -1, "day": 1}), "2024-12-01")

    def test_structured_without_month_or_year_is_unresolvable(self):
        self.assertIsNone(resolve_date({"year": 2025, "day": 3}))
        self.assertIsNone(resolve_date({"month": 3, "day": 3}))
        self.assertIsNone(resolve_date({"year": 2025, "month": "abc"}))

    def test_other_shapes_are_unresolvable(self):
        self.assertIsNone(resolve_date(20250126))
        self.assertIsNone(resolve_date(["2025-01-26"]))


class FillDefaultsTests(unittest.TestCase):
    def test_defaults(self):
        event = fill_defaults(None, "2025-01-01", {})
        self.assertEqual(
            event,
            {
                "name": "Event",
                "date": "2025-01-01",
                "type": "festival",
                "overview": "",
                "color": FESTIVAL_COLOR,
                "source": "india_common",
            },
        )

    def test_holiday_color_and_description_fallback(self):
        event = fill_defaults("X", "2025-01-01", {"isHoliday": True, "description": "d"})
        self.assertEqual(event["type"], "holiday")
        self.assertEqual(event["color"], HOLIDAY_COLOR)
        self.assertEqual(event["overview"], "d")

    def test_supplied_values_win(self):
        meta = {"type": "harvest", "color": "#000", "source": "state", "overview": "o"}
        event = fill_defaults("X", "2025-01-01", meta)
        self.assertEqual(event["type"], "harvest")
        self.assertEqual(event["color"], "#000")
        self.assertEqual(event["source"], "state")
        self.assertEqual(event["overview"], "o")


class FlattenCalendarTests(unittest.TestCase):
    def test_holidays_group_defaults_to_festival(self):
        doc = {"fixed_holidays": {"holidays": [{"name": "Republic Day", "date": "2025-01-26"}]}}
        events = flatten_calendar(doc)
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0]["name"], "Republic Day")
        self.assertEqual(events[0]["date"], "2025-01-26")
        self.assertEqual(events[0]["type"], "festival")

    def test_non_holidays_group_is_holiday(self):
        doc = {"fixed_holidays": {"non_holidays": [{"name": "X", "date": "2025-03-10"}]}}
        events = flatten_calendar(doc)
        self.assertEqual(events[0]["type"], "holiday")
        self.assertEqual(events[0]["color"], HOLIDAY_COLOR)

    def test_every_group_is_read(self):
        doc = {
            "fixed_holidays": {
                "regional": [{"name": "Onam", "date": "2025-09-05", "type": "regional"}],
                "holidays": [{"name": "Holi", "date": "2025-03-14", "isHoliday": True}],
            }
        }
        events = flatten_calendar(doc)
        self.assertEqual([e["name"] for e in events], ["Holi", "Onam"])
        self.assertEqual(events[0]["type"], "holiday")
        self.assertEqual(events[1]["type"], "regional")

    def test_fixed_holiday_with_structured_fields(self):
        doc = {"fixed_holidays": {"holidays": [{"name": "I-Day", "year": 2025, "month": 8, "day": 15}]}}
        self.assertEqual(flatten_calendar(doc)[0]["date"], "2025-08-15")

    def test_fixed_holiday_structured_fields_require_day(self):
        doc = {"fixed_holidays": {"holidays": [{"name": "M", "year": 2025, "month": 3}]}}
        self.assertEqual(flatten_calendar(doc), [])
        doc["fixed_holidays"]["holidays"][0]["day"] = 5
        self.assertEqual(flatten_calendar(doc)[0]["date"], "2025-03-05")

    def test_non_ascii_dates_are_dropped(self):
        doc = {
            "fixed_holidays": {"holidays": [{"name": "Republic Day", "date": "٢٠٢٥-٠١-٢٦"}]},
            "movable_festivals": [{"name": "Diwali", "dates": [{"date": "٢٠٢٥-١٠-٢٠"}]}],
        }
        self.assertEqual(flatten_calendar(doc), [])

    def test_movable_festival_variants(self):
        doc = {
            "movable_festivals": [
                {
                    "name": "Diwali",
                    "dates": [
                        {"year": 2025, "date": "10-20"},
                        {"year": 2024, "date": "11-01"},
                    ],
                }
            ]
        }
        events = flatten_calendar(doc)
        self.assertEqual([e["date"] for e in events], ["2024-11-01", "2025-10-20"])
        self.assertTrue(all(e["name"] == "Diwali" for e in events))

    def test_variant_resolution_priority(self):
        doc = {
            "movable_festivals": [
                {
                    "name": "Pongal",
                    "dates": [
                        {"date": "2023-01-15"},
                        {"year": 2024, "month": 1, "day": 15},
                        {"year": 2025, "date": "January 14"},
                        {"date": "not-a-date"},
                    ],
                }
            ]
        }
        dates = [e["date"] for e in flatten_calendar(doc)]
        self.assertEqual(dates, ["2023-01-15", "2024-01-15", "2025-01-14"])

    def test_variant_metadata_overrides_festival(self):
        doc = {
            "movable_festivals": [
                {
                    "name": "Eid",
                    "overview": "parent",
                    "color": "#111",
                    "dates": [
                        {"year": 2025, "date": "03-31", "overview": "variant"},
                        {"year": 2026, "date": "03-20"},
                    ],
                }
            ]
        }
        first, second = flatten_calendar(doc)
        self.assertEqual(first["overview"], "variant")
        self.assertEqual(first["color"], "#111")
        self.assertEqual(second["overview"], "parent")

    def test_movable_festival_with_single_date(self):
        doc = {"movable_festivals": [{"name": "Ugadi", "date": "2025-03-30"}]}
        events = flatten_calendar(doc)
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0]["date"], "2025-03-30")

    def test_duplicates_keep_first(self):
        doc = {
            "fixed_holidays": {
                "holidays": [
                    {"name": "Holi", "date": "2025-03-14", "overview": "first"},
                    {"name": "Holi", "date": "2025-03-14", "overview": "second"},
                ]
            },
            "movable_festivals": [{"name": "Holi", "dates": [{"date": "2025-03-14"}]}],
        }
        events = flatten_calendar(doc)
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0]["overview"], "first")

    def test_unresolvable_entry_is_dropped(self):
        doc = {"fixed_holidays": {"holidays": [{"name": "Bad", "date": "not-a-date"}]}}
        self.assertEqual(flatten_calendar(doc), [])

    def test_malformed_sections_contribute_nothing(self):
        self.assertEqual(flatten_calendar({"fixed_holidays": ["x"], "movable_festivals": {}}), [])
        self.assertEqual(flatten_calendar({"fixed_holidays": {"holidays": "x"}}), [])
        doc = {
            "fixed_holidays": {"holidays": [None, 3, {"name": "A", "date": "2025-01-01"}]},
            "movable_festivals": [None, {"name": "B", "dates": [None, "x"]}],
        }
        self.assertEqual([e["name"] for e in flatten_calendar(doc)], ["A"])

    def test_non_mapping_document_yields_empty(self):
        for document in [None, 3, "calendar", [1, 2]]:
            self.assertEqual(flatten_calendar(document), [])

    def test_output_is_sorted_unique_and_deterministic(self):
        doc = {
            "fixed_holidays": {
                "holidays": [
                    {"name": "Christmas", "date": "2025-12-25"},
                    {"name": "New Year", "date": "2025-01-01"},
                ],
                "non_holidays": [{"name": "Christmas", "date": "2025-12-25"}],
            },
            "movable_festivals": [
                {"name": "Holi", "dates": [{"year": 2025, "date": "03-14"}, {"year": 2024, "date": "03-25"}]}
            ],
        }
        events = flatten_calendar(doc)
        dates = [e["date"] for e in events]
        self.assertEqual(dates, sorted(dates))
        keys = [(e["name"], e["date"]) for e in events]
        self.assertEqual(len(keys), len(set(keys)))
        self.assertEqual(flatten_calendar(doc), events)

    def test_input_document_is_not_mutated(self):
        variant = {"year": 2025, "date": "10-20"}
        doc = {"movable_festivals": [{"name": "Diwali", "dates": [variant]}]}
        flatten_calendar(doc)
        self.assertEqual(variant, {"year": 2025, "date": "10-20"})

    def test_dedupe_events_preserves_order(self):
        events = [
            {"name": "A", "date": "2025-01-02"},
            {"name": "B", "date": "2025-01-01"},
            {"name": "A", "date": "2025-01-02"},
        ]
        self.assertEqual([e["name"] for e in dedupe_events(events)], ["A", "B"])


if __name__ == "__main__":
    unittest.main()
