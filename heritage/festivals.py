"""
Festival calendar normalization.

Turns the loosely structured holiday document (fixed holidays grouped by
kind, movable festivals with per-year date variants) into a flat list of
events with a stable shape, deduplicated by (name, date) and sorted by date.
Every anomaly in the input degrades to omission; nothing here raises.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Any, Mapping, Optional

from dateutil import parser as dtparser

ISO_DATE_RE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
MONTH_DAY_RE = re.compile(r"([0-9]{2})-([0-9]{2})")

HOLIDAY_GROUP = "non_holidays"
DEFAULT_SOURCE = "india_common"
DEFAULT_NAME = "Event"
HOLIDAY_COLOR = "#18b93f"
FESTIVAL_COLOR = "#ff8a5b"

# Reference year for free-form strings that leave the year out.
_PARSE_REFERENCE_YEAR = 2001


def _format_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def _to_number(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return int(number)


def _parse_free_form(text: str, default_year: Optional[int]) -> Optional[str]:
    year = _to_number(default_year) or _PARSE_REFERENCE_YEAR
    try:
        parsed = dtparser.parse(text, default=datetime(year, 1, 1))
        # Parsing against a second default exposes a missing month or day.
        check = dtparser.parse(text, default=datetime(year, 2, 2))
    except (ValueError, OverflowError):
        return None
    if (parsed.month, parsed.day) != (check.month, check.day):
        return None
    # Calendar fields as written; tz-aware values are not shifted.
    return _format_date(parsed)


def _resolve_string(text: str, default_year: Optional[int]) -> Optional[str]:
    if not text.isascii():
        return None
    if ISO_DATE_RE.fullmatch(text):
        return text
    month_day = MONTH_DAY_RE.fullmatch(text)
    year = _to_number(default_year)
    if month_day and year:
        return f"{year:04d}-{month_day.group(1)}-{month_day.group(2)}"
    return _parse_free_form(text, default_year)


def _resolve_fields(
    fields: Mapping[str, Any], default_year: Optional[int]
) -> Optional[str]:
    month = fields.get("month")
    if month is None:
        return None
    year = _to_number(fields.get("year") or default_year)
    month_index = _to_number(month)
    day = _to_number(fields.get("day") or fields.get("date") or 1)
    if not year or month_index is None or day is None:
        return None
    if 1 <= month_index <= 12:
        month_index -= 1
    # Out-of-range months and days roll over into neighbouring months.
    year += month_index // 12
    try:
        first = date(year, month_index % 12 + 1, 1)
        return _format_date(first + timedelta(days=day - 1))
    except (ValueError, OverflowError):
        return None


def resolve_date(value: Any, default_year: Optional[int] = None) -> Optional[str]:
    """
    Resolve a date given in one of several shapes to ``YYYY-MM-DD``.

    Accepts an ISO string (returned as is), an ``MM-DD`` string combined with
    ``default_year``, any other string understood by ``dateutil``, or a
    mapping with ``year``/``month``/``day`` fields where the month may be 0- or
    1-indexed. Returns ``None`` when the value cannot be resolved.
    """
    if not value:
        return None
    if isinstance(value, str):
        return _resolve_string(value, default_year)
    if isinstance(value, Mapping):
        return _resolve_fields(value, default_year)
    return None


def _classify(meta: Mapping[str, Any]) -> str:
    if meta.get("group") == HOLIDAY_GROUP or meta.get("isHoliday"):
        return "holiday"
    return meta.get("type") or "festival"


def fill_defaults(name: Any, iso_date: str, meta: Mapping[str, Any]) -> dict:
    """Build a canonical event from extracted fields, filling fallbacks."""
    event_type = str(_classify(meta))
    color = meta.get("color") or (
        HOLIDAY_COLOR if event_type == "holiday" else FESTIVAL_COLOR
    )
    return {
        "name": str(name or meta.get("name") or DEFAULT_NAME),
        "date": iso_date,
        "type": event_type,
        "overview": str(meta.get("overview") or meta.get("description") or ""),
        "color": str(color),
        "source": str(meta.get("source") or DEFAULT_SOURCE),
    }


def _fixed_holiday_date(entry: Mapping[str, Any]) -> Optional[str]:
    raw = entry.get("date")
    if isinstance(raw, str):
        return resolve_date(raw, entry.get("year"))
    if entry.get("year") and entry.get("month") is not None and entry.get("day"):
        return resolve_date(
            {"year": entry["year"], "month": entry["month"], "day": entry.get("day")}
        )
    return None


def _variant_date(variant: Mapping[str, Any]) -> Optional[str]:
    raw = variant.get("date")
    year = variant.get("year")
    if isinstance(raw, str) and ISO_DATE_RE.fullmatch(raw):
        return raw
    if year and isinstance(raw, str) and MONTH_DAY_RE.fullmatch(raw):
        return resolve_date(raw, year)
    if year and variant.get("month") is not None and variant.get("day"):
        return resolve_date(
            {"year": year, "month": variant["month"], "day": variant["day"]}
        )
    if isinstance(raw, str):
        return resolve_date(raw, year or None)
    return None


def _fixed_events(section: Any) -> list[dict]:
    events: list[dict] = []
    if not isinstance(section, Mapping):
        return events
    for group, entries in section.items():
        if not isinstance(entries, list):
            continue
        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            iso_date = _fixed_holiday_date(entry)
            if iso_date:
                meta = {**entry, "group": group}
                events.append(fill_defaults(entry.get("name"), iso_date, meta))
    return events


def _movable_events(section: Any) -> list[dict]:
    events: list[dict] = []
    if not isinstance(section, list):
        return events
    for festival in section:
        if not isinstance(festival, Mapping):
            continue
        variants = festival.get("dates")
        if isinstance(variants, list):
            for variant in variants:
                if not isinstance(variant, Mapping):
                    continue
                iso_date = _variant_date(variant)
                if iso_date:
                    meta = {**festival, **variant}
                    events.append(fill_defaults(festival.get("name"), iso_date, meta))
        elif isinstance(festival.get("date"), str):
            iso_date = resolve_date(festival["date"], festival.get("year"))
            if iso_date:
                events.append(fill_defaults(festival.get("name"), iso_date, festival))
    return events


def dedupe_events(events: list[dict]) -> list[dict]:
    """Drop events whose (name, date) pair was already seen."""
    seen: set[tuple[str, str]] = set()
    unique: list[dict] = []
    for event in events:
        key = (event["name"], event["date"])
        if key in seen:
            continue
        seen.add(key)
        unique.append(event)
    return unique


def flatten_calendar(document: Any) -> list[dict]:
    """
    Flatten a raw calendar document into sorted, deduplicated events.

    Args:
        document: The decoded calendar document with optional
            ``fixed_holidays`` and ``movable_festivals`` sections.

    Returns:
        list[dict]: Events with ``name``, ``date``, ``type``, ``overview``,
            ``color`` and ``source`` keys, ascending by date. Empty when the
            document is not a mapping.
    """
    if not isinstance(document, Mapping):
        return []
    events = _fixed_events(document.get("fixed_holidays"))
    events.extend(_movable_events(document.get("movable_festivals")))
    return sorted(dedupe_events(events), key=lambda event: event["date"])
