"""Normalisation of raw spoken slot values."""
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .schemas import Intent, Period

MAX_KIDS = 6

NEGATIVE_WORDS = [
    "reduce",
    "remove",
    "minus",
    "subtract",
    "deduct",
    "take away",
    "takeaway",
    "take off",
    "lower",
]

NUMBER_WORDS = {
    "zero": 0,
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "thirteen": 13,
    "fourteen": 14,
    "fifteen": 15,
    "sixteen": 16,
    "seventeen": 17,
    "eighteen": 18,
    "nineteen": 19,
    "twenty": 20,
}

_LEADING_INT = re.compile(r"^\s*[-+]?(\d+)")
_POSSESSIVE = re.compile(r"['’]s?$")
_AND_WORD = re.compile(r"\band\b", re.IGNORECASE)


def slot_value(intent: Optional[Intent], name: str) -> Optional[str]:
    """Prefer the entity-resolved name, then the raw spoken value."""

    if intent is None:
        return None
    slot = intent.slots.get(name)
    if slot is None:
        return None
    if slot.resolutions:
        for resolution in slot.resolutions.resolutions_per_authority:
            for wrapper in resolution.values:
                if wrapper.value and wrapper.value.name:
                    return wrapper.value.name
    return slot.value or None


def _clean_name(raw: str) -> str:
    text = " ".join(raw.strip().split())
    return _POSSESSIVE.sub("", text).strip()


def match_person(raw: Optional[str], kids: Iterable[str]) -> Optional[str]:
    if not raw:
        return None
    key = _clean_name(raw).casefold()
    if not key:
        return None
    for kid in kids:
        if kid.casefold() == key:
            return kid
    return None


def parse_amount(raw: Optional[str]) -> int:
    if raw is None:
        return 1
    text = str(raw).strip().lower()
    match = _LEADING_INT.match(text)
    if match:
        value = int(match.group(1))
    else:
        value = NUMBER_WORDS.get(text.split(" ")[0], 1) if text else 1
    return max(1, abs(value))


def is_amount(raw: Optional[str]) -> bool:
    """True when ``raw`` carries a number ``parse_amount`` can read."""

    if not raw:
        return False
    text = str(raw).strip().lower()
    return bool(_LEADING_INT.match(text)) or text.split(" ")[0] in NUMBER_WORDS


def is_negative_direction(raw: Optional[str]) -> bool:
    if not raw:
        return False
    text = raw.lower()
    return any(word in text for word in NEGATIVE_WORDS)


def signed_delta(raw_delta: Optional[str], raw_direction: Optional[str]) -> int:
    amount = parse_amount(raw_delta)
    return -amount if is_negative_direction(raw_direction) else amount


def parse_kid_list(text: Optional[str]) -> List[str]:
    if not text:
        return []
    normalised = _AND_WORD.sub(",", text.replace("&", ","))
    kids: List[str] = []
    seen = set()
    for token in normalised.split(","):
        name = " ".join(token.split()).title()
        if not name or name.casefold() in seen:
            continue
        seen.add(name.casefold())
        kids.append(name)
        if len(kids) == MAX_KIDS:
            break
    return kids


def parse_period(raw: Optional[str]) -> Period:
    text = (raw or "").lower()
    if "week" in text:
        return Period.WEEK
    if "month" in text:
        return Period.MONTH
    return Period.TODAY
