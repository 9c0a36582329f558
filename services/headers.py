# services/headers.py
from __future__ import annotations

import enum
import logging
import re
from typing import Any, Dict, Iterable, Mapping, Sequence, Tuple


logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


class Field(enum.Enum):
    EVENT_NAME = "event_name"
    TITLE = "title"
    HEADLINE = "headline"
    BODY_COPY = "body_copy"
    SUBTITLE = "subtitle"
    DATE = "date"
    TIME = "time"
    SEEN = "seen"
    UNSEEN = "unseen"
    AUDIENCE = "audience"
    SOLD_OUT = "sold_out"
    CONFIRMED = "confirmed"
    AVAILABLE_SLOTS = "available_slots"


# Aliases are compared after normalize_header, so "event name" and "eventname" are the same alias.
HEADER_ALIASES: Dict[Field, Tuple[str, ...]] = {
    Field.EVENT_NAME: ("eventname", "eventname:", "event", "event name", "name", "notification", "label"),
    Field.TITLE: ("title",),
    Field.HEADLINE: ("headline",),
    Field.BODY_COPY: ("body", "bodytext", "body_text", "bodycopy", "copy", "description"),
    Field.SUBTITLE: ("subtitle", "datetime", "sentat"),
    Field.DATE: ("date", "eventdate"),
    Field.TIME: ("time", "timeist", "time_ist", "eventtime"),
    Field.SEEN: ("seen", "views", "opened"),
    Field.UNSEEN: ("unseen", "notseen", "unopened", "delivered"),
    Field.AUDIENCE: ("audience", "segment", "country", "region"),
    Field.SOLD_OUT: ("soldout", "sold out", "issoldout", "sold"),
    Field.CONFIRMED: (
        "confirmedbooking", "confirmed bookings", "confirmed booking",
        "confirmed", "bookings", "booking",
    ),
    Field.AVAILABLE_SLOTS: ("availableslots", "available slots", "slots", "availableslot"),
}

HeaderMap = Dict[Field, int]


def normalize_header(h: Any) -> str:
    """Trim, lower-case and drop all whitespace, so "Event   Name " == "eventname"."""
    if h is None:
        return ""
    return _WHITESPACE_RE.sub("", str(h).strip().lower())


def merge_aliases(
    extra: Mapping[str, Iterable[str]] | None,
    base: Mapping[Field, Sequence[str]] = HEADER_ALIASES,
) -> Dict[Field, Tuple[str, ...]]:
    """
    Append configured aliases to the built-in table.

    `extra` is keyed by field value (e.g. "event_name"); unknown keys are logged and skipped.
    """
    merged = {field: tuple(aliases) for field, aliases in base.items()}
    for key, aliases in (extra or {}).items():
        try:
            field = Field(key)
        except ValueError:
            logger.warning(f"Ignoring header aliases for unknown field '{key}'")
            continue
        if isinstance(aliases, str):
            aliases = [aliases]
        merged[field] = merged.get(field, ()) + tuple(str(a) for a in aliases)
    return merged


def resolve_headers(
    headers: Sequence[Any],
    aliases: Mapping[Field, Sequence[str]] = HEADER_ALIASES,
) -> HeaderMap:
    """
    Map each semantic field to the index of the first column whose header matches one of its aliases.

    Unmatched fields are left out of the result. When two columns normalize to an accepted
    alias, the leftmost one wins.
    """
    normalized = [normalize_header(h) for h in headers]
    resolved: HeaderMap = {}
    for field, candidates in aliases.items():
        wanted = {normalize_header(c) for c in candidates}
        wanted.discard("")
        for idx, key in enumerate(normalized):
            if key and key in wanted:
                resolved[field] = idx
                break
    return resolved
