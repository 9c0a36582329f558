# services/normalizer.py
"""
Turn worksheet rows into chart-ready data.

Each sheet's header row is resolved once (services.headers), every data row is
converted into a NormalizedRow plus its marketing text, and blank rows are
dropped. Sheets are concatenated in workbook order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from openpyxl.utils.datetime import WINDOWS_EPOCH

from services.coercion import cell_text, format_date_part, format_time_part, to_bool, to_num
from services.excel import OpenPyXLFileHandler
from services.headers import HEADER_ALIASES, Field, HeaderMap, resolve_headers


logger = logging.getLogger(__name__)

Number = Union[int, float]


@dataclass
class NormalizedRow:
    body: str
    subtitle: str
    seen: Number
    unseen: Number
    audience: str
    soldOut: Optional[bool] = None
    confirmed: Optional[Number] = None
    availableSlots: Optional[Number] = None

    def to_dict(self) -> Dict[str, Any]:
        # untracked optional fields are left out rather than sent as null
        out: Dict[str, Any] = {
            "body": self.body,
            "subtitle": self.subtitle,
            "seen": self.seen,
            "unseen": self.unseen,
            "audience": self.audience,
        }
        for key in ("soldOut", "confirmed", "availableSlots"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        return out

    def is_blank(self) -> bool:
        return not (self.body or self.seen or self.unseen or self.subtitle or self.audience)


@dataclass
class SheetResult:
    """Rows and index-aligned marketing text from one worksheet (or several, merged)."""
    rows: List[NormalizedRow] = field(default_factory=list)
    titles: List[str] = field(default_factory=list)
    headlines: List[str] = field(default_factory=list)
    bodies: List[str] = field(default_factory=list)

    def extend(self, other: "SheetResult") -> None:
        self.rows.extend(other.rows)
        self.titles.extend(other.titles)
        self.headlines.extend(other.headlines)
        self.bodies.extend(other.bodies)


@dataclass
class ParsedWorkbook(SheetResult):
    sheet_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def line_labels(self) -> List[str]:
        return [r.body for r in self.rows]

    @property
    def line_seen(self) -> List[Number]:
        return [r.seen for r in self.rows]

    def to_payload(self, file_name: str) -> Dict[str, Any]:
        return {
            "ok": True,
            "file": file_name,
            "ROWS": [r.to_dict() for r in self.rows],
            "TITLES": list(self.titles),
            "HEADLINES": list(self.headlines),
            "BODIES": list(self.bodies),
            "LINE_LABELS": self.line_labels,
            "LINE_SEEN": self.line_seen,
        }


def _cell(row: Sequence[Any], header_map: HeaderMap, fld: Field) -> Any:
    idx = header_map.get(fld)
    if idx is None or idx >= len(row):
        return None
    return row[idx]


def _text(row: Sequence[Any], header_map: HeaderMap, fld: Field) -> str:
    return cell_text(_cell(row, header_map, fld))


def build_subtitle(row: Sequence[Any], header_map: HeaderMap, epoch: datetime = WINDOWS_EPOCH) -> str:
    """A direct subtitle column wins; otherwise "<date> <time>" from whichever parts exist."""
    subtitle = _text(row, header_map, Field.SUBTITLE)
    if subtitle:
        return subtitle

    d_part = format_date_part(_cell(row, header_map, Field.DATE), epoch) if Field.DATE in header_map else ""
    t_part = format_time_part(_cell(row, header_map, Field.TIME)) if Field.TIME in header_map else ""
    return " ".join(p for p in (d_part, t_part) if p)


def extract_row(row: Sequence[Any], header_map: HeaderMap, epoch: datetime = WINDOWS_EPOCH) -> NormalizedRow:
    return NormalizedRow(
        body=_text(row, header_map, Field.EVENT_NAME),
        subtitle=build_subtitle(row, header_map, epoch),
        seen=to_num(_cell(row, header_map, Field.SEEN)),
        unseen=to_num(_cell(row, header_map, Field.UNSEEN)),
        audience=_text(row, header_map, Field.AUDIENCE),
        soldOut=to_bool(_cell(row, header_map, Field.SOLD_OUT)) if Field.SOLD_OUT in header_map else None,
        confirmed=to_num(_cell(row, header_map, Field.CONFIRMED)) if Field.CONFIRMED in header_map else None,
        availableSlots=(
            to_num(_cell(row, header_map, Field.AVAILABLE_SLOTS)) if Field.AVAILABLE_SLOTS in header_map else None
        ),
    )


def extract_sheet(
    headers: Sequence[Any],
    rows: Sequence[Sequence[Any]],
    epoch: datetime = WINDOWS_EPOCH,
    aliases: Mapping[Field, Sequence[str]] = HEADER_ALIASES,
) -> SheetResult:
    """
    Normalize one worksheet given its header row and data rows.

    Blank rows (no name, counts, date or audience) are skipped along with their
    marketing text. Missing text columns contribute "" so all four lists stay
    the same length.
    """
    result = SheetResult()
    if not rows:
        return result

    header_map = resolve_headers(headers, aliases)
    for raw in rows:
        raw = raw or ()
        normalized = extract_row(raw, header_map, epoch)
        if normalized.is_blank():
            continue
        result.rows.append(normalized)
        result.titles.append(_text(raw, header_map, Field.TITLE))
        result.headlines.append(_text(raw, header_map, Field.HEADLINE))
        result.bodies.append(_text(raw, header_map, Field.BODY_COPY))
    return result


def normalize_workbook(
    file_handler: OpenPyXLFileHandler,
    aliases: Mapping[Field, Sequence[str]] = HEADER_ALIASES,
) -> ParsedWorkbook:
    """Run every sheet through extract_sheet and concatenate the results in sheet order."""
    parsed = ParsedWorkbook()
    epoch = file_handler.epoch
    for sheet_name, headers, rows in file_handler.iter_sheets(header_row=1):
        sheet_result = extract_sheet(headers, rows, epoch=epoch, aliases=aliases)
        logger.debug(f"Sheet '{sheet_name}': {len(rows)} data rows read, {len(sheet_result.rows)} kept")
        parsed.sheet_counts[sheet_name] = len(sheet_result.rows)
        parsed.extend(sheet_result)
    return parsed


def normalize_bytes(data: bytes, aliases: Mapping[Field, Sequence[str]] = HEADER_ALIASES) -> ParsedWorkbook:
    """
    Load an .xlsx from bytes and normalize it.

    Raises:
        WorkbookReadError: If the bytes aren't a readable workbook.
    """
    file_handler = OpenPyXLFileHandler.from_bytes(data)
    try:
        return normalize_workbook(file_handler, aliases)
    finally:
        file_handler.close()
