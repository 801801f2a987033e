from __future__ import annotations

import hashlib
import logging
import re
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Optional

from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build

from .config import AppConfig, ensure_configured
from .schemas import FamilyConfig, PointEvent
from .secret_store import load_service_account_info

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

FAMILY_HEADER = ["user_id", "tab_name", "kids", "created_at", "updated_at"]
EVENT_HEADER = ["timestamp", "date", "person", "delta", "actor", "note"]

_COLUMN_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LEADING_INT = re.compile(r"^\s*([-+]?\d+)")


def derive_tab_name(user_id: str, prefix: str) -> str:
    digest = hashlib.sha256(user_id.encode("utf-8")).hexdigest()
    return f"{prefix}{digest[:16]}"


def a1_range(tab: str, cells: str) -> str:
    escaped = tab.replace("'", "''")
    return f"'{escaped}'!{cells}"


def _last_column(width: int) -> str:
    return _COLUMN_LETTERS[width - 1]


def _cell(row: List[Any], index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index]).strip()


def _to_int(value: str) -> int:
    """Whole points in a delta cell; unreadable or non-finite values count as 0."""
    try:
        return int(float(value))
    except OverflowError:
        return 0
    except (TypeError, ValueError):
        match = _LEADING_INT.match(value or "")
        return int(match.group(1)) if match else 0


def split_kids(raw: str) -> List[str]:
    return [name.strip() for name in (raw or "").split(",") if name.strip()]


def _row_to_event(row: List[Any]) -> Optional[PointEvent]:
    date_value = _cell(row, 1)
    person = _cell(row, 2)
    if not date_value or not person:
        return None
    return PointEvent(
        timestamp=_cell(row, 0),
        date=date_value,
        person=person,
        delta=_to_int(_cell(row, 3)),
        actor=_cell(row, 4),
        note=_cell(row, 5),
    )


@dataclass
class SheetsStore:
    service: Any
    spreadsheet_id: str
    families_tab: str = "Families"
    events_prefix: str = "Family_"

    def _values(self):
        return self.service.spreadsheets().values()

    def list_tabs(self) -> List[str]:
        spreadsheet = self.service.spreadsheets().get(
            spreadsheetId=self.spreadsheet_id, fields="sheets.properties.title"
        ).execute()
        return [
            sheet.get("properties", {}).get("title", "")
            for sheet in spreadsheet.get("sheets", [])
        ]

    def _write_row(self, tab: str, row_number: int, values: List[Any]) -> None:
        end = _last_column(len(values))
        self._values().update(
            spreadsheetId=self.spreadsheet_id,
            range=a1_range(tab, f"A{row_number}:{end}{row_number}"),
            valueInputOption="RAW",
            body={"values": [values]},
        ).execute()

    def _append_row(self, tab: str, values: List[Any]) -> None:
        self._values().append(
            spreadsheetId=self.spreadsheet_id,
            range=a1_range(tab, f"A:{_last_column(len(values))}"),
            valueInputOption="RAW",
            insertDataOption="INSERT_ROWS",
            body={"values": [values]},
        ).execute()

    def _read_rows(self, tab: str, width: int) -> List[List[Any]]:
        result = self._values().get(
            spreadsheetId=self.spreadsheet_id,
            range=a1_range(tab, f"A2:{_last_column(width)}"),
        ).execute()
        return result.get("values", [])

    def ensure_tab(self, title: str, header: List[str]) -> bool:
        if title in self.list_tabs():
            return False
        self.service.spreadsheets().batchUpdate(
            spreadsheetId=self.spreadsheet_id,
            body={"requests": [{"addSheet": {"properties": {"title": title}}}]},
        ).execute()
        self._write_row(title, 1, header)
        logger.info("sheet tab created", extra={"tab": title})
        return True

    def _family_rows(self) -> List[List[Any]]:
        if self.families_tab not in self.list_tabs():
            return []
        return self._read_rows(self.families_tab, len(FAMILY_HEADER))

    def _family_from_row(self, user_id: str, row: List[Any]) -> FamilyConfig:
        return FamilyConfig(
            user_id=user_id,
            tab_name=_cell(row, 1) or derive_tab_name(user_id, self.events_prefix),
            kids=split_kids(_cell(row, 2)),
            created_at=_cell(row, 3),
            updated_at=_cell(row, 4),
        )

    def find_family(self, user_id: str) -> Optional[FamilyConfig]:
        for row in self._family_rows():
            if _cell(row, 0) == user_id:
                return self._family_from_row(user_id, row)
        return None

    def save_family(self, user_id: str, kids: List[str], now: datetime) -> FamilyConfig:
        self.ensure_tab(self.families_tab, FAMILY_HEADER)
        stamp = now.isoformat()
        rows = self._read_rows(self.families_tab, len(FAMILY_HEADER))
        for index, row in enumerate(rows):
            if _cell(row, 0) != user_id:
                continue
            family = self._family_from_row(user_id, row)
            family.kids = list(kids)
            family.created_at = family.created_at or stamp
            family.updated_at = stamp
            # Row 1 holds the header, data starts at row 2.
            self._write_row(self.families_tab, index + 2, family.as_row())
            break
        else:
            family = FamilyConfig(
                user_id=user_id,
                tab_name=derive_tab_name(user_id, self.events_prefix),
                kids=list(kids),
                created_at=stamp,
                updated_at=stamp,
            )
            self._append_row(self.families_tab, family.as_row())
        self.ensure_tab(family.tab_name, EVENT_HEADER)
        logger.info(
            "family saved",
            extra={"tab": family.tab_name, "kid_count": len(family.kids)},
        )
        return family

    def append_event(self, tab: str, event: PointEvent) -> None:
        self._append_row(tab, event.as_row())
        logger.info(
            "points event appended",
            extra={"tab": tab, "person": event.person, "delta": event.delta, "date": event.date},
        )

    def read_events(self, tab: str) -> List[PointEvent]:
        events: List[PointEvent] = []
        skipped = 0
        for row in self._read_rows(tab, len(EVENT_HEADER)):
            event = _row_to_event(row)
            if event is None:
                skipped += 1
                continue
            events.append(event)
        if skipped:
            logger.warning("skipped malformed event rows", extra={"tab": tab, "count": skipped})
        return events


def build_sheets_service(config: AppConfig) -> Any:
    info = load_service_account_info(config.secret_name or "", config.secret_region)
    creds = Credentials.from_service_account_info(info, scopes=SCOPES)
    return build("sheets", "v4", credentials=creds, cache_discovery=False)


class ServiceCache:
    """Process-wide Sheets resource, built once and only kept on success."""

    def __init__(self, factory: Callable[[AppConfig], Any]) -> None:
        self._factory = factory
        self._lock = threading.Lock()
        self._service: Optional[Any] = None

    def get(self, config: AppConfig) -> Any:
        if self._service is not None:
            return self._service
        with self._lock:
            if self._service is None:
                self._service = self._factory(config)
                logger.info("sheets client initialised")
            return self._service

    def reset(self) -> None:
        with self._lock:
            self._service = None


_SERVICE_CACHE = ServiceCache(build_sheets_service)


def reset_service_cache() -> None:
    _SERVICE_CACHE.reset()


def get_store(config: AppConfig) -> SheetsStore:
    ensure_configured(config)
    return SheetsStore(
        service=_SERVICE_CACHE.get(config),
        spreadsheet_id=config.sheet_id or "",
        families_tab=config.families_tab,
        events_prefix=config.events_tab_prefix,
    )
