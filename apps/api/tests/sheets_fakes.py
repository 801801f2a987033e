from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple


def _parse_range(range_str: str) -> Tuple[str, int]:
    tab_part, _, cells = range_str.rpartition("!")
    if tab_part.startswith("'") and tab_part.endswith("'"):
        tab = tab_part[1:-1].replace("''", "'")
    else:
        tab = tab_part
    match = re.match(r"[A-Z]+(\d+)?", cells)
    start_row = int(match.group(1)) if match and match.group(1) else 1
    return tab, start_row


class FakeRequest:
    def __init__(self, fn):
        self._fn = fn

    def execute(self):
        return self._fn()


class FakeValues:
    def __init__(self, service: "FakeSheetsService"):
        self.service = service

    def get(self, spreadsheetId, range):
        self.service.calls.append(("values.get", range))
        tab, start_row = _parse_range(range)

        def _run():
            rows = self.service.tabs[tab][start_row - 1 :]
            return {"values": [list(row) for row in rows]} if rows else {"range": range}

        return FakeRequest(_run)

    def append(self, spreadsheetId, range, valueInputOption, insertDataOption, body):
        self.service.calls.append(("values.append", range, body))
        tab, _ = _parse_range(range)

        def _run():
            for row in body["values"]:
                self.service.tabs[tab].append([str(value) for value in row])
            return {"updates": {"updatedRows": len(body["values"])}}

        return FakeRequest(_run)

    def update(self, spreadsheetId, range, valueInputOption, body):
        self.service.calls.append(("values.update", range, body))
        tab, start_row = _parse_range(range)

        def _run():
            rows = self.service.tabs[tab]
            for offset, row in enumerate(body["values"]):
                index = start_row - 1 + offset
                while len(rows) <= index:
                    rows.append([])
                rows[index] = [str(value) for value in row]
            return {"updatedRows": len(body["values"])}

        return FakeRequest(_run)


class FakeSpreadsheets:
    def __init__(self, service: "FakeSheetsService"):
        self.service = service

    def get(self, spreadsheetId, fields=None):
        self.service.calls.append(("get", fields))
        return FakeRequest(
            lambda: {"sheets": [{"properties": {"title": title}} for title in self.service.tabs]}
        )

    def batchUpdate(self, spreadsheetId, body):
        self.service.calls.append(("batchUpdate", body))

        def _run():
            replies = []
            for request in body["requests"]:
                title = request["addSheet"]["properties"]["title"]
                self.service.tabs[title] = []
                replies.append({"addSheet": {"properties": {"title": title, "sheetId": len(self.service.tabs)}}})
            return {"replies": replies}

        return FakeRequest(_run)

    def values(self):
        return FakeValues(self.service)


class FakeSheetsService:
    """In-memory stand-in for the Sheets v4 resource used by SheetsStore."""

    WRITE_CALLS = {"batchUpdate", "values.append", "values.update"}

    def __init__(self, tabs: Optional[Dict[str, List[List[Any]]]] = None):
        self.tabs: Dict[str, List[List[Any]]] = {
            title: [list(row) for row in rows] for title, rows in (tabs or {}).items()
        }
        self.calls: List[tuple] = []

    def spreadsheets(self):
        return FakeSpreadsheets(self)

    def write_calls(self) -> List[tuple]:
        return [call for call in self.calls if call[0] in self.WRITE_CALLS]


class FakeSecretsClient:
    def __init__(self, response: Dict[str, Any]):
        self.response = response
        self.calls: List[str] = []

    def get_secret_value(self, SecretId):
        self.calls.append(SecretId)
        return self.response
