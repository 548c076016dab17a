"""Google Sheets sink - the "Edge Candidates" worksheet, overwritten on every sync."""

from __future__ import annotations

from typing import Any, Sequence

import structlog

from edgewatch.errors import ConfigurationError, RateLimitError, SinkConnectError, SinkWriteError, is_rate_limit_message
from edgewatch.models import SHEET_COLUMNS, SheetRow

log = structlog.get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"
DATA_RANGE = "A2:K1000"
MAX_ROWS = 1000
EDGE_SCORE_COLUMN = SHEET_COLUMNS.index("Edge Score")


def _gradient_rule(sheet_id: int) -> dict[str, Any]:
    """Yellow -> green gradient on the Edge Score column (0 / 30 / 60)."""
    return {
        "addConditionalFormatRule": {
            "index": 0,
            "rule": {
                "ranges": [
                    {
                        "sheetId": sheet_id,
                        "startRowIndex": 1,
                        "endRowIndex": MAX_ROWS,
                        "startColumnIndex": EDGE_SCORE_COLUMN,
                        "endColumnIndex": EDGE_SCORE_COLUMN + 1,
                    }
                ],
                "gradientRule": {
                    "minpoint": {"color": {"red": 1, "green": 1, "blue": 0.5}, "type": "NUMBER", "value": "0"},
                    "midpoint": {"color": {"red": 1, "green": 1, "blue": 0}, "type": "NUMBER", "value": "30"},
                    "maxpoint": {"color": {"red": 0, "green": 1, "blue": 0}, "type": "NUMBER", "value": "60"},
                },
            },
        }
    }


def _write_error(e: Exception) -> SinkWriteError:
    response = getattr(e, "response", None)
    status = getattr(response, "status_code", None)
    message = str(e) or type(e).__name__
    if status == 429 or is_rate_limit_message(message):
        return RateLimitError(message)
    return SinkWriteError(message)


class GoogleSheetsSink:
    """EdgeSink backed by gspread. All methods block; call them from a worker thread."""

    def __init__(
        self,
        sheet_id: str,
        service_account_email: str,
        private_key: str,
        worksheet_title: str = "Edge Candidates",
    ) -> None:
        if not (sheet_id and service_account_email and private_key):
            raise ConfigurationError("Google Sheets credentials not configured")
        self.sheet_id = sheet_id
        self.service_account_email = service_account_email
        self._private_key = private_key
        self.worksheet_title = worksheet_title
        self._worksheet = None

    @classmethod
    def from_settings(cls, settings: Any) -> GoogleSheetsSink:
        return cls(
            sheet_id=settings.sheet_id,
            service_account_email=settings.service_account_email,
            private_key=settings.private_key,
            worksheet_title=settings.worksheet_title,
        )

    def connect(self) -> None:
        import gspread
        from google.auth.exceptions import GoogleAuthError
        from google.oauth2.service_account import Credentials

        try:
            creds = Credentials.from_service_account_info(
                {
                    "type": "service_account",
                    "client_email": self.service_account_email,
                    "private_key": self._private_key,
                    "token_uri": TOKEN_URI,
                },
                scopes=SCOPES,
            )
            client = gspread.authorize(creds)
            spreadsheet = client.open_by_key(self.sheet_id)
            try:
                worksheet = spreadsheet.worksheet(self.worksheet_title)
            except gspread.WorksheetNotFound:
                worksheet = spreadsheet.add_worksheet(
                    title=self.worksheet_title, rows=MAX_ROWS, cols=len(SHEET_COLUMNS)
                )
                worksheet.update(values=[list(SHEET_COLUMNS)], range_name="A1:K1")
                self._apply_formatting(spreadsheet, worksheet)
        except (gspread.exceptions.GSpreadException, GoogleAuthError, ValueError, OSError) as e:
            raise SinkConnectError(str(e) or type(e).__name__) from e
        self._worksheet = worksheet
        log.info("sheets_connected", sheet_id=self.sheet_id, worksheet=self.worksheet_title)

    def _apply_formatting(self, spreadsheet: Any, worksheet: Any) -> None:
        import gspread

        try:
            spreadsheet.batch_update({"requests": [_gradient_rule(worksheet.id)]})
        except (gspread.exceptions.GSpreadException, OSError) as e:
            # Cosmetic only; the sheet is usable without it
            log.warning("sheets_formatting_failed", error=str(e))

    def _require_worksheet(self) -> Any:
        if self._worksheet is None:
            raise SinkWriteError("sheet not connected")
        return self._worksheet

    def overwrite(self, rows: Sequence[SheetRow]) -> None:
        import gspread
        from google.auth.exceptions import GoogleAuthError

        worksheet = self._require_worksheet()
        values = [row.as_list() for row in rows[: MAX_ROWS - 1]]
        try:
            worksheet.batch_clear([DATA_RANGE])
            if values:
                worksheet.update(values=values, range_name=f"A2:K{len(values) + 1}")
        except (gspread.exceptions.GSpreadException, GoogleAuthError, OSError) as e:
            raise _write_error(e) from e

    def read_rows(self, limit: int = 10) -> list[SheetRow]:
        import gspread
        from google.auth.exceptions import GoogleAuthError

        worksheet = self._require_worksheet()
        try:
            values = worksheet.get_all_values()
        except (gspread.exceptions.GSpreadException, GoogleAuthError, OSError) as e:
            raise _write_error(e) from e
        data = [v for v in values[1:] if any(v)]
        return [SheetRow.from_list(v) for v in data[-limit:]] if limit > 0 else []
