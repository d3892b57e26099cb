"""
Report sink: ReportSheets → bytes.

  xlsx — one worksheet per sheet (openpyxl), title row in bold
  json — {"sheets": [{"name": ..., "rows": [...]}, ...]}, UTF-8
"""

import io
import json
import logging
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from house_finder.errors import ReportError
from house_finder.reports import ReportSheet

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("xlsx", "json")
CONTENT_TYPES = {
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "json": "application/json",
}

_MAX_SHEET_TITLE = 31  # Excel limit
_MAX_COLUMN_WIDTH = 60


def _to_xlsx(sheets: Sequence[ReportSheet]) -> bytes:
    wb = Workbook()
    wb.remove(wb.active)
    for sheet in sheets:
        ws = wb.create_sheet(title=sheet.name[:_MAX_SHEET_TITLE])
        widths: dict[int, int] = {}
        for row in sheet.rows:
            ws.append(list(row))
            for col, value in enumerate(row, start=1):
                # multi-line narrative cells would blow the width out
                longest = max((len(line) for line in str(value).splitlines()), default=0)
                widths[col] = max(widths.get(col, 0), longest)
        if sheet.rows:
            ws["A1"].font = Font(size=14, bold=True)
        for col, width in widths.items():
            ws.column_dimensions[get_column_letter(col)].width = min(width + 2, _MAX_COLUMN_WIDTH)

    stream = io.BytesIO()
    wb.save(stream)
    return stream.getvalue()


def _to_json(sheets: Sequence[ReportSheet]) -> bytes:
    payload = {"sheets": [{"name": sheet.name, "rows": sheet.rows} for sheet in sheets]}
    return json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")


def export_report(sheets: Sequence[ReportSheet], fmt: str = "xlsx") -> bytes:
    """Serialize sheets; raises ReportError for an unsupported format."""
    fmt = (fmt or "").strip().lower()
    if fmt == "xlsx":
        data = _to_xlsx(sheets)
    elif fmt == "json":
        data = _to_json(sheets)
    else:
        raise ReportError(f"Unsupported export format '{fmt}'. Choose one of: {', '.join(EXPORT_FORMATS)}.")
    logger.info("Exported %d sheets as %s (%d bytes)", len(sheets), fmt, len(data))
    return data
