from __future__ import annotations

import io
from datetime import date, datetime
from typing import Sequence

import pandas as pd
from reportlab.lib.colors import Color, white
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from glucotrack.analytics import classify_status, readings_to_dataframe
from glucotrack.formatting import format_date, format_time
from glucotrack.models import Reading, Stats

TABLE_HEADER = ["Date", "Time", "Type", "Level", "Status"]

_CLINICAL_BLUE = Color(14 / 255, 165 / 255, 233 / 255)
_TILE_FILL = Color(241 / 255, 245 / 255, 249 / 255)
_TILE_BORDER = Color(203 / 255, 213 / 255, 225 / 255)
_MUTED_TEXT = Color(100 / 255, 116 / 255, 139 / 255)
_DARK_TEXT = Color(15 / 255, 23 / 255, 42 / 255)
_HEADING_TEXT = Color(60 / 255, 60 / 255, 60 / 255)
_GREEN_TEXT = Color(22 / 255, 163 / 255, 74 / 255)
_RED_TEXT = Color(220 / 255, 38 / 255, 38 / 255)
_ALT_ROW = Color(248 / 255, 250 / 255, 252 / 255)
_GRID = Color(200 / 255, 200 / 255, 200 / 255)

_MARGIN = 14 * mm
_ROW_HEIGHT = 8 * mm
_BOTTOM_LIMIT = 20 * mm
_COLUMN_WIDTHS = [40 * mm, 30 * mm, 45 * mm, 35 * mm, 32 * mm]


def report_filename(today: date | None = None) -> str:
    return f"GlucoseReport_{(today or date.today()).isoformat()}.pdf"


def report_rows(readings: Sequence[Reading]) -> list[list[str]]:
    return [
        [
            format_date(r.date),
            format_time(r.time),
            r.type.value,
            f"{r.value} mg/dL",
            classify_status(r.value, r.type).value,
        ]
        for r in readings
    ]


def _draw_tile(c: canvas.Canvas, x: float, y: float, label: str, value: str, value_color: Color) -> None:
    c.setFillColor(_TILE_FILL)
    c.setStrokeColor(_TILE_BORDER)
    c.roundRect(x, y, 60 * mm, 25 * mm, 3 * mm, stroke=1, fill=1)
    c.setFont("Helvetica", 10)
    c.setFillColor(_MUTED_TEXT)
    c.drawString(x + 6 * mm, y + 17 * mm, label)
    c.setFont("Helvetica-Bold", 16)
    c.setFillColor(value_color)
    c.drawString(x + 6 * mm, y + 5 * mm, value)


def _draw_row(c: canvas.Canvas, y: float, cells: list[str], header: bool = False, shaded: bool = False) -> None:
    x = _MARGIN
    for index, (cell, width) in enumerate(zip(cells, _COLUMN_WIDTHS)):
        c.setStrokeColor(_GRID)
        if header:
            c.setFillColor(_CLINICAL_BLUE)
        elif shaded:
            c.setFillColor(_ALT_ROW)
        else:
            c.setFillColor(white)
        c.rect(x, y, width, _ROW_HEIGHT, stroke=1, fill=1)

        bold = header or index == 3
        c.setFont("Helvetica-Bold" if bold else "Helvetica", 9)
        c.setFillColor(white if header else _DARK_TEXT)
        c.drawString(x + 2 * mm, y + 2.8 * mm, cell)
        x += width


def build_pdf_report(
    readings: Sequence[Reading],
    stats: Stats,
    range_label: str,
    generated_at: datetime | None = None,
) -> bytes:
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    generated_at = generated_at or datetime.now()

    c.setTitle("Glucose Report")
    c.setFillColor(_CLINICAL_BLUE)
    c.rect(0, height - 40 * mm, width, 40 * mm, stroke=0, fill=1)

    c.setFillColor(white)
    c.setFont("Helvetica-Bold", 22)
    c.drawString(_MARGIN, height - 20 * mm, "Glucose Report")
    c.setFont("Helvetica", 10)
    c.drawString(_MARGIN, height - 30 * mm, f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M')}")
    c.drawString(_MARGIN, height - 35 * mm, f"Filter: {range_label}")

    c.setFillColor(_HEADING_TEXT)
    c.setFont("Helvetica-Bold", 14)
    c.drawString(_MARGIN, height - 50 * mm, "Summary Statistics")

    tile_y = height - 85 * mm
    _draw_tile(c, _MARGIN, tile_y, "Average", f"{stats.avg} mg/dL", _DARK_TEXT)
    _draw_tile(c, _MARGIN + 65 * mm, tile_y, "Lowest", f"{stats.min} mg/dL", _GREEN_TEXT)
    _draw_tile(c, _MARGIN + 130 * mm, tile_y, "Highest", f"{stats.max} mg/dL", _RED_TEXT)

    y = tile_y - 10 * mm - _ROW_HEIGHT
    _draw_row(c, y, TABLE_HEADER, header=True)

    rows = report_rows(readings)
    if not rows:
        c.setFillColor(_MUTED_TEXT)
        c.setFont("Helvetica", 10)
        c.drawString(_MARGIN, y - 8 * mm, "No readings in this range")

    for index, row in enumerate(rows):
        y -= _ROW_HEIGHT
        if y < _BOTTOM_LIMIT:
            c.showPage()
            y = height - 20 * mm - _ROW_HEIGHT
            _draw_row(c, y, TABLE_HEADER, header=True)
            y -= _ROW_HEIGHT
        _draw_row(c, y, row, shaded=index % 2 == 1)

    c.save()
    buffer.seek(0)
    return buffer.read()


def _export_frame(readings: Sequence[Reading]) -> pd.DataFrame:
    df = readings_to_dataframe(readings)
    return pd.DataFrame(
        {
            "Date": df["date"],
            "Time": df["time"],
            "Type": df["type"],
            "Level (mg/dL)": df["value"],
            "Status": df["status"],
        }
    )


def readings_to_csv_bytes(readings: Sequence[Reading]) -> bytes:
    return _export_frame(readings).to_csv(index=False).encode("utf-8")


def readings_to_excel_bytes(readings: Sequence[Reading], sheet_name: str = "Readings") -> bytes:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        _export_frame(readings).to_excel(writer, sheet_name=sheet_name[:31] or "Readings", index=False)
    output.seek(0)
    return output.read()
