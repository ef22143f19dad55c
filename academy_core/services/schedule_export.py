"""Excel export of a day's room schedule."""

import io
import logging
from datetime import date, datetime

import pandas as pd

from academy_core.utils.timezone import to_local

logger = logging.getLogger(__name__)

MAX_COLUMN_WIDTH = 50


def _fit_columns(worksheet) -> None:
    for column in worksheet.columns:
        column_letter = column[0].column_letter
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        worksheet.column_dimensions[column_letter].width = min(max_length + 2, MAX_COLUMN_WIDTH)


def _hhmm(moment: datetime) -> str:
    return to_local(moment).strftime("%H:%M")


def build_room_schedule_workbook(overview: dict) -> io.BytesIO:
    """Render the payload of ``OccupancyProjection.room_overview`` as an xlsx file.

    Sheets: one row per session, one row per room, and the day's totals.
    """
    sessions_data = []
    rooms_data = []
    for room in overview["rooms"]:
        rooms_data.append({
            "Room": room["name"],
            "Location": room["location"] or "—",
            "Capacity": room["capacity"],
            "Sessions": room["sessions_today"],
            "Occupied now": "Yes" if room["is_occupied"] else "No",
            "Minutes left": room["remaining_minutes"] if room["remaining_minutes"] is not None else "—",
        })
        for session in room["sessions"]:
            sessions_data.append({
                "Room": room["name"],
                "Start": _hhmm(session["session_date"]),
                "End": _hhmm(session["end_time"]),
                "Course": session["course_name"] or "—",
                "Group": session["group_name"] or "—",
                "Teacher": session["teacher_name"] or "—",
                "Topic": session["topic"] or "—",
            })

    summary_data = {
        "Metric": ["Date", "Total rooms", "Occupied now", "Free now", "Sessions"],
        "Value": [
            overview["date"].isoformat(),
            overview["total_rooms"],
            overview["occupied_now"],
            overview["free_now"],
            len(sessions_data),
        ],
    }

    room_columns = ["Room", "Location", "Capacity", "Sessions", "Occupied now", "Minutes left"]
    session_columns = ["Room", "Start", "End", "Course", "Group", "Teacher", "Topic"]
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        pd.DataFrame(sessions_data, columns=session_columns).to_excel(
            writer, sheet_name="Sessions", index=False
        )
        pd.DataFrame(rooms_data, columns=room_columns).to_excel(writer, sheet_name="Rooms", index=False)
        pd.DataFrame(summary_data).to_excel(writer, sheet_name="Summary", index=False)
        for worksheet in writer.sheets.values():
            _fit_columns(worksheet)

    output.seek(0)
    logger.info(f"📄 Exported room schedule for {overview['date']}: {len(sessions_data)} sessions")
    return output


def export_filename(day: date) -> str:
    return f"room_schedule_{day.isoformat()}.xlsx"
