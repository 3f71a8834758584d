from datetime import datetime

from src.eventflow.eventflow.attendance.model import LogEntry
from src.eventflow.eventflow.core.enums import ParticipantStatus
from src.eventflow.eventflow.reports.service import ReportService, write_report_csv

T1 = datetime(2026, 3, 1, 8, 55, 1)
T2 = datetime(2026, 3, 1, 10, 30, 0)
T3 = datetime(2026, 3, 1, 10, 45, 0)
T4 = datetime(2026, 3, 1, 12, 0, 30)


def test_report_row_for_full_day(participants, events):
    event = events.add("Orientation")
    participants.add(
        event_id=event.event_id,
        student_id="S1",
        full_name="Ana Reyes",
        status=ParticipantStatus.CHECKED_OUT,
        logs=(
            LogEntry("Time In", T1),
            LogEntry("Break Start", T2),
            LogEntry("Break Return", T3),
            LogEntry("Time Out", T4),
        ),
    )

    data = ReportService(participants, events).build_event_report(event.event_id)

    assert data.filename == "Orientation_Report.csv"
    assert data.rows == [
        {
            "student_id": "S1",
            "full_name": "Ana Reyes",
            "email": "s1@school.test",
            "status": "checked_out",
            "time_in": "08:55:01",
            "time_out": "12:00:30",
            "total_logs": 4,
        }
    ]


def test_report_row_without_logs_uses_dash(participants, events):
    event = events.add("Orientation")
    participants.add(event_id=event.event_id, student_id="S2", full_name="Ben Cruz")

    row = ReportService(participants, events).build_event_report(event.event_id).rows[0]

    assert row["time_in"] == "-"
    assert row["time_out"] == "-"
    assert row["total_logs"] == 0


def test_self_checkout_counts_as_time_out(participants, events):
    event = events.add("Orientation")
    participants.add(
        event_id=event.event_id,
        student_id="S3",
        full_name="Cy Dela",
        status=ParticipantStatus.CHECKED_OUT,
        logs=(LogEntry("Late Time In (Auto)", T1), LogEntry("Self Checkout", T4)),
    )

    row = ReportService(participants, events).build_event_report(event.event_id).rows[0]

    assert row["time_in"] == "08:55:01"
    assert row["time_out"] == "12:00:30"


def test_csv_has_bom_and_header():
    body = write_report_csv([])
    assert body.startswith(b"\xef\xbb\xbf")
    header = body.decode("utf-8-sig").splitlines()[0]
    assert header == "student_id,full_name,email,status,time_in,time_out,total_logs"
