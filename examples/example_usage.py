"""Ví dụ: dùng service layer (không qua Flask).

Classifies a few check times against an in-memory event and runs a penalty
analysis over the resulting records; no database is touched.
"""

from datetime import datetime, timedelta, timezone

from src.smart_attendance.smart_attendance.attendance.classifier import AttendanceWindowClassifier
from src.smart_attendance.smart_attendance.attendance.model import AttendanceRecord
from src.smart_attendance.smart_attendance.events.model import Event
from src.smart_attendance.smart_attendance.penalties.service import PenaltyLedger


def main():
    start = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
    event = Event(
        event_id="demo",
        name="Morning lecture",
        start_time=start,
        end_time=start + timedelta(hours=2),
        latitude=10.7769,
        longitude=106.7009,
    )

    classifier = AttendanceWindowClassifier()
    records = []
    for i, minutes in enumerate((-10, 4, 12, 25, 40)):
        at = start + timedelta(minutes=minutes)
        decision = classifier.classify(event, at)
        print(f"T{minutes:+d}min -> {decision.status.value} {decision.penalty.value if decision.penalty else ''}")
        records.append(
            AttendanceRecord(
                record_id=str(i),
                member_id="m-001",
                event_id=f"demo-{i}",
                timestamp=at,
                status=decision.status,
                penalty=decision.penalty,
                latitude=event.latitude,
                longitude=event.longitude,
                updated_at=at,
            )
        )

    analysis = PenaltyLedger().analysis("m-001", records)
    print(analysis.total_points, analysis.risk_level.value, analysis.recommendations)


if __name__ == "__main__":
    main()
