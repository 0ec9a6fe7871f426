from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus, EventType, VerificationMethod
from ..core.exceptions import DuplicateCheckIn
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_json_column, is_duplicate_key, to_json_column
from ..points.model import DegreeCredit
from .model import AttendanceRecord, CheckOutDetails, GeoPoint, HistoryFilters
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, user_id, event_id, event_type, event_title, event_end_at,
    checked_in_at, checked_out_at, status, verification_method, verification_code,
    duration_minutes, points_a, points_b, degree_credits, location, check_in_notes, reflection
"""


def row_to_record(r: dict) -> AttendanceRecord:
    credits = from_json_column(r.get("degree_credits")) or []
    location = from_json_column(r.get("location"))
    reflection = from_json_column(r.get("reflection"))
    duration = r.get("duration_minutes")
    return AttendanceRecord(
        record_id=str(r["record_id"]),
        user_id=str(r["user_id"]),
        event_id=str(r["event_id"]),
        event_type=EventType(r["event_type"]),
        event_title=r["event_title"],
        event_end_at=r["event_end_at"],
        checked_in_at=r["checked_in_at"],
        checked_out_at=r.get("checked_out_at"),
        status=AttendanceStatus(r["status"]),
        verification_method=VerificationMethod(r["verification_method"]),
        verification_code=r.get("verification_code"),
        duration_minutes=int(duration) if duration is not None else None,
        points_a=int(r.get("points_a") or 0),
        points_b=int(r.get("points_b") or 0),
        degree_credits=tuple(DegreeCredit.from_dict(c) for c in credits),
        location=GeoPoint.from_dict(location) if location else None,
        check_in_notes=r.get("check_in_notes"),
        reflection=CheckOutDetails.from_dict(reflection) if reflection else None,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (record_id,))
            r = fetchone(cur)
            return row_to_record(r) if r else None

    def get_open_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE user_id=%s AND status=%s",
                (user_id, AttendanceStatus.CHECKED_IN.value),
            )
            r = fetchone(cur)
            return row_to_record(r) if r else None

    def create_checkin(self, record: AttendanceRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        record_id, user_id, event_id, event_type, event_title, event_end_at,
                        checked_in_at, status, verification_method, verification_code,
                        points_a, points_b, degree_credits, location, check_in_notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.record_id,
                        record.user_id,
                        record.event_id,
                        record.event_type.value,
                        record.event_title,
                        record.event_end_at,
                        record.checked_in_at,
                        record.status.value,
                        record.verification_method.value,
                        record.verification_code,
                        record.points_a,
                        record.points_b,
                        to_json_column([]),
                        to_json_column(record.location.to_dict() if record.location else None),
                        record.check_in_notes,
                    ),
                )
            except mysql.connector.IntegrityError as exc:
                if is_duplicate_key(exc):
                    raise DuplicateCheckIn(f"User {record.user_id} already has an open check-in") from exc
                raise

    def close_record(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET checked_out_at=%s, status=%s, duration_minutes=%s, points_a=%s, points_b=%s,
                    degree_credits=%s, reflection=%s
                WHERE record_id=%s AND status=%s
                """,
                (
                    record.checked_out_at,
                    record.status.value,
                    record.duration_minutes,
                    record.points_a,
                    record.points_b,
                    to_json_column([c.to_dict() for c in record.degree_credits]),
                    to_json_column(record.reflection.to_dict() if record.reflection else None),
                    record.record_id,
                    AttendanceStatus.CHECKED_IN.value,
                ),
            )
            return cur.rowcount > 0

    def list_history(self, user_id: str, filters: Optional[HistoryFilters] = None) -> Sequence[AttendanceRecord]:
        filters = filters or HistoryFilters()
        clauses = ["user_id=%s"]
        params: list[object] = [user_id]

        if filters.event_type is not None:
            clauses.append("event_type=%s")
            params.append(filters.event_type.value)
        if filters.status is not None:
            clauses.append("status=%s")
            params.append(filters.status.value)
        if filters.start is not None:
            clauses.append("DATE(checked_in_at) >= %s")
            params.append(filters.start)
        if filters.end is not None:
            clauses.append("DATE(checked_in_at) <= %s")
            params.append(filters.end)

        sql = f"SELECT {_COLUMNS} FROM attendance_records WHERE {' AND '.join(clauses)} ORDER BY checked_in_at DESC"
        if filters.limit is not None:
            sql += " LIMIT %s"
            params.append(int(filters.limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [row_to_record(r) for r in fetchall(cur)]

    def list_open(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE status=%s ORDER BY event_end_at ASC",
                (AttendanceStatus.CHECKED_IN.value,),
            )
            return [row_to_record(r) for r in fetchall(cur)]
