from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, HistoryFilters


class AttendanceRepository(Protocol):
    def get_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_open_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(self, record: AttendanceRecord) -> None:
        """Persist a new CHECKED_IN record.

        Raises DuplicateCheckIn when the user already has an open record.
        """

        raise NotImplementedError

    def close_record(self, record: AttendanceRecord) -> bool:
        """Persist a transition out of CHECKED_IN.

        Only applies while the stored record is still open; returns False otherwise.
        """

        raise NotImplementedError

    def list_history(self, user_id: str, filters: Optional[HistoryFilters] = None) -> Sequence[AttendanceRecord]:
        """Records for one user, newest check-in first."""

        raise NotImplementedError

    def list_open(self) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
