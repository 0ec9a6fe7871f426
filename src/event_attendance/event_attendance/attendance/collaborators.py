"""Downstream modules notified after a verified checkout.

Each has a no-op implementation so the tracker never has to check whether a
collaborator exists.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from ..points.model import DegreeCredit
from .model import AttendanceRecord


class DegreeProgressUpdater(Protocol):
    def update_degree_progress(self, user_id: str, credits: Sequence[DegreeCredit]) -> None:
        raise NotImplementedError


class PointsLedger(Protocol):
    def award_points(self, user_id: str, record: AttendanceRecord) -> None:
        raise NotImplementedError


class NoOpDegreeProgressUpdater:
    def update_degree_progress(self, user_id: str, credits: Sequence[DegreeCredit]) -> None:
        return None


class NoOpPointsLedger:
    def award_points(self, user_id: str, record: AttendanceRecord) -> None:
        return None
