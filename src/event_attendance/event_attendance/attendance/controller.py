from __future__ import annotations

from dataclasses import replace
from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import error_response, json_body, optional_int, param
from ..common.validators import optional_enum
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, EventType
from ..core.exceptions import DomainError, ValidationError
from ..events.qr import parse_checkin_payload
from .model import CheckOutDetails, GeoPoint, HistoryFilters


def _location_from(raw) -> Optional[GeoPoint]:
    if raw is None:
        return None
    try:
        return GeoPoint.from_dict(raw)
    except (KeyError, TypeError, ValueError):
        raise ValidationError("location needs numeric latitude and longitude") from None


def _reflection_from(raw) -> Optional[CheckOutDetails]:
    if not raw:
        return None
    if not isinstance(raw, dict):
        raise ValidationError("reflection must be an object")
    skills = raw.get("skills_learned") or ()
    if isinstance(skills, str):
        skills = [skills]
    return CheckOutDetails(
        reflection_notes=raw.get("reflection_notes"),
        skills_learned=tuple(str(s) for s in skills),
        networking_contacts=optional_int(raw.get("networking_contacts"), "networking_contacts"),
        overall_rating=optional_int(raw.get("overall_rating"), "overall_rating"),
    )


def _date_arg(name: str):
    value = request.args.get(name)
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD") from None


def register(app: Flask, container: Container) -> None:
    tracker = container.attendance_tracker

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="api_checkin")
    def api_checkin():
        data = json_body()
        try:
            record = tracker.check_in(
                data.get("user_id"),
                data.get("event_id"),
                data.get("event_type"),
                data.get("verification_method"),
                _location_from(data.get("location")),
                verification_code=data.get("verification_code"),
                notes=data.get("notes"),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "record": record.to_dict()}), 201

    @app.route("/api/attendance/checkin/qr", methods=["POST"], endpoint="api_checkin_qr")
    def api_checkin_qr():
        """Check in with the text scanned from an event QR code."""
        data = json_body()
        try:
            event_id, code = parse_checkin_payload(str(data.get("qr_code") or ""))
            record = tracker.check_in(
                data.get("user_id"),
                event_id,
                verification_method="qr_code",
                location=_location_from(data.get("location")),
                verification_code=code,
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "record": record.to_dict()}), 201

    @app.route("/api/attendance/<record_id>/checkout", methods=["POST"], endpoint="api_checkout")
    def api_checkout(record_id: str):
        data = json_body()
        try:
            record = tracker.check_out(
                str(data.get("user_id") or ""),
                record_id,
                _reflection_from(data.get("reflection")),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "record": record.to_dict()}), 200

    @app.route("/api/attendance/history", methods=["GET"], endpoint="api_history")
    def api_history():
        try:
            limit = optional_int(request.args.get("limit"), "limit")
            filters = HistoryFilters(
                event_type=optional_enum(EventType, request.args.get("event_type"), "event_type"),
                status=optional_enum(AttendanceStatus, request.args.get("status"), "status"),
                start=_date_arg("start"),
                end=_date_arg("end"),
                limit=DEFAULT_HISTORY_LIMIT if limit is None else limit,
            )
            records = tracker.get_history(request.args.get("user_id"), filters)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "records": [r.to_dict() for r in records]}), 200

    @app.route("/api/attendance/streak", methods=["GET"], endpoint="api_streak")
    def api_streak():
        try:
            streak = tracker.get_streak(request.args.get("user_id"))
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "streak": streak.to_dict()}), 200

    @app.route("/api/attendance/upcoming", methods=["GET"], endpoint="api_upcoming")
    def api_upcoming():
        try:
            days = optional_int(request.args.get("days"), "days")
            kwargs = {} if days is None else {"days": days}
            alerts = tracker.get_upcoming_with_potential_points(request.args.get("user_id"), **kwargs)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "events": [a.to_dict() for a in alerts]}), 200

    @app.route("/api/attendance/active", methods=["GET"], endpoint="api_active")
    def api_active():
        try:
            records = tracker.get_active_attendances_needing_reminder(request.args.get("user_id"))
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "records": [r.to_dict() for r in records]}), 200

    @app.route("/api/attendance/sweep", methods=["POST"], endpoint="api_sweep")
    def api_sweep():
        data = json_body()
        try:
            cutoff = optional_int(data.get("cutoff_minutes"), "cutoff_minutes")
            if cutoff is None:
                cutoff = container.missed_checkout_cutoff_minutes
            swept = tracker.sweep_missed_checkouts(cutoff)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "swept": swept}), 200

    @app.route("/api/attendance/<record_id>/reminders", methods=["POST"], endpoint="api_schedule_reminders")
    def api_schedule_reminders(record_id: str):
        data = json_body()
        try:
            config = container.reminder_scheduler.config
            if "reminder_intervals" in data:
                intervals = data["reminder_intervals"]
                if not isinstance(intervals, list):
                    raise ValidationError("reminder_intervals must be a list of minutes")
                config = replace(
                    config,
                    reminder_intervals=tuple(optional_int(m, "reminder interval") for m in intervals),
                )
            for flag in ("enabled", "motivational_messages", "deadline_alert"):
                if flag in data:
                    config = replace(config, **{flag: bool(data[flag])})
            reminders = tracker.schedule_reminders(str(data.get("user_id") or ""), record_id, config)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "reminders": [r.to_dict() for r in reminders]}), 201

    @app.route("/api/attendance/<record_id>/reminders", methods=["DELETE"], endpoint="api_cancel_reminders")
    def api_cancel_reminders(record_id: str):
        try:
            cancelled = tracker.cancel_reminders(str(param("user_id", json_body()) or ""), record_id)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "cancelled": cancelled}), 200

    @app.route("/api/attendance/<record_id>/reminders/now", methods=["POST"], endpoint="api_remind_now")
    def api_remind_now(record_id: str):
        try:
            sent = tracker.send_checkout_reminder(str(param("user_id", json_body()) or ""), record_id)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": sent}), 200 if sent else 502
