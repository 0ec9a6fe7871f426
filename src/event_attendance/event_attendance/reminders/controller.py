from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container


def register(app: Flask, container: Container) -> None:
    scheduler = container.reminder_scheduler

    @app.route("/api/reminders/stats", methods=["GET"], endpoint="api_reminder_stats")
    def api_reminder_stats():
        stats = scheduler.stats()
        return jsonify(
            {
                "success": True,
                "total_scheduled": stats.total_scheduled,
                "active_reminders": stats.active_reminders,
                "expired_count": stats.expired_count,
            }
        ), 200

    @app.route("/api/reminders/active", methods=["GET"], endpoint="api_active_reminders")
    def api_active_reminders():
        reminders = scheduler.active_reminders(request.args.get("record_id") or None)
        return jsonify({"success": True, "reminders": [r.to_dict() for r in reminders]}), 200
