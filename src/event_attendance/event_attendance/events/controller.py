from __future__ import annotations

from flask import Flask, jsonify, send_file

from ..container import Container
from .qr import build_checkin_payload, render_png


def register(app: Flask, container: Container) -> None:
    @app.route("/api/events/<event_id>/qr", methods=["GET"], endpoint="api_event_qr")
    def api_event_qr(event_id: str):
        """PNG QR code members scan to check in to an event."""
        event = container.event_catalog.get_event(event_id)
        if event is None:
            return jsonify({"success": False, "message": f"Event {event_id} does not exist"}), 404
        return send_file(render_png(build_checkin_payload(event)), mimetype="image/png")
