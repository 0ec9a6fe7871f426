"""Check-in QR codes: payload text and PNG rendering."""

from __future__ import annotations

import io
from typing import Optional

import qrcode

from ..core.exceptions import ValidationError
from .model import EventMetadata

PAYLOAD_PREFIX = "EVENT-CHECKIN"


def build_checkin_payload(event: EventMetadata) -> str:
    return "|".join((PAYLOAD_PREFIX, event.event_id, event.verification_code or ""))


def parse_checkin_payload(text: str) -> tuple[str, Optional[str]]:
    """Return (event_id, verification_code) from scanned QR text."""
    parts = (text or "").strip().split("|")
    if len(parts) != 3 or parts[0] != PAYLOAD_PREFIX or not parts[1]:
        raise ValidationError("QR code is not an event check-in code")
    return parts[1], parts[2] or None


def render_png(data: str) -> io.BytesIO:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return buf
