from __future__ import annotations

from typing import Optional

from flask import Flask

from ..common.datetime_utils import now_utc, parse_iso_datetime
from ..common.http import error_response, json_body, optional_float, result_response
from ..core.enums import ErrorKind
from ..core.exceptions import ValidationError
from ..container import Container
from .location import CredentialVerifier, StaticLocationSource, StaticVerifier, VerificationResult
from .model import AttendanceRecord, Fix


def record_to_dict(record: AttendanceRecord) -> dict:
    return {
        "record_id": record.record_id,
        "member_id": record.member_id,
        "event_id": record.event_id,
        "timestamp": record.timestamp.isoformat(),
        "status": record.status.value,
        "penalty": record.penalty.value if record.penalty else None,
        "latitude": record.latitude,
        "longitude": record.longitude,
        "updated_at": record.updated_at.isoformat(),
        "synced": record.synced,
        "note": record.note,
    }


def _fix_from(data: dict) -> Fix | None:
    """The device sends its fix along with the request; no coordinates means no fix."""
    lat = optional_float(data, "latitude")
    lon = optional_float(data, "longitude")
    if lat is None or lon is None:
        return None
    accuracy = optional_float(data, "accuracy")
    raw = data.get("fix_time")
    try:
        taken = parse_iso_datetime(raw) if raw else now_utc()
    except ValueError:
        raise ValidationError("fix_time is not a valid ISO-8601 datetime")
    return Fix(latitude=lat, longitude=lon, accuracy=accuracy or 0.0, timestamp=taken)


def _verifier_from(data: dict) -> Optional[CredentialVerifier]:
    """Verdict of the credential check the device ran, if it reported one."""
    if "credential_verified" not in data:
        return None
    verified = data["credential_verified"]
    if not isinstance(verified, bool):
        raise ValidationError("credential_verified must be true or false")
    if verified:
        return StaticVerifier(VerificationResult.pass_())
    reason = str(data.get("credential_reason") or "Credential verification failed on the device")
    return StaticVerifier(VerificationResult.fail(reason))


def register(app: Flask, container: Container) -> None:
    @app.route("/api/events/<event_id>/attendance", methods=["POST"], endpoint="api_mark_attendance")
    def api_mark_attendance(event_id: str):
        try:
            data = json_body()
            member_id = str(data.get("member_id") or "")
            fix = _fix_from(data)
            verifier = _verifier_from(data)
        except ValidationError as e:
            return error_response(ErrorKind.VALIDATION, str(e))

        result = container.check_in_flow.check_in(
            member_id,
            event_id,
            location=StaticLocationSource(fix),
            verifier=verifier,
        )
        return result_response(result, record_to_dict, status=201)
