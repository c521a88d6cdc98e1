from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import error_response, json_body, optional_float, result_response
from ..core.enums import ErrorKind
from ..core.exceptions import StoreError, ValidationError
from ..container import Container
from .model import Event

_OFFSET_FIELDS = (
    "sign_in_start_offset",
    "sign_in_end_offset",
    "sign_out_start_offset",
    "sign_out_end_offset",
)


def event_to_dict(event: Event) -> dict:
    return {
        "event_id": event.event_id,
        "name": event.name,
        "start_time": event.start_time.isoformat(),
        "end_time": event.end_time.isoformat(),
        "latitude": event.latitude,
        "longitude": event.longitude,
        "geofence_radius": event.geofence_radius,
        "sign_in_start_offset": event.sign_in_start_offset,
        "sign_in_end_offset": event.sign_in_end_offset,
        "sign_out_start_offset": event.sign_out_start_offset,
        "sign_out_end_offset": event.sign_out_end_offset,
        "is_active": event.is_active,
    }


def _parse_time(data: dict, key: str):
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{key} is required (ISO-8601)")
    try:
        return parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"{key} is not a valid ISO-8601 datetime")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/events", methods=["GET"], endpoint="api_list_events")
    def api_list_events():
        """Active events, earliest start first."""
        try:
            events = container.event_service.list_active_events()
        except StoreError as e:
            return error_response(ErrorKind.OPERATION_FAILED, str(e))
        return jsonify({"success": True, "data": [event_to_dict(e) for e in events]})

    @app.route("/api/events", methods=["POST"], endpoint="api_create_event")
    def api_create_event():
        try:
            data = json_body()
            kwargs = {
                "name": data.get("name") or "",
                "start_time": _parse_time(data, "start_time"),
                "end_time": _parse_time(data, "end_time"),
                "latitude": optional_float(data, "latitude"),
                "longitude": optional_float(data, "longitude"),
            }
            radius = optional_float(data, "geofence_radius")
            if radius is not None:
                kwargs["geofence_radius"] = radius
            for key in _OFFSET_FIELDS:
                if data.get(key) is not None:
                    kwargs[key] = int(data[key])
        except (ValidationError, TypeError, ValueError) as e:
            return error_response(ErrorKind.VALIDATION, str(e))

        result = container.event_service.create_event(**kwargs)
        return result_response(result, event_to_dict, status=201)

    @app.route("/api/events/<event_id>", methods=["PATCH"], endpoint="api_update_event")
    def api_update_event(event_id: str):
        try:
            data = json_body()
            changes = {}
            for key in ("start_time", "end_time"):
                if key in data:
                    changes[key] = _parse_time(data, key)
            for key in ("latitude", "longitude", "geofence_radius"):
                if key in data:
                    changes[key] = optional_float(data, key)
            # Unknown keys are passed through so the service can reject them.
            for key in set(data) - set(changes):
                changes[key] = data[key]
        except ValidationError as e:
            return error_response(ErrorKind.VALIDATION, str(e))

        result = container.event_service.update_event(event_id, **changes)
        return result_response(result, event_to_dict)

    @app.route("/api/events/<event_id>/deactivate", methods=["POST"], endpoint="api_deactivate_event")
    def api_deactivate_event(event_id: str):
        return result_response(container.event_service.deactivate_event(event_id), event_to_dict)

    @app.route("/api/events/<event_id>/classify", methods=["GET"], endpoint="api_classify")
    def api_classify(event_id: str):
        """Preview the status a check at ``at`` (default: now) would get."""
        at = None
        raw = request.args.get("at")
        if raw:
            try:
                at = parse_iso_datetime(raw)
            except ValueError:
                return error_response(ErrorKind.VALIDATION, "at is not a valid ISO-8601 datetime")

        gate = container.attendance_gate
        if request.args.get("phase", "arrival") == "departure":
            result = gate.classify_departure(event_id, at)
        else:
            result = gate.classify(event_id, at)
        return result_response(
            result,
            lambda d: {
                "status": d.status.value,
                "penalty": d.penalty.value if d.penalty else None,
                "note": d.note,
            },
        )
