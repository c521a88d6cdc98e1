from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import error_response, result_response
from ..core.enums import ErrorKind, PenaltyType
from ..core.exceptions import StoreError
from ..container import Container
from .model import PenaltyAnalysis, PenaltyPreview, PenaltyStatus


def analysis_to_dict(analysis: PenaltyAnalysis) -> dict:
    return {
        "member_id": analysis.member_id,
        "total_points": analysis.total_points,
        "risk_level": analysis.risk_level.value,
        "breakdown": {penalty.value: count for penalty, count in analysis.breakdown.items()},
        "attendance_rate": round(analysis.attendance_rate, 2),
        "total_events": analysis.total_events,
        "flagged_for_review": analysis.flagged_for_review,
        "recommendations": list(analysis.recommendations),
    }


def status_to_dict(status: PenaltyStatus) -> dict:
    return {
        "member_id": status.member_id,
        "late_count": status.late_count,
        "absent_count": status.absent_count,
        "current_level": status.current_level.value if status.current_level else None,
        "recommended_action": status.recommended_action,
        "escalate": status.escalate,
    }


def preview_to_dict(preview: PenaltyPreview) -> dict:
    return {
        "penalty": preview.penalty.value if preview.penalty else None,
        "total_points": preview.total_points,
        "risk_level": preview.risk_level.value,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/members/<member_id>/penalties", methods=["GET"], endpoint="api_member_penalties")
    def api_member_penalties(member_id: str):
        return result_response(container.penalty_report_service.analysis_for_member(member_id), analysis_to_dict)

    @app.route("/api/members/<member_id>/penalties/status", methods=["GET"], endpoint="api_member_penalty_status")
    def api_member_penalty_status(member_id: str):
        return result_response(container.penalty_report_service.status_for_member(member_id), status_to_dict)

    @app.route("/api/members/<member_id>/penalties/preview", methods=["GET"], endpoint="api_member_penalty_preview")
    def api_member_penalty_preview(member_id: str):
        """Risk the member would be at if ``?penalty=`` were recorded; no penalty previews the current total."""
        raw = request.args.get("penalty")
        penalty = None
        if raw:
            try:
                penalty = PenaltyType(raw.strip().upper())
            except ValueError:
                allowed = ", ".join(p.value for p in PenaltyType)
                return error_response(ErrorKind.VALIDATION, f"penalty must be one of: {allowed}")
        return result_response(container.penalty_report_service.preview_for_member(member_id, penalty), preview_to_dict)

    @app.route("/api/penalties/review", methods=["GET"], endpoint="api_penalty_review")
    def api_penalty_review():
        """Active members whose risk level is CRITICAL."""
        try:
            member_ids = container.members_repo.list_active_ids()
        except StoreError as e:
            return error_response(ErrorKind.OPERATION_FAILED, str(e))
        return jsonify({"success": True, "data": container.penalty_report_service.members_requiring_review(member_ids)})

    @app.route("/api/penalties/rules", methods=["GET"], endpoint="api_penalty_rules")
    def api_penalty_rules():
        rules = container.penalty_report_service.penalty_rules()
        return jsonify(
            {
                "success": True,
                "data": [
                    {
                        "status": r.status.value,
                        "max_minutes_late": r.max_minutes_late,
                        "penalty": r.penalty.value,
                        "description": r.description,
                    }
                    for r in rules
                ],
            }
        )
