from __future__ import annotations

from flask import Flask, jsonify

from ..core.enums import SyncStatus
from ..container import Container


def _status_code(status: SyncStatus) -> int:
    if status == SyncStatus.SUCCESS:
        return 200
    if status == SyncStatus.PARTIAL_SUCCESS:
        return 207
    return 502


def register(app: Flask, container: Container) -> None:
    def _run(fn_name: str):
        reconciler = container.sync_reconciler
        if reconciler is None:
            return jsonify({"success": False, "message": "Remote store is not configured"}), 503
        outcome = getattr(reconciler, fn_name)()
        return (
            jsonify({"success": outcome.status == SyncStatus.SUCCESS, "data": outcome.as_dict()}),
            _status_code(outcome.status),
        )

    @app.route("/api/sync", methods=["POST"], endpoint="api_sync_all")
    def api_sync_all():
        return _run("sync_all")

    @app.route("/api/sync/push", methods=["POST"], endpoint="api_sync_push")
    def api_sync_push():
        return _run("push")

    @app.route("/api/sync/pull", methods=["POST"], endpoint="api_sync_pull")
    def api_sync_pull():
        return _run("pull")
