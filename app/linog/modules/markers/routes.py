from __future__ import annotations

from flask import Blueprint, jsonify

from app.linog.db import db_session, unit_of_work
from app.linog.modules.markers.service import (
    create_marker,
    delete_marker,
    get_marker,
    list_markers,
    serialize_marker,
    update_marker,
)
from app.linog.rbac import require_admin
from app.linog.utils import json_body

bp = Blueprint("markers", __name__)


# ---------- Public ----------
@bp.get("/markers")
def markers_list():
    s = db_session()
    return jsonify([serialize_marker(m) for m in list_markers(s)])


@bp.get("/markers/<int:marker_id>")
def marker_detail(marker_id: int):
    s = db_session()
    return jsonify(serialize_marker(get_marker(s, marker_id)))


# ---------- Admin ----------
@bp.post("/admin/marker")
@require_admin
def marker_create():
    payload = json_body()
    with unit_of_work() as s:
        marker = create_marker(s, payload)
    return jsonify({"id": marker.id, "message": "Marker added successfully"})


@bp.put("/admin/marker/<int:marker_id>")
@require_admin
def marker_edit(marker_id: int):
    payload = json_body()
    with unit_of_work() as s:
        update_marker(s, marker_id, payload)
    return jsonify({"id": marker_id, "message": "Marker updated successfully"})


@bp.delete("/admin/marker/<int:marker_id>")
@require_admin
def marker_delete(marker_id: int):
    with unit_of_work() as s:
        images_deleted = delete_marker(s, marker_id)
    return jsonify({"id": marker_id, "images_deleted": images_deleted, "message": "Marker deleted successfully"})
