from __future__ import annotations

from flask import Blueprint, jsonify

from app.linog.db import db_session, unit_of_work
from app.linog.modules.updates.service import (
    create_update,
    delete_update,
    edit_update,
    get_update,
    list_updates,
    serialize_update,
)
from app.linog.rbac import require_admin
from app.linog.utils import json_body

bp = Blueprint("updates", __name__)


# ---------- Public ----------
@bp.get("/updates")
def updates_list():
    s = db_session()
    return jsonify([serialize_update(u) for u in list_updates(s)])


@bp.get("/updates/<int:update_id>")
def update_detail(update_id: int):
    s = db_session()
    return jsonify(serialize_update(get_update(s, update_id)))


# ---------- Admin ----------
@bp.post("/admin/update")
@require_admin
def update_create():
    payload = json_body()
    with unit_of_work() as s:
        update = create_update(s, payload)
    return jsonify({"id": update.id, "message": "Update added successfully"})


@bp.put("/admin/update/<int:update_id>")
@require_admin
def update_edit(update_id: int):
    payload = json_body()
    with unit_of_work() as s:
        edit_update(s, update_id, payload)
    return jsonify({"id": update_id, "message": "Update updated successfully"})


@bp.delete("/admin/update/<int:update_id>")
@require_admin
def update_delete(update_id: int):
    with unit_of_work() as s:
        delete_update(s, update_id)
    return jsonify({"id": update_id, "message": "Update deleted successfully"})
