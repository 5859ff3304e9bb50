from __future__ import annotations

from flask import Blueprint, jsonify

from app.linog.db import db_session, unit_of_work
from app.linog.modules.image_groups.service import (
    add_image,
    create_image_group,
    delete_image,
    delete_image_group,
    get_image_group,
    list_image_groups,
    serialize_image_group,
    update_image,
    update_image_group,
)
from app.linog.rbac import require_admin
from app.linog.utils import json_body

bp = Blueprint("image_groups", __name__)


# ---------- Public ----------
@bp.get("/image-groups")
def image_groups_list():
    s = db_session()
    return jsonify([serialize_image_group(group, image_count=n) for group, n in list_image_groups(s)])


@bp.get("/image-groups/<int:group_id>")
def image_group_detail(group_id: int):
    s = db_session()
    return jsonify(serialize_image_group(get_image_group(s, group_id)))


# ---------- Admin: groups ----------
@bp.post("/admin/image-group")
@require_admin
def image_group_create():
    payload = json_body()
    with unit_of_work() as s:
        group = create_image_group(s, payload)
    return jsonify({"id": group.id, "message": "Image group added successfully"})


@bp.put("/admin/image-group/<int:group_id>")
@require_admin
def image_group_edit(group_id: int):
    payload = json_body()
    with unit_of_work() as s:
        update_image_group(s, group_id, payload)
    return jsonify({"id": group_id, "message": "Image group updated successfully"})


@bp.delete("/admin/image-group/<int:group_id>")
@require_admin
def image_group_delete(group_id: int):
    with unit_of_work() as s:
        images_deleted = delete_image_group(s, group_id)
    return jsonify({"id": group_id, "images_deleted": images_deleted, "message": "Image group deleted successfully"})


# ---------- Admin: images ----------
@bp.post("/admin/image")
@require_admin
def image_create():
    payload = json_body()
    with unit_of_work() as s:
        image = add_image(s, payload)
    return jsonify({"id": image.id, "message": "Image added successfully"})


@bp.put("/admin/image/<int:image_id>")
@require_admin
def image_edit(image_id: int):
    payload = json_body()
    with unit_of_work() as s:
        update_image(s, image_id, payload)
    return jsonify({"id": image_id, "message": "Image updated successfully"})


@bp.delete("/admin/image/<int:image_id>")
@require_admin
def image_delete(image_id: int):
    with unit_of_work() as s:
        delete_image(s, image_id)
    return jsonify({"id": image_id, "message": "Image deleted successfully"})
