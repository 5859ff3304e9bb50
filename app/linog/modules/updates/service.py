from __future__ import annotations

from typing import TYPE_CHECKING

from app.linog.audit import record_admin_event
from app.linog.errors import FieldError, NotFoundError
from app.linog.utils import fits_integer, isoformat, raise_if_errors, require_text

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.linog.modules.updates.models import Update

TITLE_MAX_LENGTH = 255


def validate_update_payload(payload: dict) -> tuple[dict, list[FieldError]]:
    """Validate update create/edit payload. Returns (cleaned fields, errors)."""
    errors: list[FieldError] = []
    cleaned = {
        "title": require_text(payload, "title", errors, max_length=TITLE_MAX_LENGTH),
        "content": require_text(payload, "content", errors),
    }
    return cleaned, errors


def serialize_update(update: "Update") -> dict:
    return {
        "id": update.id,
        "title": update.title,
        "content": update.content,
        "created_at": isoformat(update.created_at),
    }


def list_updates(s: "Session") -> list["Update"]:
    from app.linog.modules.updates.models import Update

    return s.query(Update).order_by(Update.created_at.desc(), Update.id.desc()).all()


def get_update(s: "Session", update_id: int) -> "Update":
    from app.linog.modules.updates.models import Update

    update = s.get(Update, update_id) if fits_integer(update_id) else None
    if update is None:
        raise NotFoundError("Update not found")
    return update


def create_update(s: "Session", payload: dict) -> "Update":
    from app.linog.modules.updates.models import Update

    fields, errors = validate_update_payload(payload)
    raise_if_errors(errors)

    update = Update(title=fields["title"], content=fields["content"])
    s.add(update)
    s.flush()

    record_admin_event(
        s,
        "update.create",
        entity_type="Update",
        entity_id=str(update.id),
        metadata={"title": update.title},
    )
    return update


def edit_update(s: "Session", update_id: int, payload: dict) -> "Update":
    """Replace title and content. created_at is left untouched."""
    fields, errors = validate_update_payload(payload)
    raise_if_errors(errors)

    update = get_update(s, update_id)
    changes = {}
    for key in ("title", "content"):
        if getattr(update, key) != fields[key]:
            changes[key] = {"old": getattr(update, key), "new": fields[key]}
            setattr(update, key, fields[key])

    record_admin_event(
        s,
        "update.edit",
        entity_type="Update",
        entity_id=str(update.id),
        metadata={"changes": changes},
    )
    return update


def delete_update(s: "Session", update_id: int) -> None:
    update = get_update(s, update_id)
    title = update.title
    s.delete(update)
    s.flush()

    record_admin_event(
        s,
        "update.delete",
        entity_type="Update",
        entity_id=str(update_id),
        metadata={"title": title},
    )
