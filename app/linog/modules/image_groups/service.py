from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.linog.audit import record_admin_event
from app.linog.errors import INVALID, MISSING, ConflictError, FieldError, NotFoundError
from app.linog.utils import (
    LATITUDE_RANGE,
    LONGITUDE_RANGE,
    fits_integer,
    is_blank,
    isoformat,
    optional_text,
    parse_coordinate,
    parse_int,
    raise_if_errors,
    require_text,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.linog.modules.image_groups.models import Image, ImageGroup

TITLE_MAX_LENGTH = 255
LOCATION_NAME_MAX_LENGTH = 255
IMAGE_URL_MAX_LENGTH = 1024


# ---------- Serialization ----------
def serialize_image(image: "Image") -> dict:
    return {
        "id": image.id,
        "group_id": image.group_id,
        "marker_id": image.marker_id,
        "image_url": image.image_url,
        "caption": image.caption,
        "display_order": image.display_order,
        "created_at": isoformat(image.created_at),
    }


def serialize_image_group(group: "ImageGroup", image_count: int | None = None) -> dict:
    images = [serialize_image(i) for i in group.images]
    return {
        "id": group.id,
        "title": group.title,
        "description": group.description,
        "location_name": group.location_name,
        "latitude": group.latitude,
        "longitude": group.longitude,
        "created_at": isoformat(group.created_at),
        "image_count": len(images) if image_count is None else image_count,
        "images": images,
    }


# ---------- Validation ----------
def validate_image_group_payload(payload: dict) -> tuple[dict, list[FieldError]]:
    """Title is required; coordinates are optional but range-checked when given."""
    errors: list[FieldError] = []
    cleaned = {
        "title": require_text(payload, "title", errors, max_length=TITLE_MAX_LENGTH),
        "description": optional_text(payload, "description", errors),
        "location_name": optional_text(payload, "location_name", errors, max_length=LOCATION_NAME_MAX_LENGTH),
        "latitude": parse_coordinate(payload, "latitude", LATITUDE_RANGE, errors, required=False),
        "longitude": parse_coordinate(payload, "longitude", LONGITUDE_RANGE, errors, required=False),
    }
    return cleaned, errors


def validate_image_fields(
    payload: dict, errors: list[FieldError], *, prefix: str = "", default_order: int | None = 0
) -> dict:
    """
    Validate the url/caption/order of one image. ``url`` is accepted as an
    alias of ``image_url`` for marker image lists.
    """
    item = dict(payload)
    if is_blank(item.get("image_url")) and not is_blank(item.get("url")):
        item["image_url"] = item["url"]
    field_errors: list[FieldError] = []
    cleaned = {
        "image_url": require_text(item, "image_url", field_errors, label="Image URL", max_length=IMAGE_URL_MAX_LENGTH),
        "caption": optional_text(item, "caption", field_errors),
        "display_order": parse_int(item, "display_order", field_errors, required=False, default=default_order),
    }
    for e in field_errors:
        errors.append(FieldError(f"{prefix}{e.field}", e.code, e.message))
    return cleaned


def _validate_new_image_payload(payload: dict) -> tuple[dict, list[FieldError]]:
    errors: list[FieldError] = []
    group_id = parse_int(payload, "group_id", errors, required=False, bounded=False)
    marker_id = parse_int(payload, "marker_id", errors, required=False, bounded=False)
    if group_id is None and marker_id is None and not errors:
        errors.append(FieldError("group_id", MISSING, "Group ID is required."))
    elif group_id is not None and marker_id is not None:
        errors.append(FieldError("group_id", INVALID, "An image belongs to either a group or a marker, not both."))
    cleaned = validate_image_fields(payload, errors)
    cleaned.update({"group_id": group_id, "marker_id": marker_id})
    return cleaned, errors


# ---------- Image groups ----------
def list_image_groups(s: "Session") -> list[tuple["ImageGroup", int]]:
    """Groups newest first, each with its image count aggregated in the same query."""
    from app.linog.modules.image_groups.models import Image, ImageGroup

    stmt = (
        select(ImageGroup, func.count(Image.id))
        .outerjoin(Image, Image.group_id == ImageGroup.id)
        .group_by(ImageGroup.id)
        .order_by(ImageGroup.created_at.desc(), ImageGroup.id.desc())
    )
    return [(group, int(count)) for group, count in s.execute(stmt).all()]


def get_image_group(s: "Session", group_id: int) -> "ImageGroup":
    from app.linog.modules.image_groups.models import ImageGroup

    group = s.get(ImageGroup, group_id) if fits_integer(group_id) else None
    if group is None:
        raise NotFoundError("Image group not found")
    return group


def create_image_group(s: "Session", payload: dict) -> "ImageGroup":
    from app.linog.modules.image_groups.models import ImageGroup

    fields, errors = validate_image_group_payload(payload)
    raise_if_errors(errors)

    group = ImageGroup(**fields)
    s.add(group)
    s.flush()

    record_admin_event(
        s,
        "image_group.create",
        entity_type="ImageGroup",
        entity_id=str(group.id),
        metadata={"title": group.title},
    )
    return group


def update_image_group(s: "Session", group_id: int, payload: dict) -> "ImageGroup":
    """Replace the group's descriptive fields; omitted optional fields are cleared."""
    fields, errors = validate_image_group_payload(payload)
    raise_if_errors(errors)

    group = get_image_group(s, group_id)
    changes = {}
    for key, value in fields.items():
        if getattr(group, key) != value:
            changes[key] = {"old": getattr(group, key), "new": value}
            setattr(group, key, value)

    record_admin_event(
        s,
        "image_group.edit",
        entity_type="ImageGroup",
        entity_id=str(group.id),
        metadata={"changes": changes},
    )
    return group


def delete_image_group(s: "Session", group_id: int) -> int:
    """
    Delete a group together with its images. Returns the number of images removed.
    Must run inside a single unit of work so no image outlives its group.
    """
    group = get_image_group(s, group_id)
    image_count = len(group.images)
    title = group.title
    s.delete(group)
    s.flush()

    record_admin_event(
        s,
        "image_group.delete",
        entity_type="ImageGroup",
        entity_id=str(group_id),
        metadata={"title": title, "images_deleted": image_count},
    )
    return image_count


# ---------- Images ----------
def get_image(s: "Session", image_id: int) -> "Image":
    from app.linog.modules.image_groups.models import Image

    image = s.get(Image, image_id) if fits_integer(image_id) else None
    if image is None:
        raise NotFoundError("Image not found")
    return image


def add_image(s: "Session", payload: dict) -> "Image":
    """Attach an image URL to an existing group or marker."""
    from app.linog.modules.image_groups.models import Image, ImageGroup
    from app.linog.modules.markers.models import Marker

    fields, errors = _validate_new_image_payload(payload)
    raise_if_errors(errors)

    group_id, marker_id = fields["group_id"], fields["marker_id"]
    if group_id is not None:
        if not fits_integer(group_id) or s.get(ImageGroup, group_id) is None:
            raise ConflictError("Image group not found")
    elif not fits_integer(marker_id) or s.get(Marker, marker_id) is None:
        raise ConflictError("Marker not found")

    image = Image(**fields)
    s.add(image)
    try:
        s.flush()
    except IntegrityError:
        # Owner removed by a concurrent request after the lookup above.
        raise ConflictError("Image owner no longer exists")

    record_admin_event(
        s,
        "image.create",
        entity_type="Image",
        entity_id=str(image.id),
        metadata={"group_id": image.group_id, "marker_id": image.marker_id, "image_url": image.image_url},
    )
    return image


def update_image(s: "Session", image_id: int, payload: dict) -> "Image":
    """Edit url, caption and display order. The owner cannot be changed."""
    errors: list[FieldError] = []
    fields = validate_image_fields(payload, errors, default_order=None)
    raise_if_errors(errors)

    image = get_image(s, image_id)
    if fields["display_order"] is None:
        fields["display_order"] = image.display_order
    changes = {}
    for key, value in fields.items():
        if getattr(image, key) != value:
            changes[key] = {"old": getattr(image, key), "new": value}
            setattr(image, key, value)

    record_admin_event(
        s,
        "image.edit",
        entity_type="Image",
        entity_id=str(image.id),
        metadata={"changes": changes},
    )
    return image


def delete_image(s: "Session", image_id: int) -> None:
    image = get_image(s, image_id)
    meta = {"group_id": image.group_id, "marker_id": image.marker_id, "image_url": image.image_url}
    s.delete(image)
    s.flush()

    record_admin_event(s, "image.delete", entity_type="Image", entity_id=str(image_id), metadata=meta)
