from __future__ import annotations

from typing import TYPE_CHECKING

from app.linog.audit import record_admin_event
from app.linog.errors import INVALID, FieldError, NotFoundError
from app.linog.modules.image_groups.service import serialize_image, validate_image_fields
from app.linog.utils import (
    LATITUDE_RANGE,
    LONGITUDE_RANGE,
    fits_integer,
    isoformat,
    parse_coordinate,
    raise_if_errors,
    require_text,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.linog.modules.markers.models import Marker


_MISSING_IMAGES = object()


def serialize_marker(marker: "Marker") -> dict:
    return {
        "id": marker.id,
        "latitude": marker.latitude,
        "longitude": marker.longitude,
        "description": marker.description,
        "created_at": isoformat(marker.created_at),
        "images": [serialize_image(i) for i in marker.images],
    }


def validate_marker_payload(payload: dict) -> tuple[dict, list[FieldError]]:
    """
    Validate marker create/edit payload. Returns (cleaned fields, errors).

    ``images`` is optional; when present it must be a list of
    ``{image_url|url, caption, display_order}`` objects and replaces the
    marker's current images. List position is the default display order.
    """
    errors: list[FieldError] = []
    cleaned: dict = {
        "latitude": parse_coordinate(payload, "latitude", LATITUDE_RANGE, errors, required=True),
        "longitude": parse_coordinate(payload, "longitude", LONGITUDE_RANGE, errors, required=True),
        "description": require_text(payload, "description", errors),
        "images": _MISSING_IMAGES,
    }

    if "images" in payload and payload["images"] is not None:
        raw_images = payload["images"]
        if not isinstance(raw_images, list):
            errors.append(FieldError("images", INVALID, "Images must be a list."))
        else:
            images = []
            for idx, item in enumerate(raw_images):
                if not isinstance(item, dict):
                    errors.append(FieldError(f"images[{idx}]", INVALID, "Each image must be an object."))
                    continue
                images.append(validate_image_fields(item, errors, prefix=f"images[{idx}].", default_order=idx))
            cleaned["images"] = images
    elif "images" in payload:
        cleaned["images"] = []
    return cleaned, errors


def _replace_images(marker: "Marker", images: list[dict]) -> None:
    from app.linog.modules.image_groups.models import Image

    # delete-orphan cascade removes the dropped rows on flush
    marker.images = [Image(**fields) for fields in images]


def list_markers(s: "Session") -> list["Marker"]:
    from app.linog.modules.markers.models import Marker

    return s.query(Marker).order_by(Marker.created_at.desc(), Marker.id.desc()).all()


def get_marker(s: "Session", marker_id: int) -> "Marker":
    from app.linog.modules.markers.models import Marker

    marker = s.get(Marker, marker_id) if fits_integer(marker_id) else None
    if marker is None:
        raise NotFoundError("Marker not found")
    return marker


def create_marker(s: "Session", payload: dict) -> "Marker":
    from app.linog.modules.markers.models import Marker

    fields, errors = validate_marker_payload(payload)
    raise_if_errors(errors)

    images = fields.pop("images")
    marker = Marker(**fields)
    if images is not _MISSING_IMAGES:
        _replace_images(marker, images)
    s.add(marker)
    s.flush()

    record_admin_event(
        s,
        "marker.create",
        entity_type="Marker",
        entity_id=str(marker.id),
        metadata={
            "latitude": marker.latitude,
            "longitude": marker.longitude,
            "images": len(marker.images),
        },
    )
    return marker


def update_marker(s: "Session", marker_id: int, payload: dict) -> "Marker":
    """
    Replace coordinates and description. Images are replaced only when the
    payload carries an ``images`` key; otherwise they are left as they are.
    """
    fields, errors = validate_marker_payload(payload)
    raise_if_errors(errors)

    marker = get_marker(s, marker_id)
    images = fields.pop("images")
    changes = {}
    for key, value in fields.items():
        if getattr(marker, key) != value:
            changes[key] = {"old": getattr(marker, key), "new": value}
            setattr(marker, key, value)
    if images is not _MISSING_IMAGES:
        changes["images"] = {"old": len(marker.images), "new": len(images)}
        _replace_images(marker, images)
    s.flush()

    record_admin_event(
        s,
        "marker.edit",
        entity_type="Marker",
        entity_id=str(marker.id),
        metadata={"changes": changes},
    )
    return marker


def delete_marker(s: "Session", marker_id: int) -> int:
    """Delete a marker and its images in the caller's unit of work. Returns images removed."""
    marker = get_marker(s, marker_id)
    image_count = len(marker.images)
    s.delete(marker)
    s.flush()

    record_admin_event(
        s,
        "marker.delete",
        entity_type="Marker",
        entity_id=str(marker_id),
        metadata={"images_deleted": image_count},
    )
    return image_count
