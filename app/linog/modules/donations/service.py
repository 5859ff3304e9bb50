from __future__ import annotations

from typing import TYPE_CHECKING

from app.linog.utils import isoformat

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.linog.modules.donations.models import Donation


def serialize_donation(donation: "Donation") -> dict:
    return {
        "id": donation.id,
        "title": donation.title,
        "description": donation.description,
        "contact_info": donation.contact_info,
        "image_url": donation.image_url,
        "created_at": isoformat(donation.created_at),
    }


def list_active_donations(s: "Session") -> list["Donation"]:
    """Donations visible on the public site. Inactive rows are never returned."""
    from app.linog.modules.donations.models import Donation

    return (
        s.query(Donation)
        .filter(Donation.is_active.is_(True))
        .order_by(Donation.created_at.desc(), Donation.id.desc())
        .all()
    )
