from __future__ import annotations

from flask import Blueprint, jsonify

from app.linog.db import db_session
from app.linog.modules.donations.service import list_active_donations, serialize_donation

bp = Blueprint("donations", __name__)


@bp.get("/donations")
def donations_list():
    s = db_session()
    return jsonify([serialize_donation(d) for d in list_active_donations(s)])
