from app.linog.db import session_scope
from app.linog.modules.donations.models import Donation


def test_only_active_donations_are_listed(app, client):
    with session_scope(app) as s:
        s.add(Donation(title="Relief goods", contact_info="0917 000 0000", is_active=True))
        s.add(Donation(title="Closed drive", is_active=False))
        s.add(Donation(title="Cash via GCash", description="Send to the barangay fund.", image_url="https://img.example/qr.png"))

    donations = client.get("/api/donations").json
    assert sorted(d["title"] for d in donations) == ["Cash via GCash", "Relief goods"]
    cash = next(d for d in donations if d["title"] == "Cash via GCash")
    assert cash["image_url"] == "https://img.example/qr.png"
    assert cash["contact_info"] is None
    assert "is_active" not in cash


def test_donations_read_without_token(client):
    r = client.get("/api/donations")
    assert r.status_code == 200
    assert r.json == []
