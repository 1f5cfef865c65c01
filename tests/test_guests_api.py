from urllib.parse import unquote

from conftest import client_error, wedding_details
from inviteme import config
from inviteme.validation import PHONE_INVALID

GUEST = {"first_name": "דנה", "last_name": "כהן", "phone": "050-123-4567", "email": "dana@example.com"}


def test_invite_by_whatsapp(client, make_event, tables, organizer):
    make_event("e1", invitation_path="inv.jpg")

    response = client.post("/guests/invite", json=GUEST)

    assert response.status_code == 200
    body = response.json()
    guest = body["guest"]
    stored = tables.guests.items[guest["id"]]
    assert stored["event_id"] == "e1"
    assert stored["user_id"] == organizer.id
    assert stored["status"] == "pending"
    assert stored["total_guests"] == 1

    assert body["rsvp_link"] == f"{config.PUBLIC_BASE_URL}/e1/{guest['id']}"
    assert body["channel"] == "whatsapp"
    assert body["message_url"].startswith("https://wa.me/972501234567?text=")
    message = unquote(body["message_url"].split("?text=", 1)[1])
    assert message.startswith("הזמנה לחתונה")
    assert f"https://{config.INVITES_BUCKET}.s3.amazonaws.com/inv.jpg" in message
    assert message.endswith(body["rsvp_link"])


def test_invite_by_sms_uses_chosen_invitation_text(client, make_event):
    make_event("e1", event_details={**wedding_details(), "invitation_text": "בואו לחגוג!"})

    body = client.post("/guests/invite", json={**GUEST, "channel": "sms"}).json()

    assert body["message_url"].startswith("sms:972501234567?body=")
    message = unquote(body["message_url"].split("?body=", 1)[1])
    assert message.startswith("בואו לחגוג!\n\n")


def test_invite_for_explicit_event(client, make_event, tables):
    make_event("older", created_at="2026-01-01T00:00:00+00:00")
    make_event("newer", created_at="2026-02-01T00:00:00+00:00")

    guest = client.post("/guests/invite", json={**GUEST, "event_id": "older"}).json()["guest"]

    assert tables.guests.items[guest["id"]]["event_id"] == "older"


def test_invite_with_invalid_phone(client, make_event, tables):
    make_event("e1")

    response = client.post("/guests/invite", json={**GUEST, "phone": "123"})

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == PHONE_INVALID
    assert tables.guests.items == {}


def test_invite_without_event(client):
    assert client.post("/guests/invite", json=GUEST).status_code == 404


def test_invite_backend_failure(client, make_event, tables):
    make_event("e1")
    tables.guests.error = client_error("InternalServerError", "PutItem")

    response = client.post("/guests/invite", json={**GUEST, "channel": "sms"})

    assert response.status_code == 500
    assert response.json()["detail"] == "אירעה שגיאה בשליחת ההזמנה בסמס."


def test_sent_list_and_removal(client, make_event, tables):
    make_event("e1")
    first = client.post("/guests/invite", json=GUEST).json()["guest"]
    client.post("/guests/invite", json={**GUEST, "first_name": "יוסי"})

    sent = client.get("/guests/sent").json()["sent"]
    assert [entry["name"] for entry in sent] == ["דנה כהן", "יוסי כהן"]

    response = client.delete("/guests/sent/0")
    assert response.status_code == 200
    assert [entry["name"] for entry in response.json()["sent"]] == ["יוסי כהן"]
    # the stored guest is untouched
    assert first["id"] in tables.guests.items

    assert client.delete("/guests/sent/5").status_code == 404


def test_guest_list_grouped_by_status(client, make_event, make_guest):
    make_event("e1")
    make_guest("g1", event_id="e1", status="pending")
    make_guest("g2", event_id="e1", status="approved")
    make_guest("g3", event_id="e1", status="rejected")
    make_guest("g4", event_id="e1", status="")
    make_guest("g5", event_id="other-event", status="approved")

    body = client.get("/guests/").json()

    assert body["event_id"] == "e1"
    groups = body["guests"]
    assert {g["id"] for g in groups["pending"]} == {"g1", "g4"}
    assert [g["id"] for g in groups["approved"]] == ["g2"]
    assert [g["id"] for g in groups["rejected"]] == ["g3"]
    assert groups["approved"][0]["status_label"] == "מגיע"


def test_guest_list_without_event(client):
    body = client.get("/guests/").json()
    assert body == {"event_id": None, "guests": {"pending": [], "approved": [], "rejected": []}}


def test_search(client, make_guest):
    make_guest("g1", first_name="דנה")
    make_guest("g2", first_name="רון", phone="052-999-0000")

    assert [g["id"] for g in client.get("/guests/search", params={"term": "999"}).json()["results"]] == ["g2"]


def test_search_requires_term(client):
    response = client.get("/guests/search", params={"term": "  "})
    assert response.status_code == 400


def test_search_without_results(client, make_guest):
    make_guest("g1")
    assert client.get("/guests/search", params={"term": "xyz"}).status_code == 404


def test_search_ignores_case(client, make_guest):
    make_guest("g1", first_name="Dana", last_name="Levi")
    make_guest("g2", first_name="רון", last_name="LEVINE")

    response = client.get("/guests/search", params={"term": "dana"})

    assert response.status_code == 200
    assert [g["id"] for g in response.json()["results"]] == ["g1"]
    found = client.get("/guests/search", params={"term": "levi"}).json()["results"]
    assert {g["id"] for g in found} == {"g1", "g2"}
