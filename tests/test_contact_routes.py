import pytest


async def test_contact_message_is_stored(client):
    resp = await client.post(
        "/api/contact/add",
        json={"name": "Asha", "email": "asha@example.com", "phoneNumber": "9876543210", "message": "Bulk order?"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "We will reach you soon!"
    assert body["contact"]["phoneNumber"] == "9876543210"
    assert body["contact"]["email"] == "asha@example.com"


@pytest.mark.parametrize(
    "payload, error",
    [
        ({"name": "Asha", "message": "Hi"}, "You must enter a phone number."),
        ({"phoneNumber": "98765", "message": "Hi"}, "You must enter your name."),
        ({"phoneNumber": "98765", "name": "Asha"}, "You must enter a message."),
    ],
)
async def test_required_fields(client, payload, error):
    resp = await client.post("/api/contact/add", json=payload)

    assert resp.status_code == 400
    assert resp.json() == {"error": error}


async def test_third_message_in_a_minute_is_throttled(client):
    payload = {"name": "Asha", "phoneNumber": "98765", "message": "Hi"}

    assert (await client.post("/api/contact/add", json=payload)).status_code == 200
    assert (await client.post("/api/contact/add", json=payload)).status_code == 200
    assert (await client.post("/api/contact/add", json=payload)).status_code == 429


async def test_limit_is_per_member_when_signed_in(client, member_headers, other_member_headers):
    payload = {"name": "Asha", "phoneNumber": "98765", "message": "Hi"}

    for _ in range(2):
        assert (await client.post("/api/contact/add", json=payload, headers=member_headers)).status_code == 200
    assert (await client.post("/api/contact/add", json=payload, headers=member_headers)).status_code == 429
    assert (await client.post("/api/contact/add", json=payload, headers=other_member_headers)).status_code == 200
