NEW_DRAFT = {
    "originCountry": "India",
    "destinationCountry": "Japan",
    "hsCode": "640399",
    "productDescription": "Leather shoes",
    "perishable": "No",
    "hazardous": "No",
    "weight": 80,
}


async def test_create_read_patch_delete(client, alice):
    _, headers = alice

    created = await client.post("/api/drafts", json=NEW_DRAFT, headers=headers)
    assert created.status_code == 201
    draft_id = created.json()["data"]["recordId"]

    draft = (await client.get(f"/api/drafts/{draft_id}", headers=headers)).json()["data"]
    assert draft["formData"]["ShipmentDetails"]["Origin Country"] == "India"
    assert draft["formData"]["ShipmentDetails"]["Gross Weight"] == 80
    assert draft["complianceData"] is None

    form = {**draft["formData"], "IntendedUseDetails": {"Intended Use": "Retail sale"}}
    patched = await client.patch(f"/api/drafts/{draft_id}", json={"formData": form}, headers=headers)
    assert patched.status_code == 200
    assert patched.json()["data"]["formData"]["IntendedUseDetails"] == {"Intended Use": "Retail sale"}

    deleted = await client.delete(f"/api/drafts/{draft_id}", headers=headers)
    assert deleted.status_code == 200
    missing = await client.get(f"/api/drafts/{draft_id}", headers=headers)
    assert missing.status_code == 404


async def test_patch_cannot_set_statuses(client, alice):
    _, headers = alice
    draft_id = (await client.post("/api/drafts", json=NEW_DRAFT, headers=headers)).json()["data"]["recordId"]

    resp = await client.patch(
        f"/api/drafts/{draft_id}",
        json={"statuses": {"compliance": "compliant"}, "complianceData": {}},
        headers=headers,
    )

    assert resp.status_code == 400
    draft = (await client.get(f"/api/drafts/{draft_id}", headers=headers)).json()["data"]
    assert draft["statuses"]["compliance"] == "notDone"


async def test_create_requires_positive_weight(client, alice):
    _, headers = alice
    resp = await client.post("/api/drafts", json={**NEW_DRAFT, "weight": -1}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["success"] is False


async def test_listing_rejects_unknown_tab(client, alice):
    _, headers = alice
    resp = await client.get("/api/drafts", params={"tab": "shipped"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_tab"


async def test_other_users_cannot_see_drafts(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    draft_id = (await client.post("/api/drafts", json=NEW_DRAFT, headers=alice_headers)).json()["data"]["recordId"]

    assert (await client.get(f"/api/drafts/{draft_id}", headers=bob_headers)).status_code == 404
    assert (await client.delete(f"/api/drafts/{draft_id}", headers=bob_headers)).status_code == 404
    listed = (await client.get("/api/drafts", params={"tab": "yet-to-be-checked"}, headers=bob_headers)).json()
    assert listed == {"success": True, "data": [], "count": 0}


async def test_health_is_not_enveloped(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert "success" not in resp.json()
