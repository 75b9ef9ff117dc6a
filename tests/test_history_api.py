from tests.factories import chosen_route, narrative_reply, ready_form


async def test_saved_routes_are_listed_newest_first_and_owner_scoped(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob

    ids = []
    for destination in ("Tokyo", "Rotterdam"):
        resp = await client.post(
            "/api/save-route",
            json={
                "formData": {"from": "Mumbai", "to": destination, "package": {"weight": "12.5"}},
                "routeData": chosen_route(),
            },
            headers=alice_headers,
        )
        assert resp.status_code == 200
        ids.append(resp.json()["data"]["recordId"])

    listed = (await client.get("/api/route-history", headers=alice_headers)).json()
    assert [record["id"] for record in listed["data"]] == list(reversed(ids))
    assert listed["data"][0]["formData"] == {"from": "Mumbai", "to": "Rotterdam", "weight": 12.5}

    others = (await client.get("/api/route-history", headers=bob_headers)).json()
    assert others["data"] == []


async def test_save_route_validates_form(client, alice):
    _, headers = alice
    resp = await client.post(
        "/api/save-route",
        json={"formData": {"from": "Mumbai", "weight": 3}, "routeData": chosen_route()},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


async def test_delete_is_owner_scoped(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    saved = await client.post(
        "/api/save-route",
        json={"formData": {"from": "Mumbai", "to": "Tokyo", "weight": 3}, "routeData": chosen_route()},
        headers=alice_headers,
    )
    record_id = saved.json()["data"]["recordId"]

    denied = await client.delete(f"/api/route-history/{record_id}", headers=bob_headers)
    assert denied.status_code == 404

    deleted = await client.delete(f"/api/route-history/{record_id}", headers=alice_headers)
    assert deleted.status_code == 200
    listed = (await client.get("/api/route-history", headers=alice_headers)).json()
    assert listed["data"] == []


async def test_history_survives_draft_deletion(client, alice, fake_llm):
    _, headers = alice
    fake_llm.when("compliance assistant", narrative_reply())
    checked = await client.post("/api/compliance-check", json=ready_form(), headers=headers)
    draft_id = checked.json()["data"]["recordId"]

    assert (await client.delete(f"/api/drafts/{draft_id}", headers=headers)).status_code == 200

    history = (await client.get("/api/compliance-history", headers=headers)).json()["data"]
    assert history[0]["draftId"] == draft_id
    record_id = history[0]["id"]

    resp = await client.delete(f"/api/compliance-history/{record_id}", headers=headers)
    assert resp.status_code == 200
    assert (await client.get("/api/compliance-history", headers=headers)).json()["data"] == []
