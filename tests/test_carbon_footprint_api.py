import json

from tests.factories import carbon_reply, chosen_route

CARBON = "carbon footprint analyst"


def carbon_request(**overrides):
    body = {
        "origin": "Mumbai",
        "destination": "Tokyo",
        "distance": 6845,
        "weight": 120,
        "routeDirections": chosen_route()["routeDirections"],
    }
    body.update(overrides)
    return body


async def test_analysis_without_draft_goes_on_an_ephemeral_draft(client, alice, fake_llm):
    _, headers = alice
    fake_llm.when(CARBON, carbon_reply())

    resp = await client.post("/api/carbon-footprint", json=carbon_request(), headers=headers)

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["totalEmissions"] == "71.15 kg CO2e"
    assert len(data["routeAnalysis"]) == 2

    draft = (await client.get(f"/api/drafts/{data['draftId']}", headers=headers)).json()["data"]
    assert draft["expiresAt"] is not None
    assert draft["carbonAnalysisData"]["earthImpact"] == "About 3 trees for a year."
    assert draft["formData"] == {"ShipmentDetails": {"Gross Weight": 120.0}}

    listed = (await client.get("/api/drafts", params={"tab": "yet-to-be-checked"}, headers=headers)).json()
    assert listed["data"] == []


async def test_analysis_with_draft_updates_it(client, alice, fake_llm):
    _, headers = alice
    fake_llm.when(CARBON, carbon_reply())
    created = await client.post(
        "/api/drafts",
        json={
            "originCountry": "IN",
            "destinationCountry": "JP",
            "hsCode": "640399",
            "productDescription": "Leather shoes",
            "weight": 120,
        },
        headers=headers,
    )
    draft_id = created.json()["data"]["recordId"]

    resp = await client.post(
        "/api/carbon-footprint", json=carbon_request(draftId=draft_id), headers=headers
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["draftId"] == draft_id
    draft = (await client.get(f"/api/drafts/{draft_id}", headers=headers)).json()["data"]
    assert draft["carbonAnalysisData"]["totalDistance"] == "6845 km"
    assert draft["statuses"] == {"compliance": "notDone", "routeOptimization": "notDone"}
    assert "Mumbai" in fake_llm.prompts[-1]


async def test_reply_missing_fields_is_invalid(client, alice, fake_llm):
    _, headers = alice
    fake_llm.when(CARBON, json.dumps({"totalEmissions": "1 kg"}))

    resp = await client.post("/api/carbon-footprint", json=carbon_request(), headers=headers)

    assert resp.status_code == 500
    assert resp.json()["error"] == "invalid_ai_response"


async def test_request_needs_route_directions(client, alice, fake_llm):
    _, headers = alice
    resp = await client.post(
        "/api/carbon-footprint", json=carbon_request(routeDirections=[]), headers=headers
    )
    assert resp.status_code == 400
    assert fake_llm.prompts == []
