import pytest

from app.core.exceptions import InvalidAIResponseError
from app.modules.product_analysis.service import parse_classification
from tests.factories import product_reply

CLASSIFY = "Classify the product"
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


async def test_analysis_records_history_and_seeds_a_draft(client, alice, fake_llm):
    _, headers = alice
    fake_llm.when(CLASSIFY, product_reply())

    resp = await client.post(
        "/api/analyze-product",
        files={"image": ("shoe.png", PNG, "image/png")},
        headers=headers,
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["data"]["HS Code"] == "640399"
    assert data["data"]["Hazardous"] is True
    assert data["imageUrl"] is None
    assert "Footwear" in fake_llm.prompts[-1]

    draft = (await client.get(f"/api/drafts/{data['draftId']}", headers=headers)).json()["data"]
    assert draft["formData"]["ShipmentDetails"]["HS Code"] == "640399"
    assert draft["formData"]["TradeAndRegulatoryDetails"] == {
        "Perishable": "No",
        "Hazardous Material": "Yes",
    }
    assert draft["productAnalysisData"] == data["data"]
    assert draft["statuses"]["compliance"] == "notDone"

    history = (await client.get("/api/product-analysis-history", headers=headers)).json()["data"]
    assert len(history) == 1
    assert history[0]["id"] == data["recordId"]
    assert history[0]["draftId"] == data["draftId"]
    assert history[0]["visionResponse"]["success"] is True
    assert history[0]["imageDetails"]["mimeType"] == "image/png"


async def test_vision_outage_still_classifies(client, alice, fake_llm, fake_vision):
    _, headers = alice
    fake_vision.fail = True
    fake_llm.when(CLASSIFY, product_reply())

    resp = await client.post(
        "/api/analyze-product",
        files={"image": ("shoe.png", PNG, "image/png")},
        headers=headers,
    )

    assert resp.status_code == 200
    history = (await client.get("/api/product-analysis-history", headers=headers)).json()["data"]
    assert history[0]["visionResponse"] == {"success": False, "labels": []}


async def test_non_image_upload_is_rejected(client, alice, fake_llm):
    _, headers = alice
    resp = await client.post(
        "/api/analyze-product",
        files={"image": ("notes.txt", b"hello", "text/plain")},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"
    assert fake_llm.prompts == []


async def test_missing_upload_is_rejected(client, alice):
    _, headers = alice
    resp = await client.post("/api/analyze-product", headers=headers)
    assert resp.status_code == 400


async def test_invalid_classification_writes_nothing(client, alice, fake_llm):
    _, headers = alice
    fake_llm.when(CLASSIFY, product_reply(Perishable="sometimes"))

    resp = await client.post(
        "/api/analyze-product",
        files={"image": ("shoe.png", PNG, "image/png")},
        headers=headers,
    )

    assert resp.status_code == 500
    assert resp.json()["error"] == "invalid_ai_response"
    history = (await client.get("/api/product-analysis-history", headers=headers)).json()
    assert history["data"] == []


def test_parse_classification_requires_recommendations():
    with pytest.raises(InvalidAIResponseError):
        parse_classification('{"HS Code": "6403", "Product Description": "x", "Perishable": false, "Hazardous": false}')
