"""
Builders for shipment forms, route batches and model replies used across tests.
"""

import copy
import json
from typing import Any, Dict, List, Optional


def _document(checked: bool = True, *items: str) -> Dict[str, Any]:
    return {"checked": checked, "subItems": {item: checked for item in items}}


READY_FORM: Dict[str, Any] = {
    "ShipmentDetails": {
        "Origin Country": "IN",
        "Destination Country": "SG",
        "HS Code": "640399",
        "Product Description": "Leather shoes for men",
        "Quantity": 100,
        "Gross Weight": 250,
    },
    "TradeAndRegulatoryDetails": {
        "Incoterms 2020": "FOB",
        "Declared Value": {"amount": 5000, "currency": "USD"},
        "Currency of Transaction": "USD",
        "Trade Agreement Claimed": "None",
        "Dual-Use Goods": "No",
        "Hazardous Material": "No",
        "Perishable": "No",
    },
    "PartiesAndIdentifiers": {
        "Shipper/Exporter": "Acme Exports, Mumbai",
        "Consignee/Importer": "Lion Retail Pte Ltd, Singapore",
        "EORI/Tax ID": "IN1234567890",
    },
    "LogisticsAndHandling": {
        "Means of Transport": "Sea",
        "Port of Loading": "Nhava Sheva",
        "Port of Discharge": "Singapore",
    },
    "IntendedUseDetails": {"Intended Use": "Retail sale in footwear stores"},
    "DocumentVerification": {
        "Commercial Invoice": _document(True, "Invoice number present", "Details match shipment"),
        "Packing List": _document(True, "Contents accurate", "Quantities match"),
    },
}


def ready_form(**shipment_overrides: Any) -> Dict[str, Any]:
    form = copy.deepcopy(READY_FORM)
    form["ShipmentDetails"].update(shipment_overrides)
    return form


def hazardous_form_without_hs_code() -> Dict[str, Any]:
    form = ready_form()
    del form["ShipmentDetails"]["HS Code"]
    form["TradeAndRegulatoryDetails"]["Hazardous Material"] = "Yes"
    return form


def narrative_reply(**overrides: Any) -> str:
    body = {
        "summary": "The shipment is documented and can proceed.",
        "riskSummary": "Low risk: standard consumer goods.",
        "violations": [],
        "recommendations": [{"field": "HS Code", "message": "Keep the tariff ruling on file."}],
        "additionalTips": ["Book space early in peak season.", "Insure the cargo."],
        "riskScore": 12,
    }
    body.update(overrides)
    return "```json\n" + json.dumps(body) + "\n```"


def route(index: int, popular: bool = False) -> Dict[str, Any]:
    port = f"Port {index}"
    return {
        "routeDirections": [
            {"id": "leg1", "waypoints": ["Mumbai", port], "mode": "land", "distance": 20 + index},
            {"id": "leg2", "waypoints": [port, "Tokyo"], "state": "sea", "distance": 6800.456},
        ],
        "totalDistance": 6820.456 + index,
        "totalCost": 1200.499 + index,
        "totalTime": 240,
        "totalTimeDaysRange": "9-11 days",
        "totalCarbonScore": 35.5,
        "tag": "popular" if popular else None,
    }


def route_batch(count: int = 9, popular: int = 3) -> List[Dict[str, Any]]:
    return [route(index, popular=index < popular) for index in range(count)]


def chosen_route(distances: Optional[List[float]] = None) -> Dict[str, Any]:
    return {
        "routeDirections": [
            {"id": "leg1", "waypoints": ["Mumbai", "Nhava Sheva"], "mode": "land"},
            {"id": "leg2", "waypoints": ["Nhava Sheva", "Tokyo"], "mode": "sea"},
        ],
        "distanceByLeg": distances if distances is not None else [45.0, 6800.0],
        "totalCost": 1500,
        "totalTime": 260,
    }


def carbon_reply() -> str:
    return json.dumps({
        "totalDistance": "6845 km",
        "totalEmissions": "71.15 kg CO2e",
        "routeAnalysis": [
            {"leg": "Leg 1", "origin": "Mumbai", "destination": "Nhava Sheva",
             "mode": "land", "distance": "45 km", "emissions": "3.15 kg CO2e"},
            {"leg": "Leg 2", "origin": "Nhava Sheva", "destination": "Tokyo",
             "mode": "sea", "distance": "6800 km", "emissions": "68 kg CO2e"},
        ],
        "suggestions": ["Consolidate shipments to fill containers."],
        "earthImpact": "About 3 trees for a year.",
    })


def product_reply(**overrides: Any) -> str:
    body = {
        "HS Code": 640399,
        "Product Description": "Men's leather shoes",
        "Perishable": False,
        "Hazardous": True,
        "Required Export Document List": ["Commercial Invoice", "Packing List"],
        "Recommendations": {"message": "Check leather import rules.", "additionalTip": "Use sturdy cartons."},
    }
    body.update(overrides)
    return "Sure! " + json.dumps(body)
