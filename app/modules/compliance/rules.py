"""
Fixed tables used by the compliance scoring engine.
"""

import re

from app.modules.countries.constants import EU_MEMBER_CODES

# Mandatory field penalty weights (sum = 100)
MANDATORY_WEIGHTS = {
    "HS Code": 25,
    "Destination Country": 20,
    "Origin Country": 15,
    "Product Description": 15,
    "Commercial Invoice": 10,
    "Packing List": 10,
    "Quantity": 3,
    "Gross Weight": 2,
}

BASELINE_RISK = 5
MAX_RISK = 100

# Contextual additive risk
DUAL_USE_RISK = 10
HAZARDOUS_RISK = 15
PERISHABLE_NO_TEMPERATURE_RISK = 10
HIGH_RISK_HS_RISK = 10
STRICT_DESTINATION_RISK = 5
MISSING_OPTIONAL_DOCUMENT_RISK = 5

# HS chapters: 28/29 chemicals, 30 pharma, 36 explosives, 38 chemical products,
# 85 electronics, 88 aircraft, 93 arms
HIGH_RISK_HS_CHAPTERS = frozenset({"28", "29", "30", "36", "38", "85", "88", "93"})

STRICT_IMPORT_COUNTRIES = frozenset({"US", "CN", "AU"}) | EU_MEMBER_CODES

# Product description must mention one of these for the HS chapter to "match"
HS_CHAPTER_KEYWORDS = {
    "09": ["coffee", "tea", "spice", "pepper", "cinnamon"],
    "30": ["medicine", "medicament", "pharmaceutical", "drug", "vaccine", "tablet"],
    "33": ["perfume", "cosmetic", "shampoo", "oil", "fragrance"],
    "42": ["bag", "leather", "handbag", "wallet", "luggage"],
    "61": ["shirt", "t-shirt", "sweater", "knitted", "garment", "apparel", "clothing"],
    "62": ["shirt", "trouser", "jacket", "suit", "dress", "garment", "apparel", "clothing"],
    "64": ["shoe", "footwear", "boot", "sandal", "sneaker"],
    "71": ["jewel", "gold", "silver", "diamond", "pearl", "jewellery", "jewelry"],
    "84": ["machine", "machinery", "engine", "pump", "computer", "laptop", "printer"],
    "85": [
        "electric", "electronic", "battery", "phone", "cable", "charger",
        "motor", "television", "speaker", "semiconductor", "circuit",
    ],
    "87": ["vehicle", "car", "truck", "motorcycle", "bicycle", "tractor", "auto"],
    "90": ["optical", "lens", "camera", "medical", "instrument", "microscope"],
    "94": ["furniture", "mattress", "chair", "bed", "lamp", "sofa", "table", "walker"],
    "95": ["toy", "game", "sport", "doll", "puzzle"],
}

# (destination code, HS prefix) -> banned product
IMPORT_BANS = {
    ("CA", "940180"): "baby walkers",
    ("AU", "930190"): "military weapons",
    ("SG", "240411"): "electronic cigarettes",
    ("IN", "240412"): "electronic cigarettes",
    ("JP", "930200"): "handguns",
}

INCOTERMS_2020 = frozenset({
    "EXW", "FCA", "CPT", "CIP", "DAP", "DPU", "DDP", "FAS", "FOB", "CFR", "CIF",
})

RECOGNIZED_TRADE_AGREEMENTS = frozenset({
    "USMCA", "NAFTA", "CUSMA", "T-MEC", "EU-UK TCA", "TCA", "CPTPP", "RCEP",
    "EU-JAPAN EPA", "CETA", "AFCFTA", "MERCOSUR", "ASEAN", "AANZFTA", "EFTA",
    "KORUS", "GSP",
})

NO_TRADE_AGREEMENT_VALUES = frozenset({"", "none", "no", "n/a", "na", "not provided"})

TRANSPORT_MODES = frozenset({"sea", "air", "road", "rail"})

CURRENCY_RE = re.compile(r"^[A-Z]{3}$")
EORI_RE = re.compile(r"^[A-Z]{2}[A-Z0-9]{1,15}$")
EIN_RE = re.compile(r"^\d{2}-\d{7}$")
HS_CODE_RE = re.compile(r"^\d{6,10}$")

# Category banding: (base, floor, step) per worst severity
SEVERITY_BANDS = {
    "minor": (95, 80, 5),
    "moderate": (75, 50, 5),
    "major": (45, 0, 10),
}

INTENDED_USE_SCORES = {
    "clear": 100,
    "vague": 85,
    "missing": 65,
    "invalid": 20,
}

SHIPMENT_MISSING_MAJOR_THRESHOLD = 4

DEFAULT_ADDITIONAL_TIPS = [
    "Verify the HS Code against the destination country's tariff schedule.",
    "Check destination country import restrictions before booking transport.",
    "Keep commercial invoice, packing list and certificates consistent with each other.",
]

STATUS_READY = "Ready for Shipment"
STATUS_NOT_READY = "Not Ready"
