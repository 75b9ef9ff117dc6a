"""
Deterministic compliance scoring.

``evaluate_compliance`` is a pure function of the submitted form: it decides
readiness, the 0-100 risk score and the five category scores. The reasoning
model only ever contributes narrative text on top of this result.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from app.core.utils import is_blank, is_yes, round2, to_number
from app.modules.countries.constants import resolve_country_code
from app.modules.drafts.models import ComplianceStatus
from . import rules

CATEGORIES = (
    "ShipmentDetails",
    "TradeAndRegulatoryDetails",
    "PartiesAndIdentifiers",
    "LogisticsAndHandling",
    "IntendedUseDetails",
)

SHIPMENT_FIELDS = (
    "Origin Country",
    "Destination Country",
    "HS Code",
    "Product Description",
    "Quantity",
    "Gross Weight",
)


@dataclass
class Issue:
    category: str
    field: str
    message: str
    severity: str


@dataclass
class ComplianceAssessment:
    compliance_status: str
    risk_score: float
    scores: Dict[str, int]
    violations: List[Dict[str, str]] = field(default_factory=list)
    recommendations: List[Dict[str, str]] = field(default_factory=list)
    risk_factors: List[str] = field(default_factory=list)
    import_ban: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.compliance_status == rules.STATUS_READY

    @property
    def risk_band(self) -> str:
        if self.risk_score <= 20:
            return "Low"
        if self.risk_score <= 50:
            return "Moderate"
        return "High"

    def default_summary(self) -> str:
        if self.is_ready:
            return "All mandatory fields are present and valid."
        return f"{len(self.violations)} compliance issue(s) must be resolved before shipment."

    def default_risk_summary(self) -> str:
        text = f"{self.risk_band} risk ({self.risk_score:g}/100)"
        if self.risk_factors:
            text += ": " + "; ".join(self.risk_factors)
        return text

    def to_dict(self) -> Dict[str, Any]:
        """Response shape stored on drafts and history records."""
        return {
            "complianceStatus": self.compliance_status,
            "riskLevel": {
                "riskScore": self.risk_score,
                "summary": self.default_risk_summary(),
            },
            "summary": self.default_summary(),
            "violations": list(self.violations),
            "recommendations": list(self.recommendations),
            "scores": dict(self.scores),
            "additionalTips": list(rules.DEFAULT_ADDITIONAL_TIPS[:2]),
        }


def to_internal_status(external_status: Any) -> ComplianceStatus:
    """
    The only mapping from the external readiness vocabulary to the stored enum.
    Anything other than an exact "Ready for Shipment" is non-compliant.
    """
    if external_status == rules.STATUS_READY:
        return ComplianceStatus.COMPLIANT
    return ComplianceStatus.NON_COMPLIANT


def normalize_hs_code(value: Any) -> Optional[str]:
    """Digits of a 6-10 digit HS code, or None when the value is not one."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        value = str(value)
    if not isinstance(value, str):
        return None
    digits = value.strip().replace(".", "").replace(" ", "").replace("-", "")
    if not rules.HS_CODE_RE.match(digits):
        return None
    return digits


def find_import_ban(hs_digits: Optional[str], destination_code: Optional[str]) -> Optional[str]:
    if not hs_digits or not destination_code:
        return None
    for (country, prefix), product in rules.IMPORT_BANS.items():
        if country == destination_code and hs_digits.startswith(prefix):
            return product
    return None


def document_state(document: Any) -> str:
    """Return "valid", "partial" or "missing" for a document checklist entry."""
    if not isinstance(document, dict) or not is_yes(document.get("checked")):
        return "missing"
    sub_items = document.get("subItems") or {}
    if not isinstance(sub_items, dict):
        return "partial"
    if all(is_yes(value) for value in sub_items.values()):
        return "valid"
    return "partial"


def band_score(issues: List[Issue]) -> int:
    """
    Category score from the issues found in it.

    The worst severity picks the band; every additional issue moves the score
    down inside that band, never below the band's floor.
    """
    if not issues:
        return 100
    order = ["minor", "moderate", "major"]
    worst = max(issues, key=lambda issue: order.index(issue.severity)).severity
    base, floor, step = rules.SEVERITY_BANDS[worst]
    return max(floor, base - step * (len(issues) - 1))


def _group(form_data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = form_data.get(name) if isinstance(form_data, dict) else None
    return value if isinstance(value, dict) else {}


def _is_positive(value: Any) -> bool:
    number = to_number(value)
    return number is not None and number > 0


def _description_valid(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) >= 3


def _description_matches_chapter(description: str, chapter: str) -> bool:
    keywords = rules.HS_CHAPTER_KEYWORDS.get(chapter)
    if not keywords:
        return True
    text = description.lower()
    return any(keyword in text for keyword in keywords)


def _is_yes_no(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    return isinstance(value, str) and value.strip().lower() in ("yes", "no")


def _trade_agreement_claimed(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return value.strip().lower() not in rules.NO_TRADE_AGREEMENT_VALUES


class _Evaluation:
    """Accumulator for one evaluate_compliance call."""

    def __init__(self) -> None:
        self.penalty = 0.0
        self.mandatory_valid = True
        self.issues: List[Issue] = []
        self.violations: List[Dict[str, str]] = []
        self.recommendations: List[Dict[str, str]] = []
        self.risk_factors: List[str] = []

    def mandatory(self, name: str, message: str, fix: str, partial: bool = False) -> None:
        weight = rules.MANDATORY_WEIGHTS[name]
        self.penalty += weight / 2 if partial else weight
        self.mandatory_valid = False
        self.violations.append({"field": name, "message": message})
        self.recommendations.append({"field": name, "message": fix})

    def context(self, points: int, reason: str, fix_field: str = "", fix: str = "") -> None:
        self.penalty += points
        self.risk_factors.append(reason)
        if fix:
            self.recommendations.append({"field": fix_field, "message": fix})

    def issue(self, category: str, field_name: str, message: str, severity: str) -> None:
        self.issues.append(Issue(category, field_name, message, severity))

    def category_issues(self, category: str) -> List[Issue]:
        return [issue for issue in self.issues if issue.category == category]


def _check_mandatory(ev: _Evaluation, shipment: Dict[str, Any], documents: Dict[str, Any]):
    hs_digits = normalize_hs_code(shipment.get("HS Code"))
    description = shipment.get("Product Description")
    origin_code = resolve_country_code(shipment.get("Origin Country"))
    destination_code = resolve_country_code(shipment.get("Destination Country"))
    banned_product = find_import_ban(hs_digits, destination_code)

    missing_shipment = 0

    if hs_digits is None:
        missing_shipment += 1
        if is_blank(shipment.get("HS Code")):
            ev.mandatory("HS Code", "HS Code is missing", "Provide a valid 6-10 digit HS Code")
        else:
            ev.mandatory(
                "HS Code",
                "HS Code is invalid; expected 6-10 digits",
                "Provide a valid 6-10 digit HS Code",
            )
    elif banned_product:
        ev.mandatory(
            "HS Code",
            f"Import of {banned_product} (HS {hs_digits}) is banned in {destination_code}",
            "Choose a destination that permits this product or change the goods",
        )
        ev.issue("ShipmentDetails", "HS Code", "import banned", "minor")
    elif _description_valid(description) and not _description_matches_chapter(
        description, hs_digits[:2]
    ):
        ev.mandatory(
            "HS Code",
            "HS Code does not match the product description",
            "Check that the HS Code classifies the described product",
            partial=True,
        )
        ev.issue("ShipmentDetails", "HS Code", "description mismatch", "minor")

    if destination_code is None:
        missing_shipment += 1
        ev.mandatory(
            "Destination Country",
            "Destination Country is missing or not a valid ISO 3166-1 alpha-2 code",
            "Provide the destination as an ISO alpha-2 code (e.g. US)",
        )
    if origin_code is None:
        missing_shipment += 1
        ev.mandatory(
            "Origin Country",
            "Origin Country is missing or not a valid ISO 3166-1 alpha-2 code",
            "Provide the origin as an ISO alpha-2 code (e.g. IN)",
        )
    if not _description_valid(description):
        missing_shipment += 1
        ev.mandatory(
            "Product Description",
            "Product Description is missing or too short",
            "Describe the goods in plain words",
        )

    for name in ("Commercial Invoice", "Packing List"):
        state = document_state(documents.get(name))
        if state == "missing":
            ev.mandatory(name, f"{name} is missing or not checked", f"Attach and verify the {name}")
        elif state == "partial":
            ev.mandatory(
                name,
                f"{name} has unchecked verification items",
                f"Complete every verification item of the {name}",
                partial=True,
            )

    for name in ("Quantity", "Gross Weight"):
        if not _is_positive(shipment.get(name)):
            missing_shipment += 1
            ev.mandatory(name, f"{name} must be a positive number", f"Provide a positive {name}")

    severity = "major" if missing_shipment >= rules.SHIPMENT_MISSING_MAJOR_THRESHOLD else "moderate"
    for _ in range(missing_shipment):
        ev.issue("ShipmentDetails", "ShipmentDetails", "missing or invalid field", severity)

    return hs_digits, destination_code, banned_product


def _check_context(ev, trade, logistics, documents, hs_digits, destination_code):
    dual_use = is_yes(trade.get("Dual-Use Goods"))
    chapter = hs_digits[:2] if hs_digits else None

    if dual_use:
        ev.context(
            rules.DUAL_USE_RISK,
            "dual-use goods require export licensing",
            "Dual-Use Goods",
            "Confirm export licence requirements for dual-use goods",
        )
    if is_yes(trade.get("Hazardous Material")):
        ev.context(
            rules.HAZARDOUS_RISK,
            "hazardous material is subject to strict transport rules",
            "Hazardous Material",
            "Prepare dangerous goods declarations and labelling",
        )
    if is_yes(trade.get("Perishable")) and is_blank(logistics.get("Temperature Requirements")):
        ev.context(
            rules.PERISHABLE_NO_TEMPERATURE_RISK,
            "perishable goods without temperature requirements",
            "Temperature Requirements",
            "Specify temperature requirements for perishable goods",
        )
    if chapter in rules.HIGH_RISK_HS_CHAPTERS:
        ev.context(rules.HIGH_RISK_HS_RISK, f"HS chapter {chapter} is a high-scrutiny category")
    if destination_code in rules.STRICT_IMPORT_COUNTRIES:
        ev.context(
            rules.STRICT_DESTINATION_RISK,
            f"{destination_code} applies strict import controls",
        )
    if document_state(documents.get("Certificate of Origin")) == "missing" and _trade_agreement_claimed(
        trade.get("Trade Agreement Claimed")
    ):
        ev.context(
            rules.MISSING_OPTIONAL_DOCUMENT_RISK,
            "trade agreement claimed without a Certificate of Origin",
            "Certificate of Origin",
            "Add a Certificate of Origin to claim preferential treatment",
        )
    if document_state(documents.get("Licenses/Permits")) == "missing" and (
        dual_use or chapter in rules.HIGH_RISK_HS_CHAPTERS
    ):
        ev.context(
            rules.MISSING_OPTIONAL_DOCUMENT_RISK,
            "controlled goods without licences or permits",
            "Licenses/Permits",
            "Obtain and attach the required licences or permits",
        )


def _check_trade(ev: _Evaluation, trade: Dict[str, Any]) -> None:
    category = "TradeAndRegulatoryDetails"

    incoterm = trade.get("Incoterms 2020")
    if not isinstance(incoterm, str) or incoterm.strip().upper() not in rules.INCOTERMS_2020:
        ev.issue(category, "Incoterms 2020", "not a valid Incoterms 2020 rule", "moderate")

    declared = trade.get("Declared Value")
    declared_currency = None
    if isinstance(declared, dict):
        amount = declared.get("amount")
        declared_currency = declared.get("currency")
    else:
        amount = declared
    if not _is_positive(amount):
        ev.issue(category, "Declared Value", "declared value must be positive", "major")
    if declared_currency is not None and not is_blank(declared_currency):
        if not rules.CURRENCY_RE.match(str(declared_currency).strip()):
            ev.issue(category, "Declared Value", "currency is not an ISO 4217 code", "moderate")

    currency = trade.get("Currency of Transaction")
    if is_blank(currency) or not rules.CURRENCY_RE.match(str(currency).strip()):
        ev.issue(category, "Currency of Transaction", "currency is not an ISO 4217 code", "moderate")
    elif (
        isinstance(declared_currency, str)
        and declared_currency.strip()
        and declared_currency.strip() != str(currency).strip()
    ):
        ev.issue(category, "Currency of Transaction", "does not match declared currency", "minor")

    agreement = trade.get("Trade Agreement Claimed")
    if _trade_agreement_claimed(agreement):
        if agreement.strip().upper() not in rules.RECOGNIZED_TRADE_AGREEMENTS:
            ev.issue(category, "Trade Agreement Claimed", "unrecognised trade agreement", "minor")

    for flag in ("Dual-Use Goods", "Hazardous Material", "Perishable"):
        if not _is_yes_no(trade.get(flag)):
            ev.issue(category, flag, "must be Yes or No", "minor")


def _check_parties(ev: _Evaluation, parties: Dict[str, Any]) -> None:
    category = "PartiesAndIdentifiers"
    names = ("Shipper/Exporter", "Consignee/Importer", "Manufacturer Information", "EORI/Tax ID")
    if all(is_blank(parties.get(name)) for name in names):
        ev.issue(category, category, "no parties provided", "major")
        return

    for name in ("Shipper/Exporter", "Consignee/Importer"):
        if is_blank(parties.get(name)):
            ev.issue(category, name, "missing", "minor")

    tax_id = parties.get("EORI/Tax ID")
    if not is_blank(tax_id):
        cleaned = str(tax_id).strip().upper().replace(" ", "")
        if not (rules.EORI_RE.match(cleaned) or rules.EIN_RE.match(cleaned)):
            ev.issue(category, "EORI/Tax ID", "not a recognised EORI or EIN format", "moderate")


def _check_logistics(ev: _Evaluation, logistics: Dict[str, Any], trade: Dict[str, Any]) -> None:
    category = "LogisticsAndHandling"
    mode = logistics.get("Means of Transport")
    if is_blank(mode):
        ev.issue(category, "Means of Transport", "missing", "major")
    elif str(mode).strip().lower() not in rules.TRANSPORT_MODES:
        ev.issue(category, "Means of Transport", "must be Sea, Air, Road or Rail", "moderate")

    if is_yes(trade.get("Perishable")) and is_blank(logistics.get("Temperature Requirements")):
        ev.issue(category, "Temperature Requirements", "required for perishable goods", "moderate")

    handling = logistics.get("Special Handling")
    if not is_blank(handling) and len(str(handling).strip()) < 3:
        ev.issue(category, "Special Handling", "not a meaningful instruction", "minor")


def intended_use_score(value: Any) -> int:
    if is_blank(value):
        return rules.INTENDED_USE_SCORES["missing"]
    text = str(value).strip()
    if not any(char.isalpha() for char in text):
        return rules.INTENDED_USE_SCORES["invalid"]
    if len(text.split()) < 3:
        return rules.INTENDED_USE_SCORES["vague"]
    return rules.INTENDED_USE_SCORES["clear"]


def evaluate_compliance(form_data: Dict[str, Any]) -> ComplianceAssessment:
    """
    Score a shipment form.

    Args:
        form_data: Grouped form (ShipmentDetails, TradeAndRegulatoryDetails, ...);
            unknown groups and keys are ignored

    Returns:
        ComplianceAssessment with status, risk score and category scores
    """
    shipment = _group(form_data, "ShipmentDetails")
    trade = _group(form_data, "TradeAndRegulatoryDetails")
    parties = _group(form_data, "PartiesAndIdentifiers")
    logistics = _group(form_data, "LogisticsAndHandling")
    documents = _group(form_data, "DocumentVerification")
    intended = _group(form_data, "IntendedUseDetails")

    ev = _Evaluation()
    hs_digits, destination_code, banned_product = _check_mandatory(ev, shipment, documents)
    _check_context(ev, trade, logistics, documents, hs_digits, destination_code)
    _check_trade(ev, trade)
    _check_parties(ev, parties)
    _check_logistics(ev, logistics, trade)

    scores = {
        category: band_score(ev.category_issues(category))
        for category in CATEGORIES[:-1]
    }
    scores["IntendedUseDetails"] = intended_use_score(intended.get("Intended Use"))

    risk_score = round2(min(rules.MAX_RISK, max(rules.BASELINE_RISK, ev.penalty)))
    ready = ev.mandatory_valid and banned_product is None

    return ComplianceAssessment(
        compliance_status=rules.STATUS_READY if ready else rules.STATUS_NOT_READY,
        risk_score=risk_score,
        scores=scores,
        violations=ev.violations,
        recommendations=ev.recommendations,
        risk_factors=ev.risk_factors,
        import_ban=banned_product,
    )
