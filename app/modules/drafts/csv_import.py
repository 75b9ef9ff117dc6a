"""
CSV bulk import: one draft per row, flat columns mapped onto the grouped form.
"""

import csv
import io
from typing import Any, Dict, List

from app.core.exceptions import ValidationError

SHIPMENT_COLUMNS = (
    "Origin Country",
    "Destination Country",
    "HS Code",
    "Product Description",
    "Quantity",
    "Gross Weight",
)

PARTY_COLUMNS = (
    "Shipper/Exporter",
    "Consignee/Importer",
    "Manufacturer Information",
    "EORI/Tax ID",
)

LOGISTICS_COLUMNS = (
    "Means of Transport",
    "Port of Loading",
    "Port of Discharge",
    "Special Handling",
    "Temperature Requirements",
)

# document column -> its verification sub-item columns
DOCUMENT_COLUMNS = {
    "Commercial Invoice": ("Invoice number present", "Details match shipment", "Customs compliant"),
    "Packing List": ("Contents accurate", "Quantities match", "Matches invoice"),
    "Certificate of Origin": ("Origin verified", "Trade agreement compliant"),
    "Licenses/Permits": ("Valid number", "Not expired", "Authority verified"),
    "Bill of Lading": ("Accurate details", "Shipping regulations compliant"),
}

REQUIRED_COLUMNS = ("Origin Country", "Destination Country", "HS Code")


def _cell(row: Dict[str, Any], column: str, default: str = "") -> str:
    value = row.get(column)
    if value is None:
        return default
    value = value.strip()
    return value or default


def _flag(row: Dict[str, Any], column: str) -> bool:
    return _cell(row, column).lower() == "true"


def row_to_form_data(row: Dict[str, Any]) -> Dict[str, Any]:
    """Map one CSV row onto the grouped formData shape."""
    return {
        "ShipmentDetails": {column: _cell(row, column) for column in SHIPMENT_COLUMNS},
        "TradeAndRegulatoryDetails": {
            "Incoterms 2020": _cell(row, "Incoterms 2020"),
            "Declared Value": {
                "currency": _cell(row, "Currency"),
                "amount": _cell(row, "Declared Value"),
            },
            "Currency of Transaction": _cell(row, "Currency of Transaction"),
            "Trade Agreement Claimed": _cell(row, "Trade Agreement Claimed"),
            "Dual-Use Goods": _cell(row, "Dual-Use Goods", "No"),
            "Hazardous Material": _cell(row, "Hazardous Material", "No"),
            "Perishable": _cell(row, "Perishable", "No"),
        },
        "PartiesAndIdentifiers": {column: _cell(row, column) for column in PARTY_COLUMNS},
        "LogisticsAndHandling": {column: _cell(row, column) for column in LOGISTICS_COLUMNS},
        "DocumentVerification": {
            document: {
                "checked": _flag(row, document),
                "subItems": {item: _flag(row, item) for item in sub_items},
            }
            for document, sub_items in DOCUMENT_COLUMNS.items()
        },
        "IntendedUseDetails": {"Intended Use": _cell(row, "Intended Use")},
    }


def parse_csv(content: bytes) -> List[Dict[str, Any]]:
    """
    Parse an uploaded CSV into grouped forms.

    Raises:
        ValidationError: Undecodable file, missing header columns or no data rows
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValidationError("CSV file must be UTF-8 encoded") from e

    reader = csv.DictReader(io.StringIO(text))
    header = reader.fieldnames or []
    missing = [column for column in REQUIRED_COLUMNS if column not in header]
    if missing:
        raise ValidationError(f"CSV is missing required columns: {', '.join(missing)}")

    forms = [
        row_to_form_data(row)
        for row in reader
        if any((value or "").strip() for value in row.values() if isinstance(value, str))
    ]
    if not forms:
        raise ValidationError("CSV file contains no data rows")
    return forms
