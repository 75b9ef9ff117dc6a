import json

import pytest

from app.core.exceptions import UnresolvableLocationError
from app.modules.countries.constants import resolve_country_code
from app.modules.countries.service import (
    DEFAULT_CONFIDENCE,
    normalize_country,
    require_country,
)


async def test_native_language_name_resolves(fake_llm):
    match = await normalize_country(fake_llm, "Deutschland")
    assert match.code == "DE"
    assert match.name == "Germany"
    assert match.confidence == 0.95


async def test_fictional_place_is_none(fake_llm):
    assert await normalize_country(fake_llm, "Narnia") is None


async def test_blank_input_skips_the_model(fake_llm):
    assert await normalize_country(fake_llm, "   ") is None
    assert await normalize_country(fake_llm, None) is None
    assert fake_llm.prompts == []


async def test_prose_reply_is_none(fake_llm):
    assert await normalize_country(fake_llm, "Atlantis") is None


async def test_unsupported_code_is_none(fake_llm):
    fake_llm.when('"Reykjavik"', '{"countryName": "Iceland", "countryCode": "IS", "confidence": 0.9}')
    assert await normalize_country(fake_llm, "Reykjavik") is None


async def test_confidence_defaults_and_clamps(fake_llm):
    match = await normalize_country(fake_llm, "Rotterdam")
    assert match.code == "NL"
    assert match.confidence == DEFAULT_CONFIDENCE

    fake_llm.when('"Lyon"', '{"countryName": "France", "countryCode": "fr", "confidence": 7}')
    match = await normalize_country(fake_llm, "Lyon")
    assert match.code == "FR"
    assert match.confidence == 1.0


@pytest.mark.parametrize("confidence", [0, -0.4, "0", None])
async def test_non_positive_confidence_falls_back_to_default(fake_llm, confidence):
    reply = {"countryName": "Spain", "countryCode": "ES", "confidence": confidence}
    fake_llm.when('"Valencia"', json.dumps(reply))

    match = await normalize_country(fake_llm, "Valencia")

    assert match.code == "ES"
    assert match.confidence == DEFAULT_CONFIDENCE


async def test_require_country_raises_for_unknown(fake_llm):
    with pytest.raises(UnresolvableLocationError) as exc:
        await require_country(fake_llm, "Narnia")
    assert exc.value.status_code == 400


@pytest.mark.parametrize(
    "value, expected",
    [("us", "US"), ("Germany", "DE"), ("  japan ", "JP"), ("IS", "IS"), ("Narnia", None), (None, None), ("", None)],
)
def test_resolve_country_code(value, expected):
    assert resolve_country_code(value) == expected
