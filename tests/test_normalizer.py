import json

import pytest

from errors import RAW_EXCERPT_LIMIT, MalformedResponse
from normalizer import SALVAGE, STRICT, normalize, parse_json, strip_fences
from schema import AssessmentRecord, ProductExtraction


def test_plain_json_uses_strict_tier(record_json):
    outcome = normalize(record_json)

    assert outcome.ok
    assert outcome.strategy == STRICT
    assert isinstance(outcome.record, AssessmentRecord)
    assert outcome.record.overall_risk == "medium"


@pytest.mark.parametrize("template", [
    "```json\n{}\n```",
    "```JSON\n{}\n```",
    "```\n{}\n```",
    "   \n```json{}```   \n",
])
def test_fenced_json_uses_strict_tier(record_json, template):
    outcome = normalize(template.replace("{}", record_json))

    assert outcome.ok
    assert outcome.strategy == STRICT


def test_prose_wrapped_json_uses_salvage_tier(record_json):
    text = f"Sure! Here is the compliance report you asked for:\n{record_json}\nLet me know if you need more."

    outcome = normalize(text)

    assert outcome.ok
    assert outcome.strategy == SALVAGE


def test_fenced_json_with_prose_uses_salvage_tier(record_json):
    text = f"Here is the result:\n```json\n{record_json}\n```\nHope this helps!"

    outcome = normalize(text)

    assert outcome.ok
    assert outcome.strategy == SALVAGE
    assert outcome.record.to_dict()["ingredientRisk"]["items"][0]["name"] == "Sodium Benzoate (E211)"


@pytest.mark.parametrize("text", [
    "{ invalid json",
    "no braces at all",
    "} backwards {",
    "",
    "Result: {\"ingredientRisk\": {\"status\": \"pass\"",
])
def test_unparseable_text_fails_with_parse_failed(text):
    outcome = normalize(text)

    assert not outcome.ok
    assert outcome.record is None
    assert outcome.error.diagnostic == MalformedResponse.PARSE_FAILED
    assert outcome.error.strategy == SALVAGE


def test_missing_section_is_shape_invalid(record_data):
    del record_data["labelCompliance"]

    outcome = normalize(json.dumps(record_data))

    assert outcome.error.diagnostic == MalformedResponse.SHAPE_INVALID
    assert outcome.error.field == "labelCompliance"
    assert outcome.error.strategy == STRICT


def test_out_of_enum_item_status_names_the_field(record_data):
    record_data["ingredientRisk"]["items"][1]["status"] = "critical"

    outcome = normalize(json.dumps(record_data))

    assert outcome.error.diagnostic == MalformedResponse.SHAPE_INVALID
    assert outcome.error.field == "ingredientRisk.items.1.status"


def test_facility_section_does_not_accept_fail(record_data):
    record_data["facilityRegistration"]["status"] = "fail"

    outcome = normalize(json.dumps(record_data))

    assert outcome.error.field == "facilityRegistration.status"


def test_other_sections_do_not_accept_info(record_data):
    record_data["marketingClaims"]["status"] = "info"

    outcome = normalize(json.dumps(record_data))

    assert outcome.error.field == "marketingClaims.status"


def test_missing_bilingual_key_is_shape_invalid(record_data):
    del record_data["marketingClaims"]["items"][0]["claimCn"]

    outcome = normalize(json.dumps(record_data))

    assert outcome.error.field == "marketingClaims.items.0.claimCn"


def test_null_bilingual_value_is_shape_invalid(record_data):
    record_data["overallVerdictCn"] = None

    outcome = normalize(json.dumps(record_data))

    assert outcome.error.field == "overallVerdictCn"


def test_empty_bilingual_value_is_allowed(record_data):
    record_data["labelCompliance"]["items"][0]["nameCn"] = ""

    assert normalize(json.dumps(record_data)).ok


def test_citations_required_only_when_asked(record_data):
    del record_data["labelCompliance"]["items"][2]["regulation"]
    text = json.dumps(record_data)

    assert normalize(text).ok
    outcome = normalize(text, require_citations=True)
    assert outcome.error.diagnostic == MalformedResponse.SHAPE_INVALID
    assert outcome.error.field == "labelCompliance.items.2.regulation"


def test_blank_citation_rejected_when_required(record_data):
    record_data["ingredientRisk"]["items"][0]["regulation"] = "   "

    outcome = normalize(json.dumps(record_data), require_citations=True)

    assert outcome.error.field == "ingredientRisk.items.0.regulation"


def test_non_object_json_is_shape_invalid():
    outcome = normalize("[1, 2, 3]")

    assert outcome.error.diagnostic == MalformedResponse.SHAPE_INVALID
    assert outcome.error.field == "<root>"


def test_excerpt_is_bounded():
    text = "x" * 5000

    outcome = normalize(text)

    assert len(outcome.error.raw) == RAW_EXCERPT_LIMIT


def test_normalize_is_idempotent(record_json):
    good_a, good_b = normalize(record_json), normalize(record_json)
    bad_a, bad_b = normalize("{ invalid json"), normalize("{ invalid json")

    assert good_a == good_b
    assert (bad_a.error.diagnostic, bad_a.error.detail, bad_a.error.raw, bad_a.error.strategy) == \
        (bad_b.error.diagnostic, bad_b.error.detail, bad_b.error.raw, bad_b.error.strategy)


def test_record_is_immutable(record_json):
    record = normalize(record_json).record

    with pytest.raises(Exception):
        record.overall_risk = "low"
    assert isinstance(record.recommendations, tuple)


def test_extraction_schema():
    outcome = normalize('Extracted:\n{"productName": "Tea", "ingredients": ["Green tea"]}', ProductExtraction)

    assert outcome.ok
    assert outcome.strategy == SALVAGE
    assert outcome.record.ingredients == ("Green tea",)
    assert outcome.record.to_dict()["productName"] == "Tea"


def test_strip_fences():
    assert strip_fences("```json\n{\"a\": 1}\n```") == '{"a": 1}'


def test_parse_json_reports_tier():
    assert parse_json('{"a": 1}') == ({"a": 1}, STRICT)
    assert parse_json('note {"a": 1} end') == ({"a": 1}, SALVAGE)
    with pytest.raises(ValueError):
        parse_json("nothing here")


def test_unreadable_counters_are_dropped_not_fatal(record_data):
    record_data["ingredientRisk"]["riskPercent"] = "55%"
    record_data["labelCompliance"]["passCount"] = "three"
    record_data["overallScore"] = {"value": 7}

    outcome = normalize(json.dumps(record_data))

    assert outcome.ok
    assert outcome.record.ingredient_risk.risk_percent is None
    assert outcome.record.label_compliance.pass_count is None
    assert "riskPercent" not in outcome.record.to_dict()["ingredientRisk"]


def test_valid_counters_are_carried_through(record_data):
    record_data["marketingClaims"]["issueCount"] = 2
    record_data["marketingClaims"]["riskPercent"] = 40

    outcome = normalize(json.dumps(record_data))

    assert outcome.ok
    assert outcome.record.to_dict()["marketingClaims"]["issueCount"] == 2
    assert outcome.record.marketing_claims.risk_percent == 40.0


def test_extraction_accepts_null_fields():
    outcome = normalize('{"productName": "Tea", "brand": null, "allergens": null, "nutritionFacts": null}',
                        ProductExtraction)

    assert outcome.ok
    assert outcome.record.product_name == "Tea"
    assert outcome.record.brand == ""
    assert outcome.record.allergens == ()
    assert outcome.record.nutrition_facts == {}
