import pytest

from prompts import CONFIRMED, IMAGE, TERMINOLOGY, build_extraction_prompt, build_prompt


@pytest.mark.parametrize("kind", [IMAGE, CONFIRMED])
@pytest.mark.parametrize("lang", ["en", "cn"])
def test_prompt_is_deterministic(kind, lang):
    assert build_prompt(kind, lang) == build_prompt(kind, lang)


def test_prompt_lists_per_section_enums():
    prompt = build_prompt(IMAGE, "en")

    assert '"status": "pass|warn|info",' in prompt
    assert '"status": "pass|warn|fail",' in prompt
    assert '"status": "pass|warn|fail|info",' in prompt


def test_prompt_requires_bilingual_fields_and_citations():
    prompt = build_prompt(IMAGE, "en")

    for field in ("nameCn", "claimCn", "overallVerdictCn", "recommendationsCn", "regulation", "overallRisk"):
        assert f'"{field}"' in prompt


def test_prompt_lists_terminology_substitutions():
    prompt = build_prompt(CONFIRMED, "en")

    for avoid, prefer in TERMINOLOGY.items():
        assert f'"{avoid}"' in prompt
        assert f'"{prefer}"' in prompt


def test_language_selector_changes_instructions():
    en, cn = build_prompt(IMAGE, "en"), build_prompt(IMAGE, "cn")

    assert en != cn
    assert "ALL descriptive text in your response MUST be in English" in en
    assert "关键语言要求" in cn


def test_unknown_language_falls_back_to_english():
    assert build_prompt(IMAGE, "fr") == build_prompt(IMAGE, "en")


def test_task_kinds_differ():
    assert "confirmed by the user" in build_prompt(CONFIRMED, "en")
    assert "uploaded product packaging" in build_prompt(IMAGE, "en")


def test_unknown_task_kind_raises():
    with pytest.raises(ValueError):
        build_prompt("audio", "en")


def test_extraction_prompt_asks_for_no_judgment():
    prompt = build_extraction_prompt("en")

    assert "Do NOT assess compliance or risk" in prompt
    assert '"facilityRegistrationNumber"' in prompt
