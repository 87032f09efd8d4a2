from schema import ITEM_STATUSES, SECTION_STATUSES

IMAGE = "image"
CONFIRMED = "confirmed"
TASK_KINDS = (IMAGE, CONFIRMED)

SYSTEM_PROMPT = "You are an expert FDA compliance analyst for food and dietary supplement products exported to the US market."

LANGUAGE_INSTRUCTIONS = {
    "en": 'CRITICAL LANGUAGE REQUIREMENT: ALL descriptive text in your response MUST be in English. Every "note", "value", "summary", "overallVerdict" and "recommendations" field MUST be written in English only. Chinese is used ONLY in the "nameCn", "claimCn", "overallVerdictCn" and "recommendationsCn" fields.',
    "cn": '关键语言要求：你的回复中所有描述性文本必须使用中文。每个 "note"、"value"、"summary" 字段都必须用中文书写。"name" 和 "claim" 字段使用英文（作为术语标识），"nameCn"、"claimCn"、"overallVerdictCn" 和 "recommendationsCn" 使用中文；"overallVerdict" 和 "recommendations" 仍需提供英文版本。',
}

# Wording the report must avoid, mapped to the hedged phrasing to use instead.
TERMINOLOGY = {
    "illegal": "potential compliance risk",
    "banned": "subject to regulatory restriction",
    "violation": "may not meet the applicable requirement",
    "prohibited": "not permitted without authorization",
    "will be detained": "may face heightened import scrutiny",
    "fraudulent": "not substantiated by the information provided",
}

TASK_INTRODUCTIONS = {
    IMAGE: "Analyze the uploaded product packaging/label image(s) and provide a structured compliance report.",
    CONFIRMED: (
        "Analyze the product data below. It was extracted from the packaging and then reviewed and "
        "confirmed by the user, so treat it as the authoritative description of the label. "
        "Provide a structured compliance report."
    ),
}


def _enum(values):
    return "|".join(values)


def _text(lang, en, cn):
    return en if lang == "en" else cn


def _terminology_rules():
    return "\n".join(f'   - do not write "{avoid}"; write "{prefer}" instead' for avoid, prefer in TERMINOLOGY.items())


def _output_schema(lang):
    item = _enum(ITEM_STATUSES)
    note = _text(lang, "explanation in English", "explanation in Chinese")
    summary = _text(lang, "1-2 sentence summary in English", "1-2句中文总结")
    return f"""{{
  "ingredientRisk": {{
    "status": "{_enum(SECTION_STATUSES['ingredientRisk'])}",
    "flagCount": <number>,
    "items": [
      {{
        "name": "<ingredient name in English>",
        "nameCn": "<ingredient name in Chinese>",
        "status": "{item}",
        "note": "<{note}>",
        "regulation": "<regulatory citation, e.g. 21 CFR 74.340>"
      }}
    ],
    "overallRisk": "<low|medium|high>",
    "riskPercent": <0-100>,
    "summary": "<{summary}>"
  }},
  "labelCompliance": {{
    "status": "{_enum(SECTION_STATUSES['labelCompliance'])}",
    "passCount": <number>,
    "totalCount": <number>,
    "items": [
      {{
        "name": "<check item in English>",
        "nameCn": "<check item in Chinese>",
        "status": "{item}",
        "note": "<{note}>",
        "regulation": "<regulatory citation, e.g. 21 CFR 101.9>"
      }}
    ],
    "summary": "<{summary}>"
  }},
  "facilityRegistration": {{
    "status": "{_enum(SECTION_STATUSES['facilityRegistration'])}",
    "items": [
      {{
        "name": "<check item in English>",
        "nameCn": "<check item in Chinese>",
        "value": "<{_text(lang, 'status or value in English', 'status or value in Chinese')}>",
        "status": "{item}",
        "regulation": "<regulatory citation, e.g. 21 CFR 1.225>"
      }}
    ],
    "summary": "<{summary}>"
  }},
  "marketingClaims": {{
    "status": "{_enum(SECTION_STATUSES['marketingClaims'])}",
    "issueCount": <number>,
    "items": [
      {{
        "claim": "<the marketing claim found, in original language>",
        "claimCn": "<claim translated to Chinese>",
        "status": "{item}",
        "note": "<{note}>",
        "regulation": "<regulatory citation, e.g. 21 CFR 101.14>"
      }}
    ],
    "riskLevel": "<low|medium|high>",
    "riskPercent": <0-100>,
    "summary": "<{summary}>"
  }},
  "overallRisk": "<low|medium|high>",
  "overallScore": <0-100>,
  "overallVerdict": "<brief verdict in English>",
  "overallVerdictCn": "<brief verdict in Chinese>",
  "recommendations": ["<English recommendation>"],
  "recommendationsCn": ["<Chinese recommendation>"]
}}"""


def build_prompt(kind, lang="en"):
    """Return the instruction text for an assessment of the given task kind.

    ``kind`` is ``image`` (raw packaging images) or ``confirmed`` (product
    data the user already reviewed); ``lang`` is ``en`` or ``cn``.
    """
    if kind not in TASK_KINDS:
        raise ValueError(f"Unknown task kind: {kind!r}")
    lang = "cn" if lang == "cn" else "en"

    PROMPT_TEMPLATE = f"""{SYSTEM_PROMPT}

{TASK_INTRODUCTIONS[kind]}

{LANGUAGE_INSTRUCTIONS[lang]}

Provide your analysis in the following JSON format ONLY (no markdown, no extra text, no code fences):
{_output_schema(lang)}

IMPORTANT RULES:
1. Return ONLY valid JSON. No markdown code fences, no explanatory text before or after.
2. {_text(lang, 'All descriptive text (note, summary, value, verdict, recommendations) MUST be in English.', 'All descriptive text (note, summary, value) MUST be in Chinese. recommendations and recommendationsCn both required.')}
3. Always provide BOTH "name" (English) and "nameCn" (Chinese) for each item, and BOTH "claim" and "claimCn" for each marketing claim. Use an empty string if a value cannot be determined, but never omit the key.
4. Always provide BOTH "overallVerdict" (English) and "overallVerdictCn" (Chinese).
5. Always provide BOTH "recommendations" (English) and "recommendationsCn" (Chinese), in the same order.
6. Every item MUST include a "regulation" field citing the specific regulation it was checked against (CFR section, FALCPA, FSMA, etc.).
7. Section "status" values are limited to the values shown for that section. facilityRegistration uses "info" (not "fail") when something cannot be verified.
8. If you cannot determine something, mark it as "info" status.
9. For ingredients, check against the FDA GRAS list, substances restricted under 21 CFR 189, and color additive regulations.
10. For labels, check: Nutrition Facts format (2020 update), allergen declaration (FALCPA), net weight dual units, country of origin, English product name, manufacturer info.
11. For marketing claims, flag unauthorized health claims, vague "natural" claims, and unverified certifications.
12. Write in a formal, neutral regulatory register. Describe findings as structural risks to be reviewed, not as legal conclusions:
{_terminology_rules()}"""

    return PROMPT_TEMPLATE


def build_extraction_prompt(lang="en"):
    lang = "cn" if lang == "cn" else "en"
    PROMPT_TEMPLATE = f"""{SYSTEM_PROMPT}

Read the uploaded product packaging/label image(s) and transcribe the information printed on them. Do NOT assess compliance or risk; the user will review and correct this data before it is analyzed.

{_text(lang, 'Write free-text fields in English.', '自由文本字段请使用中文书写，"productName" 使用英文。')}

Return ONLY a JSON object in this format (no markdown, no extra text, no code fences):
{{
  "productName": "<product name as printed, in English>",
  "productNameCn": "<product name in Chinese>",
  "brand": "<brand>",
  "category": "<product category, e.g. snack, beverage, dietary supplement>",
  "netContent": "<net weight/volume exactly as printed>",
  "ingredients": ["<ingredient as printed>"],
  "allergens": ["<declared allergen>"],
  "claims": ["<marketing claim exactly as printed>"],
  "nutritionFacts": {{"<nutrient>": "<amount per serving>"}},
  "manufacturer": "<manufacturer/distributor name and address>",
  "countryOfOrigin": "<country of origin>",
  "facilityRegistrationNumber": "<FDA facility registration number, if printed>",
  "notes": "<anything unreadable or ambiguous>"
}}

Use an empty string or empty list for anything not visible on the packaging. Do not guess."""

    return PROMPT_TEMPLATE
