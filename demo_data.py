from functools import lru_cache

from schema import AssessmentRecord, ProductExtraction

DEMO_MESSAGE = "OPENAI_API_KEY not configured. Returning demo analysis."


def _pick(lang, en, cn):
    return cn if lang == "cn" else en


def get_demo_data(lang):
    return {
        "ingredientRisk": {
            "status": "warn",
            "flagCount": 3,
            "items": [
                {"name": "Sodium Benzoate (E211)", "nameCn": "苯甲酸钠 (E211)", "status": "pass",
                 "note": _pick(lang, "FDA GRAS approved preservative", "FDA GRAS 认可的防腐剂"),
                 "regulation": "21 CFR 184.1733"},
                {"name": "Red No. 40 (Allura Red)", "nameCn": "诱惑红40号", "status": "warn",
                 "note": _pick(lang, "Requires specific listing on label per 21 CFR 74", "根据 21 CFR 74 需在标签上单独标注"),
                 "regulation": "21 CFR 74.340"},
                {"name": "Steviol Glycosides", "nameCn": "甜菊糖苷", "status": "pass",
                 "note": _pick(lang, "GRAS approved sweetener", "GRAS 认可的甜味剂"),
                 "regulation": "GRAS Notice 000252"},
                {"name": "Titanium Dioxide (E171)", "nameCn": "二氧化钛 (E171)", "status": "fail",
                 "note": _pick(lang, "Under FDA review; check latest guidance", "FDA 正在复审，请关注最新指南"),
                 "regulation": "21 CFR 73.575"},
            ],
            "overallRisk": "medium",
            "riskPercent": 55,
            "summary": _pick(lang, "3 ingredient flags detected. Overall risk level is medium.", "检测到 3 项需关注的成分标记，整体风险等级为中等。"),
        },
        "labelCompliance": {
            "status": "warn",
            "passCount": 7,
            "totalCount": 9,
            "items": [
                {"name": "Nutrition Facts Format (2020)", "nameCn": "营养成分表格式 (2020)", "status": "pass",
                 "note": _pick(lang, "Compliant", "符合要求"), "regulation": "21 CFR 101.9"},
                {"name": "Allergen Declaration (FALCPA)", "nameCn": "过敏原声明 (FALCPA)", "status": "warn",
                 "note": _pick(lang, "Wheat allergen needs bold or separate Contains line", "小麦过敏原需加粗或单独列出“含有”声明"),
                 "regulation": "FALCPA Sec. 203"},
                {"name": "Net Weight (Dual Units)", "nameCn": "净含量（双单位）", "status": "fail",
                 "note": _pick(lang, "Missing US customary units (oz)", "缺少美制单位 (oz)"), "regulation": "21 CFR 101.105"},
                {"name": "Country of Origin", "nameCn": "原产国标注", "status": "pass",
                 "note": _pick(lang, "Clearly displayed", "标注清晰"), "regulation": "19 CFR 134.11"},
                {"name": "English Product Name", "nameCn": "英文产品名称", "status": "pass",
                 "note": _pick(lang, "Present and legible", "存在且清晰可读"), "regulation": "21 CFR 101.3"},
            ],
            "summary": _pick(lang, "7 of 9 label checks passed. 2 items need correction.", "9 项标签检查中 7 项通过，2 项需修正。"),
        },
        "facilityRegistration": {
            "status": "info",
            "items": [
                {"name": "FDA Registration Number", "nameCn": "FDA 注册编号", "status": "info",
                 "value": _pick(lang, "Not provided", "未提供"), "regulation": "21 CFR 1.232"},
                {"name": "Registration Status", "nameCn": "注册状态", "status": "info",
                 "value": _pick(lang, "Needs verification", "需要核实"), "regulation": "21 CFR 1.230"},
                {"name": "US Agent Designated", "nameCn": "美国代理人", "status": "warn",
                 "value": _pick(lang, "Unknown", "未知"), "regulation": "21 CFR 1.227"},
                {"name": "FSVP Importer", "nameCn": "FSVP 进口商", "status": "warn",
                 "value": _pick(lang, "Pending", "待定"), "regulation": "21 CFR 1.509"},
            ],
            "summary": _pick(lang, "Facility registration details need to be provided for verification.", "工厂注册信息需要手动提供以完成验证。"),
        },
        "marketingClaims": {
            "status": "warn",
            "issueCount": 2,
            "items": [
                {"claim": '"All Natural"', "claimCn": '"纯天然"', "status": "warn",
                 "note": _pick(lang, "Vague claim; FDA has no formal definition", "宣称含义模糊，FDA 无正式定义"),
                 "regulation": "FDA policy on 'natural' (58 FR 2302)"},
                {"claim": '"Boosts Immunity"', "claimCn": '"增强免疫力"', "status": "fail",
                 "note": _pick(lang, "Health claim that may require FDA authorization", "该健康宣称可能需要 FDA 授权"),
                 "regulation": "21 CFR 101.14"},
                {"claim": '"Low Sugar"', "claimCn": '"低糖"', "status": "pass",
                 "note": _pick(lang, "Meets nutrient content claim criteria", "符合营养素含量声称标准"),
                 "regulation": "21 CFR 101.60"},
                {"claim": '"Non-GMO"', "claimCn": '"非转基因"', "status": "info",
                 "note": _pick(lang, "Requires third-party certification", "需要第三方认证"),
                 "regulation": "FDA guidance on bioengineering statements"},
            ],
            "riskLevel": "high",
            "riskPercent": 72,
            "summary": _pick(lang, "2 marketing claim issues found. Risk level is high.", "发现 2 项宣传语言问题，风险等级较高。"),
        },
        "overallRisk": "medium",
        "overallScore": 68,
        "overallVerdict": "Moderate compliance: several items require attention before US market entry.",
        "overallVerdictCn": "合规程度中等：多项内容需在进入美国市场前修正。",
        "recommendations": [
            "Add US customary weight units (oz) alongside metric units",
            'Bold or add separate "Contains" line for wheat allergen',
            'Remove "Boosts Immunity" claim or obtain FDA authorization',
            'Clarify "All Natural" claim or remove from packaging',
            "Obtain Non-GMO Project verification if using Non-GMO claim",
            "Provide FDA facility registration number for verification",
        ],
        "recommendationsCn": [
            "在公制单位旁添加美制重量单位 (oz)",
            "将小麦过敏原加粗或添加单独的“含有”说明",
            "删除“增强免疫力”宣称或获取 FDA 授权",
            "明确“纯天然”宣称含义或从包装移除",
            "如使用非转基因宣称，需获得 Non-GMO Project 认证",
            "提供 FDA 工厂注册编号以完成验证",
        ],
    }


def get_demo_extraction_data(lang):
    return {
        "productName": "Strawberry Fruit Snacks",
        "productNameCn": "草莓果味软糖",
        "brand": "Sunny Orchard",
        "category": _pick(lang, "snack", "零食"),
        "netContent": "200g",
        "ingredients": ["Sugar", "Wheat Flour", "Red No. 40", "Titanium Dioxide", "Steviol Glycosides", "Sodium Benzoate"],
        "allergens": ["Wheat"],
        "claims": ["All Natural", "Boosts Immunity", "Low Sugar", "Non-GMO"],
        "nutritionFacts": {"Calories": "120", "Total Sugars": "4g", "Sodium": "45mg"},
        "manufacturer": "Sunny Orchard Foods Co., Ltd., Guangzhou, China",
        "countryOfOrigin": "China",
        "facilityRegistrationNumber": "",
        "notes": _pick(lang, "Demo extraction; no image was read.", "演示数据，未读取图片。"),
    }


@lru_cache(maxsize=None)
def demo_record(lang):
    return AssessmentRecord.model_validate(get_demo_data(lang))


@lru_cache(maxsize=None)
def demo_extraction(lang):
    return ProductExtraction.model_validate(get_demo_extraction_data(lang))
