"""Expected shapes of the structured data the model is asked to return.

Field names are snake_case in Python and camelCase on the wire; every model
is frozen so a validated record can be handed around as a value.
"""
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

ItemStatus = Literal["pass", "warn", "fail", "info"]
SectionStatus = Literal["pass", "warn", "fail"]
# facility checks use "info" for "could not be determined" instead of "fail"
FacilityStatus = Literal["pass", "warn", "info"]
RiskLevel = Literal["low", "medium", "high"]

RISK_SCORES = {"low": 1, "medium": 2, "high": 3}

SECTION_STATUSES = {
    "ingredientRisk": ("pass", "warn", "fail"),
    "labelCompliance": ("pass", "warn", "fail"),
    "facilityRegistration": ("pass", "warn", "info"),
    "marketingClaims": ("pass", "warn", "fail"),
}
ITEM_STATUSES = ("pass", "warn", "fail", "info")

REQUIRE_CITATIONS = "require_citations"


class ShapeError(ValueError):
    """Parsed JSON that does not match the expected schema."""

    def __init__(self, field, message):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


def _drop_invalid(value, handler):
    # counters and percentages are informational; a bad one is dropped, not fatal
    try:
        return handler(value)
    except ValidationError:
        return None


class _Frozen(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_dict(self):
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class FindingItem(_Frozen):
    status: ItemStatus
    note: Optional[str] = None
    regulation: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("regulation")
    @classmethod
    def _citation(cls, value, info: ValidationInfo):
        if info.context and info.context.get(REQUIRE_CITATIONS):
            if not isinstance(value, str) or not value.strip():
                raise ValueError("a regulatory citation is required for every item")
        return value


class IngredientItem(FindingItem):
    name: str
    name_cn: str


class LabelItem(FindingItem):
    name: str
    name_cn: str


class FacilityItem(FindingItem):
    name: str
    name_cn: str
    value: Optional[str] = None


class ClaimItem(FindingItem):
    claim: str
    claim_cn: str


class IngredientRiskSection(_Frozen):
    status: SectionStatus
    items: Tuple[IngredientItem, ...]
    summary: str
    flag_count: Optional[int] = None
    overall_risk: Optional[str] = None
    risk_percent: Optional[float] = None

    @field_validator("flag_count", "overall_risk", "risk_percent", mode="wrap")
    @classmethod
    def _extras(cls, value, handler):
        return _drop_invalid(value, handler)


class LabelComplianceSection(_Frozen):
    status: SectionStatus
    items: Tuple[LabelItem, ...]
    summary: str
    pass_count: Optional[int] = None
    total_count: Optional[int] = None

    @field_validator("pass_count", "total_count", mode="wrap")
    @classmethod
    def _extras(cls, value, handler):
        return _drop_invalid(value, handler)


class FacilityRegistrationSection(_Frozen):
    status: FacilityStatus
    items: Tuple[FacilityItem, ...]
    summary: str


class MarketingClaimsSection(_Frozen):
    status: SectionStatus
    items: Tuple[ClaimItem, ...]
    summary: str
    issue_count: Optional[int] = None
    risk_level: Optional[str] = None
    risk_percent: Optional[float] = None

    @field_validator("issue_count", "risk_level", "risk_percent", mode="wrap")
    @classmethod
    def _extras(cls, value, handler):
        return _drop_invalid(value, handler)


class AssessmentRecord(_Frozen):
    """The structured compliance report for one analysis request."""

    ingredient_risk: IngredientRiskSection
    label_compliance: LabelComplianceSection
    facility_registration: FacilityRegistrationSection
    marketing_claims: MarketingClaimsSection
    overall_risk: RiskLevel
    overall_verdict: str
    overall_verdict_cn: str
    recommendations: Tuple[str, ...]
    recommendations_cn: Tuple[str, ...]
    overall_score: Optional[float] = None

    @field_validator("overall_score", mode="wrap")
    @classmethod
    def _extras(cls, value, handler):
        return _drop_invalid(value, handler)

    @property
    def score(self):
        return RISK_SCORES[self.overall_risk]


class ProductExtraction(_Frozen):
    """What could be read off the packaging, without any risk judgment."""

    product_name: str = ""
    product_name_cn: str = ""
    brand: str = ""
    category: str = ""
    net_content: str = ""
    ingredients: Tuple[str, ...] = ()
    allergens: Tuple[str, ...] = ()
    claims: Tuple[str, ...] = ()
    nutrition_facts: Dict[str, Any] = Field(default_factory=dict)
    manufacturer: str = ""
    country_of_origin: str = ""
    facility_registration_number: str = ""
    notes: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_missing(cls, value, info: ValidationInfo):
        # models answer null for anything they could not read
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value

    def is_empty(self):
        return not any(value for value in self.model_dump().values())


def _error_path(loc):
    if not loc:
        return "<root>"
    return ".".join(str(part) for part in loc)


def validate_shape(data, schema=AssessmentRecord, require_citations=False):
    """Validate parsed JSON against ``schema`` and return the frozen model.

    Raises ShapeError naming the first offending field path.
    """
    try:
        return schema.model_validate(data, context={REQUIRE_CITATIONS: require_citations})
    except ValidationError as exc:
        first = exc.errors()[0]
        raise ShapeError(_error_path(first.get("loc")), first.get("msg", "invalid value")) from exc
