"""Recover a validated record from free-text model output.

Two parse tiers are tried in order, each only if the previous one failed
to parse:

1. ``strict``: drop fenced-code markers, trim, parse the whole text.
2. ``salvage``: parse the span from the first ``{`` to the last ``}``.

Whatever parses is then shape-validated. ``normalize`` never raises; it
returns an ``Outcome`` holding either the record or a MalformedResponse.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, Optional

from errors import MalformedResponse
from schema import AssessmentRecord, ShapeError, validate_shape

STRICT = "strict"
SALVAGE = "salvage"

_FENCE_OPEN = re.compile(r"```json\s*", re.IGNORECASE)
_FENCE_ANY = re.compile(r"```\s*")


@dataclass(frozen=True)
class Outcome:
    record: Optional[Any] = None
    strategy: Optional[str] = None
    error: Optional[MalformedResponse] = None

    @property
    def ok(self):
        return self.error is None


def strip_fences(text):
    return _FENCE_ANY.sub("", _FENCE_OPEN.sub("", text)).strip()


def parse_strict(text):
    return json.loads(strip_fences(text))


def parse_salvage(text):
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("No JSON object found in response")
    return json.loads(text[start:end + 1])


TIERS = ((STRICT, parse_strict), (SALVAGE, parse_salvage))


def parse_json(text):
    """Return ``(value, strategy)`` from the first tier that parses.

    Raises ValueError (json.JSONDecodeError is a subclass) from the last
    tier when none does.
    """
    last_error = None
    for strategy, parse in TIERS:
        try:
            return parse(text), strategy
        except ValueError as exc:
            last_error = exc
    raise last_error


def normalize(text, schema=AssessmentRecord, require_citations=False):
    text = text if isinstance(text, str) else ""
    try:
        data, strategy = parse_json(text)
    except ValueError as exc:
        return Outcome(error=MalformedResponse(
            MalformedResponse.PARSE_FAILED, str(exc), text, SALVAGE,
        ))

    try:
        record = validate_shape(data, schema, require_citations=require_citations)
    except ShapeError as exc:
        return Outcome(strategy=strategy, error=MalformedResponse(
            MalformedResponse.SHAPE_INVALID, exc.message, text, strategy, field=exc.field,
        ))
    return Outcome(record=record, strategy=strategy)
