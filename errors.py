RAW_EXCERPT_LIMIT = 800


class ComplianceLabError(Exception):
    """Base class for errors that are reported to the API caller."""

    code = "InternalError"
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {"success": False, "error": self.message, "code": self.code}


class NoInputProvided(ComplianceLabError):
    code = "NoInputProvided"
    status_code = 400
    message = "No files uploaded"


class UnsupportedArtifact(ComplianceLabError):
    code = "UnsupportedArtifact"
    status_code = 400
    message = "Unsupported file type. Allowed: JPG, PNG, WEBP, PDF"


class ArtifactTooLarge(UnsupportedArtifact):
    status_code = 413
    message = "Uploaded file is too large"


class InvalidPayload(ComplianceLabError):
    code = "InvalidPayload"
    status_code = 400
    message = "Invalid request payload"


class ModelInvocationFailed(ComplianceLabError):
    code = "ModelInvocationFailed"
    status_code = 502
    message = "The analysis model could not be reached"


class MalformedResponse(ComplianceLabError):
    """The model answered, but no valid record could be recovered from it.

    ``diagnostic`` is ``ParseFailed`` (no JSON could be parsed) or
    ``ShapeInvalid`` (JSON parsed, wrong shape; ``field`` names the path).
    ``strategy`` is the last recovery tier that was attempted.
    """

    code = "MalformedResponse"
    status_code = 502

    PARSE_FAILED = "ParseFailed"
    SHAPE_INVALID = "ShapeInvalid"

    def __init__(self, diagnostic, detail, raw, strategy, field=None):
        super().__init__("Failed to parse AI response")
        self.diagnostic = diagnostic
        self.detail = detail
        self.raw = (raw or "")[:RAW_EXCERPT_LIMIT]
        self.strategy = strategy
        self.field = field

    def __repr__(self):
        return f"MalformedResponse({self.diagnostic!r}, field={self.field!r}, strategy={self.strategy!r})"

    def to_dict(self):
        payload = super().to_dict()
        payload.update({
            "diagnostic": self.diagnostic,
            "detail": self.detail,
            "strategy": self.strategy,
            "raw": self.raw,
        })
        if self.field:
            payload["field"] = self.field
        return payload


class AuthRequired(ComplianceLabError):
    code = "AuthRequired"
    status_code = 401
    message = "Please sign in first"


class InvalidCredentials(ComplianceLabError):
    code = "InvalidCredentials"
    status_code = 401
    message = "Invalid email or password"


class EmailAlreadyRegistered(ComplianceLabError):
    code = "EmailAlreadyRegistered"
    status_code = 409
    message = "Email is already registered"


class PasswordTooShort(ComplianceLabError):
    code = "PasswordTooShort"
    status_code = 400
    message = "Password must be at least 6 characters"


class NotFound(ComplianceLabError):
    code = "NotFound"
    status_code = 404
    message = "Report not found"


class StoreUnavailable(ComplianceLabError):
    code = "StoreUnavailable"
    status_code = 503
    message = "Storage is currently unavailable"
