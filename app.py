import sys
from datetime import datetime, timedelta, timezone

from flask import Blueprint, Flask, current_app, jsonify, request
from loguru import logger
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from auth import current_user, end_session, login_required, register_user, authenticate, start_session
from config import Config, normalize_lang
from demo_data import DEMO_MESSAGE
from errors import ComplianceLabError, InvalidPayload, NoInputProvided
from models import db
from openai_client import OpenAIModelClient
from orchestrator import AssessmentService
from schema import ShapeError, validate_shape
import store

bp = Blueprint("api", __name__)


def configure_logging(level="INFO"):
    logger.remove()
    logger.add(sys.stderr, level=level)


def _service() -> AssessmentService:
    return current_app.extensions["assessment_service"]


def _config() -> Config:
    return current_app.extensions["compliance_lab_config"]


def _json_body():
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise InvalidPayload("Request body must be a JSON object")
    return body


def _assessment_payload(result):
    payload = {"success": True, "demo": result.demo, "data": result.data.to_dict()}
    if result.demo:
        payload["message"] = DEMO_MESSAGE
    return payload


@bp.get("/health")
def health():
    return jsonify({
        "status": "ok",
        "modelConfigured": not _service().demo_mode,
        "storeConfigured": store.store_available(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


### Analysis

@bp.post("/analyze")
async def analyze():
    result = await _service().analyze(request.files.getlist("files"), request.form.get("lang"))
    return jsonify(_assessment_payload(result))


@bp.post("/extract")
async def extract():
    result = await _service().extract(request.files.getlist("files"), request.form.get("lang"))
    return jsonify(_assessment_payload(result))


@bp.post("/analyze-confirmed")
async def analyze_confirmed():
    body = _json_body()
    result = await _service().analyze_confirmed(body.get("product"), body.get("lang"))
    return jsonify(_assessment_payload(result))


### Auth

@bp.post("/auth/register")
def register():
    body = _json_body()
    user = register_user(
        email=body.get("email"),
        password=body.get("password"),
        name=body.get("name"),
        company=body.get("company") or "",
    )
    # Auto-login after registration
    start_session(user)
    return jsonify({"success": True, "user": user.to_dict()}), 201


@bp.post("/auth/login")
def login():
    body = _json_body()
    user = authenticate(body.get("email"), body.get("password"))
    start_session(user)
    return jsonify({"success": True, "user": user.to_dict()})


@bp.post("/auth/logout")
@login_required
def logout(user):
    end_session()
    return jsonify({"success": True})


@bp.get("/auth/me")
def me():
    user = current_user()
    return jsonify({"user": user.to_dict() if user else None})


### Reports

@bp.post("/reports")
@login_required
def save_report(user):
    body = _json_body()
    data = body.get("data")
    if not data:
        raise NoInputProvided("No report data provided")
    try:
        record = validate_shape(data)
    except ShapeError as e:
        raise InvalidPayload(f"Invalid report data at {e.field}: {e.message}")

    file_names = body.get("fileNames") or []
    if not isinstance(file_names, list):
        raise InvalidPayload("fileNames must be a list")

    report = store.save_report(
        user.id,
        record,
        title=body.get("title"),
        lang=normalize_lang(body.get("lang")),
        file_names=file_names,
    )
    return jsonify({"success": True, "report": report.summary()}), 201


@bp.get("/reports")
@login_required
def list_reports(user):
    cap = _config().report_list_limit
    limit = request.args.get("limit", type=int) or cap
    reports = store.list_reports(user.id, limit=max(1, min(limit, cap)))
    return jsonify({"success": True, "reports": [r.summary() for r in reports]})


@bp.get("/reports/<report_id>")
@login_required
def get_report(user, report_id):
    report = store.get_report(user.id, report_id)
    return jsonify({"success": True, "report": report.to_dict()})


@bp.delete("/reports/<report_id>")
@login_required
def delete_report(user, report_id):
    store.delete_report(user.id, report_id)
    return jsonify({"success": True})


### Errors

def handle_domain_error(e):
    if e.status_code >= 500:
        logger.error(f"{e.code}: {e.message}")
    else:
        logger.info(f"{request.method} {request.path} -> {e.status_code} {e.code}")
    return jsonify(e.to_dict()), e.status_code


def handle_too_large(e):
    return jsonify({"success": False, "error": "Upload too large", "code": "UnsupportedArtifact"}), 413


def handle_http_error(e):
    return jsonify({"success": False, "error": e.description, "code": e.name.replace(" ", "")}), e.code


def handle_unexpected(e):
    logger.exception("Unhandled error")
    return jsonify({"success": False, "error": "Internal server error", "code": "InternalError"}), 500


def create_app(config=None, model_client=None):
    config = config or Config.from_env()
    configure_logging(config.log_level)

    app = Flask(__name__)
    app.config['SECRET_KEY'] = config.secret_key
    # per-file limits are enforced when uploads are staged
    app.config['MAX_CONTENT_LENGTH'] = config.max_file_size * config.max_files + 1024 * 1024
    app.permanent_session_lifetime = timedelta(days=config.session_days)

    if config.store_configured:
        app.config['SQLALCHEMY_DATABASE_URI'] = config.database_url
        app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
        db.init_app(app)
        with app.app_context():
            db.create_all()
    else:
        logger.warning("DATABASE_URL not set; accounts and saved reports are disabled")

    if model_client is None:
        model_client = OpenAIModelClient.from_config(config)
    if model_client is None:
        logger.warning("OPENAI_API_KEY not set; analysis runs in demo mode")

    app.extensions["compliance_lab_config"] = config
    app.extensions["assessment_service"] = AssessmentService(config, model_client)

    app.register_blueprint(bp)
    app.register_error_handler(ComplianceLabError, handle_domain_error)
    app.register_error_handler(RequestEntityTooLarge, handle_too_large)
    app.register_error_handler(HTTPException, handle_http_error)
    app.register_error_handler(Exception, handle_unexpected)
    return app


if __name__ == '__main__':
    config = Config.from_env()
    app = create_app(config)
    logger.info(f"Compliance Lab running on port {config.port}")
    app.run(host=config.host, port=config.port, debug=config.debug)
