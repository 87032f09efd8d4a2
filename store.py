import functools
import uuid

from flask import current_app
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from errors import NotFound, StoreUnavailable
from models import Report, db

DEFAULT_TITLE = "Untitled Report"


def store_available():
    return "sqlalchemy" in current_app.extensions


def guarded(func):
    """Turn database failures into StoreUnavailable after rolling back."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        if not store_available():
            raise StoreUnavailable("Storage is not configured")
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Database error in {func.__name__}")
            raise StoreUnavailable()

    return wrapper


def new_report_id():
    return uuid.uuid4().hex


@guarded
def save_report(owner_id, record, title=None, lang="en", file_names=()):
    report = Report(
        user_id=owner_id,
        report_id=new_report_id(),
        title=(title or "").strip()[:200] or DEFAULT_TITLE,
        data=record.to_dict(),
        lang=lang,
        score=record.score,
        file_names=[str(name) for name in file_names],
    )
    db.session.add(report)
    db.session.commit()
    logger.info(f"Saved report {report.report_id} for user {owner_id}")
    return report


@guarded
def list_reports(owner_id, limit=50):
    return (
        Report.query.filter_by(user_id=owner_id)
        .order_by(Report.created_at.desc(), Report.id.desc())
        .limit(limit)
        .all()
    )


@guarded
def get_report(owner_id, report_id):
    # reports of other owners are reported as missing, not forbidden
    report = Report.query.filter_by(user_id=owner_id, report_id=report_id).first()
    if report is None:
        raise NotFound()
    return report


@guarded
def delete_report(owner_id, report_id):
    report = Report.query.filter_by(user_id=owner_id, report_id=report_id).first()
    if report is None:
        raise NotFound()
    db.session.delete(report)
    db.session.commit()
    logger.info(f"Deleted report {report_id} for user {owner_id}")
