import json
import os
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError
from werkzeug.utils import secure_filename

from config import ALLOWED_MIME_TYPES, normalize_lang
from demo_data import demo_extraction, demo_record
from errors import ArtifactTooLarge, InvalidPayload, NoInputProvided, UnsupportedArtifact
from normalizer import normalize
from prompts import CONFIRMED, IMAGE, build_extraction_prompt, build_prompt
from schema import AssessmentRecord, ProductExtraction


@dataclass(frozen=True)
class Artifact:
    """An uploaded file staged on disk for the duration of one request."""

    path: str
    filename: str
    mimetype: str


@dataclass(frozen=True)
class Assessment:
    data: Any
    demo: bool
    strategy: Optional[str] = None


def _unique_name(filename):
    ext = os.path.splitext(secure_filename(filename or ""))[1].lower()
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{ext}"


class AssessmentService:
    """Runs the analyze / extract / analyze-confirmed flows.

    ``model_client`` is None when no model credential is configured; every
    flow then answers with fixed demo data flagged ``demo=True``.
    """

    def __init__(self, config, model_client=None):
        self.config = config
        self.model_client = model_client

    @property
    def demo_mode(self):
        return self.model_client is None

    def check_uploads(self, uploads):
        uploads = [f for f in (uploads or []) if f is not None and f.filename]
        if not uploads:
            raise NoInputProvided()
        if len(uploads) > self.config.max_files:
            raise UnsupportedArtifact(f"Too many files. At most {self.config.max_files} files per request")
        for upload in uploads:
            if upload.mimetype not in ALLOWED_MIME_TYPES:
                logger.info(f"Rejected upload {upload.filename!r} with type {upload.mimetype!r}")
                raise UnsupportedArtifact()
        return uploads

    @contextmanager
    def staged(self, uploads):
        """Save uploads under the upload folder and always delete them afterwards."""
        folder = self.config.upload_folder
        os.makedirs(folder, exist_ok=True)
        artifacts = []
        try:
            for upload in uploads:
                artifact = Artifact(
                    path=os.path.join(folder, _unique_name(upload.filename)),
                    filename=upload.filename,
                    mimetype=upload.mimetype,
                )
                artifacts.append(artifact)
                upload.save(artifact.path)
                if os.path.getsize(artifact.path) > self.config.max_file_size:
                    raise ArtifactTooLarge(
                        f"{upload.filename} exceeds the {self.config.max_file_size_mb}MB limit"
                    )
            yield artifacts
        finally:
            for artifact in artifacts:
                try:
                    os.remove(artifact.path)
                except FileNotFoundError:
                    pass
                except OSError as e:
                    logger.error(f"Failed to remove staged upload {artifact.path}: {e}")

    def _finish(self, outcome, what):
        if not outcome.ok:
            error = outcome.error
            logger.error(
                f"{what} response rejected: {error.diagnostic}"
                f" (field={error.field}, strategy={error.strategy}): {error.detail}"
            )
            logger.debug(f"Raw response excerpt: {error.raw}")
            raise error
        logger.info(f"{what} response normalized via {outcome.strategy} tier")
        return Assessment(outcome.record, demo=False, strategy=outcome.strategy)

    async def analyze(self, uploads, lang="en"):
        uploads = self.check_uploads(uploads)
        lang = normalize_lang(lang)
        with self.staged(uploads) as artifacts:
            if self.demo_mode:
                logger.info("Model not configured; returning demo analysis")
                return Assessment(demo_record(lang), demo=True)
            text = await self.model_client.generate(build_prompt(IMAGE, lang), artifacts)
        return self._finish(normalize(text, AssessmentRecord), "Analysis")

    async def extract(self, uploads, lang="en"):
        uploads = self.check_uploads(uploads)
        lang = normalize_lang(lang)
        with self.staged(uploads) as artifacts:
            if self.demo_mode:
                logger.info("Model not configured; returning demo extraction")
                return Assessment(demo_extraction(lang), demo=True)
            text = await self.model_client.generate(build_extraction_prompt(lang), artifacts)
        return self._finish(normalize(text, ProductExtraction), "Extraction")

    async def analyze_confirmed(self, product, lang="en"):
        if not product:
            raise NoInputProvided("No product data provided")
        if not isinstance(product, dict):
            raise InvalidPayload("product must be a JSON object")
        try:
            confirmed = ProductExtraction.model_validate(product)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ()))
            raise InvalidPayload(f"Invalid product data at {field}: {first.get('msg')}")
        if confirmed.is_empty():
            raise NoInputProvided("No product data provided")

        lang = normalize_lang(lang)
        if self.demo_mode:
            logger.info("Model not configured; returning demo analysis for confirmed data")
            return Assessment(demo_record(lang), demo=True)

        context = "Confirmed product data:\n" + json.dumps(confirmed.to_dict(), ensure_ascii=False, indent=2)
        text = await self.model_client.generate(build_prompt(CONFIRMED, lang), context=context)
        return self._finish(normalize(text, AssessmentRecord, require_citations=True), "Confirmed analysis")
