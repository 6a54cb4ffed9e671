from __future__ import annotations

import re
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Optional

from flask import Blueprint, current_app, request
from pydantic import ValidationError as SchemaValidationError

from pastebin_lite.api.schemas import (
    HealthResponse,
    PasteCreatedResponse,
    PasteCreateRequest,
    PasteResponse,
)
from pastebin_lite.domain.errors import StorageError, ValidationError
from pastebin_lite.services.paste_service import PasteService


TEST_NOW_HEADER = "x-test-now-ms"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)", re.ASCII)

api_bp = Blueprint("api", __name__, url_prefix="/api")


def get_paste_service() -> PasteService:
    return current_app.extensions["paste_service"]


def reference_time() -> Optional[int]:
    """
    Return the reference time for this request in epoch milliseconds.

    Only honoured in test mode; ``None`` lets the store read its clock. The
    header is read by its leading digits, so ``"1700000000000abc"`` counts
    as ``1700000000000``.
    """
    if not current_app.config.get("TEST_MODE", False):
        return None
    header = request.headers.get(TEST_NOW_HEADER)
    if header is None:
        return None
    match = _LEADING_INT.match(header)
    if match is None:
        return None
    return int(match.group(1))


@api_bp.errorhandler(StorageError)
def handle_storage_error(exc: StorageError) -> tuple[dict, int]:
    return {"error": "Internal server error"}, HTTPStatus.INTERNAL_SERVER_ERROR


@api_bp.route("/healthz", methods=["GET"])
def healthz() -> tuple[dict, int]:
    """Simple health check endpoint."""

    body = HealthResponse(timestamp=datetime.now(timezone.utc).isoformat()).model_dump()
    return body, HTTPStatus.OK


@api_bp.route("/pastes", methods=["POST"])
def create_paste() -> tuple[dict, int]:
    """
    Create a new paste and return its id and share URL.

    Parameter rules are enforced by the paste store; the error message names
    the first rule that failed.
    """
    data = request.get_json(force=True, silent=True)
    if data is None:
        return {"error": "Invalid JSON"}, HTTPStatus.BAD_REQUEST

    try:
        payload = PasteCreateRequest.model_validate(data)
    except SchemaValidationError:
        return {"error": "Invalid request body"}, HTTPStatus.BAD_REQUEST

    try:
        paste = get_paste_service().create_paste(
            content=payload.content,
            ttl_seconds=payload.ttl_seconds,
            max_views=payload.max_views,
            now=reference_time(),
        )
    except ValidationError as exc:
        return {"error": str(exc)}, HTTPStatus.BAD_REQUEST

    base_url = current_app.config["PUBLIC_BASE_URL"].rstrip("/")
    body = PasteCreatedResponse(id=paste.id, url=f"{base_url}/p/{paste.id}")
    return body.model_dump(), HTTPStatus.CREATED


@api_bp.route("/pastes/<paste_id>", methods=["GET"])
def fetch_paste(paste_id: str) -> tuple[dict, int]:
    """Return a paste's content, consuming one of its views."""

    dto = get_paste_service().fetch_paste(paste_id, now=reference_time())
    if dto is None:
        return {"error": "Paste not found"}, HTTPStatus.NOT_FOUND

    return PasteResponse.model_validate(dto).model_dump(), HTTPStatus.OK
