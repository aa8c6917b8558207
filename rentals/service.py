"""HTTP API for collecting rental inquiries and relaying form submissions."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, load_settings
from .errors import BadRequestError, ConfigurationError, NotFoundError, UpstreamError
from .models import RentalInquiry
from .schema import validate_rental_inquiry
from .storage import Storage, create_storage
from .webhook import WebhookForwarder

logger = logging.getLogger("rentals.service")

LOG_LINE_LIMIT = 80

CONFIGURATION_ERROR_MESSAGE = "Server configuration error"
SUBMIT_FAILED_MESSAGE = "Failed to submit form. Please try again later."
INTERNAL_ERROR_MESSAGE = "Internal server error"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class InquiryView(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    service_address: str
    package_interest: str
    preferred_install_date: str
    dryer_hookup_type: str
    six_month_agreement: str
    autopay_agreement: str
    message: Optional[str]
    created_at: datetime


class SuccessResponse(BaseModel):
    success: bool = True


class InquiryCreatedResponse(SuccessResponse):
    inquiry: InquiryView


def _inquiry_to_view(inquiry: RentalInquiry) -> InquiryView:
    return InquiryView(**asdict(inquiry))


def _message_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


async def _read_body(request: Request) -> Any:
    """Decode a JSON or URL-encoded form body. An empty body reads as ``{}``."""

    content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if content_type == FORM_CONTENT_TYPE:
        form = await request.form()
        return dict(form)

    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise BadRequestError("Malformed JSON body") from exc


def _format_log_line(
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    body: Optional[str] = None,
) -> str:
    line = f"{method} {path} {status_code} in {duration_ms:.0f}ms"
    if body:
        line += f" :: {body}"
    if len(line) > LOG_LINE_LIMIT:
        line = line[: LOG_LINE_LIMIT - 1] + "…"
    return line


class SPAStaticFiles(StaticFiles):
    """Serve built client assets, answering unknown paths with ``index.html``."""

    async def get_response(self, path: str, scope):  # type: ignore[override]
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != status.HTTP_404_NOT_FOUND:
                raise
            return await super().get_response("index.html", scope)


def register_error_handlers(app: FastAPI) -> None:
    """Translate service errors into ``{"message": ...}`` JSON responses."""

    @app.exception_handler(BadRequestError)
    async def handle_bad_request(request: Request, exc: BadRequestError) -> JSONResponse:
        return _message_response(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return _message_response(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.error("%s", exc)
        return _message_response(status.HTTP_500_INTERNAL_SERVER_ERROR, CONFIGURATION_ERROR_MESSAGE)

    @app.exception_handler(UpstreamError)
    async def handle_upstream_error(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.error("Webhook submission failed: %s", exc)
        return _message_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SUBMIT_FAILED_MESSAGE)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error while processing %s %s", request.method, request.url.path)
        return _message_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def register_request_logging(app: FastAPI) -> None:
    """Log a one-line summary of every API request."""

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        start = time.perf_counter()
        path = request.url.path
        if not path.startswith("/api"):
            return await call_next(request)

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                _format_log_line(
                    request.method, path, status.HTTP_500_INTERNAL_SERVER_ERROR, duration_ms
                )
            )
            raise

        body_text: Optional[str] = None
        if response.headers.get("content-type", "").startswith("application/json"):
            body = b"".join([chunk async for chunk in response.body_iterator])
            body_text = body.decode("utf-8", errors="replace")
            response = Response(
                content=body,
                status_code=response.status_code,
                headers=dict(response.headers),
                background=response.background,
            )

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            _format_log_line(request.method, path, response.status_code, duration_ms, body_text)
        )
        return response


def register_api_routes(
    app: FastAPI,
    storage: Storage,
    *,
    webhook_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """Expose the JSON API endpoints on the provided FastAPI application."""

    @app.get("/api/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/submit", response_model=SuccessResponse)
    async def submit_form(request: Request) -> SuccessResponse:
        settings: Settings = request.app.state.settings
        forwarder = WebhookForwarder(
            settings.webhook_url,
            settings.webhook_secret,
            transport=webhook_transport,
        )

        payload = await _read_body(request)
        if not isinstance(payload, dict):
            raise BadRequestError("Request body must be a JSON object")

        await forwarder.forward(payload)
        logger.info("Form submission forwarded to webhook")
        return SuccessResponse()

    @app.post("/api/rental-inquiries", response_model=InquiryCreatedResponse)
    async def create_rental_inquiry(request: Request):
        payload = await _read_body(request)
        result = validate_rental_inquiry(payload)
        if not result.ok or result.value is None:
            return _message_response(
                status.HTTP_400_BAD_REQUEST,
                "Validation failed",
                errors=result.error_dicts(),
            )

        inquiry = storage.create_rental_inquiry(result.value)
        logger.info("Stored rental inquiry %s (%s)", inquiry.id, inquiry.package_interest)
        return InquiryCreatedResponse(inquiry=_inquiry_to_view(inquiry))

    @app.get("/api/rental-inquiries", response_model=List[InquiryView])
    async def list_rental_inquiries() -> List[InquiryView]:
        return [_inquiry_to_view(inquiry) for inquiry in storage.get_all_rental_inquiries()]

    @app.get("/api/rental-inquiries/{inquiry_id}", response_model=InquiryView)
    async def get_rental_inquiry(inquiry_id: str) -> InquiryView:
        inquiry = storage.get_rental_inquiry(inquiry_id)
        if inquiry is None:
            raise NotFoundError("Inquiry not found")
        return _inquiry_to_view(inquiry)


def mount_static_assets(app: FastAPI, static_dir: str) -> None:
    """Serve the built client from ``static_dir`` for every non-API path."""

    dist_path = Path(static_dir).expanduser().resolve(strict=False)
    if not dist_path.is_dir():
        raise ConfigurationError(
            f"Could not find the build directory: {dist_path}, make sure to build the client first"
        )
    app.mount("/", SPAStaticFiles(directory=str(dist_path), html=True), name="static")


def create_app(
    *,
    storage: Storage | None = None,
    settings: Settings | None = None,
    webhook_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application for the rental inquiry backend."""

    app_settings = settings or load_settings()
    app_storage = storage or create_storage(app_settings)

    app = FastAPI(
        title="Rental Inquiry API",
        version="0.1.0",
        description="Collects washer/dryer rental inquiries and relays form submissions.",
    )
    app.state.settings = app_settings
    app.state.storage = app_storage

    register_error_handlers(app)
    register_request_logging(app)
    register_api_routes(app, app_storage, webhook_transport=webhook_transport)

    if app_settings.static_dir:
        mount_static_assets(app, app_settings.static_dir)

    if not app_settings.webhook_url or not app_settings.webhook_secret:
        logger.warning("Webhook settings are incomplete; /api/submit will answer with a configuration error")

    return app


__all__ = ["create_app", "register_api_routes"]
