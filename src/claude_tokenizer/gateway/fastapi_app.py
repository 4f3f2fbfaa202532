"""FastAPI gateway for token counting.

Endpoints:
- GET /health
- POST /api  JSON { "text": "...", "model": "..." }
             or multipart { file, model, fileType }
"""
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from claude_tokenizer.common.config import Settings
from claude_tokenizer.common.exceptions import ClientRequestError, PrimaryCountingFailure
from claude_tokenizer.common.logging_setup import setup_logging
from claude_tokenizer.common.schema import FileCountRequest, FileKind, TextCountRequest
from claude_tokenizer.gateway.dispatch import Gateway
from claude_tokenizer.gateway.vendors import Vendors, build_vendors

LOGGER = logging.getLogger("tokenizer.gateway.app")


def _form_str(form: FormData, key: str) -> str | None:
    value = form.get(key)
    return value if isinstance(value, str) else None


async def _read_form(request: Request) -> FormData:
    try:
        return await request.form()
    except (StarletteHTTPException, MultiPartException, ValueError) as e:
        raise ClientRequestError("malformed multipart body", e) from e


async def _file_request(form: FormData, model: str) -> FileCountRequest:
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise ClientRequestError("multipart body has no file")
    data = await upload.read()
    return FileCountRequest(
        data=data,
        declared_kind=FileKind.parse(_form_str(form, "fileType")),
        model=model,
        filename=upload.filename,
        media_type=upload.content_type,
    )


async def _text_request(request: Request) -> TextCountRequest:
    try:
        return TextCountRequest.model_validate(await request.json())
    except ValueError as e:
        raise ClientRequestError("malformed JSON body", e) from e


def create_app(settings: Settings | None = None, vendors: Vendors | None = None) -> FastAPI:
    """
    Build the gateway app.

    Args:
        settings: Validated settings; read from the environment when omitted.
        vendors: Vendor counters; built from settings when omitted.

    Raises:
        StartupConfigurationError: if the Anthropic API key is missing.
    """
    if settings is None:
        settings = Settings.from_env()
        setup_logging(settings.log_level)
    settings.validate()
    gateway = Gateway(settings, vendors if vendors is not None else build_vendors(settings))

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if not settings.gemini_enabled:
            LOGGER.warning("GEMINI_API_KEY not found - Gemini token counting will be disabled")
        yield

    app = FastAPI(title="Claude Tokenizer", lifespan=lifespan)
    app.state.settings = settings
    app.state.gateway = gateway

    @app.exception_handler(PrimaryCountingFailure)
    async def _primary_failure(request: Request, exc: PrimaryCountingFailure) -> JSONResponse:
        return JSONResponse(status_code=500, content={"error": exc.public_message})

    @app.get("/health")
    def health() -> dict[str, str]:
        return {
            "status": "ok",
            "model": settings.default_model,
            "gemini": "enabled" if settings.gemini_enabled else "disabled",
        }

    @app.post("/api")
    async def count_tokens(request: Request) -> JSONResponse:
        content_type = request.headers.get("content-type", "")
        model = settings.default_model
        try:
            if "multipart/form-data" in content_type:
                form = await _read_form(request)
                model = gateway.resolve_model(_form_str(form, "model"))
                result = await gateway.count_file(await _file_request(form, model))
            else:
                body = await _text_request(request)
                model = gateway.resolve_model(body.model)
                result = await gateway.count_text(body)
        except ClientRequestError as e:
            LOGGER.info("Nothing to count: %s", e.message)
            result = gateway.empty_result(model)
        return JSONResponse(result.model_dump(by_alias=True))

    return app
