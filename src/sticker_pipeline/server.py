"""
HTTP entry point.

Routes:
- POST /ingest   {"shortname": "..."}            -> ingest report
- POST /discover {"page": 1, "source": 0}        -> list of sticker set names
- POST /storage  {"operation", "bucket", ...}    -> upload/update/delete/list
- GET  /health                                   -> {"status": "ok"}

Errors are returned as {"error": message, "success": false} with the
status carried by the PipelineError (400/404/500).
"""

import asyncio
import base64
import binascii
import logging
from dataclasses import asdict
from typing import Any

from aiohttp import web
from pydantic import ValidationError

from config.config import IngestConfig
from core.errors.exceptions import InputError, PipelineError
from core.logging.context import set_log_context
from sticker_pipeline.schemas.responses import ErrorResponse, IngestResponse, StorageRequest
from sticker_pipeline.service import StickerService, build_service

logger = logging.getLogger(__name__)

SERVICE_KEY = web.AppKey("service", StickerService)


def _error_response(message: str, status: int) -> web.Response:
    return web.json_response(ErrorResponse(error=message).model_dump(), status=status)


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except PipelineError as e:
        if e.http_status >= 500:
            logger.error(
                "Request failed",
                extra={"http_url": request.path, "http_status": e.http_status, "error_message": str(e)},
            )
        else:
            logger.info(
                "Request rejected",
                extra={"http_url": request.path, "http_status": e.http_status, "error_message": e.message},
            )
        return _error_response(e.message, e.http_status)
    except Exception:
        logger.exception("Unhandled error", extra={"http_url": request.path})
        return _error_response("Internal Server Error", 500)


async def _read_json(request: web.Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError as e:
        raise InputError("Request body must be valid JSON", cause=e) from e
    if not isinstance(body, dict):
        raise InputError("Request body must be a JSON object")
    return body


def _int_param(body: dict[str, Any], name: str, default: int) -> int:
    value = body.get(name, default)
    if isinstance(value, bool):
        raise InputError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InputError(f"{name} must be an integer, got {value!r}", cause=e) from e


def _decode_file(encoded: str) -> bytes:
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InputError("file must be base64 encoded", cause=e) from e


async def handle_ingest(request: web.Request) -> web.Response:
    body = await _read_json(request)
    shortname = body.get("shortname")
    if not shortname or not isinstance(shortname, str):
        raise InputError("Missing shortname parameter")

    set_log_context(collection_id=shortname)
    report = await request.app[SERVICE_KEY].ingest(shortname)
    return web.json_response(IngestResponse.from_report(report).model_dump())


async def handle_discover(request: web.Request) -> web.Response:
    body = await _read_json(request)
    page = _int_param(body, "page", 1)
    source = _int_param(body, "source", 0)
    found = await request.app[SERVICE_KEY].discover(page, source)
    return web.json_response(sorted(found))


async def handle_storage(request: web.Request) -> web.Response:
    body = await _read_json(request)
    try:
        op = StorageRequest.model_validate(body)
    except ValidationError as e:
        raise InputError("Missing required parameters: operation and bucket", cause=e) from e

    service: StickerService = request.app[SERVICE_KEY]

    if op.operation in ("upload", "update"):
        path = (op.path or op.fileName) if op.operation == "upload" else op.path
        if not op.file or not op.fileType or not path:
            required = "file and fileType" if op.operation == "upload" else "path, file, and fileType"
            raise InputError(f"{op.operation.capitalize()} requires {required}")
        data = _decode_file(op.file)
        if op.operation == "upload":
            stored = await service.upload(op.bucket, path, data, op.fileType)
        else:
            stored = await service.update(op.bucket, path, data, op.fileType)
        return web.json_response({"success": True, "path": stored.path, "url": stored.public_url})

    if op.operation == "delete":
        if not op.path:
            raise InputError("Delete requires path")
        await service.remove(op.bucket, op.path)
        return web.json_response(
            {"success": True, "path": op.path, "message": "File deleted successfully"}
        )

    if op.operation == "list":
        entries = await service.list_objects(op.bucket, op.path or "")
        return web.json_response(
            {"success": True, "files": [asdict(e) for e in entries], "path": op.path or "root"}
        )

    raise InputError(f"Unknown operation: {op.operation}")


async def handle_health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


def create_app(service: StickerService) -> web.Application:
    """Create the aiohttp application around a wired StickerService."""
    app = web.Application(middlewares=[error_middleware])
    app[SERVICE_KEY] = service
    app.router.add_post("/ingest", handle_ingest)
    app.router.add_post("/discover", handle_discover)
    app.router.add_post("/storage", handle_storage)
    app.router.add_get("/health", handle_health)
    return app


async def run_server(config: IngestConfig, stop_event: asyncio.Event | None = None) -> None:
    """Serve until stop_event is set (or forever)."""
    stop_event = stop_event or asyncio.Event()
    async with build_service(config) as service:
        runner = web.AppRunner(create_app(service))
        await runner.setup()
        site = web.TCPSite(runner, config.server_host, config.server_port)
        await site.start()
        logger.info(
            "HTTP server started",
            extra={"http_url": f"http://{config.server_host}:{config.server_port}"},
        )
        try:
            await stop_event.wait()
        finally:
            await runner.cleanup()
            logger.info("HTTP server stopped")


__all__ = ["create_app", "error_middleware", "run_server", "SERVICE_KEY"]
