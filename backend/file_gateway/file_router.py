"""
HTTP routes for browsing, uploading and streaming files.
"""
from __future__ import annotations

from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse, Response, StreamingResponse

from . import mime_types, models, services, viewer
from .backend_clients import StorageClientFactory
from .config import VIEW_TEXT_MAX_BYTES
from .errors import MissingFile, MissingTarget
from .registry import RegionRegistry
from .validation import BucketTarget, get_registry, require_target, validate

router = APIRouter(tags=["files"])

REJECTED = {400: {"model": models.ErrorResponse}}
STREAM_ERRORS = {**REJECTED, 404: {"model": models.ErrorResponse}}


def get_client_factory(request: Request) -> StorageClientFactory:
    return request.app.state.client_factory


def not_found(detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"error": "File not found.", "details": detail},
    )


async def stream_file(
    target: BucketTarget,
    filename: str,
    disposition: services.StreamDisposition,
    clients: StorageClientFactory,
) -> Response:
    client = await run_in_threadpool(clients.client_for, target.region)
    outcome = await run_in_threadpool(services.open_object_stream, client, target, filename)
    if not outcome.ok:
        return not_found(outcome.detail)
    stream = outcome.stream
    return StreamingResponse(
        services.iter_object_body(stream),
        headers=services.stream_headers(stream, disposition),
    )


@router.get("/config", response_model=models.GatewayConfig)
async def get_config(registry: RegionRegistry = Depends(get_registry)):
    """Regions and the buckets each one exposes."""
    return registry.describe()


@router.get(
    "/files/{region}/{bucket}",
    response_model=List[models.FileInfo],
    responses={**REJECTED, 500: {"model": models.ErrorResponse}},
)
async def list_files(
    target: BucketTarget = Depends(require_target),
    clients: StorageClientFactory = Depends(get_client_factory),
):
    client = await run_in_threadpool(clients.client_for, target.region)
    return await run_in_threadpool(services.list_files, client, target)


@router.post(
    "/upload",
    response_model=models.UploadResponse,
    status_code=201,
    responses={**REJECTED, 500: {"model": models.ErrorResponse}},
)
async def upload_file(
    file: Optional[UploadFile] = File(default=None),
    region: Optional[str] = Form(default=None),
    bucket: Optional[str] = Form(default=None),
    registry: RegionRegistry = Depends(get_registry),
    clients: StorageClientFactory = Depends(get_client_factory),
):
    if file is None:
        raise MissingFile("No file was uploaded.")
    if not region or not bucket:
        raise MissingTarget("Region and bucket must be selected.")
    target = validate(registry, region, bucket)
    client = await run_in_threadpool(clients.client_for, target.region)
    result = await run_in_threadpool(
        services.upload_file,
        client,
        target,
        file.file,
        file.filename or "",
        file.size,
    )
    return models.UploadResponse(
        success=True,
        message=f"File '{result.key}' uploaded successfully!",
        key=result.key,
    )


@router.get("/raw/{region}/{bucket}/{filename:path}", responses=STREAM_ERRORS)
async def raw_file(
    filename: str,
    target: BucketTarget = Depends(require_target),
    clients: StorageClientFactory = Depends(get_client_factory),
):
    """Serve the object inline, for embedding."""
    return await stream_file(target, filename, services.StreamDisposition.INLINE, clients)


@router.get("/download/{region}/{bucket}/{filename:path}", responses=STREAM_ERRORS)
async def download_file(
    filename: str,
    target: BucketTarget = Depends(require_target),
    clients: StorageClientFactory = Depends(get_client_factory),
):
    """Serve the object as an attachment."""
    return await stream_file(target, filename, services.StreamDisposition.ATTACHMENT, clients)


@router.get("/view/{region}/{bucket}/{filename:path}", responses=STREAM_ERRORS)
async def view_file(
    filename: str,
    request: Request,
    target: BucketTarget = Depends(require_target),
    clients: StorageClientFactory = Depends(get_client_factory),
):
    file_type = mime_types.classify(filename)

    if file_type.content_class in viewer.EMBEDDED_CLASSES:
        root = request.scope.get("root_path", "")
        raw_url = f"{root}/raw/{quote(target.region)}/{quote(target.bucket)}/{quote(filename)}"
        return HTMLResponse(viewer.render_embed_page(filename, file_type, raw_url))

    if file_type.content_class is mime_types.ContentClass.TEXT:
        client = await run_in_threadpool(clients.client_for, target.region)
        outcome = await run_in_threadpool(services.open_object_stream, client, target, filename)
        if not outcome.ok:
            return not_found(outcome.detail)
        preview = await run_in_threadpool(
            services.read_text_preview, target, outcome.stream, VIEW_TEXT_MAX_BYTES
        )
        if not preview.ok:
            return not_found(preview.detail)
        return HTMLResponse(viewer.render_text_page(filename, preview.text, preview.truncated))

    return await stream_file(target, filename, services.StreamDisposition.INLINE, clients)
