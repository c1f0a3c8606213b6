"""
Service layer for listing, uploading and streaming objects.

These helpers encapsulate boto3 usage (synchronous by design) so FastAPI
routes can stay thin and run them through the threadpool.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import IO, Any, AsyncIterator, Dict, Iterator, List, Optional, Tuple
from urllib.parse import quote

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from . import filenames, mime_types
from .config import CACHE_CONTROL, LIST_PAGE_SIZE, STREAM_CHUNK_SIZE, UPLOAD_STAGING_DIR
from .errors import BackendFailure, ErrorKind
from .models import FileInfo
from .validation import BucketTarget

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"NoSuchKey", "NoSuchBucket", "NotFound", "404"}


class StreamDisposition(str, Enum):
    INLINE = "inline"
    ATTACHMENT = "attachment"


def build_file_info(key: str, size: Optional[int], last_modified=None) -> FileInfo:
    file_type = mime_types.classify(key)
    return FileInfo(
        name=key,
        size=max(0, size or 0),
        last_modified=last_modified,
        mime_type=file_type.mime_type,
        content_class=file_type.content_class,
        viewable=file_type.viewable,
    )


def name_sort_key(name: str) -> Tuple[str, str]:
    # Case-insensitive first, raw string as a tie-breaker so the order is total.
    return (name.casefold(), name)


def list_files(client, target: BucketTarget) -> List[FileInfo]:
    """
    Return every object in the bucket, sorted by name.

    Pages through ``list_objects_v2`` with continuation tokens until the
    listing is complete. Entries without a key are skipped.

    Raises:
        BackendFailure: on any backend error; nothing partial is returned.
    """
    files: List[FileInfo] = []
    continuation_token = None

    try:
        while True:
            params: Dict[str, Any] = {"Bucket": target.bucket, "MaxKeys": LIST_PAGE_SIZE}
            if continuation_token:
                params["ContinuationToken"] = continuation_token
            response = client.list_objects_v2(**params)

            for obj in response.get("Contents", []):
                key = obj.get("Key")
                if not key:
                    continue
                files.append(build_file_info(key, obj.get("Size"), obj.get("LastModified")))

            continuation_token = response.get("NextContinuationToken")
            if not response.get("IsTruncated") or not continuation_token:
                break
    except (ClientError, BotoCoreError) as exc:
        logger.error("Listing %s/%s failed: %s", target.region, target.bucket, exc)
        raise BackendFailure(str(exc)) from exc

    files.sort(key=lambda info: name_sort_key(info.name))
    logger.info("Listed %s objects in %s/%s", len(files), target.region, target.bucket)
    return files


@contextmanager
def staged_copy(source: IO[bytes], staging_dir: Path) -> Iterator[Tuple[IO[bytes], int]]:
    """
    Copy ``source`` into a temporary file under ``staging_dir``.

    Yields the open staged file (rewound) and its size. The file is removed
    when the block exits, whether it raised or not.
    """
    staging_dir.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(dir=staging_dir, prefix="upload-", delete=False)
    try:
        shutil.copyfileobj(source, handle, STREAM_CHUNK_SIZE)
        size = handle.tell()
        handle.flush()
        handle.seek(0)
        yield handle, size
    finally:
        handle.close()
        try:
            os.unlink(handle.name)
        except OSError as exc:
            logger.error("Failed to delete temp file %s: %s", handle.name, exc)


@dataclass
class UploadResult:
    key: str
    size: int
    mime_type: str


def upload_file(
    client,
    target: BucketTarget,
    source: IO[bytes],
    original_filename: str,
    declared_size: Optional[int] = None,
    staging_dir: Optional[Path] = None,
) -> UploadResult:
    """
    Store ``source`` under the sanitized form of ``original_filename``.

    The content type comes from the sanitized name; whatever the client
    declared is ignored. Re-uploading the same name overwrites the object.

    A source with a known ``declared_size`` (the framework's own spooled
    file) is handed to ``put_object`` as is. Without a size the source is
    first staged to disk so its length can be measured.

    Raises:
        InvalidFilename: before anything is staged.
        BackendFailure: when ``put_object`` fails. Any staged copy is
            removed either way.
    """
    key = filenames.sanitize(original_filename)
    mime_type = mime_types.classify(key).mime_type

    def put(body: IO[bytes], size: int) -> None:
        try:
            client.put_object(
                Bucket=target.bucket,
                Key=key,
                Body=body,
                ContentLength=size,
                ContentType=mime_type,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("Uploading %s to %s/%s failed: %s", key, target.region, target.bucket, exc)
            raise BackendFailure(str(exc)) from exc

    if declared_size is not None:
        size = declared_size
        put(source, size)
    else:
        with staged_copy(source, staging_dir or UPLOAD_STAGING_DIR) as (staged, size):
            put(staged, size)

    logger.info("Uploaded %s (%s bytes) to %s/%s", key, size, target.region, target.bucket)
    return UploadResult(key=key, size=size, mime_type=mime_type)


@dataclass
class ObjectStream:
    key: str
    body: Any
    content_type: str
    content_length: Optional[int] = None

    def close(self) -> None:
        self.body.close()


@dataclass
class StreamOutcome:
    stream: Optional[ObjectStream] = None
    error: Optional[ErrorKind] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.stream is not None


def open_object_stream(client, target: BucketTarget, key: str) -> StreamOutcome:
    """Start fetching ``key``; the body is not read here."""
    try:
        response = client.get_object(Bucket=target.bucket, Key=key)
    except ClientError as exc:
        code = str(exc.response.get("Error", {}).get("Code", ""))
        kind = ErrorKind.OBJECT_NOT_FOUND if code in NOT_FOUND_CODES else ErrorKind.BACKEND_FAILURE
        logger.error("Fetching %s from %s/%s failed (%s): %s", key, target.region, target.bucket, kind.value, exc)
        return StreamOutcome(error=kind, detail=str(exc))
    except BotoCoreError as exc:
        logger.error("Fetching %s from %s/%s failed: %s", key, target.region, target.bucket, exc)
        return StreamOutcome(error=ErrorKind.BACKEND_FAILURE, detail=str(exc))

    body = response.get("Body")
    if body is None or not hasattr(body, "read"):
        logger.error("No readable body for %s in %s/%s", key, target.region, target.bucket)
        return StreamOutcome(
            error=ErrorKind.OBJECT_NOT_FOUND,
            detail="Could not get a readable stream for the file.",
        )

    return StreamOutcome(
        stream=ObjectStream(
            key=key,
            body=body,
            content_type=response.get("ContentType") or mime_types.classify(key).mime_type,
            content_length=response.get("ContentLength"),
        )
    )


async def iter_object_body(stream: ObjectStream, chunk_size: int = STREAM_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """
    Forward the backend body chunk by chunk.

    The body is closed when iteration ends, including when the client goes
    away and the response task is cancelled.
    """
    try:
        while True:
            chunk = await run_in_threadpool(stream.body.read, chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        stream.close()


def content_disposition(disposition: StreamDisposition, filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"{disposition.value}; filename*=utf-8''{quoted}"
    return f'{disposition.value}; filename="{filename}"'


def stream_headers(stream: ObjectStream, disposition: StreamDisposition) -> Dict[str, str]:
    headers = {
        "Content-Type": stream.content_type,
        "Cache-Control": CACHE_CONTROL,
        "Content-Disposition": content_disposition(disposition, stream.key),
    }
    if stream.content_length is not None:
        headers["Content-Length"] = str(stream.content_length)
    return headers


@dataclass
class TextPreview:
    text: str = ""
    truncated: bool = False
    error: Optional[ErrorKind] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None


def read_text_preview(target: BucketTarget, stream: ObjectStream, limit: int) -> TextPreview:
    """Read at most ``limit`` bytes of the body as text. The body is always closed."""
    try:
        data = stream.body.read(limit + 1)
    except (ClientError, BotoCoreError) as exc:
        logger.error("Reading %s from %s/%s failed: %s", stream.key, target.region, target.bucket, exc)
        return TextPreview(error=ErrorKind.BACKEND_FAILURE, detail=str(exc))
    finally:
        stream.close()
    return TextPreview(
        text=data[:limit].decode("utf-8", errors="replace"),
        truncated=len(data) > limit,
    )
