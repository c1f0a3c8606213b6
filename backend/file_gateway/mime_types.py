"""
Filename-based MIME type and content class lookup.

Only the extension is consulted; object contents are never sniffed.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict

DEFAULT_MIME_TYPE = "application/octet-stream"


class ContentClass(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    TEXT = "text"
    PDF = "pdf"
    OTHER = "other"


MIME_TYPES: Dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".bmp": "image/bmp",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".csv": "text/csv",
    ".md": "text/markdown",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".zip": "application/zip",
    ".rar": "application/x-rar-compressed",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

# application/* types that still render as text
TEXTUAL_APPLICATION_TYPES = ("json", "xml", "javascript")


@dataclass(frozen=True)
class FileType:
    mime_type: str
    content_class: ContentClass

    @property
    def viewable(self) -> bool:
        return self.content_class is not ContentClass.OTHER


def extension_of(filename: str) -> str:
    """Lowercased extension including the dot, or "" when there is none."""
    base = filename.rsplit("/", 1)[-1]
    stem, dot, ext = base.rpartition(".")
    if not dot or not stem.strip("."):
        return ""
    return f".{ext.lower()}"


def content_class_for(mime_type: str) -> ContentClass:
    if mime_type == "application/pdf":
        return ContentClass.PDF
    major = mime_type.split("/", 1)[0]
    if major == "image":
        return ContentClass.IMAGE
    if major == "video":
        return ContentClass.VIDEO
    if major == "audio":
        return ContentClass.AUDIO
    if major == "text" or any(token in mime_type for token in TEXTUAL_APPLICATION_TYPES):
        return ContentClass.TEXT
    return ContentClass.OTHER


def classify(filename: str) -> FileType:
    mime_type = MIME_TYPES.get(extension_of(filename), DEFAULT_MIME_TYPE)
    return FileType(mime_type=mime_type, content_class=content_class_for(mime_type))
