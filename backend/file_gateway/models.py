"""
Shared Pydantic models describing request/response payloads.
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .mime_types import ContentClass


class FileInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    size: int = Field(ge=0)
    last_modified: Optional[datetime] = Field(default=None, alias="lastModified")
    mime_type: str = Field(alias="mimeType")
    content_class: ContentClass = Field(alias="contentClass")
    viewable: bool = False


class GatewayConfig(BaseModel):
    regions: List[str]
    buckets: Dict[str, List[str]]


class UploadResponse(BaseModel):
    success: bool
    message: str
    key: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
