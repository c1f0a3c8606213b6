"""
Region/bucket whitelist checks.

These run before any storage client is built: they are the only thing
standing between a request and the backend.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, Request

from .errors import BucketNotAllowed, UnknownRegion
from .registry import RegionRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BucketTarget:
    region: str
    bucket: str


def validate(registry: RegionRegistry, region: str, bucket: str) -> BucketTarget:
    if region not in registry:
        logger.warning("Rejected request for unknown region %r", region)
        raise UnknownRegion(f"Invalid region: {region}")
    if bucket not in registry.permitted_buckets(region):
        logger.warning("Rejected request for bucket %r in region %r", bucket, region)
        raise BucketNotAllowed(f"Invalid bucket '{bucket}' for region '{region}'")
    return BucketTarget(region=region, bucket=bucket)


def get_registry(request: Request) -> RegionRegistry:
    return request.app.state.registry


def require_target(
    region: str,
    bucket: str,
    registry: RegionRegistry = Depends(get_registry),
) -> BucketTarget:
    """Dependency for routes carrying ``{region}/{bucket}`` path parameters."""
    return validate(registry, region, bucket)
