"""
Shared helpers for creating boto3 clients targeting S3-compatible backends.
"""
from __future__ import annotations

import logging
from functools import lru_cache

import boto3
from botocore.config import Config

from .config import BACKEND_CONNECT_TIMEOUT, BACKEND_MAX_ATTEMPTS, BACKEND_READ_TIMEOUT
from .registry import RegionConfig, RegionRegistry

logger = logging.getLogger(__name__)


@lru_cache(maxsize=16)
def build_client(region_id: str, region_config: RegionConfig):
    logger.info("Creating S3 client for region %s at %s", region_id, region_config.endpoint)
    # Sessions are not thread-safe; each client gets its own.
    session = boto3.session.Session()
    return session.client(
        "s3",
        endpoint_url=region_config.endpoint,
        region_name=region_config.signing_region or region_id,
        aws_access_key_id=region_config.access_key_id,
        aws_secret_access_key=region_config.secret_access_key,
        config=Config(
            signature_version="s3v4",
            connect_timeout=BACKEND_CONNECT_TIMEOUT,
            read_timeout=BACKEND_READ_TIMEOUT,
            retries={"max_attempts": BACKEND_MAX_ATTEMPTS, "mode": "standard"},
        ),
    )


class StorageClientFactory:
    """Hands out one cached client per region; safe to share across requests."""

    def __init__(self, registry: RegionRegistry):
        self._registry = registry

    def client_for(self, region_id: str):
        region_config = self._registry.resolve_region(region_id)
        return build_client(region_id, region_config)
