"""
Centralized configuration for the file gateway.

Environment variables let operators describe the storage regions and tune
streaming behaviour without changing code. Documented defaults are safe for
local development; production deployments should override them in
Docker/Compose.
"""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .errors import ConfigurationError
from .registry import RegionConfig, RegionRegistry

logger = logging.getLogger(__name__)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS behaviour
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:8080").split(",")
    if origin.strip()
]

# Upload staging (one temp file per request, removed when the request ends)
UPLOAD_STAGING_DIR = Path(os.getenv("UPLOAD_STAGING_DIR", "uploads"))

# Streaming and listing knobs
STREAM_CHUNK_SIZE = int(os.getenv("STREAM_CHUNK_SIZE", str(64 * 1024)))
LIST_PAGE_SIZE = int(os.getenv("LIST_PAGE_SIZE", "1000"))
VIEW_TEXT_MAX_BYTES = int(os.getenv("VIEW_TEXT_MAX_BYTES", str(1024 * 1024)))
CACHE_CONTROL = "public, max-age=31536000"

# Backend client behaviour
BACKEND_CONNECT_TIMEOUT = float(os.getenv("BACKEND_CONNECT_TIMEOUT", "10"))
BACKEND_READ_TIMEOUT = float(os.getenv("BACKEND_READ_TIMEOUT", "60"))
BACKEND_MAX_ATTEMPTS = int(os.getenv("BACKEND_MAX_ATTEMPTS", "3"))

REGIONS_ENV = "GATEWAY_REGIONS"


def parse_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def env_prefix(region_id: str) -> str:
    """``london-2`` -> ``LONDON_2``."""
    return re.sub(r"[^A-Z0-9]", "_", region_id.upper())


def load_region_registry(environ: Optional[Mapping[str, str]] = None) -> RegionRegistry:
    """
    Build the region registry from environment variables.

    ``GATEWAY_REGIONS`` lists the region identifiers. Each region then needs
    ``<PREFIX>_ENDPOINT``, ``<PREFIX>_ACCESS_KEY`` and ``<PREFIX>_SECRET_KEY``;
    ``<PREFIX>_BUCKETS`` and ``<PREFIX>_SIGNING_REGION`` are optional.

    Raises:
        ConfigurationError: when no region is declared or any required
            variable is missing. All missing names are reported at once.
    """
    env = os.environ if environ is None else environ
    region_ids = list(dict.fromkeys(parse_list(env.get(REGIONS_ENV))))
    if not region_ids:
        raise ConfigurationError(f"{REGIONS_ENV} must list at least one region")

    configs: Dict[str, RegionConfig] = {}
    buckets: Dict[str, List[str]] = {}
    missing: List[str] = []

    for region_id in region_ids:
        prefix = env_prefix(region_id)
        values = {}
        for suffix in ("ENDPOINT", "ACCESS_KEY", "SECRET_KEY"):
            name = f"{prefix}_{suffix}"
            value = (env.get(name) or "").strip()
            if not value:
                missing.append(name)
            values[suffix] = value
        if any(not value for value in values.values()):
            continue

        configs[region_id] = RegionConfig(
            endpoint=values["ENDPOINT"],
            access_key_id=values["ACCESS_KEY"],
            secret_access_key=values["SECRET_KEY"],
            signing_region=(env.get(f"{prefix}_SIGNING_REGION") or "").strip() or None,
        )
        buckets[region_id] = parse_list(env.get(f"{prefix}_BUCKETS"))
        if not buckets[region_id]:
            logger.warning("Region %s has no permitted buckets (%s_BUCKETS)", region_id, prefix)

    if missing:
        raise ConfigurationError(
            "Missing storage configuration: " + ", ".join(missing)
        )

    registry = RegionRegistry(configs, buckets)
    logger.info("Loaded %s storage regions: %s", len(registry.regions), ", ".join(registry.regions))
    return registry
