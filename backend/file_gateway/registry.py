"""
Read-only registry of storage regions and their bucket whitelists.

The registry is built once at startup and shared by every request; nothing
mutates it afterwards, so concurrent reads need no locking.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import ConfigurationError, UnknownRegion


@dataclass(frozen=True)
class RegionConfig:
    """Connection parameters for one S3-compatible endpoint."""

    endpoint: str
    access_key_id: str
    secret_access_key: str = field(repr=False)
    signing_region: Optional[str] = None


class RegionRegistry:
    def __init__(
        self,
        configs: Mapping[str, RegionConfig],
        buckets: Mapping[str, Iterable[str]],
    ):
        orphaned = sorted(set(buckets) - set(configs))
        if orphaned:
            raise ConfigurationError(
                "Bucket permissions reference unknown regions: " + ", ".join(orphaned)
            )
        self._configs: Mapping[str, RegionConfig] = MappingProxyType(dict(configs))
        self._buckets: Mapping[str, Tuple[str, ...]] = MappingProxyType(
            {region: tuple(dict.fromkeys(names)) for region, names in buckets.items()}
        )

    @property
    def regions(self) -> Tuple[str, ...]:
        return tuple(self._configs)

    def __contains__(self, region_id: object) -> bool:
        return region_id in self._configs

    def resolve_region(self, region_id: str) -> RegionConfig:
        try:
            return self._configs[region_id]
        except KeyError:
            raise UnknownRegion(f"Invalid region: {region_id}") from None

    def permitted_buckets(self, region_id: str) -> Tuple[str, ...]:
        return self._buckets.get(region_id, ())

    def describe(self) -> Dict[str, object]:
        """Public view used by ``GET /config``; credentials are never included."""
        buckets: Dict[str, List[str]] = {
            region: list(self.permitted_buckets(region)) for region in self.regions
        }
        return {"regions": list(self.regions), "buckets": buckets}
