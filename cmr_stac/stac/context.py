"""Per-request STAC URL context."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from fastapi import Request

from cmr_stac.core.config.stac import StacConfig

CLOUD_STAC_HEADER = "cloud-stac"


@dataclass(frozen=True, slots=True)
class StacContext:
    """URLs derived from the inbound request.

    Attributes:
        id: Catalog flavour, ``STAC`` or ``CLOUDSTAC``
        stac_root: Public URL of the root catalog
        self: Canonical URL of this resource, query string included
        path: Canonical URL of this resource without query string
        request_path: Raw request path relative to the root catalog
        is_cloud_stac: Whether the cloud-hosted catalog was requested
    """

    id: str
    stac_root: str
    self: str
    path: str
    request_path: str
    is_cloud_stac: bool

    @classmethod
    def build(
        cls,
        headers: Mapping[str, str],
        request_path: str,
        query_string: str,
        stac_config: StacConfig,
    ) -> StacContext:
        is_cloud_stac = headers.get(CLOUD_STAC_HEADER, "").lower() == "true"
        protocol = (
            headers.get("cloudfront-forwarded-proto")
            or headers.get("x-forwarded-proto")
            or "http"
        )
        host = headers.get("x-forwarded-host") or headers.get("host") or "localhost"
        root_path = (
            stac_config.cloud_stac_root_path if is_cloud_stac else stac_config.stac_root_path
        )
        stac_root = f"{protocol}://{host}{root_path}"

        path = f"{stac_root}{request_path}".rstrip("/")
        self_url = f"{path}?{query_string}" if query_string else path

        return cls(
            id="CLOUDSTAC" if is_cloud_stac else "STAC",
            stac_root=stac_root,
            self=self_url,
            path=path,
            request_path=request_path,
            is_cloud_stac=is_cloud_stac,
        )

    @classmethod
    def from_request(cls, request: Request, stac_config: StacConfig) -> StacContext:
        return cls.build(
            headers=request.headers,
            request_path=request.url.path,
            query_string=request.url.query,
            stac_config=stac_config,
        )


def get_base_url(url: str) -> str:
    """Strip query string and trailing slash."""
    return url.split("?", 1)[0].rstrip("/")
