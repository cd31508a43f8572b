"""
Backend registry: the fixed route prefix to base URL mapping.
"""
import logging
from typing import Dict, Iterator, List, Optional

import httpx
from pydantic import BaseModel, ValidationError, field_validator

logger = logging.getLogger(__name__)

ROUTE_SUFFIX = "-api"


class ConfigurationError(Exception):
    """Raised when the gateway configuration cannot be served."""


class BackendRoute(BaseModel):
    """A backend reachable under /{prefix}-api/."""

    prefix: str
    base_url: str

    class Config:
        frozen = True

    @field_validator("prefix")
    @classmethod
    def check_prefix(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("route prefix must not be empty")
        if "/" in value:
            raise ValueError(f"route prefix {value!r} must not contain '/'")
        return value

    @field_validator("base_url")
    @classmethod
    def check_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as e:
            raise ValueError(f"malformed base URL {value!r}: {e}")
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"base URL {value!r} must be an absolute http(s) URL")
        return value

    @property
    def route_prefix(self) -> str:
        """Path segment the gateway serves this backend under."""
        return f"{self.prefix}{ROUTE_SUFFIX}"


class BackendRegistry:
    """
    Immutable collection of backend routes.

    Built once at startup; lookups are by exact route segment so two
    distinct prefixes can never match the same path.
    """

    def __init__(self, routes: List[BackendRoute]):
        self._routes = tuple(routes)
        self._by_segment: Dict[str, BackendRoute] = {}
        for route in self._routes:
            key = route.route_prefix
            if key in self._by_segment:
                raise ConfigurationError(
                    f"Duplicate backend prefix {route.prefix!r}"
                )
            self._by_segment[key] = route

    @classmethod
    def from_mapping(cls, mapping: Dict[str, str]) -> "BackendRegistry":
        """Build a registry from {prefix: base_url}, failing eagerly on bad entries."""
        routes = []
        for prefix, base_url in mapping.items():
            try:
                routes.append(BackendRoute(prefix=prefix, base_url=base_url))
            except ValidationError as e:
                errors = "; ".join(err["msg"] for err in e.errors())
                raise ConfigurationError(f"Invalid backend {prefix!r}: {errors}") from e
        return cls(routes)

    def lookup(self, segment: str) -> Optional[BackendRoute]:
        """Find the route served under a path segment such as 'jdc-api'."""
        return self._by_segment.get(segment)

    def __iter__(self) -> Iterator[BackendRoute]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, prefix: str) -> bool:
        return any(route.prefix == prefix for route in self._routes)
