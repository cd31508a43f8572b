"""
Request classification: health check, proxied API call or static asset.
"""
from dataclasses import dataclass
from typing import Union

from sv2_ui.registry import BackendRegistry, BackendRoute

HEALTH_PATH = "/health"


@dataclass(frozen=True)
class HealthCheck:
    pass


@dataclass(frozen=True)
class Proxy:
    route: BackendRoute
    remainder: str

    @property
    def prefix(self) -> str:
        return self.route.prefix


@dataclass(frozen=True)
class StaticAsset:
    path: str


Classification = Union[HealthCheck, Proxy, StaticAsset]


def classify(path: str, registry: BackendRegistry) -> Classification:
    """
    Decide how a request path is handled.

    ``/{prefix}-api/<rest>`` goes to the registered backend with ``<rest>``
    (leading slash included) as the remainder. Anything that is neither the
    health path nor a backend path is a static asset; classification never
    fails.
    """
    if path == HEALTH_PATH:
        return HealthCheck()

    if path.startswith("/"):
        segment, sep, _ = path[1:].partition("/")
        if sep:
            route = registry.lookup(segment)
            if route is not None:
                return Proxy(route=route, remainder=path[len(segment) + 1:])

    return StaticAsset(path=path)
