"""
Reachability checks for the monitoring backends.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx

from sv2_ui.config import settings
from sv2_ui.proxy import build_target_url
from sv2_ui.registry import BackendRegistry, BackendRoute

logger = logging.getLogger(__name__)

HEALTH_ENDPOINT = "/v1/health"


@dataclass(frozen=True)
class CheckResult:
    prefix: str
    url: str
    reachable: bool
    status_code: Optional[int]
    detail: str


class BackendChecker:
    """Checks each backend's health endpoint through the same /api convention as the proxy."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: Optional[float] = None):
        self.client = client
        self.timeout = timeout or settings.CHECK_TIMEOUT

    async def check(self, route: BackendRoute) -> CheckResult:
        """Check one backend."""
        url = build_target_url(route.base_url, HEALTH_ENDPOINT)
        if self.client is not None:
            return await self._check(self.client, route, url)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._check(client, route, url)

    async def check_all(self, registry: BackendRegistry) -> List[CheckResult]:
        """Check every registered backend concurrently."""
        return list(await asyncio.gather(*(self.check(route) for route in registry)))

    async def _check(self, client: httpx.AsyncClient, route: BackendRoute, url: str) -> CheckResult:
        try:
            logger.debug(f"Checking {route.prefix} at {url}")
            response = await client.get(url)
        except httpx.TimeoutException:
            return CheckResult(route.prefix, url, False, None, "Connection timeout")
        except httpx.ConnectError:
            return CheckResult(route.prefix, url, False, None, "Connection refused")
        except httpx.HTTPError as e:
            logger.warning(f"Health check of {route.prefix} at {url} failed: {e}")
            return CheckResult(route.prefix, url, False, None, f"Connection error: {e}")

        if response.status_code == 200:
            return CheckResult(route.prefix, url, True, 200, "Connection successful")
        return CheckResult(route.prefix, url, False, response.status_code,
                           f"HTTP {response.status_code}: {response.text[:200]}")
