"""
Fandash — Tiered Source Fetcher
────────────────────────────────
Fetches one logical resource ("the shop page", "a user's timeline") through
an ordered chain of unreliable transports:

  for host in resource.hosts:            mirror instances, in order
      for transport in transports:       proxy A → proxy B → direct
          fetch every path of the resource as one joint attempt
          parse → first non-empty result wins

Tiers are tried strictly in sequence. A tier fails on any transport error,
non-2xx status, timeout, parse error, or a parse that yields nothing.
When every tier fails, SourceUnavailableError names the resource so callers
can tell "transport broken" from "nothing found".
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar
from urllib.parse import quote

import httpx

log = logging.getLogger("fandash.fetchers.transport")

T = TypeVar("T")

# host, bodies (one per resource path, same order) → parsed value or falsy
Parser = Callable[[str, List[str]], Optional[T]]


class SourceUnavailableError(Exception):
    """Every host × transport combination failed for a resource."""

    def __init__(self, resource: str, attempts: Optional[List[str]] = None):
        super().__init__(resource)
        self.resource = resource
        self.attempts = attempts or []


@dataclass(frozen=True)
class Transport:
    name:    str
    prefix:  str = ""                                   # "" → direct request
    headers: Dict[str, str] = field(default_factory=dict)

    def wrap(self, url: str) -> str:
        if not self.prefix:
            return url
        return f"{self.prefix}{quote(url, safe='')}"


@dataclass(frozen=True)
class Resource:
    name:  str
    paths: Tuple[str, ...]
    hosts: Tuple[str, ...] = ("",)

    def urls(self, host: str) -> List[str]:
        return [f"{host}{path}" for path in self.paths]


@dataclass
class TierResult(Generic[T]):
    value:     T
    host:      str
    transport: str


def proxy_chain(proxies: Sequence[str], direct_headers: Optional[Dict[str, str]] = None) -> List[Transport]:
    """Proxies in configured order, then an unproxied request."""
    chain = [Transport(name=f"proxy[{i}]", prefix=p) for i, p in enumerate(proxies)]
    chain.append(Transport(name="direct", headers=dict(direct_headers or {})))
    return chain


class SourceFetcher:

    def __init__(
        self,
        client: httpx.AsyncClient,
        transports: Sequence[Transport],
        timeout=httpx.USE_CLIENT_DEFAULT,
    ):
        self.client     = client
        self.transports = list(transports)
        self.timeout    = timeout

    async def _get(self, url: str, transport: Transport) -> str:
        r = await self.client.get(transport.wrap(url), headers=transport.headers, timeout=self.timeout)
        if not r.is_success:
            raise httpx.HTTPStatusError(
                f"HTTP {r.status_code} from {transport.name}", request=r.request, response=r)
        return r.text

    async def _attempt(self, urls: List[str], transport: Transport) -> List[str]:
        # Joint attempt: every path must succeed
        joint = asyncio.gather(*(self._get(u, transport) for u in urls), return_exceptions=True)
        if isinstance(self.timeout, (int, float)):
            # httpx timeouts are per phase; this caps the attempt as a whole
            bodies = await asyncio.wait_for(joint, self.timeout)
        else:
            bodies = await joint
        for body in bodies:
            if isinstance(body, BaseException):
                raise body
        return list(bodies)

    async def fetch(self, resource: Resource, parse: Parser) -> TierResult:
        attempts: List[str] = []
        for host in resource.hosts:
            urls = resource.urls(host)
            for transport in self.transports:
                label = f"{transport.name} @ {host or urls[0][:60]}"
                try:
                    bodies = await self._attempt(urls, transport)
                except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError) as e:
                    log.warning(f"{resource.name}: {label} failed — {type(e).__name__}: {e}")
                    attempts.append(f"{label}: {e}")
                    continue

                try:
                    value = parse(host, bodies)
                except Exception as e:
                    log.warning(f"{resource.name}: {label} returned unparsable content — {e}")
                    attempts.append(f"{label}: parse error {e}")
                    continue

                if value:
                    log.info(f"{resource.name}: fetched via {label}")
                    return TierResult(value=value, host=host, transport=transport.name)
                log.warning(f"{resource.name}: {label} returned no usable records")
                attempts.append(f"{label}: empty")

        raise SourceUnavailableError(resource.name, attempts)
