"""
Webhook endpoint resolution.

An n8n webhook is easy to misconfigure: the workflow answers on
``/webhook-test/`` only while the editor listens and on ``/webhook/`` only
once activated, and the screening workflow has been published under two
resource names. From one configured URL we derive the ordered set of
plausible endpoints; the proxy tries them until one is not a 404.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator
from urllib.parse import urlsplit, urlunsplit

from hireflow.utils.constants import (
    WEBHOOK_PRODUCTION_SEGMENT,
    WEBHOOK_RESOURCE_ALIASES,
    WEBHOOK_TEST_SEGMENT,
)


def _is_well_formed(parts) -> bool:
    return bool(parts.scheme) and bool(parts.netloc)


def _swap_environment(path: str) -> list[str]:
    """Test <-> production segment variants of a path."""
    variants = []
    if WEBHOOK_TEST_SEGMENT in path:
        variants.append(path.replace(WEBHOOK_TEST_SEGMENT, WEBHOOK_PRODUCTION_SEGMENT, 1))
    if WEBHOOK_PRODUCTION_SEGMENT in path:
        variants.append(path.replace(WEBHOOK_PRODUCTION_SEGMENT, WEBHOOK_TEST_SEGMENT, 1))
    return variants


def _swap_resource_name(path: str) -> list[str]:
    """Alternate trailing resource-name variants of a path."""
    variants = []
    for first, second in WEBHOOK_RESOURCE_ALIASES:
        for name, alternate in ((first, second), (second, first)):
            suffix = f"/{name}"
            if path.endswith(suffix):
                variants.append(path[: -len(suffix)] + f"/{alternate}")
    return variants


def _path_variants(path: str) -> list[str]:
    """
    All derived paths, in discovery order, without duplicates.

    Resource-name swaps are applied to every path found by the
    environment swap, so combined variants are reachable.
    """
    found: dict[str, None] = {path: None}
    for variant in _swap_environment(path):
        found.setdefault(variant)
    for known in list(found):
        for variant in _swap_resource_name(known):
            found.setdefault(variant)
    return list(found)


@lru_cache(maxsize=32)
def resolve_webhook_endpoints(primary_url: str) -> tuple[str, ...]:
    """
    Derive the ordered candidate URLs for a primary webhook URL.

    The primary URL always comes first and unmodified. A string that is
    not an absolute URL is returned alone. Pure and deterministic.

    Args:
        primary_url: The operator-configured webhook address.

    Returns:
        Tuple of distinct URLs to attempt, in order.
    """
    try:
        parts = urlsplit(primary_url)
    except ValueError:
        return (primary_url,)
    if not _is_well_formed(parts):
        return (primary_url,)

    normalized = parts.path.rstrip("/")

    urls: dict[str, None] = {primary_url: None}
    for path in _path_variants(normalized):
        url = urlunsplit(parts._replace(path=path or "/"))
        urls.setdefault(url)
    return tuple(urls)


@dataclass(frozen=True)
class WebhookEndpointSet:
    """Read-only ordered set of endpoints derived from one primary URL."""

    urls: tuple[str, ...]

    @classmethod
    def from_primary(cls, primary_url: str) -> "WebhookEndpointSet":
        return cls(urls=resolve_webhook_endpoints(primary_url))

    @property
    def primary(self) -> str:
        return self.urls[0]

    @property
    def fallbacks(self) -> tuple[str, ...]:
        return self.urls[1:]

    def __iter__(self) -> Iterator[str]:
        return iter(self.urls)

    def __len__(self) -> int:
        return len(self.urls)
