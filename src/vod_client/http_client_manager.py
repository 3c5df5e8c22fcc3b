"""HTTP client manager for connection pooling and lifecycle management."""

from typing import Any

import httpx

from .settings import get_settings


# Global HTTP client instances (keyed by config tuple)
_probe_http_clients: dict[tuple[Any, ...], httpx.AsyncClient] = {}
_manifest_http_clients: dict[tuple[Any, ...], httpx.AsyncClient] = {}


def _load_http_config(kind: str) -> dict[str, Any]:
    """Load HTTP client configuration for a client kind ("probe" or "manifest")."""
    settings = get_settings()
    http_cfg = settings.http

    timeout = http_cfg.timeout
    if kind == "probe":
        # A probe request never outlives the race deadline
        timeout = min(timeout, settings.race.deadline)

    return {
        "timeout": timeout,
        "max_connections": http_cfg.max_connections,
        "max_keepalive_connections": http_cfg.max_keepalive_connections,
        "keepalive_expiry": http_cfg.keepalive_expiry,
        "verify": http_cfg.verify_ssl,
        "follow_redirects": http_cfg.follow_redirects,
        "headers": dict(http_cfg.default_headers),
    }


def _client_cache_key(kind: str, cfg: dict[str, Any]) -> tuple[Any, ...]:
    """Build a cache key tuple from HTTP configuration."""
    return (
        kind,
        cfg.get("verify"),
        cfg.get("timeout"),
        cfg.get("max_connections"),
        cfg.get("max_keepalive_connections"),
        cfg.get("keepalive_expiry"),
        cfg.get("follow_redirects"),
    )


def _get_client(
    kind: str,
    pool: dict[tuple[Any, ...], httpx.AsyncClient],
    ssl_verify: bool | str | None,
    timeout: float | None,
) -> httpx.AsyncClient:
    cfg = _load_http_config(kind)
    if ssl_verify is not None:
        cfg["verify"] = ssl_verify
    if timeout is not None:
        cfg["timeout"] = timeout

    key = _client_cache_key(kind, cfg)
    client = pool.get(key)
    if client is None or client.is_closed:
        client = httpx.AsyncClient(
            timeout=cfg["timeout"],
            limits=httpx.Limits(
                max_keepalive_connections=cfg["max_keepalive_connections"],
                max_connections=cfg["max_connections"],
                keepalive_expiry=cfg["keepalive_expiry"],
            ),
            verify=cfg["verify"],
            follow_redirects=cfg["follow_redirects"],
            headers=cfg["headers"],
        )
        pool[key] = client
    return client


def get_probe_http_client(
    *,
    ssl_verify: bool | str | None = None,
    timeout: float | None = None,
) -> httpx.AsyncClient:
    """Get the shared HTTP client used for origin search/detail/playability probes."""
    return _get_client("probe", _probe_http_clients, ssl_verify, timeout)


def get_manifest_http_client(
    *,
    ssl_verify: bool | str | None = None,
    timeout: float | None = None,
) -> httpx.AsyncClient:
    """Get the shared HTTP client used for playlist downloads."""
    return _get_client("manifest", _manifest_http_clients, ssl_verify, timeout)


async def close_http_clients() -> None:
    """Close every pooled client."""
    for pool in (_probe_http_clients, _manifest_http_clients):
        for client in pool.values():
            await client.aclose()
        pool.clear()


__all__ = [
    "get_probe_http_client",
    "get_manifest_http_client",
    "close_http_clients",
]
