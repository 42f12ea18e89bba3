"""URL validation and bounded fetching with SSRF protection.

Blocks private/loopback/link-local IP ranges and embedded credentials,
re-validates every redirect hop, and caps response size. Used by the URL
extractor and by the analysis service when it downloads a file URL.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from ipaddress import ip_address
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "Portflow Portfolio Builder"
MAX_REDIRECTS = 5

_BLOCKED_RANGES_MSG = (
    "private, loopback, link-local, multicast, and reserved addresses are not allowed"
)


class UrlPolicyError(Exception):
    """Raised when a URL violates the security policy."""


def _is_blocked_ip(ip_str: str) -> bool:
    """Check if an IP address falls in a blocked range."""
    ip = ip_address(ip_str)
    return (
        ip.is_loopback or ip.is_private or ip.is_link_local
        or ip.is_multicast or ip.is_reserved
    )


async def _resolve_dns(hostname: str) -> list:
    """Resolve hostname via the event loop's threadpool (non-blocking)."""
    loop = asyncio.get_running_loop()
    return await loop.getaddrinfo(
        hostname, None, family=socket.AF_UNSPEC, type=socket.SOCK_STREAM,
    )


async def validate_url(url: str) -> None:
    """Validate a URL against the security policy.

    Checks:
    - http or https scheme
    - No embedded credentials (userinfo)
    - Hostname present and DNS-resolvable
    - Resolved IPs are not private, loopback, link-local, multicast, or reserved

    Raises:
        UrlPolicyError: If any check fails.
    """
    parsed = urlparse(url)

    if parsed.scheme not in ("http", "https"):
        raise UrlPolicyError(f"Only http(s) URLs are allowed, got '{parsed.scheme}://'")

    if parsed.username or parsed.password:
        raise UrlPolicyError("URLs with embedded credentials are not allowed")

    hostname = parsed.hostname
    if not hostname:
        raise UrlPolicyError("URL has no hostname")

    try:
        addr_infos = await _resolve_dns(hostname)
    except socket.gaierror as exc:
        raise UrlPolicyError(f"DNS resolution failed for '{hostname}': {exc}") from exc

    for _family, _type, _proto, _canonname, sockaddr in addr_infos:
        ip_str = sockaddr[0]
        if _is_blocked_ip(ip_str):
            raise UrlPolicyError(
                f"URL resolves to blocked IP range ({ip_str}) — {_BLOCKED_RANGES_MSG}"
            )


def _verify_peer_ip(response: httpx.Response) -> None:
    """Reject responses whose connected peer is in a blocked range.

    httpx resolves the hostname again when it connects, so the pre-fetch
    DNS check alone does not cover a rebinding answer.

    Raises:
        UrlPolicyError: If the peer IP is in a blocked range.
    """
    stream = response.extensions.get("network_stream")
    if stream is None:
        return

    peername = stream.get_extra_info("peername")
    if peername is None:
        return

    ip_str = peername[0]
    if _is_blocked_ip(ip_str):
        raise UrlPolicyError(
            f"DNS rebinding detected: peer IP {ip_str} is in a blocked range ({_BLOCKED_RANGES_MSG})"
        )


async def fetch_checked(url: str, *, max_bytes: int, timeout: float) -> bytes:
    """GET *url* after policy checks, following validated redirects.

    Args:
        url: http(s) URL to fetch.
        max_bytes: Maximum response body size in bytes.
        timeout: Client timeout in seconds.

    Returns:
        The response body.

    Raises:
        UrlPolicyError: If the URL, a redirect target or the connected peer
            fails validation,
            or the body exceeds max_bytes.
        httpx.HTTPStatusError: If the server returns an error status.
    """
    await validate_url(url)

    current_url = url
    redirects_followed = 0
    headers = {"User-Agent": USER_AGENT}

    async with httpx.AsyncClient(follow_redirects=False, timeout=timeout, headers=headers) as client:
        while True:
            async with client.stream("GET", current_url) as resp:
                _verify_peer_ip(resp)

                if resp.status_code in {301, 302, 303, 307, 308}:
                    location = resp.headers.get("location")
                    if not location:
                        raise UrlPolicyError(
                            f"Redirect response missing Location header (status {resp.status_code})"
                        )
                    if redirects_followed >= MAX_REDIRECTS:
                        raise UrlPolicyError(f"Too many redirects (>{MAX_REDIRECTS})")
                    next_url = str(resp.url.join(location))
                    await validate_url(next_url)
                    current_url = next_url
                    redirects_followed += 1
                    continue

                resp.raise_for_status()
                chunks: list[bytes] = []
                accumulated = 0
                async for chunk in resp.aiter_bytes():
                    accumulated += len(chunk)
                    if accumulated > max_bytes:
                        raise UrlPolicyError(f"Response exceeds size limit ({max_bytes} bytes)")
                    chunks.append(chunk)
                break

    logger.debug("Fetched %s (%d bytes)", current_url, accumulated)
    return b"".join(chunks)
