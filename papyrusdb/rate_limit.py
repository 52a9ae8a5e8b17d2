"""Rate limiting configuration for PapyrusDB.

A self-hosted server is often reached through a reverse proxy, so the
client address is taken from X-Forwarded-For, but only when the direct
peer is a trusted proxy.
"""

import ipaddress
import os
from typing import Optional

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import get_settings
from .logging_config import get_logger

logger = get_logger("rate_limit")

# Trusted proxy CIDRs: only these sources can set X-Forwarded-For.
# Override with TRUSTED_PROXY_CIDRS env var (comma-separated CIDRs).
_DEFAULT_TRUSTED_CIDRS = [
    "10.0.0.0/8",
    "172.16.0.0/12",  # Docker/private
    "192.168.0.0/16",  # Home network
    "127.0.0.0/8",  # Localhost
    "::1/128",  # IPv6 localhost
]


def _load_trusted_cidrs() -> list[ipaddress.IPv4Network | ipaddress.IPv6Network]:
    """Load trusted proxy CIDRs from env or defaults."""
    raw = os.environ.get("TRUSTED_PROXY_CIDRS", "")
    cidrs = [s.strip() for s in raw.split(",") if s.strip()] if raw else _DEFAULT_TRUSTED_CIDRS
    networks = []
    for cidr in cidrs:
        try:
            networks.append(ipaddress.ip_network(cidr, strict=False))
        except ValueError:
            logger.warning(f"Ignoring invalid trusted proxy CIDR: {cidr}")
    return networks


_trusted_networks: Optional[list] = None


def _get_trusted_networks():
    global _trusted_networks
    if _trusted_networks is None:
        _trusted_networks = _load_trusted_cidrs()
    return _trusted_networks


def _is_trusted_proxy(ip_str: str) -> bool:
    """Check if an IP is in the trusted proxy list."""
    try:
        addr = ipaddress.ip_address(ip_str)
    except ValueError:
        return False
    return any(addr in network for network in _get_trusted_networks())


def get_client_ip(request) -> str:
    """Resolve client IP, only honoring X-Forwarded-For from trusted proxies."""
    direct_ip = get_remote_address(request)

    if _is_trusted_proxy(direct_ip):
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            client_ip = forwarded_for.split(",")[0].strip()
            if client_ip:
                return client_ip

    return direct_ip


def build_limiter() -> Limiter:
    """Limiter applying the configured default limit to every route."""
    settings = get_settings()
    return Limiter(
        key_func=get_client_ip,
        default_limits=[settings.rate_limit],
        enabled=settings.rate_limit_enabled,
    )


limiter = build_limiter()
