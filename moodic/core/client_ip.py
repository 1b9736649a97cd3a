"""Client identity resolution for rate limiting.

Headers are trusted at face value: no IP syntax validation is done and any
string is accepted as the partition key. The reverse proxy in front of the
API must strip or overwrite these headers for the identity to be reliable.
"""

from __future__ import annotations

from typing import Mapping

UNKNOWN_CLIENT = "unknown"

# Set by Cloudflare to the address that connected to its edge
EDGE_CLIENT_HEADER = "cf-connecting-ip"
FORWARDED_FOR_HEADER = "x-forwarded-for"
REAL_IP_HEADER = "x-real-ip"


def get_client_ip(headers: Mapping[str, str]) -> str:
    """Derive the originating client's identity from request headers.

    Precedence: edge-proxy header verbatim, then the leftmost
    ``X-Forwarded-For`` entry (the original client in a multi-hop chain),
    then ``X-Real-IP``, then ``"unknown"``.

    Args:
        headers: Request headers. Starlette's ``Headers`` is case-insensitive;
            plain dicts must use lower-case names.

    Returns:
        Client identity string.

    Examples:
        >>> get_client_ip({"x-forwarded-for": "5.6.7.8, 9.9.9.9"})
        '5.6.7.8'
        >>> get_client_ip({})
        'unknown'
    """
    edge_ip = headers.get(EDGE_CLIENT_HEADER)
    if edge_ip:
        return edge_ip

    forwarded = headers.get(FORWARDED_FOR_HEADER)
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = headers.get(REAL_IP_HEADER)
    if real_ip:
        return real_ip

    return UNKNOWN_CLIENT
