"""Helpers for reading caller details off an incoming request."""
from typing import Optional

from starlette.requests import Request

UNKNOWN_IP = "unknown"

# Checked in order; proxies and Cloudflare put the original client first
IP_HEADERS = ("x-forwarded-for", "cf-connecting-ip", "x-real-ip")


def get_client_ip(request: Request) -> str:
    for header in IP_HEADERS:
        value = request.headers.get(header)
        if value:
            # X-Forwarded-For may hold a chain: client, proxy1, proxy2
            first = value.split(",")[0].strip()
            if first:
                return first

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_IP


def get_user_agent(request: Request, override: Optional[str] = None) -> Optional[str]:
    return override or request.headers.get("user-agent")
