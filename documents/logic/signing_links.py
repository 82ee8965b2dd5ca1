"""Signing links handed to recipients and routing of incoming URLs."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit


class RouteKind(str, Enum):
    DASHBOARD = "dashboard"
    SIGNING = "signing"


@dataclass(frozen=True)
class Route:
    kind: RouteKind
    template_id: Optional[str] = None
    recipient_id: Optional[str] = None


def build_signing_link(base_url: str, template_id: str, recipient_id: str) -> str:
    """``<base_url>?templateId=<id>&recipientId=<id>`` (existing query parameters are replaced)."""
    scheme, netloc, path, _query, _fragment = urlsplit(base_url)
    query = urlencode({"templateId": template_id, "recipientId": recipient_id})
    return urlunsplit((scheme, netloc, path or "/", query, ""))


def route_for_url(url: str) -> Route:
    params = parse_qs(urlsplit(url or "").query)
    template_id = (params.get("templateId") or [None])[0]
    recipient_id = (params.get("recipientId") or [None])[0]
    if template_id and recipient_id:
        return Route(RouteKind.SIGNING, template_id, recipient_id)
    return Route(RouteKind.DASHBOARD)
