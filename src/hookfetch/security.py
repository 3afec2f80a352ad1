"""Redaction of credentials before requests reach log records."""

from __future__ import annotations

from typing import Iterable, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

REDACTED = "[REDACTED]"

SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
        "x-auth-token",
    }
)

SENSITIVE_QUERY_KEYS = frozenset(
    {
        "access_token",
        "api_key",
        "apikey",
        "key",
        "password",
        "secret",
        "signature",
        "token",
    }
)


def _redact_pairs(pairs: Iterable[tuple[str, str]], sensitive: frozenset[str]) -> list[tuple[str, str]]:
    return [(key, REDACTED if key.lower() in sensitive else value) for key, value in pairs]


def sanitize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return headers with credential values replaced by ``[REDACTED]``."""
    return dict(_redact_pairs(headers.items(), SENSITIVE_HEADERS))


def sanitize_url(url: str) -> str:
    """Return ``url`` with credential query values and userinfo passwords redacted."""
    parts = urlsplit(url)
    netloc = parts.netloc
    if "@" in netloc:
        userinfo, _, host = netloc.rpartition("@")
        if ":" in userinfo:
            netloc = f"{userinfo.split(':', 1)[0]}:{REDACTED}@{host}"
    if not parts.query and netloc == parts.netloc:
        return url
    query = parts.query
    if query:
        pairs = _redact_pairs(parse_qsl(query, keep_blank_values=True), SENSITIVE_QUERY_KEYS)
        query = urlencode(pairs, safe="[]")
    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))
