"""Response decoding and outcome classification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import httpx


@dataclass(frozen=True)
class Success:
    response: httpx.Response
    body: Any


@dataclass(frozen=True)
class NotOk:
    response: httpx.Response
    body: Any


@dataclass(frozen=True)
class TransportFailure:
    error: BaseException


Outcome = Union[Success, NotOk, TransportFailure]


def decode_body(response: httpx.Response, method: str = "GET") -> Any:
    """Decode ``response`` per its headers.

    HEAD responses, 204 and ``content-length: 0`` give ``None``; a content-type mentioning
    ``json`` is parsed; everything else comes back as text. Malformed JSON
    raises the parser's own error.
    """
    if method.upper() == "HEAD":
        return None
    if response.status_code == 204 or response.headers.get("content-length") == "0":
        return None
    content_type = response.headers.get("content-type", "")
    if "json" in content_type.lower():
        return response.json()
    return response.text


def classify(response: httpx.Response, method: str = "GET") -> Success | NotOk:
    body = decode_body(response, method)
    if response.is_success:
        return Success(response, body)
    return NotOk(response, body)
