"""Configurable HTTP request orchestration with lifecycle hooks."""

from .client import AsyncFetcher, Fetcher
from .exceptions import HookFetchError, HookFetchNetworkError, HookFetchResponseError
from .options import CallOptions, ClientDefaults
from .outcome import NotOk, Outcome, Success, TransportFailure, classify, decode_body
from .resolver import HookSlots, LifecycleHooks, ResolvedRequest, build_query_string, build_url, resolve

__all__ = [
    "AsyncFetcher",
    "CallOptions",
    "ClientDefaults",
    "Fetcher",
    "HookFetchError",
    "HookFetchNetworkError",
    "HookFetchResponseError",
    "HookSlots",
    "LifecycleHooks",
    "NotOk",
    "Outcome",
    "ResolvedRequest",
    "Success",
    "TransportFailure",
    "build_query_string",
    "build_url",
    "classify",
    "decode_body",
    "resolve",
]

__version__ = "0.1.0"
