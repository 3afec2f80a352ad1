"""Merge client defaults with call options into a single resolved request."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterator, Mapping
from uuid import UUID

import httpx

from .options import CallOptions, ClientDefaults, MockSupplier


@dataclass(frozen=True)
class HookSlots:
    """Default and call-level handler for one lifecycle point.

    The two are never merged into one callable; the engine decides the order.
    """

    default: Callable[..., Any] | None = None
    call: Callable[..., Any] | None = None

    def ordered(self) -> Iterator[Callable[..., Any]]:
        for hook in (self.default, self.call):
            if hook is not None:
                yield hook

    def call_first(self) -> Iterator[Callable[..., Any]]:
        for hook in (self.call, self.default):
            if hook is not None:
                yield hook


@dataclass(frozen=True)
class LifecycleHooks:
    on_prep: HookSlots = HookSlots()
    on_success: HookSlots = HookSlots()
    on_not_ok: HookSlots = HookSlots()
    on_error: HookSlots = HookSlots()
    on_settled: HookSlots = HookSlots()


@dataclass(frozen=True)
class ResolvedRequest:
    method: str
    url: str
    headers: Mapping[str, str]
    transport_options: Mapping[str, Any]
    body: Any = None
    delay: float | None = None
    mock_response: MockSupplier | None = None
    throw_not_ok: bool = True
    hooks: LifecycleHooks = LifecycleHooks()


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return _query_value(value.value)
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, (str, int, float, Decimal, UUID)):
        return str(value)
    return json.dumps(value, separators=(",", ":"), default=str)


def build_query_string(query: Mapping[str, Any] | None = None) -> str:
    """Encode ``query`` as ``?k=v&...``, or ``""`` when nothing is left to send.

    ``None`` values are dropped, lists and tuples repeat the key, and structured
    values are sent as compact JSON.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in (query or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _query_value(item)) for item in value)
            continue
        pairs.append((key, _query_value(value)))

    encoded = str(httpx.QueryParams(pairs))
    return f"?{encoded}" if encoded else ""


def build_url(base: str, endpoint: str = "", query: str = "") -> str:
    normalized_base = base[:-1] if base.endswith("/") else base
    normalized_endpoint = endpoint if endpoint.startswith("/") else f"/{endpoint}"
    return f"{normalized_base}{normalized_endpoint}{query}"


def _merge(
    default: Mapping[str, Any] | None,
    override: Mapping[str, Any] | None,
    *,
    disable_default: bool,
) -> dict[str, Any]:
    merged: dict[str, Any] = {} if disable_default else dict(default or {})
    if override:
        merged.update(override)
    return merged


def _slots(default: Callable[..., Any] | None, call: Callable[..., Any] | None, disabled: bool) -> HookSlots:
    return HookSlots(default=None if disabled else default, call=call)


def _pick(call_value: bool | None, default_value: bool) -> bool:
    return call_value if call_value is not None else default_value


def resolve(defaults: ClientDefaults, call: CallOptions, endpoint: str = "") -> ResolvedRequest:
    """Compute the settings for one call. Pure; never raises."""
    headers = _merge(defaults.headers, call.headers, disable_default=call.disable_default_headers)
    query_params = _merge(
        defaults.query_params,
        call.query_params,
        disable_default=call.disable_default_query_params,
    )
    transport_options = _merge(
        defaults.transport_options,
        call.transport_options,
        disable_default=call.disable_default_transport_options,
    )

    base = call.url or defaults.base_url
    query = build_query_string(query_params)
    if _pick(call.normalize_url, defaults.normalize_url):
        url = build_url(base, endpoint, query)
    else:
        url = f"{base}{endpoint}{query}"

    hooks = LifecycleHooks(
        on_prep=_slots(defaults.on_prep, call.on_prep, call.disable_default_on_prep),
        on_success=_slots(defaults.on_success, call.on_success, call.disable_default_on_success),
        on_not_ok=_slots(defaults.on_not_ok, call.on_not_ok, call.disable_default_on_not_ok),
        on_error=_slots(defaults.on_error, call.on_error, call.disable_default_on_error),
        on_settled=_slots(defaults.on_settled, call.on_settled, call.disable_default_on_settled),
    )

    return ResolvedRequest(
        method=call.method,
        url=url,
        headers=headers,
        transport_options=transport_options,
        body=call.body,
        delay=call.delay,
        mock_response=call.mock_response,
        throw_not_ok=_pick(call.throw_not_ok, defaults.throw_not_ok),
        hooks=hooks,
    )
