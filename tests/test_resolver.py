from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

import pytest
from pydantic import ValidationError

from hookfetch.options import CallOptions, ClientDefaults
from hookfetch.resolver import HookSlots, build_query_string, build_url, resolve


def _noop(*args: object) -> None:
    return None


def test_build_url_strips_trailing_slash_and_adds_leading_one() -> None:
    assert build_url("https://api.example.com/", "/users") == "https://api.example.com/users"
    assert build_url("https://api.example.com", "users") == "https://api.example.com/users"
    assert build_url("https://api.example.com/", "users", "?page=2") == "https://api.example.com/users?page=2"


def test_build_url_only_strips_one_trailing_slash() -> None:
    assert build_url("https://api.example.com//", "/users") == "https://api.example.com//users"


def test_build_query_string_skips_none_and_repeats_lists() -> None:
    query = build_query_string({"tag": ["a", "b"], "missing": None, "page": 2})
    assert query == "?tag=a&tag=b&page=2"


def test_build_query_string_serializes_structured_values_and_booleans() -> None:
    query = build_query_string({"filter": {"x": 1}, "active": True})
    assert query == "?filter=%7B%22x%22%3A1%7D&active=true"


def test_build_query_string_empty() -> None:
    assert build_query_string({}) == ""
    assert build_query_string({"only": None}) == ""
    assert build_query_string(None) == ""


def test_resolve_normalizes_url_by_default() -> None:
    request = resolve(ClientDefaults(base_url="https://api.example.com/"), CallOptions(), "/users")
    assert request.url == "https://api.example.com/users"


def test_resolve_concatenates_literally_without_normalization() -> None:
    defaults = ClientDefaults(base_url="https://api.example.com/", query_params={"q": "x"})
    request = resolve(defaults, CallOptions(normalize_url=False), "/users")
    assert request.url == "https://api.example.com//users?q=x"


def test_call_level_false_overrides_default_flags() -> None:
    defaults = ClientDefaults(base_url="https://api.example.com", normalize_url=True, throw_not_ok=True)
    request = resolve(defaults, CallOptions(normalize_url=False, throw_not_ok=False), "users")
    assert request.url == "https://api.example.comusers"
    assert request.throw_not_ok is False


def test_call_url_overrides_base_url() -> None:
    defaults = ClientDefaults(base_url="https://api.example.com")
    request = resolve(defaults, CallOptions(url="https://other.example.com/"), "/ping")
    assert request.url == "https://other.example.com/ping"


def test_headers_merge_with_call_level_winning() -> None:
    defaults = ClientDefaults(headers={"Accept": "application/json", "X-Trace": "default"})
    request = resolve(defaults, CallOptions(headers={"X-Trace": "call"}))
    assert request.headers == {"Accept": "application/json", "X-Trace": "call"}


@pytest.mark.parametrize(
    ("field", "flag", "default", "override"),
    [
        ("headers", "disable_default_headers", {"A": "1", "B": "2"}, {"B": "3"}),
        (
            "transport_options",
            "disable_default_transport_options",
            {"timeout": 5.0, "follow_redirects": False},
            {"timeout": 1.0},
        ),
    ],
)
def test_disable_default_mapping_yields_call_value_alone(
    field: str,
    flag: str,
    default: dict[str, object],
    override: dict[str, object],
) -> None:
    defaults = ClientDefaults(**{field: default})

    empty = resolve(defaults, CallOptions(**{flag: True}))
    readded = resolve(defaults, CallOptions(**{flag: True, field: override}))

    assert dict(getattr(empty, field)) == {}
    assert dict(getattr(readded, field)) == override


def test_disable_default_query_params_yields_call_value_alone() -> None:
    defaults = ClientDefaults(base_url="https://api.example.com", query_params={"a": 1, "b": 2})

    empty = resolve(defaults, CallOptions(disable_default_query_params=True), "/items")
    readded = resolve(defaults, CallOptions(disable_default_query_params=True, query_params={"b": 3}), "/items")

    assert empty.url == "https://api.example.com/items"
    assert readded.url == "https://api.example.com/items?b=3"


def test_hooks_keep_both_slots() -> None:
    def default_hook() -> None:
        return None

    def call_hook() -> None:
        return None

    request = resolve(ClientDefaults(on_prep=default_hook), CallOptions(on_prep=call_hook))
    assert request.hooks.on_prep == HookSlots(default=default_hook, call=call_hook)
    assert list(request.hooks.on_prep.ordered()) == [default_hook, call_hook]
    assert list(request.hooks.on_prep.call_first()) == [call_hook, default_hook]


def test_disable_default_hook_drops_only_default_slot() -> None:
    def default_hook() -> None:
        return None

    def call_hook() -> None:
        return None

    request = resolve(
        ClientDefaults(on_settled=default_hook, on_error=_noop),
        CallOptions(on_settled=call_hook, disable_default_on_settled=True, disable_default_on_error=True),
    )
    assert list(request.hooks.on_settled.ordered()) == [call_hook]
    assert list(request.hooks.on_error.ordered()) == []


def test_call_options_reject_unknown_fields_and_negative_delay() -> None:
    with pytest.raises(ValidationError):
        CallOptions(methd="POST")
    with pytest.raises(ValidationError):
        CallOptions(delay=-1)


def test_call_options_upper_case_method_and_layer_overrides() -> None:
    base = CallOptions(method="post", headers={"X-A": "1"})
    layered = base.with_overrides(method="put")
    assert base.method == "POST"
    assert layered.method == "PUT"
    assert layered.headers == {"X-A": "1"}


def test_default_header_values_are_coerced_to_str() -> None:
    defaults = ClientDefaults(headers={"X-Retry": 3})
    assert defaults.headers == {"X-Retry": "3"}


def test_build_query_string_sends_dates_and_decimals_as_bare_strings() -> None:
    query = build_query_string(
        {
            "since": datetime(2024, 1, 1, 0, 0, 0),
            "day": date(2024, 1, 2),
            "amount": Decimal("10.50"),
            "ids": [UUID("12345678-1234-5678-1234-567812345678")],
        }
    )
    assert query == (
        "?since=2024-01-01T00%3A00%3A00"
        "&day=2024-01-02"
        "&amount=10.50"
        "&ids=12345678-1234-5678-1234-567812345678"
    )


def test_unsupported_transport_options_are_rejected_at_construction() -> None:
    with pytest.raises(ValidationError, match="verify"):
        ClientDefaults(transport_options={"verify": False})
    with pytest.raises(ValidationError, match="credentials"):
        CallOptions(transport_options={"credentials": "include"})

    assert CallOptions(transport_options={"timeout": 2.0}).transport_options == {"timeout": 2.0}
