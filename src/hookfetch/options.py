"""Client-level defaults and per-call overrides."""

from __future__ import annotations

from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

PrepHook = Callable[[], Any]
OutcomeHook = Callable[[Any, Any], Any]
ErrorHook = Callable[[BaseException], Any]
SettledHook = Callable[[], Any]
MockSupplier = Callable[[], Any]

# Keyword arguments of httpx.Client.request the fetcher does not build itself.
TRANSPORT_OPTION_KEYS = frozenset({"auth", "cookies", "extensions", "follow_redirects", "timeout"})


class HookFetchModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        coerce_numbers_to_str=True,
        arbitrary_types_allowed=True,
    )

    @field_validator("transport_options", mode="after", check_fields=False)
    @classmethod
    def _check_transport_options(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        unknown = sorted(set(value or {}) - TRANSPORT_OPTION_KEYS)
        if unknown:
            allowed = ", ".join(sorted(TRANSPORT_OPTION_KEYS))
            raise ValueError(f"unsupported transport options: {', '.join(unknown)} (allowed: {allowed})")
        return value


class LifecycleHookFields(HookFetchModel):
    """The five lifecycle hooks, shared by defaults and call options.

    ``on_success`` and ``on_not_ok`` receive ``(response, body)`` and may return
    a replacement body. ``on_error`` receives the raw transport exception and
    may return a value that becomes the result of the call. Returning ``None``
    never replaces anything.
    """

    on_prep: PrepHook | None = None
    on_success: OutcomeHook | None = None
    on_not_ok: OutcomeHook | None = None
    on_error: ErrorHook | None = None
    on_settled: SettledHook | None = None


class ClientDefaults(LifecycleHookFields):
    """Settings attached to every request a fetcher makes."""

    base_url: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    query_params: dict[str, Any] = Field(default_factory=dict)
    transport_options: dict[str, Any] = Field(default_factory=dict)
    normalize_url: bool = True
    throw_not_ok: bool = True


class CallOptions(LifecycleHookFields):
    """Overrides for a single request."""

    method: HttpMethod = "GET"
    body: Any = None
    headers: dict[str, str] | None = None
    query_params: dict[str, Any] | None = None
    transport_options: dict[str, Any] | None = None
    url: str | None = None
    normalize_url: bool | None = None
    throw_not_ok: bool | None = None
    delay: float | None = Field(default=None, ge=0)
    mock_response: MockSupplier | None = None

    disable_default_headers: bool = False
    disable_default_query_params: bool = False
    disable_default_transport_options: bool = False

    disable_default_on_prep: bool = False
    disable_default_on_success: bool = False
    disable_default_on_not_ok: bool = False
    disable_default_on_error: bool = False
    disable_default_on_settled: bool = False

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    def with_overrides(self, **overrides: Any) -> "CallOptions":
        """Return a validated copy with ``overrides`` layered on top."""
        if not overrides:
            return self
        return CallOptions(**{**dict(self), **overrides})
