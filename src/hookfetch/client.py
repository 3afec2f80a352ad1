"""Synchronous and asynchronous fetchers driving the request lifecycle."""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
import time
from typing import Any, Callable, Iterable, Mapping

import httpx

from .exceptions import HookFetchNetworkError, HookFetchResponseError
from .options import CallOptions, ClientDefaults
from .outcome import NotOk, Outcome, Success, TransportFailure, classify
from .resolver import HookSlots, ResolvedRequest, resolve
from .security import sanitize_headers, sanitize_url

logger = logging.getLogger(__name__)

BODYLESS_METHODS = frozenset({"GET", "HEAD"})


def _body_kwargs(method: str, body: Any) -> dict[str, Any]:
    if body is None or method in BODYLESS_METHODS:
        return {}
    if isinstance(body, (str, bytes, bytearray)):
        return {"content": body}
    return {"json": body}


def _call_sync(hook: Callable[..., Any], *args: Any) -> Any:
    result = hook(*args)
    if inspect.isawaitable(result):
        if inspect.iscoroutine(result):
            result.close()
        raise TypeError(f"{hook!r} returned an awaitable; use AsyncFetcher for async hooks")
    return result


async def _call_async(hook: Callable[..., Any], *args: Any) -> Any:
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _first_value(results: Iterable[Any]) -> Any:
    for result in results:
        if result is not None:
            return result
    return None


class _BaseFetcher:
    default_timeout = 30.0
    default_base_url_env_var = "HOOKFETCH_BASE_URL"

    def __init__(
        self,
        defaults: ClientDefaults | None = None,
        *,
        timeout: float = default_timeout,
        follow_redirects: bool = True,
        base_url_env_var: str = default_base_url_env_var,
        **settings: Any,
    ) -> None:
        if settings:
            defaults = ClientDefaults(**{**dict(defaults or ClientDefaults()), **settings})
        defaults = defaults or ClientDefaults()
        if not defaults.base_url and os.getenv(base_url_env_var):
            defaults = defaults.model_copy(update={"base_url": os.environ[base_url_env_var]})
        self.defaults = defaults

        self._client_kwargs = {
            "timeout": timeout,
            "follow_redirects": follow_redirects,
        }

    def _resolve(self, endpoint: str, options: CallOptions | None, overrides: Mapping[str, Any]) -> ResolvedRequest:
        call = (options or CallOptions()).with_overrides(**overrides)
        request = resolve(self.defaults, call, endpoint)
        logger.debug(
            "Resolved %s %s headers=%s",
            request.method,
            sanitize_url(request.url),
            sanitize_headers(request.headers),
        )
        return request

    @staticmethod
    def _transport_kwargs(request: ResolvedRequest) -> dict[str, Any]:
        return {
            "headers": dict(request.headers),
            **_body_kwargs(request.method, request.body),
            **request.transport_options,
        }

    @staticmethod
    def _outcome_slots(request: ResolvedRequest, outcome: Success | NotOk) -> HookSlots:
        if isinstance(outcome, Success):
            return request.hooks.on_success
        return request.hooks.on_not_ok

    @staticmethod
    def _log_outcome(request: ResolvedRequest, outcome: Outcome) -> None:
        if isinstance(outcome, TransportFailure):
            logger.debug("%s %s failed: %r", request.method, sanitize_url(request.url), outcome.error)
            return
        logger.debug(
            "%s %s -> %s (%s)",
            request.method,
            sanitize_url(request.url),
            outcome.response.status_code,
            type(outcome).__name__,
        )

    @staticmethod
    def _finish(request: ResolvedRequest, outcome: Success | NotOk, body: Any) -> Any:
        if isinstance(outcome, NotOk) and request.throw_not_ok:
            raise HookFetchResponseError(outcome.response, body)
        return body

    @staticmethod
    def _unrecovered(failure: TransportFailure) -> HookFetchNetworkError:
        return HookFetchNetworkError(failure.error)


class Fetcher(_BaseFetcher):
    """Synchronous fetcher. Hooks and mock suppliers must be plain callables."""

    def __init__(
        self,
        defaults: ClientDefaults | None = None,
        *,
        httpx_client: httpx.Client | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(defaults, **kwargs)
        self._owns_client = httpx_client is None
        self._httpx = httpx_client or httpx.Client(**self._client_kwargs)

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._httpx.close()

    def fetch(self, endpoint: str = "", options: CallOptions | None = None, **overrides: Any) -> Any:
        return self._execute(self._resolve(endpoint, options, overrides))

    def get(self, endpoint: str = "", options: CallOptions | None = None, **overrides: Any) -> Any:
        return self.fetch(endpoint, options, **{**overrides, "method": "GET"})

    def post(self, endpoint: str = "", options: CallOptions | None = None, **overrides: Any) -> Any:
        return self.fetch(endpoint, options, **{**overrides, "method": "POST"})

    def put(self, endpoint: str = "", options: CallOptions | None = None, **overrides: Any) -> Any:
        return self.fetch(endpoint, options, **{**overrides, "method": "PUT"})

    def patch(self, endpoint: str = "", options: CallOptions | None = None, **overrides: Any) -> Any:
        return self.fetch(endpoint, options, **{**overrides, "method": "PATCH"})

    def delete(self, endpoint: str = "", options: CallOptions | None = None, **overrides: Any) -> Any:
        return self.fetch(endpoint, options, **{**overrides, "method": "DELETE"})

    def _execute(self, request: ResolvedRequest) -> Any:
        # Prep failures skip everything, settled included.
        for hook in request.hooks.on_prep.ordered():
            _call_sync(hook)
        if request.delay:
            time.sleep(request.delay)

        outcome = self._dispatch(request)
        if isinstance(outcome, TransportFailure):
            results = [_call_sync(hook, outcome.error) for hook in request.hooks.on_error.call_first()]
            self._settle(request)
            recovered = _first_value(results)
            if recovered is not None:
                return recovered
            raise self._unrecovered(outcome) from outcome.error

        body = outcome.body
        for hook in self._outcome_slots(request, outcome).ordered():
            replaced = _call_sync(hook, outcome.response, body)
            if replaced is not None:
                body = replaced
        self._settle(request)
        return self._finish(request, outcome, body)

    def _dispatch(self, request: ResolvedRequest) -> Outcome:
        try:
            if request.mock_response is not None:
                response = _call_sync(request.mock_response)
            else:
                response = self._httpx.request(request.method, request.url, **self._transport_kwargs(request))
        except Exception as exc:
            outcome: Outcome = TransportFailure(exc)
        else:
            outcome = classify(response, request.method)
        self._log_outcome(request, outcome)
        return outcome

    def _settle(self, request: ResolvedRequest) -> None:
        for hook in request.hooks.on_settled.ordered():
            _call_sync(hook)


class AsyncFetcher(_BaseFetcher):
    """Asynchronous fetcher. Hooks and mock suppliers may be sync or async."""

    def __init__(
        self,
        defaults: ClientDefaults | None = None,
        *,
        httpx_client: httpx.AsyncClient | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(defaults, **kwargs)
        self._owns_client = httpx_client is None
        self._httpx = httpx_client or httpx.AsyncClient(**self._client_kwargs)

    async def __aenter__(self) -> "AsyncFetcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._httpx.aclose()

    async def fetch(self, endpoint: str = "", options: CallOptions | None = None, **overrides: Any) -> Any:
        return await self._execute(self._resolve(endpoint, options, overrides))

    async def get(self, endpoint: str = "", options: CallOptions | None = None, **overrides: Any) -> Any:
        return await self.fetch(endpoint, options, **{**overrides, "method": "GET"})

    async def post(self, endpoint: str = "", options: CallOptions | None = None, **overrides: Any) -> Any:
        return await self.fetch(endpoint, options, **{**overrides, "method": "POST"})

    async def put(self, endpoint: str = "", options: CallOptions | None = None, **overrides: Any) -> Any:
        return await self.fetch(endpoint, options, **{**overrides, "method": "PUT"})

    async def patch(self, endpoint: str = "", options: CallOptions | None = None, **overrides: Any) -> Any:
        return await self.fetch(endpoint, options, **{**overrides, "method": "PATCH"})

    async def delete(self, endpoint: str = "", options: CallOptions | None = None, **overrides: Any) -> Any:
        return await self.fetch(endpoint, options, **{**overrides, "method": "DELETE"})

    async def _execute(self, request: ResolvedRequest) -> Any:
        # Prep failures skip everything, settled included.
        for hook in request.hooks.on_prep.ordered():
            await _call_async(hook)
        if request.delay:
            await asyncio.sleep(request.delay)

        outcome = await self._dispatch(request)
        if isinstance(outcome, TransportFailure):
            results = []
            for hook in request.hooks.on_error.call_first():
                results.append(await _call_async(hook, outcome.error))
            await self._settle(request)
            recovered = _first_value(results)
            if recovered is not None:
                return recovered
            raise self._unrecovered(outcome) from outcome.error

        body = outcome.body
        for hook in self._outcome_slots(request, outcome).ordered():
            replaced = await _call_async(hook, outcome.response, body)
            if replaced is not None:
                body = replaced
        await self._settle(request)
        return self._finish(request, outcome, body)

    async def _dispatch(self, request: ResolvedRequest) -> Outcome:
        try:
            if request.mock_response is not None:
                response = await _call_async(request.mock_response)
            else:
                response = await self._httpx.request(
                    request.method,
                    request.url,
                    **self._transport_kwargs(request),
                )
        except Exception as exc:
            outcome: Outcome = TransportFailure(exc)
        else:
            outcome = classify(response, request.method)
        self._log_outcome(request, outcome)
        return outcome

    async def _settle(self, request: ResolvedRequest) -> None:
        for hook in request.hooks.on_settled.ordered():
            await _call_async(hook)
