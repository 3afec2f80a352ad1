"""Failures raised by hookfetch fetchers."""

from __future__ import annotations

from typing import Mapping

import httpx


class HookFetchError(Exception):
    """Base exception for all hookfetch failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: object = None,
        headers: Mapping[str, str] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.headers = dict(headers) if headers is not None else {}
        self.cause = cause

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        if self.status_code is None:
            return str(self.args[0])
        return f"{self.status_code}: {self.args[0]}"


class HookFetchResponseError(HookFetchError):
    """Raised when the server answered with a non-success status and throw_not_ok is on.

    ``body`` holds the decoded body after the not-ok hooks had their chance to
    replace it.
    """

    def __init__(self, response: httpx.Response, body: object = None) -> None:
        super().__init__(
            response.reason_phrase or "Response error",
            status_code=response.status_code,
            body=body,
            headers=response.headers,
        )
        self.response = response
        self.reason_phrase = response.reason_phrase


class HookFetchNetworkError(HookFetchError):
    """Raised when the transport or mock supplier failed and no error hook recovered."""

    def __init__(self, cause: BaseException, message: str = "Network request failed") -> None:
        super().__init__(message, cause=cause)

    @property
    def original_error(self) -> BaseException | None:
        return self.cause
