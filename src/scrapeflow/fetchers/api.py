# src/scrapeflow/fetchers/api.py
"""
Fetcher de APIs JSON.

Além da cadência e do retry da base, oferece:
    - autenticação por requisição (`bearer`, `basic`, header `custom`)
    - corpo JSON na ida e decodificação tolerante na volta
      (JSON quando possível, senão texto)
    - `create_error(exc)`: resumo serializável de uma falha, para o Step
      decidir o que registrar
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests

from .base import BaseFetcher, DEFAULT_USER_AGENT, RetryOptions


@dataclass(frozen=True)
class ApiAuth:
    type: str  # bearer | basic | custom
    token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    header: Optional[str] = None
    value: Optional[str] = None

    def apply(self, headers: Dict[str, str]) -> None:
        if self.type == "bearer":
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
        elif self.type == "basic":
            if self.username and self.password:
                raw = f"{self.username}:{self.password}".encode("utf-8")
                headers["Authorization"] = "Basic " + base64.b64encode(raw).decode("ascii")
        elif self.type == "custom":
            if self.header and self.value:
                headers[self.header] = self.value
        else:
            raise ValueError(f"Unsupported auth type: {self.type}")


@dataclass(frozen=True)
class ApiRequest:
    url: str
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Optional[Mapping[str, Any]] = None
    data: Any = None
    auth: Optional[ApiAuth] = None
    retry: Optional[RetryOptions] = None


@dataclass(frozen=True)
class ApiResponse:
    url: str
    status: int
    headers: Dict[str, str]
    data: Any
    response: requests.Response


@dataclass(frozen=True)
class ApiFetcherError:
    message: str
    status: Optional[int] = None
    status_text: Optional[str] = None
    data: Any = None
    code: Optional[str] = None
    is_retryable: bool = False


def _decode(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ApiFetcher(BaseFetcher):
    id = "api-fetcher"
    default_headers = {
        "User-Agent": DEFAULT_USER_AGENT,
        "Content-Type": "application/json",
        "Accept": "application/json",
    }

    def fetch(self, request: ApiRequest, ctx: Any) -> ApiResponse:
        self._apply_delays(ctx)

        def attempt() -> ApiResponse:
            headers = {**self.headers, **request.headers}
            if request.auth is not None:
                request.auth.apply(headers)
            kwargs: Dict[str, Any] = {
                "method": request.method,
                "url": request.url,
                "headers": headers,
                "params": request.params,
                "timeout": self.timeout,
            }
            if request.data is not None:
                kwargs["json"] = request.data

            response = self._send(request, kwargs, ctx)
            result = ApiResponse(
                url=response.url or request.url,
                status=response.status_code,
                headers=dict(response.headers),
                data=_decode(response),
                response=response,
            )
            if self.on_after_response is not None:
                self.on_after_response(result, ctx)
            return result

        return self._call_with_retry(attempt, self._retry_options(request.retry, ctx))

    def get(self, url: str, ctx: Any, **options: Any) -> ApiResponse:
        return self.fetch(ApiRequest(url=url, method="GET", **options), ctx)

    def post(self, url: str, ctx: Any, **options: Any) -> ApiResponse:
        return self.fetch(ApiRequest(url=url, method="POST", **options), ctx)

    @staticmethod
    def create_error(exc: BaseException) -> ApiFetcherError:
        if isinstance(exc, requests.RequestException):
            response = exc.response
            status = response.status_code if response is not None else None
            return ApiFetcherError(
                message=str(exc) or "API request failed",
                status=status,
                status_text=response.reason if response is not None else None,
                data=_decode(response) if response is not None else None,
                code=type(exc).__name__,
                is_retryable=status is None or status >= 500 or status == 429,
            )
        if isinstance(exc, Exception):
            return ApiFetcherError(message=str(exc), is_retryable=False)
        return ApiFetcherError(message="Unknown API error", is_retryable=False)
