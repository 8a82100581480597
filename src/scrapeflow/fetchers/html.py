# src/scrapeflow/fetchers/html.py
"""Fetcher de páginas HTML: `requests` + `BeautifulSoup`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests
from bs4 import BeautifulSoup

from .base import BaseFetcher, DEFAULT_USER_AGENT, RetryOptions


@dataclass(frozen=True)
class HtmlRequest:
    url: str
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Optional[Mapping[str, Any]] = None
    retry: Optional[RetryOptions] = None


@dataclass(frozen=True)
class HtmlResponse:
    url: str
    status: int
    headers: Dict[str, str]
    html: str
    soup: BeautifulSoup
    response: requests.Response


class HtmlFetcher(BaseFetcher):
    """
    Busca um documento HTML e devolve o texto bruto e o documento parseado.

    O que extrair do `soup` é decisão do Step; o fetcher apenas entrega o
    documento, com cadência e retry aplicados.
    """

    id = "html-fetcher"
    default_headers = {
        "User-Agent": DEFAULT_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }

    def __init__(self, *, parser: str = "html.parser", **kwargs: Any):
        super().__init__(**kwargs)
        self.parser = parser

    def fetch(self, request: HtmlRequest, ctx: Any) -> HtmlResponse:
        self._apply_delays(ctx)

        def attempt() -> HtmlResponse:
            kwargs: Dict[str, Any] = {
                "method": request.method,
                "url": request.url,
                "headers": {**self.headers, **request.headers},
                "params": request.params,
                "timeout": self.timeout,
            }
            response = self._send(request, kwargs, ctx)
            html = response.text
            result = HtmlResponse(
                url=response.url or request.url,
                status=response.status_code,
                headers=dict(response.headers),
                html=html,
                soup=BeautifulSoup(html, self.parser),
                response=response,
            )
            if self.on_after_response is not None:
                self.on_after_response(result, ctx)
            return result

        return self._call_with_retry(attempt, self._retry_options(request.retry, ctx))
