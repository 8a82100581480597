# src/scrapeflow/fetchers/base.py
"""
Base compartilhada dos fetchers HTTP.

Responsabilidades:
    - cadência entre requisições (rate limit + atraso mínimo)
    - retry com backoff via `tenacity`
    - classificação de erros retentáveis
    - callbacks opcionais antes/depois da requisição

Cadência:
    O intervalo entre requisições é no mínimo `per_seconds / requests`
    do rate limit (opção do fetcher, senão `ctx.config.rate_limit`) e no
    mínimo `min_delay`. O horário da última requisição fica no fetcher e
    em `ctx.metadata["<id>:last-request-at"]`, para que fetchers novos na
    mesma run respeitem a cadência.

Retry:
    Padrão de 3 tentativas com espera exponencial 0.5s..2s. Retentáveis:
    erros de conexão/timeout, HTTP 5xx e 429. Demais 4xx abortam
    imediatamente. A exceção original é propagada ao esgotar tentativas.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

import requests
import tenacity

from scrapeflow.core.config.schema import BackoffStrategy, RateLimit, RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "ScrapeflowBot/0.1 (+https://github.com/scrapeflow/scrapeflow)"
DEFAULT_TIMEOUT = 15.0


@dataclass(frozen=True)
class RetryOptions:
    """Política de retry de um fetcher (ou de uma requisição)."""

    attempts: int = 3
    backoff: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    min_wait: float = 0.5
    max_wait: float = 2.0

    @classmethod
    def from_policy(cls, policy: RetryPolicy) -> "RetryOptions":
        return cls(
            attempts=policy.attempts,
            backoff=policy.backoff_strategy,
            min_wait=policy.base_delay,
            max_wait=max(cls.max_wait, policy.base_delay),
        )

    def wait_strategy(self) -> tenacity.wait.wait_base:
        if self.backoff is BackoffStrategy.NONE:
            return tenacity.wait_none()
        if self.backoff is BackoffStrategy.LINEAR:
            return tenacity.wait_incrementing(start=self.min_wait, increment=self.min_wait, max=self.max_wait)
        return tenacity.wait_exponential(multiplier=self.min_wait, min=self.min_wait, max=self.max_wait)


def is_retryable(exc: BaseException) -> bool:
    """Conexão/timeout, 5xx e 429 são retentáveis; demais 4xx não."""
    if not isinstance(exc, requests.RequestException):
        return False
    response = exc.response
    if response is None:
        return True
    status = response.status_code
    if 400 <= status < 500 and status != 429:
        return False
    return True


class BaseFetcher:
    """Cadência, retry e callbacks comuns a HtmlFetcher e ApiFetcher."""

    id = "fetcher"
    default_headers: Mapping[str, str] = {"User-Agent": DEFAULT_USER_AGENT}

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        rate_limit: Optional[RateLimit] = None,
        min_delay: float = 0.0,
        retry: Optional[RetryOptions] = None,
        on_before_request: Optional[Callable[[Any, Dict[str, Any], Any], None]] = None,
        on_after_response: Optional[Callable[[Any, Any], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ):
        self.session = session or requests.Session()
        self.headers: Dict[str, str] = {**self.default_headers, **(headers or {})}
        self.timeout = timeout
        self.rate_limit = rate_limit
        self.min_delay = min_delay
        self.retry = retry
        self.on_before_request = on_before_request
        self.on_after_response = on_after_response
        self._sleep = sleep
        self._clock = clock
        self.last_request_at: Optional[float] = None

    @property
    def metadata_key(self) -> str:
        return f"{self.id}:last-request-at"

    # ------------------------------------------------------------------
    # Retry
    # ------------------------------------------------------------------
    def _retry_options(self, request_retry: Optional[RetryOptions], ctx: Any) -> RetryOptions:
        if request_retry is not None:
            return request_retry
        if self.retry is not None:
            return self.retry
        policy = getattr(getattr(ctx, "config", None), "retry", None)
        if policy is not None:
            return RetryOptions.from_policy(policy)
        return RetryOptions()

    def _call_with_retry(self, operation: Callable[[], Any], options: RetryOptions) -> Any:
        retrying = tenacity.Retrying(
            stop=tenacity.stop_after_attempt(options.attempts),
            wait=options.wait_strategy(),
            retry=tenacity.retry_if_exception(is_retryable),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
            reraise=True,
        )
        return retrying(operation)

    # ------------------------------------------------------------------
    # Pacing
    # ------------------------------------------------------------------
    def _apply_delays(self, ctx: Any) -> None:
        rate = self.rate_limit or getattr(getattr(ctx, "config", None), "rate_limit", None)
        required = max(rate.interval if rate else 0.0, self.min_delay or 0.0)
        if required <= 0:
            return

        last = self.last_request_at
        if last is None:
            last = self._metadata(ctx).get(self.metadata_key)
        if last is None:
            return

        elapsed = self._clock() - last
        if elapsed < required:
            logger.debug("%s: pacing %.3fs", self.id, required - elapsed)
            self._sleep(required - elapsed)

    def _mark_request(self, ctx: Any) -> None:
        now = self._clock()
        self.last_request_at = now
        metadata = self._metadata(ctx)
        metadata[self.metadata_key] = now

    @staticmethod
    def _metadata(ctx: Any) -> Dict[str, Any]:
        metadata = getattr(ctx, "metadata", None)
        return metadata if metadata is not None else {}

    # ------------------------------------------------------------------
    # Request
    # ------------------------------------------------------------------
    def _send(self, request: Any, kwargs: Dict[str, Any], ctx: Any) -> requests.Response:
        """Uma tentativa: callback, requisição e `raise_for_status`."""
        if self.on_before_request is not None:
            self.on_before_request(request, kwargs, ctx)
        try:
            logger.debug("%s: %s %s", self.id, kwargs.get("method"), kwargs.get("url"))
            response = self.session.request(**kwargs)
            response.raise_for_status()
            return response
        finally:
            self._mark_request(ctx)
