# tests/fetchers/test_html_fetcher.py
"""
Testes do HtmlFetcher com sessão HTTP falsa (sem rede).

Cobre parse do documento, classificação de retry (5xx/429/conexão
retentáveis, demais 4xx abortam), cadência entre requisições e
callbacks antes/depois da requisição.
"""

import pytest
import requests

try:
    from scrapeflow.core.config.schema import RateLimit, RetryPolicy, RunnerConfig
    from scrapeflow.fetchers.base import RetryOptions
    from scrapeflow.fetchers.html import HtmlFetcher, HtmlRequest
except Exception as e:  # noqa: BLE001
    HtmlFetcher = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None

PAGE = "<html><head><title>Listing</title></head><body><a class='item' href='/a'>A</a></body></html>"


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_fetcher(fake_session, sleeps):
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing HtmlFetcher. Import error: {_IMPORT_ERR}")

    def build(outcomes, **kwargs):
        session = fake_session(outcomes)
        kwargs.setdefault("sleep", sleeps.append)
        return HtmlFetcher(session=session, **kwargs), session

    return build


def test_fetch_parses_html(make_fetcher, http_response, dummy_ctx):
    fetcher, session = make_fetcher([http_response(200, PAGE, {"Content-Type": "text/html"}, url="https://site.test/list")])

    result = fetcher.fetch(HtmlRequest(url="https://site.test/list", params={"page": 2}), dummy_ctx)

    assert result.status == 200
    assert result.url == "https://site.test/list"
    assert result.html == PAGE
    assert result.soup.title.string == "Listing"
    assert [a["href"] for a in result.soup.select("a.item")] == ["/a"]
    assert result.headers["Content-Type"] == "text/html"

    (call,) = session.calls
    assert call["method"] == "GET"
    assert call["params"] == {"page": 2}
    assert call["timeout"] == 15.0
    assert call["headers"]["User-Agent"].startswith("ScrapeflowBot/")
    assert "text/html" in call["headers"]["Accept"]


def test_server_errors_are_retried(make_fetcher, http_response, dummy_ctx, sleeps):
    fetcher, session = make_fetcher(
        [http_response(503, "busy"), http_response(429, "slow down"), http_response(200, PAGE)]
    )

    result = fetcher.fetch(HtmlRequest(url="https://site.test/"), dummy_ctx)

    assert result.status == 200
    assert len(session.calls) == 3
    assert sleeps == [0.5, 1.0]


def test_connection_errors_are_retried(make_fetcher, http_response, dummy_ctx):
    fetcher, session = make_fetcher([requests.ConnectionError("reset"), http_response(200, PAGE)])

    assert fetcher.fetch(HtmlRequest(url="https://site.test/"), dummy_ctx).status == 200
    assert len(session.calls) == 2


def test_client_error_aborts_immediately(make_fetcher, http_response, dummy_ctx):
    fetcher, session = make_fetcher([http_response(404, "missing"), http_response(200, PAGE)])

    with pytest.raises(requests.HTTPError) as exc_info:
        fetcher.fetch(HtmlRequest(url="https://site.test/gone"), dummy_ctx)

    assert exc_info.value.response.status_code == 404
    assert len(session.calls) == 1


def test_exhausted_retries_reraise_last_error(make_fetcher, http_response, dummy_ctx):
    fetcher, session = make_fetcher([http_response(500, "x")] * 3)

    with pytest.raises(requests.HTTPError):
        fetcher.fetch(HtmlRequest(url="https://site.test/"), dummy_ctx)
    assert len(session.calls) == 3


def test_request_retry_overrides_fetcher_retry(make_fetcher, http_response, dummy_ctx, sleeps):
    fetcher, session = make_fetcher(
        [http_response(500, "x"), http_response(200, PAGE)],
        retry=RetryOptions(attempts=1),
    )
    request = HtmlRequest(url="https://site.test/", retry=RetryOptions(attempts=2, min_wait=0.1, max_wait=0.1))

    assert fetcher.fetch(request, dummy_ctx).status == 200
    assert sleeps == [0.1]


def test_config_retry_policy_is_used_as_default(make_fetcher, http_response, dummy_ctx, sleeps):
    from scrapeflow.core.pipeline.context import RunContext

    ctx = RunContext(
        run_id="r",
        started_at=dummy_ctx.started_at,
        config=RunnerConfig(retry=RetryPolicy(attempts=2, base_delay=0.75)),
    )
    fetcher, session = make_fetcher([http_response(502, "x"), http_response(502, "x")])

    with pytest.raises(requests.HTTPError):
        fetcher.fetch(HtmlRequest(url="https://site.test/"), ctx)
    assert len(session.calls) == 2
    assert sleeps == [0.75]


def test_rate_limit_paces_consecutive_requests(make_fetcher, http_response, dummy_ctx, sleeps):
    clock = FakeClock()
    fetcher, _ = make_fetcher(
        [http_response(200, PAGE), http_response(200, PAGE)],
        rate_limit=RateLimit(requests=2, per_seconds=1.0),
        clock=clock,
    )

    fetcher.fetch(HtmlRequest(url="https://site.test/1"), dummy_ctx)
    assert sleeps == []
    assert dummy_ctx.metadata["html-fetcher:last-request-at"] == 1000.0

    clock.now = 1000.2
    fetcher.fetch(HtmlRequest(url="https://site.test/2"), dummy_ctx)
    assert sleeps == [pytest.approx(0.3)]


def test_min_delay_uses_context_metadata_from_previous_fetcher(make_fetcher, http_response, dummy_ctx, sleeps):
    dummy_ctx.metadata["html-fetcher:last-request-at"] = 999.0
    fetcher, _ = make_fetcher([http_response(200, PAGE)], min_delay=2.0, clock=FakeClock(1000.0))

    fetcher.fetch(HtmlRequest(url="https://site.test/"), dummy_ctx)
    assert sleeps == [pytest.approx(1.0)]


def test_config_rate_limit_is_used_when_fetcher_has_none(make_fetcher, http_response, dummy_ctx, sleeps):
    from scrapeflow.core.pipeline.context import RunContext

    ctx = RunContext(
        run_id="r",
        started_at=dummy_ctx.started_at,
        config=RunnerConfig(rate_limit=RateLimit(requests=1, per_seconds=4.0)),
    )
    ctx.metadata["html-fetcher:last-request-at"] = 1000.0
    fetcher, _ = make_fetcher([http_response(200, PAGE)], clock=FakeClock(1001.0))

    fetcher.fetch(HtmlRequest(url="https://site.test/"), ctx)
    assert sleeps == [pytest.approx(3.0)]


def test_callbacks_run_around_each_request(make_fetcher, http_response, dummy_ctx):
    seen = []

    def before(request, kwargs, ctx):
        kwargs["headers"]["X-Trace"] = "abc"
        seen.append(("before", request.url))

    def after(response, ctx):
        seen.append(("after", response.status))

    fetcher, session = make_fetcher([http_response(200, PAGE)], on_before_request=before, on_after_response=after)
    fetcher.fetch(HtmlRequest(url="https://site.test/"), dummy_ctx)

    assert seen == [("before", "https://site.test/"), ("after", 200)]
    assert session.calls[0]["headers"]["X-Trace"] == "abc"
