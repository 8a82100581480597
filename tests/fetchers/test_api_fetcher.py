# tests/fetchers/test_api_fetcher.py
"""
Testes do ApiFetcher: corpo JSON, autenticação, decodificação tolerante
e resumo de falhas via `create_error`.
"""

import base64
import json

import pytest
import requests

try:
    from scrapeflow.fetchers.api import ApiAuth, ApiFetcher, ApiRequest
except Exception as e:  # noqa: BLE001
    ApiFetcher = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


@pytest.fixture
def make_fetcher(fake_session):
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing ApiFetcher. Import error: {_IMPORT_ERR}")

    def build(outcomes, **kwargs):
        session = fake_session(outcomes)
        kwargs.setdefault("sleep", lambda s: None)
        return ApiFetcher(session=session, **kwargs), session

    return build


def test_get_decodes_json(make_fetcher, http_response, dummy_ctx):
    body = json.dumps({"items": [1, 2, 3]})
    fetcher, session = make_fetcher([http_response(200, body, {"Content-Type": "application/json"})])

    result = fetcher.get("https://api.test/items", dummy_ctx, params={"page": 1})

    assert result.data == {"items": [1, 2, 3]}
    assert result.status == 200
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["params"] == {"page": 1}
    assert call["headers"]["Accept"] == "application/json"
    assert "json" not in call


def test_post_sends_json_body(make_fetcher, http_response, dummy_ctx):
    fetcher, session = make_fetcher([http_response(201, json.dumps({"id": 9}))])

    result = fetcher.post("https://api.test/items", dummy_ctx, data={"name": "x"})

    assert result.data == {"id": 9}
    assert session.calls[0]["method"] == "POST"
    assert session.calls[0]["json"] == {"name": "x"}


def test_non_json_body_falls_back_to_text(make_fetcher, http_response, dummy_ctx):
    fetcher, _ = make_fetcher([http_response(200, "plain text")])
    assert fetcher.fetch(ApiRequest(url="https://api.test/"), dummy_ctx).data == "plain text"


def test_empty_body_is_none(make_fetcher, http_response, dummy_ctx):
    fetcher, _ = make_fetcher([http_response(204, "")])
    assert fetcher.fetch(ApiRequest(url="https://api.test/"), dummy_ctx).data is None


@pytest.mark.parametrize(
    "auth, header, value",
    [
        (ApiAuth(type="bearer", token="tok") if ApiFetcher else None, "Authorization", "Bearer tok"),
        (
            ApiAuth(type="basic", username="user", password="pw") if ApiFetcher else None,
            "Authorization",
            "Basic " + base64.b64encode(b"user:pw").decode("ascii"),
        ),
        (ApiAuth(type="custom", header="X-Api-Key", value="k") if ApiFetcher else None, "X-Api-Key", "k"),
    ],
)
def test_auth_headers(make_fetcher, http_response, dummy_ctx, auth, header, value):
    fetcher, session = make_fetcher([http_response(200, "{}")])
    fetcher.fetch(ApiRequest(url="https://api.test/", auth=auth), dummy_ctx)
    assert session.calls[0]["headers"][header] == value


def test_incomplete_auth_adds_nothing(make_fetcher, http_response, dummy_ctx):
    fetcher, session = make_fetcher([http_response(200, "{}")])
    fetcher.fetch(ApiRequest(url="https://api.test/", auth=ApiAuth(type="basic", username="only")), dummy_ctx)
    assert "Authorization" not in session.calls[0]["headers"]


def test_unprocessable_entity_aborts_without_retry(make_fetcher, http_response, dummy_ctx):
    fetcher, session = make_fetcher([http_response(422, json.dumps({"error": "bad"}))])

    with pytest.raises(requests.HTTPError):
        fetcher.fetch(ApiRequest(url="https://api.test/"), dummy_ctx)
    assert len(session.calls) == 1


def test_metadata_key_is_fetcher_specific(make_fetcher, http_response, dummy_ctx):
    fetcher, _ = make_fetcher([http_response(200, "{}")], clock=lambda: 42.0)
    fetcher.fetch(ApiRequest(url="https://api.test/"), dummy_ctx)
    assert dummy_ctx.metadata["api-fetcher:last-request-at"] == 42.0
    assert "html-fetcher:last-request-at" not in dummy_ctx.metadata


def test_create_error_from_http_error(http_response):
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing ApiFetcher. Import error: {_IMPORT_ERR}")
    response = http_response(503, json.dumps({"error": "down"}), reason="Service Unavailable")
    exc = requests.HTTPError("503 Server Error", response=response)

    err = ApiFetcher.create_error(exc)

    assert err.status == 503
    assert err.status_text == "Service Unavailable"
    assert err.data == {"error": "down"}
    assert err.code == "HTTPError"
    assert err.is_retryable is True


def test_create_error_classification():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing ApiFetcher. Import error: {_IMPORT_ERR}")

    network = ApiFetcher.create_error(requests.ConnectionError("refused"))
    assert network.status is None
    assert network.is_retryable is True

    plain = ApiFetcher.create_error(ValueError("bad input"))
    assert plain.message == "bad input"
    assert plain.is_retryable is False

    unknown = ApiFetcher.create_error(KeyboardInterrupt())
    assert unknown.message == "Unknown API error"
