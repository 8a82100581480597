# src/scrapeflow/fetchers/__init__.py
"""Fetchers HTTP (HTML e API JSON) com cadência e retry."""

from .api import ApiAuth, ApiFetcher, ApiFetcherError, ApiRequest, ApiResponse
from .base import BaseFetcher, RetryOptions, is_retryable
from .html import HtmlFetcher, HtmlRequest, HtmlResponse

__all__ = [
    "ApiAuth",
    "ApiFetcher",
    "ApiFetcherError",
    "ApiRequest",
    "ApiResponse",
    "BaseFetcher",
    "HtmlFetcher",
    "HtmlRequest",
    "HtmlResponse",
    "RetryOptions",
    "is_retryable",
]
