# src/scrapeflow/sinks/__init__.py
from .json_sink import JsonSink

__all__ = ["JsonSink"]
