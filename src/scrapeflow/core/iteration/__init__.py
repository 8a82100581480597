# src/scrapeflow/core/iteration/__init__.py
"""Iteração limitada e cadenciada dentro de Steps."""

from .loop_controller import DEFAULT_MAX_ITEMS, LoopController, LoopFailure, format_duration

__all__ = ["DEFAULT_MAX_ITEMS", "LoopController", "LoopFailure", "format_duration"]
