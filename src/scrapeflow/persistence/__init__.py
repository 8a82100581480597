# src/scrapeflow/persistence/__init__.py
"""Persistência retomável de progresso por (run, step)."""

from .lifecycle import StepLogLifecycle
from .step_log_store import ResumeState, StepLogRecord, StepLogStore

__all__ = ["ResumeState", "StepLogLifecycle", "StepLogRecord", "StepLogStore"]
