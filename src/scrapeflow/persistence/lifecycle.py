# src/scrapeflow/persistence/lifecycle.py
"""
Observador de ciclo de vida que persiste o progresso de Steps.

Registrado como observador de nível de Runner, grava:
    - before_step → `set_progress(step, step_index)`
    - after_step  → `set_progress(step, 0)`
    - on_error    → `record_failure(step, step_index)`

Assim, uma run abortada já terá persistido o estado dos Steps
concluídos antes da falha.
"""

from __future__ import annotations

from scrapeflow.core.engine.lifecycle import StepErrorEvent, StepLifecycleEvent

from .step_log_store import StepLogStore


class StepLogLifecycle:
    def __init__(self, store: StepLogStore):
        self.store = store

    def before_step(self, event: StepLifecycleEvent) -> None:
        self.store.set_progress(event.step.id, event.step_index)

    def after_step(self, event: StepLifecycleEvent) -> None:
        self.store.set_progress(event.step.id, 0)

    def on_error(self, event: StepErrorEvent) -> None:
        self.store.record_failure(event.step.id, event.step_index)
