# src/scrapeflow/core/engine/lifecycle.py
"""
Eventos e observadores de ciclo de vida de Steps.

O Runner notifica observadores em três momentos:
    - before_step: antes do corpo do Step
    - after_step: após o corpo do Step terminar com sucesso
    - on_error: quando o corpo do Step levanta exceção

A ordem de notificação é explícita: uma lista ordenada de observadores
em que os observadores do Runner vêm primeiro (na ordem de registro) e
o próprio Step vem por último. Isso vale tanto para o caminho de
sucesso quanto para o de erro.

Hooks de `on_error` são observadores, não pontos de recuperação: a
exceção original continua sendo propagada, e uma exceção levantada por
um hook não é capturada.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Sequence

from scrapeflow.core.errors import ErrorPayload, exception_to_error
from scrapeflow.core.pipeline.context import RunContext
from scrapeflow.core.pipeline.step import Step

BEFORE_STEP = "before_step"
AFTER_STEP = "after_step"
ON_ERROR = "on_error"


@dataclass(frozen=True)
class StepLifecycleEvent:
    step: Step
    context: RunContext[Any]
    step_index: int
    total_steps: int
    started_at: datetime


@dataclass(frozen=True)
class StepErrorEvent(StepLifecycleEvent):
    error: BaseException
    attempt: int = 1
    will_retry: bool = False

    def to_error_payload(self) -> ErrorPayload:
        return exception_to_error(self.error, step_id=self.step.id)


@dataclass(frozen=True)
class RunnerLifecycle:
    """Conjunto de hooks de nível de Runner, todos opcionais."""

    before_step: Optional[Callable[[StepLifecycleEvent], None]] = None
    after_step: Optional[Callable[[StepLifecycleEvent], None]] = None
    on_error: Optional[Callable[[StepErrorEvent], None]] = None


def observers_for(runner_observers: Sequence[Any], step: Step) -> Iterable[Any]:
    """Ordem canônica de notificação: Runner primeiro, Step por último."""
    yield from runner_observers
    yield step


def notify(observers: Iterable[Any], hook: str, event: StepLifecycleEvent) -> None:
    for observer in observers:
        callback = getattr(observer, hook, None)
        if callback is not None:
            callback(event)
