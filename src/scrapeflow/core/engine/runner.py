# src/scrapeflow/core/engine/runner.py
"""
Runner de execução do pipeline do scrapeflow.

O Runner compõe planner, RunContext e observadores de ciclo de vida:
resolve a ordem dos Steps, executa-os estritamente em sequência a
partir de um índice arbitrário e consolida um RunResult.

Pontos de entrada:
    - run(options)          → execução a partir do início (ou de `start_step_id`)
    - resume(state, options) → retomada a partir de um ResumeState persistido

Política de falha:
    - A primeira exceção do corpo de um Step interrompe a run
    - `on_error` é notificado uma única vez (Runner primeiro, Step depois)
    - A exceção original é propagada intacta; não há retry no Runner
    - O RunResult parcial fica disponível em `runner.last_result`

O Runner não realiza I/O: persistência de progresso é feita por
observadores (ver `scrapeflow.persistence.StepLogLifecycle`).
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Generic,
    List,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

from scrapeflow.core.config.hashing import compute_config_hash
from scrapeflow.core.config.schema import Mode, RunnerConfig
from scrapeflow.core.exceptions import InvalidStepIndexError, StepNotFoundError
from scrapeflow.core.pipeline.context import RunContext
from scrapeflow.core.pipeline.step import Step

from .lifecycle import (
    AFTER_STEP,
    BEFORE_STEP,
    ON_ERROR,
    StepErrorEvent,
    StepLifecycleEvent,
    notify,
    observers_for,
)
from .planner import plan_execution

if TYPE_CHECKING:
    from scrapeflow.persistence.step_log_store import ResumeState

logger = logging.getLogger(__name__)

TData = TypeVar("TData")


def default_run_id() -> str:
    """Gerador padrão: relógio de parede + sufixo aleatório."""
    return f"run-{int(time.time() * 1000)}-{secrets.token_hex(4)[:7]}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RunOptions:
    """Overrides de chamada. `None` mantém o valor da configuração base."""

    mode: Optional[Union[Mode, str]] = None
    delay: Optional[float] = None
    max_items: Optional[int] = None
    start_step_id: Optional[str] = None


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado e imutável de uma invocação de run/resume."""

    total_steps: int
    completed_steps: List[str] = field(default_factory=list)
    failed_steps: List[str] = field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    duration_ms: int = 0


class Runner(Generic[TData]):
    """Orquestrador canônico do scrapeflow (planner + execução sequencial)."""

    def __init__(
        self,
        config: RunnerConfig,
        lifecycle: Union[Any, Sequence[Any], None] = None,
        steps: Optional[Sequence[Step]] = None,
        *,
        run_id_factory: Callable[[], str] = default_run_id,
        clock: Callable[[], datetime] = _utcnow,
        data_factory: Callable[[], TData] = dict,  # type: ignore[assignment]
    ):
        self.config = config
        if lifecycle is None:
            self.lifecycle: List[Any] = []
        elif isinstance(lifecycle, (list, tuple)):
            self.lifecycle = list(lifecycle)
        else:
            self.lifecycle = [lifecycle]
        self._steps: List[Step] = list(steps or [])
        self._run_id_factory = run_id_factory
        self._clock = clock
        self._data_factory = data_factory
        self.last_result: Optional[RunResult] = None

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    @property
    def steps(self) -> List[Step]:
        return list(self._steps)

    def register_step(self, step: Step) -> "Runner[TData]":
        self._steps.append(step)
        return self

    def set_steps(self, steps: Sequence[Step]) -> "Runner[TData]":
        self._steps = list(steps)
        return self

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------
    def get_context(self) -> RunContext[TData]:
        return self._build_context(self.config)

    def _build_context(self, config: RunnerConfig) -> RunContext[TData]:
        ctx: RunContext[TData] = RunContext(
            run_id=self._run_id_factory(),
            started_at=self._clock(),
            config=config,
            data=self._data_factory(),
        )
        ctx.metadata["config_hash"] = compute_config_hash(config.to_dict())
        return ctx

    def _merged_config(self, options: RunOptions) -> RunnerConfig:
        return self.config.with_overrides(
            mode=options.mode,
            delay=options.delay,
            max_items=options.max_items,
        )

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    def run(self, options: Optional[RunOptions] = None) -> RunResult:
        options = options or RunOptions()
        self.last_result = None
        context = self._build_context(self._merged_config(options))
        started_at = self._clock()

        ordered = plan_execution(self._steps)
        start_index = 0
        if options.start_step_id is not None:
            ids = [s.id for s in ordered]
            if options.start_step_id not in ids:
                raise StepNotFoundError(step_id=options.start_step_id)
            start_index = ids.index(options.start_step_id)

        logger.info("run %s: %d steps, starting at index %d", context.run_id, len(ordered), start_index)
        return self._execute(context, ordered, start_index, [], [], started_at)

    def resume(self, state: "ResumeState", options: Optional[RunOptions] = None) -> RunResult:
        options = options or RunOptions()
        self.last_result = None
        context = self._build_context(self._merged_config(options))
        if state.payload:
            context.seed_data(state.payload)
        started_at = self._clock()

        ordered = plan_execution(self._steps)
        start_index = state.step_index
        if start_index < 0 or start_index >= len(ordered):
            raise InvalidStepIndexError(step_index=start_index, total_steps=len(ordered))

        logger.info(
            "resume %s: from step %s (index %d of %d)",
            context.run_id,
            ordered[start_index].id,
            start_index,
            len(ordered),
        )
        pending = {s.id for s in ordered[start_index:]}
        return self._execute(
            context,
            ordered,
            start_index,
            [sid for sid in state.completed_step_ids if sid not in pending],
            list(state.failed_step_ids),
            started_at,
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def _execute(
        self,
        context: RunContext[TData],
        ordered: List[Step],
        start_index: int,
        completed: List[str],
        failed: List[str],
        started_at: datetime,
    ) -> RunResult:
        total = len(ordered)
        try:
            for step_index in range(start_index, total):
                step = ordered[step_index]
                try:
                    self._execute_step(step, context, step_index, total)
                except Exception:
                    failed.append(step.id)
                    raise
                completed.append(step.id)
        finally:
            self.last_result = self._result(total, completed, failed, started_at)
        return self.last_result

    def _execute_step(self, step: Step, context: RunContext[TData], step_index: int, total: int) -> None:
        event = StepLifecycleEvent(
            step=step,
            context=context,
            step_index=step_index,
            total_steps=total,
            started_at=self._clock(),
        )
        observers = list(observers_for(self.lifecycle, step))

        logger.debug("step %s (%d/%d): before_step", step.id, step_index + 1, total)
        notify(observers, BEFORE_STEP, event)

        try:
            step.run(context)
        except Exception as exc:
            logger.error("step %s failed: %s", step.id, exc)
            error_event = StepErrorEvent(
                step=step,
                context=context,
                step_index=step_index,
                total_steps=total,
                started_at=event.started_at,
                error=exc,
            )
            notify(observers, ON_ERROR, error_event)
            raise

        notify(observers, AFTER_STEP, event)
        logger.info("step %s (%d/%d) completed", step.id, step_index + 1, total)

    def _result(self, total: int, completed: List[str], failed: List[str], started_at: datetime) -> RunResult:
        finished_at = self._clock()
        return RunResult(
            total_steps=total,
            completed_steps=list(completed),
            failed_steps=list(failed),
            started_at=started_at,
            finished_at=finished_at,
            duration_ms=max(0, int((finished_at - started_at).total_seconds() * 1000)),
        )
