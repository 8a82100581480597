# src/scrapeflow/core/engine/__init__.py
"""
Engine do scrapeflow.

Componentes principais:
    - planner   → ordenação topológica determinística e validações estruturais
    - lifecycle → eventos e observadores de ciclo de vida de Steps
    - runner    → execução sequencial, retomada e RunResult

Invariantes:
    - Steps só são executados após suas dependências
    - Cada Step é executado no máximo uma vez por run
    - A primeira falha interrompe a run e é propagada intacta
"""

from .lifecycle import RunnerLifecycle, StepErrorEvent, StepLifecycleEvent
from .planner import plan_execution
from .runner import RunOptions, RunResult, Runner, default_run_id

__all__ = [
    "RunOptions",
    "RunResult",
    "Runner",
    "RunnerLifecycle",
    "StepErrorEvent",
    "StepLifecycleEvent",
    "default_run_id",
    "plan_execution",
]
