# src/scrapeflow/__init__.py
"""
scrapeflow — orquestração resumível de pipelines de coleta de dados.

Este pacote raiz define o namespace público do scrapeflow, um framework
para construção de pipelines de aquisição e transformação de dados
organizados como um DAG explícito de Steps, capazes de sobreviver a
reinícios do processo sem refazer trabalho já concluído.

Princípios centrais:
    - O pipeline é um DAG explícito de Steps nomeados
    - A execução é estritamente sequencial e determinística
    - O progresso de cada Step é persistido por (run, step)
    - Falhas por item não abortam o Step inteiro

Arquitetura em alto nível:
    - core.config     → carregamento, merge, validação e hashing de configuração
    - core.pipeline   → protocolos de Step, contexto de execução e registro
    - core.engine     → planejamento (DAG), hooks de ciclo de vida e Runner
    - core.iteration  → loop limitado e cadenciado com isolamento de falhas
    - persistence     → store resumível de progresso por run/step
    - fetchers        → coletores HTTP (HTML e API JSON)
    - sinks           → persistência de resultados (JSON)
    - cli             → front-end de linha de comando
"""
# src/scrapeflow/__init__.py
from .core.config import RunnerConfig, load_config
from .core.engine import Runner, RunOptions, RunResult, plan_execution
from .core.iteration import LoopController, LoopFailure
from .core.pipeline import PipelineStep, RunContext, Step
from .persistence import ResumeState, StepLogLifecycle, StepLogRecord, StepLogStore

__version__ = "0.1.0"

__all__ = [
    "LoopController",
    "LoopFailure",
    "PipelineStep",
    "ResumeState",
    "RunContext",
    "RunOptions",
    "RunResult",
    "Runner",
    "RunnerConfig",
    "Step",
    "StepLogLifecycle",
    "StepLogRecord",
    "StepLogStore",
    "load_config",
    "plan_execution",
]
