# src/scrapeflow/core/pipeline/__init__.py
"""
# Pipeline Core — scrapeflow

Este pacote define os **contratos canônicos** que compõem um pipeline.

## Componentes

- **context**
  - `RunContext`: contexto de execução (identidade, config, data, step_state, metadata)

- **step**
  - `Step` (Protocol): contrato mínimo que todo Step deve satisfazer
  - `PipelineStep`: Step imutável construído a partir de funções

- **types**
  - `StepStatus`: estado derivado do registro de progresso
  - `Fetcher`, `Sink` (Protocols): colaboradores usados dentro dos Steps

- **registry**
  - `StepRegistry`: unicidade de `step.id` e ordem de registro

## Invariantes

- Cada Step possui um `id` único
- Dependências são explícitas e declarativas
- Comunicação entre Steps ocorre apenas via RunContext
"""

from .context import RunContext
from .registry import StepRegistry
from .step import PipelineStep, Step
from .types import Fetcher, Sink, StepStatus

__all__ = [
    "Fetcher",
    "PipelineStep",
    "RunContext",
    "Sink",
    "Step",
    "StepRegistry",
    "StepStatus",
]
