# src/scrapeflow/core/pipeline/types.py
"""
Tipos canônicos do pipeline do scrapeflow.

Componentes principais:
    - StepStatus → estado de um Step derivado do seu registro de progresso
    - Fetcher    → protocolo de coleta usado dentro dos Steps
    - Sink       → protocolo de persistência de resultados usado dentro dos Steps

Fetchers e Sinks são invisíveis para o Runner: apenas o corpo dos Steps
os utiliza.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, TypeVar, runtime_checkable

from .context import RunContext

RequestT = TypeVar("RequestT", contravariant=True)
ResponseT = TypeVar("ResponseT", covariant=True)
PayloadT = TypeVar("PayloadT", contravariant=True)


class StepStatus(str, Enum):
    """
    Estado de um Step derivado do seu StepLogRecord.

    Estados definidos:
        - COMPLETED: índice zerado, sem falhas registradas
        - IN_PROGRESS: índice > 0 (execução interrompida ou em andamento)
        - FAILED: falhas registradas na passada atual
    """
    COMPLETED = "completed"
    IN_PROGRESS = "in_progress"
    FAILED = "failed"


@runtime_checkable
class Fetcher(Protocol[RequestT, ResponseT]):
    """Coletor de dados externo. Pode falhar; retries são responsabilidade dele."""

    id: str

    def fetch(self, request: RequestT, ctx: RunContext[Any]) -> ResponseT:
        ...


@runtime_checkable
class Sink(Protocol[PayloadT]):
    """Destino de persistência de resultados (arquivo JSON, banco, etc.)."""

    id: str

    def write(self, payload: PayloadT, ctx: RunContext[Any]) -> None:
        ...

    def flush(self, ctx: RunContext[Any]) -> None:
        ...
