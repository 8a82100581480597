# src/scrapeflow/core/pipeline/context.py
"""
Contexto de execução compartilhado do pipeline.

Este módulo define o `RunContext`, a estrutura canônica passada a todos
os Steps durante uma run (ou retomada) do pipeline.

O RunContext consolida:
    - identidade imutável da execução (run_id, started_at, config)
    - `data`: dados compartilhados entre Steps, com tipo escolhido pelo
      autor do pipeline (dict por padrão, ou dataclass/objeto próprio)
    - `step_state`: estado privado por Step (step_id → valor opaco)
    - `metadata`: preocupações transversais (ex.: horário da última requisição)
    - `events`: log estruturado de execução, espelhado no `logging`

Invariantes:
    - Cada run/retomada possui um RunContext próprio
    - `run_id` é estável durante todo o ciclo de vida do contexto
    - `config` é imutável (RunnerConfig frozen)
    - Estado mutável é compartilhado por referência, sem sincronização:
      a execução é estritamente sequencial

Limites explícitos:
    - Não executa Steps
    - Não persiste dados automaticamente
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar

from scrapeflow.core.config.schema import RunnerConfig

TData = TypeVar("TData")

run_logger = logging.getLogger("scrapeflow.run")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class RunContext(Generic[TData]):
    """
    Contexto de execução compartilhado de uma run do pipeline.

    O tipo de `data` é um parâmetro do pipeline: o Runner é genérico e
    nunca interpreta seu conteúdo, exceto ao semear a retomada
    (`seed_data`).
    """

    run_id: str
    started_at: datetime
    config: RunnerConfig
    data: TData = field(default_factory=dict)  # type: ignore[assignment]
    step_state: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)

    # -----------------------------
    # Step state
    # -----------------------------
    def get_step_state(self, step_id: str, default: Any = None) -> Any:
        return self.step_state.get(step_id, default)

    def set_step_state(self, step_id: str, value: Any) -> None:
        self.step_state[step_id] = value

    # -----------------------------
    # Data seeding (resume)
    # -----------------------------
    def seed_data(self, payload: Mapping[str, Any]) -> None:
        """Mescla `payload` em `data`.

        - data mapeável: `update`
        - data objeto (ex.: dataclass): atribuição por atributo existente
        """
        if not payload:
            return
        if isinstance(self.data, MutableMapping):
            self.data.update(payload)
            return
        for key, value in payload.items():
            if hasattr(self.data, key):
                setattr(self.data, key, value)
            else:
                run_logger.debug("payload key '%s' ignorada: ausente em %s", key, type(self.data).__name__)

    # -----------------------------
    # Logging
    # -----------------------------
    def log(self, *, step_id: Optional[str], level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)
        run_logger.log(_LEVELS.get(level, logging.INFO), "[%s:%s] %s", self.run_id, step_id, message)
