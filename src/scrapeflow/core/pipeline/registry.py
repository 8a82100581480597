# src/scrapeflow/core/pipeline/registry.py
"""
Registro estrutural de Steps do pipeline.

O `StepRegistry` registra Steps preservando a ordem de declaração e
rejeitando identificadores inválidos ou duplicados no momento do
registro, antes de qualquer planejamento.

A ordem de registro importa: ela é o critério de desempate do planner
entre Steps prontos ao mesmo tempo.

Limites explícitos:
    - Não resolve dependências (responsabilidade do planner)
    - Não executa Steps
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from scrapeflow.core.exceptions import DuplicateStepIdError

from .step import Step


@dataclass
class StepRegistry:
    """Registro canônico de Steps para validação estrutural pré-execução."""

    _steps: Dict[str, Step] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, step: Step) -> None:
        step_id = getattr(step, "id", None)
        if not isinstance(step_id, str) or not step_id.strip():
            raise DuplicateStepIdError("step.id must be a non-empty string")

        if step_id in self._steps:
            raise DuplicateStepIdError(
                f"Duplicate step id: {step_id}", details={"step_id": step_id}
            )

        self._steps[step_id] = step
        self._order.append(step_id)

    def get(self, step_id: str) -> Step:
        return self._steps[step_id]

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._steps

    def __len__(self) -> int:
        return len(self._order)

    def list(self) -> List[Step]:
        return [self._steps[sid] for sid in self._order]
