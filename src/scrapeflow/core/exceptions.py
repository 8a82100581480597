"""
scrapeflow — Exceções canônicas (v1)

Este módulo define as exceções tipadas do motor de execução.

Objetivo:
- Permitir que planner e Runner levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para ErrorPayload
- Evitar ValueError/RuntimeError genéricos nos pontos críticos

Regras:
- Exceções carregam dados estruturados em `details` (serializáveis)
- Erros de resolução são fatais e ocorrem antes de qualquer Step executar
- Erros lançados pelo corpo de um Step NÃO são encapsulados aqui:
  eles são propagados intactos ao chamador de `run`/`resume`
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


class ScrapeflowException(Exception):
    """Base class para exceções internas do scrapeflow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})
        self.hint = hint

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Resolução de dependências (planner)
# ---------------------------------------------------------------------------

class ResolutionError(ScrapeflowException, ValueError):
    """Conjunto de Steps não pode ser ordenado. Nenhuma execução ocorre."""


class DuplicateStepIdError(ResolutionError):
    """Dois Steps declaram o mesmo `id` (ou um `id` é inválido)."""


class MissingDependencyError(ResolutionError):
    """
    Um Step declara em `depends_on` um id que não está no conjunto.

    A verificação ocorre antes da detecção de ciclos, para que o erro
    aponte diretamente a dependência ausente e o Step dependente.
    """

    def __init__(self, *, dependency_id: str, step_id: str) -> None:
        super().__init__(
            f'Dependency "{dependency_id}" not found for step "{step_id}"',
            details={"dependency_id": dependency_id, "step_id": step_id},
            hint="Registre o Step ausente ou remova a dependência declarada.",
        )
        self.dependency_id = dependency_id
        self.step_id = step_id


class CircularDependencyError(ResolutionError):
    """O grafo de dependências contém um ou mais ciclos."""

    def __init__(self, *, step_ids: Sequence[str]) -> None:
        ids: List[str] = list(step_ids)
        super().__init__(
            f"Circular dependency detected among steps: {', '.join(ids)}",
            details={"step_ids": ids},
            hint="Remova a dependência que fecha o ciclo; o pipeline deve formar um DAG.",
        )
        self.step_ids = ids


# ---------------------------------------------------------------------------
# Runner — ponto de partida
# ---------------------------------------------------------------------------

class InvalidStepIndexError(ScrapeflowException, ValueError):
    """O índice de retomada está fora de `[0, len(steps))`."""

    def __init__(self, *, step_index: int, total_steps: int) -> None:
        super().__init__(
            f"Invalid step index: {step_index}",
            details={"step_index": step_index, "total_steps": total_steps},
        )
        self.step_index = step_index
        self.total_steps = total_steps


class StepNotFoundError(ScrapeflowException, ValueError):
    """O Step inicial solicitado não existe no pipeline."""

    def __init__(self, *, step_id: str) -> None:
        super().__init__(
            f'Step with id "{step_id}" not found',
            details={"step_id": step_id},
        )
        self.step_id = step_id
