# src/scrapeflow/core/engine/planner.py
"""
Planejador de execução do pipeline (DAG).

Este módulo valida a estrutura do pipeline e produz uma ordem de
execução topológica determinística dos Steps declarados.

O planner opera exclusivamente em nível estrutural, analisando:
    - identificadores de Steps
    - dependências declaradas
    - formação de ciclos

Decisões arquiteturais:
    - Algoritmo de Kahn sobre um grafo explícito
    - Empates são resolvidos pela ordem em que os Steps foram fornecidos
      (sem chave secundária de ordenação)
    - Dependência ausente é verificada ANTES da detecção de ciclos
    - Erros estruturais são fatais; nenhuma ordem parcial é retornada

Invariantes:
    - Nenhum Step aparece antes de suas dependências
    - Todos os Steps aparecem exatamente uma vez
    - A mesma entrada (incluindo a ordem) produz sempre a mesma saída

Limites explícitos:
    - Não executa Steps
    - Não interage com RunContext
    - Não realiza I/O
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Iterable, List

from scrapeflow.core.exceptions import CircularDependencyError, MissingDependencyError
from scrapeflow.core.pipeline.registry import StepRegistry
from scrapeflow.core.pipeline.step import Step


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Valida e produz uma ordem de execução topológica determinística de Steps.

    Quando múltiplos Steps estão prontos ao mesmo tempo, prevalece a
    ordem em que foram fornecidos.

    Args:
        steps (Iterable[Step]): Coleção de Steps do pipeline.

    Returns:
        List[Step]: Steps em ordem topológica de execução.

    Raises:
        DuplicateStepIdError: Se algum Step possuir `id` inválido ou duplicado.
        MissingDependencyError: Se um Step declarar dependência inexistente.
        CircularDependencyError: Se houver ciclo no grafo de dependências.
    """
    registry = StepRegistry()
    for s in steps:
        registry.add(s)
    by_id: Dict[str, Step] = {s.id: s for s in registry.list()}

    # Validate dependencies exist
    deps: Dict[str, List[str]] = {}
    for sid, s in by_id.items():
        d = list(getattr(s, "depends_on", None) or [])
        for dep in d:
            if dep not in by_id:
                raise MissingDependencyError(dependency_id=dep, step_id=sid)
        deps[sid] = d

    # Kahn's algorithm; dicts preserve supplied order
    incoming_count: Dict[str, int] = {sid: 0 for sid in by_id}
    outgoing: Dict[str, List[str]] = {sid: [] for sid in by_id}

    for sid, dlist in deps.items():
        for dep in dlist:
            incoming_count[sid] += 1
            outgoing[dep].append(sid)

    ready: Deque[str] = deque(sid for sid, c in incoming_count.items() if c == 0)
    order_ids: List[str] = []

    while ready:
        sid = ready.popleft()
        order_ids.append(sid)
        for child in outgoing[sid]:
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                ready.append(child)

    if len(order_ids) != len(by_id):
        resolved = set(order_ids)
        raise CircularDependencyError(step_ids=[sid for sid in by_id if sid not in resolved])

    return [by_id[sid] for sid in order_ids]
