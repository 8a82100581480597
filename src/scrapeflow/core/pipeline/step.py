# src/scrapeflow/core/pipeline/step.py
"""
Contrato canônico de Step do scrapeflow.

Um Step é a menor unidade executável do pipeline: um identificador
único, dependências declaradas e um corpo que recebe o RunContext.

Princípios fundamentais:
    - Steps não conhecem o Runner nem o planner
    - Steps não controlam ordem de execução
    - Comunicação entre Steps é mediada pelo RunContext
    - Conformidade é garantida por duck typing (@runtime_checkable)

Hooks opcionais (`before_step`, `after_step`, `on_error`) são buscados
por atributo: um Step que não os define simplesmente não é notificado.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol, Sequence, Tuple, runtime_checkable

from .context import RunContext

if TYPE_CHECKING:
    from scrapeflow.core.engine.lifecycle import StepErrorEvent, StepLifecycleEvent

    LifecycleHook = Callable[[StepLifecycleEvent], None]
    ErrorHook = Callable[[StepErrorEvent], None]


@runtime_checkable
class Step(Protocol):
    """
    Contrato canônico de um Step.

    Atributos obrigatórios:
        - id: identificador único e estável do Step
        - depends_on: ids dos Steps dos quais depende (pode ser vazio)

    Invariantes:
        - `id` é único no contexto de um pipeline
        - `run` é executado no máximo uma vez por run
        - O Runner nunca muta um Step
    """
    id: str
    depends_on: Sequence[str]

    def run(self, ctx: RunContext[Any]) -> None:
        """Executa a etapa usando exclusivamente o RunContext. Pode levantar exceção."""
        ...


@dataclass(frozen=True)
class PipelineStep:
    """
    Implementação concreta e imutável de Step a partir de funções.

    Exemplo:

        fetch_pages = PipelineStep(
            id="fetch-pages",
            depends_on=("discover",),
            body=lambda ctx: ...,
        )
    """

    id: str
    body: Callable[[RunContext[Any]], None]
    depends_on: Tuple[str, ...] = ()
    label: Optional[str] = None
    description: Optional[str] = None
    before_step: Optional["LifecycleHook"] = None
    after_step: Optional["LifecycleHook"] = None
    on_error: Optional["ErrorHook"] = None

    def __post_init__(self) -> None:
        # aceita listas na construção, mas armazena tupla (imutável)
        object.__setattr__(self, "depends_on", tuple(self.depends_on))

    def run(self, ctx: RunContext[Any]) -> None:
        self.body(ctx)
