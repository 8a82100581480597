"""
scrapeflow — Canonical Error Structures (v1)

Este módulo define o payload canônico de erro do scrapeflow, usado para
reportar falhas de forma serializável (CLI, hooks de ciclo de vida,
relatórios de status).

Erros reportados devem ser:

- explícitos
- serializáveis
- acionáveis

O payload nunca substitui a exceção original: ele é uma *visão* dela.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from .config.errors import ConfigError
from .exceptions import (
    CircularDependencyError,
    InvalidStepIndexError,
    MissingDependencyError,
    ResolutionError,
    ScrapeflowException,
    StepNotFoundError,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do scrapeflow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador
    """

    type: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

RESOLUTION_MISSING_DEPENDENCY = "RESOLUTION_MISSING_DEPENDENCY"
RESOLUTION_CIRCULAR_DEPENDENCY = "RESOLUTION_CIRCULAR_DEPENDENCY"
RESOLUTION_INVALID_STEPS = "RESOLUTION_INVALID_STEPS"

RUNNER_INVALID_START = "RUNNER_INVALID_START"

STEP_EXECUTION_ERROR = "STEP_EXECUTION_ERROR"

CONFIG_ERROR = "CONFIG_ERROR"


def _code_for(exc: BaseException) -> str:
    if isinstance(exc, MissingDependencyError):
        return RESOLUTION_MISSING_DEPENDENCY
    if isinstance(exc, CircularDependencyError):
        return RESOLUTION_CIRCULAR_DEPENDENCY
    if isinstance(exc, ResolutionError):
        return RESOLUTION_INVALID_STEPS
    if isinstance(exc, (InvalidStepIndexError, StepNotFoundError)):
        return RUNNER_INVALID_START
    if isinstance(exc, ConfigError):
        return CONFIG_ERROR
    return STEP_EXECUTION_ERROR


def exception_to_error(exc: BaseException, *, step_id: Optional[str] = None) -> ErrorPayload:
    """Converte uma exceção em ErrorPayload (serializável, acionável).

    Regras:
    - ScrapeflowException: já vem com message/details/hint.
    - Outras exceções: encapsuladas como STEP_EXECUTION_ERROR, sem stack trace.
    """
    if isinstance(exc, ScrapeflowException):
        details = dict(exc.details)
        if step_id is not None:
            details.setdefault("step_id", step_id)
        return ErrorPayload(
            type=_code_for(exc),
            message=exc.message,
            details=details,
            hint=exc.hint,
        )

    details = {"exception_class": exc.__class__.__name__}
    if step_id is not None:
        details["step_id"] = step_id

    return ErrorPayload(
        type=_code_for(exc),
        message=str(exc) or exc.__class__.__name__,
        details=details,
        hint=None if isinstance(exc, ConfigError) else "Corrija a falha e use `resume` para continuar a run.",
    )
