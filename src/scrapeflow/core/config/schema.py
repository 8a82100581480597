# src/scrapeflow/core/config/schema.py
"""
Configuração tipada do Runner.

Este módulo define `RunnerConfig`, a forma imutável e validada da
configuração consumida pelo core e propagada ao `RunContext`.

Formato serializável (YAML/JSON):

    mode: development        # ou production
    delay: 0.25              # segundos entre ticks de iteração
    max_items: 100           # teto de segurança opcional
    resume_from_log: true
    rate_limit:              # consumido apenas pelos fetchers
      requests: 10
      per_seconds: 1.0
    retry:                   # política padrão de retry dos fetchers
      attempts: 3
      backoff_strategy: exponential
      base_delay: 0.25
    telemetry:
      enabled: true
      log_level: info        # silent | info | debug

Decisões arquiteturais:
    - `mode` controla o teto de segurança do LoopController e a persistência
    - Overrides de chamada (mode, delay, max_items) geram uma NOVA instância
    - Chaves desconhecidas são preservadas em `extra` (config do pipeline)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .errors import InvalidConfigValueError


class Mode(str, Enum):
    """Modo de execução. O valor textual é canônico e serializável."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"


class BackoffStrategy(str, Enum):
    NONE = "none"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


class LogLevel(str, Enum):
    SILENT = "silent"
    INFO = "info"
    DEBUG = "debug"


@dataclass(frozen=True)
class RateLimit:
    """No máximo `requests` requisições a cada `per_seconds` segundos."""

    requests: int
    per_seconds: float

    @property
    def interval(self) -> float:
        return self.per_seconds / self.requests


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = 3
    backoff_strategy: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    base_delay: float = 0.25


@dataclass(frozen=True)
class Telemetry:
    enabled: bool = True
    log_level: LogLevel = LogLevel.INFO


def parse_mode(value: Any) -> Mode:
    try:
        return Mode(value)
    except ValueError:
        raise InvalidConfigValueError(
            f'Invalid mode "{value}". Expected "development" or "production".'
        ) from None


def _number(name: str, value: Any, *, allow_zero: bool = True) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfigValueError(f"'{name}' deve ser numérico, recebido: {type(value).__name__}")
    if value < 0 or (value == 0 and not allow_zero):
        raise InvalidConfigValueError(f"'{name}' fora do domínio: {value}")
    return value


def _positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidConfigValueError(f"'{name}' deve ser inteiro positivo, recebido: {value!r}")
    return value


def _section(name: str, value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise InvalidConfigValueError(f"'{name}' deve ser um mapa, recebido: {type(value).__name__}")
    return value


_KNOWN_KEYS = {"mode", "delay", "max_items", "resume_from_log", "rate_limit", "retry", "telemetry"}


@dataclass(frozen=True)
class RunnerConfig:
    """
    Configuração efetiva de uma run.

    Campos canônicos:
    - mode: development | production
    - delay: cadência (segundos) entre ticks do LoopController
    - max_items: teto de segurança opcional para itens processados
    - resume_from_log: habilita retomada a partir do StepLogStore
    - rate_limit: limite de requisições compartilhado pelos fetchers
    - retry: política padrão de retry dos fetchers
    - telemetry: nível de log do front-end
    - extra: chaves livres do pipeline (não interpretadas pelo core)
    """

    mode: Mode = Mode.DEVELOPMENT
    delay: float = 1.0
    max_items: Optional[int] = None
    resume_from_log: bool = True
    rate_limit: Optional[RateLimit] = None
    retry: Optional[RetryPolicy] = None
    telemetry: Telemetry = field(default_factory=Telemetry)
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_production(self) -> bool:
        return self.mode is Mode.PRODUCTION

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunnerConfig":
        """Valida e converte um mapa (YAML/JSON já carregado) em RunnerConfig."""
        data = _section("config", data)

        max_items = data.get("max_items")
        if max_items is not None:
            max_items = _positive_int("max_items", max_items)

        rate_limit = None
        if data.get("rate_limit") is not None:
            raw = _section("rate_limit", data["rate_limit"])
            rate_limit = RateLimit(
                requests=_positive_int("rate_limit.requests", raw.get("requests")),
                per_seconds=_number("rate_limit.per_seconds", raw.get("per_seconds"), allow_zero=False),
            )

        retry = None
        if data.get("retry") is not None:
            raw = _section("retry", data["retry"])
            try:
                strategy = BackoffStrategy(raw.get("backoff_strategy", BackoffStrategy.EXPONENTIAL.value))
            except ValueError:
                raise InvalidConfigValueError(
                    f"retry.backoff_strategy inválido: {raw.get('backoff_strategy')!r}"
                ) from None
            retry = RetryPolicy(
                attempts=_positive_int("retry.attempts", raw.get("attempts", 3)),
                backoff_strategy=strategy,
                base_delay=_number("retry.base_delay", raw.get("base_delay", 0.25)),
            )

        telemetry = Telemetry()
        if data.get("telemetry") is not None:
            raw = _section("telemetry", data["telemetry"])
            try:
                level = LogLevel(raw.get("log_level", LogLevel.INFO.value))
            except ValueError:
                raise InvalidConfigValueError(
                    f"telemetry.log_level inválido: {raw.get('log_level')!r}"
                ) from None
            telemetry = Telemetry(enabled=bool(raw.get("enabled", True)), log_level=level)

        return cls(
            mode=parse_mode(data.get("mode", Mode.DEVELOPMENT.value)),
            delay=_number("delay", data.get("delay", 1.0)),
            max_items=max_items,
            resume_from_log=bool(data.get("resume_from_log", True)),
            rate_limit=rate_limit,
            retry=retry,
            telemetry=telemetry,
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Representação serializável (enums como texto)."""
        out = asdict(self)
        out["mode"] = self.mode.value
        if self.retry is not None:
            out["retry"]["backoff_strategy"] = self.retry.backoff_strategy.value
        out["telemetry"]["log_level"] = self.telemetry.log_level.value
        extra = out.pop("extra")
        out.update(extra)
        return out

    def with_overrides(
        self,
        *,
        mode: Optional[Mode | str] = None,
        delay: Optional[float] = None,
        max_items: Optional[int] = None,
    ) -> "RunnerConfig":
        """Retorna nova configuração com overrides de chamada. `None` mantém o valor."""
        changes: Dict[str, Any] = {}
        if mode is not None:
            changes["mode"] = parse_mode(mode)
        if delay is not None:
            changes["delay"] = _number("delay", delay)
        if max_items is not None:
            changes["max_items"] = _positive_int("max_items", max_items)
        return replace(self, **changes) if changes else self
