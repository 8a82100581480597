# src/scrapeflow/core/config/__init__.py

"""
Camada de configuração do scrapeflow.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Validação da configuração tipada (`RunnerConfig`)
    - Geração de hash canônico para rastreabilidade

Princípios fundamentais:
    - Configuração não contém lógica de coleta
    - Overrides são sempre explícitos
    - A mesma entrada sempre produz a mesma configuração final
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config, load_runner_config
from .merge import deep_merge
from .schema import (
    BackoffStrategy,
    LogLevel,
    Mode,
    RateLimit,
    RetryPolicy,
    RunnerConfig,
    Telemetry,
    parse_mode,
)

__all__ = [
    "BackoffStrategy",
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidConfigValueError",
    "LogLevel",
    "Mode",
    "RateLimit",
    "RetryPolicy",
    "RunnerConfig",
    "Telemetry",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "deep_merge",
    "load_config",
    "load_runner_config",
    "parse_mode",
]
