# src/scrapeflow/core/config/loader.py
"""
Loader canônico de configuração do scrapeflow.

A configuração é resolvida a partir de:
    - um arquivo de defaults (obrigatório)
    - um arquivo local de overrides (opcional)

Responsabilidades do módulo:
    - Carregar arquivos de configuração em YAML ou JSON
    - Validar requisitos estruturais mínimos (tipo raiz)
    - Resolver a configuração final via deep-merge determinístico
    - Converter o resultado em `RunnerConfig` validado

Invariantes:
    - O arquivo de defaults é obrigatório
    - O resultado de `load_config` é sempre um dicionário puro (`dict`)
    - Overrides nunca mutam os defaults

Limites explícitos:
    - Não interage com Runner ou Steps
    - Não persiste configuração ou hash
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .merge import deep_merge
from .schema import RunnerConfig

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_config(
    *,
    defaults_path: PathLike,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva (defaults + override local).

    Política de resolução:
        - O arquivo de defaults é obrigatório
        - O arquivo local é opcional; se o caminho não existir, é ignorado
        - Quando presente, o local sempre tem prioridade sobre defaults

    Args:
        defaults_path: Caminho para o arquivo de configuração base.
        local_path: Caminho opcional para overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
    """

    defaults = _load_file(Path(defaults_path))

    effective = defaults

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(defaults, _load_file(local_file))
        else:
            logger.debug("config local ausente, usando apenas defaults: %s", local_file)

    logger.debug("config resolvida (hash=%s)", compute_config_hash(effective))
    return effective


def load_runner_config(
    *,
    defaults_path: PathLike,
    local_path: Optional[PathLike] = None,
) -> RunnerConfig:
    """Atalho: `load_config` seguido de `RunnerConfig.from_dict`."""
    return RunnerConfig.from_dict(load_config(defaults_path=defaults_path, local_path=local_path))
