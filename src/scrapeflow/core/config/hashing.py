# src/scrapeflow/core/config/hashing.py
"""
Hashing canônico de configuração.

O hash representa a identidade estrutural da configuração efetiva de
uma run e é gravado em `RunContext.metadata["config_hash"]`, permitindo
verificar se uma retomada usa a mesma configuração da run original.

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256
"""


import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva.

    Args:
        config (Dict[str, Any]): Configuração efetiva (dict serializável).

    Returns:
        str: Hash SHA-256 hexadecimal (64 caracteres).

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """

    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
