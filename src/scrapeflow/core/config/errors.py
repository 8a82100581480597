# src/scrapeflow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do scrapeflow.

As exceções aqui definidas representam violações estruturais da
configuração (arquivo ausente, formato desconhecido, tipos
incompatíveis, valores fora do domínio), e não erros de execução.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa erro de execução de Step
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração.

    Esta hierarquia permite captura genérica de erros de configuração
    e distinção clara entre falhas estruturais e falhas de execução.
    """


class DefaultsNotFoundError(ConfigError):
    """
    O arquivo de configuração base (defaults) não existe.

    O arquivo de defaults é obrigatório; sem ele não existe
    configuração efetiva válida.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato de arquivo não suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz da configuração não é um dicionário."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"rate_limit": {"requests": 10}}
        - override: {"rate_limit": "fast"}
    """


class InvalidConfigValueError(ConfigError):
    """
    Um valor da configuração está fora do domínio aceito.

    Exemplos:
        - mode diferente de development/production
        - delay negativo
        - max_items <= 0
    """
