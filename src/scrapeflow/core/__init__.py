# src/scrapeflow/core/__init__.py
"""
Core do scrapeflow.

Este pacote contém o motor de execução de pipelines, independente de
fetchers, sinks e CLI, reunindo as responsabilidades essenciais para
planejamento, execução e retomada de runs.

Componentes principais:
    - config     → resolução de configuração (merge, validação, hashing)
    - pipeline   → protocolo de Step, RunContext e registry
    - engine     → planner (DAG), eventos de ciclo de vida e Runner
    - iteration  → LoopController (loop cadenciado com captura de falhas)

Limites explícitos:
    - Não realiza I/O de rede
    - Não define Steps concretos de coleta
    - Não depende da CLI
"""
