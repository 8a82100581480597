# tests/conftest.py
"""
Fixtures compartilhados para testes do scrapeflow.

Este módulo define fixtures reutilizáveis que fornecem:
- configuração mínima e determinística (RunnerConfig)
- relógio controlado (datas previsíveis e monotônicas)
- contexto de execução controlado (RunContext)
- Steps dummy para testes estruturais e de execução
- sessão HTTP falsa para testes de fetchers (sem rede)

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Steps dummy utilizam duck typing em vez de herança
    - Respostas HTTP são `requests.Response` reais, preenchidas à mão,
      para que `raise_for_status` e `json()` se comportem como em produção
    - Imports do core são realizados de forma lazy para melhorar a
      clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture acessa a rede
    - Nenhuma fixture escreve fora de `tmp_path`
    - Nenhuma fixture contém lógica de domínio

Este módulo existe como infraestrutura de teste e não
como validação funcional do framework.
"""

from datetime import datetime, timedelta, timezone

import pytest
import requests


# =====================================================
# Relógio e configuração
# =====================================================

class TickingClock:
    """Relógio determinístico: cada chamada avança `step` segundos."""

    def __init__(self, start=None, step=1.0):
        self.current = start or datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc)
        self.step = timedelta(seconds=step)

    def __call__(self):
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def fixed_clock():
    """
    Relógio controlado para Runner e StepLogStore.

    Cada leitura avança um segundo, garantindo `updated_at` estritamente
    crescente e `duration_ms` previsível.
    """
    return TickingClock()


@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de defaults semelhante ao `config.defaults.yaml` de um projeto real.

    Fornecido como string: cada teste decide onde (e se) gravá-lo.
    """
    return """\
mode: development
delay: 1.0
max_items: 100
resume_from_log: true
rate_limit:
  requests: 2
  per_seconds: 1.0
retry:
  attempts: 3
  backoff_strategy: exponential
  base_delay: 0.25
telemetry:
  enabled: true
  log_level: info
seeds:
  - https://defaults.test
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """YAML de override local: apenas as chaves que mudam."""
    return """\
mode: production
delay: 0.25
telemetry:
  log_level: debug
seeds:
  - https://local.test
"""


@pytest.fixture
def runner_config():
    from scrapeflow.core.config.schema import RunnerConfig

    return RunnerConfig(delay=0.0)


@pytest.fixture
def dummy_ctx(runner_config):
    """
    Fixture que fornece um RunContext determinístico para testes.

    - `run_id` e `started_at` são fixos
    - `data` inicia como dict vazio
    - `metadata` carrega apenas a origem do contexto
    """
    from scrapeflow.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        started_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=runner_config,
        metadata={"source": "pytest"},
    )


# =====================================================
# Steps
# =====================================================

@pytest.fixture
def DummyStep():
    """
    Fixture factory que fornece uma implementação mínima e duck-typed de Step.

    A classe retornada:
    - expõe `id` e `depends_on`
    - registra sua execução em `ctx.data["executed"]`
    - falha com a exceção `fail_with`, quando fornecida
    - registra em `events` as notificações de ciclo de vida recebidas

    Returns:
        type: Classe _DummyStep que pode ser instanciada pelos testes.
    """

    class _DummyStep:
        def __init__(self, step_id="collect", depends_on=None, fail_with=None, events=None):
            self.id = step_id
            self.depends_on = list(depends_on or [])
            self.fail_with = fail_with
            self.events = events if events is not None else []

        def run(self, ctx):
            ctx.data.setdefault("executed", []).append(self.id)
            if self.fail_with is not None:
                raise self.fail_with

        def before_step(self, event):
            self.events.append(("step", "before_step", event.step.id))

        def after_step(self, event):
            self.events.append(("step", "after_step", event.step.id))

        def on_error(self, event):
            self.events.append(("step", "on_error", event.step.id))

    return _DummyStep


class RecordingLifecycle:
    """Observador de nível de Runner que registra as notificações recebidas."""

    def __init__(self, events, name="runner"):
        self.events = events
        self.name = name
        self.error_events = []

    def before_step(self, event):
        self.events.append((self.name, "before_step", event.step.id))

    def after_step(self, event):
        self.events.append((self.name, "after_step", event.step.id))

    def on_error(self, event):
        self.error_events.append(event)
        self.events.append((self.name, "on_error", event.step.id))


@pytest.fixture
def recording_lifecycle():
    return RecordingLifecycle


# =====================================================
# HTTP falso
# =====================================================

def make_response(status=200, body="", headers=None, url="https://example.test/", reason=None):
    """Constrói um `requests.Response` real sem tocar a rede."""
    response = requests.Response()
    response.status_code = status
    response._content = body.encode("utf-8") if isinstance(body, str) else body
    response.encoding = "utf-8"
    response.headers.update(headers or {})
    response.url = url
    response.reason = reason or ("OK" if status < 400 else "Error")
    return response


class FakeSession:
    """
    Sessão HTTP falsa: devolve (ou levanta) itens de uma fila, em ordem.

    Cada chamada de `request(**kwargs)` é registrada em `calls`.
    """

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def request(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def http_response():
    return make_response
