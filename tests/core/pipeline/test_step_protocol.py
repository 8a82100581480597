# tests/core/pipeline/test_step_protocol.py
"""
Testes do protocolo de Step do pipeline.

Os testes asseguram que:
- Steps não precisam herdar de uma classe base concreta
- a conformidade é verificada via `typing.Protocol` com
  checagem em tempo de execução (`@runtime_checkable`)
- `PipelineStep` é imutável e normaliza `depends_on` para tupla
"""

import dataclasses

import pytest

try:
    from scrapeflow.core.pipeline.step import PipelineStep, Step
except Exception as e:  # noqa: BLE001
    Step = None
    PipelineStep = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing pipeline core modules. Implement:\n"
            "- src/scrapeflow/core/pipeline/step.py (Step, PipelineStep)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_duck_typed_step_satisfies_protocol(DummyStep):
    _require_imports()
    assert isinstance(DummyStep(step_id="a"), Step)


def test_object_without_run_is_not_a_step():
    _require_imports()

    class NotAStep:
        id = "x"
        depends_on = []

    assert not isinstance(NotAStep(), Step)


def test_pipeline_step_runs_body(dummy_ctx):
    _require_imports()
    step = PipelineStep(id="collect", body=lambda ctx: ctx.data.update(done=True))

    assert isinstance(step, Step)
    step.run(dummy_ctx)
    assert dummy_ctx.data == {"done": True}


def test_pipeline_step_is_immutable_and_normalizes_dependencies():
    _require_imports()
    step = PipelineStep(id="b", body=lambda ctx: None, depends_on=["a"], label="B", description="second")

    assert step.depends_on == ("a",)
    with pytest.raises(dataclasses.FrozenInstanceError):
        step.id = "other"


def test_pipeline_step_hooks_default_to_none():
    _require_imports()
    step = PipelineStep(id="a", body=lambda ctx: None)
    assert step.before_step is None
    assert step.after_step is None
    assert step.on_error is None
