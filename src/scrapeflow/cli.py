# src/scrapeflow/cli.py
"""
Front-end de linha de comando do scrapeflow.

Comandos:
    scrapeflow run          -p PIPELINE [-m MODE] [--delay S] [--max-items N] [--run-id ID] [--log-dir DIR]
    scrapeflow resume       -p PIPELINE --run-id ID [...] [--start-step STEP]
    scrapeflow retry-failed -p PIPELINE --run-id ID [...]
    scrapeflow status       --run-id ID [--log-dir DIR]

Um pipeline é um arquivo Python ou módulo pontuado que exporta
`pipeline`, `PIPELINE` ou `create_pipeline`:
    - um `PipelineDefinition(config, steps, lifecycle)`
    - um mapa com essas chaves
    - um callable que recebe `PipelineLoadContext(mode, run_id)` e
      devolve um dos anteriores

O progresso de cada Step é persistido por `StepLogLifecycle`, composto
antes do lifecycle do próprio pipeline. O store do CLI persiste em
qualquer modo.

Erros são impressos como `Error: <mensagem>` em stderr (traceback com
`DEBUG=true`) e o código de saída é 1.
"""

from __future__ import annotations

import argparse
import importlib
import importlib.util
import logging
import os
import sys
import time
import traceback
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Union

from scrapeflow import __version__
from scrapeflow.core.config import LogLevel, Mode, RunnerConfig, load_runner_config, parse_mode
from scrapeflow.core.engine import RunOptions, RunResult, Runner, plan_execution
from scrapeflow.core.errors import exception_to_error
from scrapeflow.core.pipeline.step import Step
from scrapeflow.persistence import StepLogLifecycle, StepLogStore

logger = logging.getLogger(__name__)

EXPORT_NAMES = ("pipeline", "PIPELINE", "create_pipeline")


@dataclass(frozen=True)
class PipelineLoadContext:
    mode: Mode
    run_id: str


@dataclass
class PipelineDefinition:
    config: Union[RunnerConfig, Mapping[str, Any], str]
    steps: List[Step]
    lifecycle: Any = None
    runner_config: RunnerConfig = field(init=False)

    def __post_init__(self) -> None:
        if isinstance(self.config, RunnerConfig):
            self.runner_config = self.config
        elif isinstance(self.config, Mapping):
            self.runner_config = RunnerConfig.from_dict(self.config)
        elif isinstance(self.config, (str, os.PathLike)):
            self.runner_config = load_runner_config(defaults_path=self.config)
        else:
            raise TypeError(f"config inválida no pipeline: {type(self.config).__name__}")
        self.steps = list(self.steps)

    def lifecycles(self) -> List[Any]:
        if self.lifecycle is None:
            return []
        if isinstance(self.lifecycle, (list, tuple)):
            return list(self.lifecycle)
        return [self.lifecycle]


# ---------------------------------------------------------------------------
# Pipeline loading
# ---------------------------------------------------------------------------

def _import_target(target: str):
    if target.endswith(".py") or os.path.sep in target or os.path.exists(target):
        path = os.path.abspath(target)
        if not os.path.exists(path):
            raise FileNotFoundError(f"Pipeline file not found: {path}")
        module_name = f"scrapeflow_pipeline_{abs(hash(path))}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot import pipeline file: {path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module
    return importlib.import_module(target)


def load_pipeline(target: str, load_ctx: PipelineLoadContext) -> PipelineDefinition:
    """Importa o módulo do pipeline e normaliza sua definição."""
    module = _import_target(target)

    candidate = None
    for name in EXPORT_NAMES:
        candidate = getattr(module, name, None)
        if candidate is not None:
            break
    if candidate is None:
        raise ValueError(f'Pipeline module "{target}" does not export a valid pipeline definition.')

    if callable(candidate) and not isinstance(candidate, PipelineDefinition):
        candidate = candidate(load_ctx)

    if isinstance(candidate, PipelineDefinition):
        return candidate
    if isinstance(candidate, Mapping) and "config" in candidate and "steps" in candidate:
        return PipelineDefinition(
            config=candidate["config"],
            steps=list(candidate["steps"]),
            lifecycle=candidate.get("lifecycle"),
        )
    raise ValueError(f'Pipeline module "{target}" returned an invalid pipeline definition.')


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def configure_logging(config: RunnerConfig) -> None:
    """Aplica `telemetry` ao logger `scrapeflow`."""
    root = logging.getLogger("scrapeflow")
    telemetry = config.telemetry
    if not telemetry.enabled or telemetry.log_level is LogLevel.SILENT:
        root.setLevel(logging.CRITICAL + 1)
        return
    logging.basicConfig(format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    root.setLevel(logging.DEBUG if telemetry.log_level is LogLevel.DEBUG else logging.INFO)


def _runner_config(args: argparse.Namespace, definition: PipelineDefinition, mode: Mode) -> RunnerConfig:
    config = definition.runner_config
    if getattr(args, "config", None):
        config = load_runner_config(defaults_path=args.config, local_path=args.local_config)
    return config.with_overrides(mode=mode, delay=args.delay, max_items=args.max_items)


def _build(args: argparse.Namespace, run_id: str):
    mode = parse_mode(args.mode)
    definition = load_pipeline(args.pipeline, PipelineLoadContext(mode=mode, run_id=run_id))
    config = _runner_config(args, definition, mode)
    configure_logging(config)

    store = StepLogStore(
        log_dir=args.log_dir,
        run_id=run_id,
        persist_in_production_only=False,
        is_production=config.is_production,
    )
    runner: Runner[Any] = Runner(
        config,
        [StepLogLifecycle(store), *definition.lifecycles()],
        definition.steps,
        run_id_factory=lambda: run_id,
    )
    return definition, config, store, runner


def _options(config: RunnerConfig, start_step_id: Optional[str] = None) -> RunOptions:
    return RunOptions(
        mode=config.mode,
        delay=config.delay,
        max_items=config.max_items,
        start_step_id=start_step_id,
    )


def print_run_summary(result: RunResult) -> None:
    print("Run complete:")
    print(f"  Total steps:     {result.total_steps}")
    print(f"  Completed steps: {', '.join(result.completed_steps) or 'none'}")
    print(f"  Failed steps:    {', '.join(result.failed_steps) or 'none'}")
    print(f"  Started at:      {result.started_at.isoformat() if result.started_at else '-'}")
    print(f"  Finished at:     {result.finished_at.isoformat() if result.finished_at else '-'}")
    print(f"  Duration:        {result.duration_ms / 1000:.2f}s")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_run(args: argparse.Namespace) -> int:
    mode = parse_mode(args.mode)
    run_id = args.run_id or f"{mode.value}-{int(time.time() * 1000)}"
    _, config, _, runner = _build(args, run_id)

    print(f"Starting run with ID: {run_id}")
    result = runner.run(_options(config))
    print_run_summary(result)
    print(f"Run logs stored in {os.path.abspath(args.log_dir)} (run id: {run_id})")
    return 0


def cmd_resume(args: argparse.Namespace) -> int:
    definition, config, store, runner = _build(args, args.run_id)

    records = store.get_all_records()
    if not records:
        print("No logs found for the provided run id. Nothing to resume.")
        return 0

    ordered_ids = [s.id for s in plan_execution(definition.steps)]

    step_id = args.start_step
    if not step_id:
        in_progress = next((r for r in records if r.index > 0), None)
        if in_progress is not None:
            step_id = in_progress.step_id
        elif ordered_ids:
            step_id = ordered_ids[0]
        else:
            raise ValueError("Pipeline has no steps to resume.")

    state = store.resume_state_for(ordered_ids, step_id)

    print(f"Resuming run {args.run_id} from step {state.current_step_id}")
    result = runner.resume(state, _options(config))
    print_run_summary(result)
    return 0


def cmd_retry_failed(args: argparse.Namespace) -> int:
    _, config, store, runner = _build(args, args.run_id)

    failed = [r for r in store.get_all_records() if r.fails]
    if not failed:
        print("No failed steps recorded for this run.")
        return 0

    for record in failed:
        print(f"Retrying step {record.step_id} (previous failures: {', '.join(str(f) for f in record.fails)})")
        runner.run(_options(config, start_step_id=record.step_id))
        store.clear_step(record.step_id)

    print("Retry process finished.")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    store = StepLogStore(log_dir=args.log_dir, run_id=args.run_id, persist_in_production_only=False)
    records = store.get_all_records()
    if not records:
        print("No logs found.")
        return 0

    print(f"Status for run {args.run_id}:")
    for record in records:
        fails = ", ".join(str(f) for f in record.fails) if record.fails else "none"
        print(
            f"- {record.step_id} -> index: {record.index}, fails: {fails}, "
            f"status: {record.status.value}, updated: {record.updated_at}"
        )
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def _add_execution_args(p: argparse.ArgumentParser, *, run_id_required: bool) -> None:
    p.add_argument("-p", "--pipeline", required=True, help="Pipeline file (.py) or dotted module")
    p.add_argument("-m", "--mode", default=Mode.DEVELOPMENT.value, help="development | production")
    p.add_argument("--delay", type=float, default=None, help="Override delay between iterations (seconds)")
    p.add_argument("--max-items", type=int, default=None, help="Override maximum items to process")
    p.add_argument("--run-id", required=run_id_required, default=None, help="Run identifier")
    p.add_argument("--log-dir", default="./logs", help="Directory for step logs")
    p.add_argument("-c", "--config", default=None, help="Config file (YAML/JSON) replacing the pipeline config")
    p.add_argument("--local-config", default=None, help="Optional local override for --config")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scrapeflow", description="scrapeflow pipeline runner")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    p_run = sub.add_parser("run", help="Execute a pipeline from the beginning")
    _add_execution_args(p_run, run_id_required=False)
    p_run.set_defaults(handler=cmd_run)

    p_resume = sub.add_parser("resume", help="Resume a pipeline from the persisted step log")
    _add_execution_args(p_resume, run_id_required=True)
    p_resume.add_argument("--start-step", default=None, help="Explicit step id to resume from")
    p_resume.set_defaults(handler=cmd_resume)

    p_retry = sub.add_parser("retry-failed", help="Re-run every step with recorded failures")
    _add_execution_args(p_retry, run_id_required=True)
    p_retry.set_defaults(handler=cmd_retry_failed)

    p_status = sub.add_parser("status", help="Display step log status for a run")
    p_status.add_argument("--run-id", required=True, help="Run identifier to inspect")
    p_status.add_argument("--log-dir", default="./logs", help="Directory for step logs")
    p_status.set_defaults(handler=cmd_status)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.handler(args)
    except Exception as exc:
        payload = exception_to_error(exc)
        print(f"Error: {payload.message}", file=sys.stderr)
        if os.environ.get("DEBUG", "").lower() == "true":
            traceback.print_exc()
        logger.debug("cli failure: %s", payload.to_dict())
        return 1


if __name__ == "__main__":
    sys.exit(main())
